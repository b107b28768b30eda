import pytest

from vcard_importer.decoder import Decoder
from vcard_importer.repository import InMemoryRepository


def make_vcard(*lines: str) -> str:
    """Wrap property lines in BEGIN/END with CRLF line endings."""
    return "\r\n".join(("BEGIN:VCARD", "VERSION:4.0") + lines + ("END:VCARD",)) + "\r\n"


@pytest.fixture
def repository() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def decoder(repository: InMemoryRepository) -> Decoder:
    return Decoder(repository=repository)


@pytest.fixture
def full_vcard() -> str:
    return make_vcard(
        "SOURCE:http://directory.example.com/alice.vcf",
        "KIND:individual",
        "FN:Alice Smith",
        "N:Smith;Alice;Jane,Mary;Dr.;",
        "NICKNAME:Ali,Al",
        "BDAY:1985-03-05",
        "ANNIVERSARY:19960415T123000Z",
        "GENDER:F;she/her",
        "ADR;TYPE=home:;;12 Main St;Springfield;IL;62701;USA",
        "TEL;TYPE=work,voice;PREF=1:+1 650 253 0000",
        "TEL;TYPE=home:+1 650 253 0001",
        "TEL:+1 650 253 0002",
        "EMAIL;TYPE=work:alice@example.com",
        "IMPP;PREF=1:xmpp:alice@example.com",
        "X-SKYPE:alice.smith",
        "LANG;PREF=1:en",
        "TZ:America/Chicago",
        "GEO:geo:39.78,-89.65",
        "TITLE:Engineer",
        "ROLE:Lead",
        "ORG:Example Corp",
        "RELATED;TYPE=spouse:urn:uuid:03a0e51f-d1aa-4385-8a53-e29025acd8af",
        "CATEGORIES:friends,,work",
        "NOTE:Met at the conference\\, 2019",
        "UID:urn:uuid:4fbe8971-0bc3-424c-9c26-36c3e1eff6b1",
        "URL:https://alice.example.com",
        "KEY:https://alice.example.com/key.asc",
        "FBURL:https://alice.example.com/busy",
        "CALURI:https://alice.example.com/calendar",
        "CALADRURI:mailto:alice@example.com",
    )


@pytest.fixture
def vcard():
    return make_vcard
