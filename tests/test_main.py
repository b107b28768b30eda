import json
import logging

import pytest

from vcard_importer.main import decode_blocks, main

CARDS = (
    "BEGIN:VCARD\r\nVERSION:4.0\r\nFN:Alice\r\nTEL;TYPE=work:+31 20 123 4567\r\nEND:VCARD\r\n"
    "BEGIN:VCARD\r\nVERSION:4.0\r\nFN:Bob\r\nTEL;TYPE=work:020 765 4321\r\nN:Bob\r\nEND:VCARD\r\n"
    "BEGIN:VCARD\r\nthis line has no separator\r\nEND:VCARD\r\n"
)


@pytest.fixture(autouse=True)
def workdir(tmp_path, monkeypatch):
    # setup_logger writes its log file under ./logs
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_decode_blocks_shares_vocabulary_across_cards() -> None:
    blocks = [
        "BEGIN:VCARD\nFN:Alice\nTEL;TYPE=work:1\nEND:VCARD",
        "BEGIN:VCARD\nFN:Bob\nTEL;TYPE=work:2\nEND:VCARD",
        "not a vcard",
    ]

    records, stats = decode_blocks(blocks, None, logging.getLogger("vcard_importer"))

    assert records[2] is None
    assert records[0].phones[0].types[0] is records[1].phones[0].types[0]
    assert records[0].kind.value is records[1].kind.value
    assert stats == {
        'total_cards': 3,
        'decoded_cards': 2,
        'failed_cards': 1,
        'total_entities': 6,
        'vocabulary_entries': 2,
        'field_anomalies': 0,
    }


def test_main_writes_summary(workdir) -> None:
    source = workdir / "contacts.vcf"
    source.write_text(CARDS, encoding="utf-8")
    output = workdir / "summary.json"

    main(["-i", str(source), "--phone-region", "nl", "--summary", str(output)])

    data = json.loads(output.read_text(encoding="utf-8"))
    assert data['statistics']['total_cards'] == 3
    assert data['statistics']['decoded_cards'] == 2
    assert data['statistics']['failed_cards'] == 1
    assert data['statistics']['field_anomalies'] == 1
    assert data['cards'][0]['phones'][0]['e164'] == '+31201234567'
    assert data['cards'][1]['phones'][0]['e164'] == '+31207654321'
    assert data['cards'][2] is None
    assert list((workdir / "logs").glob("import_*.log"))


def test_main_missing_file_exits(workdir) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["-i", str(workdir / "missing.vcf")])

    assert exc_info.value.code == 1


def test_main_without_cards_exits(workdir) -> None:
    source = workdir / "empty.vcf"
    source.write_text("no cards here\n", encoding="utf-8")

    with pytest.raises(SystemExit) as exc_info:
        main(["-i", str(source)])

    assert exc_info.value.code == 1


def test_main_exits_when_nothing_decodes(workdir) -> None:
    source = workdir / "broken.vcf"
    source.write_text("BEGIN:VCARD\nbroken\nEND:VCARD\n", encoding="utf-8")

    with pytest.raises(SystemExit) as exc_info:
        main(["-i", str(source)])

    assert exc_info.value.code == 1


def test_main_summary_with_surrogate_escape(workdir) -> None:
    source = workdir / "escaped.vcf"
    source.write_text("BEGIN:VCARD\nVERSION:4.0\nFN:A<U+D800>\nEND:VCARD\n", encoding="utf-8")
    output = workdir / "summary.json"

    main(["-i", str(source), "--summary", str(output)])

    data = json.loads(output.read_text(encoding="utf-8"))
    assert data['cards'][0]['formatted_names'] == ["A\ufffd"]
