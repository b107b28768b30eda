import pytest

from vcard_importer.models import Phone
from vcard_importer.phone_normalizer import (
    annotate_phones,
    normalize_phone_to_e164,
    validate_region_code,
)


@pytest.mark.parametrize("region, valid", [
    ("NL", True),
    ("US", True),
    ("nl", False),
    ("XX", False),
    ("USA", False),
    ("", False),
])
def test_validate_region_code(region, valid) -> None:
    assert validate_region_code(region) is valid


def test_national_number_uses_default_region() -> None:
    assert normalize_phone_to_e164("0646432757", "NL") == "+31646432757"


def test_international_number_ignores_default_region() -> None:
    assert normalize_phone_to_e164("+31 6 46432757", "US") == "+31646432757"


def test_tel_uri_is_accepted() -> None:
    assert normalize_phone_to_e164("tel:+1-650-253-0000;ext=123", "US") == "+16502530000"


@pytest.mark.parametrize("value", ["", "   ", "not a number", "12"])
def test_invalid_numbers(value) -> None:
    assert normalize_phone_to_e164(value, "NL") is None


def test_annotate_phones_keeps_raw_value() -> None:
    phones = [Phone(value="0646432757"), Phone(value="unknown")]

    normalized, failed = annotate_phones(phones, "NL")

    assert (normalized, failed) == (1, 1)
    assert phones[0].value == "0646432757"
    assert phones[0].e164 == "+31646432757"
    assert phones[1].e164 is None
