"""
Phone number normalization to E.164 for decoded Phone records.

The raw TEL value is never altered; the E.164 form is stored alongside it
in ``Phone.e164`` when the decoder is given a default region.

Dependencies:
    - phonenumbers: Third-party library for phone number parsing and formatting
    - typing: Standard library for type hints
    - logging: Standard library for logging
"""
# pylint: disable=logging-fstring-interpolation

import logging
from typing import List, Optional, Tuple

import phonenumbers
from phonenumbers import NumberParseException

from vcard_importer.models import Phone

logger = logging.getLogger("vcard_importer")

TEL_URI_PREFIX = "tel:"


def validate_region_code(region_code: str) -> bool:
    """
    Validate that a region code is a valid 2-letter country code.

    :param region_code: Region code to validate
    :return: True if valid, False otherwise
    """
    if not region_code or len(region_code) != 2:
        return False

    if not region_code.isalpha() or not region_code.isupper():
        return False

    return region_code in phonenumbers.SUPPORTED_REGIONS


def _parse_and_format_phone(
    phone_number: str,
    region: Optional[str]
) -> Optional[str]:
    """
    Parse and format a phone number to E.164 format.

    :param phone_number: Phone number string to parse
    :param region: Region code for parsing (None for international format)
    :return: Normalized phone number in E.164 format, or None if invalid
    """
    try:
        parsed = phonenumbers.parse(phone_number, region)
        if phonenumbers.is_valid_number(parsed):
            return phonenumbers.format_number(
                parsed,
                phonenumbers.PhoneNumberFormat.E164
            )
    except NumberParseException:
        pass
    return None


def normalize_phone_to_e164(
    phone_number: str,
    default_region: Optional[str]
) -> Optional[str]:
    """
    Normalize a phone number to E.164 international format.

    ``tel:`` URIs (vCard 4) are accepted; URI parameters such as
    ``;ext=`` are ignored.

    :param phone_number: Original TEL value
    :param default_region: Region used for numbers without a country code
    :return: Normalized phone number in E.164 format, or None if invalid
    """
    if not phone_number or not phone_number.strip():
        return None

    phone_number = phone_number.strip()
    if phone_number.lower().startswith(TEL_URI_PREFIX):
        phone_number = phone_number[len(TEL_URI_PREFIX):].split(';', 1)[0]

    normalized = _parse_and_format_phone(phone_number, default_region)
    if normalized:
        return normalized

    if phone_number.startswith('+'):
        normalized = _parse_and_format_phone(phone_number, None)
        if normalized:
            return normalized

    logger.debug(f"Could not normalize phone number: {phone_number}")
    return None


def annotate_phones(
    phones: List[Phone],
    default_region: str
) -> Tuple[int, int]:
    """
    Fill in ``e164`` on each phone that can be normalized.

    :param phones: Decoded Phone records
    :param default_region: Region code for parsing
    :return: Tuple of (normalized count, failed count)
    """
    normalized_count = 0
    failed_count = 0
    for phone in phones:
        phone.e164 = normalize_phone_to_e164(phone.value, default_region)
        if phone.e164:
            normalized_count += 1
        else:
            failed_count += 1
    return normalized_count, failed_count
