"""
Source text cleanup applied before tokenization.
"""

import re

BEGIN_MARKER = "BEGIN:VCARD"
REPLACEMENT_CHARACTER = "\ufffd"

_UNICODE_ESCAPE_RE = re.compile(r"<[uU]\+([0-9A-Fa-f]{4})>")
_INDENTED_LINE_RE = re.compile(r"\n\s+")


def _code_point(match) -> str:
    code = int(match.group(1), 16)
    # lone surrogates cannot be encoded
    if 0xD800 <= code <= 0xDFFF:
        return REPLACEMENT_CHARACTER
    return chr(code)


def normalize_source(text: str) -> str:
    """
    Normalize raw vCard text for parsing.

    :param text: Raw vCard source
    :return: Normalized text, or an empty string if ``text`` does not
             start with BEGIN:VCARD
    """
    # case-insensitive: exporters write begin:vcard as well
    if text[:len(BEGIN_MARKER)].upper() != BEGIN_MARKER:
        return ""

    # <U+00e9> -> é
    text = _UNICODE_ESCAPE_RE.sub(_code_point, text)

    # a newline followed by any run of whitespace becomes a single fold
    return _INDENTED_LINE_RE.sub("\n ", text)
