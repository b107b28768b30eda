"""
vCard tokenizer adapter built on vobject.

vobject's line reader and content-line parser handle unfolding,
quoted-printable and parameter lists. Its vCard behaviors are not
applied, so property values reach the decoder in their raw, still-escaped
form; splitting on structural separators and unescaping happen here.
"""

import io
import logging
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Optional

from vobject.base import ContentLine, ParseError, getLogicalLines, textLineToContentLine

logger = logging.getLogger("vcard_importer")

_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)

# parameters that never appear bare; anything else without a value is a
# vCard 2.1 style type (TEL;WORK;VOICE:...)
KNOWN_PARAMETERS = {
    'ALTID', 'CALSCALE', 'CHARSET', 'ENCODING', 'GEO', 'LABEL', 'LANGUAGE',
    'MEDIATYPE', 'PID', 'PREF', 'SORT-AS', 'TYPE', 'TZ', 'VALUE',
}


class CardParseError(ValueError):
    """Raised when a vCard document cannot be tokenized."""


def unescape_text(value: str) -> str:
    r"""
    Undo vCard text escaping.

    ``\n`` and ``\N`` become line breaks, any other escaped character
    (``\,``, ``\;``, ``\\``) stands for itself.
    """
    return _ESCAPE_RE.sub(
        lambda m: "\n" if m.group(1) in ("n", "N") else m.group(1),
        value
    )


def split_escaped(
    value: str,
    separator: str,
    maxsplit: int = -1,
    unescape: bool = True
) -> List[str]:
    """
    Split a raw property value on unescaped separators.

    Args:
        value: Raw (escaped) property value
        separator: Single separator character, ``;`` or ``,``
        maxsplit: Maximum number of splits, -1 for no limit
        unescape: Whether to unescape each resulting piece

    Returns:
        List of pieces; always at least one (possibly empty) element
    """
    pieces = []
    current = []
    escaped = False
    for char in value:
        if escaped:
            current.append(char)
            escaped = False
        elif char == "\\":
            current.append(char)
            escaped = True
        elif char == separator and (maxsplit < 0 or len(pieces) < maxsplit):
            pieces.append("".join(current))
            current = []
        else:
            current.append(char)
    pieces.append("".join(current))

    if unescape:
        return [unescape_text(piece) for piece in pieces]
    return pieces


@dataclass
class PropertyOccurrence:
    """One occurrence of a named property."""

    name: str
    value: str
    params: Dict[str, List[str]] = field(default_factory=dict)
    group: Optional[str] = None

    @classmethod
    def from_content_line(cls, line: ContentLine) -> "PropertyOccurrence":
        params: Dict[str, List[str]] = {}
        bare_types: List[str] = list(getattr(line, "singletonparams", None) or [])
        for name, values in line.params.items():
            name = name.upper()
            if name not in KNOWN_PARAMETERS and not any(values):
                bare_types.append(name)
            else:
                params[name] = list(values)
        if bare_types:
            params.setdefault("TYPE", []).extend(bare_types)
        return cls(
            name=line.name.upper(),
            value=line.value if isinstance(line.value, str) else str(line.value),
            params=params,
            group=line.group,
        )

    def param(self, name: str) -> str:
        """Parameter value as a string, multiple values comma-joined."""
        return ",".join(self.params.get(name.upper(), []))

    def param_values(self, name: str) -> List[str]:
        return list(self.params.get(name.upper(), []))

    def with_param(self, name: str, values: List[str]) -> "PropertyOccurrence":
        params = dict(self.params)
        params[name.upper()] = list(values)
        return replace(self, params=params)

    @property
    def text(self) -> str:
        """Unescaped value."""
        return unescape_text(self.value)


class Card:
    """
    Named, possibly repeating properties of one parsed vCard.
    """

    def __init__(
        self,
        properties: Dict[str, List[PropertyOccurrence]],
        skipped: Optional[List[str]] = None
    ):
        # lines dropped because their value could not be decoded
        self.skipped = list(skipped or [])
        self._properties = {
            name.upper(): list(occurrences)
            for name, occurrences in properties.items()
            if occurrences
        }

    def get(self, name: str) -> List[PropertyOccurrence]:
        """
        All occurrences of a property, in encounter order.

        Args:
            name: Property name, case-insensitive

        Returns:
            List of occurrences, empty if the property is absent
        """
        return list(self._properties.get(name.upper(), []))

    def first(self, name: str) -> Optional[PropertyOccurrence]:
        occurrences = self._properties.get(name.upper())
        return occurrences[0] if occurrences else None

    def __contains__(self, name: str) -> bool:
        return name.upper() in self._properties


def parse_card(text: str) -> Card:
    """
    Tokenize one vCard document.

    Properties of nested components (vCard 2.1 AGENT) are skipped, as is
    anything after the closing END:VCARD. Lines whose quoted-printable
    value cannot be decoded are dropped and listed in ``Card.skipped``.

    Args:
        text: Normalized vCard text

    Returns:
        Parsed Card

    Raises:
        CardParseError: If the text is empty, malformed, or not a VCARD
    """
    if not text.strip():
        raise CardParseError("Empty vCard source")

    properties: Dict[str, List[PropertyOccurrence]] = {}
    skipped: List[str] = []
    depth = 0
    try:
        for line, line_number in getLogicalLines(io.StringIO(text)):
            try:
                content_line = textLineToContentLine(line, line_number)
            except (LookupError, UnicodeDecodeError) as e:
                # quoted-printable value in an unknown or mismatched CHARSET
                logger.debug(f"Line {line_number}: undecodable value skipped: {e}")
                skipped.append(f"Line {line_number}: {e}")
                continue
            name = content_line.name.upper()
            marker = content_line.value.strip().upper() if name in ('BEGIN', 'END') else ''

            if depth == 0:
                if name != 'BEGIN' or marker != 'VCARD':
                    raise CardParseError(f"Line {line_number}: expected BEGIN:VCARD")
                depth = 1
            elif name == 'BEGIN':
                depth += 1
            elif name == 'END':
                if depth == 1 and marker != 'VCARD':
                    raise CardParseError(f"Line {line_number}: unexpected END:{marker}")
                depth -= 1
                if depth == 0:
                    return Card(properties, skipped)
            elif depth == 1:
                properties.setdefault(name, []).append(
                    PropertyOccurrence.from_content_line(content_line)
                )
    except ParseError as e:
        raise CardParseError(f"Malformed vCard: {e}") from e

    raise CardParseError("vCard was never closed")


def split_vcard_blocks(content: str) -> List[str]:
    """
    Split vCard content into individual vCard blocks.

    Args:
        content: Full vCard file content

    Returns:
        List of individual vCard block strings
    """
    blocks = []
    current_block = []
    in_block = False

    lines = content.replace('\r\n', '\n').split('\n')

    for line in lines:
        line_upper = line.strip().upper()

        if line_upper.startswith('BEGIN:VCARD'):
            # unterminated previous block is kept as-is and fails at parse time
            if in_block and current_block:
                blocks.append('\n'.join(current_block))
            current_block = [line.lstrip()]
            in_block = True
        elif in_block:
            current_block.append(line)
            if line_upper.startswith('END:VCARD'):
                blocks.append('\n'.join(current_block))
                current_block = []
                in_block = False

    if in_block and current_block:
        blocks.append('\n'.join(current_block))

    return blocks


def read_vcard_blocks(file_path: Path) -> List[str]:
    """
    Read a .vcf file and split it into vCard blocks.

    Args:
        file_path: Path to the .vcf file

    Returns:
        List of vCard block strings

    Raises:
        FileNotFoundError: If the file doesn't exist
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Input file not found: {file_path}")

    try:
        content = file_path.read_text(encoding='utf-8')
    except UnicodeDecodeError:
        logger.warning(f"{file_path} is not valid UTF-8, undecodable bytes dropped")
        content = file_path.read_bytes().decode('utf-8', errors='ignore')

    blocks = split_vcard_blocks(content)
    logger.info(f"Split file into {len(blocks)} vCard blocks")
    return blocks
