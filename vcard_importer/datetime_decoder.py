"""
Partial and full date-time resolution for BDAY / ANNIVERSARY values.

Accepts the ISO 8601 basic and extended forms used by vCard, including
the truncated ones (``--0412``, ``---12``, ``T-2200``), and resolves an
absolute timestamp only when every component, timezone included, is known.

Dependencies:
    - python-dateutil: Timezone objects for UTC offsets and zone names
    - calendar: Standard library for month lengths
    - re: Standard library for the component grammar
"""

import calendar
import logging
import re
from datetime import datetime, timezone as dt_timezone
from typing import Any, Dict, Optional

from dateutil import tz

from vcard_importer.models import DateTimeFormat, DateTimeText

logger = logging.getLogger("vcard_importer")

COMPONENTS = ("year", "month", "day", "hour", "minute", "second", "timezone")

_DATE_PATTERNS = [
    re.compile(r"(?P<year>\d{4})-?(?P<month>\d{2})-?(?P<day>\d{2})"),
    re.compile(r"(?P<year>\d{4})-(?P<month>\d{2})"),
    re.compile(r"(?P<year>\d{4})"),
    re.compile(r"--(?P<month>\d{2})-?(?P<day>\d{2})"),
    re.compile(r"--(?P<month>\d{2})"),
    re.compile(r"---(?P<day>\d{2})"),
]

_ZONE = r"(?P<timezone>Z|z|[+-]\d{2}(?::?\d{2})?)?"
_FRACTION = r"(?:[.,]\d+)?"

_TIME_PATTERNS = [
    re.compile(r"(?P<hour>\d{2}):?(?P<minute>\d{2}):?(?P<second>\d{2})" + _FRACTION + _ZONE),
    re.compile(r"(?P<hour>\d{2}):?(?P<minute>\d{2})" + _ZONE),
    re.compile(r"(?P<hour>\d{2})" + _ZONE),
    re.compile(r"-(?P<minute>\d{2}):?(?P<second>\d{2})" + _ZONE),
    re.compile(r"-(?P<minute>\d{2})" + _ZONE),
    re.compile(r"--(?P<second>\d{2})" + _ZONE),
]

_OFFSET_RE = re.compile(r"([+-])(\d{2}):?(\d{2})?")

_LIMITS = {
    "month": (1, 12),
    "day": (1, 31),
    "hour": (0, 23),
    "minute": (0, 59),
    "second": (0, 60),
}


def _empty_components() -> Dict[str, Any]:
    return {name: None for name in COMPONENTS}


def _normalize_zone(zone: str) -> Optional[str]:
    """Canonical ``Z`` / ``+HH:MM`` form, or None if out of range."""
    if zone in ("Z", "z"):
        return "Z"
    match = _OFFSET_RE.fullmatch(zone)
    if not match:
        return None
    sign, hours, minutes = match.group(1), int(match.group(2)), int(match.group(3) or 0)
    if hours > 23 or minutes > 59:
        return None
    return f"{sign}{hours:02d}:{minutes:02d}"


def _days_in_month(year: Optional[int], month: int) -> int:
    if year is None or year < 1:
        # unknown year: allow Feb 29
        return 29 if month == 2 else calendar.monthrange(2001, month)[1]
    return calendar.monthrange(year, month)[1]


def _match_any(patterns, text: str) -> Optional[Dict[str, Optional[str]]]:
    for pattern in patterns:
        match = pattern.fullmatch(text)
        if match:
            return match.groupdict()
    return None


def parse_components(text: str) -> Dict[str, Any]:
    """
    Split a date-time string into its components.

    :param text: Date, time, or date-time text (``1985-03-05``,
                 ``--0412``, ``T102200Z``, ``19961022T140000-05``, ...)
    :return: Dict with keys year, month, day, hour, minute, second
             (int or None) and timezone (``Z``/``+HH:MM`` or None).
             Malformed input yields all None.
    """
    components = _empty_components()
    text = (text or "").strip()
    if not text:
        return components

    date_part, sep, time_part = text.partition("T")
    if sep and not time_part:
        logger.debug(f"Date-time {text!r} has an empty time part")
        return components

    found: Dict[str, Optional[str]] = {}
    if date_part:
        date_fields = _match_any(_DATE_PATTERNS, date_part)
        if date_fields is None:
            logger.debug(f"Unrecognized date {date_part!r}")
            return components
        found.update(date_fields)
    if time_part:
        time_fields = _match_any(_TIME_PATTERNS, time_part)
        if time_fields is None:
            logger.debug(f"Unrecognized time {time_part!r}")
            return components
        found.update(time_fields)

    for name in COMPONENTS[:-1]:
        raw = found.get(name)
        if raw is None:
            continue
        number = int(raw)
        low, high = _LIMITS.get(name, (0, 9999))
        if not low <= number <= high:
            logger.debug(f"Date-time {text!r}: {name} {number} out of range")
            return _empty_components()
        components[name] = number

    if components["month"] is not None and components["day"] is not None:
        if components["day"] > _days_in_month(components["year"], components["month"]):
            logger.debug(f"Date-time {text!r}: no such day")
            return _empty_components()

    zone = found.get("timezone")
    if zone:
        components["timezone"] = _normalize_zone(zone)
        if components["timezone"] is None:
            logger.debug(f"Date-time {text!r}: bad UTC offset {zone!r}")
            return _empty_components()

    return components


def _tzinfo(zone: str):
    if zone == "Z":
        return tz.tzutc()
    match = _OFFSET_RE.fullmatch(zone)
    if match:
        sign = -1 if match.group(1) == "-" else 1
        seconds = sign * (int(match.group(2)) * 3600 + int(match.group(3) or 0) * 60)
        return tz.tzoffset(None, seconds)
    return tz.gettz(zone)


def resolve_timestamp(components: Dict[str, Any]) -> Optional[int]:
    """
    Absolute UNIX timestamp for fully known components.

    :param components: Output of :func:`parse_components`; timezone may
                       also be an IANA zone name
    :return: Seconds since the epoch, or None if any component is unknown
             or the combination does not exist
    """
    if any(components.get(name) is None for name in COMPONENTS):
        return None

    tzinfo = _tzinfo(components["timezone"])
    if tzinfo is None:
        return None

    try:
        moment = datetime(
            components["year"], components["month"], components["day"],
            components["hour"], components["minute"], components["second"],
            tzinfo=tzinfo
        )
    except (ValueError, OverflowError):
        return None
    return int(moment.timestamp())


def decode_date_time(text: str) -> DateTimeText:
    """
    Build a FULL or PARTIAL DateTimeText from date-time text.

    :param text: Raw date-time value
    :return: DateTimeText; never raises on malformed input
    """
    components = parse_components(text)
    timestamp = resolve_timestamp(components)

    date_time = DateTimeText(**components)
    if timestamp is None:
        date_time.format = DateTimeFormat.PARTIAL
    else:
        date_time.format = DateTimeFormat.FULL
        date_time.value = datetime.fromtimestamp(timestamp, tz=dt_timezone.utc)
    return date_time


def text_date_time(text: str) -> DateTimeText:
    """DateTimeText for a ``VALUE=text`` property, kept verbatim."""
    return DateTimeText(format=DateTimeFormat.TEXT, text_value=text)
