"""Heuristic date normalization for feed timestamps.

Layouts are tried in priority order and the first one that consumes the whole
(trimmed) input wins. Strict mode only knows the RFC 822/1123 and RFC 3339
shapes; lenient mode adds the malformed variants seen in the wild and finally
falls back to dateutil with a fixed default date.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import Mapping, Optional, Pattern, Tuple

from dateutil import parser as dateutil_parser

from unifeed.core.errors import UnparseableDateError

logger = logging.getLogger(__name__)

_MONTHS: Mapping[str, int] = MappingProxyType(
    {
        "jan": 1, "january": 1,
        "feb": 2, "february": 2,
        "mar": 3, "march": 3,
        "apr": 4, "april": 4,
        "may": 5,
        "jun": 6, "june": 6,
        "jul": 7, "july": 7,
        "aug": 8, "august": 8,
        "sep": 9, "sept": 9, "september": 9,
        "oct": 10, "october": 10,
        "nov": 11, "november": 11,
        "dec": 12, "december": 12,
    }
)

# RFC 822 zone names, offsets in seconds
RFC822_ZONES: Mapping[str, int] = MappingProxyType(
    {
        "UT": 0, "UTC": 0, "GMT": 0, "Z": 0,
        "EST": -18000, "EDT": -14400,
        "CST": -21600, "CDT": -18000,
        "MST": -25200, "MDT": -21600,
        "PST": -28800, "PDT": -25200,
    }
)

# extra abbreviations accepted in lenient mode
LENIENT_ZONES: Mapping[str, int] = MappingProxyType(
    {
        **RFC822_ZONES,
        "WET": 0, "WEST": 3600, "BST": 3600,
        "CET": 3600, "CEST": 7200, "MET": 3600, "MEST": 7200,
        "EET": 7200, "EEST": 10800, "MSK": 10800,
        "IST": 19800,
        "AKST": -32400, "AKDT": -28800,
        "HST": -36000, "HAST": -36000, "HADT": -32400,
        "AEST": 36000, "AEDT": 39600, "ACST": 34200, "ACDT": 37800, "AWST": 28800,
        "NZST": 43200, "NZDT": 46800,
        "JST": 32400, "KST": 32400, "SGT": 28800, "HKT": 28800,
    }
)

_STRICT_WEEKDAY = r"(?:Mon|Tue|Wed|Thu|Fri|Sat|Sun)"
_STRICT_MONTH = r"(?P<month>Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)"
_TIME = r"(?P<hour>\d{2}):(?P<minute>\d{2})"
_LOOSE_TIME = (
    r"(?P<hour>\d{1,2}):(?P<minute>\d{1,2})"
    r"(?::(?P<second>\d{1,2})(?:[.,](?P<fraction>\d+))?)?"
    r"(?:\s?(?P<ampm>[AaPp]\.?[Mm]\.?))?"
)
_LOOSE_ZONE = r"(?P<zone>[A-Za-z]{1,5}(?:[+-]\d{1,2}(?::?\d{2})?)?|[+-]\d{1,2}(?::?\d{2})?)"


def _compile(*patterns: str, flags: int = 0) -> Tuple[Pattern[str], ...]:
    return tuple(re.compile(p, flags) for p in patterns)


STRICT_LAYOUTS: Tuple[Pattern[str], ...] = _compile(
    # RFC 3339, with and without fractional seconds
    r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})[Tt]" + _TIME + r":(?P<second>\d{2})"
    r"(?:\.(?P<fraction>\d+))?(?P<zone>[Zz]|[+-]\d{2}:\d{2})",
    # RFC 1123 with numeric zone, then named zone
    r"(?:" + _STRICT_WEEKDAY + r", )?(?P<day>\d{2}) " + _STRICT_MONTH + r" (?P<year>\d{4}) "
    + _TIME + r":(?P<second>\d{2}) (?P<zone>[+-]\d{4})",
    r"(?:" + _STRICT_WEEKDAY + r", )?(?P<day>\d{2}) " + _STRICT_MONTH + r" (?P<year>\d{4}) "
    + _TIME + r":(?P<second>\d{2}) (?P<zone>UT|UTC|GMT|EST|EDT|CST|CDT|MST|MDT|PST|PDT|Z)",
    # RFC 822: optional seconds, one or two digit day, two or four digit year
    r"(?:" + _STRICT_WEEKDAY + r", )?(?P<day>\d{1,2}) " + _STRICT_MONTH + r" (?P<year>\d{2}|\d{4}) "
    + _TIME + r"(?::(?P<second>\d{2}))? (?P<zone>[+-]\d{4}|UT|UTC|GMT|EST|EDT|CST|CDT|MST|MDT|PST|PDT|Z)",
)

LENIENT_LAYOUTS: Tuple[Pattern[str], ...] = _compile(
    # ISO 8601 variants: space separator, missing seconds or zone, zone without colon, date only
    r"(?P<year>\d{4})-(?P<month>\d{1,2})-(?P<day>\d{1,2})"
    r"(?:[Tt ]" + _LOOSE_TIME + r"\s?" + _LOOSE_ZONE + r"?)?",
    # ISO 8601 basic format
    r"(?P<year>\d{4})(?P<month>\d{2})(?P<day>\d{2})(?:[Tt](?P<hour>\d{2})(?P<minute>\d{2})(?P<second>\d{2})"
    r"(?P<zone>[Zz]|[+-]\d{4})?)?",
    # slashed dates, year first
    r"(?P<year>\d{4})/(?P<month>\d{1,2})/(?P<day>\d{1,2})(?:[Tt ]" + _LOOSE_TIME + r"\s?" + _LOOSE_ZONE + r"?)?",
    # RFC 822 shaped: any weekday word, day before month, loose separators, optional time and zone
    r"(?:(?P<weekday>[A-Za-z]+)\.?,?\s)?(?P<day>\d{1,2})(?:st|nd|rd|th)?[\s-](?P<month>[A-Za-z]+)\.?,?[\s-]"
    r"(?P<year>\d{4}|\d{2})(?:,?\s" + _LOOSE_TIME + r"(?:\s?" + _LOOSE_ZONE + r")?)?",
    # US shaped: month before day
    r"(?:(?P<weekday>[A-Za-z]+)\.?,?\s)?(?P<month>[A-Za-z]+)\.?\s(?P<day>\d{1,2})(?:st|nd|rd|th)?,?\s"
    r"(?P<year>\d{4})(?:,?\s(?:at\s)?" + _LOOSE_TIME + r"(?:\s?" + _LOOSE_ZONE + r")?)?",
    flags=re.IGNORECASE,
)

# fixed default for the dateutil fallback, so missing fields never depend on "now"
_FALLBACK_DEFAULT = datetime(1970, 1, 1)

_WHITESPACE_RE = re.compile(r"\s+")
_TRAILING_COMMENT_RE = re.compile(r"\s*\([^()]*\)$")
_NUMERIC_ZONE_RE = re.compile(r"([+-])(\d{1,2})(?::?(\d{2}))?$")
_PLAUSIBLE_RE = re.compile(r"\d{4}|[A-Za-z]{3}")


def _zone_offset(zone: Optional[str], lenient: bool) -> Optional[int]:
    """Zone text -> offset seconds; None when the zone is not acceptable."""
    if not zone:
        return 0
    zone = zone.strip()
    upper = zone.upper()
    names = LENIENT_ZONES if lenient else RFC822_ZONES
    if upper in names:
        return names[upper]
    offset = 0
    name_part = upper.rstrip("0123456789:+-")
    if name_part:
        if name_part not in names and not lenient:
            return None
        # an unknown abbreviation counts as UTC in lenient mode
        offset = names.get(name_part, 0)
        zone = zone[len(name_part):]
        if not zone:
            return offset
    m = _NUMERIC_ZONE_RE.match(zone)
    if not m:
        return None
    seconds = int(m.group(2)) * 3600 + int(m.group(3) or 0) * 60
    if m.group(1) == "-":
        seconds = -seconds
    seconds += offset
    if abs(seconds) >= 86400:
        return None
    return seconds


def _year(raw: str) -> int:
    year = int(raw)
    if len(raw) == 2:
        year += 1900 if year >= 69 else 2000
    return year


def _build(m: re.Match, lenient: bool) -> Optional[datetime]:
    parts = m.groupdict()
    month_raw = parts["month"]
    if month_raw.isdigit():
        month = int(month_raw)
    else:
        month = _MONTHS.get(month_raw.lower())
        if month is None:
            return None
    weekday = parts.get("weekday")
    if weekday and weekday.lower()[:3] in _MONTHS:
        return None
    offset = _zone_offset(parts.get("zone"), lenient)
    if offset is None:
        return None
    hour = int(parts.get("hour") or 0)
    minute = int(parts.get("minute") or 0)
    second = int(parts.get("second") or 0)
    ampm = (parts.get("ampm") or "").lower().replace(".", "")
    if ampm:
        if not 1 <= hour <= 12:
            return None
        hour = hour % 12 + (12 if ampm == "pm" else 0)
    fraction = parts.get("fraction") or ""
    microsecond = int(fraction[:6].ljust(6, "0")) if fraction else 0
    rollover = timedelta(0)
    if lenient and hour == 24 and minute == 0 and second == 0:
        hour = 0
        rollover = timedelta(days=1)
    try:
        value = datetime(
            _year(parts["year"]), month, int(parts["day"]), hour, minute, second, microsecond,
            tzinfo=timezone(timedelta(seconds=offset)),
        )
    except ValueError:
        return None
    return value + rollover


def _normalize(raw: str) -> str:
    text = _WHITESPACE_RE.sub(" ", raw)
    text = _TRAILING_COMMENT_RE.sub("", text)
    return text.strip(" ,")


def _dateutil_fallback(text: str) -> Optional[datetime]:
    if not _PLAUSIBLE_RE.search(text) or not any(c.isdigit() for c in text):
        return None
    try:
        value = dateutil_parser.parse(text, default=_FALLBACK_DEFAULT, tzinfos=dict(LENIENT_ZONES))
        # dateutil accepts offsets datetime cannot represent; utcoffset() rejects them
        value.utcoffset()
    except (ValueError, TypeError, OverflowError):
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def parse_date(raw: str, lenient: bool = True) -> datetime:
    """Parse a feed date into a timezone-aware datetime.

    Raises UnparseableDateError when no layout matches.
    """
    text = (raw or "").strip()
    if not text:
        raise UnparseableDateError(raw or "")

    for layout in STRICT_LAYOUTS:
        m = layout.fullmatch(text)
        if m:
            value = _build(m, lenient=False)
            if value is not None:
                return value

    if lenient:
        normalized = _normalize(text)
        for layout in LENIENT_LAYOUTS:
            m = layout.fullmatch(normalized)
            if m:
                value = _build(m, lenient=True)
                if value is not None:
                    return value
        value = _dateutil_fallback(normalized)
        if value is not None:
            return value

    logger.debug("unparseable date %r (lenient=%s)", raw, lenient)
    raise UnparseableDateError(raw)


def try_parse_date(raw: Optional[str], lenient: bool = True) -> Optional[datetime]:
    if not raw:
        return None
    try:
        return parse_date(raw, lenient=lenient)
    except UnparseableDateError:
        return None
