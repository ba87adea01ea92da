"""Publication date normalization for RSS items.

RSS feeds in the wild mix RFC-822/1123 dates with numeric offsets, zone
abbreviations, one-digit days and the occasional RFC-3339 timestamp. This
module tries a fixed, ordered list of grammars and returns the first
successful parse. When nothing matches it silently falls back to the current
time so a single bad item never breaks a calendar.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Optional

from dateutil import parser as date_parser

from ..core.timezone_utils import now_utc

logger = logging.getLogger(__name__)

# RFC-822 zone names with fixed offsets (hours from UTC)
_NAMED_ZONE_OFFSETS: dict[str, int] = {
    "UT": 0,
    "UTC": 0,
    "GMT": 0,
    "Z": 0,
    "EST": -5,
    "EDT": -4,
    "CST": -6,
    "CDT": -5,
    "MST": -7,
    "MDT": -6,
    "PST": -8,
    "PDT": -7,
}

_RFC1123_NUMERIC_ZONE = "%a, %d %b %Y %H:%M:%S %z"
_RFC1123_BODY = "%a, %d %b %Y %H:%M:%S"

# Two-digit day followed by the rest; used to tell "02 Jan" from "2 Jan"
_TWO_DIGIT_DAY = re.compile(r"^\w{3}, \d{2} ")
_ONE_DIGIT_DAY = re.compile(r"^\w{3}, \d ")
_ZONE_ABBREVIATION = re.compile(r"^(?P<body>.+) (?P<zone>[A-Za-z]{1,5})$")
_RFC3339_SHAPE = re.compile(r"^\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})$")


def _parse_numeric_zone(raw: str) -> datetime:
    return datetime.strptime(raw, _RFC1123_NUMERIC_ZONE)


def _parse_named_zone(raw: str) -> datetime:
    match = _ZONE_ABBREVIATION.match(raw)
    if match is None:
        raise ValueError(f"no zone abbreviation in {raw!r}")
    naive = datetime.strptime(match.group("body"), _RFC1123_BODY)
    # Unknown abbreviations are read with a zero offset
    hours = _NAMED_ZONE_OFFSETS.get(match.group("zone").upper(), 0)
    return naive.replace(tzinfo=timezone(timedelta(hours=hours)))


def _require(pattern: re.Pattern[str], parse: Callable[[str], datetime]) -> Callable[[str], datetime]:
    """Restrict a parser to inputs whose day field matches pattern."""

    def _parse(raw: str) -> datetime:
        if not pattern.match(raw):
            raise ValueError(f"day field does not match {pattern.pattern}")
        return parse(raw)

    return _parse


def _parse_rfc3339(raw: str) -> datetime:
    # isoparse also takes basic and reduced-precision forms
    if not _RFC3339_SHAPE.match(raw):
        raise ValueError(f"not an RFC 3339 timestamp: {raw!r}")
    return date_parser.isoparse(raw)


# Ordered grammar list: first successful parse wins
DATE_GRAMMARS: tuple[tuple[str, Callable[[str], datetime]], ...] = (
    ("rfc1123z", _require(_TWO_DIGIT_DAY, _parse_numeric_zone)),
    ("rfc1123", _require(_TWO_DIGIT_DAY, _parse_named_zone)),
    ("rfc1123z-short-day", _require(_ONE_DIGIT_DAY, _parse_numeric_zone)),
    ("rfc1123-short-day", _require(_ONE_DIGIT_DAY, _parse_named_zone)),
    ("rfc3339", _parse_rfc3339),
)


def try_parse_pub_date(raw: str) -> Optional[datetime]:
    """Parse raw against the known grammars.

    Args:
        raw: Textual timestamp from an RSS <pubDate> element

    Returns:
        Timezone-aware datetime, or None if no grammar matched
    """
    text = raw.strip()
    if not text:
        return None

    for name, parse in DATE_GRAMMARS:
        try:
            parsed = parse(text)
        except (ValueError, OverflowError):
            continue
        logger.debug("Parsed date %r with grammar %s", text, name)
        return parsed

    return None


def normalize_pub_date(raw: str) -> datetime:
    """Convert a textual timestamp into a timezone-aware instant.

    Never raises. Unrecognized input yields the current UTC time, and the
    caller cannot tell a defaulted value from a parsed one.

    Examples:
        >>> normalize_pub_date("Mon, 27 Jul 2025 12:00:00 GMT").isoformat()
        '2025-07-27T12:00:00+00:00'
        >>> normalize_pub_date("Mon, 27 Jul 2025 12:00:00 -0700").utcoffset()
        datetime.timedelta(days=-1, seconds=61200)
    """
    parsed = try_parse_pub_date(raw or "")
    if parsed is not None:
        return parsed

    logger.debug("Unrecognized date %r; using current time", raw)
    return now_utc()
