"""Map a decoded Feed onto an iCalendar document.

Each feed item becomes one VEVENT, in feed order. Item fields are copied
verbatim; the start time comes from the item's pubDate and every event lasts
exactly one hour. Building never fails on bad content: unparseable dates fall
back to the current time and an empty guid is replaced by a synthesized UID.
"""

from __future__ import annotations

import hashlib
import logging
from datetime import UTC, datetime, timedelta

from icalendar import Calendar, Event

from ..core.timezone_utils import now_utc
from ..feed.date_utils import normalize_pub_date
from ..feed.feed_models import Feed, FeedItem

logger = logging.getLogger(__name__)

PRODUCT_ID = "-//RSS2ICal//EN"
EVENT_DURATION = timedelta(hours=1)
SYNTHETIC_UID_DOMAIN = "rss2ical"


def synthesize_uid(item: FeedItem) -> str:
    """Build a stable UID for an item that has no guid.

    The same link/title/pubDate always yields the same UID so re-fetches do
    not create duplicate events in subscribed clients.
    """
    seed = "|".join((item.link, item.title, item.published_at))
    digest = hashlib.sha1(seed.encode("utf-8"), usedforsecurity=False).hexdigest()
    return f"{digest}@{SYNTHETIC_UID_DOMAIN}"


def event_uid(item: FeedItem) -> str:
    """Return the item's guid, or a synthesized UID when it is empty."""
    if item.guid:
        return item.guid

    uid = synthesize_uid(item)
    logger.warning("Feed item %r has no guid; using synthesized UID %s", item.title, uid)
    return uid


def _event_window(item: FeedItem) -> tuple[datetime, datetime]:
    """Return (start, end) in UTC; dates that cannot be shifted fall back to now."""
    try:
        start = normalize_pub_date(item.published_at).astimezone(UTC)
        return start, start + EVENT_DURATION
    except OverflowError:
        logger.warning("Date %r for item %r is out of range; using current time", item.published_at, item.title)
        start = now_utc()
        return start, start + EVENT_DURATION


def _build_event(item: FeedItem) -> Event:
    start, end = _event_window(item)

    event = Event()
    event.add("uid", event_uid(item))
    event.add("summary", item.title)
    event.add("description", item.description)
    if item.link:
        event.add("url", item.link)
    event.add("dtstart", start)
    event.add("dtend", end)
    # Timestamps derive from the item so identical feeds serialize identically
    event.add("dtstamp", start)
    event.add("created", start)
    event.add("last-modified", start)
    return event


def build_calendar(feed: Feed) -> Calendar:
    """Create a publish-only calendar with one event per feed item.

    Args:
        feed: Decoded RSS feed

    Returns:
        icalendar.Calendar ready for serialization
    """
    cal = Calendar()
    cal.add("prodid", PRODUCT_ID)
    cal.add("version", "2.0")
    cal.add("method", "PUBLISH")
    cal.add("name", feed.title)
    cal.add("x-wr-calname", feed.title)
    cal.add("description", feed.description)
    cal.add("x-wr-caldesc", feed.description)

    for item in feed.items:
        cal.add_component(_build_event(item))

    logger.debug("Built calendar %r with %d events", feed.title, len(feed.items))
    return cal


def serialize_calendar(cal: Calendar) -> str:
    """Serialize a calendar to RFC 5545 text (CRLF line endings)."""
    return cal.to_ical().decode("utf-8")


def feed_to_ical(feed: Feed) -> str:
    """Build and serialize the calendar for feed in one step."""
    return serialize_calendar(build_calendar(feed))
