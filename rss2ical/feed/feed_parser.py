"""Strict RSS 2.0 decoding into Feed/FeedItem models.

Only channel title/description and item title, description, link, pubDate and
guid are extracted; every other element is ignored. Item-level fields are not
validated.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Optional, Union

import defusedxml.ElementTree as DefusedET
from defusedxml import DefusedXmlException

from ..exceptions import FeedParseError
from .feed_models import Feed, FeedItem

logger = logging.getLogger(__name__)

ITEM_FIELDS: dict[str, str] = {
    "title": "title",
    "description": "description",
    "link": "link",
    "pubDate": "published_at",
    "guid": "guid",
}


def _child_text(parent: ET.Element, tag: str) -> str:
    """Return the text content of the first direct child named tag, or ''."""
    child: Optional[ET.Element] = parent.find(tag)
    if child is None:
        return ""
    return "".join(child.itertext()).strip()


def _parse_item(element: ET.Element) -> FeedItem:
    values = {field: _child_text(element, tag) for tag, field in ITEM_FIELDS.items()}
    return FeedItem(**values)


def parse_feed(payload: Union[bytes, str]) -> Feed:
    """Decode an RSS 2.0 document.

    Args:
        payload: Raw document bytes (encoding taken from the XML declaration)
            or an already-decoded string

    Returns:
        Feed with items in document order

    Raises:
        FeedParseError: If the payload is not well-formed XML in a known
            encoding, declares entities, has a root other than <rss> or no <channel>
    """
    if isinstance(payload, str):
        payload = payload.encode("utf-8")

    if not payload or not payload.strip():
        raise FeedParseError("Empty feed document")

    try:
        root = DefusedET.fromstring(payload)
    except (ET.ParseError, DefusedXmlException, LookupError) as e:
        raise FeedParseError(f"Malformed XML: {e}") from e

    if root.tag != "rss":
        raise FeedParseError(f"Expected <rss> root element, found <{root.tag}>")

    channel = root.find("channel")
    if channel is None:
        raise FeedParseError("RSS document has no <channel> element")

    items = tuple(_parse_item(el) for el in channel.findall("item"))
    feed = Feed(
        title=_child_text(channel, "title"),
        description=_child_text(channel, "description"),
        items=items,
    )

    logger.debug("Parsed feed %r with %d items", feed.title, len(items))
    return feed
