"""RSS feed retrieval and decoding."""

from .date_utils import normalize_pub_date, try_parse_pub_date
from .feed_fetcher import FeedFetcher
from .feed_models import Feed, FeedItem
from .feed_parser import parse_feed

__all__ = [
    "Feed",
    "FeedFetcher",
    "FeedItem",
    "normalize_pub_date",
    "parse_feed",
    "try_parse_pub_date",
]
