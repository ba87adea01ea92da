"""Cache and request orchestration for feed-to-calendar conversion."""

from .feed_cache import CacheEntry, FeedCache, ReadWriteLock
from .orchestrator import FeedCalendarOrchestrator, convert_feed
from .single_flight import SingleFlight

__all__ = [
    "CacheEntry",
    "FeedCache",
    "FeedCalendarOrchestrator",
    "ReadWriteLock",
    "SingleFlight",
    "convert_feed",
]
