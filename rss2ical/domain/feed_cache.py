"""Time-bounded in-memory cache of serialized calendars keyed by feed URL.

Keys are the literal request URLs (no normalization). An entry is fresh while
``now - created_at <= ttl``; stale entries are shadowed by get() but stay in
memory until they are overwritten, evicted by the size bound, or removed by
purge_expired().

Locking follows a multiple-reader/single-writer discipline: any number of
get() calls may run together, while set() and purge_expired() exclude all
other access. The lock is a thread lock, so the cache is equally safe from
the event loop and from worker threads.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional

from ..core.timezone_utils import now_utc

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(minutes=5)
DEFAULT_MAX_ENTRIES = 1024


class ReadWriteLock:
    """Writer-preferring readers/writer lock built on threading.Condition.

    Readers wait while a writer holds the lock or is queued, so a steady
    stream of reads cannot starve set().
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


@dataclass(frozen=True)
class CacheEntry:
    """Serialized calendar and the instant it was stored."""

    payload: str
    created_at: datetime


class FeedCache:
    """Concurrency-safe URL -> calendar cache with TTL staleness.

    Example:
        cache = FeedCache()
        payload, found = cache.get(url)
        if not found:
            payload = convert(url)
            cache.set(url, payload)
    """

    def __init__(
        self,
        ttl: timedelta = DEFAULT_TTL,
        max_entries: Optional[int] = DEFAULT_MAX_ENTRIES,
        time_provider: Callable[[], datetime] = now_utc,
    ) -> None:
        """Initialize feed cache.

        Args:
            ttl: Maximum age of a fresh entry
            max_entries: Size bound; the least recently written entry is evicted
                when exceeded. None disables the bound.
            time_provider: Clock returning aware datetimes
        """
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be at least 1")

        self.ttl = ttl
        self.max_entries = max_entries
        self._now = time_provider
        self._lock = ReadWriteLock()
        # Created on first write
        self._entries: Optional[OrderedDict[str, CacheEntry]] = None
        self._stats_lock = threading.Lock()
        self._stats = {
            "hits": 0,
            "misses": 0,
            "stale": 0,
            "evictions": 0,
            "purged": 0,
        }

    def _count(self, key: str, amount: int = 1) -> None:
        with self._stats_lock:
            self._stats[key] += amount

    def _is_stale(self, entry: CacheEntry, now: datetime) -> bool:
        return now - entry.created_at > self.ttl

    def get(self, url: str) -> tuple[str, bool]:
        """Look up the cached calendar for url.

        Returns:
            (payload, True) for a fresh entry; ("", False) when the URL was
            never cached or its entry is older than the TTL
        """
        with self._lock.read_locked():
            entry = self._entries.get(url) if self._entries is not None else None

        if entry is None:
            self._count("misses")
            logger.debug("Cache miss for %s", url)
            return "", False

        if self._is_stale(entry, self._now()):
            self._count("misses")
            self._count("stale")
            logger.debug("Cache entry stale for %s (created %s)", url, entry.created_at.isoformat())
            return "", False

        self._count("hits")
        logger.debug("Cache hit for %s", url)
        return entry.payload, True

    def set(self, url: str, payload: str) -> None:
        """Insert or overwrite the entry for url, stamped with the current time."""
        entry = CacheEntry(payload=payload, created_at=self._now())
        evicted: list[str] = []

        with self._lock.write_locked():
            if self._entries is None:
                self._entries = OrderedDict()
            self._entries[url] = entry
            self._entries.move_to_end(url)

            if self.max_entries is not None:
                while len(self._entries) > self.max_entries:
                    oldest_url, _ = self._entries.popitem(last=False)
                    evicted.append(oldest_url)

        logger.debug("Cached calendar for %s (%d chars)", url, len(payload))
        if evicted:
            self._count("evictions", len(evicted))
            logger.debug("Evicted %d cache entries: %s", len(evicted), ", ".join(evicted))

    def purge_expired(self) -> int:
        """Remove every entry older than the TTL.

        Returns:
            Number of entries removed
        """
        now = self._now()
        with self._lock.write_locked():
            if not self._entries:
                return 0
            expired = [url for url, entry in self._entries.items() if self._is_stale(entry, now)]
            for url in expired:
                del self._entries[url]

        if expired:
            self._count("purged", len(expired))
            logger.info("Purged %d expired cache entries", len(expired))
        return len(expired)

    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics.

        Returns:
            Dict with hits, misses, stale, evictions, purged, hit_rate (0-100),
            current_size, max_size and ttl_seconds
        """
        with self._lock.read_locked():
            size = len(self._entries) if self._entries is not None else 0

        with self._stats_lock:
            stats = dict(self._stats)

        total = stats["hits"] + stats["misses"]
        stats["hit_rate"] = round(stats["hits"] / total * 100, 2) if total else 0.0
        stats["current_size"] = size
        stats["max_size"] = self.max_entries
        stats["ttl_seconds"] = int(self.ttl.total_seconds())
        return stats
