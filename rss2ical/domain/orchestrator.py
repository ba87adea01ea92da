"""Resolve a feed URL into a serialized calendar.

Cache hit: return the stored payload. Miss or stale: fetch, parse, build,
store, return. Fetch and parse failures surface as OrchestratorError
subclasses and leave the cache untouched, so a failing URL is retried in full
on the next request.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from ..calendar.calendar_builder import feed_to_ical
from ..exceptions import FeedFetchError, FeedParseError, FetchFailedError, ParseFailedError
from ..feed.feed_fetcher import FeedFetcher
from ..feed.feed_parser import parse_feed
from .feed_cache import FeedCache
from .single_flight import SingleFlight

logger = logging.getLogger(__name__)


def convert_feed(payload: bytes) -> str:
    """Parse raw feed bytes and serialize the resulting calendar.

    Raises:
        FeedParseError: If payload is not an RSS document
    """
    return feed_to_ical(parse_feed(payload))


class FeedCalendarOrchestrator:
    """Cache-fronted fetch/parse/build pipeline for feed URLs."""

    def __init__(
        self,
        cache: FeedCache,
        fetcher: FeedFetcher,
        coalesce: bool = True,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            cache: Cache instance owned by the caller
            fetcher: Fetcher used for cache misses
            coalesce: Share one conversion between concurrent misses for the
                same URL. When False every miss performs its own fetch.
        """
        self.cache = cache
        self.fetcher = fetcher
        self.coalesce = coalesce
        self._flights: Optional[SingleFlight[str]] = SingleFlight() if coalesce else None
        self.stats = {"conversions": 0, "fetch_failures": 0, "parse_failures": 0}

    async def resolve(self, url: str) -> str:
        """Return the iCalendar text for the feed at url.

        Raises:
            FetchFailedError: The feed could not be retrieved
            ParseFailedError: The feed was retrieved but is not valid RSS
        """
        payload, found = self.cache.get(url)
        if found:
            return payload

        if self._flights is not None:
            return await self._flights.do(url, lambda: self._refresh(url))
        return await self._refresh(url)

    async def _refresh(self, url: str) -> str:
        try:
            body = await self.fetcher.fetch(url)
        except FeedFetchError as e:
            self.stats["fetch_failures"] += 1
            logger.warning("Error fetching RSS from %s: %s", url, e)
            raise FetchFailedError(f"Failed to fetch RSS feed: {e}", url) from e

        try:
            # Parsing and serialization are CPU-bound; keep the loop responsive
            ical = await asyncio.to_thread(convert_feed, body)
        except FeedParseError as e:
            self.stats["parse_failures"] += 1
            logger.warning("Error parsing RSS from %s: %s", url, e)
            raise ParseFailedError(f"Failed to parse RSS feed: {e}", url) from e

        self.cache.set(url, ical)
        self.stats["conversions"] += 1
        logger.info("Converted %s to iCalendar (%d chars)", url, len(ical))
        return ical
