"""HTTP client for downloading RSS feeds.

One GET per call, bounded by a fixed overall timeout, with the fixed
User-Agent/Accept headers. There are no retries: a failed attempt is final
for that call. Failures are raised as FeedFetchError subclasses that identify
whether the request, the status, or the body read went wrong.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional
from urllib.parse import urlparse

import httpx

from ..core.http_client import FETCH_TIMEOUT_SECONDS, build_client, get_shared_client
from ..exceptions import FeedReadError, FeedRequestError, FeedStatusError

logger = logging.getLogger(__name__)

MAX_FEED_BYTES = 10 * 1024 * 1024  # 10 MiB


class FeedFetcher:
    """Async fetcher for RSS feed documents."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = FETCH_TIMEOUT_SECONDS,
        max_bytes: int = MAX_FEED_BYTES,
        client_id: str = "feed_fetcher",
    ) -> None:
        """Initialize feed fetcher.

        Args:
            client: Optional client to use as-is. When omitted the fetcher uses
                the shared client registered under client_id.
            timeout: Overall deadline for one fetch, in seconds
            max_bytes: Largest body accepted before failing the read
            client_id: Shared client identifier used when client is None
        """
        self.client = client
        self.timeout = timeout
        self.max_bytes = max_bytes
        self._client_id = client_id
        self._owns_client = False

        logger.debug("Feed fetcher initialized (injected_client: %s)", client is not None)

    async def __aenter__(self) -> FeedFetcher:
        await self._ensure_client()
        return self

    async def __aexit__(self, _exc_type: Any, _exc_val: Any, _exc_tb: Any) -> None:
        await self.aclose()

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self.client is None or self.client.is_closed:
            try:
                self.client = await get_shared_client(self._client_id)
            except RuntimeError:
                logger.warning("Shared HTTP client unavailable; using a private client")
                self.client = build_client(self.timeout)
                self._owns_client = True
        return self.client

    async def aclose(self) -> None:
        """Close the client if this fetcher created it privately."""
        if self.client is not None and self._owns_client and not self.client.is_closed:
            await self.client.aclose()
            logger.debug("Closed private HTTP client")
        self.client = None
        self._owns_client = False

    @staticmethod
    def validate_url(url: str) -> None:
        """Reject URLs that cannot be fetched before touching the network.

        Raises:
            FeedRequestError: If the scheme is not http/https or the host is missing
        """
        try:
            parsed = urlparse(url)
        except ValueError as e:
            raise FeedRequestError(f"Malformed URL: {e}", url) from e

        if parsed.scheme not in ("http", "https"):
            raise FeedRequestError(f"Unsupported URL scheme: {parsed.scheme!r}", url)
        if not parsed.hostname:
            raise FeedRequestError("URL missing hostname", url)

    async def fetch(self, url: str) -> bytes:
        """Download the feed at url.

        Args:
            url: HTTP(S) URL of the feed

        Returns:
            Raw response body

        Raises:
            FeedRequestError: Malformed URL, transport failure, or timeout before
                a status line was received
            FeedStatusError: Final status (after redirects) was not 200
            FeedReadError: Body could not be read completely or exceeded max_bytes
        """
        self.validate_url(url)
        client = await self._ensure_client()

        logger.info("Fetching RSS from: %s", url)
        status_received = False
        try:
            async with asyncio.timeout(self.timeout):
                async with client.stream("GET", url) as response:
                    status_received = True
                    logger.debug("RSS fetch status for %s: %d", url, response.status_code)
                    if response.status_code != httpx.codes.OK:
                        raise FeedStatusError(
                            f"RSS fetch returned status: {response.status_code}",
                            url,
                            status_code=response.status_code,
                        )
                    body = await self._read_body(response, url)
        except TimeoutError as e:
            if status_received:
                raise FeedReadError(f"Timed out reading body after {self.timeout}s", url) from e
            raise FeedRequestError(f"Request timeout after {self.timeout}s", url) from e
        except httpx.InvalidURL as e:
            raise FeedRequestError(f"Malformed URL: {e}", url) from e
        except httpx.HTTPError as e:
            if status_received:
                raise FeedReadError(f"Failed to read RSS body: {e}", url) from e
            raise FeedRequestError(f"Failed to fetch RSS: {e}", url) from e

        logger.debug("Fetched %d bytes from %s", len(body), url)
        return body

    async def _read_body(self, response: httpx.Response, url: str) -> bytes:
        chunks: list[bytes] = []
        received = 0
        async for chunk in response.aiter_bytes():
            received += len(chunk)
            if received > self.max_bytes:
                raise FeedReadError(f"Feed body exceeds {self.max_bytes} bytes", url)
            chunks.append(chunk)
        return b"".join(chunks)
