"""Shared fixtures for rss2ical tests."""

from collections.abc import AsyncIterator, Callable, Generator
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx
import pytest

from rss2ical.core.http_client import build_client, close_all_clients

SAMPLE_RSS = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Test RSS Feed</title>
    <description>Test RSS Description</description>
    <item>
      <title>Test Item 1</title>
      <description>Test Description 1</description>
      <link>https://example.com/1</link>
      <pubDate>Mon, 27 Jul 2025 12:00:00 GMT</pubDate>
      <guid>test-guid-1</guid>
    </item>
    <item>
      <title>Test Item 2</title>
      <description>Test Description 2</description>
      <link>https://example.com/2</link>
      <pubDate>Mon, 27 Jul 2025 13:00:00 GMT</pubDate>
      <guid>test-guid-2</guid>
    </item>
  </channel>
</rss>"""

_RSS2ICAL_ENV_VARS = (
    "RSS2ICAL_TEST_TIME",
    "RSS2ICAL_DEBUG",
    "RSS2ICAL_LOG_LEVEL",
    "RSS2ICAL_WEB_PORT",
    "RSS2ICAL_WEB_HOST",
    "RSS2ICAL_CACHE_MAX_ENTRIES",
    "RSS2ICAL_CACHE_SWEEP_INTERVAL",
    "PORT",
)


class FakeClock:
    """Deterministic time provider for cache tests."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, delta: timedelta) -> None:
        self.current += delta


@pytest.fixture
def sample_rss_bytes() -> bytes:
    """Two-item RSS 2.0 document with guids, links and GMT pubDates."""
    return SAMPLE_RSS


@pytest.fixture
def fake_clock() -> FakeClock:
    """Clock pinned to 2025-07-27T12:00:00Z; call advance() to move it."""
    return FakeClock(datetime(2025, 7, 27, 12, 0, tzinfo=UTC))


@pytest.fixture
async def mock_client_factory() -> AsyncIterator[Callable[..., httpx.AsyncClient]]:
    """Build feed clients backed by httpx.MockTransport.

    Usage:
        client = mock_client_factory(lambda request: httpx.Response(200, content=b"..."))

    Every client created through the factory is closed at teardown.
    """
    created: list[httpx.AsyncClient] = []

    def _factory(handler: Callable[[httpx.Request], Any], timeout: float = 30.0) -> httpx.AsyncClient:
        client = build_client(timeout=timeout, transport=httpx.MockTransport(handler))
        created.append(client)
        return client

    yield _factory

    for client in created:
        await client.aclose()


@pytest.fixture(autouse=True)
def clean_test_environment(monkeypatch: Any) -> Generator[None, Any, None]:
    """Clear rss2ical environment variables before each test."""
    for name in _RSS2ICAL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture(autouse=True)
async def cleanup_shared_http_clients() -> AsyncIterator[None]:
    """Close shared httpx clients after every test."""
    yield
    await close_all_clients()
