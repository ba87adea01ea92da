"""Unit tests for rss2ical.feed.feed_fetcher using httpx.MockTransport."""

import asyncio
from collections.abc import AsyncIterator

import httpx
import pytest

from rss2ical.core.http_client import ACCEPT_FEED_TYPES, USER_AGENT, get_shared_client
from rss2ical.exceptions import FeedFetchError, FeedReadError, FeedRequestError, FeedStatusError
from rss2ical.feed.feed_fetcher import FeedFetcher

FEED_URL = "https://feeds.test/rss.xml"


class _FailingStream(httpx.AsyncByteStream):
    """Body stream that breaks after the first chunk."""

    async def __aiter__(self) -> AsyncIterator[bytes]:
        yield b"<rss><channel>"
        raise httpx.ReadError("connection reset by peer")


@pytest.mark.unit
@pytest.mark.fast
class TestFeedFetcherSuccess:
    """Successful downloads."""

    async def test_fetch_when_200_then_returns_body(self, mock_client_factory, sample_rss_bytes) -> None:
        client = mock_client_factory(lambda request: httpx.Response(200, content=sample_rss_bytes))
        fetcher = FeedFetcher(client=client)

        assert await fetcher.fetch(FEED_URL) == sample_rss_bytes

    async def test_fetch_when_called_then_sends_fixed_headers(self, mock_client_factory) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=b"<rss/>")

        fetcher = FeedFetcher(client=mock_client_factory(handler))
        await fetcher.fetch(FEED_URL)

        assert len(seen) == 1
        assert seen[0].method == "GET"
        assert seen[0].headers["User-Agent"] == USER_AGENT
        assert seen[0].headers["Accept"] == ACCEPT_FEED_TYPES

    async def test_fetch_when_redirected_then_follows_to_final_200(self, mock_client_factory) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/old.xml":
                return httpx.Response(301, headers={"Location": "https://feeds.test/new.xml"})
            return httpx.Response(200, content=b"moved feed")

        fetcher = FeedFetcher(client=mock_client_factory(handler))
        assert await fetcher.fetch("https://feeds.test/old.xml") == b"moved feed"

    async def test_fetch_when_no_client_injected_then_uses_shared_client(self) -> None:
        fetcher = FeedFetcher()
        client = await fetcher._ensure_client()

        assert client is await get_shared_client("feed_fetcher")

    async def test_context_manager_when_client_injected_then_client_left_open(self, mock_client_factory) -> None:
        client = mock_client_factory(lambda request: httpx.Response(200))

        async with FeedFetcher(client=client) as fetcher:
            assert fetcher.client is client

        assert not client.is_closed


@pytest.mark.unit
@pytest.mark.fast
class TestFeedFetcherFailures:
    """Failure classification."""

    @pytest.mark.parametrize("status", [201, 204, 304, 404, 500, 503])
    async def test_fetch_when_status_not_200_then_status_error(self, mock_client_factory, status: int) -> None:
        fetcher = FeedFetcher(client=mock_client_factory(lambda request: httpx.Response(status)))

        with pytest.raises(FeedStatusError) as exc_info:
            await fetcher.fetch(FEED_URL)

        assert exc_info.value.status_code == status
        assert exc_info.value.url == FEED_URL

    async def test_fetch_when_redirect_ends_in_error_then_status_error(self, mock_client_factory) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/old.xml":
                return httpx.Response(302, headers={"Location": "/gone.xml"})
            return httpx.Response(410)

        fetcher = FeedFetcher(client=mock_client_factory(handler))
        with pytest.raises(FeedStatusError) as exc_info:
            await fetcher.fetch("https://feeds.test/old.xml")

        assert exc_info.value.status_code == 410

    @pytest.mark.parametrize(
        "url",
        ["ftp://feeds.test/rss.xml", "file:///etc/passwd", "http:///rss.xml", "not-a-url", ""],
    )
    async def test_fetch_when_url_unusable_then_request_error_without_network(
        self, mock_client_factory, url: str
    ) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200)

        fetcher = FeedFetcher(client=mock_client_factory(handler))
        with pytest.raises(FeedRequestError):
            await fetcher.fetch(url)

        assert calls == []

    async def test_fetch_when_connection_fails_then_request_error(self, mock_client_factory) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Name or service not known", request=request)

        fetcher = FeedFetcher(client=mock_client_factory(handler))
        with pytest.raises(FeedRequestError) as exc_info:
            await fetcher.fetch(FEED_URL)

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    async def test_fetch_when_body_read_fails_then_read_error(self, mock_client_factory) -> None:
        fetcher = FeedFetcher(
            client=mock_client_factory(lambda request: httpx.Response(200, stream=_FailingStream()))
        )

        with pytest.raises(FeedReadError):
            await fetcher.fetch(FEED_URL)

    async def test_fetch_when_body_exceeds_cap_then_read_error(self, mock_client_factory) -> None:
        fetcher = FeedFetcher(
            client=mock_client_factory(lambda request: httpx.Response(200, content=b"x" * 100)),
            max_bytes=10,
        )

        with pytest.raises(FeedReadError, match="exceeds"):
            await fetcher.fetch(FEED_URL)

    async def test_fetch_when_server_too_slow_then_request_error(self, mock_client_factory) -> None:
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(1)
            return httpx.Response(200)

        fetcher = FeedFetcher(client=mock_client_factory(handler), timeout=0.05)
        with pytest.raises(FeedRequestError, match="timeout"):
            await fetcher.fetch(FEED_URL)

    async def test_fetch_errors_when_raised_then_share_base_class(self, mock_client_factory) -> None:
        fetcher = FeedFetcher(client=mock_client_factory(lambda request: httpx.Response(404)))
        with pytest.raises(FeedFetchError):
            await fetcher.fetch(FEED_URL)
