"""asyncio HTTP server for rss2ical.

This module wires the explicitly constructed cache, fetcher and orchestrator
into an aiohttp application, runs a background task that purges expired
cache entries, and serves until SIGINT/SIGTERM.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal
from collections.abc import AsyncIterator
from typing import Any, Optional

from aiohttp import web

from ..core.config_manager import get_config_value
from ..core.http_client import close_all_clients
from ..domain.feed_cache import DEFAULT_TTL, FeedCache
from ..domain.orchestrator import FeedCalendarOrchestrator
from ..feed.feed_fetcher import FeedFetcher
from ..lite_logging import configure_lite_logging
from .middleware import correlation_id_middleware
from .routes import register_calendar_routes

logger = logging.getLogger(__name__)

CACHE_KEY = web.AppKey("cache", FeedCache)
ORCHESTRATOR_KEY = web.AppKey("orchestrator", FeedCalendarOrchestrator)


async def _sweep_loop(cache: FeedCache, interval: float, stop_event: asyncio.Event) -> None:
    """Purge expired cache entries every interval seconds until stopped."""
    logger.debug("Cache sweep loop starting with interval %.0f seconds", interval)
    while not stop_event.is_set():
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(stop_event.wait(), timeout=interval)
        if stop_event.is_set():
            break
        removed = cache.purge_expired()
        logger.debug("Cache sweep removed %d entries", removed)


def create_app(
    config: Any = None,
    cache: Optional[FeedCache] = None,
    fetcher: Optional[FeedFetcher] = None,
    coalesce: bool = True,
) -> web.Application:
    """Create the aiohttp application.

    Args:
        config: dict or Config-like object (see config_loader.Config)
        cache: Cache instance; a new one sized from config when omitted
        fetcher: Fetcher instance; one using the shared HTTP client when omitted
        coalesce: Share one upstream fetch between concurrent misses for a URL

    Returns:
        Application with routes, middleware and the cache sweeper registered
    """
    config = config or {}

    if cache is None:
        cache = FeedCache(
            ttl=DEFAULT_TTL,
            max_entries=int(get_config_value(config, "cache_max_entries", 1024)),
        )
    if fetcher is None:
        fetcher = FeedFetcher()

    orchestrator = FeedCalendarOrchestrator(cache, fetcher, coalesce=coalesce)

    app = web.Application(middlewares=[correlation_id_middleware])
    app[CACHE_KEY] = cache
    app[ORCHESTRATOR_KEY] = orchestrator

    register_calendar_routes(app, orchestrator)

    sweep_interval = float(get_config_value(config, "cache_sweep_interval_seconds", 60))

    async def _cache_sweeper(_app: web.Application) -> AsyncIterator[None]:
        stop_event = asyncio.Event()
        task = asyncio.create_task(_sweep_loop(cache, sweep_interval, stop_event))
        yield
        stop_event.set()
        await task

    async def _close_fetcher(_app: web.Application) -> None:
        await fetcher.aclose()
        await close_all_clients()
        logger.debug("HTTP clients closed")

    app.cleanup_ctx.append(_cache_sweeper)
    app.on_cleanup.append(_close_fetcher)
    return app


async def _serve(config: Any) -> None:
    """Run the server until SIGINT/SIGTERM.

    Args:
        config: Server configuration object/dict.
    """
    stop_event = asyncio.Event()

    app = create_app(config)
    runner = web.AppRunner(app)
    await runner.setup()

    host = get_config_value(config, "server_bind", "0.0.0.0")  # nosec: B104 - default bind; override via config/env
    port = int(get_config_value(config, "server_port", 8080))
    site = web.TCPSite(runner, host=host, port=port)
    try:
        await site.start()
    except OSError:
        logger.exception("Failed to start server on %s:%d", host, port)
        await runner.cleanup()
        raise

    logger.info("Starting RSS2ICal server on %s:%d", host, port)
    logger.info("Calendar endpoint: http://localhost:%d/calendar?url=<RSS_URL>", port)

    loop = asyncio.get_running_loop()

    def _on_signal() -> None:
        logger.info("Shutdown signal received")
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        # Not available on Windows event loops
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, _on_signal)

    await stop_event.wait()
    logger.info("Stop event received, shutting down")

    await runner.cleanup()
    logger.info("Server shutdown complete")


def start_server(config: Any) -> None:
    """Start the asyncio event loop and HTTP server.

    Args:
        config: dict or Config with keys:
            - server_bind: host to bind (str)
            - server_port: port (int)
            - debug_logging: enable debug logging for rss2ical (bool)
            - cache_max_entries: cache size bound (int)
            - cache_sweep_interval_seconds: purge interval (int)

    Blocks the calling thread until SIGINT/SIGTERM is received.
    """
    debug_mode = bool(get_config_value(config, "debug_logging", False))
    configure_lite_logging(debug_mode=debug_mode)
    logger.info("Logging configuration applied: debug_mode=%s", debug_mode)

    try:
        asyncio.run(_serve(config))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
