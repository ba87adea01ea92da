"""Calendar and health routes for rss2ical."""

from __future__ import annotations

import logging
from typing import Any

from aiohttp import web

from ...domain.orchestrator import FeedCalendarOrchestrator
from ...exceptions import FetchFailedError, OrchestratorError

logger = logging.getLogger(__name__)

CALENDAR_CONTENT_TYPE = "text/calendar"
CALENDAR_CACHE_CONTROL = "public, max-age=300"
MISSING_URL_MESSAGE = "RSS URL required: use ?url=... parameter"


def register_calendar_routes(app: Any, orchestrator: FeedCalendarOrchestrator) -> None:
    """Register the calendar conversion and health routes.

    Args:
        app: aiohttp web application
        orchestrator: Pipeline used to resolve feed URLs
    """

    async def calendar(request: web.Request) -> web.Response:
        """Convert the RSS feed named by ?url= into an iCalendar document."""
        rss_url = request.query.get("url", "")
        if not rss_url:
            return web.Response(text=MISSING_URL_MESSAGE, status=400)

        try:
            ical = await orchestrator.resolve(rss_url)
        except FetchFailedError:
            return web.Response(text="Failed to fetch RSS feed", status=500)
        except OrchestratorError:
            return web.Response(text="Failed to parse RSS feed", status=500)

        return web.Response(
            text=ical,
            content_type=CALENDAR_CONTENT_TYPE,
            charset="utf-8",
            headers={"Cache-Control": CALENDAR_CACHE_CONTROL},
        )

    async def health(_request: web.Request) -> web.Response:
        """Liveness probe."""
        return web.Response(text="OK")

    app.router.add_get("/calendar", calendar, allow_head=False)
    app.router.add_get("/health", health)

    logger.debug("Calendar routes registered")
