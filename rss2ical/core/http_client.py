"""Shared outbound HTTP client manager.

Feed fetches reuse one pooled httpx.AsyncClient per client id instead of
building a client per request. The fixed request headers and the overall
timeout live here so every client is configured the same way.
"""

import asyncio
import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

# Global state for shared HTTP clients
_shared_clients: dict[str, httpx.AsyncClient] = {}
_client_lock = asyncio.Lock()

FETCH_TIMEOUT_SECONDS = 30.0

USER_AGENT = "RSS2ICal/1.0 (Python httpx client)"
ACCEPT_FEED_TYPES = "application/rss+xml, application/xml, text/xml, */*"

DEFAULT_FEED_HEADERS: dict[str, str] = {
    "User-Agent": USER_AGENT,
    "Accept": ACCEPT_FEED_TYPES,
}

_DEFAULT_LIMITS = httpx.Limits(
    max_connections=20,
    max_keepalive_connections=10,
)


def build_client(
    timeout: float = FETCH_TIMEOUT_SECONDS,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Create a feed client with the fixed headers and redirect policy.

    Args:
        timeout: Per-operation httpx timeout in seconds
        transport: Optional transport override (tests pass httpx.MockTransport)

    Returns:
        Configured httpx.AsyncClient; the caller owns closing it
    """
    return httpx.AsyncClient(
        transport=transport,
        limits=_DEFAULT_LIMITS,
        timeout=httpx.Timeout(timeout),
        follow_redirects=True,
        verify=True,
        headers=DEFAULT_FEED_HEADERS,
    )


async def get_shared_client(client_id: str = "default") -> httpx.AsyncClient:
    """Get or create a shared HTTP client with connection pooling.

    Args:
        client_id: Identifier for the client (allows multiple clients if needed)

    Returns:
        Shared httpx.AsyncClient

    Raises:
        RuntimeError: If client creation fails
    """
    async with _client_lock:
        if client_id not in _shared_clients or _shared_clients[client_id].is_closed:
            try:
                _shared_clients[client_id] = build_client()
            except Exception as e:
                logger.exception("Failed to create shared HTTP client '%s'", client_id)
                raise RuntimeError(f"Failed to create shared HTTP client: {e}") from e
            logger.info("Created shared HTTP client '%s'", client_id)

        return _shared_clients[client_id]


async def close_all_clients() -> None:
    """Close all shared HTTP clients.

    Called during application shutdown and between tests.
    """
    async with _client_lock:
        for client_id, client in _shared_clients.items():
            try:
                if not client.is_closed:
                    await client.aclose()
                    logger.debug("Closed shared HTTP client '%s'", client_id)
            except Exception as e:
                logger.warning("Error closing shared HTTP client '%s': %s", client_id, e)

        _shared_clients.clear()
        logger.debug("All shared HTTP clients closed")
