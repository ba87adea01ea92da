"""Coalesce concurrent identical calls into one in-flight task.

The first caller for a key starts the work as its own task; later callers for
the same key await that task instead of starting another. Callers await a
shielded view, so a caller being cancelled never cancels the shared work.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SingleFlight(Generic[T]):
    """Registry of in-flight tasks keyed by string."""

    def __init__(self) -> None:
        self._calls: dict[str, asyncio.Task[T]] = {}
        self.stats = {"started": 0, "shared": 0}

    def in_flight(self, key: str) -> bool:
        return key in self._calls

    def _forget(self, key: str, task: asyncio.Task[T]) -> None:
        if self._calls.get(key) is task:
            del self._calls[key]
        # Mark the outcome retrieved even when every waiter went away
        if not task.cancelled():
            task.exception()

    async def do(self, key: str, func: Callable[[], Awaitable[T]]) -> T:
        """Run func once for all concurrent callers with the same key.

        Args:
            key: Coalescing key
            func: Zero-argument coroutine function producing the result

        Returns:
            The shared result. If func raises, every waiter receives the exception.
        """
        task = self._calls.get(key)
        if task is None:
            task = asyncio.ensure_future(func())
            self._calls[key] = task
            task.add_done_callback(lambda t, k=key: self._forget(k, t))
            self.stats["started"] += 1
        else:
            self.stats["shared"] += 1
            logger.debug("Joining in-flight request for %s", key)

        return await asyncio.shield(task)
