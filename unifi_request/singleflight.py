"""Coalescing futures for work that must only run once at a time."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Hashable
from typing import Generic, TypeVar

T = TypeVar("T")


class SingleFlight(Generic[T]):
    """Share one in-flight call per key between all concurrent callers.

    The first caller for a key starts the work as a task; later callers
    attach to that task while it is still running. When it finishes, every
    attached caller receives the same result or exception, and the key is
    free again for the next call.
    """

    def __init__(self) -> None:
        self._tasks: dict[Hashable, asyncio.Task[T]] = {}

    def in_flight(self, key: Hashable) -> bool:
        """Return True while work for key is running."""
        task = self._tasks.get(key)
        return task is not None and not task.done()

    async def do(self, key: Hashable, func: Callable[[], Awaitable[T]]) -> T:
        """Run func for key, or wait for the run already in progress."""
        task = self._tasks.get(key)
        if task is None or task.done():
            task = asyncio.ensure_future(func())
            self._tasks[key] = task
            task.add_done_callback(lambda done: self._finished(key, done))
        # Shielded so one cancelled caller does not cancel the shared work.
        return await asyncio.shield(task)

    def _finished(self, key: Hashable, task: asyncio.Task[T]) -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]
        if not task.cancelled():
            # Mark retrieved; awaiting callers re-raise it themselves.
            task.exception()
