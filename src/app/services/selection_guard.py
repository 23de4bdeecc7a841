from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, TypeVar

from src.domain.exceptions import SelectionSuperseded

T = TypeVar("T")


@dataclass(slots=True)
class LatestSelectionGuard:
    """Runs one resolution per key; a newer run cancels the older one.

    The caller whose run was cancelled by a newer selection gets
    `SelectionSuperseded`, so a stale result is never returned.
    """

    _tasks: dict[str, asyncio.Task] = field(
        default_factory=dict, init=False, repr=False
    )

    async def run(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        previous = self._tasks.get(key)
        if previous is not None and not previous.done():
            previous.cancel()

        task = asyncio.ensure_future(factory())
        self._tasks[key] = task
        try:
            return await task
        except asyncio.CancelledError:
            if task.cancelled() and self._tasks.get(key) is not task:
                raise SelectionSuperseded(key) from None
            raise
        finally:
            if self._tasks.get(key) is task:
                del self._tasks[key]

    def in_flight(self, key: str) -> bool:
        task = self._tasks.get(key)
        return task is not None and not task.done()
