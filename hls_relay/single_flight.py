"""
Single-flight coordination for asyncio.

Usage:
    flight = SingleFlight()
    manifest = await flight.do(video_id, lambda: load_manifest(video_id))

Concurrent calls with the same key share one execution of the loader and
all observe its value (or its exception). Calls with different keys never
wait on each other.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SingleFlight:
    """Collapse duplicate concurrent operations per key into one task."""

    def __init__(self) -> None:
        self._inflight: Dict[str, "asyncio.Task[Any]"] = {}
        self._started = 0
        self._joined = 0

    def in_flight(self, key: str) -> bool:
        return key in self._inflight

    async def do(self, key: str, fn: Callable[[], Awaitable[T]]) -> T:
        """
        Run ``fn()`` for ``key`` unless a run for the same key is in flight.

        The registry check and insert happen without an await in between,
        so under the event loop's cooperative scheduling exactly one caller
        starts the task. The shared task is shielded: a waiter that gets
        cancelled leaves the work running for the others.
        """
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(fn())
            self._inflight[key] = task
            self._started += 1
            task.add_done_callback(lambda t, k=key: self._forget(k, t))
        else:
            self._joined += 1
            logger.debug(f"Joining in-flight operation for {key}")
        return await asyncio.shield(task)

    def _forget(self, key: str, task: "asyncio.Task[Any]") -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        # Mark a failure as retrieved even if every waiter went away.
        if not task.cancelled():
            task.exception()

    def get_stats(self) -> dict:
        return {
            "in_flight": len(self._inflight),
            "started": self._started,
            "joined": self._joined,
        }

    def __len__(self) -> int:
        return len(self._inflight)
