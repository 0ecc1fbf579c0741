"""In-memory memo of published version lists, used by the Maven Central resolver.

A reconciliation pass asks for the newer versions of many dependencies and
several of them usually share ``group:artifact`` coordinates (the same
library at different versions in different repositories). The listing for
one coordinate is therefore fetched once, kept for a while, and shared by
lookups that arrive while the fetch is still running.
"""

from __future__ import annotations

import asyncio
import time
from collections import OrderedDict
from typing import Awaitable, Callable, Optional

Coordinates = tuple[str, str]
Fetch = Callable[[], Awaitable[list[str]]]


class VersionListCache:
    """Version lists per ``(group_id, artifact_id)`` that expire after ``ttl_seconds``.

    At most ``capacity`` coordinates are held; storing one more evicts the
    oldest stored coordinate.
    """

    def __init__(
        self,
        *,
        ttl_seconds: int,
        capacity: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be >= 0")
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._ttl = float(ttl_seconds)
        self._capacity = capacity
        self._clock = clock
        self._lists: "OrderedDict[Coordinates, tuple[float, list[str]]]" = OrderedDict()
        self._lock = asyncio.Lock()

    def _drop_expired(self, now: float) -> None:
        for coords in [c for c, (until, _) in self._lists.items() if until <= now]:
            del self._lists[coords]

    async def lookup(self, coords: Coordinates) -> Optional[list[str]]:
        async with self._lock:
            self._drop_expired(self._clock())
            stored = self._lists.get(coords)
            return None if stored is None else list(stored[1])

    async def store(self, coords: Coordinates, versions: list[str]) -> None:
        async with self._lock:
            now = self._clock()
            self._drop_expired(now)
            self._lists.pop(coords, None)
            self._lists[coords] = (now + self._ttl, list(versions))
            while len(self._lists) > self._capacity:
                self._lists.popitem(last=False)

    async def clear(self) -> None:
        async with self._lock:
            self._lists.clear()

    def __len__(self) -> int:
        return len(self._lists)


class SharedLookups:
    """Joins concurrent lookups of the same coordinates onto one fetch.

    Waiters await the fetch through ``asyncio.shield``: one cancelled waiter
    leaves the fetch running for the others.
    """

    def __init__(self) -> None:
        self._running: dict[Coordinates, asyncio.Task[list[str]]] = {}

    async def join(self, coords: Coordinates, fetch: Fetch) -> list[str]:
        task = self._running.get(coords)
        if task is None or task.done():
            task = asyncio.ensure_future(fetch())
            self._running[coords] = task
            task.add_done_callback(lambda t: self._forget(coords, t))
        return await asyncio.shield(task)

    def _forget(self, coords: Coordinates, task: asyncio.Task[list[str]]) -> None:
        if self._running.get(coords) is task:
            del self._running[coords]

    def is_running(self, coords: Coordinates) -> bool:
        task = self._running.get(coords)
        return task is not None and not task.done()


__all__ = ["Coordinates", "SharedLookups", "VersionListCache"]
