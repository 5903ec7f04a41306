"""Process-lifetime memoization for parsed game data.

Source CSV files are static for a deployment, so values are computed once
and kept until ``clear()`` is called. There is no TTL and no invalidation.

A per-key ``asyncio.Lock`` guarantees that concurrent first requests for
the same key run the computation exactly once; later callers wait on the
lock and read the stored value. A computation that raises stores nothing,
so the next request retries. The same holds for a value the caller's
``keep`` predicate rejects.

Locks belong to the event loop that created them. When the cache is used
from a new running loop the lock table is rebuilt; stored values carry
over.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Hashable
from typing import Generic, TypeVar

from marketgame.core.logging import LoggerMixin

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class AsyncMemoCache(LoggerMixin, Generic[K, V]):
    """Get-or-compute cache with exactly-once computation per key.

    Examples:
        >>> cache: AsyncMemoCache[str, list[int]] = AsyncMemoCache("numbers")
        >>> await cache.get_or_compute("a", load_numbers)
    """

    def __init__(self, name: str) -> None:
        """Initialize an empty cache.

        Args:
            name: Cache name used in log events.
        """
        self.name = name
        self._values: dict[K, V] = {}
        self._locks: dict[K, asyncio.Lock] = {}
        self._loop: asyncio.AbstractEventLoop | None = None

    async def get_or_compute(
        self,
        key: K,
        compute: Callable[[], Awaitable[V]],
        keep: Callable[[V], bool] | None = None,
    ) -> V:
        """Return the cached value for ``key``, computing it on first access.

        Args:
            key: Cache key.
            compute: Zero-argument coroutine factory producing the value.
            keep: Optional predicate; a computed value it rejects is
                returned but not stored.

        Returns:
            The cached or freshly computed value.
        """
        if key in self._values:
            self.logger.debug("cache_hit", cache=self.name, key=key)
            return self._values[key]

        # No await between lookup and insert, so one lock per key.
        lock = self._lock_for(key)
        async with lock:
            if key in self._values:
                self.logger.debug("cache_hit_after_wait", cache=self.name, key=key)
                return self._values[key]

            self.logger.debug("cache_miss", cache=self.name, key=key)
            value = await compute()
            if keep is not None and not keep(value):
                self.logger.debug("cache_store_skipped", cache=self.name, key=key)
                return value
            self._values[key] = value
            return value

    def _lock_for(self, key: K) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        if loop is not self._loop:
            if self._locks:
                self.logger.debug("cache_locks_reset", cache=self.name, locks=len(self._locks))
            self._locks = {}
            self._loop = loop
        return self._locks.setdefault(key, asyncio.Lock())

    def peek(self, key: K) -> V | None:
        """Return the cached value without computing it."""
        return self._values.get(key)

    def clear(self) -> None:
        """Drop every cached value."""
        self.logger.info("cache_cleared", cache=self.name, size=len(self._values))
        self._values.clear()
        self._locks.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)
