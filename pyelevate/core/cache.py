"""Async-safe response cache shared by a fetcher's concurrent lookups.

Each fetcher owns exactly one :class:`ResponseCache`. During a fan-out
phase many coroutines may ask for the same key at once; the cache makes
sure only one of them performs the underlying fetch and that everyone
else receives the stored result.

Entries live until :meth:`ResponseCache.clear` is called; nothing expires
on its own.

Typical usage::

    cache: ResponseCache[str, dict] = ResponseCache("index")

    async def fetch() -> dict:
        return await http.get_json(url)

    data = await cache.get_or_fetch("requests", fetch)
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Dict, Generic, Hashable, Optional, TypeVar

from pyelevate.utils.logger import get_logger

logger = get_logger("cache")

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

__all__ = ["ResponseCache"]


class ResponseCache(Generic[K, V]):
    """Keyed cache with per-key double-checked locking.

    The first lookup is lock-free. On a miss, the caller takes the lock
    for that key and checks again before fetching, so concurrent misses on
    one key collapse into a single fetch. Misses on different keys never
    wait on each other.

    Exceptions raised by ``fetch`` propagate and are not stored; the next
    lookup for that key fetches again.

    Args:
        name: Label used in debug logging.
    """

    def __init__(self, name: str = "cache") -> None:
        self.name = name
        self._entries: Dict[K, V] = {}
        self._locks: Dict[K, asyncio.Lock] = {}

    async def get_or_fetch(self, key: K, fetch: Callable[[], Awaitable[V]]) -> V:
        """Return the cached value for ``key``, calling ``fetch`` on a miss."""
        if key in self._entries:
            logger.debug("%s cache hit: %s", self.name, key)
            return self._entries[key]

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            if key in self._entries:
                logger.debug("%s cache hit after wait: %s", self.name, key)
                return self._entries[key]

            value = await fetch()
            self._entries[key] = value
            return value

    def get(self, key: K) -> Optional[V]:
        """Return the cached value without fetching, or ``None``."""
        return self._entries.get(key)

    def set(self, key: K, value: V) -> None:
        self._entries[key] = value

    def clear(self) -> None:
        """Drop every entry so the next lookups go to the network."""
        logger.debug("Clearing %s cache (%d entries)", self.name, len(self._entries))
        self._entries.clear()
        self._locks.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
