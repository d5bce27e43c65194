# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""In-memory LRU cache backend with lazy TTL expiry.

This is the default backend and requires no external services.  Expiry
is checked at read time; there is no background sweep.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Callable

from genomcp.cache.base import CacheBackend

# Default maximum number of entries before eviction kicks in.
_DEFAULT_MAX_SIZE = 4096

Clock = Callable[[], float]


class _Entry:
    """A cache entry with an optional absolute expiry on the backend clock."""

    __slots__ = ("expires_at", "value")

    def __init__(self, value: str, expires_at: float | None) -> None:
        self.value = value
        self.expires_at = expires_at

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class MemoryCacheBackend(CacheBackend):
    """In-memory LRU cache with TTL support.

    Args:
        max_size: Maximum number of entries.  When exceeded the least
            recently used entry is evicted.
        clock: Monotonic time source in seconds.  Tests inject a fake.
    """

    def __init__(
        self,
        max_size: int = _DEFAULT_MAX_SIZE,
        clock: Clock = time.monotonic,
    ) -> None:
        self._store: OrderedDict[str, _Entry] = OrderedDict()
        self._max_size = max_size
        self._clock = clock

    # ------------------------------------------------------------------
    # CacheBackend interface
    # ------------------------------------------------------------------

    async def get(self, key: str) -> str | None:
        entry = self._live_entry(key)
        if entry is None:
            return None
        self._store.move_to_end(key)
        return entry.value

    async def set(self, key: str, value: str, ttl: int | None = None) -> None:
        expires_at = (self._clock() + ttl) if ttl is not None else None
        if key in self._store:
            self._store.move_to_end(key)
        self._store[key] = _Entry(value=value, expires_at=expires_at)
        while len(self._store) > self._max_size:
            self._store.popitem(last=False)

    async def delete(self, key: str) -> bool:
        entry = self._store.pop(key, None)
        return entry is not None and not entry.is_expired(self._clock())

    async def exists(self, key: str) -> bool:
        return self._live_entry(key) is not None

    async def clear(self) -> int:
        self._prune_expired()
        count = len(self._store)
        self._store.clear()
        return count

    async def size(self) -> int:
        self._prune_expired()
        return len(self._store)

    async def close(self) -> None:
        self._store.clear()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _live_entry(self, key: str) -> _Entry | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._store[key]
            return None
        return entry

    def _prune_expired(self) -> None:
        now = self._clock()
        expired_keys = [k for k, v in self._store.items() if v.is_expired(now)]
        for k in expired_keys:
            del self._store[k]
