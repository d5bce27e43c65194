# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Redis cache backend using the ``redis`` async client.

Redis is the shared substrate when several gateway processes serve the
same caches.  Expiry is delegated to Redis, which never returns a key
past its TTL.
"""

from __future__ import annotations

import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from genomcp.cache.base import CacheBackend
from genomcp.core.exceptions import StorageError

logger = logging.getLogger("genomcp.cache.redis")

_KEY_PREFIX = "genomcp:cache:"


class RedisCacheBackend(CacheBackend):
    """Redis-backed cache using ``redis-py`` async client.

    Connection and command failures are raised as
    :class:`~genomcp.core.exceptions.StorageError`.

    Args:
        redis_url: Redis connection URL (e.g. ``redis://localhost:6379/0``).
        client: Pre-built client, mainly for tests.
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        client: aioredis.Redis | None = None,
    ) -> None:
        self._client: aioredis.Redis = client or aioredis.from_url(
            redis_url, decode_responses=True
        )

    # ------------------------------------------------------------------
    # CacheBackend interface
    # ------------------------------------------------------------------

    async def get(self, key: str) -> str | None:
        try:
            result = await self._client.get(self._prefixed(key))
        except RedisError as exc:
            raise StorageError(f"Redis GET failed for {key!r}: {exc}") from exc
        return str(result) if result is not None else None

    async def set(self, key: str, value: str, ttl: int | None = None) -> None:
        try:
            await self._client.set(self._prefixed(key), value, ex=ttl)
        except RedisError as exc:
            raise StorageError(f"Redis SET failed for {key!r}: {exc}") from exc

    async def delete(self, key: str) -> bool:
        try:
            result = await self._client.delete(self._prefixed(key))
        except RedisError as exc:
            raise StorageError(f"Redis DEL failed for {key!r}: {exc}") from exc
        return bool(result)

    async def exists(self, key: str) -> bool:
        try:
            result = await self._client.exists(self._prefixed(key))
        except RedisError as exc:
            raise StorageError(f"Redis EXISTS failed for {key!r}: {exc}") from exc
        return bool(result)

    async def clear(self) -> int:
        """Delete all keys with the genomcp cache prefix.

        Uses SCAN to avoid blocking Redis with a KEYS command.
        """
        count = 0
        try:
            async for key in self._client.scan_iter(match=f"{_KEY_PREFIX}*"):
                count += await self._client.delete(key)
        except RedisError as exc:
            raise StorageError(f"Redis clear failed: {exc}") from exc
        return count

    async def size(self) -> int:
        """Count all keys with the genomcp cache prefix."""
        count = 0
        try:
            async for _key in self._client.scan_iter(match=f"{_KEY_PREFIX}*"):
                count += 1
        except RedisError as exc:
            raise StorageError(f"Redis scan failed: {exc}") from exc
        return count

    async def close(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _prefixed(key: str) -> str:
        return f"{_KEY_PREFIX}{key}"
