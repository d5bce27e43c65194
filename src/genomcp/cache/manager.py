# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Cache manager that owns the backend and hands out namespaced caches.

The :class:`CacheManager` is the process-wide entry point for the
ephemeral tier.  It builds the configured backend once, returns one
:class:`~genomcp.cache.kv.KVCache` per namespace, and aggregates their
hit/miss statistics.
"""

from __future__ import annotations

import logging

from genomcp.cache.base import CacheBackend
from genomcp.cache.kv import CacheStats, KVCache, validate_namespace
from genomcp.cache.memory import MemoryCacheBackend
from genomcp.core.exceptions import ConfigurationError

logger = logging.getLogger("genomcp.cache.manager")

# Module-level singleton
_manager: CacheManager | None = None


class CacheManager:
    """Registry of namespaced caches sharing one :class:`CacheBackend`.

    Args:
        backend: The cache backend to use.  Defaults to an in-memory backend.
    """

    def __init__(self, backend: CacheBackend | None = None) -> None:
        self._backend = backend or MemoryCacheBackend()
        self._caches: dict[str, KVCache] = {}

    def cache(self, namespace: str) -> KVCache:
        """Return the :class:`KVCache` for *namespace*, creating it on first use."""
        validate_namespace(namespace)
        kv = self._caches.get(namespace)
        if kv is None:
            kv = KVCache(self._backend, namespace)
            self._caches[namespace] = kv
        return kv

    @property
    def namespaces(self) -> list[str]:
        return sorted(self._caches)

    @property
    def stats(self) -> CacheStats:
        """Hit/miss counts summed over every namespace."""
        combined = CacheStats()
        for kv in self._caches.values():
            combined.hits += kv.stats.hits
            combined.misses += kv.stats.misses
        return combined

    async def clear(self) -> int:
        """Flush all cached entries in the backend.

        Returns:
            Number of entries removed.
        """
        count = await self._backend.clear()
        logger.info("Cache cleared: %d entries removed", count)
        return count

    async def size(self) -> int:
        """Return the number of live entries in the backend."""
        return await self._backend.size()

    @property
    def backend(self) -> CacheBackend:
        """Return the underlying cache backend."""
        return self._backend

    async def close(self) -> None:
        """Release resources held by the backend."""
        await self._backend.close()


def _create_backend_from_settings() -> CacheBackend:
    """Instantiate the cache backend based on application settings."""
    from genomcp.core.config import get_settings

    settings = get_settings()
    backend_type = settings.cache_backend.lower()

    if backend_type == "redis":
        from genomcp.cache.redis import RedisCacheBackend

        return RedisCacheBackend(redis_url=settings.redis_url)

    if backend_type == "memory":
        return MemoryCacheBackend(max_size=settings.cache_max_size)

    msg = f"Unknown cache backend: {backend_type!r}. Expected 'memory' or 'redis'."
    raise ConfigurationError(msg)


def get_cache_manager() -> CacheManager:
    """Return the module-level :class:`CacheManager` singleton.

    Creates a new instance on first call using application settings.
    """
    global _manager
    if _manager is None:
        _manager = CacheManager(backend=_create_backend_from_settings())
    return _manager


def reset_cache_manager() -> None:
    """Reset the singleton (useful for testing)."""
    global _manager
    _manager = None
