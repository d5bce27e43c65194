# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Addressing registry shards by stable name.

A :class:`RegistryNamespace` memoizes one :class:`VariantRegistry` per
shard name for the lifetime of the process.  Shards never share storage
or hydration state; whichever shard a caller picks is authoritative for
that partition.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from genomcp.core.constants import DEFAULT_SHARD
from genomcp.core.exceptions import ConfigurationError
from genomcp.registry.shard import VariantRegistry
from genomcp.registry.storage import MemoryStore, ShardStorage

logger = logging.getLogger("genomcp.registry.namespace")

StorageFactory = Callable[[str], ShardStorage]

# Module-level singleton
_namespace: RegistryNamespace | None = None


class RegistryNamespace:
    """Factory and cache of named registry shards.

    Args:
        storage_factory: Builds the :class:`ShardStorage` for a shard name.
        default_shard: Shard used when callers do not name one.
        on_close: Optional coroutine releasing shared storage resources.
    """

    def __init__(
        self,
        storage_factory: StorageFactory,
        *,
        default_shard: str = DEFAULT_SHARD,
        on_close: Callable[[], Awaitable[None]] | None = None,
    ) -> None:
        self._storage_factory = storage_factory
        self._default_shard = default_shard
        self._on_close = on_close
        self._shards: dict[str, VariantRegistry] = {}

    @property
    def default_shard(self) -> str:
        return self._default_shard

    def get(self, name: str | None = None) -> VariantRegistry:
        """Return the shard called *name* (or the default shard)."""
        shard_name = name or self._default_shard
        if not shard_name.strip():
            raise ValueError("Shard name must not be blank")
        shard = self._shards.get(shard_name)
        if shard is None:
            shard = VariantRegistry(shard_name, self._storage_factory(shard_name))
            self._shards[shard_name] = shard
            logger.debug("Created registry shard %s", shard_name)
        return shard

    def evict(self, name: str) -> None:
        """Drop the in-memory shard; the next :meth:`get` re-hydrates from storage."""
        self._shards.pop(name, None)

    @property
    def shard_names(self) -> list[str]:
        return sorted(self._shards)

    async def close(self) -> None:
        self._shards.clear()
        if self._on_close is not None:
            await self._on_close()


def _create_namespace_from_settings() -> RegistryNamespace:
    from genomcp.core.config import get_settings

    settings = get_settings()
    backend = settings.registry_backend.lower()

    if backend == "sqlite":
        from genomcp.registry.sqlite import RegistryDatabase

        database = RegistryDatabase(settings.registry_db_path)
        return RegistryNamespace(
            database.shard,
            default_shard=settings.registry_default_shard,
            on_close=database.close,
        )

    if backend == "memory":
        store = MemoryStore()
        return RegistryNamespace(store.shard, default_shard=settings.registry_default_shard)

    msg = f"Unknown registry backend: {backend!r}. Expected 'sqlite' or 'memory'."
    raise ConfigurationError(msg)


def get_registry_namespace() -> RegistryNamespace:
    """Return the module-level :class:`RegistryNamespace`, creating it from settings."""
    global _namespace
    if _namespace is None:
        _namespace = _create_namespace_from_settings()
    return _namespace


async def close_registry_namespace() -> None:
    """Close the singleton's storage and forget it."""
    global _namespace
    if _namespace is not None:
        await _namespace.close()
        _namespace = None


def reset_registry_namespace() -> None:
    """Reset the singleton without closing it (useful for testing)."""
    global _namespace
    _namespace = None
