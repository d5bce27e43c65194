# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Persistent storage substrate consumed by registry shards.

A :class:`ShardStorage` is a flat string key/value store belonging to
exactly one shard.  It makes no multi-key transactional promise.
"""

from __future__ import annotations

import abc


class ShardStorage(abc.ABC):
    """Abstract per-shard durable key/value store.

    Implementations raise :class:`~genomcp.core.exceptions.StorageError`
    when the substrate fails.
    """

    @abc.abstractmethod
    async def list(self) -> list[tuple[str, str]]:
        """Return every ``(key, value)`` pair in insertion order."""

    @abc.abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value for *key*, or ``None``."""

    @abc.abstractmethod
    async def put(self, key: str, value: str) -> None:
        """Durably store *value* under *key*, replacing any previous value."""

    @abc.abstractmethod
    async def delete(self, key: str) -> None:
        """Remove *key*; a missing key is not an error."""


class MemoryStore:
    """Process-local backing store shared by :class:`MemoryShardStorage` instances.

    Survives shard re-creation within a process, which is enough for tests
    and single-process development, but not process restarts.
    """

    def __init__(self) -> None:
        self.shards: dict[str, dict[str, str]] = {}

    def shard(self, name: str) -> MemoryShardStorage:
        return MemoryShardStorage(self.shards.setdefault(name, {}))


class MemoryShardStorage(ShardStorage):
    """Dict-backed :class:`ShardStorage`."""

    def __init__(self, data: dict[str, str] | None = None) -> None:
        self._data = data if data is not None else {}

    async def list(self) -> list[tuple[str, str]]:
        return list(self._data.items())

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def put(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)
