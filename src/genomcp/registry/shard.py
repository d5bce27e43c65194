# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""One shard of the durable variant registry.

A :class:`VariantRegistry` owns an in-memory index of
:class:`~genomcp.models.variant.VariantEntry` records, hydrated once from
its :class:`~genomcp.registry.storage.ShardStorage` before the first
operation and kept write-through afterwards.

Mutations (the access-count bump in :meth:`get_variant`,
:meth:`store_variant` and :meth:`delete_variant`) run one at a time under
the shard lock.  Each mutation persists first and only then publishes the
new record to the index, so a failed write changes neither.  Index
entries are immutable models replaced whole, so :meth:`get_stats` can
snapshot the index without taking the lock.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime

from pydantic import ValidationError

from genomcp.core.exceptions import StorageError
from genomcp.models.variant import RegistryStats, VariantEntry, VariantInput
from genomcp.registry.storage import ShardStorage

logger = logging.getLogger("genomcp.registry.shard")

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class VariantRegistry:
    """Durable, access-counted variant store for a single shard.

    Args:
        name: Stable shard name, e.g. ``"global-stats"``.
        storage: Persistent substrate owned by this shard.
        clock: Source of "now" for timestamps.
    """

    def __init__(self, name: str, storage: ShardStorage, *, clock: Clock = _utcnow) -> None:
        self._name = name
        self._storage = storage
        self._clock = clock
        self._index: dict[str, VariantEntry] = {}
        self._lock = asyncio.Lock()
        self._hydration: asyncio.Task[None] | None = None
        self._hydrated = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def hydrated(self) -> bool:
        return self._hydrated

    # ------------------------------------------------------------------
    # Hydration
    # ------------------------------------------------------------------

    async def hydrate(self) -> None:
        """Load persisted records into the index, exactly once per instance.

        Concurrent first callers all await the same load.  If it fails
        they all see the :class:`StorageError` and the next call retries.
        """
        if self._hydrated:
            return
        task = self._hydration
        if task is None:
            task = asyncio.ensure_future(self._load())
            self._hydration = task
        try:
            await asyncio.shield(task)
        except Exception:
            if self._hydration is task:
                self._hydration = None
            raise

    async def _load(self) -> None:
        records = await self._storage.list()
        index: dict[str, VariantEntry] = {}
        for key, raw in records:
            try:
                index[key] = VariantEntry.model_validate_json(raw)
            except ValidationError as exc:
                msg = f"Corrupt registry record {key!r} in shard {self._name!r}: {exc}"
                raise StorageError(msg) from exc
        self._index = index
        self._hydrated = True
        logger.info("Hydrated shard %s with %d variants", self._name, len(index))

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def get_variant(self, hgvs: str) -> VariantEntry | None:
        """Return the entry after bumping its access count, or ``None`` if absent.

        Raises:
            StorageError: The bumped record could not be persisted; the
                index keeps the previous count.
        """
        await self.hydrate()
        async with self._lock:
            current = self._index.get(hgvs)
            if current is None:
                return None
            bumped = current.model_copy(
                update={
                    "access_count": current.access_count + 1,
                    "updated_at": self._clock(),
                }
            )
            await self._persist(bumped)
            self._index[hgvs] = bumped
            return bumped

    async def store_variant(self, entry: VariantInput) -> VariantEntry:
        """Insert or replace a record, keeping an existing ``created_at`` and ``access_count``."""
        await self.hydrate()
        async with self._lock:
            now = self._clock()
            existing = self._index.get(entry.hgvs)
            stored = VariantEntry(
                hgvs=entry.hgvs,
                gene=entry.gene,
                interpretation=entry.interpretation,
                sources=list(entry.sources),
                created_at=existing.created_at if existing else now,
                updated_at=now,
                access_count=existing.access_count if existing else 0,
            )
            await self._persist(stored)
            self._index[entry.hgvs] = stored
            logger.debug("Stored variant %s in shard %s", entry.hgvs, self._name)
            return stored

    async def delete_variant(self, hgvs: str) -> None:
        """Remove a record from storage and the index; absent records are ignored."""
        await self.hydrate()
        async with self._lock:
            await self._storage.delete(hgvs)
            self._index.pop(hgvs, None)

    async def get_stats(self) -> RegistryStats:
        """Summarise every indexed entry.

        Unpaginated: the whole shard is returned, which only suits shards
        with a modest number of variants.
        """
        await self.hydrate()
        snapshot = list(self._index.values())
        return RegistryStats(
            total_variants=len(snapshot),
            variants=[entry.summary() for entry in snapshot],
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _persist(self, entry: VariantEntry) -> None:
        await self._storage.put(entry.hgvs, entry.model_dump_json())
