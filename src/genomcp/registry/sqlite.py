# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""SQLite-backed shard storage.

All shards share one database file and one :mod:`aiosqlite` connection;
rows are partitioned by shard name.  Every write is committed before
the call returns.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import aiosqlite

from genomcp.core.exceptions import StorageError
from genomcp.registry.storage import ShardStorage

logger = logging.getLogger("genomcp.registry.sqlite")

_CREATE_REGISTRY_ENTRIES = """
CREATE TABLE IF NOT EXISTS registry_entries (
    shard TEXT NOT NULL,
    key TEXT NOT NULL,
    value TEXT NOT NULL,
    written_at TEXT NOT NULL DEFAULT (datetime('now')),
    PRIMARY KEY (shard, key)
);
"""


class RegistryDatabase:
    """Lazily opened connection to the registry database.

    Args:
        db_path: SQLite file path, or ``":memory:"``.
    """

    def __init__(self, db_path: Path | str = "genomcp.db") -> None:
        self._db_path = str(db_path)
        self._conn: aiosqlite.Connection | None = None
        self._open_lock = asyncio.Lock()

    @property
    def db_path(self) -> str:
        return self._db_path

    async def connection(self) -> aiosqlite.Connection:
        """Return the open connection, connecting and creating the schema on first use."""
        if self._conn is not None:
            return self._conn
        async with self._open_lock:
            if self._conn is None:
                self._conn = await self._connect()
        return self._conn

    async def _connect(self) -> aiosqlite.Connection:
        conn: aiosqlite.Connection | None = None
        try:
            conn = await aiosqlite.connect(self._db_path)
            # Enable WAL mode for concurrent read performance
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute(_CREATE_REGISTRY_ENTRIES)
            await conn.commit()
        except aiosqlite.Error as exc:
            if conn is not None:
                await conn.close()
            msg = f"Failed to initialize registry database at {self._db_path}: {exc}"
            raise StorageError(msg) from exc
        logger.info("Registry database ready at %s", self._db_path)
        return conn

    def shard(self, name: str) -> SQLiteShardStorage:
        return SQLiteShardStorage(self, name)

    async def close(self) -> None:
        if self._conn is not None:
            await self._conn.close()
            self._conn = None


class SQLiteShardStorage(ShardStorage):
    """:class:`ShardStorage` over the ``registry_entries`` table."""

    def __init__(self, database: RegistryDatabase, shard: str) -> None:
        self._database = database
        self._shard = shard

    async def list(self) -> list[tuple[str, str]]:
        try:
            conn = await self._database.connection()
            cursor = await conn.execute(
                "SELECT key, value FROM registry_entries WHERE shard = ? ORDER BY rowid",
                (self._shard,),
            )
            rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise StorageError(f"Failed to list shard {self._shard!r}: {exc}") from exc
        return [(row[0], row[1]) for row in rows]

    async def get(self, key: str) -> str | None:
        try:
            conn = await self._database.connection()
            cursor = await conn.execute(
                "SELECT value FROM registry_entries WHERE shard = ? AND key = ?",
                (self._shard, key),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise StorageError(f"Failed to read {key!r} from shard {self._shard!r}: {exc}") from exc
        return row[0] if row is not None else None

    async def put(self, key: str, value: str) -> None:
        await self._write(
            """
            INSERT INTO registry_entries (shard, key, value)
            VALUES (?, ?, ?)
            ON CONFLICT (shard, key) DO UPDATE SET
                value = excluded.value,
                written_at = datetime('now')
            """,
            (self._shard, key, value),
            f"write {key!r} to",
        )

    async def delete(self, key: str) -> None:
        await self._write(
            "DELETE FROM registry_entries WHERE shard = ? AND key = ?",
            (self._shard, key),
            f"delete {key!r} from",
        )

    async def _write(self, query: str, params: tuple[str, ...], action: str) -> None:
        """Execute and commit one statement, rolling back on failure."""
        conn = await self._database.connection()
        try:
            await conn.execute(query, params)
            await conn.commit()
        except aiosqlite.Error as exc:
            try:
                await conn.rollback()
            except aiosqlite.Error as rollback_exc:
                logger.error("Rollback failed for shard %s: %s", self._shard, rollback_exc)
            raise StorageError(f"Failed to {action} shard {self._shard!r}: {exc}") from exc
