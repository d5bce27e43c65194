# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for the ephemeral cache: backends, TTL expiry, namespacing and get_or_set."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from genomcp.cache.base import CacheBackend
from genomcp.cache.kv import CacheStats, KVCache
from genomcp.cache.manager import CacheManager, _create_backend_from_settings, get_cache_manager
from genomcp.cache.memory import MemoryCacheBackend
from genomcp.cache.redis import RedisCacheBackend
from genomcp.core.constants import CacheTTL
from genomcp.core.exceptions import (
    ConfigurationError,
    DeadlineExceededError,
    SerializationError,
    StorageError,
    UpstreamNotFound,
)

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def memory_backend(clock) -> MemoryCacheBackend:
    return MemoryCacheBackend(max_size=128, clock=clock)


@pytest.fixture
def variants(memory_backend: MemoryCacheBackend) -> KVCache:
    return KVCache(memory_backend, "variants")


# ---------------------------------------------------------------------------
# MemoryCacheBackend
# ---------------------------------------------------------------------------


class TestMemoryCacheBackend:
    def test_is_subclass(self) -> None:
        assert issubclass(MemoryCacheBackend, CacheBackend)

    async def test_get_set(self, memory_backend: MemoryCacheBackend) -> None:
        await memory_backend.set("k1", "v1")
        assert await memory_backend.get("k1") == "v1"

    async def test_get_missing(self, memory_backend: MemoryCacheBackend) -> None:
        assert await memory_backend.get("nonexistent") is None

    async def test_delete(self, memory_backend: MemoryCacheBackend) -> None:
        await memory_backend.set("k1", "v1")
        assert await memory_backend.delete("k1") is True
        assert await memory_backend.delete("k1") is False
        assert await memory_backend.get("k1") is None

    async def test_ttl_boundary(self, memory_backend: MemoryCacheBackend, clock) -> None:
        await memory_backend.set("k1", "v1", ttl=10)

        clock.advance(9)
        assert await memory_backend.get("k1") == "v1"

        clock.advance(1)
        assert await memory_backend.get("k1") is None
        assert await memory_backend.exists("k1") is False

    async def test_ttl_none_means_no_expiry(
        self, memory_backend: MemoryCacheBackend, clock
    ) -> None:
        await memory_backend.set("k1", "v1", ttl=None)
        clock.advance(10 * 365 * 24 * 3600)
        assert await memory_backend.get("k1") == "v1"

    async def test_overwrite_resets_ttl(self, memory_backend: MemoryCacheBackend, clock) -> None:
        await memory_backend.set("k1", "old", ttl=10)
        clock.advance(8)
        await memory_backend.set("k1", "new", ttl=10)
        clock.advance(8)
        assert await memory_backend.get("k1") == "new"
        assert await memory_backend.size() == 1

    async def test_size_ignores_expired(self, memory_backend: MemoryCacheBackend, clock) -> None:
        await memory_backend.set("k1", "v1", ttl=1)
        await memory_backend.set("k2", "v2", ttl=None)
        clock.advance(2)
        assert await memory_backend.size() == 1

    async def test_delete_expired_reports_absent(
        self, memory_backend: MemoryCacheBackend, clock
    ) -> None:
        await memory_backend.set("k1", "v1", ttl=1)
        clock.advance(5)
        assert await memory_backend.delete("k1") is False

    async def test_lru_eviction(self) -> None:
        backend = MemoryCacheBackend(max_size=3)
        await backend.set("a", "1")
        await backend.set("b", "2")
        await backend.set("c", "3")
        await backend.get("a")
        await backend.set("d", "4")

        assert await backend.get("a") == "1"
        assert await backend.get("b") is None
        assert await backend.get("d") == "4"

    async def test_clear(self, memory_backend: MemoryCacheBackend) -> None:
        await memory_backend.set("a", "1")
        await memory_backend.set("b", "2")
        assert await memory_backend.clear() == 2
        assert await memory_backend.size() == 0


# ---------------------------------------------------------------------------
# RedisCacheBackend
# ---------------------------------------------------------------------------


class TestRedisCacheBackend:
    @pytest.fixture
    def client(self) -> MagicMock:
        client = MagicMock()
        client.get = AsyncMock(return_value=None)
        client.set = AsyncMock()
        client.delete = AsyncMock(return_value=1)
        client.exists = AsyncMock(return_value=0)
        client.aclose = AsyncMock()
        return client

    async def test_keys_are_prefixed(self, client: MagicMock) -> None:
        client.get.return_value = "v1"
        backend = RedisCacheBackend(client=client)

        assert await backend.get("variants:k1") == "v1"
        client.get.assert_awaited_once_with("genomcp:cache:variants:k1")

    async def test_set_passes_ttl_as_expiry(self, client: MagicMock) -> None:
        backend = RedisCacheBackend(client=client)
        await backend.set("k1", "v1", ttl=CacheTTL.VARIANT)
        client.set.assert_awaited_once_with("genomcp:cache:k1", "v1", ex=86400)

    async def test_set_without_ttl(self, client: MagicMock) -> None:
        backend = RedisCacheBackend(client=client)
        await backend.set("k1", "v1")
        client.set.assert_awaited_once_with("genomcp:cache:k1", "v1", ex=None)

    async def test_outage_raises_storage_error(self, client: MagicMock) -> None:
        client.get.side_effect = RedisConnectionError("connection refused")
        backend = RedisCacheBackend(client=client)

        with pytest.raises(StorageError, match="connection refused"):
            await backend.get("k1")

    async def test_close(self, client: MagicMock) -> None:
        backend = RedisCacheBackend(client=client)
        await backend.close()
        client.aclose.assert_awaited_once()


# ---------------------------------------------------------------------------
# KVCache
# ---------------------------------------------------------------------------


class TestKVCache:
    async def test_set_then_get_returns_exact_object(self, variants: KVCache, clock) -> None:
        record = {"hgvs": "BRAF:c.1799T>A", "gene": "BRAF", "cadd": {"phred_score": 32.0}}
        await variants.set("variant:BRAF:c.1799T>A", record, ttl=86400)

        assert await variants.get("variant:BRAF:c.1799T>A") == record

        clock.advance(86401)
        assert await variants.get("variant:BRAF:c.1799T>A") is None

    async def test_keys_are_namespaced(self, memory_backend: MemoryCacheBackend) -> None:
        variant = KVCache(memory_backend, "variant")
        variants = KVCache(memory_backend, "variants")
        await variant.set("x", 1)
        await variants.set("x", 2)

        assert await variant.get("x") == 1
        assert await variants.get("x") == 2
        assert await memory_backend.get("variants:x") == "2"

    @pytest.mark.parametrize("namespace", ["", "a:b"])
    def test_invalid_namespace(self, memory_backend: MemoryCacheBackend, namespace: str) -> None:
        with pytest.raises(ValueError):
            KVCache(memory_backend, namespace)

    async def test_delete_is_idempotent(self, variants: KVCache) -> None:
        await variants.set("k", {"a": 1})
        await variants.delete("k")
        await variants.delete("k")
        assert await variants.has("k") is False

    async def test_has(self, variants: KVCache, clock) -> None:
        assert await variants.has("k") is False
        await variants.set("k", [1, 2], ttl=5)
        assert await variants.has("k") is True
        clock.advance(5)
        assert await variants.has("k") is False

    async def test_last_write_wins(self, variants: KVCache) -> None:
        await variants.set("k", "first")
        await variants.set("k", "second")
        assert await variants.get("k") == "second"

    async def test_falsy_values_are_hits(self, variants: KVCache) -> None:
        await variants.set("empty", {})
        await variants.set("zero", 0)
        assert await variants.get("empty") == {}
        assert await variants.get("zero") == 0

    async def test_corrupt_payload_is_a_miss(
        self, variants: KVCache, memory_backend: MemoryCacheBackend
    ) -> None:
        await memory_backend.set("variants:k", "{not json")
        assert await variants.get("k") is None
        assert variants.stats.misses == 1

    async def test_unserialisable_value_rejected(self, variants: KVCache) -> None:
        with pytest.raises(SerializationError):
            await variants.set("k", {"when": object()})

    async def test_none_value_rejected(self, variants: KVCache) -> None:
        with pytest.raises(SerializationError):
            await variants.set("k", None)

    @pytest.mark.parametrize("ttl", [0, -1])
    async def test_non_positive_ttl_rejected(self, variants: KVCache, ttl: int) -> None:
        with pytest.raises(ValueError):
            await variants.set("k", 1, ttl=ttl)

    async def test_stats(self, variants: KVCache) -> None:
        await variants.get("missing")
        await variants.set("k", 1)
        await variants.get("k")
        assert variants.stats.to_dict() == {"hits": 1, "misses": 1, "total": 2, "hit_rate": 0.5}


class TestGetOrSet:
    async def test_miss_computes_once_and_stores(self, variants: KVCache) -> None:
        compute = AsyncMock(return_value={"gene": "TP53"})

        value = await variants.get_or_set("k", compute, ttl=CacheTTL.VARIANT)

        assert value == {"gene": "TP53"}
        compute.assert_awaited_once()
        assert await variants.get("k") == {"gene": "TP53"}

    async def test_hit_skips_compute(self, variants: KVCache) -> None:
        await variants.set("k", "cached")
        compute = AsyncMock(return_value="fresh")

        assert await variants.get_or_set("k", compute) == "cached"
        compute.assert_not_awaited()

    async def test_sync_compute(self, variants: KVCache) -> None:
        assert await variants.get_or_set("k", lambda: [1, 2, 3]) == [1, 2, 3]
        assert await variants.get("k") == [1, 2, 3]

    async def test_failure_propagates_and_is_not_cached(self, variants: KVCache) -> None:
        error = UpstreamNotFound("no such variant", source="myvariant", status_code=404)
        failing = AsyncMock(side_effect=error)

        with pytest.raises(UpstreamNotFound) as exc_info:
            await variants.get_or_set("k", failing)
        assert exc_info.value is error
        assert await variants.has("k") is False

        succeeding = AsyncMock(return_value="ok")
        assert await variants.get_or_set("k", succeeding) == "ok"
        succeeding.assert_awaited_once()

    async def test_ttl_applies_to_computed_value(self, variants: KVCache, clock) -> None:
        await variants.get_or_set("k", AsyncMock(return_value=1), ttl=CacheTTL.DIAGNOSIS)
        clock.advance(CacheTTL.DIAGNOSIS - 1)
        assert await variants.get("k") == 1
        clock.advance(1)
        assert await variants.get("k") is None

    async def test_none_result_not_cached(self, variants: KVCache) -> None:
        compute = AsyncMock(return_value=None)
        assert await variants.get_or_set("k", compute) is None
        assert await variants.get_or_set("k", compute) is None
        assert compute.await_count == 2

    async def test_timeout_raises_and_caches_nothing(self, variants: KVCache) -> None:
        async def slow() -> str:
            await asyncio.sleep(10)
            return "late"

        with pytest.raises(DeadlineExceededError) as exc_info:
            await variants.get_or_set("k", slow, timeout=0.01)
        assert isinstance(exc_info.value, TimeoutError)
        assert await variants.has("k") is False

    async def test_inner_timeout_error_is_not_rewrapped(self, variants: KVCache) -> None:
        async def fails() -> str:
            raise TimeoutError("upstream socket timeout")

        with pytest.raises(TimeoutError) as exc_info:
            await variants.get_or_set("k", fails, timeout=5)
        assert not isinstance(exc_info.value, DeadlineExceededError)

    async def test_storage_outage_propagates(self) -> None:
        backend = MagicMock(spec=CacheBackend)
        backend.get = AsyncMock(side_effect=StorageError("redis down"))
        kv = KVCache(backend, "variants")
        compute = AsyncMock(return_value=1)

        with pytest.raises(StorageError):
            await kv.get_or_set("k", compute)
        compute.assert_not_awaited()


# ---------------------------------------------------------------------------
# CacheManager
# ---------------------------------------------------------------------------


class TestCacheManager:
    async def test_cache_is_memoized_per_namespace(self) -> None:
        mgr = CacheManager()
        assert mgr.cache("variants") is mgr.cache("variants")
        assert mgr.cache("variants") is not mgr.cache("genes")
        assert mgr.namespaces == ["genes", "variants"]

    async def test_namespaces_share_backend(self) -> None:
        mgr = CacheManager()
        await mgr.cache("variants").set("a", 1)
        await mgr.cache("genes").set("a", 2)
        assert await mgr.size() == 2
        assert await mgr.clear() == 2
        assert await mgr.cache("variants").get("a") is None

    async def test_stats_aggregate(self) -> None:
        mgr = CacheManager()
        await mgr.cache("variants").get("missing")
        await mgr.cache("genes").set("k", 1)
        await mgr.cache("genes").get("k")
        stats = mgr.stats
        assert isinstance(stats, CacheStats)
        assert (stats.hits, stats.misses) == (1, 1)

    def test_singleton(self) -> None:
        assert get_cache_manager() is get_cache_manager()

    def test_memory_backend_from_settings(self, monkeypatch) -> None:
        monkeypatch.setenv("GENOMCP_CACHE_BACKEND", "memory")
        monkeypatch.setenv("GENOMCP_CACHE_MAX_SIZE", "16")
        backend = _create_backend_from_settings()
        assert isinstance(backend, MemoryCacheBackend)
        assert backend._max_size == 16

    def test_redis_backend_from_settings(self, monkeypatch) -> None:
        monkeypatch.setenv("GENOMCP_CACHE_BACKEND", "redis")
        monkeypatch.setenv("GENOMCP_REDIS_URL", "redis://cache.internal:6379/2")
        assert isinstance(_create_backend_from_settings(), RedisCacheBackend)

    def test_unknown_backend(self, monkeypatch) -> None:
        monkeypatch.setenv("GENOMCP_CACHE_BACKEND", "memcached")
        with pytest.raises(ConfigurationError):
            _create_backend_from_settings()
