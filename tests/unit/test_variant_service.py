# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for the variant service: cache-aside lookups recorded in the registry."""

from __future__ import annotations

import pytest

from genomcp.cache.kv import KVCache
from genomcp.cache.manager import CacheManager
from genomcp.cache.memory import MemoryCacheBackend
from genomcp.core.constants import CacheTTL, Provenance
from genomcp.core.exceptions import (
    DeadlineExceededError,
    StorageError,
    UpstreamError,
    UpstreamNotFound,
    UpstreamTransientError,
)
from genomcp.orchestrator.fetch import FetchOrchestrator
from genomcp.registry.namespace import RegistryNamespace
from genomcp.registry.shard import VariantRegistry
from genomcp.registry.storage import MemoryShardStorage, MemoryStore
from genomcp.services.variants import (
    VariantService,
    build_variant_service,
    error_code,
    get_variant_service,
    summarize_variant,
)

BRAF = "BRAF:c.1799T>A"
TP53 = "TP53:p.R248Q"

BRAF_DOC = {
    "gene": {"symbol": "BRAF"},
    "clinvar": {
        "rcv": [{"clinical_significance": "Pathogenic", "review_status": "expert panel"}],
        "variant_id": 13961,
        "allele_id": 29000,
    },
    "gnomad_genome": {"af": 0.00001, "ac": 2, "an": 152000},
    "cadd": {"phred": 32},
    "dbnsfp": {
        "revel": {"score": 0.93},
        "sift": {"score": 0.0, "pred": "D"},
        "polyphen2": {"hdiv": {"score": 0.97, "pred": "D"}},
    },
}
TP53_DOC = {"gene": {"symbol": "TP53"}, "clinvar": {"rcv": {"clinical_significance": "Pathogenic"}}}


class FailingStorage(MemoryShardStorage):
    def __init__(self) -> None:
        super().__init__()
        self.fail = False

    async def put(self, key: str, value: str) -> None:
        if self.fail:
            raise StorageError("disk full")
        await super().put(key, value)


@pytest.fixture
def variant_source(make_source):
    return make_source("myvariant", {BRAF: BRAF_DOC, TP53: TP53_DOC})


@pytest.fixture
def gene_source(make_source):
    return make_source("mygene", {"BRAF": {"symbol": "BRAF", "entrezgene": 673}})


@pytest.fixture
def backend(clock) -> MemoryCacheBackend:
    return MemoryCacheBackend(clock=clock)


@pytest.fixture
def storage() -> FailingStorage:
    return FailingStorage()


@pytest.fixture
def service(backend, storage, variant_source, gene_source) -> VariantService:
    return VariantService(
        variants=FetchOrchestrator(KVCache(backend, "variants")),
        genes=FetchOrchestrator(KVCache(backend, "genes")),
        variant_source=variant_source,
        gene_source=gene_source,
        registry=VariantRegistry("global-stats", storage),
    )


class TestSummarizeVariant:
    def test_full_record(self) -> None:
        summary = summarize_variant(BRAF, BRAF_DOC)
        assert summary["hgvs"] == BRAF
        assert summary["gene"] == "BRAF"
        assert summary["clinvar"]["significance"] == "Pathogenic"
        assert summary["clinvar"]["variant_id"] == 13961
        assert summary["gnomad"]["allele_number"] == 152000
        assert summary["cadd"] == {"phred_score": 32}
        assert summary["predictions"]["polyphen2"] == {"score": 0.97, "prediction": "D"}

    def test_single_rcv_object(self) -> None:
        summary = summarize_variant(TP53, TP53_DOC)
        assert summary["clinvar"]["significance"] == "Pathogenic"
        assert summary["gnomad"] is None
        assert summary["cadd"] is None

    def test_sparse_record(self) -> None:
        summary = summarize_variant("X:1", {})
        assert summary["gene"] == "Unknown"
        assert summary["clinvar"] is None
        assert summary["predictions"]["sift"] == {"score": None, "prediction": None}


class TestErrorCode:
    @pytest.mark.parametrize(
        ("exc", "code"),
        [
            (UpstreamNotFound("x"), "not_found"),
            (DeadlineExceededError("x"), "timeout"),
            (UpstreamTransientError("x"), "upstream_unavailable"),
            (UpstreamError("x"), "upstream_error"),
            (StorageError("x"), "storage_error"),
            (RuntimeError("x"), "internal_error"),
        ],
    )
    def test_codes(self, exc: Exception, code: str) -> None:
        assert error_code(exc) == code


class TestGetVariant:
    async def test_first_lookup_stores_in_registry(self, service: VariantService) -> None:
        result = await service.get_variant(BRAF)

        assert result.source is Provenance.SOURCE
        assert result.value["gene"] == "BRAF"
        entry = (await service.registry.get_stats()).variants[0]
        assert entry.hgvs == BRAF
        assert entry.gene == "BRAF"
        assert entry.access_count == 0

    async def test_cached_lookup_bumps_access_count(
        self, service: VariantService, variant_source
    ) -> None:
        await service.get_variant(BRAF)
        second = await service.get_variant(BRAF)
        third = await service.get_variant(BRAF)

        assert second.source is Provenance.CACHE
        assert third.source is Provenance.CACHE
        assert variant_source.calls[BRAF] == 1
        assert (await service.registry.get_stats()).variants[0].access_count == 2

    async def test_cache_expiry_refetches(
        self, service: VariantService, variant_source, clock
    ) -> None:
        await service.get_variant(BRAF)
        clock.advance(CacheTTL.VARIANT + 1)

        result = await service.get_variant(BRAF)

        assert result.source is Provenance.SOURCE
        assert variant_source.calls[BRAF] == 2

    async def test_registry_entry_restored_on_cache_hit(
        self, service: VariantService
    ) -> None:
        await service.get_variant(BRAF)
        await service.registry.delete_variant(BRAF)

        await service.get_variant(BRAF)

        stats = await service.registry.get_stats()
        assert [v.hgvs for v in stats.variants] == [BRAF]

    async def test_not_found_propagates(self, service: VariantService) -> None:
        with pytest.raises(UpstreamNotFound):
            await service.get_variant("KRAS:p.G12D")
        assert (await service.registry.get_stats()).total_variants == 0

    async def test_storage_failure_propagates(self, service: VariantService, storage) -> None:
        storage.fail = True
        with pytest.raises(StorageError):
            await service.get_variant(BRAF)


class TestInterpret:
    async def test_mixed_batch(self, service: VariantService, variant_source) -> None:
        variant_source.errors[TP53] = UpstreamTransientError("HTTP 503", source="myvariant")

        results = await service.interpret([BRAF, "KRAS:p.G12D", TP53])

        assert [r["hgvs"] for r in results] == [BRAF, "KRAS:p.G12D", TP53]
        assert results[0]["gene"] == "BRAF"
        assert results[0]["source"] == "source"
        assert results[1]["error"] == "not_found"
        assert results[2]["error"] == "upstream_unavailable"
        assert "HTTP 503" in results[2]["message"]

    async def test_duplicates_and_blanks_collapsed(
        self, service: VariantService, variant_source
    ) -> None:
        results = await service.interpret([BRAF, f" {BRAF} ", "", BRAF])

        assert len(results) == 1
        assert variant_source.calls[BRAF] == 1

    async def test_cached_items_report_cache(self, service: VariantService) -> None:
        await service.get_variant(BRAF)

        results = await service.interpret([BRAF, TP53])

        assert [r["source"] for r in results] == ["cache", "source"]

    async def test_registry_failure_fails_item_only(
        self, service: VariantService, storage
    ) -> None:
        storage.fail = True

        results = await service.interpret([BRAF])

        assert results == [{"hgvs": BRAF, "error": "storage_error", "message": "disk full"}]


class TestGetGene:
    async def test_symbol_normalised(self, service: VariantService, gene_source) -> None:
        first = await service.get_gene(" braf ")
        second = await service.get_gene("BRAF")

        assert first.value["entrezgene"] == 673
        assert first.key == "gene:BRAF"
        assert second.source is Provenance.CACHE
        assert gene_source.calls == {"BRAF": 1}

    async def test_unknown_gene(self, service: VariantService) -> None:
        with pytest.raises(UpstreamNotFound):
            await service.get_gene("NOPE")


class TestHealth:
    async def test_reports_each_source(self, service: VariantService, gene_source) -> None:
        gene_source.healthy = False
        assert await service.health() == {"myvariant": True, "mygene": False}


class TestWiring:
    def test_build_uses_given_singletons(self, monkeypatch) -> None:
        monkeypatch.setenv("GENOMCP_MYVARIANT_URL", "https://myvariant.test/v1")
        monkeypatch.setenv("GENOMCP_FETCH_CONCURRENCY", "3")
        manager = CacheManager(MemoryCacheBackend())
        namespace = RegistryNamespace(MemoryStore().shard, default_shard="cohort-a")

        service = build_variant_service(manager, namespace)

        assert service.registry is namespace.get("cohort-a")
        assert manager.namespaces == ["genes", "variants"]
        assert service._variant_source.base_url == "https://myvariant.test/v1"
        assert service._variants._concurrency == 3

    def test_singleton(self, monkeypatch) -> None:
        monkeypatch.setenv("GENOMCP_CACHE_BACKEND", "memory")
        monkeypatch.setenv("GENOMCP_REGISTRY_BACKEND", "memory")
        assert get_variant_service() is get_variant_service()
