# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Variant and gene lookups composed from the cache tiers and data sources.

Lookups are cache-aside through :class:`FetchOrchestrator`.  Every
successful variant lookup is also recorded in the durable registry:
a freshly fetched variant is stored, a cached one has its access count
bumped, so access statistics outlive ephemeral cache expiry.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Any

from genomcp.cache.manager import CacheManager, get_cache_manager
from genomcp.core.constants import GENE_NAMESPACE, VARIANT_NAMESPACE, CacheTTL, KeyKind, Provenance
from genomcp.core.exceptions import (
    DeadlineExceededError,
    StorageError,
    UpstreamError,
    UpstreamNotFound,
    UpstreamTransientError,
)
from genomcp.models.fetch import BatchItem, FetchRequest, FetchResult
from genomcp.models.variant import VariantInput
from genomcp.orchestrator.fetch import FetchOrchestrator
from genomcp.orchestrator.keys import make_key
from genomcp.registry.namespace import RegistryNamespace, get_registry_namespace
from genomcp.registry.shard import VariantRegistry
from genomcp.sources.base import DataSource

logger = logging.getLogger("genomcp.services.variants")

# Module-level singleton
_service: VariantService | None = None


def summarize_variant(hgvs: str, record: dict[str, Any]) -> dict[str, Any]:
    """Reduce a MyVariant.info document to the fields the API reports."""
    clinvar = record.get("clinvar") or {}
    rcv = clinvar.get("rcv") or []
    if isinstance(rcv, dict):
        rcv = [rcv]
    first_rcv = rcv[0] if rcv else {}
    gnomad = record.get("gnomad_genome") or {}
    dbnsfp = record.get("dbnsfp") or {}
    polyphen = (dbnsfp.get("polyphen2") or {}).get("hdiv") or {}
    gene = record.get("gene") or {}

    return {
        "hgvs": hgvs,
        "gene": gene.get("symbol") or "Unknown",
        "clinvar": {
            "significance": first_rcv.get("clinical_significance", "Unknown"),
            "review_status": first_rcv.get("review_status"),
            "variant_id": clinvar.get("variant_id"),
            "allele_id": clinvar.get("allele_id"),
        }
        if clinvar
        else None,
        "gnomad": {
            "allele_frequency": gnomad.get("af"),
            "allele_count": gnomad.get("ac"),
            "allele_number": gnomad.get("an"),
        }
        if gnomad
        else None,
        "cadd": {"phred_score": (record.get("cadd") or {}).get("phred")}
        if record.get("cadd")
        else None,
        "predictions": {
            "revel": (dbnsfp.get("revel") or {}).get("score"),
            "sift": {
                "score": (dbnsfp.get("sift") or {}).get("score"),
                "prediction": (dbnsfp.get("sift") or {}).get("pred"),
            },
            "polyphen2": {
                "score": polyphen.get("score"),
                "prediction": polyphen.get("pred"),
            },
        },
    }


def error_code(exc: BaseException) -> str:
    """Stable, client-facing code for a failed lookup."""
    if isinstance(exc, UpstreamNotFound):
        return "not_found"
    if isinstance(exc, DeadlineExceededError):
        return "timeout"
    if isinstance(exc, UpstreamTransientError):
        return "upstream_unavailable"
    if isinstance(exc, UpstreamError):
        return "upstream_error"
    if isinstance(exc, StorageError):
        return "storage_error"
    return "internal_error"


class VariantService:
    """Variant interpretation and gene lookups behind the two cache tiers.

    Args:
        variants: Orchestrator over the ``variants`` cache.
        genes: Orchestrator over the ``genes`` cache.
        variant_source: Source of raw variant annotations.
        gene_source: Source of raw gene records.
        registry: Durable shard recording variant access statistics.
    """

    def __init__(
        self,
        variants: FetchOrchestrator,
        genes: FetchOrchestrator,
        variant_source: DataSource,
        gene_source: DataSource,
        registry: VariantRegistry,
    ) -> None:
        self._variants = variants
        self._genes = genes
        self._variant_source = variant_source
        self._gene_source = gene_source
        self._registry = registry

    @property
    def registry(self) -> VariantRegistry:
        return self._registry

    @property
    def variant_source_name(self) -> str:
        return self._variant_source.name

    # ------------------------------------------------------------------
    # Variants
    # ------------------------------------------------------------------

    def _variant_request(self, hgvs: str) -> FetchRequest:
        async def load() -> dict[str, Any]:
            record = await self._variant_source.fetch(hgvs)
            return summarize_variant(hgvs, record)

        return FetchRequest(key=make_key(KeyKind.VARIANT, hgvs), loader=load, ttl=CacheTTL.VARIANT)

    async def get_variant(self, hgvs: str) -> FetchResult:
        """Interpret one variant.

        Raises:
            UpstreamNotFound: MyVariant.info has no such variant.
            UpstreamError: The source failed.
            StorageError: The registry could not record the access.
        """
        request = self._variant_request(hgvs)
        result = await self._variants.fetch(request.key, request.loader, ttl=request.ttl)
        await self._record(result)
        return result

    async def interpret(self, hgvs_list: Iterable[str]) -> list[dict[str, Any]]:
        """Interpret several variants concurrently.

        Each variant succeeds or fails on its own; a failed item carries
        an ``error`` code and ``message`` instead of an interpretation.
        Repeated identifiers are looked up once and reported once.
        """
        unique = list(dict.fromkeys(h.strip() for h in hgvs_list if h.strip()))
        items = await self._variants.fetch_many([self._variant_request(h) for h in unique])

        async def settle(hgvs: str, item: BatchItem) -> dict[str, Any]:
            if item.ok:
                try:
                    await self._record(item.result)
                except StorageError as exc:
                    logger.error("Failed to record %s in registry: %s", hgvs, exc)
                    return _failure(hgvs, exc)
                return {**item.result.value, "source": str(item.result.source)}
            return _failure(hgvs, item.error)

        return list(await asyncio.gather(*(settle(h, i) for h, i in zip(unique, items, strict=True))))

    async def _record(self, result: FetchResult) -> None:
        value = result.value
        hgvs = value["hgvs"]
        if result.source is Provenance.CACHE:
            if await self._registry.get_variant(hgvs) is not None:
                return
        await self._registry.store_variant(
            VariantInput(
                hgvs=hgvs,
                gene=value.get("gene") or "",
                interpretation=value,
                sources=[self._variant_source.name],
            )
        )

    # ------------------------------------------------------------------
    # Genes
    # ------------------------------------------------------------------

    async def get_gene(self, symbol: str) -> FetchResult:
        """Look up a human gene by symbol (case-insensitive)."""
        normalised = symbol.strip().upper()

        async def load() -> dict[str, Any]:
            return await self._gene_source.fetch(normalised)

        return await self._genes.fetch(
            make_key(KeyKind.GENE, normalised), load, ttl=CacheTTL.GENE
        )

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    async def health(self) -> dict[str, bool]:
        sources = [self._variant_source, self._gene_source]
        results = await asyncio.gather(*(s.health_check() for s in sources))
        return {s.name: ok for s, ok in zip(sources, results, strict=True)}


def _failure(hgvs: str, exc: BaseException | None) -> dict[str, Any]:
    return {"hgvs": hgvs, "error": error_code(exc) if exc else "internal_error", "message": str(exc)}


def build_variant_service(
    cache_manager: CacheManager | None = None,
    registry_namespace: RegistryNamespace | None = None,
) -> VariantService:
    """Wire a :class:`VariantService` from settings and the process singletons."""
    from genomcp.core.config import get_settings
    from genomcp.sources.biothings import MyGeneSource, MyVariantSource

    settings = get_settings()
    caches = cache_manager or get_cache_manager()
    namespace = registry_namespace or get_registry_namespace()

    def orchestrator(cache_namespace: str) -> FetchOrchestrator:
        return FetchOrchestrator(
            caches.cache(cache_namespace),
            concurrency=settings.fetch_concurrency,
            timeout=settings.fetch_deadline,
        )

    return VariantService(
        variants=orchestrator(VARIANT_NAMESPACE),
        genes=orchestrator(GENE_NAMESPACE),
        variant_source=MyVariantSource(settings.myvariant_url, timeout=settings.upstream_timeout),
        gene_source=MyGeneSource(settings.mygene_url, timeout=settings.upstream_timeout),
        registry=namespace.get(),
    )


def get_variant_service() -> VariantService:
    """Return the module-level :class:`VariantService` singleton."""
    global _service
    if _service is None:
        _service = build_variant_service()
    return _service


def reset_variant_service() -> None:
    """Reset the singleton (useful for testing)."""
    global _service
    _service = None
