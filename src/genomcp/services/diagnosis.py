# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Phenotype-driven diagnosis reports assembled from the cached lookups.

A report combines candidate conditions for the patient's phenotype
(cached under an order-independent composite key) with the
interpretation of each submitted variant.  Finished reports are kept in
the ``diagnoses`` cache for :attr:`CacheTTL.DIAGNOSIS` so clients can
fetch them again by ID.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any

from genomcp.cache.kv import KVCache
from genomcp.cache.manager import CacheManager, get_cache_manager
from genomcp.core.constants import DIAGNOSIS_NAMESPACE, PHENOTYPE_NAMESPACE, CacheTTL, KeyKind
from genomcp.models.fetch import FetchResult
from genomcp.orchestrator.fetch import FetchOrchestrator
from genomcp.orchestrator.keys import make_composite_key, make_key
from genomcp.services.variants import VariantService, get_variant_service
from genomcp.sources.base import DataSource

logger = logging.getLogger("genomcp.services.diagnosis")

_FALLBACK_CONDITION = "Genetic predisposition"
_MAX_CANDIDATES = 5

# Module-level singleton
_service: DiagnosisService | None = None


def _utcnow() -> datetime:
    return datetime.now(UTC)


def new_diagnosis_id() -> str:
    return f"dx_{uuid.uuid4().hex[:12]}"


def normalise_terms(phenotype: Iterable[str]) -> list[str]:
    """Stripped, de-duplicated, sorted phenotype terms."""
    return sorted({t.strip() for t in phenotype if t.strip()})


def condition_summary(hit: dict[str, Any]) -> dict[str, Any]:
    """Reduce a MyDisease.info hit to an ID and a display name."""
    mondo = hit.get("mondo") or {}
    ontology = hit.get("disease_ontology") or {}
    return {
        "id": hit.get("_id"),
        "name": mondo.get("label") or ontology.get("name") or hit.get("_id"),
        "score": hit.get("_score"),
    }


_PATHOGENIC = {"pathogenic", "likely pathogenic", "pathogenic/likely pathogenic"}


def _is_pathogenic(item: dict[str, Any]) -> bool:
    significance = (item.get("clinvar") or {}).get("significance") or ""
    return significance.strip().lower() in _PATHOGENIC


class DiagnosisService:
    """Builds, caches and retrieves diagnosis reports.

    Args:
        phenotypes: Orchestrator over the ``phenotypes`` cache.
        diagnoses: Cache holding finished reports.
        disease_source: Maps phenotype text to candidate conditions.
        variants: Variant interpretation service.
        clock: Source of "now" for report timestamps.
        id_factory: Produces new report IDs.
    """

    def __init__(
        self,
        phenotypes: FetchOrchestrator,
        diagnoses: KVCache,
        disease_source: DataSource,
        variants: VariantService,
        *,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = new_diagnosis_id,
    ) -> None:
        self._phenotypes = phenotypes
        self._diagnoses = diagnoses
        self._disease_source = disease_source
        self._variants = variants
        self._clock = clock
        self._id_factory = id_factory

    async def candidate_conditions(self, phenotype: Iterable[str]) -> FetchResult:
        """Look up conditions matching a set of phenotype terms.

        The cache key ignores term order and repeats, so ``["seizure",
        "fever"]`` and ``["fever", "seizure"]`` share one entry.

        Raises:
            ValueError: No non-blank term was given.
        """
        terms = normalise_terms(phenotype)
        if not terms:
            raise ValueError("At least one phenotype term is required")
        query = " OR ".join(terms)

        async def load() -> dict[str, Any]:
            return await self._disease_source.fetch(query)

        return await self._phenotypes.fetch(
            make_composite_key(KeyKind.PHENOTYPE, terms), load, ttl=CacheTTL.GENE
        )

    async def diagnose(self, phenotype: Iterable[str], hgvs_list: Iterable[str]) -> dict[str, Any]:
        """Assemble a report, cache it under ``diagnosis:<id>`` and return it.

        Variant lookups fail per item inside the report; a failed
        phenotype lookup fails the whole report.
        """
        terms = normalise_terms(phenotype)
        conditions = await self.candidate_conditions(terms)
        interpretations = await self._variants.interpret(hgvs_list)

        found = [i for i in interpretations if "error" not in i]
        genes = sorted({i["gene"] for i in found if i.get("gene") not in (None, "", "Unknown")})
        pathogenic = [
            {
                "hgvs": i["hgvs"],
                "gene": i.get("gene"),
                "significance": (i.get("clinvar") or {}).get("significance"),
            }
            for i in found
            if _is_pathogenic(i)
        ]
        candidates = [condition_summary(h) for h in conditions.value.get("hits", [])]
        top = candidates[0] if candidates else None

        diagnosis_id = self._id_factory()
        report = {
            "diagnosis_id": diagnosis_id,
            "timestamp": self._clock().isoformat(),
            "phenotype": terms,
            "primary_diagnosis": {
                "condition": top["name"] if top else _FALLBACK_CONDITION,
                "condition_id": top["id"] if top else None,
                "supporting_genes": genes,
                "supporting_variants": pathogenic,
            },
            "candidate_conditions": candidates[:_MAX_CANDIDATES],
            "variants": interpretations,
            "interpretation": {
                "summary": (
                    f"Patient presents with {', '.join(terms)} and {len(interpretations)} "
                    f"genetic variants affecting {', '.join(genes) or 'no identified genes'}"
                ),
                "genetic_counseling_recommended": bool(pathogenic),
            },
            "sources": self._sources(conditions, found),
        }

        await self._diagnoses.set(
            make_key(KeyKind.DIAGNOSIS, diagnosis_id), report, ttl=CacheTTL.DIAGNOSIS
        )
        logger.info(
            "Diagnosis %s: %d variants, %d pathogenic",
            diagnosis_id,
            len(interpretations),
            len(pathogenic),
        )
        return report

    async def get_diagnosis(self, diagnosis_id: str) -> dict[str, Any] | None:
        """Return a cached report, or ``None`` once it has expired or never existed."""
        return await self._diagnoses.get(make_key(KeyKind.DIAGNOSIS, diagnosis_id))

    def _sources(
        self, conditions: FetchResult, found: list[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        sources = [
            {
                "source": self._disease_source.name,
                "query_type": "phenotype_mapping",
                "cache_hit": conditions.cache_hit,
            }
        ]
        sources.extend(
            {
                "source": self._variants.variant_source_name,
                "query_type": "variant_interpretation",
                "hgvs": i["hgvs"],
                "cache_hit": i.get("source") == "cache",
            }
            for i in found
        )
        return sources


def build_diagnosis_service(
    cache_manager: CacheManager | None = None,
    variant_service: VariantService | None = None,
) -> DiagnosisService:
    """Wire a :class:`DiagnosisService` from settings and the process singletons."""
    from genomcp.core.config import get_settings
    from genomcp.sources.biothings import MyDiseaseSource

    settings = get_settings()
    caches = cache_manager or get_cache_manager()

    return DiagnosisService(
        phenotypes=FetchOrchestrator(
            caches.cache(PHENOTYPE_NAMESPACE),
            concurrency=settings.fetch_concurrency,
            timeout=settings.fetch_deadline,
        ),
        diagnoses=caches.cache(DIAGNOSIS_NAMESPACE),
        disease_source=MyDiseaseSource(settings.mydisease_url, timeout=settings.upstream_timeout),
        variants=variant_service or get_variant_service(),
    )


def get_diagnosis_service() -> DiagnosisService:
    """Return the module-level :class:`DiagnosisService` singleton."""
    global _service
    if _service is None:
        _service = build_diagnosis_service()
    return _service


def reset_diagnosis_service() -> None:
    """Reset the singleton (useful for testing)."""
    global _service
    _service = None
