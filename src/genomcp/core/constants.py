# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Enumerations, TTL classes and cache namespace constants."""

from enum import IntEnum, StrEnum


class CacheTTL(IntEnum):
    """Time-to-live classes in seconds, selected by callers per data category."""

    DIAGNOSIS = 60 * 60
    VARIANT = 24 * 60 * 60
    GENE = 30 * 24 * 60 * 60


class Provenance(StrEnum):
    CACHE = "cache"
    SOURCE = "source"


class KeyKind(StrEnum):
    """Prefixes for deterministic keys derived from query parameters."""

    VARIANT = "variant"
    GENE = "gene"
    PHENOTYPE = "phenotype"
    DIAGNOSIS = "diagnosis"


VARIANT_NAMESPACE = "variants"
GENE_NAMESPACE = "genes"
PHENOTYPE_NAMESPACE = "phenotypes"
DIAGNOSIS_NAMESPACE = "diagnoses"

DEFAULT_SHARD = "global-stats"
