# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Pydantic data models."""

from genomcp.models.fetch import BatchItem, FetchRequest, FetchResult
from genomcp.models.variant import RegistryStats, VariantEntry, VariantInput, VariantSummary

__all__ = [
    "BatchItem",
    "FetchRequest",
    "FetchResult",
    "RegistryStats",
    "VariantEntry",
    "VariantInput",
    "VariantSummary",
]
