# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Durable variant registry records."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class VariantInput(BaseModel):
    """Caller-supplied part of a registry record."""

    hgvs: str = Field(min_length=1, description="Variant identifier, e.g. BRAF:c.1799T>A")
    gene: str = ""
    # Upstream-derived payload; shape varies per data source.
    interpretation: Any = Field(default_factory=dict)
    sources: list[str] = Field(default_factory=list)


class VariantEntry(VariantInput):
    """A stored registry record with access telemetry."""

    model_config = ConfigDict(frozen=True)

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    access_count: int = Field(default=0, ge=0)

    def summary(self) -> VariantSummary:
        return VariantSummary(
            hgvs=self.hgvs,
            gene=self.gene,
            access_count=self.access_count,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class VariantSummary(BaseModel):
    hgvs: str
    gene: str
    access_count: int
    created_at: datetime
    updated_at: datetime


class RegistryStats(BaseModel):
    total_variants: int = 0
    variants: list[VariantSummary] = Field(default_factory=list)
