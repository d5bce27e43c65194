# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Variant interpretation endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from genomcp.api.deps import variant_service
from genomcp.services.variants import VariantService

router = APIRouter()


class InterpretRequest(BaseModel):
    variants: list[str] = Field(min_length=1, max_length=100, description="HGVS identifiers")


class InterpretResponse(BaseModel):
    count: int
    variants: list[dict[str, Any]]
    note: str = "Data from MyVariant.info (BioThings Suite)"


@router.post("/variants/interpret", response_model=InterpretResponse)
async def interpret_variants(
    body: InterpretRequest,
    service: VariantService = Depends(variant_service),
) -> InterpretResponse:
    """Interpret a batch of variants; each item succeeds or fails independently."""
    results = await service.interpret(body.variants)
    return InterpretResponse(count=len(results), variants=results)


@router.get("/variants/{hgvs:path}")
async def get_variant(
    hgvs: str,
    service: VariantService = Depends(variant_service),
) -> dict[str, Any]:
    """Interpret a single variant."""
    result = await service.get_variant(hgvs)
    return {**result.value, "source": str(result.source)}
