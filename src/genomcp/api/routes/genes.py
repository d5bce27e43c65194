# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Gene lookup endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from genomcp.api.deps import variant_service
from genomcp.services.variants import VariantService

router = APIRouter()


@router.get("/genes/{symbol}")
async def get_gene(
    symbol: str,
    service: VariantService = Depends(variant_service),
) -> dict[str, Any]:
    result = await service.get_gene(symbol)
    return {"symbol": symbol.upper(), "gene": result.value, "source": str(result.source)}
