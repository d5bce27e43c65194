# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Health check endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from genomcp import __version__
from genomcp.api.deps import variant_service
from genomcp.services.variants import VariantService

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    backends: dict[str, bool]


@router.get("/health", response_model=HealthResponse)
async def health(
    response: Response,
    service: VariantService = Depends(variant_service),
) -> HealthResponse:
    """Report service version and upstream reachability (503 when degraded)."""
    backends = await service.health()
    healthy = all(backends.values())
    if not healthy:
        response.status_code = 503
    return HealthResponse(
        status="healthy" if healthy else "degraded",
        service="genomcp",
        version=__version__,
        backends=backends,
    )
