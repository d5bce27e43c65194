# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Cache management API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from genomcp.api.deps import cache_manager
from genomcp.cache.manager import CacheManager

router = APIRouter()


class CacheClearResponse(BaseModel):
    cleared: int
    message: str


class CacheStatsResponse(BaseModel):
    hits: int
    misses: int
    total: int
    hit_rate: float
    size: int
    namespaces: list[str]


@router.post("/cache/clear", response_model=CacheClearResponse)
async def clear_cache(mgr: CacheManager = Depends(cache_manager)) -> CacheClearResponse:
    """Flush the ephemeral cache (the durable registry is untouched)."""
    count = await mgr.clear()
    return CacheClearResponse(cleared=count, message=f"Cleared {count} cached entries")


@router.get("/cache/stats", response_model=CacheStatsResponse)
async def cache_stats(mgr: CacheManager = Depends(cache_manager)) -> CacheStatsResponse:
    """Show cache hit/miss statistics and current size."""
    stats = mgr.stats
    current_size = await mgr.size()
    return CacheStatsResponse(
        hits=stats.hits,
        misses=stats.misses,
        total=stats.total,
        hit_rate=round(stats.hit_rate, 4),
        size=current_size,
        namespaces=mgr.namespaces,
    )
