# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Durable variant registry endpoints, addressed per shard."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from genomcp.api.deps import registry_namespace
from genomcp.models.variant import RegistryStats, VariantEntry, VariantInput
from genomcp.registry.namespace import RegistryNamespace

router = APIRouter()


class StoreResponse(BaseModel):
    success: bool
    entry: VariantEntry


class DeleteResponse(BaseModel):
    success: bool


@router.get("/registry/{shard}/stats", response_model=RegistryStats)
async def registry_stats(
    shard: str,
    namespace: RegistryNamespace = Depends(registry_namespace),
) -> RegistryStats:
    return await namespace.get(shard).get_stats()


@router.get("/registry/{shard}/variants/{hgvs:path}", response_model=VariantEntry)
async def registry_get_variant(
    shard: str,
    hgvs: str,
    namespace: RegistryNamespace = Depends(registry_namespace),
) -> VariantEntry:
    """Fetch a registry record; each successful read bumps its access count."""
    entry = await namespace.get(shard).get_variant(hgvs)
    if entry is None:
        raise HTTPException(status_code=404, detail="Variant not found")
    return entry


@router.put("/registry/{shard}/variants", response_model=StoreResponse)
async def registry_store_variant(
    shard: str,
    body: VariantInput,
    namespace: RegistryNamespace = Depends(registry_namespace),
) -> StoreResponse:
    entry = await namespace.get(shard).store_variant(body)
    return StoreResponse(success=True, entry=entry)


@router.delete("/registry/{shard}/variants/{hgvs:path}", response_model=DeleteResponse)
async def registry_delete_variant(
    shard: str,
    hgvs: str,
    namespace: RegistryNamespace = Depends(registry_namespace),
) -> DeleteResponse:
    await namespace.get(shard).delete_variant(hgvs)
    return DeleteResponse(success=True)
