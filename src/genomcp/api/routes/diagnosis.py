# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Phenotype-driven diagnosis endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, field_validator

from genomcp.api.deps import diagnosis_service
from genomcp.services.diagnosis import DiagnosisService

router = APIRouter()


class DiagnosisRequest(BaseModel):
    phenotype: list[str] = Field(min_length=1, description="Observed phenotype terms")
    variants: list[str] = Field(min_length=1, max_length=100, description="HGVS identifiers")

    @field_validator("phenotype")
    @classmethod
    def _drop_blank_terms(cls, value: list[str]) -> list[str]:
        terms = [t.strip() for t in value if t.strip()]
        if not terms:
            raise ValueError("phenotype needs at least one non-blank term")
        return terms


@router.post("/diagnosis")
async def create_diagnosis(
    body: DiagnosisRequest,
    service: DiagnosisService = Depends(diagnosis_service),
) -> dict[str, Any]:
    """Build a diagnosis report; it stays retrievable for one hour."""
    return await service.diagnose(body.phenotype, body.variants)


@router.get("/diagnosis/{diagnosis_id}")
async def get_diagnosis(
    diagnosis_id: str,
    service: DiagnosisService = Depends(diagnosis_service),
) -> dict[str, Any]:
    report = await service.get_diagnosis(diagnosis_id)
    if report is None:
        raise HTTPException(
            status_code=404, detail=f"Diagnosis {diagnosis_id} not found or expired"
        )
    return report
