# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Domain services consumed by the API and CLI."""

from genomcp.services.diagnosis import DiagnosisService, get_diagnosis_service
from genomcp.services.variants import VariantService, get_variant_service

__all__ = ["DiagnosisService", "VariantService", "get_diagnosis_service", "get_variant_service"]
