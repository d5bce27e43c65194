# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""FastAPI dependencies resolving the process-wide singletons.

Tests swap implementations through ``app.dependency_overrides``.
"""

from __future__ import annotations

from genomcp.cache.manager import CacheManager, get_cache_manager
from genomcp.registry.namespace import RegistryNamespace, get_registry_namespace
from genomcp.services.diagnosis import DiagnosisService, get_diagnosis_service
from genomcp.services.variants import VariantService, get_variant_service


def cache_manager() -> CacheManager:
    return get_cache_manager()


def registry_namespace() -> RegistryNamespace:
    return get_registry_namespace()


def variant_service() -> VariantService:
    return get_variant_service()


def diagnosis_service() -> DiagnosisService:
    return get_diagnosis_service()
