# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Shared test fixtures and configuration."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from genomcp.core.exceptions import UpstreamNotFound
from genomcp.sources.base import DataSource


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeWallClock:
    """Manually advanced UTC clock for registry timestamps."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeSource(DataSource):
    """In-memory data source counting fetches per query."""

    def __init__(self, name: str, records: dict[str, dict[str, Any]] | None = None) -> None:
        self.name = name
        self.records = records or {}
        self.errors: dict[str, Exception] = {}
        self.calls: dict[str, int] = {}
        self.healthy = True

    async def fetch(self, query: str) -> dict[str, Any]:
        self.calls[query] = self.calls.get(query, 0) + 1
        if query in self.errors:
            raise self.errors[query]
        if query not in self.records:
            raise UpstreamNotFound(f"{query} not found", source=self.name, status_code=404)
        return self.records[query]

    async def health_check(self) -> bool:
        return self.healthy


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def wall_clock() -> FakeWallClock:
    return FakeWallClock()


@pytest.fixture(autouse=True)
def _reset_singletons():
    """Reset process-wide singletons between tests."""
    from genomcp.cache.manager import reset_cache_manager
    from genomcp.registry.namespace import reset_registry_namespace
    from genomcp.services.diagnosis import reset_diagnosis_service
    from genomcp.services.variants import reset_variant_service

    reset_cache_manager()
    reset_registry_namespace()
    reset_variant_service()
    reset_diagnosis_service()
    yield
    reset_cache_manager()
    reset_registry_namespace()
    reset_variant_service()
    reset_diagnosis_service()


@pytest.fixture
def make_source():
    """Factory for :class:`FakeSource` instances."""
    return FakeSource
