# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Fetch orchestration request and result types."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from genomcp.core.constants import Provenance

Loader = Callable[[], Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class FetchRequest:
    """One cache-aside lookup: a deterministic key and how to load it on a miss."""

    key: str
    loader: Loader
    ttl: int | None = None


@dataclass(frozen=True, slots=True)
class FetchResult:
    key: str
    value: Any
    source: Provenance

    @property
    def cache_hit(self) -> bool:
        return self.source is Provenance.CACHE


@dataclass(frozen=True, slots=True)
class BatchItem:
    """Outcome of one sub-query in a batch: either a result or the error it raised."""

    key: str
    result: FetchResult | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
