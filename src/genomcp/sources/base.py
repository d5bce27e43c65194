# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Abstract upstream data source capability."""

from __future__ import annotations

import abc
from typing import Any


class DataSource(abc.ABC):
    """A public API the gateway reads records from.

    :meth:`fetch` returns the raw record as decoded JSON or raises one of
    :class:`~genomcp.core.exceptions.UpstreamNotFound`,
    :class:`~genomcp.core.exceptions.UpstreamTransientError` or
    :class:`~genomcp.core.exceptions.UpstreamError`.  Retries are the
    client's business, not the cache layer's.
    """

    name: str = "source"

    @abc.abstractmethod
    async def fetch(self, query: str) -> dict[str, Any]:
        """Fetch the raw record identified by *query*."""

    @abc.abstractmethod
    async def health_check(self) -> bool:
        """Return ``True`` when the upstream API is reachable."""
