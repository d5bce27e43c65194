# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Namespaced JSON cache over a :class:`CacheBackend`.

:class:`KVCache` is what handlers and the fetch orchestrator talk to.
Several logical caches (``variants``, ``genes``) can share one physical
backend; keys are stored as ``"<namespace>:<key>"``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, TypeVar

from genomcp.cache.base import CacheBackend
from genomcp.core.deadline import Compute, run_with_deadline
from genomcp.core.exceptions import SerializationError

logger = logging.getLogger("genomcp.cache.kv")

T = TypeVar("T")


class CacheStats:
    """Simple hit/miss counter."""

    __slots__ = ("hits", "misses")

    def __init__(self) -> None:
        self.hits: int = 0
        self.misses: int = 0

    @property
    def total(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        return self.hits / self.total if self.total else 0.0

    def to_dict(self) -> dict[str, object]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "total": self.total,
            "hit_rate": round(self.hit_rate, 4),
        }


def validate_namespace(namespace: str) -> str:
    if not namespace or ":" in namespace:
        raise ValueError(f"Invalid cache namespace {namespace!r}: must be non-empty without ':'")
    return namespace


class KVCache:
    """JSON value cache scoped to one namespace.

    ``None`` doubles as the absent marker, so ``None`` itself is never
    stored.  A value read back that fails to decode is reported as a
    miss rather than served.

    Args:
        backend: Shared cache substrate.
        namespace: Logical cache name, e.g. ``"variants"``.
    """

    def __init__(self, backend: CacheBackend, namespace: str) -> None:
        self._backend = backend
        self._namespace = validate_namespace(namespace)
        self._stats = CacheStats()

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def stats(self) -> CacheStats:
        return self._stats

    def full_key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    # ------------------------------------------------------------------
    # Cache operations
    # ------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        """Return the cached value, or ``None`` when absent, expired or corrupt."""
        full_key = self.full_key(key)
        raw = await self._backend.get(full_key)
        if raw is None:
            self._stats.misses += 1
            logger.debug("Cache MISS for %s", full_key)
            return None
        try:
            value = _decode(raw)
        except SerializationError as exc:
            self._stats.misses += 1
            logger.warning("Discarding unreadable cache entry %s: %s", full_key, exc)
            return None
        self._stats.hits += 1
        logger.debug("Cache HIT for %s", full_key)
        return value

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store *value* under *key*, replacing any previous value.

        Args:
            key: Raw key within this namespace.
            value: JSON-compatible value; ``None`` is rejected.
            ttl: Seconds until expiry.  ``None`` means no expiry.

        Raises:
            SerializationError: *value* cannot be encoded as JSON.
            ValueError: *ttl* is not positive.
        """
        if ttl is not None and ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")
        if value is None:
            raise SerializationError("None cannot be cached; it marks an absent entry")
        full_key = self.full_key(key)
        await self._backend.set(full_key, _encode(value), ttl=ttl)
        logger.debug("Cached %s (ttl=%s)", full_key, ttl)

    async def delete(self, key: str) -> None:
        await self._backend.delete(self.full_key(key))

    async def has(self, key: str) -> bool:
        return await self.get(key) is not None

    async def get_or_set(
        self,
        key: str,
        compute: Compute[T],
        ttl: int | None = None,
        *,
        timeout: float | None = None,
    ) -> T:
        """Return the cached value or compute, store and return it.

        On a hit *compute* is not called.  On a miss it is called exactly
        once; its exceptions propagate unchanged and nothing is stored.
        A ``None`` result is returned without being cached.

        Raises:
            DeadlineExceededError: *compute* did not finish within *timeout*.
        """
        cached = await self.get(key)
        if cached is not None:
            return cached

        value = await run_with_deadline(
            compute, timeout=timeout, what=f"compute for {self.full_key(key)}"
        )
        if value is not None:
            await self.set(key, value, ttl=ttl)
        return value


def _encode(value: Any) -> str:
    try:
        return json.dumps(value, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"Value is not JSON-serialisable: {exc}") from exc


def _decode(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise SerializationError(f"Malformed cached payload: {exc}") from exc
