# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Cache-aside orchestration between handlers and upstream data sources.

Every upstream consumer goes through :class:`FetchOrchestrator`:

1. look the key up in the ephemeral cache and return it tagged
   ``cache`` on a hit;
2. on a miss call the loader once, tagged ``source``, and cache the
   value with the caller's TTL class;
3. on failure propagate the error and cache nothing.

Concurrent fetches of one key through the same orchestrator share a
single outstanding loader call.  Deadlines belong to callers: each one
waits for the shared load under its own budget, and the load is
cancelled once every caller waiting on it has gone.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

from genomcp.cache.kv import KVCache
from genomcp.core.constants import Provenance
from genomcp.core.deadline import call_compute, run_with_deadline
from genomcp.models.fetch import BatchItem, FetchRequest, FetchResult, Loader

logger = logging.getLogger("genomcp.orchestrator.fetch")

_DEFAULT_CONCURRENCY = 5


class FetchOrchestrator:
    """Cache-aside fetches with single-flight coalescing and batch fan-out.

    Args:
        cache: Namespaced cache holding the results.
        concurrency: Maximum loader calls in flight during :meth:`fetch_many`.
        timeout: Default per-call deadline in seconds; ``None`` disables it.
    """

    def __init__(
        self,
        cache: KVCache,
        *,
        concurrency: int = _DEFAULT_CONCURRENCY,
        timeout: float | None = None,
    ) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        self._cache = cache
        self._concurrency = concurrency
        self._timeout = timeout
        self._inflight: dict[str, asyncio.Task[Any]] = {}
        self._waiters: dict[asyncio.Task[Any], int] = {}

    @property
    def cache(self) -> KVCache:
        return self._cache

    async def fetch(
        self,
        key: str,
        loader: Loader,
        *,
        ttl: int | None = None,
        timeout: float | None = None,
        deadline: float | None = None,
    ) -> FetchResult:
        """Return the cached value for *key*, or load, cache and return it.

        Args:
            key: Deterministic key within the cache namespace.
            loader: Coroutine function calling the data source.
            ttl: TTL class for a freshly loaded value.
            timeout: Seconds this caller waits for the value; defaults to
                the orchestrator's timeout.
            deadline: Absolute deadline on the event loop clock for this
                caller.

        Raises:
            UpstreamError: The loader failed; nothing was cached.
            DeadlineExceededError: This caller's budget ran out first.
        """
        cached = await self._cache.get(key)
        if cached is not None:
            return FetchResult(key=key, value=cached, source=Provenance.CACHE)

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._load(key, loader, ttl))
            self._inflight[key] = task
            task.add_done_callback(lambda done: self._forget(key, done))
        else:
            logger.debug("Joining in-flight fetch for %s", key)

        # Each caller waits under its own budget; the shared load has none.
        self._waiters[task] = self._waiters.get(task, 0) + 1
        try:
            value = await run_with_deadline(
                lambda: asyncio.shield(task),
                timeout=timeout if timeout is not None else self._timeout,
                deadline=deadline,
                what=f"fetch of {key}",
            )
        finally:
            self._release(key, task)
        return FetchResult(key=key, value=value, source=Provenance.SOURCE)

    async def fetch_many(
        self,
        requests: Sequence[FetchRequest],
        *,
        timeout: float | None = None,
    ) -> list[BatchItem]:
        """Run independent cache-aside fetches concurrently.

        Results come back in request order once every item has settled.
        A failing item records its exception without affecting its
        siblings.  *timeout* bounds the whole batch: items still loading
        when it elapses fail with ``DeadlineExceededError``.
        """
        budget = timeout if timeout is not None else self._timeout
        deadline = asyncio.get_running_loop().time() + budget if budget is not None else None
        semaphore = asyncio.Semaphore(self._concurrency)

        async def _one(request: FetchRequest) -> BatchItem:
            async with semaphore:
                try:
                    result = await self.fetch(
                        request.key, request.loader, ttl=request.ttl, deadline=deadline
                    )
                except Exception as exc:
                    logger.info("Batch item %s failed: %s", request.key, exc)
                    return BatchItem(key=request.key, error=exc)
                return BatchItem(key=request.key, result=result)

        return list(await asyncio.gather(*(_one(r) for r in requests)))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _load(self, key: str, loader: Loader, ttl: int | None) -> Any:
        logger.debug("Fetching %s from source", key)
        value = await call_compute(loader)
        if value is not None:
            await self._cache.set(key, value, ttl=ttl)
        return value

    def _release(self, key: str, task: asyncio.Task[Any]) -> None:
        remaining = self._waiters[task] - 1
        if remaining:
            self._waiters[task] = remaining
            return
        del self._waiters[task]
        if not task.done():
            # Nobody is left to receive the value.
            logger.debug("Abandoning in-flight fetch for %s", key)
            self._forget(key, task)
            task.cancel()

    def _forget(self, key: str, task: asyncio.Task[Any]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
