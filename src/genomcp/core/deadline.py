# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Deadline helpers shared by the cache and the fetch orchestrator."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from genomcp.core.exceptions import DeadlineExceededError

T = TypeVar("T")

Compute = Callable[[], Awaitable[T] | T]


async def call_compute(compute: Compute[T]) -> T:
    """Invoke a sync or async zero-argument callable and return its value."""
    result: Any = compute()
    if inspect.isawaitable(result):
        result = await result
    return result


async def run_with_deadline(
    compute: Compute[T],
    *,
    timeout: float | None = None,
    deadline: float | None = None,
    what: str = "operation",
) -> T:
    """Run *compute*, aborting it past a relative *timeout* or an absolute *deadline*.

    *deadline* is expressed on the running loop's clock
    (:meth:`asyncio.AbstractEventLoop.time`).  When both are given the
    earlier one wins.  Blocking (non-awaiting) callables cannot be
    interrupted and only fail once they return.

    Raises:
        DeadlineExceededError: The time budget elapsed first.
    """
    if timeout is None and deadline is None:
        return await call_compute(compute)

    loop = asyncio.get_running_loop()
    when = deadline
    if timeout is not None:
        relative = loop.time() + timeout
        when = relative if when is None else min(when, relative)

    budget = asyncio.timeout_at(when)
    try:
        async with budget:
            return await call_compute(compute)
    except TimeoutError as exc:
        if not budget.expired():
            raise
        raise DeadlineExceededError(f"{what} exceeded its deadline") from exc
