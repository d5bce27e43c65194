# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Deterministic cache keys derived from query parameters."""

from __future__ import annotations

from collections.abc import Iterable


def make_key(kind: str, value: str) -> str:
    """``make_key("variant", "BRAF:c.1799T>A") -> "variant:BRAF:c.1799T>A"``."""
    return f"{kind}:{value}"


def make_composite_key(kind: str, values: Iterable[str]) -> str:
    """Key for a multi-parameter query, independent of parameter order.

    Values are stripped, de-duplicated and sorted before joining, so
    ``["seizure", "fever"]`` and ``["fever", "seizure"]`` share a key.
    """
    normalised = sorted({v.strip() for v in values if v.strip()})
    return f"{kind}:{','.join(normalised)}"
