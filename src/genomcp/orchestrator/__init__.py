# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Cache-aside fetch orchestration."""

from genomcp.orchestrator.fetch import FetchOrchestrator
from genomcp.orchestrator.keys import make_composite_key, make_key

__all__ = ["FetchOrchestrator", "make_composite_key", "make_key"]
