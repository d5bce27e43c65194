# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Upstream data source clients."""

from genomcp.sources.base import DataSource
from genomcp.sources.biothings import MyDiseaseSource, MyGeneSource, MyVariantSource

__all__ = ["DataSource", "MyDiseaseSource", "MyGeneSource", "MyVariantSource"]
