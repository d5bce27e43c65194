# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""genomcp - Caching gateway for public genomic and pharmacogenomic APIs."""

__version__ = "0.1.0"

__all__ = ["__version__"]
