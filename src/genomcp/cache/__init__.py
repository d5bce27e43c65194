# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Ephemeral TTL cache tier."""

from genomcp.cache.kv import CacheStats, KVCache
from genomcp.cache.manager import CacheManager, get_cache_manager

__all__ = ["CacheManager", "CacheStats", "KVCache", "get_cache_manager"]
