# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Durable, sharded variant registry."""

from genomcp.registry.namespace import RegistryNamespace, get_registry_namespace
from genomcp.registry.shard import VariantRegistry
from genomcp.registry.storage import MemoryShardStorage, MemoryStore, ShardStorage

__all__ = [
    "MemoryShardStorage",
    "MemoryStore",
    "RegistryNamespace",
    "ShardStorage",
    "VariantRegistry",
    "get_registry_namespace",
]
