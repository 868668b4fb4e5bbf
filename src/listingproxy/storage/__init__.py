"""Storage modules for listing data persistence.

This package provides the file-backed listings snapshot and the in-memory
cache for broker and lease space payloads.
"""

from .memory import CacheEntry, MemoryCache
from .snapshot import CorruptCache, SnapshotNotFound, SnapshotStore

__all__ = [
    "SnapshotStore",
    "SnapshotNotFound",
    "CorruptCache",
    "MemoryCache",
    "CacheEntry",
]
