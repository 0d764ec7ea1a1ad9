"""Reference implementations of the store and filesystem capabilities."""

from .diskcache_store import DiskCacheKeyValueStore
from .file_system_adapter import LocalFileSystemAdapter
from .memory_store import KeyBuilder, MemoryKeyValueStore


__all__ = [
    "DiskCacheKeyValueStore",
    "KeyBuilder",
    "LocalFileSystemAdapter",
    "MemoryKeyValueStore",
]
