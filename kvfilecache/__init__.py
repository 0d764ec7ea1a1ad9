"""kvfilecache - file cache accounting and eviction over a key-value store.

Provides an async engine that tracks cached files in an injected key-value
store, keeps approximate entry and disk-size counters, and evicts entries by
age, count and size.
"""

from pathlib import Path
from typing import Any

from kvfilecache.adapters import (
    DiskCacheKeyValueStore,
    LocalFileSystemAdapter,
    MemoryKeyValueStore,
)
from kvfilecache.cache import (
    BootState,
    CacheEntry,
    CacheKey,
    CacheStats,
    KeyValueCache,
    create_key_value_cache,
)
from kvfilecache.config import CacheSettings, LoggingSettings, load_settings
from kvfilecache.core.errors import (
    ConfigError,
    FileSystemError,
    KvFileCacheError,
    StoreError,
)
from kvfilecache.protocols import FileSystemProtocol, KeyValueStoreProtocol


__version__ = "0.1.0"


def create_memory_cache(
    settings: CacheSettings | None = None,
    filesystem: FileSystemProtocol | None = None,
) -> KeyValueCache[Any]:
    """Create a cache whose records live in process memory.

    Args:
        settings: Cache settings (defaults to CacheSettings())
        filesystem: Filesystem capability (defaults to the local disk)

    Returns:
        Configured KeyValueCache
    """
    settings = settings or CacheSettings()
    return create_key_value_cache(
        MemoryKeyValueStore(prefix=settings.prefix),
        filesystem or LocalFileSystemAdapter(),
        settings,
    )


def create_diskcache_backed_cache(
    directory: Path | str,
    settings: CacheSettings | None = None,
    filesystem: FileSystemProtocol | None = None,
) -> KeyValueCache[Any]:
    """Create a cache whose records persist in a DiskCache database.

    Args:
        directory: Directory for the DiskCache database
        settings: Cache settings (defaults to CacheSettings())
        filesystem: Filesystem capability (defaults to the local disk)

    Returns:
        Configured KeyValueCache
    """
    settings = settings or CacheSettings()
    return create_key_value_cache(
        DiskCacheKeyValueStore(directory, prefix=settings.prefix),
        filesystem or LocalFileSystemAdapter(),
        settings,
    )


__all__ = [
    "BootState",
    "CacheEntry",
    "CacheKey",
    "CacheSettings",
    "CacheStats",
    "ConfigError",
    "DiskCacheKeyValueStore",
    "FileSystemError",
    "FileSystemProtocol",
    "KeyValueCache",
    "KeyValueStoreProtocol",
    "KvFileCacheError",
    "LocalFileSystemAdapter",
    "LoggingSettings",
    "MemoryKeyValueStore",
    "StoreError",
    "create_diskcache_backed_cache",
    "create_key_value_cache",
    "create_memory_cache",
    "load_settings",
    "__version__",
]
