"""DiskCache-based key-value store adapter."""

import asyncio
import logging
import sqlite3
from pathlib import Path
from typing import Any

import diskcache  # type: ignore[import-untyped]

from kvfilecache.adapters.memory_store import KeyBuilder
from kvfilecache.cache.keys import CacheKey
from kvfilecache.config.settings import DEFAULT_PREFIX
from kvfilecache.core.errors import StoreError


logger = logging.getLogger(__name__)


class DiskCacheKeyValueStore:
    """Persistent store implementing KeyValueStoreProtocol on DiskCache.

    DiskCache provides SQLite-backed persistent storage with its own
    concurrency control. Blocking calls run in a worker thread. A lock
    timeout is reported as a failed write/delete; any other storage error
    raises StoreError.
    """

    def __init__(
        self,
        directory: Path | str,
        prefix: str = DEFAULT_PREFIX,
        key_builder: KeyBuilder | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize DiskCache store.

        Args:
            directory: Directory holding the DiskCache database
            prefix: Prefix for keys produced by the default key builder
            key_builder: Derives a key from caller parameters
            timeout: SQLite lock timeout in seconds
        """
        self.directory = Path(directory)
        self.prefix = prefix
        self._key_builder = key_builder or (
            lambda params: CacheKey.from_params(prefix, params)
        )

        self.directory.mkdir(parents=True, exist_ok=True)
        # Entries are managed by KeyValueCache; never let DiskCache evict them
        self._cache = diskcache.Cache(
            directory=str(self.directory),
            timeout=timeout,
            eviction_policy="none",
        )

        logger.debug("DiskCache store initialized at %s", self.directory)

    async def get_value(self, key: str) -> str | None:
        try:
            value = await asyncio.to_thread(self._cache.get, key)
        except (sqlite3.Error, OSError) as e:
            raise StoreError(f"DiskCache get failed: {e}", {"key": key}) from e

        if value is not None and not isinstance(value, str):
            logger.warning("Ignoring non-text value stored under %s", key)
            return None
        return value

    async def set_value(self, key: str, value: str) -> bool:
        try:
            result: bool = await asyncio.to_thread(self._cache.set, key, value)
        except diskcache.Timeout:
            logger.warning("DiskCache set timed out for key %s", key)
            return False
        except (sqlite3.Error, OSError) as e:
            raise StoreError(f"DiskCache set failed: {e}", {"key": key}) from e
        return result

    async def delete_key(self, key: str) -> bool:
        try:
            result: bool = await asyncio.to_thread(self._cache.delete, key)
        except diskcache.Timeout:
            logger.warning("DiskCache delete timed out for key %s", key)
            return False
        except (sqlite3.Error, OSError) as e:
            raise StoreError(f"DiskCache delete failed: {e}", {"key": key}) from e

        logger.debug("Deleted DiskCache key: %s (existed: %s)", key, result)
        return result

    async def list_all_keys(self) -> list[str]:
        try:
            keys = await asyncio.to_thread(lambda: list(self._cache.iterkeys()))
        except (sqlite3.Error, OSError) as e:
            raise StoreError(f"DiskCache key listing failed: {e}") from e
        return [key for key in keys if isinstance(key, str)]

    async def resolve_key(self, params: Any) -> str | None:
        return self._key_builder(params)

    def close(self) -> None:
        """Close the cache and release resources."""
        self._cache.close()
        logger.debug("DiskCache store closed")

    def __enter__(self) -> "DiskCacheKeyValueStore":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
