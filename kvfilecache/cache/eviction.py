"""Eviction policies for the key-value file cache.

All three policies (age, count, size) remove entries through the same
age-eviction predicate. Count- and size-based cleanup therefore only remove
entries that are also past ``eviction_millis``; when every entry is fresh the
configured limits are soft.
"""

import asyncio
import logging
from collections.abc import Callable

from kvfilecache.cache.codec import decode_entry
from kvfilecache.cache.counters import CacheCounters
from kvfilecache.cache.models import CacheEntry
from kvfilecache.config.settings import CacheSettings
from kvfilecache.protocols import FileSystemProtocol, KeyValueStoreProtocol


logger = logging.getLogger(__name__)


class EvictionPolicies:
    """Scan and eviction routines shared by the cache engine and boot scan.

    Callers are responsible for serializing access; none of these methods
    take the engine lock themselves.
    """

    def __init__(
        self,
        store: KeyValueStoreProtocol,
        filesystem: FileSystemProtocol,
        settings: CacheSettings,
        counters: CacheCounters,
        clock: Callable[[], int],
    ):
        self.store = store
        self.filesystem = filesystem
        self.settings = settings
        self.counters = counters
        self.clock = clock

    def eviction_threshold(self) -> int:
        """Entries last accessed before this epoch-millis value are expired."""
        return self.clock() - self.settings.eviction_millis

    async def list_our_keys(self) -> list[str]:
        """List store keys carrying the configured prefix."""
        all_keys = await self.store.list_all_keys()
        return [key for key in all_keys if key.startswith(self.settings.prefix)]

    async def purge_key(self, key: str) -> bool:
        """Delete a corrupt or orphaned record, decrementing the entry count."""
        deleted = await self.store.delete_key(key)
        if deleted:
            self.counters.decrement_entries()
        else:
            logger.debug("Failed to purge cache key %s", key)
        return deleted

    async def remove_backing_file(self, file_path: str) -> None:
        """Unlink a cached file, subtracting its size if the unlink succeeds."""
        if not await self.filesystem.exists(file_path):
            return

        file_size = await self.filesystem.size(file_path)
        if await self.filesystem.unlink(file_path):
            self.counters.subtract_disk_size(file_size)
        else:
            logger.debug("Failed to unlink cached file %s", file_path)

    async def evict_if_expired(
        self, key: str, entry: CacheEntry, eviction_threshold: int
    ) -> bool:
        """Evict an entry if it was last accessed before the threshold.

        Returns:
            True if the entry's key was deleted
        """
        if not entry.is_expired(eviction_threshold):
            return False

        if not await self.store.delete_key(key):
            logger.debug("Failed to delete expired cache key %s", key)
            return False

        self.counters.decrement_entries()
        self.counters.eviction_count += 1
        await self.remove_backing_file(entry.file_path)

        logger.debug("Evicted expired cache entry %s (%s)", key, entry.file_path)
        return True

    async def _load_entry(self, key: str) -> tuple[str, CacheEntry] | None:
        raw = await self.store.get_value(key)
        if not raw:
            return None

        entry = decode_entry(raw)
        if entry is None:
            await self.purge_key(key)
            return None

        return key, entry

    async def list_oldest_first(self) -> list[tuple[str, CacheEntry]]:
        """Load every valid entry, least recently accessed first.

        Records that fail to decode are purged along the way.
        """
        keys = await self.list_our_keys()
        loaded = await asyncio.gather(*(self._load_entry(key) for key in keys))

        entries = [item for item in loaded if item is not None]
        entries.sort(key=lambda item: item[1].last_accessed)
        return entries

    async def clean_expired_entries(self) -> bool:
        """Evict every expired entry concurrently.

        Returns:
            True if at least one entry was evicted
        """
        entries = await self.list_oldest_first()
        threshold = self.eviction_threshold()

        results = await asyncio.gather(
            *(self.evict_if_expired(key, entry, threshold) for key, entry in entries)
        )
        evicted = sum(1 for result in results if result)
        if evicted:
            logger.debug("Cleaned %d expired cache entries", evicted)
        return evicted > 0

    async def clean_up_count(self) -> None:
        """Walk entries oldest first until the entry count is within limits."""
        if self.counters.entries_count - self.settings.max_entries <= 0:
            return

        entries = await self.list_oldest_first()
        threshold = self.eviction_threshold()

        for key, entry in entries:
            if self.counters.entries_count <= self.settings.max_entries:
                break
            await self.evict_if_expired(key, entry, threshold)

    async def clean_up_disk_size(self) -> None:
        """Walk entries oldest first until the disk size is within limits."""
        if self.counters.disk_size - self.settings.max_cache_size <= 0:
            return

        entries = await self.list_oldest_first()
        threshold = self.eviction_threshold()

        for key, entry in entries:
            if self.counters.disk_size <= self.settings.max_cache_size:
                break
            await self.evict_if_expired(key, entry, threshold)
