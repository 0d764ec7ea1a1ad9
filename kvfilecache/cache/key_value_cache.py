"""Key-value file cache engine.

``KeyValueCache`` keeps an approximate count of entries and total file size
for files tracked in an external key-value store, and evicts entries by age,
count and size. Storage, filesystem access and key derivation are injected.
"""

import asyncio
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from kvfilecache.cache.boot import BootSequencer
from kvfilecache.cache.codec import decode_entry, encode_entry
from kvfilecache.cache.counters import CacheCounters
from kvfilecache.cache.eviction import EvictionPolicies
from kvfilecache.cache.models import BootState, CacheEntry, CacheStats, now_millis
from kvfilecache.config.settings import CacheSettings
from kvfilecache.core.structlog_logger import StructlogMixin
from kvfilecache.protocols import FileSystemProtocol, KeyValueStoreProtocol


TKeyParams = TypeVar("TKeyParams")


class KeyValueCache(StructlogMixin, Generic[TKeyParams]):
    """Cache mapping key parameters to files, with automatic eviction.

    Every public operation waits for the one-time boot scan. Mutating
    operations hold a per-instance lock for their whole duration, so counter
    updates from different operations never interleave.

    Expected failures are reported as ``None``/``False``. Exceptions raised by
    the store or filesystem propagate unchanged.
    """

    def __init__(
        self,
        store: KeyValueStoreProtocol,
        filesystem: FileSystemProtocol,
        settings: CacheSettings,
        clock: Callable[[], int] | None = None,
    ):
        """Initialize the cache and start the boot scan.

        When no event loop is running, the scan starts on the first awaited
        operation instead.

        Args:
            store: Key-value capability holding the cache records
            filesystem: Filesystem capability holding the cached files
            settings: Prefix, age and capacity limits
            clock: Returns the current time in epoch milliseconds
        """
        super().__init__()
        self.store = store
        self.filesystem = filesystem
        self.settings = settings
        self.clock = clock or now_millis

        self._counters = CacheCounters()
        self._lock = asyncio.Lock()
        self._evictor = EvictionPolicies(
            store, filesystem, settings, self._counters, self.clock
        )
        self._boot = BootSequencer(self._evictor, self._counters)

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            self.logger.debug("boot_deferred")
        else:
            self._boot.start()

    @property
    def boot_state(self) -> BootState:
        return self._boot.state

    @property
    def is_ready(self) -> bool:
        return self._boot.is_ready

    async def wait_until_ready(self) -> None:
        """Wait for the boot scan to finish."""
        await self._boot.wait_until_ready()

    async def get(self, params: TKeyParams) -> str | None:
        """Get the cached file path for the given key parameters.

        Corrupt, orphaned and expired entries are removed on the way and
        reported as misses. A hit refreshes the entry's last access time.

        Args:
            params: Parameters the key is derived from

        Returns:
            The cached file path, or None if there is no usable entry
        """
        await self._boot.wait_until_ready()

        async with self._lock:
            try:
                file_path = await self._get(params)
            except Exception as e:
                self.log_error_with_context("cache_get_failed", e)
                raise

        if file_path is None:
            self._counters.miss_count += 1
        else:
            self._counters.hit_count += 1
        return file_path

    async def _get(self, params: TKeyParams) -> str | None:
        key = await self.store.resolve_key(params)
        if not key:
            return None

        raw = await self.store.get_value(key)
        if not raw:
            return None

        entry = decode_entry(raw)
        if entry is None:
            # Size of a corrupt record is unknown, so disk size stays as is
            self.logger.debug("corrupt_record_purged", key=key)
            await self._evictor.purge_key(key)
            return None

        if not await self.filesystem.exists(entry.file_path):
            # Missing files were never counted towards disk size
            self.logger.debug(
                "orphaned_record_purged", key=key, file_path=entry.file_path
            )
            await self._evictor.purge_key(key)
            return None

        evicted = await self._evictor.evict_if_expired(
            key, entry, self._evictor.eviction_threshold()
        )
        if evicted:
            return None

        refreshed = entry.touched(self.clock())
        if not await self.store.set_value(key, encode_entry(refreshed)):
            self.logger.debug("access_time_refresh_failed", key=key)

        return refreshed.file_path

    async def put(self, params: TKeyParams, file_path: str) -> bool:
        """Record a file for the given key parameters.

        Every successful write counts as a new entry, even when it overwrites
        an existing key. Count- and size-based cleanup run afterwards when a
        limit is reached.

        Args:
            params: Parameters the key is derived from
            file_path: Path of the file to cache

        Returns:
            True if the record was written
        """
        await self._boot.wait_until_ready()

        async with self._lock:
            key = await self.store.resolve_key(params)
            if not key:
                return False

            entry = CacheEntry(file_path=file_path, last_accessed=self.clock())
            try:
                written = await self.store.set_value(key, encode_entry(entry))
            except Exception as e:
                self.log_error_with_context("record_write_error", e, key=key)
                raise
            if not written:
                self.logger.debug("record_write_failed", key=key)
                return False

            self._counters.increment_entries()

            if await self.filesystem.exists(file_path):
                self._counters.add_disk_size(await self.filesystem.size(file_path))

            if self._counters.entries_count >= self.settings.max_entries:
                await self._evictor.clean_up_count()

            if self._counters.disk_size >= self.settings.max_cache_size:
                await self._evictor.clean_up_disk_size()

            self.logger.debug(
                "entry_stored",
                key=key,
                file_path=file_path,
                entries_count=self._counters.entries_count,
                disk_size=self._counters.disk_size,
            )
            return True

    async def delete(self, params: TKeyParams) -> bool:
        """Delete the entry for the given key parameters and unlink its file.

        Args:
            params: Parameters the key is derived from

        Returns:
            True if the record existed and was deleted from the store
        """
        await self._boot.wait_until_ready()

        async with self._lock:
            key = await self.store.resolve_key(params)
            if not key:
                return False

            raw = await self.store.get_value(key)
            if not raw:
                return False

            if not await self.store.delete_key(key):
                self.logger.debug("record_delete_failed", key=key)
                return False

            self._counters.decrement_entries()

            entry = decode_entry(raw)
            if entry is not None:
                await self._evictor.remove_backing_file(entry.file_path)

            return True

    async def clean_expired_entries(self) -> bool:
        """Evict every entry older than ``eviction_millis``.

        Returns:
            True if at least one entry was evicted
        """
        await self._boot.wait_until_ready()

        async with self._lock:
            return await self._evictor.clean_expired_entries()

    async def get_current_entries_count(self) -> int:
        """Return the approximate number of entries."""
        await self._boot.wait_until_ready()
        return self._counters.entries_count

    async def get_current_disk_size(self) -> int:
        """Return the approximate total size of cached files in bytes."""
        await self._boot.wait_until_ready()
        return self._counters.disk_size

    async def get_stats(self) -> CacheStats:
        """Return a snapshot of counters and request statistics."""
        await self._boot.wait_until_ready()
        return self._counters.snapshot()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(prefix={self.settings.prefix!r}, "
            f"state={self._boot.state.value})"
        )


def create_key_value_cache(
    store: KeyValueStoreProtocol,
    filesystem: FileSystemProtocol,
    settings: CacheSettings | None = None,
    clock: Callable[[], int] | None = None,
) -> KeyValueCache[Any]:
    """Create a cache engine, loading settings from the environment if omitted.

    Args:
        store: Key-value capability
        filesystem: Filesystem capability
        settings: Cache settings (defaults to CacheSettings())
        clock: Epoch-milliseconds clock

    Returns:
        Configured KeyValueCache
    """
    return KeyValueCache(store, filesystem, settings or CacheSettings(), clock)
