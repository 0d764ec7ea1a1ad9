"""One-time boot scan reconciling counters with the backing store."""

import asyncio
import logging

from kvfilecache.cache.codec import decode_entry
from kvfilecache.cache.counters import CacheCounters
from kvfilecache.cache.eviction import EvictionPolicies
from kvfilecache.cache.models import BootState


logger = logging.getLogger(__name__)


class BootSequencer:
    """Runs the boot scan exactly once and lets every caller await it.

    The scan counts valid entries and sums the sizes of their files.
    Undecodable records and records whose file is missing are deleted from
    the store on the way. The counters are only written once the scan has
    finished, so purges during boot do not decrement them.
    """

    def __init__(self, evictor: EvictionPolicies, counters: CacheCounters):
        self.evictor = evictor
        self.counters = counters
        self.state = BootState.PENDING
        self._task: asyncio.Task[None] | None = None

    @property
    def is_ready(self) -> bool:
        return self.state is BootState.READY

    def start(self) -> "asyncio.Task[None]":
        """Start the scan if it has not been started; return the shared task.

        Must be called with a running event loop.
        """
        if self._task is None:
            self.state = BootState.BOOTING
            self._task = asyncio.get_running_loop().create_task(
                self._run(), name="kvfilecache-boot"
            )
        return self._task

    async def wait_until_ready(self) -> None:
        """Wait for the boot scan, re-raising its error if it failed."""
        if self.state is BootState.READY:
            return
        # Shielded so a cancelled caller does not cancel the shared scan
        await asyncio.shield(self.start())

    async def _run(self) -> None:
        try:
            entries_count, disk_size = await self._scan()
        except Exception:
            self.state = BootState.FAILED
            logger.error(
                "Cache boot scan failed",
                exc_info=logger.isEnabledFor(logging.DEBUG),
            )
            raise

        self.counters.reset(entries_count, disk_size)
        self.state = BootState.READY
        logger.info(
            "Cache booted with %d entries (%d bytes)", entries_count, disk_size
        )

    async def _scan(self) -> tuple[int, int]:
        store = self.evictor.store
        filesystem = self.evictor.filesystem

        entries_count = 0
        disk_size = 0
        for key in await self.evictor.list_our_keys():
            raw = await store.get_value(key)
            if not raw:
                continue

            entry = decode_entry(raw)
            if entry is None:
                logger.debug("Deleting corrupt cache record %s during boot", key)
                await store.delete_key(key)
                continue

            if not await filesystem.exists(entry.file_path):
                logger.debug("Deleting orphaned cache record %s during boot", key)
                await store.delete_key(key)
                continue

            entries_count += 1
            disk_size += await filesystem.size(entry.file_path)

        return entries_count, disk_size
