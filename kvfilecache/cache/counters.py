"""In-memory accounting for the cache engine."""

from dataclasses import dataclass

from kvfilecache.cache.models import CacheStats


@dataclass
class CacheCounters:
    """Approximate aggregate state of the cache.

    Neither ``entries_count`` nor ``disk_size`` ever goes negative: a
    decrement that would take a counter below zero is ignored.
    """

    entries_count: int = 0
    disk_size: int = 0
    hit_count: int = 0
    miss_count: int = 0
    eviction_count: int = 0

    def reset(self, entries_count: int, disk_size: int) -> None:
        """Replace the aggregate counters with freshly scanned values."""
        self.entries_count = max(entries_count, 0)
        self.disk_size = max(disk_size, 0)

    def increment_entries(self) -> None:
        self.entries_count += 1

    def decrement_entries(self) -> None:
        if self.entries_count > 0:
            self.entries_count -= 1

    def add_disk_size(self, size: int) -> None:
        if size > 0:
            self.disk_size += size

    def subtract_disk_size(self, size: int) -> None:
        if self.disk_size >= size:
            self.disk_size -= size

    def snapshot(self) -> CacheStats:
        """Copy the counters into a CacheStats value."""
        return CacheStats(
            entries_count=self.entries_count,
            disk_size=self.disk_size,
            hit_count=self.hit_count,
            miss_count=self.miss_count,
            eviction_count=self.eviction_count,
        )
