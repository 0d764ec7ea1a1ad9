"""Cache data models and types."""

import time
from dataclasses import dataclass
from enum import Enum

from pydantic import Field, StrictInt, StrictStr

from kvfilecache.models.base import KvFileCacheBaseModel


def now_millis() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class CacheEntry(KvFileCacheBaseModel):
    """Record stored under a cache key.

    Serialized as ``{"filePath": ..., "lastAccessed": ...}``. Unknown fields
    in stored records are ignored so that newer writers stay readable.
    """

    file_path: StrictStr = Field(alias="filePath")
    last_accessed: StrictInt = Field(alias="lastAccessed", gt=0)

    def is_expired(self, eviction_threshold: int) -> bool:
        """Check whether the entry was last accessed before the threshold."""
        return self.last_accessed < eviction_threshold

    def touched(self, now: int) -> "CacheEntry":
        """Return a copy of this entry accessed at ``now``."""
        return CacheEntry(file_path=self.file_path, last_accessed=now)


class BootState(str, Enum):
    """Lifecycle of the one-time boot scan."""

    PENDING = "pending"
    BOOTING = "booting"
    READY = "ready"
    FAILED = "failed"


@dataclass
class CacheStats:
    """Snapshot of cache counters and request statistics.

    ``entries_count`` and ``disk_size`` are approximate: they are maintained
    incrementally and may drift when collaborators fail part way through an
    operation.
    """

    entries_count: int
    disk_size: int
    hit_count: int
    miss_count: int
    eviction_count: int

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate as percentage."""
        total_requests = self.hit_count + self.miss_count
        if total_requests == 0:
            return 0.0
        return (self.hit_count / total_requests) * 100.0

    @property
    def miss_rate(self) -> float:
        """Calculate cache miss rate as percentage."""
        return 100.0 - self.hit_rate
