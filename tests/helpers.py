"""Test doubles and helpers shared across the kvfilecache test suite."""

import asyncio
from typing import Any

from kvfilecache.adapters import MemoryKeyValueStore
from kvfilecache.cache import CacheEntry, encode_entry


NOW = 1_700_000_000_000
DAY_MILLIS = 86_400_000


class FakeClock:
    """Epoch-milliseconds clock that only moves when told to."""

    def __init__(self, now: int = NOW):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, millis: int) -> None:
        self.now += millis


def key_for(params: Any) -> str | None:
    """Key builder used by tests: ``{"id": "k1"}`` maps to ``IMG:k1``."""
    if not params:
        return None
    if "raw" in params:
        return params["raw"]
    return f"IMG:{params['id']}"


class RecordingKeyValueStore(MemoryKeyValueStore):
    """Memory store that records calls and can be told to fail."""

    def __init__(self, initial: dict[str, str] | None = None):
        super().__init__(prefix="IMG", key_builder=key_for, initial=initial)
        self.calls: list[tuple[str, ...]] = []
        self.fail_set = False
        self.fail_delete = False
        self.list_error: Exception | None = None
        self.active_writes = 0
        self.max_active_writes = 0

    async def get_value(self, key: str) -> str | None:
        self.calls.append(("get_value", key))
        await asyncio.sleep(0)
        return await super().get_value(key)

    async def set_value(self, key: str, value: str) -> bool:
        self.calls.append(("set_value", key))
        self.active_writes += 1
        self.max_active_writes = max(self.max_active_writes, self.active_writes)
        try:
            await asyncio.sleep(0)
            if self.fail_set:
                return False
            return await super().set_value(key, value)
        finally:
            self.active_writes -= 1

    async def delete_key(self, key: str) -> bool:
        self.calls.append(("delete_key", key))
        await asyncio.sleep(0)
        if self.fail_delete:
            return False
        return await super().delete_key(key)

    async def list_all_keys(self) -> list[str]:
        self.calls.append(("list_all_keys",))
        await asyncio.sleep(0)
        if self.list_error is not None:
            raise self.list_error
        return await super().list_all_keys()

    async def resolve_key(self, params: Any) -> str | None:
        self.calls.append(("resolve_key",))
        return await super().resolve_key(params)

    def call_names(self) -> list[str]:
        return [call[0] for call in self.calls]

    def count(self, name: str) -> int:
        return self.call_names().count(name)

    def entry(self, key: str) -> CacheEntry:
        return CacheEntry.model_validate_json(self._data[key])


class RecordingFileSystem:
    """In-memory filesystem mapping paths to sizes."""

    def __init__(self, files: dict[str, int] | None = None):
        self.files: dict[str, int] = dict(files or {})
        self.unlinked: list[str] = []
        self.fail_unlink = False

    async def exists(self, path: str) -> bool:
        await asyncio.sleep(0)
        return path in self.files

    async def unlink(self, path: str) -> bool:
        await asyncio.sleep(0)
        if self.fail_unlink or path not in self.files:
            return False
        del self.files[path]
        self.unlinked.append(path)
        return True

    async def size(self, path: str) -> int:
        await asyncio.sleep(0)
        return self.files[path]


def record(file_path: str, last_accessed: int) -> str:
    """Encode a stored record the way the cache writes it."""
    return encode_entry(CacheEntry(file_path=file_path, last_accessed=last_accessed))
