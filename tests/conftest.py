"""Core test fixtures for the kvfilecache project."""

import os
from collections.abc import Callable
from typing import Any

import pytest

from kvfilecache.cache import KeyValueCache
from kvfilecache.config import CacheSettings
from tests.helpers import (
    DAY_MILLIS,
    FakeClock,
    RecordingFileSystem,
    RecordingKeyValueStore,
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep KVFILECACHE_* variables from the host out of the tests."""
    for name in list(os.environ):
        if name.startswith("KVFILECACHE_"):
            monkeypatch.delenv(name)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> CacheSettings:
    """Settings from the reference scenario."""
    return CacheSettings(
        prefix="IMG",
        eviction_millis=DAY_MILLIS,
        max_entries=100,
        max_cache_size=10_000_000,
    )


@pytest.fixture
def store() -> RecordingKeyValueStore:
    return RecordingKeyValueStore()


@pytest.fixture
def filesystem() -> RecordingFileSystem:
    return RecordingFileSystem()


@pytest.fixture
def make_cache(
    store: RecordingKeyValueStore,
    filesystem: RecordingFileSystem,
    settings: CacheSettings,
    clock: FakeClock,
) -> Callable[..., KeyValueCache[Any]]:
    """Build a cache over the recording store and filesystem.

    Keyword arguments override individual settings fields.
    """

    def factory(**overrides: Any) -> KeyValueCache[Any]:
        cache_settings = settings.model_copy(update=overrides) if overrides else settings
        return KeyValueCache(store, filesystem, cache_settings, clock=clock)

    return factory
