"""Tests for age-, count- and size-based eviction."""

from collections.abc import Callable
from typing import Any

import pytest

from kvfilecache.cache import KeyValueCache
from tests.helpers import (
    DAY_MILLIS,
    NOW,
    FakeClock,
    RecordingFileSystem,
    RecordingKeyValueStore,
    record,
)


CacheFactory = Callable[..., KeyValueCache[Any]]
EXPIRED = NOW - DAY_MILLIS - 1


class TestCleanExpiredEntries:
    """Test the explicit age-based sweep."""

    @pytest.mark.asyncio
    async def test_removes_only_expired_entries(
        self,
        make_cache: CacheFactory,
        store: RecordingKeyValueStore,
        filesystem: RecordingFileSystem,
    ):
        filesystem.files.update({"/a": 10, "/b": 20, "/c": 40})
        store._data.update(
            {
                "IMG:a": record("/a", EXPIRED),
                "IMG:b": record("/b", EXPIRED - 5000),
                "IMG:c": record("/c", NOW - 1000),
            }
        )
        cache = make_cache()

        assert await cache.clean_expired_entries() is True

        assert sorted(store._data) == ["IMG:c"]
        assert sorted(filesystem.unlinked) == ["/a", "/b"]
        assert await cache.get_current_entries_count() == 1
        assert await cache.get_current_disk_size() == 40

    @pytest.mark.asyncio
    async def test_each_file_unlinked_once(
        self,
        make_cache: CacheFactory,
        store: RecordingKeyValueStore,
        filesystem: RecordingFileSystem,
    ):
        """Test repeated sweeps do not unlink an evicted file again."""
        filesystem.files["/a"] = 10
        store._data["IMG:a"] = record("/a", EXPIRED)
        cache = make_cache()

        assert await cache.clean_expired_entries() is True
        assert await cache.clean_expired_entries() is False

        assert filesystem.unlinked == ["/a"]

    @pytest.mark.asyncio
    async def test_nothing_expired(
        self,
        make_cache: CacheFactory,
        store: RecordingKeyValueStore,
        filesystem: RecordingFileSystem,
    ):
        filesystem.files["/a"] = 10
        store._data["IMG:a"] = record("/a", NOW)
        cache = make_cache()

        assert await cache.clean_expired_entries() is False
        assert "IMG:a" in store

    @pytest.mark.asyncio
    async def test_entries_expire_as_clock_advances(
        self,
        make_cache: CacheFactory,
        store: RecordingKeyValueStore,
        filesystem: RecordingFileSystem,
        clock: FakeClock,
    ):
        filesystem.files["/a"] = 10
        cache = make_cache()
        await cache.put({"id": "a"}, "/a")

        clock.advance(DAY_MILLIS)
        assert await cache.clean_expired_entries() is False

        clock.advance(1)
        assert await cache.clean_expired_entries() is True
        assert await cache.get_current_entries_count() == 0

    @pytest.mark.asyncio
    async def test_corrupt_records_are_purged_during_sweep(
        self,
        make_cache: CacheFactory,
        store: RecordingKeyValueStore,
        filesystem: RecordingFileSystem,
    ):
        """Test undecodable records found while listing are removed and counted down."""
        filesystem.files["/a"] = 10
        store._data["IMG:a"] = record("/a", NOW)
        cache = make_cache()
        await cache.wait_until_ready()
        store._data["IMG:broken"] = '{"filePath": "/x", "lastAccessed": -1}'

        assert await cache.clean_expired_entries() is False

        assert "IMG:broken" not in store
        assert await cache.get_current_entries_count() == 0
        assert await cache.get_current_disk_size() == 10

    @pytest.mark.asyncio
    async def test_unprefixed_keys_are_ignored(
        self,
        make_cache: CacheFactory,
        store: RecordingKeyValueStore,
        filesystem: RecordingFileSystem,
    ):
        filesystem.files["/foreign"] = 10
        store._data["OTHER:a"] = record("/foreign", EXPIRED)
        cache = make_cache()

        assert await cache.clean_expired_entries() is False
        assert "OTHER:a" in store
        assert filesystem.unlinked == []

    @pytest.mark.asyncio
    async def test_failed_unlink_keeps_disk_size(
        self,
        make_cache: CacheFactory,
        store: RecordingKeyValueStore,
        filesystem: RecordingFileSystem,
    ):
        filesystem.files["/a"] = 10
        store._data["IMG:a"] = record("/a", EXPIRED)
        cache = make_cache()
        await cache.wait_until_ready()
        filesystem.fail_unlink = True

        assert await cache.clean_expired_entries() is True

        assert "IMG:a" not in store
        assert await cache.get_current_entries_count() == 0
        assert await cache.get_current_disk_size() == 10


class TestCountCleanup:
    """Test cleanup triggered when the entry limit is reached."""

    @pytest.mark.asyncio
    async def test_evicts_expired_entries_oldest_first(
        self,
        make_cache: CacheFactory,
        store: RecordingKeyValueStore,
        filesystem: RecordingFileSystem,
    ):
        """Test only as many expired entries are removed as needed."""
        filesystem.files.update({"/oldest": 1, "/older": 1, "/new": 1})
        store._data.update(
            {
                "IMG:older": record("/older", EXPIRED - 10),
                "IMG:oldest": record("/oldest", EXPIRED - 20),
            }
        )
        cache = make_cache(max_entries=2)

        assert await cache.put({"id": "new"}, "/new") is True

        assert sorted(store._data) == ["IMG:new", "IMG:older"]
        assert filesystem.unlinked == ["/oldest"]
        assert await cache.get_current_entries_count() == 2

    @pytest.mark.asyncio
    async def test_reaching_limit_exactly_evicts_nothing(
        self,
        make_cache: CacheFactory,
        store: RecordingKeyValueStore,
        filesystem: RecordingFileSystem,
    ):
        filesystem.files.update({"/old": 1, "/new": 1})
        store._data["IMG:old"] = record("/old", EXPIRED)
        cache = make_cache(max_entries=2)

        await cache.put({"id": "new"}, "/new")

        assert "IMG:old" in store
        assert store.count("list_all_keys") == 1

    @pytest.mark.asyncio
    async def test_count_limit_is_soft_when_nothing_expired(
        self,
        make_cache: CacheFactory,
        store: RecordingKeyValueStore,
        filesystem: RecordingFileSystem,
    ):
        """Test fresh entries are never evicted to satisfy max_entries.

        Count cleanup reuses the age predicate, so with max_entries=1 a second
        fresh entry leaves both present. Whether capacity limits should
        instead evict the oldest entries regardless of age is undecided; this
        test pins the current behavior.
        """
        filesystem.files.update({"/f1": 1, "/f2": 1})
        cache = make_cache(max_entries=1)

        assert await cache.put({"id": "k1"}, "/f1") is True
        assert await cache.put({"id": "k2"}, "/f2") is True

        assert sorted(store._data) == ["IMG:k1", "IMG:k2"]
        assert filesystem.unlinked == []
        assert await cache.get_current_entries_count() == 2


class TestSizeCleanup:
    """Test cleanup triggered when the disk size limit is reached."""

    @pytest.mark.asyncio
    async def test_evicts_expired_entries_until_under_limit(
        self,
        make_cache: CacheFactory,
        store: RecordingKeyValueStore,
        filesystem: RecordingFileSystem,
    ):
        filesystem.files.update({"/old1": 40, "/old2": 40, "/new": 50})
        store._data.update(
            {
                "IMG:old1": record("/old1", EXPIRED - 10),
                "IMG:old2": record("/old2", EXPIRED),
            }
        )
        cache = make_cache(max_cache_size=100)

        assert await cache.put({"id": "new"}, "/new") is True

        assert filesystem.unlinked == ["/old1"]
        assert sorted(store._data) == ["IMG:new", "IMG:old2"]
        assert await cache.get_current_disk_size() == 90

    @pytest.mark.asyncio
    async def test_size_limit_is_soft_when_nothing_expired(
        self,
        make_cache: CacheFactory,
        store: RecordingKeyValueStore,
        filesystem: RecordingFileSystem,
    ):
        """Test fresh files are never evicted to satisfy max_cache_size.

        Like count cleanup, size cleanup only removes age-expired entries, so
        the size limit can be exceeded. This test pins that behavior.
        """
        filesystem.files.update({"/big1": 80, "/big2": 80})
        cache = make_cache(max_cache_size=100)

        await cache.put({"id": "big1"}, "/big1")
        await cache.put({"id": "big2"}, "/big2")

        assert filesystem.unlinked == []
        assert await cache.get_current_disk_size() == 160

    @pytest.mark.asyncio
    async def test_expired_entry_without_size_does_not_stop_walk(
        self,
        make_cache: CacheFactory,
        store: RecordingKeyValueStore,
        filesystem: RecordingFileSystem,
    ):
        """Test the walk continues past an eviction that frees no bytes."""
        filesystem.files.update({"/old": 60, "/new": 60})
        store._data.update(
            {
                "IMG:nofile": record("/nofile", EXPIRED - 10),
                "IMG:old": record("/old", EXPIRED),
            }
        )
        cache = make_cache(max_cache_size=100)
        await cache.wait_until_ready()
        store._data["IMG:nofile"] = record("/nofile", EXPIRED - 10)

        await cache.put({"id": "new"}, "/new")

        assert "IMG:nofile" not in store
        assert filesystem.unlinked == ["/old"]
        assert await cache.get_current_disk_size() == 60
