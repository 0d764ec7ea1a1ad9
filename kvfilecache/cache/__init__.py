"""Accounting and eviction engine for files tracked in a key-value store."""

from kvfilecache.cache.codec import decode_entry, encode_entry
from kvfilecache.cache.key_value_cache import KeyValueCache, create_key_value_cache
from kvfilecache.cache.keys import CacheKey
from kvfilecache.cache.models import BootState, CacheEntry, CacheStats, now_millis


__all__ = [
    "BootState",
    "CacheEntry",
    "CacheKey",
    "CacheStats",
    "KeyValueCache",
    "create_key_value_cache",
    "decode_entry",
    "encode_entry",
    "now_millis",
]
