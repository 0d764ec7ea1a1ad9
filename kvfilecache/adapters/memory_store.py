"""In-memory key-value store adapter."""

import logging
from collections.abc import Callable
from typing import Any

from kvfilecache.cache.keys import CacheKey
from kvfilecache.config.settings import DEFAULT_PREFIX


logger = logging.getLogger(__name__)

KeyBuilder = Callable[[Any], str | None]


class MemoryKeyValueStore:
    """Dict-backed store implementing KeyValueStoreProtocol.

    Data is lost when the process exits. Useful for tests and for caches
    whose records only need to live as long as the process.
    """

    def __init__(
        self,
        prefix: str = DEFAULT_PREFIX,
        key_builder: KeyBuilder | None = None,
        initial: dict[str, str] | None = None,
    ):
        """Initialize memory store.

        Args:
            prefix: Prefix for keys produced by the default key builder
            key_builder: Derives a key from caller parameters
            initial: Records to pre-populate the store with
        """
        self.prefix = prefix
        self._key_builder = key_builder or (
            lambda params: CacheKey.from_params(prefix, params)
        )
        self._data: dict[str, str] = dict(initial or {})
        logger.debug("Initialized memory key-value store")

    async def get_value(self, key: str) -> str | None:
        return self._data.get(key)

    async def set_value(self, key: str, value: str) -> bool:
        self._data[key] = value
        return True

    async def delete_key(self, key: str) -> bool:
        if self._data.pop(key, None) is None:
            return False
        logger.debug("Deleted key from memory store: %s", key)
        return True

    async def list_all_keys(self) -> list[str]:
        return list(self._data)

    async def resolve_key(self, params: Any) -> str | None:
        return self._key_builder(params)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data
