"""Protocol for the key-value store backing the cache."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class KeyValueStoreProtocol(Protocol):
    """Async key-value storage capability injected into KeyValueCache.

    Expected failures are reported through return values (``None``/``False``).
    Anything raised is treated as an unexpected fault and propagates to the
    caller of the cache operation.
    """

    async def get_value(self, key: str) -> str | None:
        """Return the stored value for key, or None if absent."""
        ...

    async def set_value(self, key: str, value: str) -> bool:
        """Store value under key.

        Returns:
            True if the value was written
        """
        ...

    async def delete_key(self, key: str) -> bool:
        """Delete key.

        Returns:
            True if the key was deleted
        """
        ...

    async def list_all_keys(self) -> list[str]:
        """Return every key in the store, in no particular order.

        The result may include keys that do not belong to the cache.
        """
        ...

    async def resolve_key(self, params: Any) -> str | None:
        """Derive the storage key for caller-supplied parameters.

        Returns:
            The key, or None if no key can be derived
        """
        ...
