"""Protocol definitions for the capabilities injected into the cache.

These protocols use Python's typing.Protocol system with the
@runtime_checkable decorator to enable both static type checking and runtime
isinstance() checks. Adapters satisfy them structurally.
"""

from .file_system_protocol import FileSystemProtocol
from .key_value_store_protocol import KeyValueStoreProtocol


__all__ = [
    "FileSystemProtocol",
    "KeyValueStoreProtocol",
]
