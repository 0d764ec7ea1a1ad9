"""Protocol for the filesystem holding cached files."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class FileSystemProtocol(Protocol):
    """Async filesystem capability injected into KeyValueCache."""

    async def exists(self, path: str) -> bool:
        """Check whether a file exists at path."""
        ...

    async def unlink(self, path: str) -> bool:
        """Remove the file at path.

        Returns:
            True if the file was removed
        """
        ...

    async def size(self, path: str) -> int:
        """Return the size of the file at path in bytes."""
        ...
