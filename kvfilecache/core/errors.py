"""Exception hierarchy for kvfilecache.

The cache engine resolves every expected failure into ``None``/``False``
results. These exceptions cover the unexpected ones, raised by adapters and
configuration loading, and are allowed to propagate through the engine.
"""

from typing import Any


class KvFileCacheError(Exception):
    """Base exception for all kvfilecache errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}

    def __str__(self) -> str:
        message = super().__str__()
        if not self.context:
            return message
        details = ", ".join(f"{k}={v!r}" for k, v in sorted(self.context.items()))
        return f"{message} ({details})"


class ConfigError(KvFileCacheError):
    """Invalid or unreadable configuration."""


class FileSystemError(KvFileCacheError):
    """Unexpected fault in a filesystem adapter."""


class StoreError(KvFileCacheError):
    """Unexpected fault in a key-value store adapter."""


def create_file_error(
    path: Any, operation: str, error: Exception, details: dict[str, Any] | None = None
) -> FileSystemError:
    """Build a FileSystemError describing a failed filesystem operation.

    Args:
        path: Path the operation was applied to
        operation: Name of the failed operation
        error: Original exception
        details: Additional context

    Returns:
        FileSystemError with the path, operation and error type in its context
    """
    context: dict[str, Any] = {
        "path": str(path),
        "operation": operation,
        "error_type": error.__class__.__name__,
    }
    if details:
        context.update(details)
    return FileSystemError(f"Filesystem operation '{operation}' failed: {error}", context)
