"""File system adapter for the files tracked by the cache."""

import asyncio
import logging
from pathlib import Path

from kvfilecache.core.errors import create_file_error


logger = logging.getLogger(__name__)


class LocalFileSystemAdapter:
    """Local disk implementation of FileSystemProtocol.

    ``exists`` and ``unlink`` report problems through their return value.
    ``size`` raises FileSystemError when the file cannot be stat'ed.
    """

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(Path(path).is_file)

    async def unlink(self, path: str) -> bool:
        return await asyncio.to_thread(self._unlink, Path(path))

    async def size(self, path: str) -> int:
        return await asyncio.to_thread(self._size, Path(path))

    def _unlink(self, path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            logger.debug("File %s already deleted", path)
            return False
        except OSError as e:
            logger.warning("Failed to delete file %s: %s", path, e)
            return False

        logger.debug("Deleted file: %s", path)
        return True

    def _size(self, path: Path) -> int:
        try:
            return path.stat().st_size
        except OSError as e:
            error = create_file_error(path, "size", e)
            logger.error("Cannot read size of %s: %s", path, e)
            raise error from e
