from .errors import ConfigError, FileSystemError, KvFileCacheError, StoreError
from .logging import get_logger, setup_logging, setup_logging_from_config


__all__ = [
    "setup_logging",
    "setup_logging_from_config",
    "get_logger",
    "KvFileCacheError",
    "ConfigError",
    "FileSystemError",
    "StoreError",
]
