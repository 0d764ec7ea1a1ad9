"""Configuration for kvfilecache."""

from .settings import (
    CacheSettings,
    LoggingSettings,
    load_logging_settings,
    load_settings,
)


__all__ = [
    "CacheSettings",
    "LoggingSettings",
    "load_settings",
    "load_logging_settings",
]
