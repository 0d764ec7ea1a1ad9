"""Configuration models for kvfilecache.

Settings are pydantic-settings models, so every field can be overridden with a
``KVFILECACHE_`` environment variable.

Precedence order (highest to lowest):
1. Environment variables
2. Constructor arguments (YAML file data)
3. .env file
4. Default values
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from kvfilecache.core.errors import ConfigError


logger = logging.getLogger(__name__)

ENV_PREFIX = "KVFILECACHE_"

DEFAULT_PREFIX = "kvfc:"
DEFAULT_EVICTION_MILLIS = 24 * 60 * 60 * 1000
DEFAULT_MAX_ENTRIES = 10_000
DEFAULT_MAX_CACHE_SIZE = 500 * 1024 * 1024


class _EnvFirstSettings(BaseSettings):
    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        """Return sources in priority order: env > init > dotenv > file_secret."""
        return (
            env_settings,
            init_settings,
            dotenv_settings,
            file_secret_settings,
        )


class CacheSettings(_EnvFirstSettings):
    """Immutable configuration of one cache engine instance."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    prefix: str = Field(
        default=DEFAULT_PREFIX,
        min_length=1,
        description="Prefix carried by every key this cache manages",
    )
    eviction_millis: int = Field(
        default=DEFAULT_EVICTION_MILLIS,
        gt=0,
        description="Maximum entry age in milliseconds since last access",
    )
    max_entries: int = Field(
        default=DEFAULT_MAX_ENTRIES,
        gt=0,
        description="Entry count at which count-based cleanup runs",
    )
    max_cache_size: int = Field(
        default=DEFAULT_MAX_CACHE_SIZE,
        gt=0,
        description="Total file size in bytes at which size-based cleanup runs",
    )


class LoggingSettings(_EnvFirstSettings):
    """Logging configuration consumed by setup_logging_from_config."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "WARNING"
    json_logs: bool = False
    log_file: Path | None = None

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is recognized."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        upper_v = v.strip().upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return upper_v

    @field_validator("log_file", mode="before")
    @classmethod
    def expand_log_file(cls, v: Any) -> Path | None:
        if v is None or v == "":
            return None
        return Path(v).expanduser()


def _read_yaml_section(config_file: Path, section: str) -> dict[str, Any]:
    try:
        with config_file.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(
            f"Cannot read config file: {e}", {"path": str(config_file)}
        ) from e
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML in config file: {e}", {"path": str(config_file)}
        ) from e

    if not isinstance(data, dict):
        raise ConfigError(
            "Config file must contain a mapping", {"path": str(config_file)}
        )

    values = data.get(section) or {}
    if not isinstance(values, dict):
        raise ConfigError(
            f"'{section}' section must be a mapping", {"path": str(config_file)}
        )
    return values


def load_settings(config_file: Path | None = None) -> CacheSettings:
    """Load cache settings from an optional YAML file and the environment.

    Args:
        config_file: YAML file whose ``cache:`` mapping supplies values

    Returns:
        Validated CacheSettings

    Raises:
        ConfigError: If the file cannot be read or the values are invalid
    """
    values: dict[str, Any] = {}
    if config_file is not None:
        values = _read_yaml_section(config_file, "cache")
        logger.debug("Loaded cache settings from %s", config_file)

    try:
        return CacheSettings(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid cache settings: {e}") from e


def load_logging_settings(config_file: Path | None = None) -> LoggingSettings:
    """Load logging settings from an optional YAML ``logging:`` mapping."""
    values: dict[str, Any] = {}
    if config_file is not None:
        values = _read_yaml_section(config_file, "logging")

    try:
        return LoggingSettings(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid logging settings: {e}") from e
