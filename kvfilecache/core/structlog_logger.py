"""Structlog logger factory and utilities for kvfilecache."""

import logging
from typing import Any

import structlog


def get_struct_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger with the given name.

    Args:
        name: The logger name, usually __name__

    Returns:
        A bound structlog logger instance

    Note: For exception logging with debug stack traces, use this pattern:
        try:
            # some operation
        except Exception as e:
            exc_info = logger.isEnabledFor(logging.DEBUG)
            logger.error("operation_failed", error=str(e), exc_info=exc_info)
    """
    return structlog.get_logger(name)  # type: ignore[no-any-return]


class StructlogMixin:
    """Mixin class adding structured logging to cache components.

    The logger is created lazily and bound with the class name and, when the
    instance has one, its cache prefix.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._logger: structlog.stdlib.BoundLogger | None = None

    @property
    def logger(self) -> structlog.stdlib.BoundLogger:
        """Get or create a logger for this component with bound context."""
        if self._logger is None:
            base_logger = get_struct_logger(self.__class__.__module__)

            context: dict[str, Any] = {"component": self.__class__.__name__}
            settings = getattr(self, "settings", None)
            if settings is not None and hasattr(settings, "prefix"):
                context["prefix"] = settings.prefix

            self._logger = base_logger.bind(**context)

        return self._logger

    def log_error_with_context(
        self,
        message: str,
        error: BaseException,
        **context: Any,
    ) -> None:
        """Log an error with structured context and a stack trace in debug mode.

        Args:
            message: Error message/event name
            error: The exception that occurred
            **context: Additional context
        """
        exc_info = logging.getLogger(self.__class__.__module__).isEnabledFor(
            logging.DEBUG
        )
        self.logger.error(
            message,
            error=str(error),
            error_type=error.__class__.__name__,
            exc_info=exc_info,
            **context,
        )
