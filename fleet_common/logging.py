"""Structured Logging for fleet-common

The library logs through structlog and never configures it on import.
Services call ``configure_logging`` once at startup; until then structlog
defaults apply. Validation events carry the model and property they concern:

    schema_compiled              model=User fields=3 pk_fields=['id']
    type_initializer_overridden  model=User prop=age previous=string current=number
"""
import logging

import structlog

from fleet_common.config import settings


def configure_logging(
    level: str | None = None,
    json_logs: bool | None = None,
) -> None:
    """Configure structlog for the library's events.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Defaults to ``settings.LOG_LEVEL``.
        json_logs: If True, output JSON format. If False, colored console output.
            Defaults to ``settings.LOG_JSON``.
    """
    level = level or settings.LOG_LEVEL
    json_logs = settings.LOG_JSON if json_logs is None else json_logs
    log_level = getattr(logging, level.upper(), logging.INFO)

    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str = __name__) -> structlog.typing.FilteringBoundLogger:
    """Get a lazy structured logger whose events carry ``logger=name``."""
    return structlog.get_logger(logger=name)


class LoggerRegistry:
    """Registry of loggers for library domains."""

    _loggers: dict[str, structlog.typing.FilteringBoundLogger] = {}

    @classmethod
    def get(cls, name: str) -> structlog.typing.FilteringBoundLogger:
        """Get or create a logger for the given domain."""
        if name not in cls._loggers:
            cls._loggers[name] = get_logger(f"fleet_common.{name}")
        return cls._loggers[name]


def validation_logger() -> structlog.typing.FilteringBoundLogger:
    """Logger for model validation events."""
    return LoggerRegistry.get("validation")
