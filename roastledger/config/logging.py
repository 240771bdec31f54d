"""
Structured logging configuration using structlog.

Console output in development, JSON lines elsewhere. Set LOG_FORMAT to force
one or the other.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from roastledger.config.settings import get_settings

# Weighted averages produce long floats; kg and IDR figures read better rounded
FLOAT_PRECISION = 4

QUIET_LOGGERS = ("aiosqlite", "uvicorn.access", "httpx", "httpcore")


def add_app_context(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Stamp every event with app, environment and storage backend."""
    settings = get_settings()
    event_dict.setdefault("app", settings.app_name)
    event_dict.setdefault("environment", settings.environment)
    event_dict.setdefault("storage", settings.storage.backend)
    return event_dict


def round_floats(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    for key, value in event_dict.items():
        if isinstance(value, float):
            event_dict[key] = round(value, FLOAT_PRECISION)
    return event_dict


def _renderer(fmt: str) -> list[Processor]:
    if fmt == "console":
        return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]
    return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]


def configure_logging() -> None:
    """Configure structlog and the stdlib root logger from settings."""
    settings = get_settings()
    fmt = settings.log_format or (
        "console" if settings.environment == "development" else "json"
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
        round_floats,
        *_renderer(fmt),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level),
        force=True,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None, **initial_values: Any) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, optionally with bound context."""
    return structlog.get_logger(name, **initial_values)
