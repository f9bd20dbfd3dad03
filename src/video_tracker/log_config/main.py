"""Logging configuration and utilities."""

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from ..settings import TrackerSettings


def get_context_logger(name: str) -> structlog.BoundLogger:
    """Get a context-aware logger.

    Args:
        name: Logger name

    Returns:
        Structured logger instance
    """
    return structlog.get_logger(name)


def get_null_logger() -> structlog.BoundLogger:
    """Get a structured logger that discards everything.

    Trackers use this when no logger is injected, so instrumentation stays
    silent unless the host application opts in.

    Returns:
        Structured logger bound to a ReturnLogger with no processors
    """
    return structlog.wrap_logger(structlog.ReturnLogger(), processors=[])


def configure_logging(level: str = "INFO", json: bool = False) -> None:
    """Configure structlog processors for the host application.

    Args:
        level: Minimum log level name (DEBUG, INFO, WARNING, ERROR)
        json: Render JSON lines instead of console output
    """
    renderer: Any = (
        structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )


def configure_logging_from_settings(settings: "TrackerSettings | None" = None) -> None:
    """Apply ``log_level`` and ``log_json`` from settings.

    Args:
        settings: Settings to read (cached settings when omitted)
    """
    if settings is None:
        from ..settings import get_settings

        settings = get_settings()
    configure_logging(level=settings.log_level, json=settings.log_json)


__all__ = [
    "get_context_logger",
    "get_null_logger",
    "configure_logging",
    "configure_logging_from_settings",
]
