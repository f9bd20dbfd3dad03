"""Logging configuration package."""

from .main import (
    configure_logging,
    configure_logging_from_settings,
    get_context_logger,
    get_null_logger,
)


__all__ = [
    "get_context_logger",
    "get_null_logger",
    "configure_logging",
    "configure_logging_from_settings",
]
