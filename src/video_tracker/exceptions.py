"""Video tracker exception hierarchy.

The tracker never raises for runtime misuse (duplicate signals, missing
parameters, odd call orders): those degrade to best-effort reporting plus a
log line. Exceptions are reserved for wiring mistakes detected while a
tracker, adapter or registry is being assembled.

Exception Hierarchy:
    VideoTrackerException (base)
    ├── TrackerConfigError
    ├── InvalidTrackerError
    └── InvalidAdapterError
"""

from typing import Optional


class VideoTrackerException(Exception):
    """Base exception for all video tracker errors.

    All package-specific exceptions inherit from this class to allow
    catching them with a single except clause.
    """

    def __init__(self, message: str, context: Optional[dict] = None):
        """Initialize video tracker exception.

        Args:
            message: Error message
            context: Optional context dictionary for debugging
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return string representation with context."""
        if self.context:
            context_str = "; ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class TrackerConfigError(VideoTrackerException):
    """Raised when tracker configuration values are invalid.

    Attributes:
        config_key: Configuration key that failed validation
        value: The rejected value
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        value: object = None,
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        if config_key:
            context["config_key"] = config_key
        if value is not None:
            context["value"] = value
        super().__init__(message, context)
        self.config_key = config_key
        self.value = value


class InvalidTrackerError(VideoTrackerException, TypeError):
    """Raised when an object that is not a tracker is wired in as one.

    Attributes:
        received_type: Name of the type that was passed in
    """

    def __init__(
        self,
        message: str,
        received: object = None,
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        received_type = type(received).__name__
        context["received_type"] = received_type
        super().__init__(message, context)
        self.received_type = received_type


class InvalidAdapterError(VideoTrackerException, TypeError):
    """Raised when a player adapter does not implement PlayerAdapter."""

    def __init__(
        self,
        message: str,
        received: object = None,
        context: Optional[dict] = None,
    ):
        if context is None:
            context = {}
        context["received_type"] = type(received).__name__
        super().__init__(message, context)


__all__ = [
    "VideoTrackerException",
    "TrackerConfigError",
    "InvalidTrackerError",
    "InvalidAdapterError",
]
