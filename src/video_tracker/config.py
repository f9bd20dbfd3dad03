"""
Tracker Configuration Module

Runtime configuration handed to each tracker. Values default to the
built-in constants and can be materialized from TrackerSettings.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .exceptions import TrackerConfigError

if TYPE_CHECKING:
    from .settings import TrackerSettings


DEFAULT_HEARTBEAT_MS = 30000
MIN_HEARTBEAT_MS = 5000


@dataclass
class TrackerConfig:
    """
    Configuration for a VideoTracker.

    Attributes:
        default_heartbeat_ms: Heartbeat used when neither the tracker nor its
            parent sets one
        min_heartbeat_ms: Lower bound applied to any heartbeat interval
        tracker_name: Overrides the adapter's tracker name when set
        tracker_version: Overrides the adapter's tracker version when set
        clean_null_attributes: Registry drops attributes whose value is None

    Examples:
        >>> config = TrackerConfig(default_heartbeat_ms=10000)
        >>> config.heartbeat_interval(2000)
        5000
    """

    default_heartbeat_ms: int = DEFAULT_HEARTBEAT_MS
    min_heartbeat_ms: int = MIN_HEARTBEAT_MS
    tracker_name: str | None = None
    tracker_version: str | None = None
    clean_null_attributes: bool = True

    def __post_init__(self):
        if self.default_heartbeat_ms <= 0:
            raise TrackerConfigError(
                "Heartbeat must be positive",
                config_key="default_heartbeat_ms",
                value=self.default_heartbeat_ms,
            )
        if self.min_heartbeat_ms <= 0:
            raise TrackerConfigError(
                "Minimum heartbeat must be positive",
                config_key="min_heartbeat_ms",
                value=self.min_heartbeat_ms,
            )

    def heartbeat_interval(self, heartbeat_ms: float | None) -> float:
        """Clamp a configured heartbeat to the minimum interval."""
        if not heartbeat_ms:
            heartbeat_ms = self.default_heartbeat_ms
        return max(heartbeat_ms, self.min_heartbeat_ms)

    @classmethod
    def from_settings(cls, settings: "TrackerSettings | None" = None) -> "TrackerConfig":
        """Build a config from settings (cached settings when omitted)."""
        if settings is None:
            from .settings import get_settings

            settings = get_settings()
        return cls(
            default_heartbeat_ms=settings.default_heartbeat_ms,
            min_heartbeat_ms=settings.min_heartbeat_ms,
            tracker_name=settings.tracker_name,
            tracker_version=settings.tracker_version,
            clean_null_attributes=settings.clean_null_attributes,
        )


__all__ = ["TrackerConfig", "DEFAULT_HEARTBEAT_MS", "MIN_HEARTBEAT_MS"]
