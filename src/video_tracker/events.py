"""Tracker event vocabulary and structured log event names."""

from enum import Enum


class TrackerEvents(str, Enum):
    """Event names emitted by trackers.

    Lifecycle events are emitted with an ``AD_`` or ``CONTENT_`` prefix
    depending on the tracker branch; player and ad-only events are not.
    """

    # Player
    PLAYER_INIT = "PLAYER_INIT"
    PLAYER_READY = "PLAYER_READY"
    DOWNLOAD = "DOWNLOAD"

    # Video
    REQUEST = "REQUEST"
    START = "START"
    END = "END"
    PAUSE = "PAUSE"
    RESUME = "RESUME"
    SEEK_START = "SEEK_START"
    SEEK_END = "SEEK_END"
    BUFFER_START = "BUFFER_START"
    BUFFER_END = "BUFFER_END"
    HEARTBEAT = "HEARTBEAT"
    RENDITION_CHANGE = "RENDITION_CHANGE"
    ERROR = "ERROR"

    # Ads only
    AD_BREAK_START = "AD_BREAK_START"
    AD_BREAK_END = "AD_BREAK_END"
    AD_QUARTILE = "AD_QUARTILE"
    AD_CLICK = "AD_CLICK"


def prefixed(event: TrackerEvents, is_ad: bool) -> str:
    """Build the branch-qualified name, e.g. ``AD_REQUEST``."""
    return ("AD_" if is_ad else "CONTENT_") + event.value


class AdPosition(str, Enum):
    """Position of an ad relative to the content."""

    PRE = "pre"
    MID = "mid"
    POST = "post"


class LogEvents(str, Enum):
    """Event type constants for structured logging."""

    TRACKER_READY = "video_tracker.tracker.ready"
    TRACKER_DISPOSED = "video_tracker.tracker.disposed"
    EVENT_EMITTED = "video_tracker.event.emitted"
    TRANSITION_REJECTED = "video_tracker.transition.rejected"
    MISSING_PARAMETER = "video_tracker.event.missing_parameter"
    ADAPTER_FAILED = "video_tracker.adapter.failed"
    HANDLER_FAILED = "video_tracker.emitter.handler_failed"
    HEARTBEAT_STARTED = "video_tracker.heartbeat.started"
    HEARTBEAT_STOPPED = "video_tracker.heartbeat.stopped"
    HEARTBEAT_SKIPPED = "video_tracker.heartbeat.skipped"
    ADS_TRACKER_ATTACHED = "video_tracker.ads_tracker.attached"
    ADS_TRACKER_DISPOSED = "video_tracker.ads_tracker.disposed"
    EVENT_SENT = "video_tracker.registry.sent"
    BACKEND_MISSING = "video_tracker.registry.backend_missing"


__all__ = ["TrackerEvents", "AdPosition", "LogEvents", "prefixed"]
