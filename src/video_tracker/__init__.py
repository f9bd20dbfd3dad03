"""
Video Tracker Package

Instruments a video playback surface and turns its raw signals into an
ordered stream of normalized lifecycle events (``CONTENT_*``, ``AD_*`` and
player events) carrying consistent attributes.

This package provides:
- VideoTracker: State-guarded event emission and attribute aggregation
- PlayerAdapter: Interface binding a tracker to a concrete player
- VideoTrackerState: Lifecycle state machine and elapsed-time clocks
- TrackerRegistry: Forwards tracker events to a Backend
- Clock / TimeProvider: Millisecond stopwatches over real or simulated time

Usage:
    from video_tracker import VideoTracker, TrackerRegistry, MemoryBackend

    tracker = VideoTracker(MyAdapter(player))
    tracker.set_ads_tracker(VideoTracker(MyAdsAdapter(player)))

    registry = TrackerRegistry(backend=MemoryBackend())
    registry.add_tracker(tracker)

    tracker.send_request()
    tracker.send_start()
"""

from .adapter import NullPlayerAdapter, PlayerAdapter, StaticPlayerAdapter
from .backend import Backend, LoggingBackend, MemoryBackend, RecordedEvent
from .chrono import Clock
from .config import TrackerConfig
from .core import TrackerRegistry
from .emitter import WILDCARD, Emitter, Subscription, TrackerEvent
from .events import AdPosition, TrackerEvents
from .exceptions import (
    InvalidAdapterError,
    InvalidTrackerError,
    TrackerConfigError,
    VideoTrackerException,
)
from .hierarchy import AdTransition
from .log_config import configure_logging, configure_logging_from_settings
from .settings import TrackerSettings, get_settings
from .state import VideoTrackerState
from .time_provider import (
    RealtimeTimeProvider,
    SimulatedTimeProvider,
    TimeProvider,
    create_time_provider,
)
from .tracker import TrackerOptions, VideoTracker

__version__ = "0.1.0"

__all__ = [
    # Trackers
    "VideoTracker",
    "TrackerOptions",
    "VideoTrackerState",
    "AdTransition",
    # Adapters
    "PlayerAdapter",
    "NullPlayerAdapter",
    "StaticPlayerAdapter",
    # Events
    "Emitter",
    "TrackerEvent",
    "Subscription",
    "TrackerEvents",
    "AdPosition",
    "WILDCARD",
    # Registry and sinks
    "TrackerRegistry",
    "Backend",
    "MemoryBackend",
    "LoggingBackend",
    "RecordedEvent",
    # Configuration
    "TrackerConfig",
    "TrackerSettings",
    "get_settings",
    "configure_logging",
    "configure_logging_from_settings",
    # Time
    "Clock",
    "TimeProvider",
    "RealtimeTimeProvider",
    "SimulatedTimeProvider",
    "create_time_provider",
    # Exceptions
    "VideoTrackerException",
    "TrackerConfigError",
    "InvalidTrackerError",
    "InvalidAdapterError",
    # Package metadata
    "__version__",
]
