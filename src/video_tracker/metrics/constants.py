"""Metric name and label constants for trackers and the registry."""


class TrackerMetrics:
    """Metric name constants."""

    # Tracker counters
    EVENTS_EMITTED = "video_tracker.events.emitted"
    TRANSITIONS_REJECTED = "video_tracker.transitions.rejected"
    MISSING_PARAMETERS = "video_tracker.events.missing_parameter"
    ADAPTER_FAILURES = "video_tracker.adapter.failures"
    HEARTBEATS = "video_tracker.heartbeats"

    # Durations closed by an event
    INTERVAL_DURATION_MS = "video_tracker.interval.duration"

    # Gauges
    ACTIVE_HEARTBEATS = "video_tracker.heartbeats.active"
    REGISTERED_TRACKERS = "video_tracker.registry.trackers"

    # Registry counters
    EVENTS_DELIVERED = "video_tracker.registry.delivered"
    EVENTS_DROPPED = "video_tracker.registry.dropped"


class MetricLabels:
    """Standard label names for metrics."""

    EVENT_NAME = "event_name"  # CONTENT_START, AD_QUARTILE, ...
    BRANCH = "branch"  # content, ad
    TRACKER = "tracker"  # tracker name reported by the adapter
    INTERVAL = "interval"  # paused, buffering, seeking, ad_break
    REASON = "reason"  # no_backend, ...


__all__ = ["TrackerMetrics", "MetricLabels"]
