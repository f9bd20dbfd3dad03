"""
Tracker registry.

Collects the event streams of registered trackers and forwards each event
to a single Backend, after dropping attributes whose value is None.
"""

from typing import TYPE_CHECKING, Any

from .backend import Backend
from .emitter import WILDCARD, TrackerEvent
from .events import LogEvents
from .hierarchy import ensure_tracker
from .log_config import configure_logging_from_settings, get_context_logger, get_null_logger
from .metrics import (
    MetricLabels,
    MetricsCollector,
    NoOpMetrics,
    TrackerMetrics,
    create_metrics,
)
from .tracker import VideoTracker

if TYPE_CHECKING:
    from .settings import TrackerSettings


def clean_data(data: dict[str, Any]) -> dict[str, Any]:
    """Copy of data without keys whose value is None."""
    return {key: value for key, value in data.items() if value is not None}


class TrackerRegistry:
    """
    Routes tracker events to a backend.

    Ads trackers do not need registering: their events reach the registry
    through the parent's funneled stream.

    Examples:
        >>> registry = TrackerRegistry(backend=MemoryBackend())
        >>> registry.add_tracker(tracker)
        >>> tracker.send_request()
        >>> registry.backend.event_names
        ['CONTENT_REQUEST']
    """

    def __init__(
        self,
        backend: Backend | None = None,
        logger: Any = None,
        metrics: MetricsCollector | None = None,
        clean_null_attributes: bool = True,
    ):
        self._trackers: list[VideoTracker] = []
        self._backend = backend
        self.logger = logger if logger is not None else get_null_logger()
        self.metrics = metrics or NoOpMetrics()
        self.clean_null_attributes = clean_null_attributes
        self._missing_backend_reported = False

    @property
    def trackers(self) -> list[VideoTracker]:
        return list(self._trackers)

    @property
    def backend(self) -> Backend | None:
        return self._backend

    @backend.setter
    def backend(self, backend: Backend | None) -> None:
        self._backend = backend

    def add_tracker(self, tracker: VideoTracker) -> None:
        """
        Start forwarding a tracker's events.

        Raises:
            InvalidTrackerError: If tracker is not a VideoTracker
        """
        ensure_tracker(tracker)
        if tracker in self._trackers:
            return
        self._trackers.append(tracker)
        tracker.subscribe(WILDCARD, self._handle_event)
        self.metrics.gauge(TrackerMetrics.REGISTERED_TRACKERS, 1)

    def remove_tracker(self, tracker: VideoTracker) -> None:
        """Stop forwarding and dispose the tracker."""
        tracker.unsubscribe(WILDCARD, self._handle_event)
        tracker.dispose()
        if tracker in self._trackers:
            self._trackers.remove(tracker)
            self.metrics.gauge(TrackerMetrics.REGISTERED_TRACKERS, -1)

    def _handle_event(self, event: TrackerEvent) -> None:
        data = clean_data(event.data) if self.clean_null_attributes else dict(event.data)
        self.logger.debug(LogEvents.EVENT_SENT.value, event_name=event.type, attributes=data)
        self.send(event.type, data)

    def send(self, event_name: str, data: dict[str, Any]) -> None:
        """Hand an event to the backend; logs once and drops it without one."""
        if self._backend is None:
            if not self._missing_backend_reported:
                self.logger.error(LogEvents.BACKEND_MISSING.value, event_name=event_name)
                self._missing_backend_reported = True
            self.metrics.increment(
                TrackerMetrics.EVENTS_DROPPED, labels={MetricLabels.REASON: "no_backend"}
            )
            return
        self._backend.send(event_name, data)
        self.metrics.increment(
            TrackerMetrics.EVENTS_DELIVERED, labels={MetricLabels.EVENT_NAME: event_name}
        )

    def send_error(self, attributes: dict[str, Any] | None = None) -> None:
        """Report an error not tied to any tracker."""
        self.send("ERROR", attributes or {})

    @classmethod
    def from_config(cls, config, backend: Backend | None = None, **kwargs) -> "TrackerRegistry":
        """Build a registry honoring TrackerConfig.clean_null_attributes."""
        return cls(backend=backend, clean_null_attributes=config.clean_null_attributes, **kwargs)

    @classmethod
    def from_settings(
        cls,
        settings: "TrackerSettings | None" = None,
        backend: Backend | None = None,
        configure_logs: bool = True,
    ) -> "TrackerRegistry":
        """
        Build a registry from settings (cached settings when omitted).

        Applies the logging section, selects the metrics collector and
        honors ``clean_null_attributes``. Trackers created for this registry
        can share ``registry.metrics`` and ``TrackerConfig.from_settings()``.

        Args:
            settings: Settings to read
            backend: Event sink
            configure_logs: Configure structlog from ``log_level``/``log_json``
        """
        if settings is None:
            from .settings import get_settings

            settings = get_settings()
        if configure_logs:
            configure_logging_from_settings(settings)
        return cls(
            backend=backend,
            logger=get_context_logger("video_tracker.registry"),
            metrics=create_metrics(settings),
            clean_null_attributes=settings.clean_null_attributes,
        )


__all__ = ["TrackerRegistry", "clean_data"]
