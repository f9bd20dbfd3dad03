"""
Abstract base class for metrics collection.

Trackers and the registry report counters through a MetricsCollector.
The default NoOpMetrics keeps instrumentation free when nothing is wired.
"""

from abc import ABC, abstractmethod


class MetricsCollector(ABC):
    """
    Interface for recording tracker metrics in any backend.

    Metric names are dotted strings (see TrackerMetrics); labels are
    plain string mappings.
    """

    @abstractmethod
    def increment(
        self, metric: str, value: int = 1, labels: dict[str, str] | None = None
    ) -> None:
        """
        Increment a counter metric.

        Args:
            metric: Metric name (e.g., 'video_tracker.events.emitted')
            value: Amount to increment (default: 1)
            labels: Optional labels (e.g., {'event_name': 'CONTENT_START'})
        """
        pass

    @abstractmethod
    def histogram(
        self, metric: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        """Record a distribution value (durations in milliseconds)."""
        pass

    @abstractmethod
    def gauge(
        self, metric: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        """Adjust a gauge by a positive or negative amount."""
        pass

    def timing(
        self, metric: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        """Record a duration in milliseconds (alias of histogram)."""
        self.histogram(metric, value, labels)


class NoOpMetrics(MetricsCollector):
    """Collector that records nothing; the default for every tracker."""

    def increment(
        self, metric: str, value: int = 1, labels: dict[str, str] | None = None
    ) -> None:
        pass

    def histogram(
        self, metric: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        pass

    def gauge(
        self, metric: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        pass


__all__ = ["MetricsCollector", "NoOpMetrics"]
