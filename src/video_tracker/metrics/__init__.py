"""
Metrics collection module for video trackers.

Example:
    >>> from video_tracker.metrics import NoOpMetrics, PrometheusMetrics
    >>> tracker = VideoTracker(metrics=NoOpMetrics())
    >>> tracker = VideoTracker(metrics=PrometheusMetrics())
"""

from .base import MetricsCollector, NoOpMetrics
from .constants import MetricLabels, TrackerMetrics
from .factory import create_metrics
from .prometheus import PrometheusMetrics

__all__ = [
    "MetricsCollector",
    "NoOpMetrics",
    "PrometheusMetrics",
    "TrackerMetrics",
    "MetricLabels",
    "create_metrics",
]
