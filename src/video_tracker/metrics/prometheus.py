"""
Prometheus metrics collector implementation.

Exposes tracker counters through prometheus_client for scraping.
"""

from typing import Any

from .base import MetricsCollector


class PrometheusMetrics(MetricsCollector):
    """
    Prometheus metrics collector.

    Creates Counter, Histogram and Gauge objects lazily on first use and
    caches them by sanitized name. Label names are fixed by the first call
    for a given metric.

    Note: prometheus_client is an optional dependency. Install with:
        pip install video-tracker[prometheus]

    Example:
        >>> from prometheus_client import CollectorRegistry
        >>> metrics = PrometheusMetrics(registry=CollectorRegistry())
        >>> metrics.increment('video_tracker.events.emitted', labels={'event_name': 'CONTENT_START'})
    """

    def __init__(self, registry: Any | None = None) -> None:
        """
        Args:
            registry: Optional prometheus_client CollectorRegistry.
                     If None, uses the default REGISTRY.
        """
        try:
            from prometheus_client import REGISTRY, Counter, Gauge, Histogram
        except ImportError as e:
            raise ImportError(
                "prometheus_client is required for PrometheusMetrics. "
                "Install with: pip install prometheus-client"
            ) from e

        self._registry = registry or REGISTRY
        self._factories = {"counter": Counter, "histogram": Histogram, "gauge": Gauge}
        self._metrics: dict[tuple[str, str], Any] = {}

    def _sanitize_metric_name(self, metric: str) -> str:
        """Convert dotted names to valid Prometheus names."""
        return metric.replace(".", "_").replace("-", "_")

    def _get(self, kind: str, metric: str, labels: dict[str, str]) -> Any:
        metric_name = self._sanitize_metric_name(metric)
        key = (kind, metric_name)
        if key not in self._metrics:
            self._metrics[key] = self._factories[kind](
                metric_name,
                f"{kind.capitalize()} for {metric}",
                list(labels.keys()),
                registry=self._registry,
            )
        collector = self._metrics[key]
        return collector.labels(**labels) if labels else collector

    def increment(
        self, metric: str, value: int = 1, labels: dict[str, str] | None = None
    ) -> None:
        self._get("counter", metric, labels or {}).inc(value)

    def histogram(
        self, metric: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        self._get("histogram", metric, labels or {}).observe(value)

    def gauge(
        self, metric: str, value: float, labels: dict[str, str] | None = None
    ) -> None:
        """
        Adjust a gauge.

        Positive values increment, negative values decrement, zero is a no-op.
        """
        gauge = self._get("gauge", metric, labels or {})
        if value > 0:
            gauge.inc(value)
        elif value < 0:
            gauge.dec(abs(value))


__all__ = ["PrometheusMetrics"]
