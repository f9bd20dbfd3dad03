"""Select a metrics collector from settings."""

from typing import TYPE_CHECKING

from ..exceptions import TrackerConfigError
from .base import MetricsCollector, NoOpMetrics
from .prometheus import PrometheusMetrics

if TYPE_CHECKING:
    from ..settings import TrackerSettings


def create_metrics(settings: "TrackerSettings | None" = None) -> MetricsCollector:
    """
    Build the collector described by the ``metrics`` settings section.

    Recognized keys are ``enabled`` (default false) and ``backend``
    (``prometheus`` or ``noop``). A disabled section yields NoOpMetrics.

    Args:
        settings: Settings to read (cached settings when omitted)

    Raises:
        TrackerConfigError: On an unknown backend

    Examples:
        metrics:
          enabled: true
          backend: prometheus
    """
    if settings is None:
        from ..settings import get_settings

        settings = get_settings()

    section = settings.metrics_settings()
    if not section.enabled:
        return NoOpMetrics()

    backend = section.backend.lower()
    if backend == "prometheus":
        return PrometheusMetrics()
    if backend == "noop":
        return NoOpMetrics()
    raise TrackerConfigError(
        "Unknown metrics backend", config_key="metrics.backend", value=section.backend
    )


__all__ = ["create_metrics"]
