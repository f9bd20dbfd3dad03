"""Stopwatch measuring elapsed milliseconds between two points in time."""

from .time_provider import TimeProvider, get_default_time_provider


class Clock:
    """
    Stopwatch with a settable offset.

    elapsed() is ``offset + (now - started_at)`` while running,
    ``offset + (stopped_at - started_at)`` once stopped and ``None`` if the
    clock was never started. A clock may be restarted any number of times.

    Examples:
        >>> provider = SimulatedTimeProvider()
        >>> clock = Clock(provider)
        >>> clock.elapsed() is None
        True
        >>> clock.start(); provider.advance(100); clock.stop()
        100.0
    """

    def __init__(self, time_provider: TimeProvider | None = None):
        self.time_provider = time_provider or get_default_time_provider()
        self.reset()

    def reset(self) -> None:
        """Return to the never-started state."""
        self.started_at: float | None = None
        self.stopped_at: float | None = None
        self.offset: float = 0.0

    @property
    def is_running(self) -> bool:
        return self.started_at is not None and self.stopped_at is None

    def start(self) -> None:
        """Record the start time and clear any previous stop."""
        self.started_at = self.time_provider.now_ms()
        self.stopped_at = None

    def stop(self) -> float | None:
        """Record the stop time and return the fixed delta.

        Returns:
            Elapsed milliseconds, or None if the clock was never started
        """
        if self.started_at is None:
            return None
        self.stopped_at = self.time_provider.now_ms()
        return self.elapsed()

    def elapsed(self) -> float | None:
        """Milliseconds between start and now (or the stop point)."""
        if self.started_at is None:
            return None
        end = self.stopped_at if self.stopped_at is not None else self.time_provider.now_ms()
        return self.offset + (end - self.started_at)

    def clone(self) -> "Clock":
        """Copy the three timing fields into a new clock."""
        clock = Clock(self.time_provider)
        clock.started_at = self.started_at
        clock.stopped_at = self.stopped_at
        clock.offset = self.offset
        return clock

    def __repr__(self) -> str:
        return (
            f"Clock(started_at={self.started_at!r}, stopped_at={self.stopped_at!r}, "
            f"offset={self.offset!r})"
        )


def to_attribute(value: float | None) -> int | None:
    """Round a clock reading to whole milliseconds for attribute maps."""
    if value is None:
        return None
    return int(round(value))


__all__ = ["Clock", "to_attribute"]
