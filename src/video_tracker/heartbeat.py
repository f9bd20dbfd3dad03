"""Recurring heartbeat timer driven by an asyncio task."""

import asyncio
from typing import Any, Callable

from .events import LogEvents
from .log_config import get_null_logger
from .time_provider import TimeProvider, get_default_time_provider


class HeartbeatScheduler:
    """
    Calls a callback every ``interval_ms`` until stopped.

    The loop runs as a task on the current event loop and sleeps through
    the injected time provider, so a SimulatedTimeProvider makes ticks
    deterministic. Without a running loop start() schedules nothing.

    Examples:
        >>> scheduler = HeartbeatScheduler(tracker.send_heartbeat, 30000)
        >>> scheduler.start()
        >>> scheduler.stop()
    """

    def __init__(
        self,
        callback: Callable[[], Any],
        interval_ms: float,
        time_provider: TimeProvider | None = None,
        logger: Any = None,
    ):
        self.callback = callback
        self.interval_ms = interval_ms
        self.time_provider = time_provider or get_default_time_provider()
        self.logger = logger if logger is not None else get_null_logger()
        self._task: asyncio.Task | None = None
        self.ticks = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> bool:
        """Schedule the loop; returns False when no event loop is running."""
        self.stop()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.logger.debug(
                LogEvents.HEARTBEAT_SKIPPED.value,
                reason="no_running_loop",
                interval_ms=self.interval_ms,
            )
            return False

        self._task = loop.create_task(self._run())
        self.logger.debug(LogEvents.HEARTBEAT_STARTED.value, interval_ms=self.interval_ms)
        return True

    def stop(self) -> None:
        """Cancel the loop. Nothing fires after this returns."""
        if self._task is None:
            return
        task, self._task = self._task, None
        if not task.done():
            task.cancel()
        self.logger.debug(LogEvents.HEARTBEAT_STOPPED.value, ticks=self.ticks)

    async def _run(self) -> None:
        while True:
            await self.time_provider.sleep(self.interval_ms / 1000.0)
            self.ticks += 1
            try:
                self.callback()
            except Exception as e:
                self.logger.error(
                    "Heartbeat callback failed",
                    error=str(e),
                    error_type=type(e).__name__,
                )


__all__ = ["HeartbeatScheduler"]
