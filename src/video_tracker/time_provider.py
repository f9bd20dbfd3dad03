"""
Time Provider Abstraction

Provides a pluggable time source for clocks and the heartbeat scheduler.
Real trackers read the monotonic wall clock; tests and replays drive a
simulated clock so elapsed-time attributes become deterministic.
"""

import asyncio
import heapq
import itertools
import time
from abc import ABC, abstractmethod

from .log_config import get_context_logger


class TimeProvider(ABC):
    """
    Abstract base class for time providers.

    Subclasses must implement time retrieval (milliseconds) and sleep.
    """

    @abstractmethod
    def now_ms(self) -> float:
        """Get current time in milliseconds.

        Returns:
            Monotonic milliseconds for real time, virtual milliseconds for simulated
        """
        pass

    @abstractmethod
    async def sleep(self, seconds: float) -> None:
        """Sleep for specified duration.

        Args:
            seconds: Duration to sleep (wall-clock for real, virtual for simulated)
        """
        pass

    @abstractmethod
    def get_mode(self) -> str:
        """Get time provider mode identifier."""
        pass


class RealtimeTimeProvider(TimeProvider):
    """
    Real-time time provider using the monotonic clock.

    Uses time.monotonic() for current time and asyncio.sleep() for delays,
    so elapsed values never jump with wall-clock adjustments.

    Examples:
        >>> provider = RealtimeTimeProvider()
        >>> start = provider.now_ms()
        >>> await provider.sleep(0.1)
        >>> assert 95 < provider.now_ms() - start < 150
    """

    def now_ms(self) -> float:
        """Get current monotonic time in milliseconds."""
        return time.monotonic() * 1000.0

    async def sleep(self, seconds: float) -> None:
        """Sleep for specified wall-clock duration.

        Args:
            seconds: Duration to sleep in seconds
        """
        await asyncio.sleep(seconds)

    def get_mode(self) -> str:
        """Get provider mode."""
        return "realtime"


class SimulatedTimeProvider(TimeProvider):
    """
    Simulated time provider for deterministic tests and replays.

    Maintains virtual time independent of wall-clock time. Only the owner of
    the provider moves time, through advance(), run_for() or
    set_virtual_time(). sleep() waits until virtual time reaches its
    deadline, so any number of sleepers can share one provider without
    pushing time forward.

    Features:
        - Virtual time tracking independent of wall-clock
        - Deadline-based sleep released by advancing time
        - Precise control over elapsed-time attributes

    Examples:
        >>> provider = SimulatedTimeProvider()
        >>> start = provider.now_ms()
        >>> provider.advance(250)
        >>> assert provider.now_ms() - start == 250

        Let sleeping tasks fire once per deadline crossed:
        >>> await provider.run_for(60000)
    """

    def __init__(self, initial_ms: float = 0.0):
        """
        Initialize simulated time provider.

        Args:
            initial_ms: Starting virtual time in milliseconds
        """
        self.virtual_ms = initial_ms
        self._sleepers: list[tuple[float, int, asyncio.Future]] = []
        self._sequence = itertools.count()
        self.logger = get_context_logger("simulated_time_provider")

    def now_ms(self) -> float:
        """Get current virtual time in milliseconds."""
        return self.virtual_ms

    @property
    def pending_sleepers(self) -> int:
        """Number of sleep() calls still waiting for their deadline."""
        return sum(1 for _, _, future in self._sleepers if not future.done())

    def advance(self, ms: float) -> None:
        """Move virtual time forward and release sleepers now due.

        Released sleepers resume on the next event loop iteration. A sleeper
        that sleeps again computes its deadline from the new time; use
        run_for() when recurring sleepers must fire for every deadline.

        Args:
            ms: Milliseconds to advance
        """
        self.virtual_ms += ms
        self._wake_due()

    async def run_for(self, ms: float) -> None:
        """Advance virtual time by ``ms``, stopping at each sleeper deadline.

        At every deadline on the way the due sleepers are released and given
        the chance to run (and sleep again) before time moves on.

        Args:
            ms: Milliseconds to advance
        """
        target = self.virtual_ms + ms
        await self._settle()
        while True:
            deadline = self._next_deadline()
            if deadline is None or deadline > target:
                break
            self.virtual_ms = max(self.virtual_ms, deadline)
            self._wake_due()
            await self._settle()
        self.virtual_ms = target

    async def sleep(self, seconds: float) -> None:
        """Wait until virtual time reaches ``now + seconds``.

        Args:
            seconds: Virtual duration to wait
        """
        if seconds <= 0:
            await asyncio.sleep(0)
            return
        future = asyncio.get_running_loop().create_future()
        deadline = self.virtual_ms + seconds * 1000.0
        heapq.heappush(self._sleepers, (deadline, next(self._sequence), future))
        await future

    def get_mode(self) -> str:
        """Get provider mode."""
        return "simulated"

    def set_virtual_time(self, virtual_ms: float) -> None:
        """Set virtual time directly and release sleepers now due.

        Args:
            virtual_ms: New virtual time value in milliseconds
        """
        self.virtual_ms = virtual_ms
        self.logger.debug("Virtual time set", virtual_ms=virtual_ms)
        self._wake_due()

    def _next_deadline(self) -> float | None:
        # Cancelled sleepers stay in the heap until they surface
        while self._sleepers and self._sleepers[0][2].done():
            heapq.heappop(self._sleepers)
        return self._sleepers[0][0] if self._sleepers else None

    def _wake_due(self) -> None:
        while self._sleepers and self._sleepers[0][0] <= self.virtual_ms:
            _, _, future = heapq.heappop(self._sleepers)
            if not future.done():
                future.set_result(None)

    @staticmethod
    async def _settle(rounds: int = 3) -> None:
        for _ in range(rounds):
            await asyncio.sleep(0)


_default_provider = RealtimeTimeProvider()


def get_default_time_provider() -> TimeProvider:
    """Shared real-time provider used when none is injected."""
    return _default_provider


def create_time_provider(mode: str = "real", **kwargs) -> TimeProvider:
    """
    Factory function to create appropriate time provider.

    Args:
        mode: 'real' or 'simulated'
        **kwargs: Additional arguments passed to the simulated provider

    Returns:
        Configured TimeProvider instance

    Examples:
        >>> provider = create_time_provider("real")
        >>> provider = create_time_provider("simulated", initial_ms=1000)
    """
    if mode == "simulated":
        return SimulatedTimeProvider(**kwargs)
    return RealtimeTimeProvider()


__all__ = [
    "TimeProvider",
    "RealtimeTimeProvider",
    "SimulatedTimeProvider",
    "get_default_time_provider",
    "create_time_provider",
]
