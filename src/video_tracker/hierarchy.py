"""
Content/ad tracker composition.

A content tracker may own one ads tracker. Every event the child emits is
funneled, unmodified, through the parent's own stream right after the
child delivers it. The child keeps a non-owning reference to its parent
and reports ad activity through handle_ad_transition() only.
"""

import weakref
from enum import Enum
from typing import TYPE_CHECKING, Any

from .emitter import WILDCARD, TrackerEvent
from .events import LogEvents
from .exceptions import InvalidTrackerError

if TYPE_CHECKING:
    from .tracker import VideoTracker


class AdTransition(str, Enum):
    """Ad activity a child tracker reports to its parent."""

    STARTED = "started"
    ENDED = "ended"
    BREAK_ENDED = "break_ended"


def ensure_tracker(candidate: Any, role: str = "tracker") -> "VideoTracker":
    """Reject anything that is not a VideoTracker.

    Raises:
        InvalidTrackerError: If candidate is not a VideoTracker
    """
    from .tracker import VideoTracker

    if not isinstance(candidate, VideoTracker):
        raise InvalidTrackerError(f"Expected a VideoTracker as {role}", received=candidate)
    return candidate


class AdsTrackerMixin:
    """
    Parent/child wiring for VideoTracker.

    Expects the host class to provide ``state``, ``logger``, ``emit``,
    ``subscribe``/``unsubscribe`` and ``dispose``.
    """

    ads_tracker: "VideoTracker | None" = None
    _parent_ref: "weakref.ref | None" = None

    @property
    def parent_tracker(self) -> "VideoTracker | None":
        """Parent tracker, or None when unset or already collected."""
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @parent_tracker.setter
    def parent_tracker(self, tracker: "VideoTracker | None") -> None:
        if tracker is None:
            self._parent_ref = None
            return
        ensure_tracker(tracker, "parent tracker")
        if tracker is self:
            raise InvalidTrackerError("A tracker cannot be its own parent", received=tracker)
        self._parent_ref = weakref.ref(tracker)

    def set_ads_tracker(self, tracker: "VideoTracker | None") -> None:
        """
        Attach a child tracker for ads, replacing any previous one.

        The previous child is disposed first. The new child is switched to
        the ad branch and its wildcard stream is funneled into this tracker.
        Passing None only detaches.

        Raises:
            InvalidTrackerError: If tracker is not a VideoTracker or is self
        """
        if tracker is not None:
            ensure_tracker(tracker, "ads tracker")
            if tracker is self:
                raise InvalidTrackerError(
                    "A tracker cannot be its own ads tracker", received=tracker
                )

        self.dispose_ads_tracker()
        if tracker is None:
            return

        self.ads_tracker = tracker
        tracker.set_is_ad(True)
        tracker.parent_tracker = self
        tracker.subscribe(WILDCARD, self._funnel_ad_event)
        self.logger.debug(
            LogEvents.ADS_TRACKER_ATTACHED.value,
            parent_view_id=self.get_view_id(),
        )

    def dispose_ads_tracker(self) -> None:
        """Stop funneling and dispose the current child, if any."""
        child = self.ads_tracker
        if child is None:
            return
        self.ads_tracker = None
        child.unsubscribe(WILDCARD, self._funnel_ad_event)
        child.dispose()
        child.parent_tracker = None
        self.logger.debug(LogEvents.ADS_TRACKER_DISPOSED.value)

    def _funnel_ad_event(self, event: TrackerEvent) -> None:
        self.emit(event.type, event.data)

    def handle_ad_transition(
        self, transition: AdTransition, elapsed_ms: float | None = None
    ) -> None:
        """
        Apply a child's ad activity to this tracker's state.

        STARTED suspends content playtime. ENDED resumes it and restarts the
        since-last-ad clock. BREAK_ENDED adds the break duration to the
        cumulative ad playtime.

        Args:
            transition: Reported ad activity
            elapsed_ms: Ad break duration, for BREAK_ENDED
        """
        if transition == AdTransition.STARTED:
            self.state.set_ad_playing(True)
        elif transition == AdTransition.ENDED:
            self.state.set_ad_playing(False)
            self.state.go_last_ad()
        elif transition == AdTransition.BREAK_ENDED:
            self.state.set_ad_playing(False)
            self.state.add_ad_playtime(elapsed_ms)


__all__ = ["AdsTrackerMixin", "AdTransition", "ensure_tracker"]
