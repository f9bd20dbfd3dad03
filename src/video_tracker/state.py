"""
Lifecycle State Machine

Tracks one playback view (content or ad): flags, counters and a bank of
named elapsed-time clocks. Every ``go_*`` transition returns True only when
it actually changed the state; trackers emit an event only in that case,
which suppresses duplicate and out-of-order raw signals.
"""

import secrets
import time
from typing import Any

from .chrono import Clock, to_attribute
from .time_provider import TimeProvider, get_default_time_provider

# Clock names
SINCE_REQUESTED = "since-requested"
SINCE_STARTED = "since-started"
SINCE_PAUSED = "since-paused"
SINCE_SEEK_BEGIN = "since-seek-begin"
SINCE_BUFFER_BEGIN = "since-buffer-begin"
SINCE_AD_BREAK_BEGIN = "since-ad-break-begin"
SINCE_LAST_HEARTBEAT = "since-last-heartbeat"
SINCE_LAST_RENDITION_CHANGE = "since-last-rendition-change"
SINCE_LAST_AD_QUARTILE = "since-last-ad-quartile"
SINCE_LAST_AD = "since-last-ad"
SINCE_RESUMED = "since-resumed"
SINCE_SEEK_END = "since-seek-end"
SINCE_LAST_DOWNLOAD = "since-last-download"
SINCE_PLAYER_INIT = "since-player-init"
PLAYTIME_SINCE_LAST_EVENT = "playtime-since-last-event"

CLOCK_NAMES = (
    SINCE_REQUESTED,
    SINCE_STARTED,
    SINCE_PAUSED,
    SINCE_SEEK_BEGIN,
    SINCE_BUFFER_BEGIN,
    SINCE_AD_BREAK_BEGIN,
    SINCE_LAST_HEARTBEAT,
    SINCE_LAST_RENDITION_CHANGE,
    SINCE_LAST_AD_QUARTILE,
    SINCE_LAST_AD,
    SINCE_RESUMED,
    SINCE_SEEK_END,
    SINCE_LAST_DOWNLOAD,
    SINCE_PLAYER_INIT,
    PLAYTIME_SINCE_LAST_EVENT,
)


class VideoTrackerState:
    """
    State machine for a tracker and its monitored video.

    Attributes:
        is_readying_player: Player reported init and is still loading
        is_player_ready: Player finished loading
        is_requested: Playback was requested (user clicked play)
        is_started: First frame rendered
        is_paused: Playback paused
        is_seeking: Seek in progress
        is_buffering: Buffering in progress
        is_ad_break: Inside an ad break (independent of the view flags)
        is_playing: Derived; true while content is actually rendering
        number_of_errors: Errors in the current view, reset on end
        number_of_ads: Ads started over the life of the state
        number_of_videos: Videos started over the life of the state
        total_playtime: Cumulative playing milliseconds
        total_ad_playtime: Cumulative ad break milliseconds

    Examples:
        >>> state = VideoTrackerState()
        >>> state.go_request()
        True
        >>> state.go_request()
        False
    """

    def __init__(self, time_provider: TimeProvider | None = None):
        self.time_provider = time_provider or get_default_time_provider()

        self._view_session: str | None = None
        self._view_count = 0
        self._is_ad = False

        self.number_of_errors = 0
        self.number_of_ads = 0
        self.number_of_videos = 0
        self.total_playtime = 0.0
        self.total_ad_playtime = 0.0

        self.is_readying_player = False
        self.is_player_ready = False
        self.is_ad_break = False
        self.is_playing = False
        self._ad_playing = False
        self._unreported_playtime = 0.0
        self._last_playtime_delta = 0.0

        self._clocks = {name: Clock(self.time_provider) for name in CLOCK_NAMES}
        self._reset_view_flags()

    def _reset_view_flags(self) -> None:
        self.is_requested = False
        self.is_started = False
        self.is_paused = False
        self.is_seeking = False
        self.is_buffering = False

    def reset(self) -> None:
        """End the current view.

        Clears the view flags and the error counter and stops the view
        clocks. Cumulative counters, the view session, player readiness and
        the ad break flag survive.
        """
        self._reset_view_flags()
        self.number_of_errors = 0
        self._clocks[SINCE_REQUESTED].stop()
        self._clocks[SINCE_STARTED].stop()
        self._clocks[SINCE_RESUMED].reset()
        self._clocks[SINCE_SEEK_END].reset()
        self._update_playing()

    def clock(self, name: str) -> Clock:
        """Get a named clock (see CLOCK_NAMES)."""
        return self._clocks[name]

    def elapsed(self, name: str) -> int | None:
        """Whole milliseconds on a named clock, or None if never started."""
        return to_attribute(self._clocks[name].elapsed())

    # ===== Identity =====

    def is_ad(self) -> bool:
        return self._is_ad

    def set_is_ad(self, is_ad: bool) -> None:
        self._is_ad = is_ad

    @property
    def view_session(self) -> str:
        """Random token generated on first access, stable afterwards."""
        if self._view_session is None:
            self._view_session = f"{int(time.time() * 1000)}-{secrets.token_hex(8)}"
        return self._view_session

    @property
    def view_count(self) -> int:
        return self._view_count

    @property
    def view_id(self) -> str:
        return f"{self.view_session}-{self._view_count}"

    # ===== Playtime bookkeeping =====

    def _update_playing(self) -> None:
        playing = (
            self.is_started
            and not self.is_paused
            and not self.is_seeking
            and not self.is_buffering
            and not self._ad_playing
        )
        if playing == self.is_playing:
            return
        self.is_playing = playing
        clock = self._clocks[PLAYTIME_SINCE_LAST_EVENT]
        if playing:
            clock.start()
        else:
            self._unreported_playtime += clock.stop() or 0.0
            clock.reset()

    def _accrue_playtime(self) -> float:
        """Fold playing time since the previous read into total_playtime."""
        delta = self._unreported_playtime
        self._unreported_playtime = 0.0
        clock = self._clocks[PLAYTIME_SINCE_LAST_EVENT]
        if clock.is_running:
            delta += clock.elapsed() or 0.0
            clock.start()
        self.total_playtime += delta
        self._last_playtime_delta = delta
        return delta

    def set_ad_playing(self, ad_playing: bool) -> None:
        """Suspend (True) or resume (False) content playtime while an ad plays."""
        self._ad_playing = ad_playing
        self._update_playing()

    def add_ad_playtime(self, ms: float | None) -> None:
        if ms:
            self.total_ad_playtime += ms

    # ===== Attributes =====

    def get_state_attributes(self) -> dict[str, Any]:
        """Project flags, clocks and counters into an attribute map.

        Only the time-since fields relevant to the current branch are
        returned; ad fields carry an ``Ad`` qualified name.
        """
        att: dict[str, Any] = {}
        self._accrue_playtime()

        resumed = self._clocks[SINCE_RESUMED].started_at is not None
        seek_ended = self._clocks[SINCE_SEEK_END].started_at is not None

        if self.is_ad():
            if self.is_requested:
                att["timeSinceAdRequested"] = self.elapsed(SINCE_REQUESTED)
                att["timeSinceLastAdHeartbeat"] = self.elapsed(SINCE_LAST_HEARTBEAT)
            if self.is_started:
                att["timeSinceAdStarted"] = self.elapsed(SINCE_STARTED)
                if resumed:
                    att["timeSinceAdResumed"] = self.elapsed(SINCE_RESUMED)
                if seek_ended:
                    att["timeSinceAdSeekEnd"] = self.elapsed(SINCE_SEEK_END)
            if self.is_paused:
                att["timeSinceAdPaused"] = self.elapsed(SINCE_PAUSED)
            if self.is_buffering:
                att["timeSinceAdBufferBegin"] = self.elapsed(SINCE_BUFFER_BEGIN)
            if self.is_seeking:
                att["timeSinceAdSeekBegin"] = self.elapsed(SINCE_SEEK_BEGIN)
            if self.is_ad_break:
                att["timeSinceAdBreakBegin"] = self.elapsed(SINCE_AD_BREAK_BEGIN)
            att["numberOfAds"] = self.number_of_ads
        else:
            if self.is_requested:
                att["timeSinceRequested"] = self.elapsed(SINCE_REQUESTED)
                att["timeSinceLastHeartbeat"] = self.elapsed(SINCE_LAST_HEARTBEAT)
            if self.is_started:
                att["timeSinceStarted"] = self.elapsed(SINCE_STARTED)
                if resumed:
                    att["timeSinceResumed"] = self.elapsed(SINCE_RESUMED)
                if seek_ended:
                    att["timeSinceSeekEnd"] = self.elapsed(SINCE_SEEK_END)
            if self.is_paused:
                att["timeSincePaused"] = self.elapsed(SINCE_PAUSED)
            if self.is_buffering:
                att["timeSinceBufferBegin"] = self.elapsed(SINCE_BUFFER_BEGIN)
            if self.is_seeking:
                att["timeSinceSeekBegin"] = self.elapsed(SINCE_SEEK_BEGIN)
            att["timeSinceLastAd"] = self.elapsed(SINCE_LAST_AD)
            att["numberOfVideos"] = self.number_of_videos

        att["numberOfErrors"] = self.number_of_errors
        att["totalPlaytime"] = to_attribute(self.total_playtime)
        att["playtimeSinceLastEvent"] = to_attribute(self._last_playtime_delta)
        att["totalAdPlaytime"] = to_attribute(self.total_ad_playtime)
        return att

    # ===== Guarded transitions =====

    def go_player_init(self) -> bool:
        if self.is_readying_player or self.is_player_ready:
            return False
        self.is_readying_player = True
        self._clocks[SINCE_PLAYER_INIT].start()
        return True

    def go_player_ready(self, fallback_start_ms: float | None = None) -> bool:
        """Mark the player ready and close the player init interval.

        Args:
            fallback_start_ms: Start of the init interval when go_player_init()
                was never called (typically the tracker creation time)
        """
        if self.is_player_ready:
            return False
        clock = self._clocks[SINCE_PLAYER_INIT]
        if not self.is_readying_player and clock.started_at is None:
            clock.started_at = fallback_start_ms
        self.is_readying_player = False
        self.is_player_ready = True
        clock.stop()
        return True

    def go_request(self) -> bool:
        if self.is_requested:
            return False
        self.is_requested = True
        self._clocks[SINCE_REQUESTED].start()
        self._clocks[SINCE_LAST_AD].reset()
        return True

    def go_start(self) -> bool:
        if not self.is_requested or self.is_started:
            return False
        if self.is_ad():
            self.number_of_ads += 1
        else:
            self.number_of_videos += 1
        self.is_started = True
        self._clocks[SINCE_STARTED].start()
        self._update_playing()
        return True

    def go_end(self) -> bool:
        if not self.is_requested:
            return False
        self.reset()
        return True

    def go_pause(self) -> bool:
        if not self.is_started or self.is_paused:
            return False
        self.is_paused = True
        self._clocks[SINCE_PAUSED].start()
        self._update_playing()
        return True

    def go_resume(self) -> bool:
        if not self.is_started or not self.is_paused:
            return False
        self.is_paused = False
        self._clocks[SINCE_PAUSED].stop()
        self._clocks[SINCE_RESUMED].start()
        self._update_playing()
        return True

    def go_seek_start(self) -> bool:
        if not self.is_started or self.is_seeking:
            return False
        self.is_seeking = True
        self._clocks[SINCE_SEEK_BEGIN].start()
        self._update_playing()
        return True

    def go_seek_end(self) -> bool:
        if not self.is_started or not self.is_seeking:
            return False
        self.is_seeking = False
        self._clocks[SINCE_SEEK_BEGIN].stop()
        self._clocks[SINCE_SEEK_END].start()
        self._update_playing()
        return True

    def go_buffer_start(self) -> bool:
        # Buffering may begin before the first frame, so only a request is required
        if not self.is_requested or self.is_buffering:
            return False
        self.is_buffering = True
        self._clocks[SINCE_BUFFER_BEGIN].start()
        self._update_playing()
        return True

    def go_buffer_end(self) -> bool:
        if not self.is_requested or not self.is_buffering:
            return False
        self.is_buffering = False
        self._clocks[SINCE_BUFFER_BEGIN].stop()
        self._update_playing()
        return True

    def go_ad_break_start(self) -> bool:
        if self.is_ad_break:
            return False
        self.is_ad_break = True
        self._clocks[SINCE_AD_BREAK_BEGIN].start()
        return True

    def go_ad_break_end(self) -> bool:
        if not self.is_ad_break:
            return False
        self.is_ad_break = False
        self.is_requested = False
        self.add_ad_playtime(self._clocks[SINCE_AD_BREAK_BEGIN].stop())
        return True

    # ===== Unguarded clock restarts =====

    def go_download(self) -> None:
        self._clocks[SINCE_LAST_DOWNLOAD].start()

    def go_heartbeat(self) -> None:
        self._clocks[SINCE_LAST_HEARTBEAT].start()

    def go_rendition_change(self) -> None:
        self._clocks[SINCE_LAST_RENDITION_CHANGE].start()

    def go_ad_quartile(self) -> None:
        self._clocks[SINCE_LAST_AD_QUARTILE].start()

    def go_last_ad(self) -> None:
        self._clocks[SINCE_LAST_AD].start()

    def go_view_count_up(self) -> None:
        """Advance to the next view id; called once the END event is out."""
        self._view_count += 1

    def go_error(self) -> bool:
        self.number_of_errors += 1
        return True


__all__ = [
    "VideoTrackerState",
    "CLOCK_NAMES",
    "SINCE_REQUESTED",
    "SINCE_STARTED",
    "SINCE_PAUSED",
    "SINCE_SEEK_BEGIN",
    "SINCE_BUFFER_BEGIN",
    "SINCE_AD_BREAK_BEGIN",
    "SINCE_LAST_HEARTBEAT",
    "SINCE_LAST_RENDITION_CHANGE",
    "SINCE_LAST_AD_QUARTILE",
    "SINCE_LAST_AD",
    "SINCE_RESUMED",
    "SINCE_SEEK_END",
    "SINCE_LAST_DOWNLOAD",
    "SINCE_PLAYER_INIT",
    "PLAYTIME_SINCE_LAST_EVENT",
]
