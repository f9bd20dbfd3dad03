"""
Video Tracker

Turns raw player signals into normalized lifecycle events. Every
``send_*`` method runs the matching state guard, emits only when the guard
accepts, then applies the side effects tied to that transition (heartbeat
start/stop, reporting ad activity to the parent tracker).

Attribute maps are merged in a fixed override order, later layers winning:
identity, adapter getters, state, ``custom_data``, per-call attributes.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any

from .adapter import NullPlayerAdapter, PlayerAdapter, _package_version
from .chrono import Clock
from .config import TrackerConfig
from .emitter import Emitter
from .events import LogEvents, TrackerEvents, prefixed
from .exceptions import InvalidAdapterError, TrackerConfigError
from .heartbeat import HeartbeatScheduler
from .hierarchy import AdsTrackerMixin, AdTransition
from .metrics import MetricLabels, MetricsCollector, NoOpMetrics, TrackerMetrics
from .state import (
    SINCE_AD_BREAK_BEGIN,
    SINCE_BUFFER_BEGIN,
    SINCE_LAST_AD_QUARTILE,
    SINCE_LAST_DOWNLOAD,
    SINCE_LAST_RENDITION_CHANGE,
    SINCE_PAUSED,
    SINCE_PLAYER_INIT,
    SINCE_REQUESTED,
    SINCE_SEEK_BEGIN,
    SINCE_STARTED,
    VideoTrackerState,
)
from .time_provider import TimeProvider, get_default_time_provider

# (attribute key, adapter accessor) per branch
AD_GETTERS = (
    ("adTitle", "get_title"),
    ("adBitrate", "get_bitrate"),
    ("adRenditionName", "get_rendition_name"),
    ("adRenditionBitrate", "get_rendition_bitrate"),
    ("adRenditionHeight", "get_rendition_height"),
    ("adRenditionWidth", "get_rendition_width"),
    ("adDuration", "get_duration"),
    ("adPlayhead", "get_playhead"),
    ("adLanguage", "get_language"),
    ("adSrc", "get_src"),
    ("adCdn", "get_cdn"),
    ("adIsMuted", "is_muted"),
    ("adFps", "get_fps"),
    ("adQuartile", "get_ad_quartile"),
    ("adPosition", "get_ad_position"),
)

CONTENT_GETTERS = (
    ("contentTitle", "get_title"),
    ("contentIsLive", "is_live"),
    ("contentBitrate", "get_bitrate"),
    ("contentRenditionName", "get_rendition_name"),
    ("contentRenditionBitrate", "get_rendition_bitrate"),
    ("contentRenditionHeight", "get_rendition_height"),
    ("contentRenditionWidth", "get_rendition_width"),
    ("contentDuration", "get_duration"),
    ("contentPlayhead", "get_playhead"),
    ("contentLanguage", "get_language"),
    ("contentSrc", "get_src"),
    ("contentPlayrate", "get_playrate"),
    ("contentIsFullscreen", "is_fullscreen"),
    ("contentIsMuted", "is_muted"),
    ("contentCdn", "get_cdn"),
    ("contentIsAutoplayed", "is_autoplayed"),
    ("contentPreload", "get_preload"),
    ("contentFps", "get_fps"),
)

_OPTION_ALIASES = {
    "isAd": "is_ad",
    "customData": "custom_data",
    "parentTracker": "parent_tracker",
    "adsTracker": "ads_tracker",
}


@dataclass
class TrackerOptions:
    """
    Options accepted by VideoTracker and set_options().

    Fields left as None are not applied.

    Attributes:
        is_ad: Track the ad branch instead of content
        custom_data: Attributes overriding computed values on every event
        parent_tracker: Content tracker owning this ads tracker
        ads_tracker: Child tracker for ads
        heartbeat: Heartbeat interval in milliseconds
        tag: Rendering surface handle handed to the adapter
    """

    is_ad: bool | None = None
    custom_data: dict[str, Any] | None = None
    parent_tracker: Any = None
    ads_tracker: Any = None
    heartbeat: float | None = None
    tag: Any = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TrackerOptions":
        """Build options from a mapping; camelCase keys are accepted.

        Raises:
            TrackerConfigError: On unknown keys
        """
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            name = _OPTION_ALIASES.get(key, key)
            if name not in known:
                raise TrackerConfigError("Unknown tracker option", config_key=key)
            values[name] = value
        return cls(**values)

    @classmethod
    def coerce(cls, options: "TrackerOptions | dict[str, Any] | None") -> "TrackerOptions":
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        if isinstance(options, dict):
            return cls.from_dict(options)
        raise TrackerConfigError(
            "Tracker options must be a TrackerOptions or a dict",
            config_key="options",
            value=type(options).__name__,
        )


class VideoTracker(AdsTrackerMixin, Emitter):
    """
    Tracker for one content or ad playback surface.

    Attributes:
        state: Lifecycle state machine, owned exclusively by this tracker
        adapter: Player adapter answering attribute accessors
        custom_data: Attributes merged over computed values on every event
        heartbeat: Own heartbeat interval (ms), or None to inherit
        config: Defaults and limits (see TrackerConfig)

    Examples:
        Content tracker with a nested ads tracker:
        >>> tracker = VideoTracker(MyAdapter(player), options={"heartbeat": 10000})
        >>> tracker.set_ads_tracker(VideoTracker(MyAdsAdapter(player)))
        >>> tracker.subscribe("*", lambda e: print(e.type))
        >>> tracker.send_request()
        CONTENT_REQUEST
        >>> tracker.ads_tracker.send_request()
        AD_REQUEST
    """

    def __init__(
        self,
        adapter: PlayerAdapter | None = None,
        *,
        options: TrackerOptions | dict[str, Any] | None = None,
        config: TrackerConfig | None = None,
        logger: Any = None,
        time_provider: TimeProvider | None = None,
        metrics: MetricsCollector | None = None,
    ):
        super().__init__(logger=logger)
        self.config = config or TrackerConfig()
        self.time_provider = time_provider or get_default_time_provider()
        self.metrics = metrics or NoOpMetrics()

        self.state = VideoTrackerState(self.time_provider)
        self.custom_data: dict[str, Any] = {}
        self.heartbeat: float | None = None
        self.adapter: PlayerAdapter = NullPlayerAdapter()

        self._heartbeat_scheduler: HeartbeatScheduler | None = None
        self._last_rendition_bitrate: float | None = None
        self._tracker_ready = Clock(self.time_provider)
        self._tracker_ready.start()

        opts = TrackerOptions.coerce(options)
        self.set_options(opts)
        if adapter is not None:
            self.set_adapter(adapter, opts.tag)

        self.logger.debug(
            LogEvents.TRACKER_READY.value,
            tracker=self.get_tracker_name(),
            version=self.get_tracker_version(),
            is_ad=self.is_ad(),
        )

    # ===== Wiring =====

    def set_options(self, options: TrackerOptions | dict[str, Any] | None) -> None:
        """Apply the options that are set; others keep their current value."""
        opts = TrackerOptions.coerce(options)
        if opts.custom_data is not None:
            self.custom_data = opts.custom_data
        if opts.parent_tracker is not None:
            self.parent_tracker = opts.parent_tracker
        if opts.ads_tracker is not None:
            self.set_ads_tracker(opts.ads_tracker)
        if opts.heartbeat:
            self.heartbeat = opts.heartbeat
        if opts.is_ad is not None:
            self.set_is_ad(opts.is_ad)

    def set_adapter(self, adapter: PlayerAdapter | None, tag: Any = None) -> None:
        """
        Replace the player adapter.

        The previous adapter's listeners are unregistered before the new
        adapter registers its own. None installs a NullPlayerAdapter.

        Raises:
            InvalidAdapterError: If adapter is not a PlayerAdapter
        """
        if adapter is None:
            adapter = NullPlayerAdapter()
        if not isinstance(adapter, PlayerAdapter):
            raise InvalidAdapterError("Expected a PlayerAdapter", received=adapter)

        self.adapter.unregister_listeners(self)
        if tag is not None:
            adapter.tag = tag
        self.adapter = adapter
        adapter.register_listeners(self)

    def dispose(self) -> None:
        """Stop the heartbeat, dispose the ads tracker and detach the adapter.

        Safe to call more than once.
        """
        self.dispose_ads_tracker()
        self._stop_heartbeat()
        self.adapter.unregister_listeners(self)
        self.adapter = NullPlayerAdapter()
        self.logger.debug(LogEvents.TRACKER_DISPOSED.value, view_id=self.get_view_id())

    def is_ad(self) -> bool:
        return self.state.is_ad()

    def set_is_ad(self, is_ad: bool) -> None:
        self.state.set_is_ad(is_ad)

    # ===== Identity =====

    def get_tracker_name(self) -> str:
        return self.config.tracker_name or self._adapter_value("get_tracker_name")

    def get_tracker_version(self) -> str:
        return self.config.tracker_version or self._adapter_value("get_tracker_version")

    def get_heartbeat(self) -> float:
        """Own heartbeat, else the parent's, else the configured default."""
        if self.heartbeat:
            return self.heartbeat
        parent = self.parent_tracker
        if parent is not None and parent.heartbeat:
            return parent.heartbeat
        return self.config.default_heartbeat_ms

    def get_view_id(self) -> str:
        """View id of the parent tracker when nested, otherwise our own."""
        parent = self.parent_tracker
        if parent is not None:
            return parent.get_view_id()
        return self.state.view_id

    def get_view_session(self) -> str:
        parent = self.parent_tracker
        if parent is not None:
            return parent.get_view_session()
        return self.state.view_session

    # ===== Attributes =====

    def _adapter_value(self, accessor: str) -> Any:
        try:
            value = getattr(self.adapter, accessor)()
        except Exception as e:
            self.logger.warning(
                LogEvents.ADAPTER_FAILED.value,
                accessor=accessor,
                error=str(e),
                error_type=type(e).__name__,
            )
            self.metrics.increment(
                TrackerMetrics.ADAPTER_FAILURES, labels={MetricLabels.BRANCH: self._branch}
            )
            return None
        if isinstance(value, Enum):
            return value.value
        return value

    @property
    def _branch(self) -> str:
        return "ad" if self.is_ad() else "content"

    def _timing_key(self, name: str) -> str:
        """Ad trackers report ``timeSinceX`` as ``timeSinceAdX``."""
        if self.is_ad():
            return name.replace("timeSince", "timeSinceAd", 1)
        return name

    def get_attributes(self, extra: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Build the attribute map for an event.

        Args:
            extra: Per-call attributes, applied last

        Returns:
            Merged attribute map
        """
        att: dict[str, Any] = {
            "viewId": self.get_view_id(),
            "viewSession": self.get_view_session(),
            "trackerName": self.get_tracker_name(),
            "trackerVersion": self.get_tracker_version(),
            "coreVersion": _package_version(),
            "playerName": self._adapter_value("get_player_name"),
            "playerVersion": self._adapter_value("get_player_version"),
            "timeSinceTrackerReady": int(round(self._tracker_ready.elapsed())),
        }

        getters = AD_GETTERS if self.is_ad() else CONTENT_GETTERS
        for key, accessor in getters:
            att[key] = self._adapter_value(accessor)

        att.update(self.state.get_state_attributes())
        att.update(self.custom_data)
        if extra:
            att.update(extra)
        return att

    def get_rendition_shift(self, save: bool = False) -> str | None:
        """
        Compare the current rendition bitrate with the last saved one.

        Args:
            save: Remember the current bitrate for the next comparison

        Returns:
            "up", "down", or None when unchanged or unknown
        """
        current = self._adapter_value("get_rendition_bitrate")
        last = self._last_rendition_bitrate
        shift = None
        if current and last:
            if current > last:
                shift = "up"
            elif current < last:
                shift = "down"
        if save:
            self._last_rendition_bitrate = current
        return shift

    # ===== Emission helpers =====

    def send(self, event_name: str, attributes: dict[str, Any] | None = None) -> None:
        """Emit an event with computed attributes, bypassing state guards."""
        data = self.get_attributes(attributes)
        self.logger.debug(
            LogEvents.EVENT_EMITTED.value, event_name=event_name, view_id=data.get("viewId")
        )
        self.metrics.increment(
            TrackerMetrics.EVENTS_EMITTED, labels={MetricLabels.EVENT_NAME: event_name}
        )
        self.emit(event_name, data)

    def _send_prefixed(
        self, event: TrackerEvents, attributes: dict[str, Any] | None = None
    ) -> None:
        self.send(prefixed(event, self.is_ad()), attributes)

    def _rejected(self, event: TrackerEvents) -> None:
        self.logger.debug(
            LogEvents.TRANSITION_REJECTED.value, event_name=event.value, branch=self._branch
        )
        self.metrics.increment(
            TrackerMetrics.TRANSITIONS_REJECTED, labels={MetricLabels.EVENT_NAME: event.value}
        )

    def _warn_missing(self, event: TrackerEvents, parameter: str) -> None:
        self.logger.warning(
            LogEvents.MISSING_PARAMETER.value, event_name=event.value, parameter=parameter
        )
        self.metrics.increment(
            TrackerMetrics.MISSING_PARAMETERS, labels={MetricLabels.EVENT_NAME: event.value}
        )

    def _closing(
        self,
        attributes: dict[str, Any] | None,
        durations: dict[str, int | None],
        interval: str | None = None,
    ) -> dict[str, Any]:
        """Merge the durations of a closed interval under caller attributes."""
        if interval is not None:
            for value in durations.values():
                if value is not None:
                    self.metrics.timing(
                        TrackerMetrics.INTERVAL_DURATION_MS,
                        value,
                        labels={MetricLabels.INTERVAL: interval},
                    )
        return {**durations, **(attributes or {})}

    def _report_to_parent(
        self, transition: AdTransition, elapsed_ms: float | None = None
    ) -> None:
        parent = self.parent_tracker
        if parent is not None and self.is_ad():
            parent.handle_ad_transition(transition, elapsed_ms)

    # ===== Heartbeat =====

    def _start_heartbeat(self) -> None:
        self._stop_heartbeat()
        interval = self.config.heartbeat_interval(self.get_heartbeat())
        scheduler = HeartbeatScheduler(
            self.send_heartbeat, interval, self.time_provider, self.logger
        )
        if scheduler.start():
            self._heartbeat_scheduler = scheduler
            self.metrics.gauge(TrackerMetrics.ACTIVE_HEARTBEATS, 1)

    def _stop_heartbeat(self) -> None:
        if self._heartbeat_scheduler is None:
            return
        self._heartbeat_scheduler.stop()
        self._heartbeat_scheduler = None
        self.metrics.gauge(TrackerMetrics.ACTIVE_HEARTBEATS, -1)

    @property
    def is_heartbeat_running(self) -> bool:
        return self._heartbeat_scheduler is not None and self._heartbeat_scheduler.is_running

    # ===== Player events =====

    def send_player_init(self, attributes: dict[str, Any] | None = None) -> None:
        """Report that the player started loading."""
        if self.state.go_player_init():
            self.send(TrackerEvents.PLAYER_INIT.value, attributes)
        else:
            self._rejected(TrackerEvents.PLAYER_INIT)

    def send_player_ready(self, attributes: dict[str, Any] | None = None) -> None:
        """Report that the player finished loading.

        ``timeSincePlayerInit`` is measured from PLAYER_INIT, or from tracker
        creation when the player never reported its init.
        """
        if not self.state.go_player_ready(self._tracker_ready.started_at):
            self._rejected(TrackerEvents.PLAYER_READY)
            return
        att = self._closing(
            attributes, {"timeSincePlayerInit": self.state.elapsed(SINCE_PLAYER_INIT)}
        )
        self.send(TrackerEvents.PLAYER_READY.value, att)

    def send_download(self, attributes: dict[str, Any] | None = None) -> None:
        """Report a download milestone; requires a ``state`` label."""
        if (attributes or {}).get("state") is None:
            self._warn_missing(TrackerEvents.DOWNLOAD, "state")
        att = self._closing(
            attributes,
            {"timeSinceLastDownload": self.state.elapsed(SINCE_LAST_DOWNLOAD)},
        )
        self.state.go_download()
        self.send(TrackerEvents.DOWNLOAD.value, att)

    # ===== View lifecycle =====

    def send_request(self, attributes: dict[str, Any] | None = None) -> None:
        """Open a view and start the heartbeat.

        The heartbeat runs as a task on the running asyncio loop. Called from
        synchronous code with no running loop, no heartbeat is scheduled
        (``is_heartbeat_running`` stays False); call send_heartbeat() directly
        or issue the request from inside the loop.
        """
        if not self.state.go_request():
            self._rejected(TrackerEvents.REQUEST)
            return
        self._send_prefixed(TrackerEvents.REQUEST, attributes)
        self._start_heartbeat()

    def send_start(self, attributes: dict[str, Any] | None = None) -> None:
        if not self.state.go_start():
            self._rejected(TrackerEvents.START)
            return
        self._send_prefixed(TrackerEvents.START, attributes)
        self._report_to_parent(AdTransition.STARTED)

    def send_end(self, attributes: dict[str, Any] | None = None) -> None:
        if not self.state.go_end():
            self._rejected(TrackerEvents.END)
            return
        att = self._closing(
            attributes,
            {
                self._timing_key("timeSinceRequested"): self.state.elapsed(SINCE_REQUESTED),
                self._timing_key("timeSinceStarted"): self.state.elapsed(SINCE_STARTED),
            },
        )
        self._stop_heartbeat()
        self._send_prefixed(TrackerEvents.END, att)
        self.state.go_view_count_up()
        self._report_to_parent(AdTransition.ENDED)

    def send_pause(self, attributes: dict[str, Any] | None = None) -> None:
        if self.state.go_pause():
            self._send_prefixed(TrackerEvents.PAUSE, attributes)
        else:
            self._rejected(TrackerEvents.PAUSE)

    def send_resume(self, attributes: dict[str, Any] | None = None) -> None:
        if not self.state.go_resume():
            self._rejected(TrackerEvents.RESUME)
            return
        att = self._closing(
            attributes,
            {self._timing_key("timeSincePaused"): self.state.elapsed(SINCE_PAUSED)},
            interval="paused",
        )
        self._send_prefixed(TrackerEvents.RESUME, att)

    def send_seek_start(self, attributes: dict[str, Any] | None = None) -> None:
        if self.state.go_seek_start():
            self._send_prefixed(TrackerEvents.SEEK_START, attributes)
        else:
            self._rejected(TrackerEvents.SEEK_START)

    def send_seek_end(self, attributes: dict[str, Any] | None = None) -> None:
        if not self.state.go_seek_end():
            self._rejected(TrackerEvents.SEEK_END)
            return
        att = self._closing(
            attributes,
            {self._timing_key("timeSinceSeekBegin"): self.state.elapsed(SINCE_SEEK_BEGIN)},
            interval="seeking",
        )
        self._send_prefixed(TrackerEvents.SEEK_END, att)

    def send_buffer_start(self, attributes: dict[str, Any] | None = None) -> None:
        if self.state.go_buffer_start():
            self._send_prefixed(TrackerEvents.BUFFER_START, attributes)
        else:
            self._rejected(TrackerEvents.BUFFER_START)

    def send_buffer_end(self, attributes: dict[str, Any] | None = None) -> None:
        if not self.state.go_buffer_end():
            self._rejected(TrackerEvents.BUFFER_END)
            return
        att = self._closing(
            attributes,
            {
                self._timing_key("timeSinceBufferBegin"): self.state.elapsed(
                    SINCE_BUFFER_BEGIN
                )
            },
            interval="buffering",
        )
        self._send_prefixed(TrackerEvents.BUFFER_END, att)

    def send_heartbeat(self, attributes: dict[str, Any] | None = None) -> None:
        """Re-emit the current snapshot while a view is requested."""
        if not self.state.is_requested:
            self._rejected(TrackerEvents.HEARTBEAT)
            return
        self.metrics.increment(
            TrackerMetrics.HEARTBEATS, labels={MetricLabels.BRANCH: self._branch}
        )
        self._send_prefixed(TrackerEvents.HEARTBEAT, attributes)
        self.state.go_heartbeat()

    def send_rendition_changed(self, attributes: dict[str, Any] | None = None) -> None:
        att = self._closing(
            attributes,
            {
                "timeSinceLastRenditionChange": self.state.elapsed(
                    SINCE_LAST_RENDITION_CHANGE
                ),
                "shift": self.get_rendition_shift(save=True),
            },
        )
        self._send_prefixed(TrackerEvents.RENDITION_CHANGE, att)
        self.state.go_rendition_change()

    def send_error(self, attributes: dict[str, Any] | None = None) -> None:
        self.state.go_error()
        self._send_prefixed(TrackerEvents.ERROR, attributes)

    # ===== Ads only =====

    def send_ad_break_start(self, attributes: dict[str, Any] | None = None) -> None:
        if self.is_ad() and self.state.go_ad_break_start():
            self.send(TrackerEvents.AD_BREAK_START.value, attributes)
        else:
            self._rejected(TrackerEvents.AD_BREAK_START)

    def send_ad_break_end(self, attributes: dict[str, Any] | None = None) -> None:
        if not (self.is_ad() and self.state.go_ad_break_end()):
            self._rejected(TrackerEvents.AD_BREAK_END)
            return
        elapsed = self.state.elapsed(SINCE_AD_BREAK_BEGIN)
        att = self._closing(
            attributes, {"timeSinceAdBreakBegin": elapsed}, interval="ad_break"
        )
        # The break ends the ad view; nothing is left to heartbeat
        self._stop_heartbeat()
        self.send(TrackerEvents.AD_BREAK_END.value, att)
        self._report_to_parent(AdTransition.BREAK_ENDED, elapsed)

    def send_ad_quartile(self, attributes: dict[str, Any] | None = None) -> None:
        """Report a quartile; requires a ``quartile`` number."""
        if not self.is_ad():
            self._rejected(TrackerEvents.AD_QUARTILE)
            return
        if (attributes or {}).get("quartile") is None:
            self._warn_missing(TrackerEvents.AD_QUARTILE, "quartile")
        att = self._closing(
            attributes,
            {"timeSinceLastAdQuartile": self.state.elapsed(SINCE_LAST_AD_QUARTILE)},
        )
        self.send(TrackerEvents.AD_QUARTILE.value, att)
        self.state.go_ad_quartile()

    def send_ad_click(self, attributes: dict[str, Any] | None = None) -> None:
        """Report a click-through; requires a ``url``."""
        if not self.is_ad():
            self._rejected(TrackerEvents.AD_CLICK)
            return
        if (attributes or {}).get("url") is None:
            self._warn_missing(TrackerEvents.AD_CLICK, "url")
        self.send(TrackerEvents.AD_CLICK.value, attributes)


__all__ = ["VideoTracker", "TrackerOptions", "AD_GETTERS", "CONTENT_GETTERS"]
