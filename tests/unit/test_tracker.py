"""Unit tests for VideoTracker."""

from unittest.mock import MagicMock

import pytest
from structlog.testing import capture_logs

from video_tracker.adapter import NullPlayerAdapter, PlayerAdapter, StaticPlayerAdapter
from video_tracker.config import TrackerConfig
from video_tracker.events import AdPosition, LogEvents
from video_tracker.exceptions import InvalidAdapterError, TrackerConfigError
from video_tracker.log_config import get_context_logger
from video_tracker.tracker import TrackerOptions, VideoTracker


def event_types(events):
    return [e.type for e in events]


class TestTrackerConstruction:
    """Test options and adapter wiring."""

    def test_defaults(self, content_tracker):
        assert content_tracker.is_ad() is False
        assert isinstance(content_tracker.adapter, NullPlayerAdapter)
        assert content_tracker.custom_data == {}
        assert content_tracker.parent_tracker is None
        assert content_tracker.ads_tracker is None

    def test_options_from_dict_with_camel_case(self, simulated_time_provider):
        tracker = VideoTracker(
            options={"isAd": True, "customData": {"a": 1}, "heartbeat": 10000},
            time_provider=simulated_time_provider,
        )

        assert tracker.is_ad() is True
        assert tracker.custom_data == {"a": 1}
        assert tracker.heartbeat == 10000

    def test_unknown_option_rejected(self):
        with pytest.raises(TrackerConfigError):
            VideoTracker(options={"bogus": 1})

    def test_set_options_applies_only_set_fields(self, content_tracker):
        content_tracker.set_options(TrackerOptions(custom_data={"x": 1}, heartbeat=9000))
        content_tracker.set_options(TrackerOptions(is_ad=True))

        assert content_tracker.custom_data == {"x": 1}
        assert content_tracker.heartbeat == 9000
        assert content_tracker.is_ad() is True

    def test_adapter_registered_with_tag(self, simulated_time_provider):
        adapter = MagicMock(spec=PlayerAdapter)
        tag = object()

        tracker = VideoTracker(
            adapter, options={"tag": tag}, time_provider=simulated_time_provider
        )

        adapter.register_listeners.assert_called_once_with(tracker)
        assert adapter.tag is tag

    def test_set_adapter_unregisters_previous(self, content_tracker):
        first = MagicMock(spec=PlayerAdapter)
        second = MagicMock(spec=PlayerAdapter)

        content_tracker.set_adapter(first)
        content_tracker.set_adapter(second)

        first.unregister_listeners.assert_called_once_with(content_tracker)
        second.register_listeners.assert_called_once_with(content_tracker)
        assert content_tracker.adapter is second

    def test_set_adapter_rejects_non_adapter(self, content_tracker):
        with pytest.raises(InvalidAdapterError):
            content_tracker.set_adapter(object())

    def test_dispose_detaches_adapter(self, content_tracker):
        adapter = MagicMock(spec=PlayerAdapter)
        content_tracker.set_adapter(adapter)

        content_tracker.dispose()
        content_tracker.dispose()

        adapter.unregister_listeners.assert_called_once_with(content_tracker)
        assert isinstance(content_tracker.adapter, NullPlayerAdapter)


class TestEmission:
    """Test guarded emission and event naming."""

    def test_request_emits_once(self, content_tracker, record_events):
        events = record_events(content_tracker)

        content_tracker.send_request()
        content_tracker.send_request()

        assert event_types(events) == ["CONTENT_REQUEST"]

    def test_ad_prefix(self, simulated_time_provider, record_events):
        tracker = VideoTracker(options={"isAd": True}, time_provider=simulated_time_provider)
        events = record_events(tracker)

        tracker.send_request()
        tracker.send_start()
        tracker.send_end()

        assert event_types(events) == ["AD_REQUEST", "AD_START", "AD_END"]

    def test_full_view_sequence(self, content_tracker, record_events):
        events = record_events(content_tracker)

        content_tracker.send_player_ready()
        content_tracker.send_request()
        content_tracker.send_buffer_start()
        content_tracker.send_buffer_end()
        content_tracker.send_start()
        content_tracker.send_pause()
        content_tracker.send_resume()
        content_tracker.send_seek_start()
        content_tracker.send_seek_end()
        content_tracker.send_error({"errorMessage": "decode"})
        content_tracker.send_end()

        assert event_types(events) == [
            "PLAYER_READY",
            "CONTENT_REQUEST",
            "CONTENT_BUFFER_START",
            "CONTENT_BUFFER_END",
            "CONTENT_START",
            "CONTENT_PAUSE",
            "CONTENT_RESUME",
            "CONTENT_SEEK_START",
            "CONTENT_SEEK_END",
            "CONTENT_ERROR",
            "CONTENT_END",
        ]

    def test_out_of_order_signals_suppressed(self, content_tracker, record_events):
        events = record_events(content_tracker)

        content_tracker.send_start()
        content_tracker.send_pause()
        content_tracker.send_end()

        assert events == []

    def test_rejection_logged_at_debug(self, content_tracker, mock_logger):
        content_tracker.send_end()

        rejected = [
            c for c in mock_logger.debug.call_args_list
            if c.args and c.args[0] == LogEvents.TRANSITION_REJECTED.value
        ]
        assert len(rejected) == 1
        mock_logger.warning.assert_not_called()

    def test_error_counts(self, content_tracker, record_events):
        events = record_events(content_tracker)
        content_tracker.send_request()

        content_tracker.send_error()
        content_tracker.send_error()

        assert events[-1].type == "CONTENT_ERROR"
        assert events[-1].data["numberOfErrors"] == 2

    def test_send_bypasses_guards(self, content_tracker, record_events):
        events = record_events(content_tracker)

        content_tracker.send("CUSTOM_EVENT", {"foo": "bar"})

        assert events[0].type == "CUSTOM_EVENT"
        assert events[0].data["foo"] == "bar"

    def test_emission_is_synchronous_and_ordered(self, content_tracker):
        seen = []
        content_tracker.subscribe("CONTENT_REQUEST", lambda e: seen.append("handler"))

        content_tracker.send_request()
        seen.append("after")

        assert seen == ["handler", "after"]


class TestAttributes:
    """Test attribute aggregation order."""

    def test_identity(self, simulated_time_provider, static_adapter):
        tracker = VideoTracker(static_adapter, time_provider=simulated_time_provider)
        simulated_time_provider.advance(42)

        att = tracker.get_attributes()

        assert att["trackerName"] == "test-tracker"
        assert att["trackerVersion"] == "9.9.9"
        assert att["playerName"] == "test-tracker"
        assert att["viewId"] == tracker.state.view_id
        assert att["viewSession"] == tracker.state.view_session
        assert att["timeSinceTrackerReady"] == 42
        assert "coreVersion" in att

    def test_config_overrides_tracker_name(self, simulated_time_provider, static_adapter):
        tracker = VideoTracker(
            static_adapter,
            config=TrackerConfig(tracker_name="configured"),
            time_provider=simulated_time_provider,
        )

        assert tracker.get_attributes()["trackerName"] == "configured"

    def test_content_getters(self, simulated_time_provider, static_adapter):
        tracker = VideoTracker(static_adapter, time_provider=simulated_time_provider)

        att = tracker.get_attributes()

        assert att["contentTitle"] == "Big Buck Bunny"
        assert att["contentDuration"] == 596000
        assert att["contentIsLive"] is None
        assert "adTitle" not in att

    def test_ad_getters(self, simulated_time_provider):
        adapter = StaticPlayerAdapter(title="Promo", ad_position=AdPosition.PRE, ad_quartile=2)
        tracker = VideoTracker(
            adapter, options={"isAd": True}, time_provider=simulated_time_provider
        )

        att = tracker.get_attributes()

        assert att["adTitle"] == "Promo"
        assert att["adPosition"] == "pre"
        assert att["adQuartile"] == 2
        assert "contentTitle" not in att

    def test_override_order(self, simulated_time_provider, static_adapter):
        """Test custom data beats getters and call attributes beat custom data."""
        tracker = VideoTracker(
            static_adapter,
            options={"customData": {"contentTitle": "custom", "numberOfVideos": 99}},
            time_provider=simulated_time_provider,
        )

        att = tracker.get_attributes()
        assert att["contentTitle"] == "custom"
        assert att["numberOfVideos"] == 99

        att = tracker.get_attributes({"contentTitle": "per-call"})
        assert att["contentTitle"] == "per-call"

    def test_adapter_failure_degrades_to_none(self, simulated_time_provider, mock_logger):
        class BrokenAdapter(NullPlayerAdapter):
            def get_title(self):
                raise RuntimeError("player gone")

        tracker = VideoTracker(
            BrokenAdapter(), logger=mock_logger, time_provider=simulated_time_provider
        )

        att = tracker.get_attributes()

        assert att["contentTitle"] is None
        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.args[0] == LogEvents.ADAPTER_FAILED.value
        assert mock_logger.warning.call_args.kwargs["accessor"] == "get_title"


class TestClosingDurations:
    """Test durations attached to events that close an interval."""

    def test_resume_carries_pause_duration(
        self, content_tracker, simulated_time_provider, record_events
    ):
        events = record_events(content_tracker)
        content_tracker.send_request()
        content_tracker.send_start()
        content_tracker.send_pause()
        simulated_time_provider.advance(1200)

        content_tracker.send_resume()

        assert events[-1].data["timeSincePaused"] == 1200

    def test_ad_resume_uses_ad_key(self, simulated_time_provider, record_events):
        tracker = VideoTracker(options={"isAd": True}, time_provider=simulated_time_provider)
        events = record_events(tracker)
        tracker.send_request()
        tracker.send_start()
        tracker.send_pause()
        simulated_time_provider.advance(300)

        tracker.send_resume()

        assert events[-1].data["timeSinceAdPaused"] == 300
        assert "timeSincePaused" not in events[-1].data

    def test_buffer_and_seek_durations(
        self, content_tracker, simulated_time_provider, record_events
    ):
        events = record_events(content_tracker)
        content_tracker.send_request()
        content_tracker.send_buffer_start()
        simulated_time_provider.advance(80)
        content_tracker.send_buffer_end()
        assert events[-1].data["timeSinceBufferBegin"] == 80

        content_tracker.send_start()
        content_tracker.send_seek_start()
        simulated_time_provider.advance(60)
        content_tracker.send_seek_end()
        assert events[-1].data["timeSinceSeekBegin"] == 60

    def test_end_carries_view_durations(
        self, content_tracker, simulated_time_provider, record_events
    ):
        events = record_events(content_tracker)
        content_tracker.send_request()
        simulated_time_provider.advance(100)
        content_tracker.send_start()
        simulated_time_provider.advance(900)

        content_tracker.send_end()

        assert events[-1].data["timeSinceRequested"] == 1000
        assert events[-1].data["timeSinceStarted"] == 900

    def test_caller_attributes_win(self, content_tracker, record_events):
        events = record_events(content_tracker)
        content_tracker.send_request()
        content_tracker.send_start()
        content_tracker.send_pause()

        content_tracker.send_resume({"timeSincePaused": 1})

        assert events[-1].data["timeSincePaused"] == 1


class TestViewId:
    """Test view identifiers across views."""

    def test_end_keeps_view_id_then_advances(self, content_tracker, record_events):
        events = record_events(content_tracker)
        content_tracker.send_request()
        content_tracker.send_end()
        content_tracker.send_request()

        first_request, end, second_request = events
        assert end.data["viewId"] == first_request.data["viewId"]
        assert second_request.data["viewId"] != first_request.data["viewId"]
        assert second_request.data["viewSession"] == first_request.data["viewSession"]


class TestPlaytime:
    """Test playtime reported in events."""

    def test_playtime_at_pause_and_buffer(
        self, content_tracker, simulated_time_provider, record_events
    ):
        events = record_events(content_tracker)
        content_tracker.send_request()
        content_tracker.send_start()
        simulated_time_provider.advance(1000)

        content_tracker.send_pause()
        assert events[-1].data["totalPlaytime"] == 1000

        simulated_time_provider.advance(4000)
        content_tracker.send_resume()
        simulated_time_provider.advance(2000)
        content_tracker.send_buffer_start()

        assert events[-1].data["totalPlaytime"] == 3000


class TestMissingParameters:
    """Test required parameters produce one warning and still emit."""

    def test_download_without_state(self, content_tracker, mock_logger, record_events):
        events = record_events(content_tracker)

        content_tracker.send_download()

        assert event_types(events) == ["DOWNLOAD"]
        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.kwargs["parameter"] == "state"

    def test_download_with_state(self, content_tracker, mock_logger, record_events):
        events = record_events(content_tracker)

        content_tracker.send_download({"state": "manifest"})

        assert events[0].data["state"] == "manifest"
        mock_logger.warning.assert_not_called()

    def test_ad_quartile_without_quartile(self, simulated_time_provider, record_events):
        with capture_logs() as logs:
            tracker = VideoTracker(
                options={"isAd": True},
                logger=get_context_logger("test"),
                time_provider=simulated_time_provider,
            )
            events = record_events(tracker)
            tracker.send_ad_quartile()

        assert event_types(events) == ["AD_QUARTILE"]
        warnings = [entry for entry in logs if entry["log_level"] == "warning"]
        assert len(warnings) == 1
        assert warnings[0]["parameter"] == "quartile"

    def test_ad_quartile_zero_is_present(self, simulated_time_provider, mock_logger):
        tracker = VideoTracker(
            options={"isAd": True}, logger=mock_logger, time_provider=simulated_time_provider
        )

        tracker.send_ad_quartile({"quartile": 0})

        mock_logger.warning.assert_not_called()

    def test_ad_click_without_url(self, simulated_time_provider, mock_logger, record_events):
        tracker = VideoTracker(
            options={"isAd": True}, logger=mock_logger, time_provider=simulated_time_provider
        )
        events = record_events(tracker)

        tracker.send_ad_click()

        assert event_types(events) == ["AD_CLICK"]
        mock_logger.warning.assert_called_once()


class TestAdOnlyEvents:
    """Test ad-only events on content and ad trackers."""

    def test_ignored_on_content(self, content_tracker, mock_logger, record_events):
        events = record_events(content_tracker)

        content_tracker.send_ad_break_start()
        content_tracker.send_ad_break_end()
        content_tracker.send_ad_quartile({"quartile": 1})
        content_tracker.send_ad_click({"url": "https://example.com"})

        assert events == []
        mock_logger.warning.assert_not_called()

    def test_ad_break_cycle(self, simulated_time_provider, record_events):
        tracker = VideoTracker(options={"isAd": True}, time_provider=simulated_time_provider)
        events = record_events(tracker)

        tracker.send_ad_break_start()
        tracker.send_ad_break_start()
        simulated_time_provider.advance(30000)
        tracker.send_ad_break_end()

        assert event_types(events) == ["AD_BREAK_START", "AD_BREAK_END"]
        assert events[-1].data["timeSinceAdBreakBegin"] == 30000
        assert events[-1].data["totalAdPlaytime"] == 30000

    def test_quartile_interval(self, simulated_time_provider, record_events):
        tracker = VideoTracker(options={"isAd": True}, time_provider=simulated_time_provider)
        events = record_events(tracker)

        tracker.send_ad_quartile({"quartile": 1})
        simulated_time_provider.advance(2500)
        tracker.send_ad_quartile({"quartile": 2})

        assert events[0].data["timeSinceLastAdQuartile"] is None
        assert events[1].data["timeSinceLastAdQuartile"] == 2500


class TestRendition:
    """Test rendition shift detection."""

    def test_shift_sequence(self, content_tracker):
        adapter = StaticPlayerAdapter()
        content_tracker.set_adapter(adapter)

        assert content_tracker.get_rendition_shift(True) is None
        adapter.update(rendition_bitrate=1)
        assert content_tracker.get_rendition_shift(True) is None
        adapter.update(rendition_bitrate=2)
        assert content_tracker.get_rendition_shift() == "up"
        assert content_tracker.get_rendition_shift(True) == "up"
        adapter.update(rendition_bitrate=1)
        assert content_tracker.get_rendition_shift(True) == "down"
        assert content_tracker.get_rendition_shift(True) is None

    def test_rendition_change_event(
        self, content_tracker, simulated_time_provider, record_events
    ):
        adapter = StaticPlayerAdapter(rendition_bitrate=1000)
        content_tracker.set_adapter(adapter)
        events = record_events(content_tracker)

        content_tracker.send_rendition_changed()
        adapter.update(rendition_bitrate=500)
        simulated_time_provider.advance(700)
        content_tracker.send_rendition_changed()

        assert event_types(events) == ["CONTENT_RENDITION_CHANGE"] * 2
        assert events[1].data["shift"] == "down"
        assert events[1].data["timeSinceLastRenditionChange"] == 700


class TestHeartbeatInterval:
    """Test heartbeat interval resolution."""

    def test_default(self, content_tracker):
        assert content_tracker.get_heartbeat() == 30000

    def test_own_value(self, content_tracker):
        content_tracker.set_options({"heartbeat": 12000})
        assert content_tracker.get_heartbeat() == 12000

    def test_inherits_parent(self, content_tracker, ads_tracker):
        content_tracker.heartbeat = 15000
        content_tracker.set_ads_tracker(ads_tracker)

        assert ads_tracker.get_heartbeat() == 15000

    def test_heartbeat_requires_request(self, content_tracker, record_events):
        events = record_events(content_tracker)

        content_tracker.send_heartbeat()
        content_tracker.send_request()
        content_tracker.send_heartbeat()

        assert event_types(events) == ["CONTENT_REQUEST", "CONTENT_HEARTBEAT"]

    def test_no_loop_means_no_timer(self, content_tracker, mock_logger, record_events):
        """Test a synchronous request still opens the view without a timer."""
        events = record_events(content_tracker)

        content_tracker.send_request()

        assert event_types(events) == ["CONTENT_REQUEST"]
        assert content_tracker.is_heartbeat_running is False
        skipped = [
            c for c in mock_logger.debug.call_args_list
            if c.args and c.args[0] == LogEvents.HEARTBEAT_SKIPPED.value
        ]
        assert len(skipped) == 1
        content_tracker.send_heartbeat()
        assert event_types(events) == ["CONTENT_REQUEST", "CONTENT_HEARTBEAT"]


def test_null_logger_by_default(simulated_time_provider):
    """Test a tracker without an injected logger stays silent."""
    tracker = VideoTracker(time_provider=simulated_time_provider)

    tracker.send_download()
    tracker.send_end()

    assert tracker.logger.warning("discarded") is not None


class TestRealLoggers:
    """Test rejection and missing-parameter paths through structlog loggers."""

    @pytest.fixture(params=["null", "context"])
    def make_tracker(self, request, simulated_time_provider):
        def _make(**options):
            logger = None if request.param == "null" else get_context_logger("tracker.test")
            return VideoTracker(
                options=options, logger=logger, time_provider=simulated_time_provider
            )

        return _make

    def test_duplicate_signals_are_dropped(self, make_tracker, record_events):
        tracker = make_tracker()
        events = record_events(tracker)

        tracker.send_request()
        tracker.send_request()
        tracker.send_start()
        tracker.send_start()
        tracker.send_resume()
        tracker.send_ad_break_start()
        tracker.send_end()
        tracker.send_end()

        assert event_types(events) == ["CONTENT_REQUEST", "CONTENT_START", "CONTENT_END"]

    def test_missing_parameters_still_emit(self, make_tracker, record_events):
        content = make_tracker()
        ad = make_tracker(isAd=True)
        content_events = record_events(content)
        ad_events = record_events(ad)

        content.send_download()
        ad.send_ad_quartile()
        ad.send_ad_click()

        assert event_types(content_events) == ["DOWNLOAD"]
        assert event_types(ad_events) == ["AD_QUARTILE", "AD_CLICK"]

    def test_log_entries_name_the_event(self, simulated_time_provider):
        with capture_logs() as logs:
            tracker = VideoTracker(
                logger=get_context_logger("tracker.test"),
                time_provider=simulated_time_provider,
            )
            tracker.send_request()
            tracker.send_request()
            tracker.send_download()

        rejected = [e for e in logs if e["event"] == LogEvents.TRANSITION_REJECTED.value]
        missing = [e for e in logs if e["event"] == LogEvents.MISSING_PARAMETER.value]
        assert rejected == [
            {
                "event": LogEvents.TRANSITION_REJECTED.value,
                "event_name": "REQUEST",
                "branch": "content",
                "log_level": "debug",
            }
        ]
        assert missing[0]["event_name"] == "DOWNLOAD"
        assert missing[0]["parameter"] == "state"
        assert missing[0]["log_level"] == "warning"


class TestPlayerInit:
    """Test the player loading interval."""

    def test_init_then_ready(self, content_tracker, simulated_time_provider, record_events):
        events = record_events(content_tracker)

        content_tracker.send_player_init()
        simulated_time_provider.advance(1500)
        content_tracker.send_player_ready()

        assert event_types(events) == ["PLAYER_INIT", "PLAYER_READY"]
        assert events[1].data["timeSincePlayerInit"] == 1500

    def test_ready_without_init_uses_tracker_creation(
        self, simulated_time_provider, record_events
    ):
        tracker = VideoTracker(time_provider=simulated_time_provider)
        events = record_events(tracker)
        simulated_time_provider.advance(800)

        tracker.send_player_ready()

        assert events[0].data["timeSincePlayerInit"] == 800

    def test_duplicates_suppressed(self, content_tracker, record_events):
        events = record_events(content_tracker)

        content_tracker.send_player_init()
        content_tracker.send_player_init()
        content_tracker.send_player_ready()
        content_tracker.send_player_ready()
        content_tracker.send_player_init()

        assert event_types(events) == ["PLAYER_INIT", "PLAYER_READY"]

    def test_caller_value_wins(self, content_tracker, record_events):
        events = record_events(content_tracker)

        content_tracker.send_player_ready({"timeSincePlayerInit": 5})

        assert events[0].data["timeSincePlayerInit"] == 5
