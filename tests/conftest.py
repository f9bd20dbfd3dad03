"""Pytest configuration and shared fixtures for video tracker tests."""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest


sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from video_tracker.adapter import StaticPlayerAdapter
from video_tracker.backend import MemoryBackend
from video_tracker.config import TrackerConfig
from video_tracker.core import TrackerRegistry
from video_tracker.emitter import WILDCARD, TrackerEvent
from video_tracker.time_provider import SimulatedTimeProvider
from video_tracker.tracker import VideoTracker


# ==================== Time Provider Fixtures ====================


@pytest.fixture
def simulated_time_provider() -> SimulatedTimeProvider:
    """Virtual clock starting at 1000 ms."""
    return SimulatedTimeProvider(initial_ms=1000.0)


# ==================== Configuration Fixtures ====================


@pytest.fixture
def tracker_config() -> TrackerConfig:
    """Default tracker configuration."""
    return TrackerConfig()


@pytest.fixture
def mock_logger() -> MagicMock:
    """Logger double recording debug/warning/error calls."""
    return MagicMock()


# ==================== Component Fixtures ====================


@pytest.fixture
def static_adapter() -> StaticPlayerAdapter:
    """Adapter answering fixed media values."""
    return StaticPlayerAdapter(
        player=object(),
        tracker_name="test-tracker",
        tracker_version="9.9.9",
        title="Big Buck Bunny",
        duration=596000,
        playhead=0,
        rendition_bitrate=1_500_000,
    )


@pytest.fixture
def content_tracker(simulated_time_provider, tracker_config, mock_logger) -> VideoTracker:
    """Content tracker on virtual time."""
    tracker = VideoTracker(
        config=tracker_config,
        logger=mock_logger,
        time_provider=simulated_time_provider,
    )
    yield tracker
    tracker.dispose()


@pytest.fixture
def ads_tracker(simulated_time_provider, tracker_config, mock_logger) -> VideoTracker:
    """Tracker that will be attached as a child for ads."""
    return VideoTracker(
        config=tracker_config,
        logger=mock_logger,
        time_provider=simulated_time_provider,
    )


@pytest.fixture
def memory_backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def registry(memory_backend, mock_logger) -> TrackerRegistry:
    return TrackerRegistry(backend=memory_backend, logger=mock_logger)


# ==================== Helper Functions ====================


@pytest.fixture
def record_events():
    """Subscribe to every event of a tracker and collect them in a list.

    Usage:
        events = record_events(tracker)
        tracker.send_request()
        assert events[0].type == "CONTENT_REQUEST"
    """

    def _record(tracker) -> list[TrackerEvent]:
        events: list[TrackerEvent] = []
        tracker.subscribe(WILDCARD, events.append)
        return events

    return _record
