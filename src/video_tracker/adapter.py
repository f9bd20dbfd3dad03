"""
Player Adapter Interface

Binds a tracker to a concrete player. The tracker calls the listener hooks
when an adapter is attached or detached and reads the accessors whenever it
builds an attribute map. Accessors return a value or None for "unknown".
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from .events import AdPosition

if TYPE_CHECKING:
    from .tracker import VideoTracker


def _package_version() -> str:
    from . import __version__

    return __version__


class PlayerAdapter(ABC):
    """
    Capability interface injected into a VideoTracker.

    Subclasses wire player callbacks to ``tracker.send_*`` calls in
    register_listeners() and undo it in unregister_listeners(). Accessors
    may be overridden selectively; every default returns None.

    Attributes:
        player: Opaque player handle
        tag: Opaque rendering surface handle, defaults to the player

    Usage:
        >>> class MyAdapter(PlayerAdapter):
        ...     def register_listeners(self, tracker):
        ...         self.player.on("play", lambda: tracker.send_request())
        ...     def unregister_listeners(self, tracker):
        ...         self.player.off_all()
        ...     def get_playhead(self):
        ...         return self.player.position_ms
    """

    def __init__(self, player: Any = None, tag: Any = None):
        self.player = player
        self.tag = tag if tag is not None else player

    @abstractmethod
    def register_listeners(self, tracker: "VideoTracker") -> None:
        """Subscribe to player events and forward them to the tracker."""
        pass

    @abstractmethod
    def unregister_listeners(self, tracker: "VideoTracker") -> None:
        """Remove everything register_listeners() installed."""
        pass

    # ===== Identity =====

    def get_tracker_name(self) -> str:
        return "base-tracker"

    def get_tracker_version(self) -> str:
        return _package_version()

    def get_player_name(self) -> str | None:
        return self.get_tracker_name()

    def get_player_version(self) -> str | None:
        return None

    # ===== Media =====

    def get_title(self) -> str | None:
        return None

    def is_live(self) -> bool | None:
        return None

    def get_bitrate(self) -> float | None:
        """Consumed bitrate in bits per second."""
        return None

    def get_rendition_name(self) -> str | None:
        return None

    def get_rendition_bitrate(self) -> float | None:
        """Target bitrate of the current rendition."""
        return None

    def get_rendition_height(self) -> int | None:
        return None

    def get_rendition_width(self) -> int | None:
        return None

    def get_duration(self) -> float | None:
        """Duration in milliseconds."""
        return None

    def get_playhead(self) -> float | None:
        """Current position in milliseconds."""
        return None

    def get_language(self) -> str | None:
        """Locale notation, e.g. en_US."""
        return None

    def get_src(self) -> str | None:
        return None

    def get_playrate(self) -> float | None:
        return None

    def is_muted(self) -> bool | None:
        return None

    def is_fullscreen(self) -> bool | None:
        return None

    def get_cdn(self) -> str | None:
        return None

    def get_fps(self) -> float | None:
        return None

    def is_autoplayed(self) -> bool | None:
        return None

    def get_preload(self) -> str | None:
        return None

    # ===== Ads only =====

    def get_ad_quartile(self) -> int | None:
        """0 before first quartile ... 4 when completed."""
        return None

    def get_ad_position(self) -> AdPosition | str | None:
        return None


class NullPlayerAdapter(PlayerAdapter):
    """Adapter with no player; used when a tracker is built without one."""

    def register_listeners(self, tracker: "VideoTracker") -> None:
        pass

    def unregister_listeners(self, tracker: "VideoTracker") -> None:
        pass


class StaticPlayerAdapter(NullPlayerAdapter):
    """
    Adapter answering accessors from fixed values.

    Useful for headless integrations and tests. Keys are accessor names
    without the ``get_`` prefix (``title``, ``playhead``, ``is_muted``...).

    Examples:
        >>> adapter = StaticPlayerAdapter(title="Big Buck Bunny", duration=596000)
        >>> adapter.get_title()
        'Big Buck Bunny'
        >>> adapter.update(playhead=1200)
    """

    def __init__(self, player: Any = None, tag: Any = None, **values: Any):
        super().__init__(player, tag)
        self.values: dict[str, Any] = dict(values)

    def update(self, **values: Any) -> None:
        self.values.update(values)

    def _value(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def get_tracker_name(self) -> str:
        return self._value("tracker_name", super().get_tracker_name())

    def get_tracker_version(self) -> str:
        return self._value("tracker_version", super().get_tracker_version())

    def get_player_name(self) -> str | None:
        return self._value("player_name", self.get_tracker_name())

    def get_player_version(self) -> str | None:
        return self._value("player_version")

    def get_title(self) -> str | None:
        return self._value("title")

    def is_live(self) -> bool | None:
        return self._value("is_live")

    def get_bitrate(self) -> float | None:
        return self._value("bitrate")

    def get_rendition_name(self) -> str | None:
        return self._value("rendition_name")

    def get_rendition_bitrate(self) -> float | None:
        return self._value("rendition_bitrate")

    def get_rendition_height(self) -> int | None:
        return self._value("rendition_height")

    def get_rendition_width(self) -> int | None:
        return self._value("rendition_width")

    def get_duration(self) -> float | None:
        return self._value("duration")

    def get_playhead(self) -> float | None:
        return self._value("playhead")

    def get_language(self) -> str | None:
        return self._value("language")

    def get_src(self) -> str | None:
        return self._value("src")

    def get_playrate(self) -> float | None:
        return self._value("playrate")

    def is_muted(self) -> bool | None:
        return self._value("is_muted")

    def is_fullscreen(self) -> bool | None:
        return self._value("is_fullscreen")

    def get_cdn(self) -> str | None:
        return self._value("cdn")

    def get_fps(self) -> float | None:
        return self._value("fps")

    def is_autoplayed(self) -> bool | None:
        return self._value("is_autoplayed")

    def get_preload(self) -> str | None:
        return self._value("preload")

    def get_ad_quartile(self) -> int | None:
        return self._value("ad_quartile")

    def get_ad_position(self) -> AdPosition | str | None:
        return self._value("ad_position")


__all__ = ["PlayerAdapter", "NullPlayerAdapter", "StaticPlayerAdapter"]
