"""
Event sinks.

A Backend receives every event the registry collects from its trackers.
Shared attributes set on the backend are merged into each event, with
event attributes winning on conflicts.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .log_config import get_context_logger


class Backend(ABC):
    """
    Base class for event sinks.

    Subclasses implement deliver(); send() merges the shared attributes
    first.

    Examples:
        >>> backend = MemoryBackend()
        >>> backend.set_attribute("appName", "catalog")
        >>> backend.send("CONTENT_START", {"viewId": "abc-0"})
        >>> backend.events[0].attributes
        {'appName': 'catalog', 'viewId': 'abc-0'}
    """

    def __init__(self):
        self._attributes: dict[str, Any] = {}

    @property
    def attributes(self) -> dict[str, Any]:
        return dict(self._attributes)

    def set_attribute(self, key: str, value: Any) -> None:
        self._attributes[key] = value

    def set_attributes(self, attributes: dict[str, Any]) -> None:
        self._attributes.update(attributes)

    def send(self, event_name: str, attributes: dict[str, Any]) -> None:
        """Deliver an event with the shared attributes merged in."""
        self.deliver(event_name, {**self._attributes, **attributes})

    @abstractmethod
    def deliver(self, event_name: str, attributes: dict[str, Any]) -> None:
        """Hand a fully merged event to the sink."""
        pass


@dataclass
class RecordedEvent:
    """Event captured by MemoryBackend."""

    event_name: str
    attributes: dict[str, Any]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class MemoryBackend(Backend):
    """Keeps events in memory, in delivery order."""

    def __init__(self):
        super().__init__()
        self.events: list[RecordedEvent] = []

    def deliver(self, event_name: str, attributes: dict[str, Any]) -> None:
        self.events.append(RecordedEvent(event_name, attributes))

    def events_named(self, event_name: str) -> list[RecordedEvent]:
        return [e for e in self.events if e.event_name == event_name]

    @property
    def event_names(self) -> list[str]:
        return [e.event_name for e in self.events]

    def clear(self) -> None:
        self.events.clear()


class LoggingBackend(Backend):
    """Writes every event to a structured logger at info level."""

    def __init__(self, logger: Any = None):
        super().__init__()
        self.logger = logger if logger is not None else get_context_logger("video_tracker.backend")

    def deliver(self, event_name: str, attributes: dict[str, Any]) -> None:
        self.logger.info("video_tracker.event", event_name=event_name, attributes=attributes)


__all__ = ["Backend", "MemoryBackend", "LoggingBackend", "RecordedEvent"]
