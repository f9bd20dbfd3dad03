"""Minimal synchronous publish/subscribe mechanism."""

from dataclasses import dataclass, field
from typing import Any, Callable

from .events import LogEvents
from .log_config import get_null_logger

WILDCARD = "*"


@dataclass
class TrackerEvent:
    """Event delivered to subscribers."""

    type: str
    data: dict[str, Any] = field(default_factory=dict)
    target: Any = None


Handler = Callable[[TrackerEvent], Any]


@dataclass
class Subscription:
    """Token returned by subscribe(); cancel() removes the handler."""

    emitter: "Emitter"
    event_name: str
    handler: Handler

    def cancel(self) -> None:
        self.emitter.unsubscribe(self.event_name, self.handler)


class Emitter:
    """
    Per-instance listener registry.

    Handlers registered for an event name and handlers registered under the
    wildcard name both receive every emission, named handlers first, each
    group in registration order. Delivery is synchronous; nothing is
    buffered or coalesced.

    Examples:
        >>> emitter = Emitter()
        >>> emitter.subscribe("CONTENT_START", lambda e: print(e.type))
        >>> emitter.subscribe("*", lambda e: print("any", e.type))
        >>> emitter.emit("CONTENT_START", {"viewId": "abc-0"})
        CONTENT_START
        any CONTENT_START
    """

    def __init__(self, logger: Any = None):
        self._listeners: dict[str, list[Handler]] = {}
        self.logger = logger if logger is not None else get_null_logger()

    def subscribe(self, event_name: str, handler: Handler) -> Subscription | None:
        """Register a handler.

        Args:
            event_name: Event name, or ``"*"`` for every event
            handler: Callable receiving a TrackerEvent

        Returns:
            Subscription token, or None when handler is not callable
        """
        if not callable(handler):
            self.logger.warning(
                "Ignoring non-callable handler",
                event_name=event_name,
                handler_type=type(handler).__name__,
            )
            return None
        self._listeners.setdefault(event_name, []).append(handler)
        return Subscription(self, event_name, handler)

    def unsubscribe(self, event_name: str, handler: Handler) -> None:
        """Remove a handler; unknown handlers are ignored."""
        handlers = self._listeners.get(event_name)
        if handlers and handler in handlers:
            handlers.remove(handler)

    on = subscribe
    off = unsubscribe

    def listener_count(self, event_name: str | None = None) -> int:
        if event_name is None:
            return sum(len(handlers) for handlers in self._listeners.values())
        return len(self._listeners.get(event_name, []))

    def emit(self, event_name: str, data: dict[str, Any] | None = None) -> None:
        """Deliver an event to named handlers, then to wildcard handlers.

        Args:
            event_name: Name of the event
            data: Attribute map; defaults to an empty dict
        """
        event = TrackerEvent(type=event_name, data=data if data is not None else {}, target=self)

        # Copy so handlers may unsubscribe themselves during delivery
        handlers = list(self._listeners.get(event_name, []))
        if event_name != WILDCARD:
            handlers.extend(self._listeners.get(WILDCARD, []))

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                self.logger.error(
                    LogEvents.HANDLER_FAILED.value,
                    event_name=event_name,
                    error=str(e),
                    error_type=type(e).__name__,
                )


__all__ = ["Emitter", "TrackerEvent", "Subscription", "Handler", "WILDCARD"]
