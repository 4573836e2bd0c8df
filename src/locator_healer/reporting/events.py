"""Event system for healing activity.

Zero-overhead callback system for external consumers (test reporters,
dashboards) to follow healing activity. Thread-safe, optional, and a no-op
when nobody is listening.
"""

import logging
import threading
import time
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from threading import RLock
from typing import Any

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Types of events emitted by locator-healer."""

    HEALING_STARTED = "healing.started"
    CACHE_HIT = "healing.cache_hit"
    CACHE_INVALIDATED = "healing.cache_invalidated"
    MODEL_REQUESTED = "healing.model_requested"
    HEALING_SUCCEEDED = "healing.succeeded"
    HEALING_FAILED = "healing.failed"


@dataclass
class Event:
    """Event data structure."""

    type: EventType
    """Type of event."""

    data: dict[str, Any] = field(default_factory=dict)
    """Event payload data."""

    timestamp: float = field(default_factory=time.time)
    """Event timestamp."""

    thread_id: int = field(default_factory=threading.get_ident)
    """Thread that emitted the event."""

    context: dict[str, Any] = field(default_factory=dict)
    """Additional context metadata."""


EventCallback = Callable[[Event], None]


class EventRegistry:
    """Thread-safe registry for event callbacks.

    Features:
    - Zero overhead when no callbacks registered (single bool check)
    - Thread-safe registration/unregistration
    - Wildcard subscriptions
    - Callback failures are isolated from the healing path
    """

    def __init__(self) -> None:
        """Initialize event registry."""
        self._callbacks: dict[EventType, list[EventCallback]] = defaultdict(list)
        self._wildcard_callbacks: list[EventCallback] = []
        self._lock = RLock()
        self._enabled = True

    @property
    def has_listeners(self) -> bool:
        """Fast check if any listeners are registered."""
        return self._enabled and (
            any(self._callbacks.values()) or bool(self._wildcard_callbacks)
        )

    def register(self, event_type: EventType | None, callback: EventCallback) -> None:
        """Register a callback for an event type.

        Args:
            event_type: Type to listen for (None for all events)
            callback: Function to call when event occurs
        """
        with self._lock:
            if event_type is None:
                if callback not in self._wildcard_callbacks:
                    self._wildcard_callbacks.append(callback)
            elif callback not in self._callbacks[event_type]:
                self._callbacks[event_type].append(callback)

    def unregister(self, event_type: EventType | None, callback: EventCallback) -> None:
        """Unregister a callback.

        Args:
            event_type: Event type (None for wildcard)
            callback: Callback to remove
        """
        with self._lock:
            if event_type is None:
                if callback in self._wildcard_callbacks:
                    self._wildcard_callbacks.remove(callback)
            elif callback in self._callbacks[event_type]:
                self._callbacks[event_type].remove(callback)

    def emit(self, event: Event) -> None:
        """Emit an event to all registered callbacks.

        Callbacks run synchronously, outside the lock. A failing callback is
        logged and skipped.

        Args:
            event: Event to emit
        """
        if not self.has_listeners:
            return

        with self._lock:
            callbacks = list(self._callbacks.get(event.type, []))
            callbacks.extend(self._wildcard_callbacks)

        for callback in callbacks:
            try:
                callback(event)
            except Exception as e:
                logger.error(
                    f"Event callback failed for {event.type.value}: {e}",
                    exc_info=True,
                )

    def clear(self) -> None:
        """Clear all registered callbacks."""
        with self._lock:
            self._callbacks.clear()
            self._wildcard_callbacks.clear()

    def enable(self) -> None:
        """Enable event emission."""
        self._enabled = True

    def disable(self) -> None:
        """Disable event emission."""
        self._enabled = False


# Global singleton registry
_event_registry = EventRegistry()


def get_event_registry() -> EventRegistry:
    """Get the global event registry."""
    return _event_registry


def register_callback(event_type: EventType | None, callback: EventCallback) -> None:
    """Register an event callback.

    Args:
        event_type: Event type to listen for (None for all)
        callback: Callback function

    Example:
        >>> from locator_healer.reporting import register_callback, EventType
        >>>
        >>> def on_heal(event):
        ...     print(f"Healed {event.data['original']} -> {event.data['healed']}")
        >>>
        >>> register_callback(EventType.HEALING_SUCCEEDED, on_heal)
    """
    _event_registry.register(event_type, callback)


def unregister_callback(event_type: EventType | None, callback: EventCallback) -> None:
    """Unregister an event callback."""
    _event_registry.unregister(event_type, callback)


def emit_event(event_type: EventType, data: dict[str, Any] | None = None, **kwargs: Any) -> None:
    """Emit an event (internal library use).

    Args:
        event_type: Type of event
        data: Event data payload
        **kwargs: Additional context
    """
    if not _event_registry.has_listeners:
        return

    _event_registry.emit(Event(type=event_type, data=data or {}, context=kwargs))


class EventCollector:
    """Collects events emitted inside a ``with`` block.

    Example:
        >>> with EventCollector([EventType.HEALING_SUCCEEDED]) as collector:
        ...     healer.click_on("id=login")
        >>> collector.count()
        1
    """

    def __init__(self, event_types: list[EventType] | None = None) -> None:
        """Initialize collector.

        Args:
            event_types: Specific event types to collect (None for all)
        """
        self._event_types = set(event_types) if event_types else None
        self._events: list[Event] = []
        self._lock = threading.Lock()

    def _collect(self, event: Event) -> None:
        if self._event_types is None or event.type in self._event_types:
            with self._lock:
                self._events.append(event)

    def __enter__(self) -> "EventCollector":
        self._events.clear()
        if self._event_types is None:
            _event_registry.register(None, self._collect)
        else:
            for event_type in self._event_types:
                _event_registry.register(event_type, self._collect)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._event_types is None:
            _event_registry.unregister(None, self._collect)
        else:
            for event_type in self._event_types:
                _event_registry.unregister(event_type, self._collect)

    def get_events(self, event_type: EventType | None = None) -> list[Event]:
        """Get collected events, optionally filtered by type."""
        with self._lock:
            events = list(self._events)
        if event_type is None:
            return events
        return [e for e in events if e.type == event_type]

    def count(self, event_type: EventType | None = None) -> int:
        """Count collected events."""
        return len(self.get_events(event_type))
