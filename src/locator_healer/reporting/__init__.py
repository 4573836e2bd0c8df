"""Optional event reporting for healing activity.

Example:
    from locator_healer.reporting import register_callback, EventType

    def on_failure(event):
        print(f"Healing failed: {event.data['error']}")

    register_callback(EventType.HEALING_FAILED, on_failure)
"""

from .events import (
    Event,
    EventCallback,
    EventCollector,
    EventRegistry,
    EventType,
    emit_event,
    get_event_registry,
    register_callback,
    unregister_callback,
)

__all__ = [
    "Event",
    "EventCallback",
    "EventCollector",
    "EventRegistry",
    "EventType",
    "emit_event",
    "get_event_registry",
    "register_callback",
    "unregister_callback",
]
