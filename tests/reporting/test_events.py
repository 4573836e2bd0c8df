"""Tests for the healing event registry."""

import sys
from pathlib import Path
from unittest.mock import MagicMock

# Add src to path for direct import
src_path = Path(__file__).parent.parent.parent / "src"
sys.path.insert(0, str(src_path))

from locator_healer.reporting import (
    Event,
    EventCollector,
    EventRegistry,
    EventType,
    emit_event,
    get_event_registry,
    register_callback,
    unregister_callback,
)


class TestEventRegistry:
    """Tests for EventRegistry."""

    def test_no_listeners_by_default(self):
        """A new registry has no listeners."""
        assert EventRegistry().has_listeners is False

    def test_typed_callback(self):
        """Callbacks only receive their event type."""
        registry = EventRegistry()
        callback = MagicMock()
        registry.register(EventType.HEALING_SUCCEEDED, callback)

        registry.emit(Event(type=EventType.HEALING_FAILED))
        registry.emit(Event(type=EventType.HEALING_SUCCEEDED, data={"healed": "id=a"}))

        callback.assert_called_once()
        assert callback.call_args.args[0].data == {"healed": "id=a"}

    def test_wildcard_callback(self):
        """None subscribes to every event."""
        registry = EventRegistry()
        callback = MagicMock()
        registry.register(None, callback)

        registry.emit(Event(type=EventType.CACHE_HIT))
        registry.emit(Event(type=EventType.MODEL_REQUESTED))

        assert callback.call_count == 2

    def test_register_twice_is_single(self):
        """Duplicate registration is ignored."""
        registry = EventRegistry()
        callback = MagicMock()
        registry.register(EventType.CACHE_HIT, callback)
        registry.register(EventType.CACHE_HIT, callback)

        registry.emit(Event(type=EventType.CACHE_HIT))

        callback.assert_called_once()

    def test_unregister(self):
        """Unregistered callbacks stop receiving events."""
        registry = EventRegistry()
        callback = MagicMock()
        registry.register(EventType.CACHE_HIT, callback)
        registry.unregister(EventType.CACHE_HIT, callback)

        registry.emit(Event(type=EventType.CACHE_HIT))

        callback.assert_not_called()

    def test_failing_callback_is_isolated(self):
        """One failing callback does not stop the others."""
        registry = EventRegistry()
        failing = MagicMock(side_effect=RuntimeError("reporter down"))
        working = MagicMock()
        registry.register(EventType.HEALING_FAILED, failing)
        registry.register(EventType.HEALING_FAILED, working)

        registry.emit(Event(type=EventType.HEALING_FAILED))

        working.assert_called_once()

    def test_disable(self):
        """A disabled registry emits nothing."""
        registry = EventRegistry()
        callback = MagicMock()
        registry.register(None, callback)
        registry.disable()

        registry.emit(Event(type=EventType.CACHE_HIT))

        callback.assert_not_called()


class TestGlobalRegistry:
    """Tests for the module-level helpers."""

    def test_emit_event(self):
        """emit_event reaches registered callbacks with data and context."""
        callback = MagicMock()
        register_callback(EventType.HEALING_STARTED, callback)

        emit_event(EventType.HEALING_STARTED, data={"original": "id=a"}, worker="w1")

        event = callback.call_args.args[0]
        assert event.type is EventType.HEALING_STARTED
        assert event.data == {"original": "id=a"}
        assert event.context == {"worker": "w1"}
        unregister_callback(EventType.HEALING_STARTED, callback)
        assert get_event_registry().has_listeners is False

    def test_collector(self):
        """EventCollector records events only inside its block."""
        with EventCollector([EventType.CACHE_HIT]) as collector:
            emit_event(EventType.CACHE_HIT)
            emit_event(EventType.HEALING_FAILED)
        emit_event(EventType.CACHE_HIT)

        assert collector.count() == 1
        assert collector.count(EventType.HEALING_FAILED) == 0
