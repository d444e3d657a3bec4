"""
Tests for the event bus
=======================
"""

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from core.events import EventBus, Events


@pytest.fixture
def bus():
    return EventBus(max_history=5)


class TestEventBus:
    def test_emit_passes_kwargs(self, bus):
        received = []
        bus.subscribe(Events.DWELL_ACTIVATED, lambda **kw: received.append(kw))
        bus.emit(Events.DWELL_ACTIVATED, name="exit", dwell_ms=1000)
        assert received == [{"name": "exit", "dwell_ms": 1000}]

    def test_priority_order(self, bus):
        order = []
        bus.subscribe("e", lambda: order.append("low"), priority=0)
        bus.subscribe("e", lambda: order.append("high"), priority=10)
        bus.emit("e")
        assert order == ["high", "low"]

    def test_failing_listener_is_isolated(self, bus):
        calls = []

        def broken():
            raise RuntimeError("listener failed")

        bus.subscribe("e", broken, priority=1)
        bus.subscribe("e", lambda: calls.append(1))
        bus.emit("e")
        assert calls == [1]
        assert bus.error_count("e") == 1
        assert bus.error_count() == 1

    def test_unsubscribe(self, bus):
        calls = []
        handler = lambda: calls.append(1)  # noqa: E731
        bus.subscribe("e", handler)
        bus.unsubscribe("e", handler)
        bus.emit("e")
        assert calls == []
        assert "e" not in bus.registered_events

    def test_disabled_bus_is_silent(self, bus):
        calls = []
        bus.subscribe("e", lambda: calls.append(1))
        bus.set_enabled(False)
        bus.emit("e")
        assert calls == []
        assert bus.get_history() == []

    def test_history_bounded(self, bus):
        for i in range(8):
            bus.emit("e", i=i)
        history = bus.get_history(last_n=100)
        assert len(history) == 5
        assert history[-1].keys == ("i",)
        assert history[-1].name == "e"

    def test_clear(self, bus):
        bus.subscribe("a", lambda: None)
        bus.subscribe("b", lambda: None)
        assert bus.listener_count == 2
        bus.clear("a")
        assert bus.registered_events == ["b"]
        bus.clear()
        assert bus.listener_count == 0

    def test_instances_are_independent(self):
        a, b = EventBus(), EventBus()
        calls = []
        a.subscribe("e", lambda: calls.append("a"))
        b.emit("e")
        assert calls == []

    def test_decorator_subscription(self, bus):
        seen = []

        @bus.on(Events.SHAPE_CHANGED)
        def shape_changed(old, new):
            seen.append((old, new))

        assert bus.emit(Events.SHAPE_CHANGED, old="sphere", new="cube") == 1
        assert seen == [("sphere", "cube")]

    def test_emit_counts_successful_deliveries(self, bus):
        def broken():
            raise RuntimeError("listener failed")

        bus.subscribe("e", broken)
        bus.subscribe("e", lambda: None)
        assert bus.emit("e") == 1
        assert bus.get_history(1)[0].delivered == 1

    def test_same_priority_keeps_subscription_order(self, bus):
        order = []
        for name in ("a", "b", "c"):
            bus.subscribe("e", lambda name=name: order.append(name))
        bus.emit("e")
        assert order == ["a", "b", "c"]
