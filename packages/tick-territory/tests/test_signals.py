"""Tests for SignalBus."""
from tick_territory.signals import Signal, SignalBus


class TestSignalBus:
    def test_publish_is_deferred_until_flush(self):
        bus = SignalBus()
        received = []
        bus.subscribe("winner", received.append)
        bus.publish("winner", 3, domain=1)
        assert received == []
        assert bus.pending() == [Signal("winner", 3, {"domain": 1})]
        bus.flush()
        assert received == [Signal("winner", 3, {"domain": 1})]
        assert bus.pending() == []

    def test_only_matching_subscribers(self):
        bus = SignalBus()
        a, b = [], []
        bus.subscribe("a", a.append)
        bus.subscribe("b", b.append)
        bus.publish("a", 1)
        bus.flush()
        assert len(a) == 1
        assert b == []

    def test_wildcard_receives_everything(self):
        bus = SignalBus()
        seen = []
        bus.subscribe("*", lambda s: seen.append(s.name))
        bus.publish("a", 1)
        bus.publish("b", 1)
        bus.flush()
        assert seen == ["a", "b"]

    def test_unsubscribe(self):
        bus = SignalBus()
        seen = []
        bus.subscribe("a", seen.append)
        bus.unsubscribe("a", seen.append)
        bus.unsubscribe("missing", seen.append)
        bus.publish("a", 1)
        bus.flush()
        assert seen == []

    def test_flush_returns_delivered(self):
        bus = SignalBus()
        bus.publish("a", 1)
        delivered = bus.flush()
        assert [s.name for s in delivered] == ["a"]
        assert bus.flush() == []

    def test_recent_is_bounded(self):
        bus = SignalBus(history=3)
        for tick in range(5):
            bus.publish("tick", tick)
            bus.flush()
        assert [s.tick for s in bus.recent()] == [2, 3, 4]
        assert [s.tick for s in bus.recent(2)] == [3, 4]
