"""
Tests for the event bus.
"""

import pytest

from autobattler.effects.event_system import (
    DeathEvent,
    EventBus,
    EventType,
    KillEvent,
)


@pytest.fixture
def death():
    return DeathEvent(unit_id="u1", is_ally=True)


def test_handlers_run_synchronously(bus, death):
    received = []
    bus.subscribe(EventType.DEATH, received.append)
    bus.publish(EventType.DEATH, death)
    assert received == [death]


def test_priority_order_with_registration_ties(bus, death):
    calls = []
    bus.subscribe(EventType.DEATH, lambda _: calls.append("low"), priority=-1)
    bus.subscribe(EventType.DEATH, lambda _: calls.append("first"))
    bus.subscribe(EventType.DEATH, lambda _: calls.append("high"), priority=5)
    bus.subscribe(EventType.DEATH, lambda _: calls.append("second"))
    bus.publish(EventType.DEATH, death)
    assert calls == ["high", "first", "second", "low"]


def test_other_topics_not_notified(bus, death):
    received = []
    bus.subscribe(EventType.KILL, received.append)
    bus.publish(EventType.DEATH, death)
    assert received == []


def test_subscribe_once_runs_once_even_when_nested(bus, death):
    calls = []

    def once_handler(event):
        calls.append(event)
        bus.publish(EventType.DEATH, event)

    bus.subscribe_once(EventType.DEATH, once_handler)
    bus.publish(EventType.DEATH, death)
    bus.publish(EventType.DEATH, death)
    assert calls == [death]
    assert bus.handler_count(EventType.DEATH) == 0


def test_unsubscribe_by_identity(bus, death):
    received = []
    handler = received.append
    bus.subscribe(EventType.DEATH, handler)
    assert bus.unsubscribe(EventType.DEATH, handler)
    assert not bus.unsubscribe(EventType.DEATH, handler)
    bus.publish(EventType.DEATH, death)
    assert received == []


def test_unsubscribed_during_dispatch_is_skipped(bus, death):
    calls = []

    def second(_):
        calls.append("second")

    def first(_):
        calls.append("first")
        bus.unsubscribe(EventType.DEATH, second)

    bus.subscribe(EventType.DEATH, first)
    bus.subscribe(EventType.DEATH, second)
    bus.publish(EventType.DEATH, death)
    assert calls == ["first"]


def test_subscribed_during_dispatch_waits_for_next_publish(bus, death):
    calls = []

    def late(_):
        calls.append("late")

    def first(_):
        calls.append("first")
        bus.subscribe(EventType.DEATH, late)

    bus.subscribe_once(EventType.DEATH, first)
    bus.publish(EventType.DEATH, death)
    assert calls == ["first"]
    bus.publish(EventType.DEATH, death)
    assert calls == ["first", "late"]


def test_handler_exceptions_propagate(bus, death):
    def broken(_):
        raise RuntimeError("boom")

    bus.subscribe(EventType.DEATH, broken)
    with pytest.raises(RuntimeError, match="boom"):
        bus.publish(EventType.DEATH, death)


def test_payload_must_match_topic(bus):
    with pytest.raises(AssertionError):
        bus.publish(EventType.DEATH, KillEvent(killer_id="a", target_id="b"))


def test_reset_drops_everything(bus, death):
    received = []
    bus.subscribe(EventType.DEATH, received.append)
    bus.reset()
    bus.publish(EventType.DEATH, death)
    assert received == []
    assert bus.handler_count(EventType.DEATH) == 0


def test_buses_are_independent(death):
    first, second = EventBus(), EventBus()
    received = []
    first.subscribe(EventType.DEATH, received.append)
    second.publish(EventType.DEATH, death)
    assert received == []
