"""
Shared fixtures for the combat core tests.
"""

import pytest

from autobattler.character.combatant import Combatant
from autobattler.character.stats import CombatantStats
from autobattler.core.constants import Role, Side
from autobattler.core.content import ContentRepository
from autobattler.effects.event_system import EventBus, EventType


class EventRecorder:
    """Collects every payload published on a bus, per topic."""

    def __init__(self, bus: EventBus):
        self.events = []
        for topic in EventType:
            bus.subscribe(topic, self.events.append)

    def of(self, topic: EventType) -> list:
        return [event for event in self.events if event.event_type == topic]


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def recorder(bus):
    return EventRecorder(bus)


@pytest.fixture(scope="session")
def content():
    return ContentRepository()


@pytest.fixture
def make_unit():
    """Factory building combatants with sensible default stats."""

    def _make(
        unit_id,
        side=Side.ALLY,
        role=Role.MELEE,
        element=None,
        x=0.0,
        y=0.0,
        bus=None,
        **stats,
    ):
        stats.setdefault("max_hp", 500)
        return Combatant(
            unit_id=unit_id,
            name=unit_id.capitalize(),
            side=side,
            role=role,
            stats=CombatantStats(**stats),
            element=element,
            x=x,
            y=y,
            bus=bus,
        )

    return _make
