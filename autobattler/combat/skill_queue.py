"""
Skill queue module for the combat core.

Ally combatants do not use their skills on their own: a ready skill is queued
and either fired by the player, optionally at a chosen target, or fired
automatically according to the skill mode.
"""

from collections.abc import Callable
from dataclasses import dataclass

from autobattler.core.constants import AUTO_FIRE_DELAY, SkillMode
from autobattler.core.logging import log_debug
from autobattler.effects.event_system import EventBus, EventType, SkillReadyEvent


@dataclass
class QueuedSkill:
    """A ready skill waiting to be fired."""

    unit_id: str
    skill_id: str
    auto_fire_delay: float = AUTO_FIRE_DELAY
    target_id: str | None = None


class SkillQueue:
    """
    Queue of ready ally skills.

    Attributes:
        mode (SkillMode):
            AUTO fires immediately, MANUAL never auto-fires, SEMI_AUTO fires
            once the auto-fire delay elapsed.
        bus (EventBus | None):
            Bus SKILL_READY events are published on.
        auto_fire_delay (float):
            Seconds a SEMI_AUTO entry waits for a manual fire.

    """

    def __init__(
        self,
        mode: SkillMode = SkillMode.SEMI_AUTO,
        bus: EventBus | None = None,
        auto_fire_delay: float = AUTO_FIRE_DELAY,
    ) -> None:
        self.mode = mode
        self.bus = bus
        self.auto_fire_delay = auto_fire_delay
        self._entries: list[QueuedSkill] = []

    @property
    def entries(self) -> list[QueuedSkill]:
        """Snapshot of the queued entries."""
        return list(self._entries)

    def is_queued(self, unit_id: str, skill_id: str) -> bool:
        return any(
            entry.unit_id == unit_id and entry.skill_id == skill_id
            for entry in self._entries
        )

    def enqueue(self, unit_id: str, skill_id: str) -> bool:
        """
        Queue a ready skill and publish SKILL_READY.

        Args:
            unit_id (str): Id of the skill owner.
            skill_id (str): Id of the ready skill.

        Returns:
            bool: False if the skill was already queued.

        """
        if self.is_queued(unit_id, skill_id):
            return False
        self._entries.append(
            QueuedSkill(
                unit_id=unit_id,
                skill_id=skill_id,
                auto_fire_delay=self.auto_fire_delay,
            )
        )
        log_debug("Skill queued", {"unit_id": unit_id, "skill_id": skill_id})
        if self.bus is not None:
            self.bus.publish(
                EventType.SKILL_READY,
                SkillReadyEvent(unit_id=unit_id, skill_id=skill_id),
            )
        return True

    def fire(
        self, unit_id: str, skill_id: str, target_id: str | None = None
    ) -> QueuedSkill | None:
        """
        Take a queued skill out of the queue to fire it manually.

        Args:
            unit_id (str): Id of the skill owner.
            skill_id (str): Id of the queued skill.
            target_id (str | None): Optional target override.

        Returns:
            QueuedSkill | None: The entry, or None if no such entry is queued.

        """
        for index, entry in enumerate(self._entries):
            if entry.unit_id == unit_id and entry.skill_id == skill_id:
                del self._entries[index]
                entry.target_id = target_id
                return entry
        return None

    def update(
        self, dt: float, is_blocked: Callable[[str], bool] | None = None
    ) -> list[QueuedSkill]:
        """
        Advance auto-fire timers and collect the entries to execute now.

        Args:
            dt (float):
                Elapsed (scaled) seconds.
            is_blocked (Callable[[str], bool] | None):
                Tells whether an owner cannot act (stunned); its entries stay
                queued untouched.

        Returns:
            list[QueuedSkill]:
                The entries to execute, in queue order.

        """
        if self.mode == SkillMode.MANUAL:
            return []

        ready: list[QueuedSkill] = []
        remaining: list[QueuedSkill] = []
        for entry in self._entries:
            if is_blocked is not None and is_blocked(entry.unit_id):
                remaining.append(entry)
                continue
            if self.mode == SkillMode.SEMI_AUTO:
                entry.auto_fire_delay -= dt
                if entry.auto_fire_delay > 0:
                    remaining.append(entry)
                    continue
            ready.append(entry)
        self._entries = remaining
        return ready

    def should_queue(self, is_ally: bool) -> bool:
        """Whether a ready skill of a combatant goes through the queue."""
        return is_ally and self.mode != SkillMode.AUTO

    def remove_unit(self, unit_id: str) -> None:
        """Drop every entry of a combatant."""
        self._entries = [entry for entry in self._entries if entry.unit_id != unit_id]

    def reset(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
