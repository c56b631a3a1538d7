"""
Event system module for the combat core.

Defines the event topics, one pydantic payload model per topic, and the
EventBus that dispatches payloads to prioritized handlers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel, Field

from autobattler.core.constants import DamageType, Element
from autobattler.core.logging import log_debug


class EventType(Enum):
    """Enumeration of available event topics."""

    DAMAGE_APPLIED = "unit:damage"
    HEAL_APPLIED = "unit:heal"
    KILL = "unit:kill"
    DEATH = "unit:death"
    COMBO_HIT = "combo:hit"
    COMBO_BROKEN = "combo:break"
    ELEMENT_REACTION = "element:reaction"
    SKILL_READY = "skill:ready"
    SKILL_USED = "skill:use"
    SKILL_INTERRUPTED = "skill:interrupted"
    STATUS_APPLIED = "status:apply"
    STATUS_EXPIRED = "status:expire"
    BATTLE_STARTED = "battle:start"
    BATTLE_ENDED = "battle:end"


class ComboBreakReason(Enum):
    """Why a combo streak ended."""

    TARGET_SWITCH = "target_switch"
    DECAY = "decay"


class CombatEvent(BaseModel):
    """Base class for all event payloads."""

    event_type: EventType = Field(
        description="The topic this payload belongs to.",
    )


class DamageEvent(CombatEvent):
    """Payload for DAMAGE_APPLIED."""

    event_type: EventType = Field(
        default=EventType.DAMAGE_APPLIED,
        description="The topic this payload belongs to.",
    )
    source_id: str = Field(description="Id of the damage dealer.")
    target_id: str = Field(description="Id of the damaged combatant.")
    amount: int = Field(description="HP actually removed.")
    damage_type: DamageType = Field(description="Mitigation class of the hit.")
    element: Element | None = Field(default=None, description="Element of the hit.")
    is_crit: bool = Field(default=False, description="Whether the hit was critical.")

    def __str__(self) -> str:
        return (
            f"DamageEvent({self.source_id} -> {self.target_id}, "
            f"amount={self.amount}, crit={self.is_crit})"
        )


class HealEvent(CombatEvent):
    """Payload for HEAL_APPLIED."""

    event_type: EventType = Field(
        default=EventType.HEAL_APPLIED,
        description="The topic this payload belongs to.",
    )
    source_id: str = Field(description="Id of the healer.")
    target_id: str = Field(description="Id of the healed combatant.")
    amount: int = Field(description="HP actually restored.")

    def __str__(self) -> str:
        return f"HealEvent({self.source_id} -> {self.target_id}, amount={self.amount})"


class KillEvent(CombatEvent):
    """Payload for KILL."""

    event_type: EventType = Field(
        default=EventType.KILL,
        description="The topic this payload belongs to.",
    )
    killer_id: str = Field(description="Id of the combatant credited with the kill.")
    target_id: str = Field(description="Id of the defeated combatant.")


class DeathEvent(CombatEvent):
    """Payload for DEATH."""

    event_type: EventType = Field(
        default=EventType.DEATH,
        description="The topic this payload belongs to.",
    )
    unit_id: str = Field(description="Id of the combatant that died.")
    is_ally: bool = Field(description="Whether the combatant fought on the ally side.")


class ComboHitEvent(CombatEvent):
    """Payload for COMBO_HIT, published at every combo milestone."""

    event_type: EventType = Field(
        default=EventType.COMBO_HIT,
        description="The topic this payload belongs to.",
    )
    unit_id: str = Field(description="Id of the attacker holding the streak.")
    combo_count: int = Field(description="Hit count reached.")


class ComboBrokenEvent(CombatEvent):
    """Payload for COMBO_BROKEN."""

    event_type: EventType = Field(
        default=EventType.COMBO_BROKEN,
        description="The topic this payload belongs to.",
    )
    unit_id: str = Field(description="Id of the attacker that lost the streak.")
    combo_count: int = Field(description="Hit count the streak had reached.")
    reason: ComboBreakReason = Field(description="Why the streak ended.")


class ElementReactionEvent(CombatEvent):
    """Payload for ELEMENT_REACTION."""

    event_type: EventType = Field(
        default=EventType.ELEMENT_REACTION,
        description="The topic this payload belongs to.",
    )
    incoming: Element = Field(description="Element of the triggering hit.")
    existing: Element = Field(description="Element already on the target.")
    target_id: str = Field(description="Id of the combatant hit by the reaction.")
    reaction: str = Field(description="Name of the reaction.")
    bonus_damage: int = Field(default=0, description="Bonus damage applied.")


class SkillReadyEvent(CombatEvent):
    """Payload for SKILL_READY, published when a skill enters the queue."""

    event_type: EventType = Field(
        default=EventType.SKILL_READY,
        description="The topic this payload belongs to.",
    )
    unit_id: str = Field(description="Id of the skill owner.")
    skill_id: str = Field(description="Id of the queued skill.")


class SkillUsedEvent(CombatEvent):
    """Payload for SKILL_USED."""

    event_type: EventType = Field(
        default=EventType.SKILL_USED,
        description="The topic this payload belongs to.",
    )
    caster_id: str = Field(description="Id of the caster.")
    skill_id: str = Field(description="Id of the skill.")
    target_ids: list[str] = Field(
        default_factory=list, description="Ids of the resolved targets."
    )


class SkillInterruptedEvent(CombatEvent):
    """Payload for SKILL_INTERRUPTED."""

    event_type: EventType = Field(
        default=EventType.SKILL_INTERRUPTED,
        description="The topic this payload belongs to.",
    )
    unit_id: str = Field(description="Id of the stunned combatant.")
    skill_id: str = Field(description="Id of the skill that could not be used.")


class StatusEvent(CombatEvent):
    """Payload for STATUS_APPLIED and STATUS_EXPIRED."""

    event_type: EventType = Field(description="The topic this payload belongs to.")
    target_id: str = Field(description="Id of the effect holder.")
    effect_id: str = Field(description="Instance id of the effect.")
    effect_name: str = Field(description="Name of the effect.")
    effect_kind: str = Field(description="Kind of the effect (buff, dot, stun...).")


class BattleStartedEvent(CombatEvent):
    """Payload for BATTLE_STARTED."""

    event_type: EventType = Field(
        default=EventType.BATTLE_STARTED,
        description="The topic this payload belongs to.",
    )
    ally_count: int = Field(description="Number of ally combatants.")
    opposing_count: int = Field(description="Number of opposing combatants.")


class BattleEndedEvent(CombatEvent):
    """Payload for BATTLE_ENDED."""

    event_type: EventType = Field(
        default=EventType.BATTLE_ENDED,
        description="The topic this payload belongs to.",
    )
    victory: bool = Field(description="Whether the ally side won.")
    outcome: Any = Field(description="The final BattleOutcome.")


EventHandler = Callable[[Any], None]


@dataclass
class _Subscription:
    handler: EventHandler
    priority: int
    once: bool
    active: bool = True


class EventBus:
    """
    Publish/subscribe channel between the simulation systems.

    Handlers run synchronously inside `publish`, highest priority first, ties
    in registration order. Dispatch iterates over a snapshot, so handlers may
    subscribe or unsubscribe while an event is in flight.
    """

    def __init__(self) -> None:
        self._subscriptions: dict[EventType, list[_Subscription]] = {}

    def subscribe(
        self, topic: EventType, handler: EventHandler, priority: int = 0
    ) -> None:
        """
        Register a handler for a topic.

        Args:
            topic (EventType): The topic to listen to.
            handler (EventHandler): Callable receiving the payload.
            priority (int): Higher priorities run first. Defaults to 0.

        """
        self._add(topic, _Subscription(handler, priority, once=False))

    def subscribe_once(
        self, topic: EventType, handler: EventHandler, priority: int = 0
    ) -> None:
        """Register a handler that is removed after its first invocation."""
        self._add(topic, _Subscription(handler, priority, once=True))

    def unsubscribe(self, topic: EventType, handler: EventHandler) -> bool:
        """
        Remove the first registration of a handler, matched by identity.

        Returns:
            bool: True if a registration was removed.

        """
        subscriptions = self._subscriptions.get(topic, [])
        for index, subscription in enumerate(subscriptions):
            if subscription.handler is handler:
                subscription.active = False
                del subscriptions[index]
                return True
        return False

    def publish(self, topic: EventType, payload: CombatEvent) -> None:
        """
        Dispatch a payload to every handler of its topic.

        Args:
            topic (EventType): The topic to publish on.
            payload (CombatEvent): The payload, whose type matches the topic.

        """
        assert payload.event_type == topic, f"Payload {payload} does not match {topic}"
        subscriptions = self._subscriptions.get(topic)
        if not subscriptions:
            return
        for subscription in list(subscriptions):
            # Skip handlers removed by an earlier handler of this dispatch.
            if not subscription.active:
                continue
            if subscription.once:
                subscription.active = False
                subscriptions.remove(subscription)
            subscription.handler(payload)

    def handler_count(self, topic: EventType) -> int:
        """Returns how many handlers are registered for a topic."""
        return len(self._subscriptions.get(topic, []))

    def reset(self) -> None:
        """Drop every subscription."""
        for subscriptions in self._subscriptions.values():
            for subscription in subscriptions:
                subscription.active = False
        self._subscriptions.clear()
        log_debug("Event bus reset")

    def _add(self, topic: EventType, subscription: _Subscription) -> None:
        subscriptions = self._subscriptions.setdefault(topic, [])
        # Insert after every handler of equal or higher priority.
        index = len(subscriptions)
        for i, existing in enumerate(subscriptions):
            if existing.priority < subscription.priority:
                index = i
                break
        subscriptions.insert(index, subscription)
