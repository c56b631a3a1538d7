"""
Status tick module for the combat core.

Advances the status ledger of a combatant by one frame: decrements durations,
fires periodic damage and healing on tick boundaries, and removes what
expired.
"""

from typing import Any

from autobattler.core.constants import DamageType
from autobattler.core.logging import log_debug

from .event_system import (
    DamageEvent,
    EventBus,
    EventType,
    KillEvent,
    StatusEvent,
)
from .status_effect import (
    DamageOverTimeEffect,
    HealingOverTimeEffect,
    StatusEffect,
    TauntEffect,
)


class StatusTickEngine:
    """
    Per-frame driver of status effects.

    Attributes:
        bus (EventBus | None):
            Bus periodic damage, kill and expiry events are published on.

    """

    def __init__(self, bus: EventBus | None = None) -> None:
        self.bus = bus

    def tick(self, unit: Any, dt: float) -> None:
        """
        Advance every effect of a living combatant by `dt` seconds.

        Args:
            unit (Combatant):
                The effect holder; dead combatants are skipped.
            dt (float):
                Elapsed (scaled) seconds.

        """
        if not unit.is_alive():
            return

        for effect in list(unit.effects):
            before = effect.duration
            effect.duration -= dt
            if not unit.is_alive():
                continue
            if isinstance(effect, DamageOverTimeEffect):
                if effect.fires_between(before, effect.duration):
                    self._apply_periodic_damage(unit, effect)
            elif isinstance(effect, HealingOverTimeEffect):
                if effect.fires_between(before, effect.duration):
                    unit.heal(effect.tick_amount, source_id=effect.source_id)

        for effect in unit.effects.remove_expired():
            self._expired(unit, effect)
        unit.clamp_hp()

    def _apply_periodic_damage(self, unit: Any, effect: DamageOverTimeEffect) -> None:
        was_alive = unit.is_alive()
        amount = unit.take_damage(effect.tick_amount)
        log_debug(
            f"{effect.name} deals {amount} to {unit.name}",
            {"effect_id": effect.effect_id, "hp": unit.hp},
        )
        if self.bus is None:
            return
        source_id = effect.source_id or unit.unit_id
        self.bus.publish(
            EventType.DAMAGE_APPLIED,
            DamageEvent(
                source_id=source_id,
                target_id=unit.unit_id,
                amount=amount,
                damage_type=DamageType.PURE,
                element=effect.element,
            ),
        )
        if was_alive and not unit.is_alive() and effect.source_id is not None:
            self.bus.publish(
                EventType.KILL,
                KillEvent(killer_id=effect.source_id, target_id=unit.unit_id),
            )

    def _expired(self, unit: Any, effect: StatusEffect) -> None:
        if isinstance(effect, TauntEffect):
            unit.taunt_target = None
        log_debug(f"{effect.name} expired on {unit.name}", {"effect_id": effect.effect_id})
        if self.bus is not None:
            self.bus.publish(
                EventType.STATUS_EXPIRED,
                StatusEvent(
                    event_type=EventType.STATUS_EXPIRED,
                    target_id=unit.unit_id,
                    effect_id=effect.effect_id,
                    effect_name=effect.name,
                    effect_kind=effect.kind,
                ),
            )
