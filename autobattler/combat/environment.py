"""
Environment module for the combat core.

Applies the periodic rules of an encounter archetype: the forest heals the
ally roster, the volcano burns whoever stands still and the abyss shrinks
attack ranges.
"""

import math
from collections.abc import Sequence
from typing import Any

from autobattler.core.constants import DamageType, EnvironmentKind
from autobattler.core.logging import log_debug
from autobattler.effects.event_system import DamageEvent, EventBus, EventType

FOREST_HEAL_INTERVAL = 15.0
FOREST_HEAL_PERCENT = 0.05
VOLCANO_CHECK_INTERVAL = 2.0
VOLCANO_DAMAGE_PERCENT = 0.02
VOLCANO_MOVEMENT_THRESHOLD = 5.0
ABYSS_INTERVAL = 10.0
ABYSS_RANGE_REDUCTION = 20.0
ABYSS_MIN_RANGE = 20.0

_DESCRIPTIONS: dict[EnvironmentKind, str] = {
    EnvironmentKind.NONE: "",
    EnvironmentKind.FOREST: "Forest blessing: allies heal 5% max HP every 15s.",
    EnvironmentKind.VOLCANO: "Burning ground: units standing still take fire damage.",
    EnvironmentKind.ABYSS: "Abyssal dark: attack ranges shrink every 10s.",
}


class EnvironmentEngine:
    """
    Periodic rules of one encounter.

    Each rule owns an accumulating timer and fires once per full interval
    elapsed, several times in a single long frame if needed.

    Attributes:
        kind (EnvironmentKind):
            The encounter archetype.
        bus (EventBus | None):
            Bus volcano damage is published on.

    """

    def __init__(self, kind: EnvironmentKind = EnvironmentKind.NONE, bus: EventBus | None = None) -> None:
        self.kind = kind
        self.bus = bus
        self.heal_timer = 0.0
        self.volcano_timer = 0.0
        self.abyss_timer = 0.0
        self._last_x: dict[str, float] = {}

    @property
    def description(self) -> str:
        return _DESCRIPTIONS.get(self.kind, "")

    def record_positions(self, units: Sequence[Any]) -> None:
        """Remember where every combatant stands, called at battle start."""
        for unit in units:
            self._last_x[unit.unit_id] = unit.x

    def tick(self, dt: float, allies: Sequence[Any], opponents: Sequence[Any]) -> None:
        """
        Advance the rule of the current archetype.

        Args:
            dt (float): Elapsed (scaled) seconds.
            allies (Sequence[Combatant]): The ally roster.
            opponents (Sequence[Combatant]): The opposing roster.

        """
        if self.kind == EnvironmentKind.FOREST:
            self._tick_forest(dt, allies)
        elif self.kind == EnvironmentKind.VOLCANO:
            self._tick_volcano(dt, [*allies, *opponents])
        elif self.kind == EnvironmentKind.ABYSS:
            self._tick_abyss(dt, [*allies, *opponents])

    def reset(self) -> None:
        self.heal_timer = 0.0
        self.volcano_timer = 0.0
        self.abyss_timer = 0.0
        self._last_x.clear()

    # ============================================================================
    # RULES
    # ============================================================================

    def _tick_forest(self, dt: float, allies: Sequence[Any]) -> None:
        self.heal_timer += dt
        while self.heal_timer >= FOREST_HEAL_INTERVAL:
            self.heal_timer -= FOREST_HEAL_INTERVAL
            log_debug("Forest blessing pulses", {"allies": len(allies)})
            for unit in allies:
                if unit.is_alive():
                    unit.heal(math.floor(unit.max_hp * FOREST_HEAL_PERCENT))

    def _tick_volcano(self, dt: float, units: list[Any]) -> None:
        self.volcano_timer += dt
        while self.volcano_timer >= VOLCANO_CHECK_INTERVAL:
            self.volcano_timer -= VOLCANO_CHECK_INTERVAL
            for unit in units:
                if not unit.is_alive():
                    continue
                last_x = self._last_x.get(unit.unit_id, unit.x)
                if abs(unit.x - last_x) < VOLCANO_MOVEMENT_THRESHOLD:
                    self._burn(unit)
                self._last_x[unit.unit_id] = unit.x

    def _burn(self, unit: Any) -> None:
        amount = unit.take_damage(math.floor(unit.max_hp * VOLCANO_DAMAGE_PERCENT))
        log_debug(f"{unit.name} is scorched by the ground", {"amount": amount})
        if self.bus is not None and amount > 0:
            self.bus.publish(
                EventType.DAMAGE_APPLIED,
                DamageEvent(
                    source_id=unit.unit_id,
                    target_id=unit.unit_id,
                    amount=amount,
                    damage_type=DamageType.PURE,
                ),
            )

    def _tick_abyss(self, dt: float, units: list[Any]) -> None:
        self.abyss_timer += dt
        while self.abyss_timer >= ABYSS_INTERVAL:
            self.abyss_timer -= ABYSS_INTERVAL
            log_debug("Abyssal dark spreads", {"units": len(units)})
            for unit in units:
                if not unit.is_alive():
                    continue
                shrunk = max(
                    ABYSS_MIN_RANGE,
                    unit.base_stats.attack_range - ABYSS_RANGE_REDUCTION,
                )
                unit.base_stats = unit.base_stats.model_copy(
                    update={"attack_range": shrunk}
                )
