"""
Combo module for the combat core.

Tracks consecutive hits per attacker. Hits on the same target inside the combo
window build the streak; switching target or letting the window lapse breaks
it.
"""

import math
from dataclasses import dataclass

from autobattler.core.constants import (
    COMBO_BONUS_PER_TIER,
    COMBO_HITS_PER_TIER,
    COMBO_MILESTONE,
    COMBO_WINDOW,
)
from autobattler.core.logging import log_debug
from autobattler.effects.event_system import (
    ComboBreakReason,
    ComboBrokenEvent,
    ComboHitEvent,
    EventBus,
    EventType,
)


@dataclass
class ComboState:
    """Streak of one attacker."""

    target_id: str
    count: int
    timer: float


class ComboTracker:
    """
    Per-attacker combo bookkeeping.

    Attributes:
        bus (EventBus | None):
            Bus COMBO_HIT and COMBO_BROKEN events are published on.
        window (float):
            Seconds a streak survives without a new hit.

    """

    def __init__(self, bus: EventBus | None = None, window: float = COMBO_WINDOW) -> None:
        self.bus = bus
        self.window = window
        self._combos: dict[str, ComboState] = {}

    def register_hit(self, attacker_id: str, target_id: str) -> None:
        """
        Register a hit from an attacker on a target.

        Args:
            attacker_id (str): Id of the attacker.
            target_id (str): Id of the combatant hit.

        """
        existing = self._combos.get(attacker_id)
        if existing is not None and existing.target_id == target_id:
            existing.count += 1
            existing.timer = self.window
            state = existing
        else:
            if existing is not None and existing.count > 0:
                self._broken(attacker_id, existing.count, ComboBreakReason.TARGET_SWITCH)
            state = ComboState(target_id=target_id, count=1, timer=self.window)
            self._combos[attacker_id] = state

        if state.count >= COMBO_MILESTONE and state.count % COMBO_MILESTONE == 0:
            log_debug("Combo milestone", {"attacker": attacker_id, "count": state.count})
            if self.bus is not None:
                self.bus.publish(
                    EventType.COMBO_HIT,
                    ComboHitEvent(unit_id=attacker_id, combo_count=state.count),
                )

    def multiplier(self, attacker_id: str, target_id: str | None = None) -> float:
        """
        Damage multiplier of an attacker's streak: +10% per 5 hits.

        Args:
            attacker_id (str): Id of the attacker.
            target_id (str | None): When given, only a streak on this target
                counts.

        Returns:
            float: 1.0 without a matching streak.

        """
        state = self._combos.get(attacker_id)
        if state is None:
            return 1.0
        if target_id is not None and state.target_id != target_id:
            return 1.0
        tiers = math.floor(state.count / COMBO_HITS_PER_TIER)
        return 1.0 + tiers * COMBO_BONUS_PER_TIER

    def count(self, attacker_id: str) -> int:
        state = self._combos.get(attacker_id)
        return state.count if state is not None else 0

    def update(self, dt: float) -> None:
        """Decay every streak timer, dropping the ones that lapse."""
        for attacker_id, state in list(self._combos.items()):
            state.timer -= dt
            if state.timer <= 0:
                del self._combos[attacker_id]
                if state.count > 0:
                    self._broken(attacker_id, state.count, ComboBreakReason.DECAY)

    def reset(self) -> None:
        self._combos.clear()

    def _broken(self, attacker_id: str, count: int, reason: ComboBreakReason) -> None:
        log_debug("Combo broken", {"attacker": attacker_id, "count": count, "reason": reason.value})
        if self.bus is not None:
            self.bus.publish(
                EventType.COMBO_BROKEN,
                ComboBrokenEvent(unit_id=attacker_id, combo_count=count, reason=reason),
            )
