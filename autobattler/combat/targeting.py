"""
Targeting module for the combat core.

Decides whom each combatant acts on every tick: taunts first, healers look
after the most wounded ally, callers may force a strategy, and otherwise a
role-weighted score picks the target. Also owns the threat table fed by every
damage application.
"""

from collections.abc import Callable, Sequence
from typing import Any

from autobattler.core.constants import (
    ELEMENT_ADVANTAGE_TARGET_BONUS,
    HEAL_THRESHOLD,
    THREAT_TARGET_BONUS,
    Role,
    TargetingStrategy,
)
from autobattler.core.logging import log_debug

from .elements import has_element_advantage


class ThreatTable:
    """
    Accumulated threat: victim id -> attacker id -> amount.

    Threat only grows until `reset` is called at an encounter boundary.
    """

    def __init__(self) -> None:
        self._table: dict[str, dict[str, float]] = {}

    def register(self, target_id: str, attacker_id: str, amount: float) -> None:
        """Add threat generated by an attacker against a victim."""
        if amount <= 0:
            return
        entries = self._table.setdefault(target_id, {})
        entries[attacker_id] = entries.get(attacker_id, 0.0) + amount

    def get(self, target_id: str, attacker_id: str) -> float:
        return self._table.get(target_id, {}).get(attacker_id, 0.0)

    def total(self, target_id: str) -> float:
        """Total threat accumulated against a victim."""
        return sum(self._table.get(target_id, {}).values())

    def reset(self) -> None:
        self._table.clear()


def threat_potential(unit: Any) -> float:
    """Damage potential of a combatant: attack * attack_speed + magic_power * 0.8."""
    stats = unit.effective_stats()
    return stats.attack * stats.attack_speed + stats.magic_power * 0.8


def _normalize(values: list[float], higher_is_better: bool) -> list[float]:
    """Map raw values to [0, 1], 1 for the best candidate."""
    low, high = min(values), max(values)
    if high == low:
        return [1.0 for _ in values]
    if higher_is_better:
        return [(value - low) / (high - low) for value in values]
    return [(high - value) / (high - low) for value in values]


class TargetingResolver:
    """
    Per-tick target selection.

    Attributes:
        threat (ThreatTable):
            The threat table of the encounter.

    """

    def __init__(self, threat: ThreatTable | None = None) -> None:
        self.threat = threat or ThreatTable()

    def register_threat(self, target_id: str, attacker_id: str, amount: float) -> None:
        self.threat.register(target_id, attacker_id, amount)

    def threat_level(self, target_id: str) -> float:
        return self.threat.total(target_id)

    def reset_threat(self) -> None:
        self.threat.reset()

    # ============================================================================
    # SELECTION
    # ============================================================================

    def select_target(
        self,
        unit: Any,
        opponents: Sequence[Any],
        allies: Sequence[Any],
        strategy: TargetingStrategy | None = None,
    ) -> Any | None:
        """
        Select the target of a combatant for this tick.

        Args:
            unit (Combatant):
                The acting combatant.
            opponents (Sequence[Combatant]):
                The opposing roster, dead members included.
            allies (Sequence[Combatant]):
                The combatant's own roster, itself included.
            strategy (TargetingStrategy | None):
                Optional explicit override of the role behaviour.

        Returns:
            Combatant | None:
                The chosen target, or None when there is nothing to do.

        """
        taunt_source = unit.taunt_source()
        if taunt_source is not None:
            return taunt_source

        if unit.role == Role.HEALER:
            return self.select_heal_target(allies)

        candidates = [other for other in opponents if other.is_alive()]
        if not candidates:
            return None

        if strategy is not None:
            return self._select_by_strategy(unit, candidates, strategy)

        if unit.role == Role.MELEE:
            scores = _normalize([c.hp for c in candidates], higher_is_better=False)
        elif unit.role == Role.RANGED:
            scores = _normalize(
                [self._threat_score(unit, c) for c in candidates],
                higher_is_better=True,
            )
        else:
            scores = _normalize(
                [unit.distance_to(c) for c in candidates], higher_is_better=False
            )

        own_threat = self.threat.total(unit.unit_id)
        best, best_score = None, float("-inf")
        for candidate, score in zip(candidates, scores):
            if unit.element is not None and candidate.element is not None:
                if has_element_advantage(unit.element, candidate.element):
                    score += ELEMENT_ADVANTAGE_TARGET_BONUS
            if own_threat > 0:
                share = self.threat.get(unit.unit_id, candidate.unit_id) / own_threat
                score += THREAT_TARGET_BONUS * share
            if score > best_score:
                best, best_score = candidate, score

        log_debug(
            f"{unit.name} targets {best.name}",
            {"role": unit.role, "score": round(best_score, 3)},
        )
        return best

    def select_heal_target(self, allies: Sequence[Any]) -> Any | None:
        """
        Living ally with the lowest HP fraction, if it needs healing.

        Args:
            allies (Sequence[Combatant]):
                The healer's roster.

        Returns:
            Combatant | None:
                None when every living ally is at or above 90% HP.

        """
        living = [ally for ally in allies if ally.is_alive()]
        if not living:
            return None
        target = min(living, key=lambda ally: ally.hp_fraction)
        return target if target.hp_fraction < HEAL_THRESHOLD else None

    # ============================================================================
    # STRATEGIES
    # ============================================================================

    def _select_by_strategy(
        self, unit: Any, candidates: list[Any], strategy: TargetingStrategy
    ) -> Any | None:
        selectors: dict[TargetingStrategy, Callable[[Any, list[Any]], Any | None]] = {
            TargetingStrategy.ELEMENT_PRIORITY: self._select_element_priority,
            TargetingStrategy.LOWEST_HP: lambda _, c: _lowest_hp(c),
            TargetingStrategy.NEAREST: _nearest,
            TargetingStrategy.HIGHEST_THREAT: self._select_highest_threat,
        }
        return selectors[strategy](unit, candidates)

    def _select_element_priority(self, unit: Any, candidates: list[Any]) -> Any | None:
        if unit.element is not None:
            advantaged = [
                c
                for c in candidates
                if c.element is not None
                and has_element_advantage(unit.element, c.element)
            ]
            if advantaged:
                return _lowest_hp(advantaged)
        return _nearest(unit, candidates)

    def _select_highest_threat(self, unit: Any, candidates: list[Any]) -> Any | None:
        best, best_threat = None, float("-inf")
        for candidate in candidates:
            threat = self._threat_score(unit, candidate)
            if threat > best_threat:
                best, best_threat = candidate, threat
        return best

    def _threat_score(self, unit: Any, candidate: Any) -> float:
        return threat_potential(candidate) + self.threat.get(unit.unit_id, candidate.unit_id)


def _nearest(unit: Any, candidates: list[Any]) -> Any | None:
    if not candidates:
        return None
    return min(candidates, key=unit.distance_to)


def _lowest_hp(candidates: list[Any]) -> Any | None:
    if not candidates:
        return None
    return min(candidates, key=lambda candidate: candidate.hp)
