"""
Synergy module for the combat core.

Counts race, class and element tags across the ally roster at battle start
and grants the stat bonuses of every synergy threshold reached.
"""

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from autobattler.core.constants import StatKey
from autobattler.core.content import SynergyDefinition
from autobattler.core.logging import log_debug


@dataclass
class ActiveSynergy:
    """A synergy reached by the current roster."""

    synergy_id: str
    name: str
    count: int
    threshold: int
    member_ids: list[str] = field(default_factory=list)


def _tag_of(unit: Any, category: str) -> str | None:
    if category == "race":
        return unit.race
    if category == "class":
        return unit.unit_class
    return unit.element.value if unit.element is not None else None


class SynergySystem:
    """
    Team composition bonuses, computed once per encounter.

    Attributes:
        definitions (list[SynergyDefinition]):
            The synergies that can activate.
        active (list[ActiveSynergy]):
            Synergies reached by the last calculated roster.
        bonuses (dict[str, dict[StatKey, float]]):
            Flat stat bonuses per combatant id.

    """

    def __init__(self, definitions: Iterable[SynergyDefinition]) -> None:
        self.definitions = list(definitions)
        self.active: list[ActiveSynergy] = []
        self.bonuses: dict[str, dict[StatKey, float]] = {}

    def calculate(self, roster: Sequence[Any]) -> dict[str, dict[StatKey, float]]:
        """
        Compute the stat bonuses of a roster.

        Stat boosts of every reached threshold accumulate on the members of
        the synergy; resistance effects go to every combatant of the roster,
        as magic resist unless another stat is named.

        Args:
            roster (Sequence[Combatant]):
                The ally roster.

        Returns:
            dict[str, dict[StatKey, float]]:
                Bonuses per combatant id, every member present.

        """
        bonuses: dict[str, dict[StatKey, float]] = {unit.unit_id: {} for unit in roster}
        resistance: dict[StatKey, float] = defaultdict(float)
        self.active = []

        for synergy in self.definitions:
            members = [
                unit.unit_id
                for unit in roster
                if _tag_of(unit, synergy.category) == synergy.key
            ]
            reached = [t for t in synergy.thresholds if len(members) >= t.count]
            if not reached:
                continue
            self.active.append(
                ActiveSynergy(
                    synergy_id=synergy.synergy_id,
                    name=synergy.name,
                    count=len(members),
                    threshold=max(t.count for t in reached),
                    member_ids=members,
                )
            )
            for threshold in reached:
                for effect in threshold.effects:
                    if effect.type == "resistance":
                        resistance[effect.stat or StatKey.MAGIC_RESIST] += effect.value
                        continue
                    for unit_id in members:
                        unit_bonus = bonuses[unit_id]
                        unit_bonus[effect.stat] = unit_bonus.get(effect.stat, 0.0) + effect.value

        for unit_bonus in bonuses.values():
            for stat, value in resistance.items():
                unit_bonus[stat] = unit_bonus.get(stat, 0.0) + value

        self.bonuses = bonuses
        log_debug(
            "Synergies calculated",
            {"active": [synergy.synergy_id for synergy in self.active]},
        )
        return bonuses

    def apply(self, roster: Sequence[Any]) -> None:
        """Calculate the bonuses of a roster and store them on each member."""
        bonuses = self.calculate(roster)
        for unit in roster:
            unit.synergy_bonuses = dict(bonuses.get(unit.unit_id, {}))
            # A max HP bonus raises current HP with it.
            unit.hp = unit.max_hp if unit.hp >= unit.base_stats.max_hp else unit.hp

    def bonuses_for(self, unit_id: str) -> dict[StatKey, float]:
        return self.bonuses.get(unit_id, {})
