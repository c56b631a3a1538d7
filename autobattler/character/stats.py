"""
Combatant stats module for the combat core.

Holds the base stat block of a combatant and the helpers that fold status
modifiers and synergy bonuses into effective stats.
"""

from typing import Any, Iterable

from pydantic import BaseModel, Field

from autobattler.core.constants import CRIT_MULTIPLIER, StatKey


class CombatantStats(BaseModel):
    """
    Stat block of a combatant.

    Used both for the immutable base stats loaded from content and for the
    effective stats computed on demand.
    """

    max_hp: float = Field(
        description="Maximum hit points.",
    )
    attack: float = Field(
        default=0.0,
        description="Physical power, also the scaling stat of most skills.",
    )
    defense: float = Field(
        default=0.0,
        description="Mitigates physical damage.",
    )
    magic_power: float = Field(
        default=0.0,
        description="Magical power.",
    )
    magic_resist: float = Field(
        default=0.0,
        description="Mitigates magical damage.",
    )
    speed: float = Field(
        default=60.0,
        description="Movement speed in units per second.",
    )
    attack_speed: float = Field(
        default=1.0,
        description="Basic attacks per second.",
    )
    attack_range: float = Field(
        default=60.0,
        description="Reach of basic attacks.",
    )
    crit_chance: float = Field(
        default=0.0,
        description="Probability of a critical hit (0-1).",
    )
    crit_damage: float = Field(
        default=CRIT_MULTIPLIER,
        description="Damage multiplier of a critical hit.",
    )

    def model_post_init(self, _: Any) -> None:
        if self.max_hp <= 0:
            raise ValueError(f"max_hp must be positive, got {self.max_hp}.")
        if self.attack_speed < 0:
            raise ValueError(
                f"attack_speed must be non-negative, got {self.attack_speed}."
            )

    def get(self, stat: StatKey) -> float:
        """Returns the value of a stat by key."""
        return getattr(self, stat.value)

    def with_modifiers(self, modifiers: Iterable[tuple[StatKey, float]]) -> "CombatantStats":
        """
        Build a new stat block with additive modifiers applied in order.

        Args:
            modifiers (Iterable[tuple[StatKey, float]]):
                Pairs of stat key and delta.

        Returns:
            CombatantStats:
                The modified copy; this block is left untouched.

        """
        values = self.model_dump()
        for stat, delta in modifiers:
            values[stat.value] += delta
        # Skip validation, a debuff may legitimately push a stat below zero.
        return CombatantStats.model_construct(**values)
