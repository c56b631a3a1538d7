"""
Status ledger module for the combat core.

Keeps the ordered list of status effects a single combatant carries and
answers the questions the other systems ask about them.
"""

from collections.abc import Iterator
from typing import Any

from autobattler.core.constants import Element, StatKey

from .status_effect import (
    BuffEffect,
    DebuffEffect,
    PeriodicEffect,
    StatusEffect,
    StunEffect,
    TauntEffect,
)


class StatusLedger:
    """
    Ordered collection of the status effects held by one combatant.

    Attributes:
        _owner (Any):
            The combatant that owns this ledger.
        effects (list[StatusEffect]):
            Active effects, in application order.

    """

    _owner: Any
    effects: list[StatusEffect]

    def __init__(self, owner: Any) -> None:
        """
        Initialize the ledger.

        Args:
            owner (Any):
                The combatant that owns this ledger.

        """
        self._owner = owner
        self.effects: list[StatusEffect] = []
        self._next_id = 1

    def __iter__(self) -> Iterator[StatusEffect]:
        return iter(self.effects)

    def __len__(self) -> int:
        return len(self.effects)

    # === Effect Management ===

    def add(self, effect: StatusEffect) -> StatusEffect:
        """
        Append an effect; same-name effects stack as independent instances.

        Effects without an id get one from the owner id and a per-ledger
        counter, so a replayed encounter assigns the same ids.

        Args:
            effect (StatusEffect):
                The effect to add.

        Returns:
            StatusEffect:
                The added effect.

        """
        if effect.effect_id is None:
            effect.effect_id = f"{self._owner.unit_id}_status_{self._next_id}"
            self._next_id += 1
        self.effects.append(effect)
        return effect

    def remove(self, effect: StatusEffect) -> bool:
        """Remove an effect instance, returns False if it was not held."""
        if effect in self.effects:
            self.effects.remove(effect)
            return True
        return False

    def remove_expired(self) -> list[StatusEffect]:
        """
        Drop every effect whose duration reached zero.

        Returns:
            list[StatusEffect]:
                The removed effects, in ledger order.

        """
        expired = [effect for effect in self.effects if effect.is_expired()]
        if expired:
            self.effects = [
                effect for effect in self.effects if not effect.is_expired()
            ]
        return expired

    def clear(self) -> None:
        self.effects.clear()

    # === Queries ===

    def stat_delta(self, stat: StatKey) -> float:
        """
        Sum of buff and debuff values targeting a stat.

        Args:
            stat (StatKey):
                The stat to inspect.

        Returns:
            float:
                The total modifier, applied in ledger order.

        """
        total = 0.0
        for effect in self.stat_modifiers():
            if effect.stat == stat:
                total += effect.value
        return total

    def is_stunned(self) -> bool:
        return any(isinstance(effect, StunEffect) for effect in self.effects)

    def taunt_effect(self) -> TauntEffect | None:
        """Returns the first active taunt, if any."""
        return next(
            (effect for effect in self.effects if isinstance(effect, TauntEffect)),
            None,
        )

    def foreign_elements(self, incoming: Element) -> Iterator[StatusEffect]:
        """
        Effects tagged with an element other than `incoming`.

        Args:
            incoming (Element):
                Element of the hit being resolved.

        Returns:
            Iterator[StatusEffect]:
                Candidate effects for a reaction, in ledger order.

        """
        for effect in self.effects:
            if effect.element is not None and effect.element != incoming:
                yield effect

    def has_effect(self, name: str) -> bool:
        return any(effect.name == name for effect in self.effects)

    # === Helpers ===

    def stat_modifiers(self) -> Iterator[BuffEffect | DebuffEffect]:
        """Buff and debuff effects that modify a stat."""
        for effect in self.effects:
            if isinstance(effect, (BuffEffect, DebuffEffect)) and effect.stat:
                yield effect

    def periodic_effects(self) -> Iterator[PeriodicEffect]:
        """Damage and healing over time effects."""
        for effect in self.effects:
            if isinstance(effect, PeriodicEffect):
                yield effect
