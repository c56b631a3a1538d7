"""
Damage module for the combat core.

Handles damage calculation and application: mitigation, critical hits,
elemental and combo multipliers, variance, the one-damage floor, elemental
reactions, and the healing path.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from autobattler.core.constants import (
    DAMAGE_VARIANCE,
    DEFENSE_FORMULA_BASE,
    DamageType,
    Element,
)
from autobattler.core.error_handling import ensure_non_negative_number
from autobattler.core.logging import log_debug
from autobattler.core.rng import SeededRNG
from autobattler.core.utils import round_half_up
from autobattler.effects.event_system import (
    DamageEvent,
    EventBus,
    EventType,
    KillEvent,
)

from .combo import ComboTracker
from .elements import ElementSystem, element_multiplier
from .targeting import TargetingResolver


class DamageResult(BaseModel):
    """Immutable outcome of one resolved hit."""

    model_config = ConfigDict(frozen=True)

    raw_damage: float = Field(
        description="Input amount, after clamping malformed values to 0.",
    )
    final_damage: int = Field(
        description="Damage of the primary hit after the whole pipeline.",
    )
    is_crit: bool = Field(
        default=False,
        description="Whether the hit was critical.",
    )
    is_heal: bool = Field(
        default=False,
        description="Whether the result describes a heal.",
    )
    element: Element | None = Field(
        default=None,
        description="Element the hit carried.",
    )
    reaction_damage: int = Field(
        default=0,
        description="Bonus damage of a triggered reaction, applied separately.",
    )
    reaction_name: str | None = Field(
        default=None,
        description="Name of the triggered reaction, if any.",
    )

    @property
    def total_damage(self) -> int:
        return self.final_damage + self.reaction_damage


def mitigate(amount: float, defense: float) -> float:
    """Diminishing-returns mitigation: amount * K / (K + max(0, defense))."""
    return amount * (DEFENSE_FORMULA_BASE / (DEFENSE_FORMULA_BASE + max(0.0, defense)))


class DamageResolver:
    """
    Resolves and applies damage and healing between combatants.

    Attributes:
        rng (SeededRNG):
            Source of crit and variance rolls.
        elements (ElementSystem):
            Reaction resolution.
        combo (ComboTracker | None):
            Combo tracker whose multiplier applies and which records hits.
        targeting (TargetingResolver | None):
            Receives the threat of every damage application.
        bus (EventBus | None):
            Bus damage and kill events are published on.

    """

    def __init__(
        self,
        rng: SeededRNG,
        elements: ElementSystem,
        combo: ComboTracker | None = None,
        targeting: TargetingResolver | None = None,
        bus: EventBus | None = None,
    ) -> None:
        self.rng = rng
        self.elements = elements
        self.combo = combo
        self.targeting = targeting
        self.bus = bus

    def resolve(
        self,
        attacker: Any,
        target: Any,
        base_amount: float,
        damage_type: DamageType,
        force_crit: bool = False,
        element_override: Element | None = None,
    ) -> DamageResult:
        """
        Compute the primary hit and apply any elemental reaction it triggers.

        The primary hit itself is not applied to the target, see
        `apply_damage` for the full damage application.

        Args:
            attacker (Combatant):
                The combatant dealing damage.
            target (Combatant):
                The combatant receiving damage.
            base_amount (float):
                Amount before mitigation; malformed values count as 0.
            damage_type (DamageType):
                Physical uses defense, magical magic resist, pure skips mitigation.
            force_crit (bool):
                Skip the crit roll and crit anyway.
            element_override (Element | None):
                Element of the hit, defaults to the attacker's element.

        Returns:
            DamageResult:
                The primary hit and, separately, the reaction bonus damage.

        """
        base, final_damage, is_crit, hit_element = self._roll_hit(
            attacker, target, base_amount, damage_type, force_crit, element_override
        )
        reaction_damage, reaction_name = self._react(hit_element, target, final_damage)
        return DamageResult(
            raw_damage=base,
            final_damage=final_damage,
            is_crit=is_crit,
            element=hit_element,
            reaction_damage=reaction_damage,
            reaction_name=reaction_name,
        )

    def apply_damage(
        self,
        attacker: Any,
        target: Any,
        base_amount: float,
        damage_type: DamageType,
        force_crit: bool = False,
        element_override: Element | None = None,
    ) -> DamageResult:
        """
        Resolve a hit, apply it to the target and publish the consequences.

        The primary hit lands first; a reaction it triggers is a second damage
        application on the still living target. Registers the combo hit and
        the threat, publishes DAMAGE_APPLIED with the HP actually removed, and
        publishes KILL only when this call takes the target from alive to
        dead.

        Args:
            attacker (Combatant):
                The combatant dealing damage.
            target (Combatant):
                The combatant receiving damage.
            base_amount (float):
                Amount before mitigation.
            damage_type (DamageType):
                Mitigation class of the hit.
            force_crit (bool):
                Skip the crit roll and crit anyway.
            element_override (Element | None):
                Element of the hit, defaults to the attacker's element.

        Returns:
            DamageResult:
                The resolved hit.

        """
        was_alive = target.is_alive()
        base, final_damage, is_crit, hit_element = self._roll_hit(
            attacker, target, base_amount, damage_type, force_crit, element_override
        )
        dealt = target.take_damage(final_damage)
        reaction_damage, reaction_name = self._react(hit_element, target, final_damage)
        dealt += reaction_damage
        result = DamageResult(
            raw_damage=base,
            final_damage=final_damage,
            is_crit=is_crit,
            element=hit_element,
            reaction_damage=reaction_damage,
            reaction_name=reaction_name,
        )

        if self.combo is not None:
            self.combo.register_hit(attacker.unit_id, target.unit_id)
        if self.targeting is not None:
            self.targeting.register_threat(
                target.unit_id, attacker.unit_id, result.final_damage
            )

        log_debug(
            f"{attacker.name} hits {target.name} for {dealt}",
            {
                "type": damage_type.value,
                "crit": result.is_crit,
                "reaction": result.reaction_name,
                "hp": target.hp,
            },
        )
        if self.bus is not None:
            self.bus.publish(
                EventType.DAMAGE_APPLIED,
                DamageEvent(
                    source_id=attacker.unit_id,
                    target_id=target.unit_id,
                    amount=dealt,
                    damage_type=damage_type,
                    element=result.element,
                    is_crit=result.is_crit,
                ),
            )
            if was_alive and not target.is_alive():
                self.bus.publish(
                    EventType.KILL,
                    KillEvent(killer_id=attacker.unit_id, target_id=target.unit_id),
                )
        return result

    def _roll_hit(
        self,
        attacker: Any,
        target: Any,
        base_amount: float,
        damage_type: DamageType,
        force_crit: bool,
        element_override: Element | None,
    ) -> tuple[float, int, bool, Element | None]:
        base = ensure_non_negative_number(
            base_amount,
            "base damage",
            context={"attacker": attacker.unit_id, "target": target.unit_id},
        )
        attacker_stats = attacker.effective_stats()
        target_stats = target.effective_stats()

        damage = base
        if damage_type == DamageType.PHYSICAL:
            damage = mitigate(damage, target_stats.defense)
        elif damage_type == DamageType.MAGICAL:
            damage = mitigate(damage, target_stats.magic_resist)

        is_crit = force_crit or self.rng.chance(attacker_stats.crit_chance)
        if is_crit:
            damage *= attacker_stats.crit_damage

        hit_element = element_override or attacker.element
        damage *= element_multiplier(hit_element, target.element)

        if self.combo is not None:
            # Only a streak on this same target counts.
            damage *= self.combo.multiplier(attacker.unit_id, target.unit_id)

        damage *= 1 + self.rng.next_float(-DAMAGE_VARIANCE, DAMAGE_VARIANCE)
        return base, max(1, round_half_up(damage)), is_crit, hit_element

    def _react(
        self, hit_element: Element | None, target: Any, final_damage: int
    ) -> tuple[int, str | None]:
        if hit_element is None or not target.is_alive():
            return 0, None
        found = self.elements.check_reaction(hit_element, target)
        if found is None:
            return 0, None
        reaction, existing = found
        dealt = self.elements.apply_reaction(
            reaction, hit_element, existing, target, final_damage
        )
        return dealt, reaction.name

    def heal(self, healer: Any, target: Any, amount: float) -> int:
        """
        Heal a target, clamped to its missing HP.

        Args:
            healer (Combatant):
                The combatant credited with the heal.
            target (Combatant):
                The combatant being healed.
            amount (float):
                Healing before clamping; malformed values count as 0.

        Returns:
            int:
                HP actually restored; 0 for dead or full targets.

        """
        amount = ensure_non_negative_number(
            amount, "heal amount", context={"healer": healer.unit_id}
        )
        return target.heal(amount, source_id=healer.unit_id)
