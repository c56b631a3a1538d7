"""
Skill module for the combat core.

Handles skill cooldowns, readiness checks against the current battlefield and
skill execution: direct damage or healing, attached status effects and
chained effect steps.
"""

from collections.abc import Sequence
from typing import Any

from autobattler.core.constants import (
    DamageType,
    Role,
    ScalingStat,
    StatKey,
    TargetType,
    is_opponent,
)
from autobattler.core.content import (
    ContentRepository,
    SkillDefinition,
    SkillEffectDefinition,
)
from autobattler.core.logging import log_debug, log_warning
from autobattler.effects.event_system import (
    EventBus,
    EventType,
    SkillInterruptedEvent,
    SkillUsedEvent,
)
from autobattler.effects.status_effect import create_status_effect

from .damage import DamageResolver

# Skills that always land a critical hit.
FORCED_CRIT_SKILLS = frozenset({"backstab"})

# Status names with a dedicated kind; every other name is a debuff marker.
_STATUS_KINDS: dict[str, str] = {
    "stun": "stun",
    "taunt": "taunt",
    "burn": "dot",
    "attack_buff": "buff",
}


def map_status_kind(status_name: str) -> str:
    """
    Kind of the status effect a skill applies by name.

    Args:
        status_name (str): Name of the status effect.

    Returns:
        str: stun, taunt, dot, buff, or debuff for anything else.

    """
    return _STATUS_KINDS.get(status_name, "debuff")


def skill_amount(caster: Any, base: float, scaling_stat: ScalingStat, ratio: float) -> float:
    """Raw skill amount: base + scaling stat * ratio; negative means a heal."""
    stat = caster.get_stat(StatKey(scaling_stat.value))
    return base + stat * ratio


class SkillSystem:
    """
    Readiness and execution of combatant skills.

    Attributes:
        resolver (DamageResolver):
            Damage and healing path used by every skill hit.
        bus (EventBus | None):
            Bus SKILL_USED and SKILL_INTERRUPTED events are published on.

    """

    def __init__(self, resolver: DamageResolver, bus: EventBus | None = None) -> None:
        self.resolver = resolver
        self.bus = bus

    # ============================================================================
    # SETUP & COOLDOWNS
    # ============================================================================

    def initialize_skills(
        self, unit: Any, skill_ids: Sequence[str], content: ContentRepository
    ) -> None:
        """
        Attach skills to a combatant, ready immediately.

        Unknown skill ids are dropped with a warning.

        Args:
            unit (Combatant):
                The combatant receiving the skills.
            skill_ids (Sequence[str]):
                Ids to look up in the content repository.
            content (ContentRepository):
                Source of the skill definitions.

        """
        for skill_id in skill_ids:
            skill = content.skills.get(skill_id)
            if skill is None:
                log_warning(
                    f"Unknown skill '{skill_id}' dropped from {unit.name}",
                    {"unit_id": unit.unit_id, "skill_id": skill_id},
                )
                continue
            unit.add_skill(skill)

    def tick_cooldowns(self, unit: Any, dt: float) -> None:
        """Decrease every cooldown of a combatant, floored at zero."""
        for skill_id, remaining in unit.skill_cooldowns.items():
            if remaining > 0:
                unit.skill_cooldowns[skill_id] = max(0.0, remaining - dt)

    def first_off_cooldown(self, unit: Any) -> SkillDefinition | None:
        """First skill whose cooldown reached zero, regardless of targets."""
        for skill in unit.skills:
            if unit.skill_cooldowns.get(skill.skill_id, 0.0) <= 0:
                return skill
        return None

    # ============================================================================
    # READINESS
    # ============================================================================

    def find_ready_skill(
        self,
        unit: Any,
        target: Any | None,
        allies: Sequence[Any],
        opponents: Sequence[Any],
    ) -> SkillDefinition | None:
        """
        First skill off cooldown whose target type can be satisfied right now.

        Args:
            unit (Combatant):
                The acting combatant.
            target (Combatant | None):
                Its current target.
            allies (Sequence[Combatant]):
                Its own roster.
            opponents (Sequence[Combatant]):
                The opposing roster.

        Returns:
            SkillDefinition | None:
                The skill to use, or None.

        """
        for skill in unit.skills:
            if unit.skill_cooldowns.get(skill.skill_id, 0.0) > 0:
                continue
            if self._is_usable(unit, skill, target, allies, opponents):
                return skill
        return None

    def _is_usable(
        self,
        unit: Any,
        skill: SkillDefinition,
        target: Any | None,
        allies: Sequence[Any],
        opponents: Sequence[Any],
    ) -> bool:
        if skill.target_type in (TargetType.ALLY, TargetType.ALL_ALLIES):
            if unit.role not in (Role.HEALER, Role.SUPPORT):
                return False
        if skill.target_type == TargetType.SELF:
            return True
        if skill.target_type == TargetType.ALL_ENEMIES:
            return any(
                other.is_alive() and unit.distance_to(other) <= skill.range
                for other in opponents
            )
        if skill.target_type == TargetType.ALL_ALLIES:
            return any(ally.is_alive() for ally in allies)
        if target is None or not target.is_alive():
            return False
        if unit.distance_to(target) > skill.range:
            return False
        if skill.target_type == TargetType.ENEMY:
            return is_opponent(unit.side, target.side)
        return not is_opponent(unit.side, target.side)

    # ============================================================================
    # EXECUTION
    # ============================================================================

    def interrupt(self, unit: Any) -> SkillDefinition | None:
        """
        Report the skill a stunned combatant could not use.

        The cooldown is left untouched, so the skill stays ready.

        Args:
            unit (Combatant): The stunned combatant.

        Returns:
            SkillDefinition | None: The interrupted skill, if any was ready.

        """
        skill = self.first_off_cooldown(unit)
        if skill is None:
            return None
        log_debug(
            f"{unit.name} is stunned, {skill.name} interrupted",
            {"unit_id": unit.unit_id, "skill_id": skill.skill_id},
        )
        if self.bus is not None:
            self.bus.publish(
                EventType.SKILL_INTERRUPTED,
                SkillInterruptedEvent(unit_id=unit.unit_id, skill_id=skill.skill_id),
            )
        return skill

    def resolve_targets(
        self,
        unit: Any,
        skill: SkillDefinition,
        allies: Sequence[Any],
        opponents: Sequence[Any],
    ) -> list[Any]:
        """Combatants a skill lands on, given its target type."""
        if skill.target_type == TargetType.SELF:
            return [unit]
        if skill.target_type == TargetType.ALL_ENEMIES:
            return [other for other in opponents if other.is_alive()]
        if skill.target_type == TargetType.ALL_ALLIES:
            return [ally for ally in allies if ally.is_alive()]
        if unit.target is not None and unit.target.is_alive():
            return [unit.target]
        return []

    def execute_skill(
        self,
        unit: Any,
        skill: SkillDefinition,
        allies: Sequence[Any],
        opponents: Sequence[Any],
    ) -> list[Any]:
        """
        Use a skill: start its cooldown and apply it to every target.

        Args:
            unit (Combatant):
                The caster.
            skill (SkillDefinition):
                The skill to use.
            allies (Sequence[Combatant]):
                The caster's roster.
            opponents (Sequence[Combatant]):
                The opposing roster.

        Returns:
            list[Combatant]:
                The combatants the skill landed on.

        """
        unit.skill_cooldowns[skill.skill_id] = skill.cooldown
        total = skill_amount(unit, skill.base_damage, skill.scaling_stat, skill.scaling_ratio)
        targets = self.resolve_targets(unit, skill, allies, opponents)

        log_debug(
            f"{unit.name} uses {skill.name}",
            {
                "amount": round(total, 2),
                "targets": [target.unit_id for target in targets],
            },
        )
        if self.bus is not None:
            self.bus.publish(
                EventType.SKILL_USED,
                SkillUsedEvent(
                    caster_id=unit.unit_id,
                    skill_id=skill.skill_id,
                    target_ids=[target.unit_id for target in targets],
                ),
            )

        element = skill.element or unit.element
        for target in targets:
            # Amounts only heal the caster's side and only damage opponents.
            hostile = is_opponent(unit.side, target.side)
            if total < 0 and not hostile:
                self.resolver.heal(unit, target, abs(total))
            elif total > 0 and hostile:
                self.resolver.apply_damage(
                    unit,
                    target,
                    total,
                    skill.damage_type,
                    force_crit=skill.skill_id in FORCED_CRIT_SKILLS,
                    element_override=element,
                )
            if skill.status_effect and skill.effect_duration and target.is_alive():
                self._apply_skill_status(unit, target, skill)
            for step in skill.effects:
                self.process_effect(unit, target, step)
        return targets

    def _apply_skill_status(self, unit: Any, target: Any, skill: SkillDefinition) -> None:
        kind = map_status_kind(skill.status_effect)
        ratio = 0.5 if kind in ("buff", "debuff") else 0.2
        effect = create_status_effect(
            kind,
            name=skill.status_effect,
            duration=skill.effect_duration,
            element=skill.element or unit.element,
            source_id=unit.unit_id,
            value=skill.base_damage * ratio,
            tick_interval=1.0,
            stat=StatKey.ATTACK if kind == "buff" else None,
        )
        target.add_status(effect)
        if kind == "taunt":
            target.taunt_target = unit

    def process_effect(self, unit: Any, target: Any, step: SkillEffectDefinition) -> None:
        """
        Apply one chained effect step, then its own chain.

        Steps other than heals are skipped on a dead target.

        Args:
            unit (Combatant):
                The caster.
            target (Combatant):
                The combatant the step lands on.
            step (SkillEffectDefinition):
                The step to apply.

        """
        if target.is_dead() and step.type != "heal":
            return

        amount = skill_amount(unit, step.base_damage, step.scaling_stat, step.scaling_ratio)
        element = step.element or unit.element
        if step.type == "damage":
            if amount > 0:
                self.resolver.apply_damage(
                    unit, target, amount, step.damage_type, element_override=element
                )
        elif step.type == "heal":
            if amount > 0:
                self.resolver.heal(unit, target, amount)
        elif step.type == "status":
            if step.status_effect_id and step.status_duration:
                kind = map_status_kind(step.status_effect_id)
                target.add_status(
                    create_status_effect(
                        kind,
                        name=step.status_effect_id,
                        duration=step.status_duration,
                        element=element,
                        source_id=unit.unit_id,
                        value=step.base_damage,
                        tick_interval=1.0,
                        stat=StatKey.ATTACK if kind == "buff" else None,
                    )
                )
                if kind == "taunt":
                    target.taunt_target = unit
        # element_reaction steps are resolved by the damage path itself.

        if step.chain is not None:
            self.process_effect(unit, target, step.chain)


def basic_attack_damage_type(unit: Any) -> DamageType:
    """Basic attacks are magical when magic power exceeds attack."""
    stats = unit.effective_stats()
    return DamageType.MAGICAL if stats.magic_power > stats.attack else DamageType.PHYSICAL
