"""
Combatant module for the combat core.

Defines the Combatant class: identity, side and role, base stats, position,
hit points, status ledger, skills and per-encounter combat state. Also
provides the roster factory that builds combatants from content templates.
"""

import math
from typing import Any

from pydantic import BaseModel, Field

from autobattler.core.constants import (
    Y_MOVEMENT_DAMPING,
    Element,
    Role,
    Side,
    StatKey,
)
from autobattler.core.content import SkillDefinition
from autobattler.core.error_handling import (
    require_enum_type,
    require_non_empty_string,
)
from autobattler.core.logging import log_debug
from autobattler.core.utils import round_half_up
from autobattler.effects.event_system import (
    DeathEvent,
    EventBus,
    EventType,
    HealEvent,
    StatusEvent,
)
from autobattler.effects.status_effect import StatusEffect
from autobattler.effects.status_ledger import StatusLedger

from .stats import CombatantStats


class CombatantTemplate(BaseModel):
    """Content entry describing a combatant before it joins a roster."""

    template_id: str = Field(description="Unique identifier of the template.")
    name: str = Field(description="Display name.")
    role: Role = Field(description="Battlefield role.")
    element: Element | None = Field(default=None, description="Elemental affinity.")
    race: str | None = Field(default=None, description="Race tag for synergies.")
    unit_class: str | None = Field(default=None, description="Class tag for synergies.")
    stats: CombatantStats = Field(description="Base stats.")
    skills: list[str] = Field(default_factory=list, description="Skill ids.")
    gold_reward: int = Field(default=0, description="Gold granted on defeat.")
    exp_reward: int = Field(default=0, description="Experience granted on defeat.")


class Combatant:
    """
    A unit taking part in an encounter.

    Attributes:
        unit_id (str):
            Stable identifier, unique within the encounter.
        name (str):
            Display name.
        side (Side):
            The roster the combatant fights for.
        role (Role):
            Battlefield role, drives default targeting.
        element (Element | None):
            Elemental affinity of basic attacks and skills.
        race (str | None):
            Race tag, used by synergies.
        unit_class (str | None):
            Class tag, used by synergies.
        base_stats (CombatantStats):
            Stats before status modifiers and synergy bonuses.
        x (float), y (float):
            Position on the battlefield.
        hp (float):
            Current hit points.
        alive (bool):
            False once hit points reached zero; never flips back.
        effects (StatusLedger):
            Active status effects.
        skills (list[SkillDefinition]):
            Skills the combatant can use.
        skill_cooldowns (dict[str, float]):
            Remaining cooldown per skill id.
        attack_timer (float):
            Seconds until the next basic attack.
        target (Combatant | None):
            Current target.
        taunt_target (Combatant | None):
            Combatant that taunted this one, if any.
        synergy_bonuses (dict[StatKey, float]):
            Flat stat bonuses granted by team synergies.
        gold_reward (int), exp_reward (int):
            Rewards granted when an opposing combatant is defeated.

    """

    def __init__(
        self,
        unit_id: str,
        name: str,
        side: Side,
        role: Role,
        stats: CombatantStats,
        element: Element | None = None,
        race: str | None = None,
        unit_class: str | None = None,
        x: float = 0.0,
        y: float = 0.0,
        gold_reward: int = 0,
        exp_reward: int = 0,
        bus: EventBus | None = None,
    ) -> None:
        self.unit_id = require_non_empty_string(unit_id, "unit_id")
        self.name = require_non_empty_string(name, "name", {"unit_id": unit_id})
        self.side = require_enum_type(side, Side, "side", {"unit_id": unit_id})
        self.role = require_enum_type(role, Role, "role", {"unit_id": unit_id})
        self.element = element
        self.race = race
        self.unit_class = unit_class
        self.base_stats = stats
        self.x = x
        self.y = y
        self.hp: float = stats.max_hp
        self.alive: bool = True
        self.gold_reward = gold_reward
        self.exp_reward = exp_reward
        self.bus = bus

        # Initialize modules.
        self.effects = StatusLedger(owner=self)

        # Combat state.
        self.skills: list[SkillDefinition] = []
        self.skill_cooldowns: dict[str, float] = {}
        self.attack_timer: float = 0.0
        self.target: Combatant | None = None
        self.taunt_target: Combatant | None = None
        self.synergy_bonuses: dict[StatKey, float] = {}

    # ============================================================================
    # STATS
    # ============================================================================

    @property
    def colored_name(self) -> str:
        """Returns the combatant's name colored by side."""
        return self.side.colorize(self.name)

    @property
    def is_ally(self) -> bool:
        return self.side == Side.ALLY

    def effective_stats(self) -> CombatantStats:
        """
        Compute effective stats: base, then buff/debuff deltas in ledger
        order, then synergy bonuses.

        Returns:
            CombatantStats:
                A fresh stat block; calling this twice gives equal results.

        """
        modifiers: list[tuple[StatKey, float]] = [
            (effect.stat, effect.value) for effect in self.effects.stat_modifiers()
        ]
        modifiers.extend(self.synergy_bonuses.items())
        if not modifiers:
            return self.base_stats
        return self.base_stats.with_modifiers(modifiers)

    def get_stat(self, stat: StatKey) -> float:
        return self.effective_stats().get(stat)

    @property
    def max_hp(self) -> float:
        return max(1.0, self.effective_stats().max_hp)

    @property
    def hp_fraction(self) -> float:
        return self.hp / self.max_hp

    # ============================================================================
    # HIT POINTS
    # ============================================================================

    def is_alive(self) -> bool:
        return self.alive

    def is_dead(self) -> bool:
        return not self.alive

    def take_damage(self, amount: float) -> int:
        """
        Removes hit points, killing the combatant when they reach zero.

        Args:
            amount (float):
                Damage to apply, rounded and floored at zero.

        Returns:
            int:
                HP actually removed, capped at the remaining HP.

        """
        if not self.alive:
            return 0
        actual = min(max(0, round_half_up(amount)), math.ceil(self.hp))
        self.hp = max(0.0, self.hp - actual)
        log_debug(
            f"{self.name} takes {actual} damage",
            {"unit_id": self.unit_id, "hp": self.hp},
        )
        if self.hp <= 0:
            self.die()
        return actual

    def heal(self, amount: float, source_id: str | None = None) -> int:
        """
        Restores hit points, clamped to the missing amount.

        Args:
            amount (float):
                Healing to apply.
            source_id (str | None):
                Healer credited in the published event; defaults to self.

        Returns:
            int:
                The healing actually applied, 0 on a dead or full combatant.

        """
        if not self.alive:
            return 0
        missing = self.max_hp - self.hp
        actual = max(0, min(round_half_up(amount), math.floor(missing)))
        if actual <= 0:
            return 0
        self.hp += actual
        if self.bus is not None:
            self.bus.publish(
                EventType.HEAL_APPLIED,
                HealEvent(
                    source_id=source_id or self.unit_id,
                    target_id=self.unit_id,
                    amount=actual,
                ),
            )
        return actual

    def clamp_hp(self) -> None:
        """Keep hit points within the effective maximum."""
        if self.hp > self.max_hp:
            self.hp = self.max_hp

    def die(self) -> None:
        """Marks the combatant dead and publishes its death."""
        if not self.alive:
            return
        self.alive = False
        self.hp = 0.0
        self.target = None
        log_debug(f"{self.name} has fallen", {"unit_id": self.unit_id})
        if self.bus is not None:
            self.bus.publish(
                EventType.DEATH,
                DeathEvent(unit_id=self.unit_id, is_ally=self.is_ally),
            )

    # ============================================================================
    # STATUS EFFECTS
    # ============================================================================

    def add_status(self, effect: StatusEffect) -> StatusEffect:
        """
        Attach a status effect and publish STATUS_APPLIED.

        Args:
            effect (StatusEffect):
                The effect to attach.

        Returns:
            StatusEffect:
                The attached effect.

        """
        self.effects.add(effect)
        if self.bus is not None:
            self.bus.publish(
                EventType.STATUS_APPLIED,
                StatusEvent(
                    event_type=EventType.STATUS_APPLIED,
                    target_id=self.unit_id,
                    effect_id=effect.effect_id,
                    effect_name=effect.name,
                    effect_kind=effect.kind,
                ),
            )
        return effect

    def is_stunned(self) -> bool:
        return self.effects.is_stunned()

    def taunt_source(self) -> "Combatant | None":
        """Returns the taunting combatant while a taunt is active and it lives."""
        if self.effects.taunt_effect() is None:
            return None
        if self.taunt_target is not None and self.taunt_target.is_alive():
            return self.taunt_target
        return None

    # ============================================================================
    # SKILLS
    # ============================================================================

    def add_skill(self, skill: SkillDefinition) -> None:
        """Add a skill, ready immediately; duplicates are ignored."""
        if any(known.skill_id == skill.skill_id for known in self.skills):
            return
        self.skills.append(skill)
        self.skill_cooldowns[skill.skill_id] = 0.0

    def remove_skill(self, skill_id: str) -> None:
        self.skills = [skill for skill in self.skills if skill.skill_id != skill_id]
        self.skill_cooldowns.pop(skill_id, None)

    # ============================================================================
    # POSITION
    # ============================================================================

    def distance_to(self, other: "Combatant") -> float:
        return math.hypot(other.x - self.x, other.y - self.y)

    def is_in_range(self, other: "Combatant") -> bool:
        return self.distance_to(other) <= self.get_stat(StatKey.ATTACK_RANGE)

    def move_toward(self, x: float, y: float, dt: float) -> None:
        """
        Step toward a point at effective speed, with damped vertical motion.

        Args:
            x (float): Destination x.
            y (float): Destination y.
            dt (float): Elapsed seconds.

        """
        dx = x - self.x
        dy = y - self.y
        dist = math.hypot(dx, dy)
        if dist < 2:
            return
        step = self.get_stat(StatKey.SPEED) * dt
        self.x += dx / dist * step
        self.y += dy / dist * step * Y_MOVEMENT_DAMPING

    # ============================================================================
    # DUNDER METHODS
    # ============================================================================

    def __str__(self) -> str:
        return self.colored_name

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(unit_id='{self.unit_id}', "
            f"side={self.side}, hp={self.hp}/{self.max_hp})"
        )

    def __hash__(self) -> int:
        return hash(self.unit_id)

    def __eq__(self, other: object) -> bool:
        return self.unit_id == getattr(other, "unit_id", None)


def build_combatant(
    template: CombatantTemplate,
    unit_id: str,
    side: Side,
    x: float = 0.0,
    y: float = 0.0,
    bus: EventBus | None = None,
    **overrides: Any,
) -> Combatant:
    """
    Roster factory: builds a combatant from a content template.

    Args:
        template (CombatantTemplate):
            Validated template from the content repository.
        unit_id (str):
            Id unique within the encounter.
        side (Side):
            The roster the combatant joins.
        x (float), y (float):
            Starting position.
        bus (EventBus | None):
            Bus the combatant publishes death and heal events on.
        **overrides:
            Stat overrides applied on top of the template stats.

    Returns:
        Combatant:
            The new combatant, without skills; skills are attached by the
            skill system.

    """
    stats = template.stats
    if overrides:
        stats = stats.model_copy(update=overrides)
    return Combatant(
        unit_id=unit_id,
        name=template.name,
        side=side,
        role=template.role,
        stats=stats,
        element=template.element,
        race=template.race,
        unit_class=template.unit_class,
        x=x,
        y=y,
        gold_reward=template.gold_reward,
        exp_reward=template.exp_reward,
        bus=bus,
    )
