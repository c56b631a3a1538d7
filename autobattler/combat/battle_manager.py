"""
Battle manager module for the combat core.

Drives one encounter frame by frame: a short preparing phase, the combat
loop that lets every living combatant act, and a settling phase once a side
has fallen. Owns every per-encounter system and wires them to one event bus.
"""

import math
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, Field

from autobattler.character.combatant import Combatant, build_combatant
from autobattler.core.constants import (
    HEALER_ATTACK_HEAL_RATIO,
    PREPARE_DURATION,
    SETTLE_DURATION,
    BattleState,
    DamageType,
    EnvironmentKind,
    NiceEnum,
    Role,
    Side,
    SkillMode,
    TargetingStrategy,
    is_opponent,
)
from autobattler.core.content import ContentRepository
from autobattler.core.logging import log_debug, log_info
from autobattler.core.rng import SeededRNG
from autobattler.effects.event_system import (
    BattleEndedEvent,
    BattleStartedEvent,
    DeathEvent,
    EventBus,
    EventType,
)
from autobattler.effects.status_tick import StatusTickEngine

from .combo import ComboTracker
from .damage import DamageResolver
from .elements import ElementSystem
from .environment import EnvironmentEngine
from .movement import move_toward_target, separate_units
from .skill_queue import SkillQueue
from .skills import SkillSystem, basic_attack_damage_type
from .synergy import SynergySystem
from .targeting import TargetingResolver

# Starting lines of the two rosters.
ALLY_START_X = 100.0
OPPOSING_START_X = 700.0
START_Y = 300.0
ROW_SPACING = 60.0


class BattlePhase(NiceEnum):
    """Internal phase of the encounter loop."""

    PREPARING = "preparing"
    COMBAT = "combat"
    SETTLING = "settling"
    FINISHED = "finished"


class BattleSettings(BaseModel):
    """Per-encounter configuration."""

    seed: int = Field(
        default=0,
        description="Seed of the encounter RNG.",
    )
    speed_multiplier: float = Field(
        default=1.0,
        description="Factor applied to every frame delta.",
    )
    skill_mode: SkillMode = Field(
        default=SkillMode.SEMI_AUTO,
        description="How queued ally skills are fired.",
    )
    environment: EnvironmentKind = Field(
        default=EnvironmentKind.NONE,
        description="Archetype whose periodic rules apply.",
    )
    targeting_strategy: TargetingStrategy | None = Field(
        default=None,
        description="Optional targeting override applied to every combatant.",
    )
    prepare_duration: float = Field(
        default=PREPARE_DURATION,
        description="Seconds before combat starts.",
    )
    settle_duration: float = Field(
        default=SETTLE_DURATION,
        description="Seconds between the decisive death and the final state.",
    )

    def model_post_init(self, _: Any) -> None:
        if not self.speed_multiplier > 0:
            raise ValueError(
                f"Speed multiplier must be positive, got {self.speed_multiplier}."
            )
        if self.prepare_duration < 0 or self.settle_duration < 0:
            raise ValueError("Phase durations must be non-negative.")


class BattleOutcome(BaseModel):
    """Result of an encounter."""

    state: BattleState = Field(description="VICTORY or DEFEAT.")
    gold: int = Field(default=0, description="Gold earned, zero on defeat.")
    exp: int = Field(default=0, description="Experience earned, zero on defeat.")
    survivors: list[str] = Field(
        default_factory=list,
        description="Ids of the living ally combatants.",
    )
    elapsed: float = Field(default=0.0, description="Scaled seconds of combat.")

    @property
    def victory(self) -> bool:
        return self.state == BattleState.VICTORY


class BattleManager:
    """
    Orchestrates one encounter between an ally and an opposing roster.

    Attributes:
        allies (list[Combatant]):
            The ally roster.
        opponents (list[Combatant]):
            The opposing roster.
        settings (BattleSettings):
            Encounter configuration.
        bus (EventBus):
            The bus every system publishes on.
        state (BattleState):
            Public state, ONGOING until the settling phase completes.
        phase (BattlePhase):
            Internal phase of the loop.
        outcome (BattleOutcome | None):
            Set once a side has fallen.

    """

    def __init__(
        self,
        allies: Sequence[Combatant],
        opponents: Sequence[Combatant],
        content: ContentRepository | None = None,
        settings: BattleSettings | None = None,
        bus: EventBus | None = None,
    ) -> None:
        self.allies: list[Combatant] = list(allies)
        self.opponents: list[Combatant] = list(opponents)
        self.content = content or ContentRepository()
        self.settings = settings or BattleSettings()
        self.bus = bus or EventBus()

        # Initialize systems.
        self.rng = SeededRNG(self.settings.seed)
        self.combo = ComboTracker(bus=self.bus)
        self.targeting = TargetingResolver()
        self.elements = ElementSystem(self.content.reactions, bus=self.bus)
        self.resolver = DamageResolver(
            self.rng,
            self.elements,
            combo=self.combo,
            targeting=self.targeting,
            bus=self.bus,
        )
        self.status = StatusTickEngine(bus=self.bus)
        self.skills = SkillSystem(self.resolver, bus=self.bus)
        self.queue = SkillQueue(self.settings.skill_mode, bus=self.bus)
        self.environment = EnvironmentEngine(self.settings.environment, bus=self.bus)
        self.synergy = SynergySystem(self.content.synergies.values())

        # Loop state.
        self.state = BattleState.ONGOING
        self.phase = BattlePhase.PREPARING
        self.phase_timer = 0.0
        self.elapsed = 0.0
        self.paused = False
        self.outcome: BattleOutcome | None = None
        self._ready = False

        self._units: dict[str, Combatant] = {}
        for unit in [*self.allies, *self.opponents]:
            assert unit.unit_id not in self._units, f"Duplicate unit id {unit.unit_id}"
            self._units[unit.unit_id] = unit
            if unit.bus is None:
                unit.bus = self.bus

        self.bus.subscribe(EventType.DEATH, self._on_death)

    @classmethod
    def from_templates(
        cls,
        ally_templates: Sequence[str],
        opposing_templates: Sequence[str],
        content: ContentRepository | None = None,
        settings: BattleSettings | None = None,
        bus: EventBus | None = None,
    ) -> "BattleManager":
        """
        Build both rosters from content templates and line them up.

        Args:
            ally_templates (Sequence[str]):
                Template ids of the ally roster.
            opposing_templates (Sequence[str]):
                Template ids of the opposing roster.
            content (ContentRepository | None):
                Content to build from, defaults to the packaged content.
            settings (BattleSettings | None):
                Encounter configuration.
            bus (EventBus | None):
                Bus to publish on, a fresh one by default.

        Returns:
            BattleManager:
                The manager, not yet set up.

        Raises:
            ValueError: If a template id is unknown.

        """
        content = content or ContentRepository()
        bus = bus or EventBus()

        def build(template_ids: Sequence[str], side: Side, x: float) -> list[Combatant]:
            roster = []
            for index, template_id in enumerate(template_ids):
                template = content.get_template(template_id)
                if template is None:
                    raise ValueError(f"Unknown combatant template: {template_id}")
                unit = build_combatant(
                    template,
                    unit_id=f"{side.value.lower()}_{index}_{template_id}",
                    side=side,
                    x=x,
                    y=START_Y + (index - (len(template_ids) - 1) / 2) * ROW_SPACING,
                    bus=bus,
                )
                roster.append(unit)
            return roster

        allies = build(ally_templates, Side.ALLY, ALLY_START_X)
        opponents = build(opposing_templates, Side.OPPOSING, OPPOSING_START_X)
        manager = cls(allies, opponents, content=content, settings=settings, bus=bus)
        for unit, template_id in zip(
            [*allies, *opponents], [*ally_templates, *opposing_templates]
        ):
            manager.skills.initialize_skills(
                unit, content.templates[template_id].skills, content
            )
        return manager

    # ============================================================================
    # ROSTER QUERIES
    # ============================================================================

    @property
    def units(self) -> list[Combatant]:
        """Every combatant, allies first."""
        return [*self.allies, *self.opponents]

    def get_unit(self, unit_id: str) -> Combatant | None:
        return self._units.get(unit_id)

    def living_allies(self) -> list[Combatant]:
        return [unit for unit in self.allies if unit.is_alive()]

    def living_opponents(self) -> list[Combatant]:
        return [unit for unit in self.opponents if unit.is_alive()]

    def sides_of(self, unit: Combatant) -> tuple[list[Combatant], list[Combatant]]:
        """The combatant's own roster and the roster it fights."""
        if unit.side == Side.ALLY:
            return self.allies, self.opponents
        return self.opponents, self.allies

    # ============================================================================
    # LIFECYCLE
    # ============================================================================

    def setup(self) -> None:
        """
        Prepare the encounter: synergies, starting positions, clean
        per-encounter state, and BATTLE_STARTED.
        """
        self.combo.reset()
        self.targeting.reset_threat()
        self.queue.reset()
        self.environment.reset()
        self.synergy.apply(self.allies)
        self.environment.record_positions(self.units)
        for unit in self.units:
            unit.attack_timer = 0.0
            unit.target = None

        self.state = BattleState.ONGOING
        self.phase = BattlePhase.PREPARING
        self.phase_timer = self.settings.prepare_duration
        self.elapsed = 0.0
        self.outcome = None
        self._ready = True

        log_info(
            "Battle started",
            {
                "allies": len(self.allies),
                "opponents": len(self.opponents),
                "seed": self.settings.seed,
                "environment": self.settings.environment.value,
            },
        )
        self.bus.publish(
            EventType.BATTLE_STARTED,
            BattleStartedEvent(
                ally_count=len(self.allies), opposing_count=len(self.opponents)
            ),
        )

    def pause(self) -> None:
        self.paused = True

    def resume(self) -> None:
        self.paused = False

    def set_speed(self, multiplier: float) -> None:
        """Change the speed multiplier; must be positive."""
        if not multiplier > 0:
            raise ValueError(f"Speed multiplier must be positive, got {multiplier}.")
        self.settings = self.settings.model_copy(update={"speed_multiplier": multiplier})

    def update(self, dt: float) -> None:
        """
        Advance the encounter by one frame.

        Args:
            dt (float):
                Real seconds since the previous frame, scaled by the speed
                multiplier before reaching any system.

        """
        if not self._ready:
            self.setup()
        if self.paused or self.phase == BattlePhase.FINISHED:
            return
        dt *= self.settings.speed_multiplier

        if self.phase == BattlePhase.PREPARING:
            self.phase_timer -= dt
            if self.phase_timer <= 0:
                self.phase = BattlePhase.COMBAT
            return

        if self.phase == BattlePhase.SETTLING:
            self.phase_timer -= dt
            if self.phase_timer <= 0:
                self._finish()
            return

        self.elapsed += dt
        self._combat_tick(dt)

    def run(self, max_time: float = 300.0, dt: float = 1 / 60) -> BattleOutcome:
        """
        Drive a whole encounter headless.

        Args:
            max_time (float):
                Real seconds after which the encounter is called a defeat.
            dt (float):
                Fixed frame delta.

        Returns:
            BattleOutcome:
                The final outcome.

        """
        assert dt > 0, "Frame delta must be positive"
        if not self._ready:
            self.setup()
        self.paused = False
        for _ in range(math.ceil(max_time / dt)):
            self.update(dt)
            if self.phase == BattlePhase.FINISHED:
                break
        else:
            if self.outcome is None:
                log_info("Battle timed out", {"elapsed": round(self.elapsed, 2)})
                self._decide(BattleState.DEFEAT)
            self._finish()
        return self.outcome

    # ============================================================================
    # COMBAT LOOP
    # ============================================================================

    def _combat_tick(self, dt: float) -> None:
        self.combo.update(dt)

        for entry in self.queue.update(dt, is_blocked=self._is_stunned):
            self.execute_queued_skill(entry.unit_id, entry.skill_id, entry.target_id)

        for unit in self.units:
            if unit.is_dead():
                continue
            self.status.tick(unit, dt)
            if unit.is_dead():
                continue
            self.skills.tick_cooldowns(unit, dt)

            if unit.is_stunned():
                self.skills.interrupt(unit)
                continue

            own, other = self.sides_of(unit)
            target = self.targeting.select_target(
                unit, other, own, self.settings.targeting_strategy
            )
            unit.target = target
            if target is None:
                continue

            if unit.is_in_range(target):
                skill = self.skills.find_ready_skill(unit, target, own, other)
                if skill is None:
                    self._tick_attack(unit, target, dt)
                elif self.queue.should_queue(unit.is_ally):
                    self.queue.enqueue(unit.unit_id, skill.skill_id)
                    self._tick_attack(unit, target, dt)
                else:
                    self.skills.execute_skill(unit, skill, own, other)
            else:
                move_toward_target(unit, dt)

        separate_units(self.units)
        self.environment.tick(dt, self.allies, self.opponents)
        self._check_battle_end()

    def _tick_attack(self, unit: Combatant, target: Combatant, dt: float) -> None:
        unit.attack_timer -= dt
        if unit.attack_timer > 0:
            return
        stats = unit.effective_stats()
        unit.attack_timer = 1 / stats.attack_speed if stats.attack_speed > 0 else math.inf

        if unit.role == Role.HEALER and not is_opponent(unit.side, target.side):
            self.resolver.heal(unit, target, stats.magic_power * HEALER_ATTACK_HEAL_RATIO)
            return
        damage_type = basic_attack_damage_type(unit)
        base = stats.magic_power if damage_type == DamageType.MAGICAL else stats.attack
        self.resolver.apply_damage(unit, target, base, damage_type)

    def execute_queued_skill(
        self, unit_id: str, skill_id: str, target_id: str | None = None
    ) -> bool:
        """
        Execute a skill taken from the queue, optionally at a chosen target.

        The combatant's own target is restored afterwards.

        Args:
            unit_id (str): Id of the ally combatant.
            skill_id (str): Id of the skill.
            target_id (str | None): Optional target override.

        Returns:
            bool: False if the combatant or the skill is gone.

        """
        unit = self.get_unit(unit_id)
        if unit is None or unit.is_dead() or not unit.is_ally:
            return False
        skill = next((s for s in unit.skills if s.skill_id == skill_id), None)
        if skill is None:
            return False

        previous = unit.target
        if target_id is not None:
            override = self.get_unit(target_id)
            if override is not None and override.is_alive():
                unit.target = override
        own, other = self.sides_of(unit)
        self.skills.execute_skill(unit, skill, own, other)
        if unit.is_alive():
            unit.target = previous
        return True

    def fire_skill(self, unit_id: str, skill_id: str, target_id: str | None = None) -> bool:
        """
        Fire a queued ally skill now, optionally at a chosen target.

        Args:
            unit_id (str): Id of the ally combatant.
            skill_id (str): Id of the queued skill.
            target_id (str | None): Optional target override.

        Returns:
            bool: False if nothing was fired; a stunned owner keeps its entry.

        """
        if self._is_stunned(unit_id):
            return False
        entry = self.queue.fire(unit_id, skill_id, target_id)
        if entry is None:
            return False
        return self.execute_queued_skill(entry.unit_id, entry.skill_id, entry.target_id)

    def _is_stunned(self, unit_id: str) -> bool:
        unit = self.get_unit(unit_id)
        return unit is not None and unit.is_stunned()

    def _on_death(self, event: DeathEvent) -> None:
        self.queue.remove_unit(event.unit_id)

    # ============================================================================
    # OUTCOME
    # ============================================================================

    def _check_battle_end(self) -> None:
        allies_alive = bool(self.living_allies())
        opponents_alive = bool(self.living_opponents())
        if allies_alive and opponents_alive:
            return
        victory = allies_alive and not opponents_alive
        self._decide(BattleState.VICTORY if victory else BattleState.DEFEAT)
        self.phase = BattlePhase.SETTLING
        self.phase_timer = self.settings.settle_duration

    def _decide(self, state: BattleState) -> None:
        victory = state == BattleState.VICTORY
        self.outcome = BattleOutcome(
            state=state,
            gold=sum(unit.gold_reward for unit in self.opponents) if victory else 0,
            exp=sum(unit.exp_reward for unit in self.opponents) if victory else 0,
            survivors=[unit.unit_id for unit in self.living_allies()],
            elapsed=self.elapsed,
        )
        log_info(
            "Battle decided",
            {"state": state.value, "gold": self.outcome.gold, "exp": self.outcome.exp},
        )
        self.bus.publish(
            EventType.BATTLE_ENDED,
            BattleEndedEvent(victory=victory, outcome=self.outcome),
        )

    def _finish(self) -> None:
        assert self.outcome is not None
        self.state = self.outcome.state
        self.phase = BattlePhase.FINISHED
        log_debug("Battle finished", {"state": self.state.value})
