"""
Content registry for the combat core.

Defines the validated content models (skills, elemental reactions, synergies)
and the ContentRepository that loads them, together with combatant templates,
from JSON lists.
"""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any, Literal

from catchery import log_warning
from pydantic import BaseModel, Field, ValidationError

from .constants import (
    DamageType,
    Element,
    ScalingStat,
    StatKey,
    TargetType,
)
from .logging import log_debug

# Directory holding the content shipped with the package.
DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class ContentError(ValueError):
    """Raised when a content file or entry is malformed."""


# ==============================================================================
# SKILLS
# ==============================================================================


class SkillEffectDefinition(BaseModel):
    """One step of a skill's chained effect list."""

    type: Literal["damage", "heal", "status", "element_reaction"] = Field(
        description="What the step does.",
    )
    damage_type: DamageType = Field(
        default=DamageType.PHYSICAL,
        description="Mitigation class of a damage step.",
    )
    element: Element | None = Field(
        default=None,
        description="Element of the step, defaults to the caster's element.",
    )
    base_damage: float = Field(
        default=0.0,
        description="Flat amount of a damage or heal step, value of a status step.",
    )
    scaling_stat: ScalingStat = Field(
        default=ScalingStat.ATTACK,
        description="Caster stat the amount scales with.",
    )
    scaling_ratio: float = Field(
        default=0.0,
        description="Multiplier applied to the scaling stat.",
    )
    status_effect_id: str | None = Field(
        default=None,
        description="Status applied by a status step.",
    )
    status_duration: float | None = Field(
        default=None,
        description="Duration of the status applied by a status step.",
    )
    chain: "SkillEffectDefinition | None" = Field(
        default=None,
        description="Step executed right after this one.",
    )


class SkillDefinition(BaseModel):
    """Static description of a skill."""

    skill_id: str = Field(
        description="Unique identifier of the skill.",
    )
    name: str = Field(
        description="Display name of the skill.",
    )
    description: str = Field(
        default="",
        description="A brief description of the skill.",
    )
    cooldown: float = Field(
        description="Seconds before the skill can be used again.",
    )
    damage_type: DamageType = Field(
        default=DamageType.PHYSICAL,
        description="Mitigation class of the skill's damage.",
    )
    target_type: TargetType = Field(
        description="Who the skill may be aimed at.",
    )
    base_damage: float = Field(
        default=0.0,
        description="Flat amount; negative amounts heal.",
    )
    scaling_stat: ScalingStat = Field(
        default=ScalingStat.ATTACK,
        description="Caster stat the amount scales with.",
    )
    scaling_ratio: float = Field(
        default=0.0,
        description="Multiplier applied to the scaling stat.",
    )
    range: float = Field(
        description="Maximum distance to a single target.",
    )
    status_effect: str | None = Field(
        default=None,
        description="Status applied to every target hit.",
    )
    effect_duration: float | None = Field(
        default=None,
        description="Duration of that status in seconds.",
    )
    element: Element | None = Field(
        default=None,
        description="Element of the skill, defaults to the caster's element.",
    )
    effects: list[SkillEffectDefinition] = Field(
        default_factory=list,
        description="Chained effects executed on every target.",
    )

    def model_post_init(self, _: Any) -> None:
        if self.cooldown < 0:
            raise ValueError(f"Skill {self.skill_id} has a negative cooldown.")
        if self.range < 0:
            raise ValueError(f"Skill {self.skill_id} has a negative range.")
        if self.status_effect and not self.effect_duration:
            raise ValueError(
                f"Skill {self.skill_id} applies {self.status_effect} without a duration."
            )


# ==============================================================================
# ELEMENTAL REACTIONS
# ==============================================================================


class ReactionStatusDefinition(BaseModel):
    """Status effect attached to the target of a reaction."""

    name: str = Field(description="Name of the status effect.")
    kind: Literal["buff", "debuff", "dot", "hot", "stun"] = Field(
        default="debuff",
        description="Kind of the status effect.",
    )
    duration: float = Field(description="Duration in seconds.")
    stat: StatKey | None = Field(default=None, description="Modified stat.")
    value: float = Field(default=0.0, description="Stat delta or per-tick amount.")


class ReactionDefinition(BaseModel):
    """A reaction between two distinct elements."""

    elements: tuple[Element, Element] = Field(
        description="The two reacting elements, in any order.",
    )
    name: str = Field(description="Name of the reaction.")
    multiplier: float = Field(description="Damage multiplier of the reaction.")
    status: ReactionStatusDefinition | None = Field(
        default=None,
        description="Status attached to the target, if any.",
    )

    def model_post_init(self, _: Any) -> None:
        if self.elements[0] == self.elements[1]:
            raise ValueError(f"Reaction {self.name} needs two distinct elements.")
        if self.multiplier < 1:
            raise ValueError(f"Reaction {self.name} multiplier must be >= 1.")

    @property
    def key(self) -> str:
        return reaction_key(*self.elements)


def reaction_key(first: Element, second: Element) -> str | None:
    """
    Canonical key of an element pair: names sorted and joined with '+'.

    Args:
        first (Element): One element.
        second (Element): The other element.

    Returns:
        str | None: The key, or None for a pair of identical elements.

    """
    if first == second:
        return None
    return "+".join(sorted((first.value, second.value)))


# ==============================================================================
# SYNERGIES
# ==============================================================================


class SynergyEffectDefinition(BaseModel):
    """A bonus granted by a synergy threshold."""

    type: Literal["stat_boost", "resistance"] = Field(
        description="stat_boost targets members, resistance every ally.",
    )
    stat: StatKey | None = Field(default=None, description="Boosted stat.")
    value: float = Field(description="Flat bonus.")

    def model_post_init(self, _: Any) -> None:
        if self.type == "stat_boost" and self.stat is None:
            raise ValueError("A stat_boost synergy effect needs a stat.")


class SynergyThreshold(BaseModel):
    count: int = Field(description="Members needed to reach the threshold.")
    description: str = Field(default="", description="Display text.")
    effects: list[SynergyEffectDefinition] = Field(description="Granted bonuses.")


class SynergyDefinition(BaseModel):
    """Team composition bonus keyed by race, class or element."""

    synergy_id: str = Field(description="Unique identifier of the synergy.")
    name: str = Field(description="Display name.")
    description: str = Field(default="", description="Display text.")
    category: Literal["race", "class", "element"] = Field(
        description="Which tag of a combatant is counted.",
    )
    key: str = Field(description="Tag value that counts towards the synergy.")
    thresholds: list[SynergyThreshold] = Field(description="Ascending thresholds.")


# ==============================================================================
# REPOSITORY
# ==============================================================================


class ContentRepository:
    """
    Registry for every piece of static content needing fast by-id access.

    Unlike a process-wide registry, each repository is an explicit instance:
    build one per run (or share one across runs) and pass it where needed.
    """

    skills: dict[str, SkillDefinition]
    reactions: dict[str, ReactionDefinition]
    synergies: dict[str, SynergyDefinition]
    templates: dict[str, Any]

    def __init__(self, data_dir: Path | None = None) -> None:
        """
        Initialize the ContentRepository.

        Args:
            data_dir (Path | None):
                The directory containing the data files, defaults to the
                content shipped with the package.

        """
        self.reload(data_dir or DEFAULT_DATA_DIR)

    def reload(self, root: Path) -> None:
        """
        (Re)load all JSON assets from disk.

        Args:
            root (Path):
                The directory containing data files to load.

        """
        self.skills = _load_json_file(
            root / "skills.json", self._load_skills, "skills"
        )
        self.reactions = _load_json_file(
            root / "reactions.json", self._load_reactions, "reactions"
        )
        self.synergies = _load_json_file(
            root / "synergies.json", self._load_synergies, "synergies"
        )
        self.templates = _load_json_file(
            root / "units.json", self._load_templates, "unit templates"
        )

    def _get_from_collection(self, collection_name: str, item_id: str) -> Any | None:
        collection = getattr(self, collection_name, None)
        if collection is None:
            log_warning(
                f"Collection '{collection_name}' not found in ContentRepository.",
                {"collection_name": collection_name, "item_id": item_id},
            )
            return None
        entry = collection.get(item_id)
        if entry is None:
            log_warning(
                f"Unknown id '{item_id}' in collection '{collection_name}'.",
                {"collection_name": collection_name, "item_id": item_id},
            )
        return entry

    def get_skill(self, skill_id: str) -> SkillDefinition | None:
        """Get a skill by id, or None if not found."""
        return self._get_from_collection("skills", skill_id)

    def get_template(self, template_id: str) -> Any | None:
        """Get a combatant template by id, or None if not found."""
        return self._get_from_collection("templates", template_id)

    def get_synergy(self, synergy_id: str) -> SynergyDefinition | None:
        """Get a synergy by id, or None if not found."""
        return self._get_from_collection("synergies", synergy_id)

    def find_reaction(self, first: Element, second: Element) -> ReactionDefinition | None:
        """
        Look up the reaction between two elements, order-independent.

        Args:
            first (Element): One element.
            second (Element): The other element.

        Returns:
            ReactionDefinition | None: The reaction, or None when the pair
            does not react.

        """
        key = reaction_key(first, second)
        if key is None:
            return None
        return self.reactions.get(key)

    # === Loaders ===

    @staticmethod
    def _load_skills(data: list[dict]) -> dict[str, SkillDefinition]:
        """
        Load skills from JSON data.

        Raises:
            ContentError: If duplicate skill ids are found.

        """
        skills: dict[str, SkillDefinition] = {}
        for skill_data in data:
            skill = SkillDefinition(**skill_data)
            if skill.skill_id in skills:
                raise ContentError(f"Duplicate skill id: {skill.skill_id}")
            skills[skill.skill_id] = skill
        return skills

    @staticmethod
    def _load_reactions(data: list[dict]) -> dict[str, ReactionDefinition]:
        """
        Load elemental reactions from JSON data, keyed by canonical pair.

        Raises:
            ContentError: If two reactions share an element pair.

        """
        reactions: dict[str, ReactionDefinition] = {}
        for reaction_data in data:
            reaction = ReactionDefinition(**reaction_data)
            if reaction.key in reactions:
                raise ContentError(f"Duplicate reaction for pair: {reaction.key}")
            reactions[reaction.key] = reaction
        return reactions

    @staticmethod
    def _load_synergies(data: list[dict]) -> dict[str, SynergyDefinition]:
        """
        Load synergies from JSON data.

        Raises:
            ContentError: If duplicate synergy ids are found.

        """
        synergies: dict[str, SynergyDefinition] = {}
        for synergy_data in data:
            synergy = SynergyDefinition(**synergy_data)
            if synergy.synergy_id in synergies:
                raise ContentError(f"Duplicate synergy id: {synergy.synergy_id}")
            synergies[synergy.synergy_id] = synergy
        return synergies

    def _load_templates(self, data: list[dict]) -> dict[str, Any]:
        """
        Load combatant templates from JSON data.

        Raises:
            ContentError: If duplicate template ids are found.

        """
        from autobattler.character.combatant import CombatantTemplate

        templates: dict[str, CombatantTemplate] = {}
        for template_data in data:
            template = CombatantTemplate(**template_data)
            if template.template_id in templates:
                raise ContentError(f"Duplicate template id: {template.template_id}")
            for skill_id in template.skills:
                if skill_id not in self.skills:
                    log_warning(
                        f"Template '{template.template_id}' references unknown skill '{skill_id}'.",
                        {"template_id": template.template_id, "skill_id": skill_id},
                    )
            templates[template.template_id] = template
        return templates


def _load_json_file(
    filepath: Path,
    loader_func: Callable[[list[dict]], dict[str, Any]],
    description: str,
) -> dict[str, Any]:
    """Helper to load and validate JSON files"""
    log_debug(f"Loading {description}", {"file": filepath.name})
    try:
        if not filepath.exists():
            raise FileNotFoundError(f"File not found: {filepath}")
        if not filepath.is_file():
            raise ValueError(f"Not a file: {filepath}")
        with open(filepath, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"Expected list in {filepath}, got {type(data).__name__}")
        return loader_func(data)
    except (json.JSONDecodeError, FileNotFoundError, ValidationError, ValueError) as e:
        raise ContentError(f"File {filepath} raised an error: {e}") from e
