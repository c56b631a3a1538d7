"""
Constants and enumerations for the combat core.

Defines the enumerations for sides, roles, elements, damage and target types,
stat keys, skill modes and encounter archetypes, together with the balance
constants used by the damage, combo, skill and environment systems.
"""

from enum import Enum

# Damage mitigation: damage * (K / (K + defense)).
DEFENSE_FORMULA_BASE = 100
# Uniform damage variance applied last (+/- 10%).
DAMAGE_VARIANCE = 0.1
# Default crit damage multiplier for freshly built combatants.
CRIT_MULTIPLIER = 1.5

# Elemental multipliers.
ELEMENT_ADVANTAGE_MULTIPLIER = 1.2
ELEMENT_DISADVANTAGE_MULTIPLIER = 0.85

# Combo streaks.
COMBO_WINDOW = 2.0
COMBO_HITS_PER_TIER = 5
COMBO_BONUS_PER_TIER = 0.10
COMBO_MILESTONE = 10

# Targeting.
HEAL_THRESHOLD = 0.9
ELEMENT_ADVANTAGE_TARGET_BONUS = 0.3
THREAT_TARGET_BONUS = 0.15

# Skills.
AUTO_FIRE_DELAY = 1.0
HEALER_ATTACK_HEAL_RATIO = 0.3

# Movement.
Y_MOVEMENT_DAMPING = 0.3
SEPARATION_DISTANCE = 20.0

# Battle phases.
PREPARE_DURATION = 0.5
SETTLE_DURATION = 0.5


class NiceEnum(Enum):
    """An enumeration that provides a nicer string representation."""

    def __str__(self) -> str:
        return self.name

    @property
    def display_name(self) -> str:
        return self.name.lower().replace("_", " ").capitalize()


class Side(NiceEnum):
    """Which roster a combatant belongs to."""

    ALLY = "ALLY"
    OPPOSING = "OPPOSING"

    @property
    def color(self) -> str:
        """Returns the color string associated with this side."""
        return {
            Side.ALLY: "bold blue",
            Side.OPPOSING: "bold red",
        }.get(self, "dim white")

    @property
    def colored_name(self) -> str:
        return self.colorize(self.display_name)

    def colorize(self, message: str) -> str:
        """Applies side color formatting to a message."""
        return f"[{self.color}]{message}[/]"

    def opposite(self) -> "Side":
        return Side.OPPOSING if self == Side.ALLY else Side.ALLY


class Role(NiceEnum):
    """Battlefield role, drives default targeting."""

    TANK = "TANK"
    MELEE = "MELEE"
    RANGED = "RANGED"
    HEALER = "HEALER"
    SUPPORT = "SUPPORT"

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this role."""
        return {
            Role.TANK: "🛡️",
            Role.MELEE: "⚔️",
            Role.RANGED: "🏹",
            Role.HEALER: "💚",
            Role.SUPPORT: "🔧",
        }.get(self, "❔")


class Element(NiceEnum):
    """Elemental affinity of a combatant, skill or status effect."""

    FIRE = "fire"
    ICE = "ice"
    LIGHTNING = "lightning"
    DARK = "dark"
    HOLY = "holy"

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this element."""
        return {
            Element.FIRE: "🔥",
            Element.ICE: "❄️",
            Element.LIGHTNING: "⚡",
            Element.DARK: "🖤",
            Element.HOLY: "✨",
        }.get(self, "❔")

    @property
    def color(self) -> str:
        """Returns the color string associated with this element."""
        return {
            Element.FIRE: "bold red",
            Element.ICE: "bold cyan",
            Element.LIGHTNING: "bold blue",
            Element.DARK: "dim white",
            Element.HOLY: "bold white",
        }.get(self, "dim white")

    @property
    def colored_name(self) -> str:
        return self.colorize(self.display_name)

    def colorize(self, message: str) -> str:
        """Applies element color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class DamageType(NiceEnum):
    """Mitigation class of a hit."""

    PHYSICAL = "physical"
    MAGICAL = "magical"
    PURE = "pure"


class TargetType(NiceEnum):
    """Who a skill may be aimed at."""

    ENEMY = "enemy"
    ALLY = "ally"
    SELF = "self"
    ALL_ENEMIES = "all_enemies"
    ALL_ALLIES = "all_allies"


class StatKey(NiceEnum):
    """Stat names addressable by buffs, debuffs and synergy bonuses."""

    MAX_HP = "max_hp"
    ATTACK = "attack"
    DEFENSE = "defense"
    MAGIC_POWER = "magic_power"
    MAGIC_RESIST = "magic_resist"
    SPEED = "speed"
    ATTACK_SPEED = "attack_speed"
    ATTACK_RANGE = "attack_range"
    CRIT_CHANCE = "crit_chance"
    CRIT_DAMAGE = "crit_damage"


class ScalingStat(NiceEnum):
    """Stat a skill amount scales with."""

    ATTACK = "attack"
    MAGIC_POWER = "magic_power"


class TargetingStrategy(NiceEnum):
    """Explicit targeting overrides a caller may request."""

    ELEMENT_PRIORITY = "element_priority"
    LOWEST_HP = "lowest_hp"
    NEAREST = "nearest"
    HIGHEST_THREAT = "highest_threat"


class SkillMode(NiceEnum):
    """How queued ally skills are fired."""

    AUTO = "auto"
    MANUAL = "manual"
    SEMI_AUTO = "semi_auto"


class EnvironmentKind(NiceEnum):
    """Encounter archetypes with their own periodic rules."""

    NONE = "none"
    FOREST = "forest"
    VOLCANO = "volcano"
    ABYSS = "abyss"


class BattleState(NiceEnum):
    """Public terminal state of an encounter."""

    ONGOING = "ongoing"
    VICTORY = "victory"
    DEFEAT = "defeat"

    @property
    def color(self) -> str:
        """Returns the color string associated with this state."""
        return {
            BattleState.ONGOING: "bold yellow",
            BattleState.VICTORY: "bold green",
            BattleState.DEFEAT: "bold red",
        }.get(self, "dim white")

    @property
    def colored_name(self) -> str:
        return self.colorize(self.display_name)

    def colorize(self, message: str) -> str:
        """Applies state color formatting to a message."""
        return f"[{self.color}]{message}[/]"


def is_opponent(first: Side, second: Side) -> bool:
    """
    Determines whether two sides are hostile to each other.

    Args:
        first (Side): The first side.
        second (Side): The second side.

    Returns:
        bool: True if the sides differ, False otherwise.

    """
    return first != second
