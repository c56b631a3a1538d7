"""
Status effect module for the combat core.

Defines the timed effects a combatant can carry: stat buffs and debuffs,
periodic damage and healing, stuns and taunts. Every variant is a pydantic
model tagged by `effect_type`, so content and tests can build them from
plain dictionaries.
"""

import math
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from autobattler.core.constants import Element, StatKey
from autobattler.core.utils import round_half_up


class StatusEffect(BaseModel):
    """
    Base class for every timed effect attached to a combatant.

    Same-name instances coexist independently, each with its own instance id
    and remaining duration.
    """

    effect_id: str | None = Field(
        default=None,
        description="Instance id, assigned by the ledger the effect is added to.",
    )
    name: str = Field(
        description="The name of the effect.",
    )
    duration: float = Field(
        description="Remaining duration in seconds.",
    )
    element: Element | None = Field(
        default=None,
        description="Element the effect is tagged with, used by reactions.",
    )
    source_id: str | None = Field(
        default=None,
        description="Id of the combatant that applied the effect.",
    )

    @property
    def kind(self) -> str:
        """Short kind tag of the effect (buff, debuff, dot, hot, stun, taunt)."""
        return getattr(self, "effect_type", "status")

    @property
    def display_name(self) -> str:
        return self.name.lower().replace("_", " ").capitalize()

    @property
    def color(self) -> str:
        """Returns the color string associated with this effect type."""
        return "dim white"

    @property
    def colored_name(self) -> str:
        """Returns the effect name with color formatting applied."""
        return self.colorize(self.display_name)

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this effect type."""
        return "❔"

    def colorize(self, message: str) -> str:
        """Applies effect color formatting to a message."""
        return f"[{self.color}]{message}[/]"

    def is_expired(self) -> bool:
        """An effect is expired once its remaining duration is zero or less."""
        return self.duration <= 0

    def model_post_init(self, _: Any) -> None:
        if not self.name:
            raise ValueError("Status effect name must be a non-empty string.")
        if not math.isfinite(self.duration) or self.duration < 0:
            raise ValueError(
                f"Duration must be a finite, non-negative number, got {self.duration}."
            )


class BuffEffect(StatusEffect):
    """Temporarily raises a stat by `value`."""

    effect_type: Literal["buff"] = "buff"

    stat: StatKey | None = Field(
        default=None,
        description="The stat modified by this effect, None for a pure marker.",
    )
    value: float = Field(
        default=0.0,
        description="Amount added to the stat.",
    )

    @property
    def color(self) -> str:
        return "bold cyan"

    @property
    def emoji(self) -> str:
        return "🛡️"


class DebuffEffect(StatusEffect):
    """
    Temporarily modifies a stat by `value`, usually a negative amount.

    A debuff without a stat acts as an element-tagged marker (for instance the
    `wet` status left by a melt reaction).
    """

    effect_type: Literal["debuff"] = "debuff"

    stat: StatKey | None = Field(
        default=None,
        description="The stat modified by this effect, None for a pure marker.",
    )
    value: float = Field(
        default=0.0,
        description="Amount added to the stat.",
    )

    @property
    def color(self) -> str:
        return "bold yellow"

    @property
    def emoji(self) -> str:
        return "🔻"


class PeriodicEffect(StatusEffect):
    """Base class for effects that fire every `tick_interval` seconds."""

    value: float = Field(
        description="Amount dealt or restored per tick.",
    )
    tick_interval: float = Field(
        default=1.0,
        description="Seconds between two ticks.",
    )

    def model_post_init(self, _: Any) -> None:
        super().model_post_init(_)
        if not self.tick_interval > 0:
            raise ValueError(
                f"Tick interval must be positive for {self.name}, got {self.tick_interval}."
            )

    def fires_between(self, before: float, after: float) -> bool:
        """
        Tells whether a tick boundary lies in the elapsed window.

        Args:
            before (float): Remaining duration before the update.
            after (float): Remaining duration after the update.

        Returns:
            bool: True if the tick count dropped, at most once per update.

        """
        prev_ticks = math.floor(before / self.tick_interval)
        curr_ticks = math.floor(max(0.0, after) / self.tick_interval)
        return curr_ticks < prev_ticks

    @property
    def tick_amount(self) -> int:
        """Amount applied per tick, never below 1."""
        return max(1, round_half_up(self.value))


class DamageOverTimeEffect(PeriodicEffect):
    """Deals `value` damage every tick (burn, poison, volcano heat...)."""

    effect_type: Literal["dot"] = "dot"

    @property
    def color(self) -> str:
        return "bold magenta"

    @property
    def emoji(self) -> str:
        return "❣️"


class HealingOverTimeEffect(PeriodicEffect):
    """Restores `value` HP every tick."""

    effect_type: Literal["hot"] = "hot"

    @property
    def color(self) -> str:
        return "bold green"

    @property
    def emoji(self) -> str:
        return "💖"


class StunEffect(StatusEffect):
    """Prevents the holder from moving, attacking or using skills."""

    effect_type: Literal["stun"] = "stun"

    @property
    def color(self) -> str:
        return "bold red"

    @property
    def emoji(self) -> str:
        return "💫"


class TauntEffect(StatusEffect):
    """Forces the holder to target the taunting combatant."""

    effect_type: Literal["taunt"] = "taunt"

    source_id: str = Field(
        description="Id of the taunting combatant.",
    )

    @property
    def color(self) -> str:
        return "bold blue"

    @property
    def emoji(self) -> str:
        return "🎯"


AnyStatusEffect = Annotated[
    Union[
        BuffEffect,
        DebuffEffect,
        DamageOverTimeEffect,
        HealingOverTimeEffect,
        StunEffect,
        TauntEffect,
    ],
    Field(discriminator="effect_type"),
]

_EFFECT_CLASSES: dict[str, type[StatusEffect]] = {
    "buff": BuffEffect,
    "debuff": DebuffEffect,
    "dot": DamageOverTimeEffect,
    "hot": HealingOverTimeEffect,
    "stun": StunEffect,
    "taunt": TauntEffect,
}


def create_status_effect(kind: str, **data: Any) -> StatusEffect:
    """
    Build a status effect from its kind tag.

    Args:
        kind (str): One of buff, debuff, dot, hot, stun, taunt.
        **data: Fields of the variant.

    Returns:
        StatusEffect: The new effect instance.

    Raises:
        ValueError: If the kind is unknown or the data invalid.

    """
    effect_class = _EFFECT_CLASSES.get(kind)
    if effect_class is None:
        raise ValueError(f"Unknown status effect kind: {kind}")
    # Drop fields the variant does not declare (e.g. a stat on a stun).
    fields = {k: v for k, v in data.items() if k in effect_class.model_fields}
    return effect_class(**fields)
