"""
Element module for the combat core.

Handles the element mechanics of combat: directional advantage multipliers
and reactions triggered when a hit lands on a target carrying an effect of a
different element.
"""

from collections.abc import Mapping
from typing import Any

from autobattler.core.constants import (
    ELEMENT_ADVANTAGE_MULTIPLIER,
    ELEMENT_DISADVANTAGE_MULTIPLIER,
    Element,
)
from autobattler.core.content import ReactionDefinition, reaction_key
from autobattler.core.logging import log_debug
from autobattler.core.utils import round_half_up
from autobattler.effects.event_system import (
    ElementReactionEvent,
    EventBus,
    EventType,
)
from autobattler.effects.status_effect import create_status_effect

# ELEMENT_ADVANTAGE[attacker] lists the elements the attacker is strong against.
ELEMENT_ADVANTAGE: dict[Element, tuple[Element, ...]] = {
    Element.FIRE: (Element.ICE,),
    Element.ICE: (Element.LIGHTNING,),
    Element.LIGHTNING: (Element.FIRE,),
    Element.DARK: (Element.HOLY,),
    Element.HOLY: (Element.DARK,),
}


def has_element_advantage(attacker: Element, target: Element) -> bool:
    """Check if the attacker element dominates the target element."""
    return target in ELEMENT_ADVANTAGE.get(attacker, ())


def element_multiplier(
    attacker_element: Element | None, target_element: Element | None
) -> float:
    """
    Damage multiplier of an attacker element against a target element.

    Args:
        attacker_element (Element | None): Element of the hit.
        target_element (Element | None): Element of the target.

    Returns:
        float: 1.2 on advantage, 0.85 on disadvantage, 1.0 otherwise.

    """
    if attacker_element is None or target_element is None:
        return 1.0
    if attacker_element == target_element:
        return 1.0
    if has_element_advantage(attacker_element, target_element):
        return ELEMENT_ADVANTAGE_MULTIPLIER
    if has_element_advantage(target_element, attacker_element):
        return ELEMENT_DISADVANTAGE_MULTIPLIER
    return 1.0


class ElementSystem:
    """
    Resolves elemental reactions against a reaction table.

    Attributes:
        reactions (Mapping[str, ReactionDefinition]):
            Reactions keyed by canonical element pair ("fire+ice").
        bus (EventBus | None):
            Bus ELEMENT_REACTION events are published on.

    """

    def __init__(
        self,
        reactions: Mapping[str, ReactionDefinition],
        bus: EventBus | None = None,
    ) -> None:
        self.reactions = reactions
        self.bus = bus

    def find_reaction(self, first: Element, second: Element) -> ReactionDefinition | None:
        """Order-independent reaction lookup."""
        key = reaction_key(first, second)
        if key is None:
            return None
        return self.reactions.get(key)

    def check_reaction(
        self, incoming: Element, target: Any
    ) -> tuple[ReactionDefinition, Element] | None:
        """
        Look for an existing effect on the target that reacts with a hit.

        Args:
            incoming (Element):
                Element of the incoming hit.
            target (Combatant):
                The combatant being hit.

        Returns:
            tuple[ReactionDefinition, Element] | None:
                The first reaction found in ledger order with the element it
                reacted with, or None.

        """
        for effect in target.effects.foreign_elements(incoming):
            reaction = self.find_reaction(incoming, effect.element)
            if reaction is not None:
                return reaction, effect.element
        return None

    def apply_reaction(
        self,
        reaction: ReactionDefinition,
        incoming: Element,
        existing: Element,
        target: Any,
        base_damage: float,
    ) -> int:
        """
        Apply a reaction's bonus damage and status to the target.

        Args:
            reaction (ReactionDefinition):
                The reaction to apply.
            incoming (Element):
                Element of the triggering hit.
            existing (Element):
                Element already present on the target.
            target (Combatant):
                The combatant suffering the reaction.
            base_damage (float):
                Final damage of the triggering hit.

        Returns:
            int:
                HP removed by the bonus, a separate damage application.

        """
        bonus = round_half_up(base_damage * (reaction.multiplier - 1))
        dealt = target.take_damage(bonus) if bonus > 0 else 0

        if reaction.status is not None and target.is_alive():
            target.add_status(
                create_status_effect(
                    reaction.status.kind,
                    name=reaction.status.name,
                    duration=reaction.status.duration,
                    stat=reaction.status.stat,
                    value=reaction.status.value,
                    element=incoming,
                )
            )

        log_debug(
            f"Reaction {reaction.name} on {target.name}",
            {"incoming": incoming, "existing": existing, "bonus": dealt},
        )
        if self.bus is not None:
            self.bus.publish(
                EventType.ELEMENT_REACTION,
                ElementReactionEvent(
                    incoming=incoming,
                    existing=existing,
                    target_id=target.unit_id,
                    reaction=reaction.name,
                    bonus_damage=dealt,
                ),
            )
        return dealt
