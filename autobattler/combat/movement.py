"""
Movement module for the combat core.

Moves combatants toward their targets and keeps living units from stacking
on top of each other.
"""

import math
from collections.abc import Sequence
from typing import Any

from autobattler.core.constants import SEPARATION_DISTANCE


def move_toward_target(unit: Any, dt: float) -> bool:
    """
    Step a combatant toward its target when it is out of range.

    Args:
        unit (Combatant): The moving combatant.
        dt (float): Elapsed (scaled) seconds.

    Returns:
        bool: True if the combatant moved.

    """
    target = unit.target
    if target is None or not target.is_alive() or unit.is_stunned():
        return False
    if unit.is_in_range(target):
        return False
    before = (unit.x, unit.y)
    unit.move_toward(target.x, target.y, dt)
    return (unit.x, unit.y) != before


def separate_units(units: Sequence[Any], min_distance: float = SEPARATION_DISTANCE) -> None:
    """
    Push apart every pair of living combatants closer than `min_distance`.

    Each unit of a pair moves half the overlap away from the other. Exactly
    overlapping units are left alone, having no direction to push along.
    """
    for i, first in enumerate(units):
        for second in units[i + 1 :]:
            if not first.is_alive() or not second.is_alive():
                continue
            dx = second.x - first.x
            dy = second.y - first.y
            dist = math.hypot(dx, dy)
            if 0 < dist < min_distance:
                push = (min_distance - dist) * 0.5
                push_x = dx / dist * push
                push_y = dy / dist * push
                first.x -= push_x
                first.y -= push_y
                second.x += push_x
                second.y += push_y
