"""
Character module for the autobattler combat core.

This module handles combatants: their stats, hit points, position and
per-encounter state, and the factory that builds them from templates.
"""

from .combatant import Combatant, CombatantTemplate, build_combatant
from .stats import CombatantStats

__all__ = [
    # Import from combatant.py
    "Combatant",
    "CombatantTemplate",
    "build_combatant",
    # Import from stats.py
    "CombatantStats",
]
