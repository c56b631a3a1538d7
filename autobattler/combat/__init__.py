"""
Combat module for the autobattler combat core.

This module resolves encounters: damage, elements, combos, targeting, skills,
environment rules, synergies and the battle loop tying them together.
"""

from .battle_manager import BattleManager, BattleOutcome, BattleSettings
from .combo import ComboTracker
from .damage import DamageResolver, DamageResult
from .elements import ElementSystem, element_multiplier
from .environment import EnvironmentEngine
from .skill_queue import SkillQueue
from .skills import SkillSystem
from .synergy import SynergySystem
from .targeting import TargetingResolver, ThreatTable

__all__ = [
    "BattleManager",
    "BattleOutcome",
    "BattleSettings",
    "ComboTracker",
    "DamageResolver",
    "DamageResult",
    "ElementSystem",
    "element_multiplier",
    "EnvironmentEngine",
    "SkillQueue",
    "SkillSystem",
    "SynergySystem",
    "TargetingResolver",
    "ThreatTable",
]
