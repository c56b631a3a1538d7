"""
Core system module for the autobattler combat core.

This module contains the fundamental components shared by every system:
enumerations and balance constants, the seeded RNG, content loading, logging,
error handling and display utilities.
"""

from .constants import (
    BattleState,
    DamageType,
    Element,
    EnvironmentKind,
    Role,
    ScalingStat,
    Side,
    SkillMode,
    StatKey,
    TargetingStrategy,
    TargetType,
    is_opponent,
)
from .content import (
    ContentError,
    ContentRepository,
    ReactionDefinition,
    SkillDefinition,
    SkillEffectDefinition,
    SynergyDefinition,
    reaction_key,
)
from .error_handling import (
    ERROR_HANDLER,
    ErrorHandler,
    ErrorSeverity,
    GameError,
    ensure_int_in_range,
    ensure_non_negative_number,
)
from .logging import get_logger, setup_logging
from .rng import SeededRNG
from .utils import ccapture, cprint, crule, make_bar

__all__ = [
    # Import from constants.py
    "BattleState",
    "DamageType",
    "Element",
    "EnvironmentKind",
    "Role",
    "ScalingStat",
    "Side",
    "SkillMode",
    "StatKey",
    "TargetingStrategy",
    "TargetType",
    "is_opponent",
    # Import from content.py
    "ContentError",
    "ContentRepository",
    "ReactionDefinition",
    "SkillDefinition",
    "SkillEffectDefinition",
    "SynergyDefinition",
    "reaction_key",
    # Import from error_handling.py
    "ERROR_HANDLER",
    "ErrorHandler",
    "ErrorSeverity",
    "GameError",
    "ensure_int_in_range",
    "ensure_non_negative_number",
    # Import from logging.py
    "get_logger",
    "setup_logging",
    # Import from rng.py
    "SeededRNG",
    # Import from utils.py
    "ccapture",
    "cprint",
    "crule",
    "make_bar",
]
