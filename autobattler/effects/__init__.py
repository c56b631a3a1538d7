"""
Effects system module for the autobattler combat core.

This module handles the event bus and its payloads, the timed status effects a
combatant carries, the per-combatant status ledger and the per-frame status
tick.
"""

from .event_system import (
    CombatEvent,
    EventBus,
    EventType,
)
from .status_effect import (
    AnyStatusEffect,
    BuffEffect,
    DamageOverTimeEffect,
    DebuffEffect,
    HealingOverTimeEffect,
    StatusEffect,
    StunEffect,
    TauntEffect,
    create_status_effect,
)
from .status_ledger import StatusLedger
from .status_tick import StatusTickEngine

__all__ = [
    # Import from event_system.py
    "CombatEvent",
    "EventBus",
    "EventType",
    # Import from status_effect.py
    "AnyStatusEffect",
    "BuffEffect",
    "DamageOverTimeEffect",
    "DebuffEffect",
    "HealingOverTimeEffect",
    "StatusEffect",
    "StunEffect",
    "TauntEffect",
    "create_status_effect",
    # Import from status_ledger.py
    "StatusLedger",
    # Import from status_tick.py
    "StatusTickEngine",
]
