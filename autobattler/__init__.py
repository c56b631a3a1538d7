"""
Autobattler combat core.

A deterministic, seedable combat-resolution engine for real-time auto-battling
encounters between two rosters of combatants.
"""
