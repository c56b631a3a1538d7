"""
Main entry point for the autobattler combat core.

Loads the packaged content, builds two rosters from templates and runs a
headless encounter, printing the combatant sheets before and the outcome
after.

Usage:
    python -m autobattler.main [seed] [environment]
"""

import logging
import sys

from autobattler.combat.battle_manager import BattleManager, BattleSettings
from autobattler.core.constants import EnvironmentKind, SkillMode
from autobattler.core.content import ContentRepository
from autobattler.core.logging import setup_logging
from autobattler.core.sheets import (
    print_battle_outcome,
    print_combatant_sheet,
    print_content_summary,
)
from autobattler.core.utils import cprint, crule
from autobattler.effects.event_system import EventType

ALLY_ROSTER = ["knight", "rogue", "pyromancer", "cleric"]
OPPOSING_ROSTER = ["goblin", "skeleton_archer", "fire_imp", "ice_golem", "dark_priest"]


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    seed = int(argv[0]) if argv else 42
    environment = EnvironmentKind(argv[1]) if len(argv) > 1 else EnvironmentKind.FOREST

    setup_logging(logging.INFO)

    crule("Autobattler", style="bold green")
    content = ContentRepository()
    print_content_summary(content)
    settings = BattleSettings(
        seed=seed,
        skill_mode=SkillMode.AUTO,
        environment=environment,
    )
    manager = BattleManager.from_templates(
        ALLY_ROSTER, OPPOSING_ROSTER, content=content, settings=settings
    )
    manager.bus.subscribe(
        EventType.ELEMENT_REACTION,
        lambda event: cprint(f"  [bold magenta]{event.reaction}[/] on {event.target_id}"),
    )
    manager.bus.subscribe(
        EventType.KILL,
        lambda event: cprint(f"  [red]{event.killer_id}[/] defeats {event.target_id}"),
    )

    manager.setup()
    for unit in manager.units:
        print_combatant_sheet(unit)

    crule("Battle", style="bold yellow")
    outcome = manager.run()
    print_battle_outcome(outcome, manager.units)
    return 0 if outcome.victory else 1


if __name__ == "__main__":
    sys.exit(main())
