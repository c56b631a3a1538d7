"""
Module for printing combatant sheets, skill sheets and battle results in a
formatted way.
"""

from typing import Any

from rich.padding import Padding

from autobattler.core.content import ContentRepository, SkillDefinition
from autobattler.core.utils import cprint, crule, make_bar


def skill_to_string(skill: SkillDefinition) -> str:
    """
    Converts a skill to a compact formatted string.

    Args:
        skill (SkillDefinition): The skill to format.

    Returns:
        str: Name, target type, amount and cooldown with colors.

    """
    amount = f"{skill.base_damage:g} + {skill.scaling_ratio:g}x {skill.scaling_stat.value}"
    text = f"[blue]{skill.name}[/] ({skill.target_type.value}), {amount}, cd {skill.cooldown:g}s"
    if skill.element is not None:
        text += f", {skill.element.colorize(skill.element.value)}"
    if skill.status_effect:
        text += f", applies [yellow]{skill.status_effect}[/]"
    return text


def print_skill_sheet(skill: SkillDefinition, padding: int = 2) -> None:
    cprint(Padding(skill_to_string(skill), (0, padding)))
    if skill.description:
        cprint(Padding(f'[italic]"{skill.description}"[/]', (0, padding + 2)))


def print_combatant_sheet(unit: Any) -> None:
    """
    Prints the details of a combatant in a formatted way.

    Args:
        unit (Combatant): The combatant to display.

    """
    element = unit.element.emoji if unit.element is not None else ""
    cprint(f"{unit.role.emoji} {unit.colored_name} {element}, [blue]{unit.role.display_name}[/]")

    stats = unit.effective_stats()
    bar = make_bar(unit.hp, unit.max_hp, color="green" if unit.is_alive() else "red")
    cprint(f"  HP: {bar} [green]{unit.hp:g}/{unit.max_hp:g}[/]")
    cprint(
        f"  ATK: {stats.attack:g}, DEF: {stats.defense:g}, "
        f"MAG: {stats.magic_power:g}, RES: {stats.magic_resist:g}"
    )
    cprint(
        f"  Speed: {stats.speed:g}, Attack speed: {stats.attack_speed:g}, "
        f"Range: {stats.attack_range:g}, Crit: {stats.crit_chance:.0%} x{stats.crit_damage:g}"
    )

    if unit.synergy_bonuses:
        bonuses = ", ".join(
            f"{stat.value} +{value:g}" for stat, value in unit.synergy_bonuses.items()
        )
        cprint(f"  [cyan]Synergy bonuses[/]: {bonuses}")

    if unit.skills:
        cprint("  [magenta]Skills[/]:")
        for skill in unit.skills:
            print_skill_sheet(skill, 4)

    if len(unit.effects):
        cprint("  [yellow]Active Effects[/]:")
        for effect in unit.effects:
            cprint(
                Padding(
                    f"{effect.emoji} {effect.colored_name} ({effect.duration:.1f}s remaining)",
                    (0, 4),
                )
            )

    active_cooldowns = {
        skill_id: remaining
        for skill_id, remaining in unit.skill_cooldowns.items()
        if remaining > 0
    }
    if active_cooldowns:
        cprint("  [orange1]Active Cooldowns[/]:")
        for skill_id, remaining in active_cooldowns.items():
            cprint(Padding(f"{skill_id}: {remaining:.1f}s", (0, 4)))


def print_battle_outcome(outcome: Any, units: list[Any] | None = None) -> None:
    """
    Prints the result of an encounter.

    Args:
        outcome (BattleOutcome): The outcome to display.
        units (list[Combatant] | None): Combatants to list with their final HP.

    """
    crule(outcome.state.colorize(outcome.state.display_name))
    cprint(f"  Time: [cyan]{outcome.elapsed:.1f}s[/]")
    cprint(f"  Gold: [yellow]{outcome.gold}[/], Experience: [green]{outcome.exp}[/]")
    cprint(f"  Survivors: {', '.join(outcome.survivors) or '[dim]none[/]'}")
    for unit in units or []:
        bar = make_bar(unit.hp, unit.max_hp, color="green" if unit.is_alive() else "red")
        cprint(Padding(f"{unit.colored_name} {bar} {unit.hp:g}/{unit.max_hp:g}", (0, 2)))


def print_content_summary(content: ContentRepository) -> None:
    """Prints counts and names for each content collection."""
    cprint("[bold cyan]Content Repository Summary[/bold cyan]")
    for label, collection in (
        ("Skills", content.skills),
        ("Reactions", content.reactions),
        ("Synergies", content.synergies),
        ("Templates", content.templates),
    ):
        names = ", ".join(sorted(collection))
        cprint(f"  [blue]{label}[/] ({len(collection)}): {names}")
