"""
Tests for the console helpers and the printed sheets.
"""

from autobattler.combat.battle_manager import BattleOutcome
from autobattler.core.constants import BattleState
from autobattler.core.sheets import (
    print_battle_outcome,
    print_combatant_sheet,
    print_content_summary,
    skill_to_string,
)
from autobattler.core.utils import ccapture, make_bar, round_half_up


def test_make_bar_fills_by_ratio():
    bar = make_bar(5, 10, length=10, color="green")
    assert bar.count("▮") == 5
    assert bar.count("▯") == 5
    assert bar.startswith("[green]")


def test_make_bar_clamps():
    assert make_bar(50, 10, length=4).count("▮") == 4
    assert make_bar(-3, 10, length=4).count("▯") == 4
    assert make_bar(1, 0, length=4).count("▯") == 4


def test_ccapture_returns_plain_text():
    assert "hello" in ccapture("[bold]hello[/]")


def test_skill_to_string_mentions_cooldown(content):
    text = skill_to_string(content.skills["fireball"])
    assert "Fireball" in text
    assert "5" in text


def test_sheets_render(capsys, content, make_unit):
    hero = make_unit("hero", attack=30)
    hero.add_skill(content.skills["power_strike"])
    outcome = BattleOutcome(state=BattleState.VICTORY, gold=12, exp=7, survivors=["hero"])

    print_combatant_sheet(hero)
    print_battle_outcome(outcome, [hero])
    print_content_summary(content)

    out = capsys.readouterr().out
    assert "Hero" in out
    assert "Gold" in out
    assert "fireball" in out


def test_round_half_up():
    assert round_half_up(50.5) == 51
    assert round_half_up(2.5) == 3
    assert round_half_up(2.4999) == 2
    assert round_half_up(0.0) == 0
