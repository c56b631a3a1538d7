"""
Tests for combatants and the roster factory.
"""

import pytest

from autobattler.character.combatant import Combatant, build_combatant
from autobattler.character.stats import CombatantStats
from autobattler.core.constants import Role, Side, StatKey
from autobattler.effects.event_system import EventType


@pytest.fixture
def hero(make_unit, bus):
    return make_unit("hero", bus=bus, attack=40, speed=100)


def test_starts_at_full_health(hero):
    assert hero.hp == 500
    assert hero.is_alive()
    assert hero.hp_fraction == 1.0


def test_stats_validation():
    with pytest.raises(ValueError):
        CombatantStats(max_hp=0)
    with pytest.raises(ValueError):
        CombatantStats(max_hp=10, attack_speed=-1)


def test_empty_unit_id_rejected():
    with pytest.raises(ValueError):
        Combatant(unit_id="", name="Nobody", side=Side.ALLY, role=Role.TANK, stats=CombatantStats(max_hp=10))


def test_take_damage_and_death(hero, recorder):
    assert hero.take_damage(120.4) == 120
    assert hero.hp == 380
    assert hero.take_damage(1000) == 380
    assert hero.hp == 0
    assert hero.is_dead()
    assert hero.take_damage(50) == 0
    deaths = recorder.of(EventType.DEATH)
    assert len(deaths) == 1
    assert deaths[0].unit_id == "hero"
    assert deaths[0].is_ally


@pytest.mark.parametrize("old_hp, amount", [(100, 50), (480, 50), (499, 1), (1, 1000), (500, 10)])
def test_heal_clamps_to_max(hero, old_hp, amount):
    hero.hp = old_hp
    healed = hero.heal(amount)
    assert hero.hp == min(500, old_hp + amount)
    assert healed == hero.hp - old_hp


def test_half_amounts_round_up(hero):
    assert hero.take_damage(10.5) == 11
    assert hero.heal(2.5) == 3
    assert hero.hp == 492


def test_heal_dead_returns_zero(hero):
    hero.die()
    assert hero.heal(100) == 0
    assert hero.hp == 0


def test_heal_event_only_when_non_zero(hero, recorder):
    hero.heal(10)
    assert recorder.of(EventType.HEAL_APPLIED) == []
    hero.hp = 200
    hero.heal(10, source_id="cleric")
    heals = recorder.of(EventType.HEAL_APPLIED)
    assert len(heals) == 1
    assert heals[0].source_id == "cleric"
    assert heals[0].amount == 10


def test_synergy_bonuses_apply_after_modifiers(hero):
    hero.synergy_bonuses = {StatKey.ATTACK: 5}
    assert hero.get_stat(StatKey.ATTACK) == 45
    assert hero.base_stats.attack == 40


def test_range_and_movement(make_unit):
    mover = make_unit("mover", speed=100, attack_range=60)
    goal = make_unit("goal", side=Side.OPPOSING, x=100.0)
    assert mover.distance_to(goal) == 100
    assert not mover.is_in_range(goal)
    mover.move_toward(goal.x, goal.y, 0.5)
    assert mover.x == pytest.approx(50)
    assert mover.is_in_range(goal)


def test_vertical_movement_is_damped(make_unit):
    mover = make_unit("mover", speed=100)
    mover.move_toward(0.0, 100.0, 0.5)
    assert mover.x == pytest.approx(0)
    assert mover.y == pytest.approx(15)


def test_movement_stops_near_destination(make_unit):
    mover = make_unit("mover", speed=100)
    mover.move_toward(1.0, 0.0, 1.0)
    assert mover.x == 0


def test_skills_are_not_duplicated(hero, content):
    skill = content.skills["power_strike"]
    hero.add_skill(skill)
    hero.add_skill(skill)
    assert len(hero.skills) == 1
    assert hero.skill_cooldowns == {"power_strike": 0.0}
    hero.remove_skill("power_strike")
    assert hero.skills == []


def test_equality_by_id(make_unit):
    assert make_unit("a") == make_unit("a")
    assert len({make_unit("a"), make_unit("a"), make_unit("b")}) == 2


def test_build_combatant_from_template(content, bus):
    template = content.templates["goblin"]
    unit = build_combatant(template, unit_id="g1", side=Side.OPPOSING, x=10, bus=bus)
    assert unit.name == "Goblin"
    assert unit.role == Role.MELEE
    assert unit.gold_reward == 5
    assert unit.x == 10
    assert unit.skills == []


def test_build_combatant_with_overrides(content):
    template = content.templates["knight"]
    unit = build_combatant(template, unit_id="k1", side=Side.ALLY, attack=99)
    assert unit.base_stats.attack == 99
    assert template.stats.attack == 30
