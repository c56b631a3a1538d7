"""
Tests for target selection and the threat table.
"""

import pytest

from autobattler.combat.targeting import TargetingResolver, ThreatTable
from autobattler.core.constants import Element, Role, Side, TargetingStrategy
from autobattler.effects.status_effect import TauntEffect


@pytest.fixture
def resolver():
    return TargetingResolver()


@pytest.fixture
def healer(make_unit):
    return make_unit("healer", role=Role.HEALER)


def _enemy(make_unit, unit_id, **kwargs):
    return make_unit(unit_id, side=Side.OPPOSING, **kwargs)


def test_healer_picks_most_wounded(resolver, healer, make_unit):
    bruised = make_unit("bruised")
    bruised.hp = 400
    dying = make_unit("dying")
    dying.hp = 100
    assert resolver.select_target(healer, [], [healer, bruised, dying]) is dying


def test_healer_idles_when_everyone_is_healthy(resolver, healer, make_unit):
    first = make_unit("first")
    first.hp = 450
    second = make_unit("second")
    second.hp = 480
    assert resolver.select_target(healer, [_enemy(make_unit, "e")], [healer, first, second]) is None


def test_healer_ignores_dead_allies(resolver, healer, make_unit):
    fallen = make_unit("fallen")
    fallen.die()
    assert resolver.select_heal_target([healer, fallen]) is None


def test_no_living_candidates(resolver, make_unit):
    unit = make_unit("unit")
    ghost = _enemy(make_unit, "ghost")
    ghost.die()
    assert resolver.select_target(unit, [ghost], [unit]) is None
    assert resolver.select_target(unit, [], [unit]) is None


def test_taunt_overrides_role(resolver, make_unit):
    unit = make_unit("unit", side=Side.OPPOSING)
    tank = make_unit("tank", x=500.0)
    close = make_unit("close", x=1.0)
    unit.add_status(TauntEffect(name="taunt", duration=3, source_id=tank.unit_id))
    unit.taunt_target = tank
    assert resolver.select_target(unit, [close, tank], [unit]) is tank


def test_dead_taunt_source_falls_back(resolver, make_unit):
    unit = make_unit("unit", side=Side.OPPOSING, role=Role.TANK)
    tank = make_unit("tank", x=500.0)
    close = make_unit("close", x=1.0)
    unit.add_status(TauntEffect(name="taunt", duration=3, source_id=tank.unit_id))
    unit.taunt_target = tank
    tank.die()
    assert resolver.select_target(unit, [close, tank], [unit]) is close


def test_tank_prefers_nearest(resolver, make_unit):
    tank = make_unit("tank", role=Role.TANK)
    far = _enemy(make_unit, "far", x=300.0)
    near = _enemy(make_unit, "near", x=50.0)
    assert resolver.select_target(tank, [far, near], [tank]) is near


def test_melee_prefers_lowest_hp(resolver, make_unit):
    melee = make_unit("melee", role=Role.MELEE)
    healthy = _enemy(make_unit, "healthy", x=10.0)
    weak = _enemy(make_unit, "weak", x=300.0)
    weak.hp = 50
    assert resolver.select_target(melee, [healthy, weak], [melee]) is weak


def test_ranged_prefers_highest_threat(resolver, make_unit):
    archer = make_unit("archer", role=Role.RANGED)
    harmless = _enemy(make_unit, "harmless", attack=5)
    dangerous = _enemy(make_unit, "dangerous", attack=80, x=400.0)
    assert resolver.select_target(archer, [harmless, dangerous], [archer]) is dangerous


def test_element_advantage_breaks_even_scores(resolver, make_unit):
    pyro = make_unit("pyro", role=Role.TANK, element=Element.FIRE)
    dark = _enemy(make_unit, "dark", element=Element.DARK, x=100.0)
    ice = _enemy(make_unit, "ice", element=Element.ICE, x=-100.0)
    assert resolver.select_target(pyro, [dark, ice], [pyro]) is ice


def test_ties_go_to_first_candidate(resolver, make_unit):
    tank = make_unit("tank", role=Role.TANK)
    first = _enemy(make_unit, "first", x=100.0)
    second = _enemy(make_unit, "second", x=-100.0)
    assert resolver.select_target(tank, [first, second], [tank]) is first


def test_threat_bonus_favours_attacker_of_the_unit(resolver, make_unit):
    tank = make_unit("tank", role=Role.TANK)
    first = _enemy(make_unit, "first", x=100.0)
    second = _enemy(make_unit, "second", x=-100.0)
    resolver.register_threat(tank.unit_id, second.unit_id, 200)
    assert resolver.select_target(tank, [first, second], [tank]) is second


@pytest.mark.parametrize(
    "strategy, expected",
    [
        (TargetingStrategy.NEAREST, "near"),
        (TargetingStrategy.LOWEST_HP, "weak"),
        (TargetingStrategy.HIGHEST_THREAT, "strong"),
        (TargetingStrategy.ELEMENT_PRIORITY, "frozen"),
    ],
)
def test_explicit_strategies(resolver, make_unit, strategy, expected):
    pyro = make_unit("pyro", role=Role.TANK, element=Element.FIRE)
    near = _enemy(make_unit, "near", x=10.0)
    weak = _enemy(make_unit, "weak", x=200.0)
    weak.hp = 20
    strong = _enemy(make_unit, "strong", x=300.0, attack=100)
    frozen = _enemy(make_unit, "frozen", x=400.0, element=Element.ICE)
    chosen = resolver.select_target(pyro, [near, weak, strong, frozen], [pyro], strategy)
    assert chosen.unit_id == expected


def test_element_priority_falls_back_to_nearest(resolver, make_unit):
    pyro = make_unit("pyro", element=Element.FIRE)
    near = _enemy(make_unit, "near", x=10.0)
    far = _enemy(make_unit, "far", x=90.0)
    assert resolver.select_target(pyro, [far, near], [pyro], TargetingStrategy.ELEMENT_PRIORITY) is near


def test_threat_table_accumulates_and_resets():
    table = ThreatTable()
    table.register("victim", "a", 10)
    table.register("victim", "a", 5)
    table.register("victim", "b", 7)
    table.register("victim", "b", 0)
    table.register("victim", "c", -3)
    assert table.get("victim", "a") == 15
    assert table.total("victim") == 22
    assert table.get("victim", "c") == 0
    table.reset()
    assert table.total("victim") == 0
