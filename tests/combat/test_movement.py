"""
Tests for movement toward targets and unit separation.
"""

import pytest

from autobattler.combat.movement import move_toward_target, separate_units
from autobattler.core.constants import Side
from autobattler.effects.status_effect import StunEffect


@pytest.fixture
def pair(make_unit):
    walker = make_unit("walker", speed=60)
    goal = make_unit("goal", side=Side.OPPOSING, x=300.0)
    walker.target = goal
    return walker, goal


def test_moves_toward_target_out_of_range(pair):
    walker, _ = pair
    assert move_toward_target(walker, 1.0)
    assert walker.x == pytest.approx(60.0)


def test_no_move_when_in_range(pair):
    walker, goal = pair
    goal.x = 50.0
    assert not move_toward_target(walker, 1.0)
    assert walker.x == 0.0


def test_no_move_when_stunned(pair):
    walker, _ = pair
    walker.add_status(StunEffect(name="stun", duration=1.0))
    assert not move_toward_target(walker, 1.0)


def test_no_move_without_living_target(pair):
    walker, goal = pair
    goal.die()
    assert not move_toward_target(walker, 1.0)
    walker.target = None
    assert not move_toward_target(walker, 1.0)


def test_separation_pushes_both_units(make_unit):
    first = make_unit("first", x=0.0)
    second = make_unit("second", x=10.0)
    separate_units([first, second], min_distance=20.0)
    assert first.x == pytest.approx(-5.0)
    assert second.x == pytest.approx(15.0)


def test_separation_ignores_dead_and_stacked_units(make_unit):
    first = make_unit("first", x=0.0)
    stacked = make_unit("stacked", x=0.0)
    fallen = make_unit("fallen", x=5.0)
    fallen.die()
    separate_units([first, stacked, fallen])
    assert (first.x, stacked.x, fallen.x) == (0.0, 0.0, 5.0)
