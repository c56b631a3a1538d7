"""
Tests for combo streaks.
"""

import pytest

from autobattler.combat.combo import ComboTracker
from autobattler.effects.event_system import ComboBreakReason, EventType


@pytest.fixture
def combo(bus):
    return ComboTracker(bus=bus)


def _hits(combo, count, attacker="a", target="t"):
    for _ in range(count):
        combo.register_hit(attacker, target)


@pytest.mark.parametrize(
    "hits, expected",
    [(0, 1.0), (1, 1.0), (4, 1.0), (5, 1.1), (9, 1.1), (10, 1.2), (14, 1.2), (15, 1.3), (19, 1.3)],
)
def test_multiplier_tiers(combo, hits, expected):
    _hits(combo, hits)
    assert combo.multiplier("a") == pytest.approx(expected)


def test_target_switch_breaks_once(combo, recorder):
    _hits(combo, 3)
    combo.register_hit("a", "other")
    broken = recorder.of(EventType.COMBO_BROKEN)
    assert len(broken) == 1
    assert broken[0].combo_count == 3
    assert broken[0].reason == ComboBreakReason.TARGET_SWITCH
    assert combo.count("a") == 1


def test_first_hit_does_not_break(combo, recorder):
    combo.register_hit("a", "t")
    assert recorder.of(EventType.COMBO_BROKEN) == []


def test_streaks_are_per_attacker(combo):
    _hits(combo, 5, attacker="a")
    _hits(combo, 2, attacker="b")
    assert combo.count("a") == 5
    assert combo.count("b") == 2


def test_decay_breaks_streak(combo, recorder):
    _hits(combo, 6)
    combo.update(1.5)
    assert combo.count("a") == 6
    combo.update(0.5)
    assert combo.count("a") == 0
    assert combo.multiplier("a") == 1.0
    broken = recorder.of(EventType.COMBO_BROKEN)
    assert [event.reason for event in broken] == [ComboBreakReason.DECAY]


def test_hit_refreshes_window(combo):
    combo.register_hit("a", "t")
    combo.update(1.5)
    combo.register_hit("a", "t")
    combo.update(1.5)
    assert combo.count("a") == 2


def test_milestones_every_ten_hits(combo, recorder):
    _hits(combo, 25)
    milestones = recorder.of(EventType.COMBO_HIT)
    assert [event.combo_count for event in milestones] == [10, 20]


def test_reset_is_silent(combo, recorder):
    _hits(combo, 4)
    combo.reset()
    assert combo.count("a") == 0
    assert recorder.of(EventType.COMBO_BROKEN) == []


def test_multiplier_only_for_streak_target(combo):
    _hits(combo, 10, target="t")
    assert combo.multiplier("a", "t") == pytest.approx(1.2)
    assert combo.multiplier("a", "other") == 1.0
    assert combo.multiplier("a") == pytest.approx(1.2)
