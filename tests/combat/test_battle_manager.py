"""
Tests for the encounter loop: phases, outcome, skill firing and determinism.
"""

import pytest

from autobattler.combat.battle_manager import (
    BattleManager,
    BattlePhase,
    BattleSettings,
)
from autobattler.core.constants import BattleState, Role, Side, SkillMode
from autobattler.effects.event_system import EventBus, EventType
from autobattler.effects.status_effect import StunEffect

ALLY_ROSTER = ["knight", "rogue", "pyromancer", "cleric"]
OPPOSING_ROSTER = ["goblin", "skeleton_archer", "fire_imp", "ice_golem", "dark_priest"]


def _event_log(bus):
    log = []
    for topic in EventType:
        bus.subscribe(topic, log.append)
    return log


def _signature(event):
    return (
        event.event_type,
        getattr(event, "unit_id", None),
        getattr(event, "source_id", None),
        getattr(event, "target_id", None),
        getattr(event, "amount", None),
    )


@pytest.fixture
def duel(make_unit, content, bus):
    """A hero strong enough to one-shot two goblins."""
    hero = make_unit("hero", attack=10000, attack_range=1000)
    goblins = []
    for index, (gold, exp) in enumerate([(5, 3), (7, 4)]):
        goblin = make_unit(
            f"goblin_{index}", side=Side.OPPOSING, x=100.0 + 40 * index, max_hp=10
        )
        goblin.gold_reward = gold
        goblin.exp_reward = exp
        goblins.append(goblin)
    return BattleManager([hero], goblins, content=content, bus=bus)


def test_from_templates_builds_rosters(content):
    manager = BattleManager.from_templates(["knight", "cleric"], ["goblin"], content)
    knight = manager.get_unit("ally_0_knight")
    assert [skill.skill_id for skill in knight.skills] == ["shield_bash", "provoke"]
    assert knight.x == 100.0
    assert manager.get_unit("opposing_0_goblin").x == 700.0
    assert knight.bus is manager.bus
    assert [unit.unit_id for unit in manager.units] == [
        "ally_0_knight",
        "ally_1_cleric",
        "opposing_0_goblin",
    ]


def test_unknown_template_raises(content):
    with pytest.raises(ValueError):
        BattleManager.from_templates(["knight"], ["dragon"], content)


def test_duplicate_unit_ids_rejected(make_unit, content):
    with pytest.raises(AssertionError):
        BattleManager([make_unit("twin")], [make_unit("twin", side=Side.OPPOSING)], content)


def test_same_seed_same_battle(content):
    runs = []
    for _ in range(2):
        bus = EventBus()
        log = _event_log(bus)
        settings = BattleSettings(seed=1234, skill_mode=SkillMode.AUTO)
        manager = BattleManager.from_templates(
            ALLY_ROSTER, OPPOSING_ROSTER, content, settings=settings, bus=bus
        )
        outcome = manager.run(max_time=60.0)
        runs.append((outcome.state, outcome.gold, outcome.survivors, [_signature(e) for e in log]))
    assert runs[0] == runs[1]


def test_nothing_happens_while_preparing(duel, recorder):
    duel.update(0.25)
    assert duel.phase == BattlePhase.PREPARING
    assert recorder.of(EventType.BATTLE_STARTED)
    assert recorder.of(EventType.DAMAGE_APPLIED) == []
    duel.update(0.3)
    assert duel.phase == BattlePhase.COMBAT


def test_victory_grants_rewards(duel):
    outcome = duel.run()
    assert outcome.victory
    assert (outcome.gold, outcome.exp) == (12, 7)
    assert outcome.survivors == ["hero"]
    assert duel.state == BattleState.VICTORY


def test_defeat_grants_nothing(make_unit, content):
    hero = make_unit("hero", max_hp=5)
    brute = make_unit("brute", side=Side.OPPOSING, x=40.0, attack=10000)
    brute.gold_reward = 50
    outcome = BattleManager([hero], [brute], content).run()
    assert outcome.state == BattleState.DEFEAT
    assert (outcome.gold, outcome.exp, outcome.survivors) == (0, 0, [])


def test_state_settles_after_decisive_death(duel, recorder):
    duel.setup()
    while duel.outcome is None:
        duel.update(1 / 60)
    assert duel.phase == BattlePhase.SETTLING
    assert duel.state == BattleState.ONGOING

    duel.update(0.6)
    assert duel.phase == BattlePhase.FINISHED
    assert duel.state == BattleState.VICTORY
    duel.update(1.0)
    assert len(recorder.of(EventType.BATTLE_ENDED)) == 1
    assert recorder.of(EventType.BATTLE_ENDED)[0].victory


def test_pause_freezes_the_loop(duel):
    duel.setup()
    duel.pause()
    duel.update(10.0)
    assert duel.phase == BattlePhase.PREPARING
    assert duel.elapsed == 0.0
    duel.resume()
    duel.update(1.0)
    assert duel.phase == BattlePhase.COMBAT


def test_speed_multiplier_scales_time(duel):
    duel.set_speed(2.0)
    duel.update(0.25)
    assert duel.phase == BattlePhase.COMBAT
    with pytest.raises(ValueError):
        duel.set_speed(0.0)
    with pytest.raises(ValueError):
        BattleSettings(speed_multiplier=-1.0)


def test_timeout_is_a_defeat(make_unit, content, recorder, bus):
    hero = make_unit("hero", speed=0, attack_range=10)
    rock = make_unit("rock", side=Side.OPPOSING, x=500.0, speed=0, attack_range=10)
    manager = BattleManager([hero], [rock], content, bus=bus)
    outcome = manager.run(max_time=2.0)
    assert outcome.state == BattleState.DEFEAT
    assert manager.phase == BattlePhase.FINISHED
    assert len(recorder.of(EventType.BATTLE_ENDED)) == 1


def test_semi_auto_queues_then_fires(make_unit, content, recorder, bus):
    hero = make_unit("hero", attack=10)
    hero.add_skill(content.skills["power_strike"])
    dummy = make_unit("dummy", side=Side.OPPOSING, x=40.0, max_hp=100000, speed=0)
    settings = BattleSettings(skill_mode=SkillMode.SEMI_AUTO, prepare_duration=0.0)
    manager = BattleManager([hero], [dummy], content, settings=settings, bus=bus)

    manager.update(0.1)
    manager.update(0.1)
    assert [event.skill_id for event in recorder.of(EventType.SKILL_READY)] == ["power_strike"]
    assert recorder.of(EventType.SKILL_USED) == []

    for _ in range(12):
        manager.update(0.1)
    used = recorder.of(EventType.SKILL_USED)
    assert [event.caster_id for event in used] == ["hero"]
    assert len(recorder.of(EventType.SKILL_READY)) == 1


def test_manual_fire_with_target_override(make_unit, content, bus):
    cleric = make_unit("cleric", role=Role.HEALER, magic_power=50, attack_range=300, speed=0)
    cleric.add_skill(content.skills["holy_light"])
    worst = make_unit("worst", x=20.0, speed=0)
    other = make_unit("other", x=-20.0, speed=0)
    worst.hp = 100
    other.hp = 200
    far = make_unit("far", side=Side.OPPOSING, x=5000.0, speed=0)
    settings = BattleSettings(skill_mode=SkillMode.MANUAL, prepare_duration=0.0)
    manager = BattleManager([cleric, worst, other], [far], content, settings=settings, bus=bus)

    manager.update(0.1)
    manager.update(0.1)
    assert manager.queue.is_queued("cleric", "holy_light")
    assert cleric.target is worst

    assert manager.fire_skill("cleric", "holy_light", target_id="other")
    assert other.hp == 200 + 20 + 40
    assert cleric.target is worst
    assert not manager.queue.is_queued("cleric", "holy_light")
    assert not manager.fire_skill("cleric", "holy_light")


def test_stunned_owner_cannot_fire(make_unit, content, bus):
    hero = make_unit("hero")
    hero.add_skill(content.skills["battle_cry"])
    far = make_unit("far", side=Side.OPPOSING, x=5000.0, speed=0)
    manager = BattleManager([hero], [far], content, bus=bus)
    manager.queue.enqueue("hero", "battle_cry")
    hero.add_status(StunEffect(name="stun", duration=2.0))

    assert not manager.fire_skill("hero", "battle_cry")
    assert manager.queue.is_queued("hero", "battle_cry")


def test_death_clears_queued_skills(duel):
    duel.queue.enqueue("hero", "power_strike")
    duel.get_unit("hero").die()
    assert len(duel.queue) == 0


def test_stunned_unit_is_interrupted(make_unit, content, recorder, bus):
    hero = make_unit("hero")
    hero.add_skill(content.skills["power_strike"])
    dummy = make_unit("dummy", side=Side.OPPOSING, x=40.0, max_hp=100000, speed=0)
    settings = BattleSettings(skill_mode=SkillMode.AUTO, prepare_duration=0.0)
    manager = BattleManager([hero], [dummy], content, settings=settings, bus=bus)
    hero.add_status(StunEffect(name="stun", duration=5.0))

    manager.update(0.1)
    manager.update(0.1)

    assert [event.unit_id for event in recorder.of(EventType.SKILL_INTERRUPTED)] == ["hero"]
    assert recorder.of(EventType.SKILL_USED) == []
    assert hero.skill_cooldowns["power_strike"] == 0.0
