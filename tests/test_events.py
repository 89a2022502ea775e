import logging

import pytest
from pygame.math import Vector2

from frontier.engine.logger import ChannelLogger
from frontier.world.content import AnomalyType, EventType, SectorType, anomaly_effect
from frontier.world.events import (
    ChoiceStatus,
    PlayerFacts,
    UnknownChoiceError,
    check_conditions,
    compare_values,
    condition_met,
    discover_anomaly,
    next_pending_event,
    resolve_choice,
    trigger_event,
)
from frontier.world.sector import (
    Anomaly,
    Choice,
    Condition,
    ConditionKind,
    Consequence,
    ConsequenceKind,
    Coordinate,
    Event,
    Reward,
    RewardKind,
    Sector,
    SectorResources,
)


def _quiet_logger() -> ChannelLogger:
    return ChannelLogger("events", logging.getLogger("test.events"), False)


def _draws(*values):
    remaining = iter(values)
    return lambda: next(remaining)


def make_event(event_id: str = "event_1,1_0_0001", **overrides) -> Event:
    fields = dict(
        id=event_id,
        type=EventType.AMBUSH,
        priority=3,
        description="Hostiles inbound",
        rewards=(Reward(RewardKind.CREDITS, 120, "Combat bonus"),),
        consequences=(Consequence(ConsequenceKind.ENEMY_SPAWN, 3, "Ambush fleet"),),
    )
    fields.update(overrides)
    return Event(**fields)


def make_sector(events=(), anomalies=(), sector_type=SectorType.PIRATE) -> Sector:
    return Sector(
        coordinates=Coordinate(1, 1),
        type=sector_type,
        difficulty=2,
        resources=SectorResources(),
        hostility=8,
        star_density=0.5,
        events=tuple(events),
        anomalies=tuple(anomalies),
        discovered=True,
        explored=True,
    )


def make_derelict() -> Event:
    return make_event(
        "event_1,1_0_0002",
        type=EventType.DERELICT,
        rewards=(),
        consequences=(),
        choices=(
            Choice(
                id="investigate",
                text="Board and investigate",
                rewards=(Reward(RewardKind.CREDITS, 150, "Salvaged materials"),),
                consequences=(Consequence(ConsequenceKind.DAMAGE, 1, "Booby trap damage"),),
                success_chance=0.7,
            ),
            Choice(
                id="hail",
                text="Hail with fleet codes",
                rewards=(Reward(RewardKind.MAP_DATA, 1, "Navigation data"),),
                requirements=(Condition(ConditionKind.WEAPONS, "=", "fleet_codes"),),
            ),
            Choice(
                id="nebula_dive",
                text="Drift into the nebula",
                requirements=(Condition(ConditionKind.SECTOR_TYPE, "=", "nebula"),),
            ),
        ),
    )


def test_trigger_event_fires_once():
    sector = make_sector([make_event()])
    outcome = trigger_event(sector, "event_1,1_0_0001", _quiet_logger())
    assert outcome is not None
    assert outcome.event.triggered
    assert outcome.rewards[0].amount == 120
    assert outcome.consequences[0].kind is ConsequenceKind.ENEMY_SPAWN
    assert not outcome.awaiting_choice
    assert outcome.sector.event("event_1,1_0_0001").triggered
    assert not sector.event("event_1,1_0_0001").triggered
    assert trigger_event(outcome.sector, "event_1,1_0_0001", _quiet_logger()) is None


def test_repeatable_event_fires_again():
    sector = make_sector([make_event(repeatable=True)])
    first = trigger_event(sector, "event_1,1_0_0001", _quiet_logger())
    second = trigger_event(first.sector, "event_1,1_0_0001", _quiet_logger())
    assert second is not None
    assert second.rewards == first.rewards


def test_unknown_event_returns_none():
    assert trigger_event(make_sector(), "missing", _quiet_logger()) is None


def test_trigger_keeps_other_events_untouched():
    other = make_event("event_1,1_1_0002", priority=1)
    sector = make_sector([make_event(), other])
    outcome = trigger_event(sector, "event_1,1_0_0001", _quiet_logger())
    assert outcome.sector.event(other.id) is other


def test_discover_anomaly_once():
    anomaly = Anomaly(
        id="anomaly_1,1_0_0042",
        type=AnomalyType.TIME_RIFT,
        position=Vector2(200.0, 150.0),
        radius=45.0,
        effect=anomaly_effect(AnomalyType.TIME_RIFT),
    )
    sector = make_sector(anomalies=[anomaly])
    found = discover_anomaly(sector, anomaly.id, _quiet_logger())
    assert found is not None
    assert found.anomaly.discovered
    assert found.effect.duration_ms == 10000
    assert not sector.anomaly(anomaly.id).discovered
    assert discover_anomaly(found.sector, anomaly.id, _quiet_logger()) is None
    assert discover_anomaly(sector, "nope", _quiet_logger()) is None


def test_choice_success_returns_only_rewards():
    event = make_derelict()
    result = resolve_choice(event, "investigate", 0.2, logger=_quiet_logger())
    assert result.status is ChoiceStatus.SUCCESS
    assert result.succeeded
    assert result.rewards[0].amount == 150
    assert result.consequences == ()


def test_choice_failure_returns_only_consequences():
    event = make_derelict()
    result = resolve_choice(event, "investigate", 0.7, logger=_quiet_logger())
    assert result.status is ChoiceStatus.FAILURE
    assert result.rewards == ()
    assert result.consequences[0].kind is ConsequenceKind.DAMAGE


def test_unknown_choice_raises():
    with pytest.raises(UnknownChoiceError):
        resolve_choice(make_derelict(), "flee", 0.1, logger=_quiet_logger())
    with pytest.raises(KeyError):
        resolve_choice(make_derelict(), "flee", 0.1, logger=_quiet_logger())


def test_choice_draw_must_be_unit_interval():
    with pytest.raises(ValueError):
        resolve_choice(make_derelict(), "investigate", 1.0, logger=_quiet_logger())


def test_choice_requirements():
    event = make_derelict()
    facts = PlayerFacts(health=80.0, weapons=("laser",))
    blocked = resolve_choice(event, "hail", 0.1, facts, SectorType.PIRATE, _quiet_logger())
    assert blocked.status is ChoiceStatus.UNAVAILABLE
    assert blocked.rewards == () and blocked.consequences == ()
    assert blocked.unmet[0].kind is ConditionKind.WEAPONS

    equipped = PlayerFacts(health=80.0, weapons=("laser", "fleet_codes"))
    assert resolve_choice(event, "hail", 0.1, equipped, SectorType.PIRATE, _quiet_logger()).succeeded
    assert resolve_choice(event, "hail", 0.1, logger=_quiet_logger()).succeeded

    assert (
        resolve_choice(event, "nebula_dive", 0.1, facts, SectorType.PIRATE, _quiet_logger()).status
        is ChoiceStatus.UNAVAILABLE
    )
    assert resolve_choice(event, "nebula_dive", 0.1, facts, SectorType.NEBULA, _quiet_logger()).succeeded


def test_compare_values():
    assert compare_values(5, ">", 3)
    assert compare_values(3, "<=", 3)
    assert compare_values(2, "=", 2)
    assert not compare_values(2, ">=", 3)
    with pytest.raises(ValueError):
        compare_values(1, "!=", 2)


def test_condition_kinds():
    facts = PlayerFacts(health=40.0, score=1200.0, credits=75.0, weapons=("railgun",))
    assert condition_met(Condition(ConditionKind.PLAYER_HEALTH, "<", 50), facts)
    assert condition_met(Condition(ConditionKind.PLAYER_SCORE, ">=", 1000), facts)
    assert not condition_met(Condition(ConditionKind.RESOURCES, ">", 100), facts)
    assert condition_met(Condition(ConditionKind.WEAPONS, "=", "railgun"), facts)
    assert condition_met(Condition(ConditionKind.SECTOR_TYPE, "=", "pirate"), facts, SectorType.PIRATE)
    assert not condition_met(Condition(ConditionKind.SECTOR_TYPE, "=", "pirate"), facts)
    luck = Condition(ConditionKind.RANDOM_CHANCE, "<", 0.25)
    assert not condition_met(luck, facts)
    assert condition_met(luck, facts, draw=_draws(0.1))
    assert not condition_met(luck, facts, draw=_draws(0.9))


def test_weapon_count_conditions_use_the_operator():
    armed = PlayerFacts(weapons=("laser", "railgun", "missiles"))
    assert condition_met(Condition(ConditionKind.WEAPONS, ">=", 3), armed)
    assert not condition_met(Condition(ConditionKind.WEAPONS, ">", 3), armed)
    assert condition_met(Condition(ConditionKind.WEAPONS, "<", 1), PlayerFacts())
    assert condition_met(Condition(ConditionKind.WEAPONS, "=", 3.0), armed)
    assert not condition_met(Condition(ConditionKind.WEAPONS, "=", "plasma"), armed)


def test_resources_are_read_from_credits():
    condition = Condition(ConditionKind.RESOURCES, ">=", 200)
    assert condition_met(condition, PlayerFacts(credits=250.0))
    assert not condition_met(condition, PlayerFacts(score=999.0, credits=10.0))


def test_check_conditions_requires_all():
    event = make_event(
        conditions=(
            Condition(ConditionKind.PLAYER_HEALTH, ">", 10),
            Condition(ConditionKind.RESOURCES, ">=", 50),
        )
    )
    assert check_conditions(event, PlayerFacts(health=20.0, credits=60.0))
    assert not check_conditions(event, PlayerFacts(health=20.0, credits=10.0))


def test_next_pending_prefers_guaranteed_then_priority():
    luck = Condition(ConditionKind.RANDOM_CHANCE, "<", 0.5)
    low = make_event("low", priority=1)
    high = make_event("high", priority=7)
    lucky = make_event("lucky", priority=9, conditions=(luck,))
    sector = make_sector([low, lucky, high])
    chosen = next_pending_event(sector, PlayerFacts(), _draws(0.1, 0.1), _quiet_logger())
    assert chosen is high


def test_next_pending_skips_triggered_and_unmet():
    fired = make_event("fired", triggered=True, priority=9)
    gated = make_event("gated", conditions=(Condition(ConditionKind.PLAYER_HEALTH, ">", 90),))
    sector = make_sector([fired, gated])
    assert next_pending_event(sector, PlayerFacts(health=50.0), _draws(), _quiet_logger()) is None


def test_random_events_pass_the_gate():
    lucky = make_event("lucky", conditions=(Condition(ConditionKind.RANDOM_CHANCE, "<", 0.5),))
    sector = make_sector([lucky])
    assert next_pending_event(sector, PlayerFacts(), _draws(0.1, 0.2), _quiet_logger()) is lucky
    assert next_pending_event(sector, PlayerFacts(), _draws(0.1, 0.9), _quiet_logger()) is None
    assert next_pending_event(sector, PlayerFacts(), _draws(0.8), _quiet_logger()) is None
