"""Event and anomaly resolution.

The engine only looks things up, flips one-shot flags and hands back the
payloads. Rewards, consequences and anomaly effects are applied by the
caller's game-state reducer. Updates are copy-on-write: the sector passed
in is never mutated; the updated sector travels back inside the result
and is stored with :meth:`SectorMap.replace_sector`.
"""
from __future__ import annotations

import operator
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from frontier.engine.logger import ChannelLogger, fallback_channel
from frontier.world.content import AnomalyEffect, SectorType
from frontier.world.sector import (
    Anomaly,
    Choice,
    Condition,
    ConditionKind,
    Consequence,
    Event,
    Reward,
    Sector,
)

Draw = Callable[[], float]

RANDOM_EVENT_GATE = 0.3

_COMPARATORS: Dict[str, Callable[[float, float], bool]] = {
    ">": operator.gt,
    "<": operator.lt,
    "=": operator.eq,
    ">=": operator.ge,
    "<=": operator.le,
}


class UnknownChoiceError(KeyError):
    """Raised when a choice id does not belong to the event being resolved."""


@dataclass(frozen=True)
class PlayerFacts:
    """Snapshot of caller-owned state that conditions are checked against."""

    health: float = 0.0
    score: float = 0.0
    credits: float = 0.0
    weapons: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Outcome:
    """Result of firing an event."""

    sector: Sector
    event: Event
    rewards: Tuple[Reward, ...]
    consequences: Tuple[Consequence, ...]

    @property
    def choices(self) -> Tuple[Choice, ...]:
        return self.event.choices or ()

    @property
    def awaiting_choice(self) -> bool:
        return bool(self.event.choices)


@dataclass(frozen=True)
class AnomalyDiscovery:
    sector: Sector
    anomaly: Anomaly

    @property
    def effect(self) -> AnomalyEffect:
        return self.anomaly.effect


class ChoiceStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class ChoiceOutcome:
    choice: Choice
    status: ChoiceStatus
    rewards: Tuple[Reward, ...] = ()
    consequences: Tuple[Consequence, ...] = ()
    unmet: Tuple[Condition, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.status is ChoiceStatus.SUCCESS


def compare_values(actual: float, op: str, expected: float) -> bool:
    comparator = _COMPARATORS.get(op)
    if comparator is None:
        raise ValueError(f"Unsupported comparison operator {op!r}")
    return comparator(actual, expected)


def condition_met(
    condition: Condition,
    facts: PlayerFacts,
    sector_type: Optional[SectorType] = None,
    draw: Optional[Draw] = None,
) -> bool:
    """Evaluate one condition.

    ``random_chance`` conditions consume one value from ``draw`` and are
    never met when no draw source is given. ``sector_type`` conditions are
    never met without a sector type. ``resources`` compares against
    ``facts.credits``. ``weapons`` with a numeric value compares the number
    of weapons carried; with a name it checks that weapon is carried.
    """

    kind = condition.kind
    if kind is ConditionKind.PLAYER_HEALTH:
        return compare_values(facts.health, condition.operator, float(condition.value))
    if kind is ConditionKind.PLAYER_SCORE:
        return compare_values(facts.score, condition.operator, float(condition.value))
    if kind is ConditionKind.RESOURCES:
        return compare_values(facts.credits, condition.operator, float(condition.value))
    if kind is ConditionKind.RANDOM_CHANCE:
        if draw is None:
            return False
        return compare_values(draw(), condition.operator, float(condition.value))
    if kind is ConditionKind.SECTOR_TYPE:
        return sector_type is not None and sector_type == condition.value
    if kind is ConditionKind.WEAPONS:
        if isinstance(condition.value, (int, float)) and not isinstance(condition.value, bool):
            return compare_values(len(facts.weapons), condition.operator, float(condition.value))
        return str(condition.value) in facts.weapons
    return True


def check_conditions(
    event: Event,
    facts: PlayerFacts,
    sector_type: Optional[SectorType] = None,
    draw: Optional[Draw] = None,
) -> bool:
    return all(condition_met(condition, facts, sector_type, draw) for condition in event.conditions)


def _is_random(event: Event) -> bool:
    return any(condition.kind is ConditionKind.RANDOM_CHANCE for condition in event.conditions)


def next_pending_event(
    sector: Sector,
    facts: PlayerFacts,
    draw: Draw,
    logger: Optional[ChannelLogger] = None,
) -> Optional[Event]:
    """Pick the event that should fire next in ``sector``, if any.

    Events without a ``random_chance`` condition win over luck-based ones
    and the highest priority wins among equals (first listed on ties).
    Luck-based events additionally pass a ``RANDOM_EVENT_GATE`` draw so
    they do not fire on every check.
    """

    log = logger or fallback_channel("events")
    ready = [
        event
        for event in sector.events
        if event.available and check_conditions(event, facts, sector.type, draw)
    ]
    guaranteed = [event for event in ready if not _is_random(event)]
    if guaranteed:
        return max(guaranteed, key=lambda event: event.priority)
    luck_based = [event for event in ready if _is_random(event)]
    if luck_based and draw() < RANDOM_EVENT_GATE:
        return max(luck_based, key=lambda event: event.priority)
    if ready:
        log.debug("Sector %s: %d random event(s) held back", sector.id, len(ready))
    return None


def trigger_event(sector: Sector, event_id: str, logger: Optional[ChannelLogger] = None) -> Optional[Outcome]:
    """Fire ``event_id`` once. Returns ``None`` for unknown or already-fired events."""

    log = logger or fallback_channel("events")
    event = sector.event(event_id)
    if event is None or not event.available:
        log.debug("Sector %s: event %s not available", sector.id, event_id)
        return None
    fired = event if event.triggered else replace(event, triggered=True)
    updated = sector.with_event(fired)
    log.info("Sector %s: event %s (%s) triggered", sector.id, event_id, event.type.value)
    return Outcome(sector=updated, event=fired, rewards=fired.rewards, consequences=fired.consequences)


def discover_anomaly(
    sector: Sector,
    anomaly_id: str,
    logger: Optional[ChannelLogger] = None,
) -> Optional[AnomalyDiscovery]:
    """Mark ``anomaly_id`` discovered once. Returns ``None`` for unknown or known anomalies."""

    log = logger or fallback_channel("events")
    anomaly = sector.anomaly(anomaly_id)
    if anomaly is None or anomaly.discovered:
        log.debug("Sector %s: anomaly %s not discoverable", sector.id, anomaly_id)
        return None
    found = replace(anomaly, discovered=True)
    log.info("Sector %s: anomaly %s (%s) discovered", sector.id, anomaly_id, anomaly.type.value)
    return AnomalyDiscovery(sector=sector.with_anomaly(found), anomaly=found)


def _requirement_met(condition: Condition, facts: PlayerFacts, sector_type: Optional[SectorType]) -> bool:
    # Luck is carried by the choice's success chance, not by its requirements.
    if condition.kind is ConditionKind.RANDOM_CHANCE:
        return True
    return condition_met(condition, facts, sector_type)


def resolve_choice(
    event: Event,
    choice_id: str,
    draw: float,
    facts: Optional[PlayerFacts] = None,
    sector_type: Optional[SectorType] = None,
    logger: Optional[ChannelLogger] = None,
) -> ChoiceOutcome:
    """Resolve a player choice on ``event``.

    Requirements are checked against ``facts``; without facts they are
    treated as met. On success the choice's rewards come back, on failure
    its consequences, never both.
    """

    log = logger or fallback_channel("events")
    choice = event.choice(choice_id)
    if choice is None:
        raise UnknownChoiceError(f"Event {event.id} has no choice {choice_id!r}")
    if not 0.0 <= draw < 1.0:
        raise ValueError(f"Choice draw {draw} outside [0, 1)")
    if facts is not None:
        unmet = tuple(
            condition for condition in choice.requirements if not _requirement_met(condition, facts, sector_type)
        )
        if unmet:
            log.info("Event %s: choice %s unavailable (%d unmet)", event.id, choice_id, len(unmet))
            return ChoiceOutcome(choice=choice, status=ChoiceStatus.UNAVAILABLE, unmet=unmet)
    if draw < choice.success_chance:
        log.info("Event %s: choice %s succeeded", event.id, choice_id)
        return ChoiceOutcome(choice=choice, status=ChoiceStatus.SUCCESS, rewards=choice.rewards)
    log.info("Event %s: choice %s failed", event.id, choice_id)
    return ChoiceOutcome(choice=choice, status=ChoiceStatus.FAILURE, consequences=choice.consequences)


__all__ = [
    "AnomalyDiscovery",
    "ChoiceOutcome",
    "ChoiceStatus",
    "Outcome",
    "PlayerFacts",
    "RANDOM_EVENT_GATE",
    "UnknownChoiceError",
    "check_conditions",
    "compare_values",
    "condition_met",
    "discover_anomaly",
    "next_pending_event",
    "resolve_choice",
    "trigger_event",
]
