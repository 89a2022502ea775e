"""Deterministic procedural generation for sector content."""
from __future__ import annotations

import math
from typing import List, Optional, Tuple

from pygame.math import Vector2

from frontier.engine.logger import ChannelLogger, fallback_channel
from frontier.engine.settings import DEFAULT_PLAY_FIELD
from frontier.world.content import (
    ANOMALY_CHANCE,
    ANOMALY_TYPES,
    BASE_HOSTILITY,
    EVENT_POOLS,
    HAZARD_POOLS,
    INCIDENTAL_RESOURCES,
    NEBULA_COLORS,
    NEBULA_KINDS,
    RESOURCE_YIELDS,
    EventType,
    SectorType,
    anomaly_effect,
    for_sector,
    pick_weighted,
    type_weights,
)
from frontier.world.random_stream import SeededRandom, sector_seed
from frontier.world.sector import (
    Anomaly,
    Choice,
    Condition,
    ConditionKind,
    Consequence,
    ConsequenceKind,
    Coordinate,
    Event,
    Hazard,
    NebulaData,
    Reward,
    RewardKind,
    Sector,
    SectorResources,
)


class SectorGenerator:
    """Generate deterministic sectors from a coordinate and a global seed.

    Every stage pulls its draws from one stream in a fixed order: type,
    difficulty, resources, hazards, events, hostility, star density,
    nebula, anomalies. Reordering the stages (or the draws inside one)
    changes every sector generated after the change.
    """

    MAX_DIFFICULTY = 10
    MAX_HOSTILITY = 10

    HAZARD_CHANCE_BASE = 0.2
    HAZARD_CHANCE_PER_DISTANCE = 0.1
    HAZARD_CHANCE_CAP = 0.8
    HAZARD_MAX_INTENSITY = 5
    HAZARD_DURATION_MS = (5000, 10000)
    HAZARD_LOCALIZED_CHANCE = 0.5

    EVENT_CHANCE_ORIGIN = 0.1
    EVENT_CHANCE_BASE = 0.4
    EVENT_CHANCE_PER_DISTANCE = 0.05
    EVENT_CHANCE_CAP = 0.6
    EVENT_PRIORITY_LEVELS = 10
    ID_TOKEN_RANGE = 10000

    STAR_DENSITY_RANGE = (0.3, 1.0)
    NEBULA_DENSITY_RANGE = (0.3, 1.0)
    ANOMALY_MARGIN = 100.0
    ANOMALY_RADIUS_RANGE = (30.0, 100.0)

    def __init__(
        self,
        play_field: Tuple[float, float] = DEFAULT_PLAY_FIELD,
        logger: Optional[ChannelLogger] = None,
    ) -> None:
        self.play_field = play_field
        self._log = logger or fallback_channel("generation")

    def generate(self, coordinates: Coordinate, global_seed: int = 0) -> Sector:
        rng = SeededRandom(sector_seed(coordinates, global_seed))
        distance = coordinates.distance_from_origin()

        sector_type = self._roll_type(rng, distance)
        difficulty = min(self.MAX_DIFFICULTY, math.floor(distance / 2) + rng.below(3))
        resources = self._roll_resources(rng, sector_type)
        hazards = self._roll_hazards(rng, sector_type, distance)
        events = self._roll_events(rng, sector_type, distance, coordinates)
        hostility = self._roll_hostility(rng, sector_type, distance)
        star_density = rng.uniform(*self.STAR_DENSITY_RANGE)
        nebula = self._roll_nebula(rng) if sector_type is SectorType.NEBULA else None
        anomalies = self._roll_anomalies(rng, sector_type, coordinates)

        sector = Sector(
            coordinates=coordinates,
            type=sector_type,
            difficulty=difficulty,
            resources=resources,
            hostility=hostility,
            star_density=star_density,
            hazards=tuple(hazards),
            events=tuple(events),
            anomalies=tuple(anomalies),
            nebula=nebula,
        )
        self._log.debug(
            "Generated sector %s (%s) difficulty=%d hostility=%d hazards=%d events=%d anomalies=%d draws=%d",
            sector.id,
            sector_type.value,
            difficulty,
            hostility,
            len(hazards),
            len(events),
            len(anomalies),
            rng.draws,
        )
        return sector

    def _roll_type(self, rng: SeededRandom, distance: float) -> SectorType:
        return pick_weighted(type_weights(distance), rng.random())

    def _roll_resources(self, rng: SeededRandom, sector_type: SectorType) -> SectorResources:
        amounts = {"minerals": 0, "energy": 0, "technology": 0, "salvage": 0}
        yields = for_sector(RESOURCE_YIELDS, sector_type, "RESOURCE_YIELDS")
        if yields:
            for entry in yields:
                amounts[entry.resource] = entry.base + rng.below(entry.spread)
        else:
            for entry in INCIDENTAL_RESOURCES:
                if rng.chance(entry.chance):
                    amounts[entry.resource] = rng.below(entry.spread)
        return SectorResources(**amounts)

    def _roll_hazards(self, rng: SeededRandom, sector_type: SectorType, distance: float) -> List[Hazard]:
        chance = min(self.HAZARD_CHANCE_CAP, distance * self.HAZARD_CHANCE_PER_DISTANCE + self.HAZARD_CHANCE_BASE)
        if not rng.chance(chance):
            return []
        pool = for_sector(HAZARD_POOLS, sector_type, "HAZARD_POOLS")
        if not pool:
            return []
        hazard_type = rng.choice(pool)
        intensity = min(self.HAZARD_MAX_INTENSITY, math.floor(distance / 3) + rng.below(3) + 1)
        base_duration, spread = self.HAZARD_DURATION_MS
        duration_ms = base_duration + rng.below(spread)
        position = None
        if rng.chance(self.HAZARD_LOCALIZED_CHANCE):
            width, height = self.play_field
            position = Vector2(rng.random() * width, rng.random() * height)
        return [Hazard(type=hazard_type, intensity=intensity, duration_ms=duration_ms, position=position)]

    def _roll_events(
        self,
        rng: SeededRandom,
        sector_type: SectorType,
        distance: float,
        coordinates: Coordinate,
    ) -> List[Event]:
        # The origin stays quiet so a new game does not open on an event.
        base_chance = self.EVENT_CHANCE_ORIGIN if distance == 0 else self.EVENT_CHANCE_BASE
        chance = min(self.EVENT_CHANCE_CAP, distance * self.EVENT_CHANCE_PER_DISTANCE + base_chance)
        if not rng.chance(chance):
            return []
        pool = for_sector(EVENT_POOLS, sector_type, "EVENT_POOLS")
        if not pool:
            return []
        event_type = rng.choice(pool)
        return [self._build_event(rng, event_type, distance, coordinates, index=0)]

    def _build_event(
        self,
        rng: SeededRandom,
        event_type: EventType,
        distance: float,
        coordinates: Coordinate,
        index: int,
    ) -> Event:
        event_id = f"event_{coordinates.key}_{index}_{rng.below(self.ID_TOKEN_RANGE):04d}"
        priority = rng.below(self.EVENT_PRIORITY_LEVELS)
        builder = _EVENT_TEMPLATES.get(event_type, _generic_event)
        return builder(rng, event_id, event_type, priority, distance)

    def _roll_hostility(self, rng: SeededRandom, sector_type: SectorType, distance: float) -> int:
        base = for_sector(BASE_HOSTILITY, sector_type, "BASE_HOSTILITY")
        variation = rng.below(3) - 1
        return max(0, min(self.MAX_HOSTILITY, base + math.floor(distance / 3) + variation))

    def _roll_nebula(self, rng: SeededRandom) -> NebulaData:
        return NebulaData(
            kind=rng.choice(NEBULA_KINDS),
            color=rng.choice(NEBULA_COLORS),
            density=rng.uniform(*self.NEBULA_DENSITY_RANGE),
            energy_effect=(rng.random() - 0.5) * 2.0,
        )

    def _roll_anomalies(self, rng: SeededRandom, sector_type: SectorType, coordinates: Coordinate) -> List[Anomaly]:
        if not rng.chance(for_sector(ANOMALY_CHANCE, sector_type, "ANOMALY_CHANCE")):
            return []
        anomaly_type = rng.choice(ANOMALY_TYPES)
        anomaly_id = f"anomaly_{coordinates.key}_0_{rng.below(self.ID_TOKEN_RANGE):04d}"
        width, height = self.play_field
        margin = self.ANOMALY_MARGIN
        position = Vector2(
            margin + rng.random() * (width - 2.0 * margin),
            margin + rng.random() * (height - 2.0 * margin),
        )
        return [
            Anomaly(
                id=anomaly_id,
                type=anomaly_type,
                position=position,
                radius=rng.uniform(*self.ANOMALY_RADIUS_RANGE),
                effect=anomaly_effect(anomaly_type),
            )
        ]


def _discovery_event(rng: SeededRandom, event_id: str, event_type: EventType, priority: int, distance: float) -> Event:
    rewards = [Reward(RewardKind.EXPERIENCE, 10 + math.floor(distance * 2), "Scientific discovery")]
    if rng.chance(0.4):
        rewards.append(Reward(RewardKind.TECHNOLOGY, 1 + rng.below(3), "Advanced technology fragment"))
    return Event(
        id=event_id,
        type=event_type,
        priority=priority,
        description="Long-range sensors detect an unusual energy signature nearby.",
        conditions=(Condition(ConditionKind.RANDOM_CHANCE, "<", 0.25),),
        rewards=tuple(rewards),
    )


def _merchant_event(rng: SeededRandom, event_id: str, event_type: EventType, priority: int, distance: float) -> Event:
    return Event(
        id=event_id,
        type=event_type,
        priority=priority,
        description="A merchant vessel offers to trade resources for credits.",
        choices=(
            Choice(
                id="trade_accept",
                text="Accept trade offer",
                rewards=(Reward(RewardKind.POWERUP, 1, "Weapon upgrade"),),
                consequences=(Consequence(ConsequenceKind.RESOURCE_LOSS, 50, "Credits spent"),),
                success_chance=1.0,
            ),
            Choice(id="trade_decline", text="Decline and continue", success_chance=1.0),
        ),
    )


def _ambush_event(rng: SeededRandom, event_id: str, event_type: EventType, priority: int, distance: float) -> Event:
    return Event(
        id=event_id,
        type=event_type,
        priority=priority,
        description="Warning! Multiple hostile signatures detected - it's a trap!",
        rewards=(Reward(RewardKind.CREDITS, 100 + math.floor(distance * 20), "Combat bonus"),),
        consequences=(Consequence(ConsequenceKind.ENEMY_SPAWN, 3 + math.floor(distance / 2), "Ambush fleet"),),
    )


def _derelict_event(rng: SeededRandom, event_id: str, event_type: EventType, priority: int, distance: float) -> Event:
    salvage = Reward(RewardKind.CREDITS, 50 + rng.below(200), "Salvaged materials")
    trap: Tuple[Consequence, ...] = ()
    if rng.chance(0.3):
        trap = (Consequence(ConsequenceKind.DAMAGE, 1, "Booby trap damage"),)
    return Event(
        id=event_id,
        type=event_type,
        priority=priority,
        description="Sensors detect a derelict vessel floating in space.",
        choices=(
            Choice(
                id="investigate",
                text="Board and investigate",
                rewards=(salvage,),
                consequences=trap,
                success_chance=0.7,
            ),
            Choice(
                id="scan_only",
                text="Scan from safe distance",
                rewards=(Reward(RewardKind.MAP_DATA, 1, "Navigation data"),),
                success_chance=1.0,
            ),
        ),
    )


def _anomaly_event(rng: SeededRandom, event_id: str, event_type: EventType, priority: int, distance: float) -> Event:
    consequences: Tuple[Consequence, ...] = ()
    if rng.chance(0.6):
        consequences = (Consequence(ConsequenceKind.HAZARD_ADD, 1, "Temporal distortion field"),)
    return Event(
        id=event_id,
        type=event_type,
        priority=priority,
        description="Space-time readings are off the charts - there's something strange here.",
        rewards=(Reward(RewardKind.EXPERIENCE, 20 + math.floor(distance * 3), "Scientific analysis"),),
        consequences=consequences,
    )


def _generic_event(rng: SeededRandom, event_id: str, event_type: EventType, priority: int, distance: float) -> Event:
    return Event(
        id=event_id,
        type=event_type,
        priority=priority,
        description="Something interesting happens in this sector.",
        rewards=(Reward(RewardKind.EXPERIENCE, 5 + math.floor(distance), "Exploration bonus"),),
    )


_EVENT_TEMPLATES = {
    EventType.DISCOVERY: _discovery_event,
    EventType.MERCHANT: _merchant_event,
    EventType.AMBUSH: _ambush_event,
    EventType.DERELICT: _derelict_event,
    EventType.ANOMALY: _anomaly_event,
}

_default_generator = SectorGenerator()


def generate_sector(coordinates: Coordinate, global_seed: int = 0) -> Sector:
    return _default_generator.generate(coordinates, global_seed)


__all__ = ["SectorGenerator", "generate_sector"]
