"""Sector data structures.

All records are frozen: the generator builds them once and every later
change (exploring a sector, firing an event, discovering an anomaly) is a
copy with ``dataclasses.replace``. ``to_dict``/``from_dict`` keep every
flag so a saved map can be restored exactly.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from math import hypot
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from pygame.math import Vector2

from frontier.world.content import (
    AnomalyEffect,
    AnomalyType,
    EventType,
    HazardType,
    NebulaKind,
    SectorType,
    coerce,
    sector_name,
)


class RewardKind(str, Enum):
    CREDITS = "credits"
    HEALTH = "health"
    WEAPONS = "weapons"
    POWERUP = "powerup"
    EXPERIENCE = "experience"
    TECHNOLOGY = "technology"
    MAP_DATA = "map_data"


class ConsequenceKind(str, Enum):
    DAMAGE = "damage"
    WEAPON_LOSS = "weapon_loss"
    RESOURCE_LOSS = "resource_loss"
    ENEMY_SPAWN = "enemy_spawn"
    HAZARD_ADD = "hazard_add"


class ConditionKind(str, Enum):
    PLAYER_HEALTH = "player_health"
    PLAYER_SCORE = "player_score"
    SECTOR_TYPE = "sector_type"
    RANDOM_CHANCE = "random_chance"
    RESOURCES = "resources"
    WEAPONS = "weapons"


OPERATORS: Tuple[str, ...] = (">", "<", "=", ">=", "<=")


@dataclass(frozen=True, order=True)
class Coordinate:
    """Grid cell address; ``key`` is the canonical ``"x,y"`` identifier."""

    x: int
    y: int

    @property
    def key(self) -> str:
        return f"{self.x},{self.y}"

    @classmethod
    def from_key(cls, key: str) -> "Coordinate":
        try:
            x_text, y_text = key.split(",")
            return cls(int(x_text), int(y_text))
        except ValueError as exc:
            raise ValueError(f"Invalid sector key {key!r}") from exc

    def distance_from_origin(self) -> float:
        return hypot(self.x, self.y)

    def offset(self, dx: int, dy: int) -> "Coordinate":
        return Coordinate(self.x + dx, self.y + dy)

    def manhattan(self, other: "Coordinate") -> int:
        return abs(self.x - other.x) + abs(self.y - other.y)

    def chebyshev(self, other: "Coordinate") -> int:
        return max(abs(self.x - other.x), abs(self.y - other.y))


@dataclass(frozen=True)
class SectorResources:
    minerals: int = 0
    energy: int = 0
    technology: int = 0
    salvage: int = 0

    def total(self) -> int:
        return self.minerals + self.energy + self.technology + self.salvage

    def to_dict(self) -> Dict[str, int]:
        return {
            "minerals": self.minerals,
            "energy": self.energy,
            "technology": self.technology,
            "salvage": self.salvage,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SectorResources":
        return cls(
            minerals=max(0, int(data.get("minerals", 0))),
            energy=max(0, int(data.get("energy", 0))),
            technology=max(0, int(data.get("technology", 0))),
            salvage=max(0, int(data.get("salvage", 0))),
        )


@dataclass(frozen=True)
class Hazard:
    type: HazardType
    intensity: int
    duration_ms: int
    position: Optional[Vector2] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "intensity": self.intensity,
            "duration_ms": self.duration_ms,
            "position": _vector_to_list(self.position),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Hazard":
        return cls(
            type=coerce(HazardType, data["type"], HazardType.RADIATION),
            intensity=int(data.get("intensity", 1)),
            duration_ms=int(data.get("duration_ms", 0)),
            position=_vector_from_list(data.get("position")),
        )


@dataclass(frozen=True)
class Reward:
    kind: RewardKind
    amount: int
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "amount": self.amount, "description": self.description}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Reward":
        return cls(
            kind=RewardKind(data["kind"]),
            amount=int(data.get("amount", 0)),
            description=str(data.get("description", "")),
        )


@dataclass(frozen=True)
class Consequence:
    kind: ConsequenceKind
    amount: int
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "amount": self.amount, "description": self.description}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Consequence":
        return cls(
            kind=ConsequenceKind(data["kind"]),
            amount=int(data.get("amount", 0)),
            description=str(data.get("description", "")),
        )


@dataclass(frozen=True)
class Condition:
    kind: ConditionKind
    operator: str
    value: Union[float, str]

    def __post_init__(self) -> None:
        if self.operator not in OPERATORS:
            raise ValueError(f"Unsupported condition operator {self.operator!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "operator": self.operator, "value": self.value}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Condition":
        return cls(
            kind=ConditionKind(data["kind"]),
            operator=str(data.get("operator", "=")),
            value=data["value"],
        )


@dataclass(frozen=True)
class Choice:
    id: str
    text: str
    rewards: Tuple[Reward, ...] = ()
    consequences: Tuple[Consequence, ...] = ()
    success_chance: float = 1.0
    requirements: Tuple[Condition, ...] = ()

    def __post_init__(self) -> None:
        if not 0.0 <= self.success_chance <= 1.0:
            raise ValueError(f"Choice {self.id!r} success chance {self.success_chance} outside [0, 1]")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "rewards": [reward.to_dict() for reward in self.rewards],
            "consequences": [consequence.to_dict() for consequence in self.consequences],
            "success_chance": self.success_chance,
            "requirements": [condition.to_dict() for condition in self.requirements],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Choice":
        return cls(
            id=str(data["id"]),
            text=str(data.get("text", data["id"])),
            rewards=tuple(Reward.from_dict(entry) for entry in data.get("rewards", [])),
            consequences=tuple(Consequence.from_dict(entry) for entry in data.get("consequences", [])),
            success_chance=float(data.get("success_chance", 1.0)),
            requirements=tuple(Condition.from_dict(entry) for entry in data.get("requirements", [])),
        )


@dataclass(frozen=True)
class Event:
    """Narrative trigger attached to a sector; ``triggered`` flips at most once unless repeatable."""

    id: str
    type: EventType
    priority: int
    description: str
    conditions: Tuple[Condition, ...] = ()
    rewards: Tuple[Reward, ...] = ()
    consequences: Tuple[Consequence, ...] = ()
    choices: Optional[Tuple[Choice, ...]] = None
    triggered: bool = False
    repeatable: bool = False

    @property
    def available(self) -> bool:
        return self.repeatable or not self.triggered

    def choice(self, choice_id: str) -> Optional[Choice]:
        for choice in self.choices or ():
            if choice.id == choice_id:
                return choice
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "priority": self.priority,
            "description": self.description,
            "conditions": [condition.to_dict() for condition in self.conditions],
            "rewards": [reward.to_dict() for reward in self.rewards],
            "consequences": [consequence.to_dict() for consequence in self.consequences],
            "choices": None if self.choices is None else [choice.to_dict() for choice in self.choices],
            "triggered": self.triggered,
            "repeatable": self.repeatable,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Event":
        choices = data.get("choices")
        return cls(
            id=str(data["id"]),
            type=coerce(EventType, data["type"], EventType.DISCOVERY),
            priority=int(data.get("priority", 0)),
            description=str(data.get("description", "")),
            conditions=tuple(Condition.from_dict(entry) for entry in data.get("conditions", [])),
            rewards=tuple(Reward.from_dict(entry) for entry in data.get("rewards", [])),
            consequences=tuple(Consequence.from_dict(entry) for entry in data.get("consequences", [])),
            choices=None if choices is None else tuple(Choice.from_dict(entry) for entry in choices),
            triggered=bool(data.get("triggered", False)),
            repeatable=bool(data.get("repeatable", False)),
        )


@dataclass(frozen=True)
class Anomaly:
    id: str
    type: AnomalyType
    position: Vector2
    radius: float
    effect: AnomalyEffect
    discovered: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "position": _vector_to_list(self.position),
            "radius": self.radius,
            "effect": self.effect.to_dict(),
            "discovered": self.discovered,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Anomaly":
        return cls(
            id=str(data["id"]),
            type=coerce(AnomalyType, data["type"], AnomalyType.MIRROR),
            position=_vector_from_list(data.get("position")) or Vector2(),
            radius=float(data.get("radius", 0.0)),
            effect=AnomalyEffect.from_dict(data["effect"]),
            discovered=bool(data.get("discovered", False)),
        )


@dataclass(frozen=True)
class NebulaData:
    kind: NebulaKind
    color: str
    density: float
    energy_effect: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "color": self.color,
            "density": self.density,
            "energy_effect": self.energy_effect,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NebulaData":
        return cls(
            kind=coerce(NebulaKind, data["kind"], NebulaKind.EMISSION),
            color=str(data.get("color", "#ffffff")),
            density=float(data.get("density", 0.3)),
            energy_effect=float(data.get("energy_effect", 0.0)),
        )


@dataclass(frozen=True)
class Sector:
    """One generated grid cell.

    Everything except ``discovered``/``explored`` and the flags on its
    events and anomalies is fixed when the generator creates it.
    """

    coordinates: Coordinate
    type: SectorType
    difficulty: int
    resources: SectorResources
    hostility: int
    star_density: float
    hazards: Tuple[Hazard, ...] = ()
    events: Tuple[Event, ...] = ()
    anomalies: Tuple[Anomaly, ...] = ()
    nebula: Optional[NebulaData] = None
    discovered: bool = False
    explored: bool = False

    @property
    def id(self) -> str:
        return self.coordinates.key

    @property
    def name(self) -> str:
        return sector_name(self.type, self.coordinates.x, self.coordinates.y)

    def event(self, event_id: str) -> Optional[Event]:
        return next((event for event in self.events if event.id == event_id), None)

    def anomaly(self, anomaly_id: str) -> Optional[Anomaly]:
        return next((anomaly for anomaly in self.anomalies if anomaly.id == anomaly_id), None)

    def has_pending_events(self) -> bool:
        return any(not event.triggered for event in self.events)

    def with_event(self, event: Event) -> "Sector":
        return replace(self, events=tuple(event if existing.id == event.id else existing for existing in self.events))

    def with_anomaly(self, anomaly: Anomaly) -> "Sector":
        return replace(
            self,
            anomalies=tuple(anomaly if existing.id == anomaly.id else existing for existing in self.anomalies),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "coordinates": [self.coordinates.x, self.coordinates.y],
            "type": self.type.value,
            "difficulty": self.difficulty,
            "resources": self.resources.to_dict(),
            "hazards": [hazard.to_dict() for hazard in self.hazards],
            "events": [event.to_dict() for event in self.events],
            "hostility": self.hostility,
            "star_density": self.star_density,
            "nebula": None if self.nebula is None else self.nebula.to_dict(),
            "anomalies": [anomaly.to_dict() for anomaly in self.anomalies],
            "discovered": self.discovered,
            "explored": self.explored,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Sector":
        try:
            x, y = data["coordinates"]
            nebula = data.get("nebula")
            return cls(
                coordinates=Coordinate(int(x), int(y)),
                type=coerce(SectorType, data["type"], SectorType.EMPTY),
                difficulty=_clamp(int(data.get("difficulty", 0)), 0, 10),
                resources=SectorResources.from_dict(data.get("resources", {})),
                hostility=_clamp(int(data.get("hostility", 0)), 0, 10),
                star_density=float(data.get("star_density", 0.3)),
                hazards=tuple(Hazard.from_dict(entry) for entry in data.get("hazards", [])),
                events=tuple(Event.from_dict(entry) for entry in data.get("events", [])),
                anomalies=tuple(Anomaly.from_dict(entry) for entry in data.get("anomalies", [])),
                nebula=None if nebula is None else NebulaData.from_dict(nebula),
                discovered=bool(data.get("discovered", False)),
                explored=bool(data.get("explored", False)),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Malformed sector record: {exc}") from exc


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def _vector_to_list(vector: Optional[Vector2]) -> Optional[list]:
    if vector is None:
        return None
    return [vector.x, vector.y]


def _vector_from_list(values: Optional[Any]) -> Optional[Vector2]:
    if values is None:
        return None
    x, y = values
    return Vector2(float(x), float(y))


__all__ = [
    "Anomaly",
    "Choice",
    "Condition",
    "ConditionKind",
    "Consequence",
    "ConsequenceKind",
    "Coordinate",
    "Event",
    "Hazard",
    "NebulaData",
    "OPERATORS",
    "Reward",
    "RewardKind",
    "Sector",
    "SectorResources",
]
