"""Static content tables driving sector generation.

Every per-type table is keyed by the enums below and is checked at import
time to cover every member, so adding a sector, hazard, event or anomaly
type without filling in its tables fails loudly instead of at generation
time. Lookups for a value that is not in a table fall back to the
``empty`` sector entry.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Mapping, Tuple, Type, TypeVar

from frontier.engine.logger import fallback_channel

E = TypeVar("E", bound=Enum)
V = TypeVar("V")

_log = fallback_channel("generation")


class SectorType(str, Enum):
    EMPTY = "empty"
    ASTEROID = "asteroid"
    NEBULA = "nebula"
    DEBRIS = "debris"
    PATROL = "patrol"
    TRADING = "trading"
    RESEARCH = "research"
    PIRATE = "pirate"
    ANCIENT = "ancient"
    UNSTABLE = "unstable"


class HazardType(str, Enum):
    ASTEROIDS = "asteroids"
    RADIATION = "radiation"
    GRAVITY = "gravity"
    MAGNETIC = "magnetic"
    ENERGY_STORM = "energy_storm"
    ION_STORM = "ion_storm"
    SOLAR_FLARE = "solar_flare"
    DARK_MATTER = "dark_matter"
    TEMPORAL = "temporal"
    PSYCHIC = "psychic"


class EventType(str, Enum):
    ENCOUNTER = "encounter"
    DISCOVERY = "discovery"
    DISTRESS = "distress"
    MERCHANT = "merchant"
    AMBUSH = "ambush"
    ANOMALY = "anomaly"
    DERELICT = "derelict"
    PATROL = "patrol"
    PIRATES = "pirates"
    ALIENS = "aliens"
    TREASURE = "treasure"
    TRAP = "trap"


class AnomalyType(str, Enum):
    WORMHOLE = "wormhole"
    TIME_RIFT = "time_rift"
    ENERGY_WELL = "energy_well"
    QUANTUM_FIELD = "quantum_field"
    DARK_ZONE = "dark_zone"
    HYPERSPACE = "hyperspace"
    MIRROR = "mirror"
    VOID = "void"
    CRYSTAL = "crystal"
    PSIONIC = "psionic"


class NebulaKind(str, Enum):
    EMISSION = "emission"
    REFLECTION = "reflection"
    DARK = "dark"
    PLASMA = "plasma"


class EffectCategory(str, Enum):
    BENEFICIAL = "beneficial"
    NEUTRAL = "neutral"
    HARMFUL = "harmful"


@dataclass(frozen=True)
class AnomalyEffect:
    """Typed effect handed to the caller when an anomaly is discovered."""

    category: EffectCategory
    magnitude: float
    duration_ms: int
    description: str

    def to_dict(self) -> Dict[str, object]:
        return {
            "category": self.category.value,
            "magnitude": self.magnitude,
            "duration_ms": self.duration_ms,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> "AnomalyEffect":
        return cls(
            category=EffectCategory(data["category"]),
            magnitude=float(data.get("magnitude", 0.0)),
            duration_ms=int(data.get("duration_ms", 0)),
            description=str(data.get("description", "")),
        )


@dataclass(frozen=True)
class ResourceRange:
    """``base + floor(draw * spread)`` units of one resource."""

    resource: str
    base: int
    spread: int


@dataclass(frozen=True)
class IncidentalResource:
    """Small chance of a few stray units in sectors without a dedicated yield."""

    resource: str
    chance: float
    spread: int


RESOURCE_NAMES: Tuple[str, ...] = ("minerals", "energy", "technology", "salvage")

NAME_PREFIXES: Dict[SectorType, Tuple[str, ...]] = {
    SectorType.EMPTY: ("Void", "Deep", "Silent", "Distant", "Cold"),
    SectorType.ASTEROID: ("Rocky", "Mineral", "Boulder", "Debris", "Crater"),
    SectorType.NEBULA: ("Misty", "Glowing", "Ethereal", "Cosmic", "Radiant"),
    SectorType.DEBRIS: ("Wreck", "Graveyard", "Salvage", "Ruin", "Bones"),
    SectorType.PATROL: ("Guardian", "Watch", "Sentinel", "Fortress", "Shield"),
    SectorType.TRADING: ("Market", "Commerce", "Trade", "Exchange", "Haven"),
    SectorType.RESEARCH: ("Science", "Study", "Discovery", "Lab", "Research"),
    SectorType.PIRATE: ("Raider", "Outlaw", "Rogue", "Bandit", "Crimson"),
    SectorType.ANCIENT: ("Ancient", "Forgotten", "Lost", "Mysterious", "Primordial"),
    SectorType.UNSTABLE: ("Chaos", "Flux", "Unstable", "Shifting", "Anomalous"),
}

NAME_SUFFIXES: Tuple[str, ...] = ("Sector", "Zone", "Region", "Quadrant", "System", "Space", "Field", "Expanse")

# (exclusive upper distance, cumulative weights). The first entry whose
# cumulative weight exceeds the draw wins; the last weight is always 1.0.
TYPE_BANDS: Tuple[Tuple[float, Tuple[Tuple[float, SectorType], ...]], ...] = (
    (
        3.0,
        (
            (0.4, SectorType.EMPTY),
            (0.6, SectorType.ASTEROID),
            (0.8, SectorType.TRADING),
            (1.0, SectorType.RESEARCH),
        ),
    ),
    (
        10.0,
        (
            (0.2, SectorType.EMPTY),
            (0.35, SectorType.ASTEROID),
            (0.45, SectorType.NEBULA),
            (0.55, SectorType.DEBRIS),
            (0.7, SectorType.PATROL),
            (0.8, SectorType.TRADING),
            (0.9, SectorType.RESEARCH),
            (1.0, SectorType.PIRATE),
        ),
    ),
    (
        math.inf,
        (
            (0.1, SectorType.EMPTY),
            (0.2, SectorType.ASTEROID),
            (0.3, SectorType.NEBULA),
            (0.4, SectorType.DEBRIS),
            (0.5, SectorType.PATROL),
            (0.6, SectorType.PIRATE),
            (0.7, SectorType.ANCIENT),
            (0.85, SectorType.UNSTABLE),
            (1.0, SectorType.RESEARCH),
        ),
    ),
)

RESOURCE_YIELDS: Dict[SectorType, Tuple[ResourceRange, ...]] = {
    SectorType.EMPTY: (),
    SectorType.ASTEROID: (ResourceRange("minerals", 5, 10),),
    SectorType.NEBULA: (ResourceRange("energy", 3, 8),),
    SectorType.DEBRIS: (ResourceRange("salvage", 4, 12),),
    SectorType.PATROL: (),
    SectorType.TRADING: (),
    SectorType.RESEARCH: (ResourceRange("technology", 3, 7),),
    SectorType.PIRATE: (),
    SectorType.ANCIENT: (ResourceRange("technology", 8, 15), ResourceRange("energy", 2, 5)),
    SectorType.UNSTABLE: (),
}

INCIDENTAL_RESOURCES: Tuple[IncidentalResource, ...] = (
    IncidentalResource("minerals", 0.3, 3),
    IncidentalResource("energy", 0.3, 3),
    IncidentalResource("technology", 0.2, 2),
    IncidentalResource("salvage", 0.2, 3),
)

HAZARD_POOLS: Dict[SectorType, Tuple[HazardType, ...]] = {
    SectorType.EMPTY: (HazardType.RADIATION, HazardType.DARK_MATTER),
    SectorType.ASTEROID: (HazardType.ASTEROIDS, HazardType.GRAVITY),
    SectorType.NEBULA: (HazardType.ENERGY_STORM, HazardType.ION_STORM),
    SectorType.DEBRIS: (HazardType.MAGNETIC, HazardType.RADIATION),
    SectorType.PATROL: (HazardType.ION_STORM,),
    SectorType.TRADING: (),
    SectorType.RESEARCH: (HazardType.TEMPORAL, HazardType.PSYCHIC),
    SectorType.PIRATE: (HazardType.MAGNETIC, HazardType.SOLAR_FLARE),
    SectorType.ANCIENT: (HazardType.PSYCHIC, HazardType.TEMPORAL, HazardType.DARK_MATTER),
    SectorType.UNSTABLE: (HazardType.TEMPORAL, HazardType.GRAVITY, HazardType.DARK_MATTER, HazardType.ENERGY_STORM),
}

EVENT_POOLS: Dict[SectorType, Tuple[EventType, ...]] = {
    SectorType.EMPTY: (EventType.DISCOVERY, EventType.ANOMALY),
    SectorType.ASTEROID: (EventType.DISCOVERY, EventType.ENCOUNTER, EventType.TRAP),
    SectorType.NEBULA: (EventType.ANOMALY, EventType.DISCOVERY, EventType.ALIENS),
    SectorType.DEBRIS: (EventType.DERELICT, EventType.DISCOVERY, EventType.TREASURE),
    SectorType.PATROL: (EventType.PATROL, EventType.ENCOUNTER),
    SectorType.TRADING: (EventType.MERCHANT, EventType.ENCOUNTER),
    SectorType.RESEARCH: (EventType.DISCOVERY, EventType.ENCOUNTER, EventType.ANOMALY),
    SectorType.PIRATE: (EventType.PIRATES, EventType.AMBUSH, EventType.TREASURE),
    SectorType.ANCIENT: (EventType.ALIENS, EventType.DISCOVERY, EventType.ANOMALY, EventType.TREASURE),
    SectorType.UNSTABLE: (EventType.ANOMALY, EventType.TRAP, EventType.DISCOVERY),
}

BASE_HOSTILITY: Dict[SectorType, int] = {
    SectorType.EMPTY: 1,
    SectorType.ASTEROID: 2,
    SectorType.NEBULA: 2,
    SectorType.DEBRIS: 3,
    SectorType.PATROL: 6,
    SectorType.TRADING: 1,
    SectorType.RESEARCH: 2,
    SectorType.PIRATE: 8,
    SectorType.ANCIENT: 4,
    SectorType.UNSTABLE: 5,
}

ANOMALY_CHANCE: Dict[SectorType, float] = {
    SectorType.EMPTY: 0.1,
    SectorType.ASTEROID: 0.15,
    SectorType.NEBULA: 0.3,
    SectorType.DEBRIS: 0.2,
    SectorType.PATROL: 0.05,
    SectorType.TRADING: 0.05,
    SectorType.RESEARCH: 0.4,
    SectorType.PIRATE: 0.1,
    SectorType.ANCIENT: 0.6,
    SectorType.UNSTABLE: 0.8,
}

ANOMALY_EFFECTS: Dict[AnomalyType, AnomalyEffect] = {
    AnomalyType.WORMHOLE: AnomalyEffect(EffectCategory.BENEFICIAL, 1.0, 0, "Instant travel to distant sector"),
    AnomalyType.TIME_RIFT: AnomalyEffect(EffectCategory.NEUTRAL, 0.5, 10000, "Time moves differently here"),
    AnomalyType.ENERGY_WELL: AnomalyEffect(EffectCategory.HARMFUL, 0.3, 8000, "Gravitational anomaly affects movement"),
    AnomalyType.QUANTUM_FIELD: AnomalyEffect(
        EffectCategory.BENEFICIAL, 1.5, 15000, "Weapons operate with enhanced efficiency"
    ),
    AnomalyType.DARK_ZONE: AnomalyEffect(EffectCategory.HARMFUL, 0.8, 12000, "Sensors and targeting systems compromised"),
    AnomalyType.HYPERSPACE: AnomalyEffect(EffectCategory.BENEFICIAL, 2.0, 10000, "Enhanced propulsion systems"),
    AnomalyType.MIRROR: AnomalyEffect(EffectCategory.NEUTRAL, 1.0, 0, "Reality seems duplicated"),
    AnomalyType.VOID: AnomalyEffect(EffectCategory.HARMFUL, 0.1, 20000, "Energy slowly drains away"),
    AnomalyType.CRYSTAL: AnomalyEffect(EffectCategory.BENEFICIAL, 1.3, 12000, "Technology systems enhanced"),
    AnomalyType.PSIONIC: AnomalyEffect(
        EffectCategory.HARMFUL, 0.7, 8000, "Mental interference affects control systems"
    ),
}

NEBULA_KINDS: Tuple[NebulaKind, ...] = tuple(NebulaKind)
NEBULA_COLORS: Tuple[str, ...] = ("#ff6b6b", "#4ecdc4", "#45b7d1", "#96ceb4", "#feca57", "#ff9ff3", "#a8e6cf")
ANOMALY_TYPES: Tuple[AnomalyType, ...] = tuple(AnomalyType)


def _require_complete(table: Mapping[E, object], members: Iterable[E], table_name: str) -> None:
    missing = [member.value for member in members if member not in table]
    if missing:
        raise RuntimeError(f"{table_name} has no entry for: {', '.join(missing)}")


for _table, _name in (
    (NAME_PREFIXES, "NAME_PREFIXES"),
    (RESOURCE_YIELDS, "RESOURCE_YIELDS"),
    (HAZARD_POOLS, "HAZARD_POOLS"),
    (EVENT_POOLS, "EVENT_POOLS"),
    (BASE_HOSTILITY, "BASE_HOSTILITY"),
    (ANOMALY_CHANCE, "ANOMALY_CHANCE"),
):
    _require_complete(_table, SectorType, _name)
_require_complete(ANOMALY_EFFECTS, AnomalyType, "ANOMALY_EFFECTS")
for _limit, _weights in TYPE_BANDS:
    if _weights[-1][0] != 1.0:
        raise RuntimeError(f"Sector type band below {_limit} does not end at weight 1.0")


def coerce(enum_type: Type[E], value: object, fallback: E) -> E:
    """Parse ``value`` as ``enum_type``, logging and returning ``fallback`` when it is unknown."""

    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(value)
    except ValueError:
        _log.warning("Unknown %s %r; using %s", enum_type.__name__, value, fallback.value)
        return fallback


def for_sector(table: Mapping[SectorType, V], sector_type: object, table_name: str) -> V:
    """Table entry for ``sector_type``; out-of-table types use the ``empty`` entry."""

    try:
        return table[sector_type]  # type: ignore[index]
    except (KeyError, TypeError):
        _log.warning("%s has no entry for %r; using empty", table_name, sector_type)
        return table[SectorType.EMPTY]


def type_weights(distance: float) -> Tuple[Tuple[float, SectorType], ...]:
    for limit, weights in TYPE_BANDS:
        if distance < limit:
            return weights
    return TYPE_BANDS[-1][1]


def pick_weighted(weights: Tuple[Tuple[float, SectorType], ...], roll: float) -> SectorType:
    for threshold, sector_type in weights:
        if roll < threshold:
            return sector_type
    return weights[-1][1]


def anomaly_effect(anomaly_type: object) -> AnomalyEffect:
    try:
        return ANOMALY_EFFECTS[anomaly_type]  # type: ignore[index]
    except (KeyError, TypeError):
        _log.warning("No effect for anomaly %r; using mirror", anomaly_type)
        return ANOMALY_EFFECTS[AnomalyType.MIRROR]


def sector_name(sector_type: SectorType, x: int, y: int) -> str:
    """Display name derived from the type and the coordinate alone."""

    prefixes = for_sector(NAME_PREFIXES, sector_type, "NAME_PREFIXES")
    number = abs(x * 13 + y * 17) % 999 + 1
    prefix = prefixes[abs(x * 7 + y * 3) % len(prefixes)]
    suffix = NAME_SUFFIXES[abs(x * 5 + y * 11) % len(NAME_SUFFIXES)]
    return f"{prefix} {suffix} {number:03d}"


__all__ = [
    "ANOMALY_CHANCE",
    "ANOMALY_EFFECTS",
    "ANOMALY_TYPES",
    "AnomalyEffect",
    "AnomalyType",
    "BASE_HOSTILITY",
    "EVENT_POOLS",
    "EffectCategory",
    "EventType",
    "HAZARD_POOLS",
    "HazardType",
    "INCIDENTAL_RESOURCES",
    "IncidentalResource",
    "NAME_PREFIXES",
    "NAME_SUFFIXES",
    "NEBULA_COLORS",
    "NEBULA_KINDS",
    "NebulaKind",
    "RESOURCE_NAMES",
    "RESOURCE_YIELDS",
    "ResourceRange",
    "SectorType",
    "TYPE_BANDS",
    "anomaly_effect",
    "coerce",
    "for_sector",
    "pick_weighted",
    "sector_name",
    "type_weights",
]
