"""Timed sector effects derived from hazards, nebulae and discovered anomalies."""
from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Sequence, Union

from frontier.world.content import AnomalyEffect, AnomalyType, HazardType
from frontier.world.sector import Anomaly, Hazard, NebulaData, Sector

EffectPayload = Union[Hazard, AnomalyEffect, NebulaData]

NEBULA_SOURCE_ID = "nebula"
NEBULA_ENERGY_PER_SECOND = 5.0
NEBULA_JAMMING_DENSITY = 0.5


class EffectKind(str, Enum):
    HAZARD = "hazard"
    ANOMALY = "anomaly"
    NEBULA = "nebula"


@dataclass(frozen=True)
class SectorEffect:
    """One running effect. Nebula effects have no duration and last until replaced."""

    kind: EffectKind
    source_id: str
    payload: EffectPayload
    duration_ms: int
    time_remaining_ms: float

    @property
    def persistent(self) -> bool:
        return self.kind is EffectKind.NEBULA

    @property
    def active(self) -> bool:
        return self.persistent or self.time_remaining_ms > 0.0


@dataclass(frozen=True)
class SectorModifiers:
    """Aggregate multipliers for the caller to apply to the simulation."""

    movement_scale: float = 1.0
    world_time_scale: float = 1.0
    energy_regen_scale: float = 1.0
    energy_per_second: float = 0.0
    weapon_efficiency: float = 1.0
    damage_chance_per_ms: float = 0.0
    controls_inverted: bool = False
    sensors_jammed: bool = False


def _has_effect(effects: Iterable[SectorEffect], kind: EffectKind, source_id: str) -> bool:
    return any(effect.kind is kind and effect.source_id == source_id for effect in effects)


def activate_sector_effects(sector: Sector, active: Sequence[SectorEffect] = ()) -> List[SectorEffect]:
    """Effects running after entering ``sector``.

    Each hazard type runs at most once at a time. Nebula effects belong to
    the sector the player is in, so any previous nebula effect is dropped.
    """

    effects = [effect for effect in active if effect.kind is not EffectKind.NEBULA]
    for hazard in sector.hazards:
        if _has_effect(effects, EffectKind.HAZARD, hazard.type.value):
            continue
        effects.append(
            SectorEffect(
                kind=EffectKind.HAZARD,
                source_id=hazard.type.value,
                payload=hazard,
                duration_ms=hazard.duration_ms,
                time_remaining_ms=float(hazard.duration_ms),
            )
        )
    if sector.nebula is not None:
        effects.append(
            SectorEffect(
                kind=EffectKind.NEBULA,
                source_id=NEBULA_SOURCE_ID,
                payload=sector.nebula,
                duration_ms=0,
                time_remaining_ms=0.0,
            )
        )
    return effects


def anomaly_sector_effect(anomaly: Anomaly) -> SectorEffect:
    return SectorEffect(
        kind=EffectKind.ANOMALY,
        source_id=anomaly.type.value,
        payload=anomaly.effect,
        duration_ms=anomaly.effect.duration_ms,
        time_remaining_ms=float(anomaly.effect.duration_ms),
    )


def tick_effects(effects: Sequence[SectorEffect], dt_ms: float) -> List[SectorEffect]:
    """Advance timers by ``dt_ms`` and drop the effects that ran out."""

    ticked: List[SectorEffect] = []
    for effect in effects:
        if effect.persistent:
            ticked.append(effect)
            continue
        remaining = max(0.0, effect.time_remaining_ms - dt_ms)
        if remaining > 0.0:
            ticked.append(replace(effect, time_remaining_ms=remaining))
    return ticked


def _apply_hazard(modifiers: Dict[str, Any], hazard: Hazard) -> None:
    intensity = hazard.intensity / 5.0
    kind = hazard.type
    if kind is HazardType.RADIATION:
        modifiers["damage_chance_per_ms"] += intensity * 0.001
    elif kind is HazardType.SOLAR_FLARE:
        modifiers["damage_chance_per_ms"] += intensity * 0.0005
    elif kind is HazardType.GRAVITY:
        modifiers["movement_scale"] *= 1.0 - intensity * 0.3
    elif kind is HazardType.TEMPORAL:
        modifiers["world_time_scale"] *= 1.0 - intensity * 0.3
    elif kind is HazardType.ION_STORM:
        modifiers["energy_regen_scale"] *= 1.0 - intensity * 0.5
    elif kind is HazardType.DARK_MATTER:
        modifiers["controls_inverted"] = True
    elif kind in (HazardType.MAGNETIC, HazardType.ENERGY_STORM, HazardType.PSYCHIC):
        modifiers["weapon_efficiency"] *= 1.0 - intensity * 0.2


def _apply_anomaly(modifiers: Dict[str, Any], source_id: str, effect: AnomalyEffect) -> None:
    kind = AnomalyType(source_id)
    if kind in (AnomalyType.QUANTUM_FIELD, AnomalyType.CRYSTAL):
        modifiers["weapon_efficiency"] *= effect.magnitude
    elif kind is AnomalyType.HYPERSPACE:
        modifiers["movement_scale"] *= effect.magnitude
    elif kind is AnomalyType.ENERGY_WELL:
        modifiers["movement_scale"] *= 1.0 - effect.magnitude
    elif kind is AnomalyType.TIME_RIFT:
        modifiers["world_time_scale"] *= effect.magnitude
    elif kind is AnomalyType.DARK_ZONE:
        modifiers["sensors_jammed"] = True
    elif kind is AnomalyType.PSIONIC:
        modifiers["controls_inverted"] = True
    elif kind is AnomalyType.VOID:
        modifiers["energy_per_second"] -= effect.magnitude * NEBULA_ENERGY_PER_SECOND


def sector_modifiers(effects: Iterable[SectorEffect]) -> SectorModifiers:
    """Fold the active effects into one :class:`SectorModifiers`.

    Wormhole and mirror anomalies have no continuous modifier; the caller
    handles them when the anomaly is discovered.
    """

    modifiers = asdict(SectorModifiers())
    for effect in effects:
        if not effect.active:
            continue
        if effect.kind is EffectKind.HAZARD:
            _apply_hazard(modifiers, effect.payload)  # type: ignore[arg-type]
        elif effect.kind is EffectKind.ANOMALY:
            _apply_anomaly(modifiers, effect.source_id, effect.payload)  # type: ignore[arg-type]
        elif effect.kind is EffectKind.NEBULA:
            nebula: NebulaData = effect.payload  # type: ignore[assignment]
            modifiers["energy_per_second"] += nebula.energy_effect * NEBULA_ENERGY_PER_SECOND
            if nebula.density > NEBULA_JAMMING_DENSITY:
                modifiers["sensors_jammed"] = True
    return SectorModifiers(**modifiers)


__all__ = [
    "EffectKind",
    "SectorEffect",
    "SectorModifiers",
    "activate_sector_effects",
    "anomaly_sector_effect",
    "sector_modifiers",
    "tick_effects",
]
