import pytest
from pygame.math import Vector2

from frontier.world.content import AnomalyType, HazardType, NebulaKind, SectorType, anomaly_effect
from frontier.world.effects import (
    EffectKind,
    activate_sector_effects,
    anomaly_sector_effect,
    sector_modifiers,
    tick_effects,
)
from frontier.world.sector import Anomaly, Coordinate, Hazard, NebulaData, Sector, SectorResources


def make_sector(hazards=(), nebula=None) -> Sector:
    return Sector(
        coordinates=Coordinate(4, 2),
        type=SectorType.NEBULA if nebula else SectorType.ASTEROID,
        difficulty=3,
        resources=SectorResources(),
        hostility=2,
        star_density=0.6,
        hazards=tuple(hazards),
        nebula=nebula,
    )


def test_one_effect_per_hazard_type():
    hazards = [
        Hazard(HazardType.GRAVITY, 3, 6000),
        Hazard(HazardType.GRAVITY, 5, 9000, Vector2(10.0, 20.0)),
        Hazard(HazardType.RADIATION, 2, 7000),
    ]
    effects = activate_sector_effects(make_sector(hazards))
    assert [effect.source_id for effect in effects] == ["gravity", "radiation"]
    again = activate_sector_effects(make_sector(hazards), effects)
    assert len(again) == 2


def test_entering_a_new_sector_replaces_the_nebula():
    first = NebulaData(NebulaKind.EMISSION, "#ff6b6b", 0.8, 0.5)
    second = NebulaData(NebulaKind.DARK, "#45b7d1", 0.4, -0.5)
    effects = activate_sector_effects(make_sector(nebula=first))
    effects = activate_sector_effects(make_sector(nebula=second), effects)
    nebulae = [effect for effect in effects if effect.kind is EffectKind.NEBULA]
    assert len(nebulae) == 1
    assert nebulae[0].payload is second
    assert activate_sector_effects(make_sector(), effects) == []


def test_tick_expires_timed_effects():
    nebula = NebulaData(NebulaKind.PLASMA, "#feca57", 0.5, 0.0)
    effects = activate_sector_effects(make_sector([Hazard(HazardType.ION_STORM, 2, 5000)], nebula))
    effects = tick_effects(effects, 4000)
    hazard = next(effect for effect in effects if effect.kind is EffectKind.HAZARD)
    assert hazard.time_remaining_ms == pytest.approx(1000.0)
    effects = tick_effects(effects, 1000)
    assert [effect.kind for effect in effects] == [EffectKind.NEBULA]
    assert tick_effects(effects, 1e9) == effects


def test_modifiers_fold_active_effects():
    nebula = NebulaData(NebulaKind.EMISSION, "#96ceb4", 0.8, 0.5)
    effects = activate_sector_effects(make_sector([Hazard(HazardType.GRAVITY, 5, 5000)], nebula))
    anomaly = Anomaly(
        id="anomaly_4,2_0_0001",
        type=AnomalyType.QUANTUM_FIELD,
        position=Vector2(300.0, 300.0),
        radius=50.0,
        effect=anomaly_effect(AnomalyType.QUANTUM_FIELD),
    )
    effects.append(anomaly_sector_effect(anomaly))
    modifiers = sector_modifiers(effects)
    assert modifiers.movement_scale == pytest.approx(0.7)
    assert modifiers.energy_per_second == pytest.approx(2.5)
    assert modifiers.weapon_efficiency == pytest.approx(1.5)
    assert modifiers.sensors_jammed
    assert not modifiers.controls_inverted


def test_no_effects_means_neutral_modifiers():
    modifiers = sector_modifiers([])
    assert modifiers.movement_scale == 1.0
    assert modifiers.damage_chance_per_ms == 0.0
    assert not modifiers.sensors_jammed
