import logging
import re

import pytest

from frontier.world.content import (
    ANOMALY_EFFECTS,
    BASE_HOSTILITY,
    EVENT_POOLS,
    HAZARD_POOLS,
    AnomalyEffect,
    AnomalyType,
    EffectCategory,
    HazardType,
    SectorType,
    anomaly_effect,
    coerce,
    for_sector,
    pick_weighted,
    sector_name,
    type_weights,
)


def test_tables_cover_every_sector_type():
    for table in (HAZARD_POOLS, EVENT_POOLS, BASE_HOSTILITY):
        assert set(table) == set(SectorType)
    assert set(ANOMALY_EFFECTS) == set(AnomalyType)


def test_trading_has_no_hazards():
    assert HAZARD_POOLS[SectorType.TRADING] == ()


def test_type_bands_by_distance():
    assert pick_weighted(type_weights(0.0), 0.0) is SectorType.EMPTY
    assert pick_weighted(type_weights(0.0), 0.5) is SectorType.ASTEROID
    assert pick_weighted(type_weights(2.9), 0.99) is SectorType.RESEARCH
    assert pick_weighted(type_weights(3.0), 0.95) is SectorType.PIRATE
    assert pick_weighted(type_weights(10.0), 0.65) is SectorType.ANCIENT
    assert pick_weighted(type_weights(250.0), 0.8) is SectorType.UNSTABLE


def test_unknown_type_falls_back_to_empty(caplog):
    with caplog.at_level(logging.WARNING):
        pool = for_sector(HAZARD_POOLS, "wormhole_nexus", "HAZARD_POOLS")
    assert pool == HAZARD_POOLS[SectorType.EMPTY]
    assert "HAZARD_POOLS" in caplog.text


def test_coerce_parses_and_falls_back():
    assert coerce(HazardType, "ion_storm", HazardType.RADIATION) is HazardType.ION_STORM
    assert coerce(HazardType, HazardType.GRAVITY, HazardType.RADIATION) is HazardType.GRAVITY
    assert coerce(HazardType, "acid_rain", HazardType.RADIATION) is HazardType.RADIATION


def test_anomaly_effect_is_typed():
    effect = anomaly_effect(AnomalyType.QUANTUM_FIELD)
    assert effect.category is EffectCategory.BENEFICIAL
    assert effect.magnitude == pytest.approx(1.5)
    assert anomaly_effect("unknown") == ANOMALY_EFFECTS[AnomalyType.MIRROR]
    assert AnomalyEffect.from_dict(effect.to_dict()) == effect


def test_sector_name_is_stable_and_formatted():
    name = sector_name(SectorType.NEBULA, 4, -7)
    assert name == sector_name(SectorType.NEBULA, 4, -7)
    assert re.fullmatch(r"\w+ \w+ \d{3}", name)
    assert sector_name(SectorType.EMPTY, 0, 0) == "Void Sector 001"
