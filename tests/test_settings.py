import json
import logging

from frontier.engine.logger import ChannelLogger, GameLogger, LoggerConfig, fallback_channel, init_logger
from frontier.engine.settings import (
    DEFAULT_PLAY_FIELD,
    ExplorationSettings,
    load_settings,
)


def test_settings_read_from_json(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"globalSeed": 77, "explorationRange": 3, "playField": [1024, 768]}))
    settings = ExplorationSettings.from_settings(path)
    assert settings.global_seed == 77
    assert settings.exploration_range == 3
    assert settings.play_field == (1024.0, 768.0)


def test_settings_fall_back_to_defaults(tmp_path):
    assert load_settings(tmp_path / "missing.json") == ExplorationSettings()
    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    assert ExplorationSettings.from_settings(broken) == ExplorationSettings()
    listed = tmp_path / "listed.json"
    listed.write_text("[1, 2]")
    assert ExplorationSettings.from_settings(listed) == ExplorationSettings()


def test_settings_sanitise_values():
    settings = ExplorationSettings.from_dict(
        {"globalSeed": "abc", "explorationRange": -4, "playField": [0, 600]}
    )
    assert settings.global_seed == 0
    assert settings.exploration_range == 0
    assert settings.play_field == DEFAULT_PLAY_FIELD


def test_logger_config_from_settings(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"logLevel": "debug", "logChannels": {"generation": True, "map": False}}))
    config = LoggerConfig.from_settings(path)
    assert config.level == logging.DEBUG
    assert config.channels == {"generation": True, "events": True, "map": False}


def test_logger_config_defaults_when_missing(tmp_path):
    config = LoggerConfig.from_settings(tmp_path / "missing.json")
    assert config.level == logging.INFO
    assert config.channels["events"]
    assert not config.channels["generation"]


def test_disabled_channel_is_silent(caplog):
    logger = GameLogger(LoggerConfig(level=logging.DEBUG, channels={"map": False}))
    with caplog.at_level(logging.INFO, logger="frontier"):
        logger.channel("map").info("quiet")
        logger.set_enabled("map", True)
        logger.channel("map").info("loud")
    assert "quiet" not in caplog.text
    assert "loud" in caplog.text


def test_unknown_channels_start_disabled():
    logger = GameLogger(LoggerConfig(level=logging.INFO, channels={}))
    assert not logger.channel("telemetry").enabled
    assert "telemetry" in logger.channels()


def test_fallback_channel_is_enabled():
    channel = fallback_channel("events")
    assert isinstance(channel, ChannelLogger)
    assert channel.enabled
    assert channel.name == "events"


def test_init_logger_reads_settings(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"logChannels": {"events": False}}))
    logger = init_logger(path)
    assert not logger.channel("events").enabled
    assert logger.channel("map").enabled
