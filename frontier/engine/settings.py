"""Exploration settings read from settings.json."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

DEFAULT_GLOBAL_SEED = 0
DEFAULT_EXPLORATION_RANGE = 2
DEFAULT_PLAY_FIELD: Tuple[float, float] = (800.0, 600.0)


@dataclass(frozen=True)
class ExplorationSettings:
    """Knobs shared by the sector generator and the sector map."""

    global_seed: int = DEFAULT_GLOBAL_SEED
    exploration_range: int = DEFAULT_EXPLORATION_RANGE
    play_field: Tuple[float, float] = DEFAULT_PLAY_FIELD

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExplorationSettings":
        global_seed = _as_int(data.get("globalSeed"), DEFAULT_GLOBAL_SEED)
        exploration_range = max(0, _as_int(data.get("explorationRange"), DEFAULT_EXPLORATION_RANGE))
        play_field = DEFAULT_PLAY_FIELD
        raw_field = data.get("playField")
        if isinstance(raw_field, (list, tuple)) and len(raw_field) == 2:
            try:
                width, height = float(raw_field[0]), float(raw_field[1])
            except (TypeError, ValueError):
                width, height = DEFAULT_PLAY_FIELD
            if width > 0.0 and height > 0.0:
                play_field = (width, height)
        return cls(
            global_seed=global_seed,
            exploration_range=exploration_range,
            play_field=play_field,
        )

    @classmethod
    def from_settings(cls, settings_path: Path) -> "ExplorationSettings":
        if not settings_path.exists():
            return cls()
        try:
            data = json.loads(settings_path.read_text())
        except json.JSONDecodeError:
            return cls()
        if not isinstance(data, dict):
            return cls()
        return cls.from_dict(data)


def _as_int(value: Optional[Any], default: int) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def load_settings(settings_path: Optional[Path] = None) -> ExplorationSettings:
    return ExplorationSettings.from_settings(settings_path or Path("settings.json"))


__all__ = [
    "DEFAULT_EXPLORATION_RANGE",
    "DEFAULT_GLOBAL_SEED",
    "DEFAULT_PLAY_FIELD",
    "ExplorationSettings",
    "load_settings",
]
