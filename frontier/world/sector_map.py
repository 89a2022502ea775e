"""Lazily expanded map of discovered sectors."""
from __future__ import annotations

import json
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from frontier.engine.logger import ChannelLogger, fallback_channel
from frontier.engine.settings import DEFAULT_EXPLORATION_RANGE, DEFAULT_PLAY_FIELD, ExplorationSettings
from frontier.world.procedural_sector import SectorGenerator
from frontier.world.sector import Coordinate, Sector

ORIGIN = Coordinate(0, 0)

# West, east, north, south, then the diagonals.
_KING_MOVES: Tuple[Tuple[int, int], ...] = (
    (-1, 0),
    (1, 0),
    (0, -1),
    (0, 1),
    (-1, -1),
    (1, -1),
    (-1, 1),
    (1, 1),
)


class MapInvariantError(AssertionError):
    """The map's current sector no longer matches the player position."""


@dataclass(frozen=True)
class SectorMap:
    """Discovered sectors keyed by ``"x,y"`` plus the player's position.

    Values are never modified in place: moving, widening the exploration
    range or storing a resolved sector returns a new map. Entries are only
    ever added, never removed or regenerated.
    """

    current_sector: Sector
    discovered_sectors: Dict[str, Sector]
    player_position: Coordinate
    exploration_range: int = DEFAULT_EXPLORATION_RANGE
    global_seed: int = 0
    play_field: Tuple[float, float] = DEFAULT_PLAY_FIELD

    def __post_init__(self) -> None:
        self.check_invariants()

    def check_invariants(self) -> None:
        if self.exploration_range < 0:
            raise MapInvariantError(f"Negative exploration range {self.exploration_range}")
        entry = self.discovered_sectors.get(self.player_position.key)
        if entry is None:
            raise MapInvariantError(f"Player position {self.player_position.key} is not discovered")
        if entry is not self.current_sector and entry != self.current_sector:
            raise MapInvariantError(
                f"Current sector {self.current_sector.id} does not match player position {self.player_position.key}"
            )

    def get(self, coordinates: Coordinate) -> Optional[Sector]:
        return self.discovered_sectors.get(coordinates.key)

    def is_discovered(self, coordinates: Coordinate) -> bool:
        return coordinates.key in self.discovered_sectors

    def sectors(self) -> Iterable[Sector]:
        return self.discovered_sectors.values()

    def explored_sectors(self) -> List[Sector]:
        return [sector for sector in self.discovered_sectors.values() if sector.explored]

    def bounds(self) -> Tuple[int, int, int, int]:
        xs = [sector.coordinates.x for sector in self.discovered_sectors.values()]
        ys = [sector.coordinates.y for sector in self.discovered_sectors.values()]
        return (min(xs), min(ys), max(xs), max(ys))

    def replace_sector(self, sector: Sector) -> "SectorMap":
        """Store an updated copy of an already discovered sector."""

        if sector.id not in self.discovered_sectors:
            raise KeyError(f"Sector {sector.id} has not been discovered")
        sectors = dict(self.discovered_sectors)
        sectors[sector.id] = sector
        current = sector if sector.coordinates == self.player_position else self.current_sector
        return replace(self, current_sector=current, discovered_sectors=sectors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_position": [self.player_position.x, self.player_position.y],
            "exploration_range": self.exploration_range,
            "global_seed": self.global_seed,
            "play_field": [self.play_field[0], self.play_field[1]],
            "sectors": [sector.to_dict() for sector in self.discovered_sectors.values()],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SectorMap":
        try:
            x, y = data["player_position"]
            position = Coordinate(int(x), int(y))
            sectors: Dict[str, Sector] = {}
            for entry in data["sectors"]:
                sector = Sector.from_dict(entry)
                sectors[sector.id] = sector
            current = sectors[position.key]
            exploration_range = int(data.get("exploration_range", DEFAULT_EXPLORATION_RANGE))
            global_seed = int(data.get("global_seed", 0))
            width, height = data.get("play_field", DEFAULT_PLAY_FIELD)
            play_field = (float(width), float(height))
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Malformed sector map: {exc}") from exc
        return cls(
            current_sector=current,
            discovered_sectors=sectors,
            player_position=position,
            exploration_range=exploration_range,
            global_seed=global_seed,
            play_field=play_field,
        )

    @classmethod
    def from_json(cls, payload: str) -> "SectorMap":
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Sector map is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ValueError("Sector map JSON must be an object")
        return cls.from_dict(data)


def _generator_for(sector_map: SectorMap, generator: Optional[SectorGenerator]) -> SectorGenerator:
    """Generator matching the play field the map was created with."""

    if generator is None:
        return SectorGenerator(play_field=sector_map.play_field)
    if tuple(generator.play_field) != tuple(sector_map.play_field):
        raise ValueError(
            f"Generator play field {generator.play_field} does not match the map's {sector_map.play_field}"
        )
    return generator


def _discover_around(
    sectors: Dict[str, Sector],
    center: Coordinate,
    radius: int,
    generator: SectorGenerator,
    global_seed: int,
) -> int:
    discovered = 0
    for dx in range(-radius, radius + 1):
        for dy in range(-radius, radius + 1):
            if dx == 0 and dy == 0:
                continue
            coordinates = center.offset(dx, dy)
            if coordinates.key in sectors:
                continue
            sectors[coordinates.key] = replace(generator.generate(coordinates, global_seed), discovered=True)
            discovered += 1
    return discovered


def create_map(
    origin: Coordinate = ORIGIN,
    *,
    global_seed: int = 0,
    exploration_range: int = DEFAULT_EXPLORATION_RANGE,
    generator: Optional[SectorGenerator] = None,
    logger: Optional[ChannelLogger] = None,
) -> SectorMap:
    """Start a map at ``origin``; only the origin itself is discovered."""

    log = logger or fallback_channel("map")
    generator = generator or SectorGenerator()
    start = replace(generator.generate(origin, global_seed), discovered=True, explored=True)
    log.info("Map created at %s (%s, seed %d)", origin.key, start.type.value, global_seed)
    return SectorMap(
        current_sector=start,
        discovered_sectors={start.id: start},
        player_position=origin,
        exploration_range=exploration_range,
        global_seed=global_seed,
        play_field=tuple(generator.play_field),
    )


def create_map_from_settings(
    settings: ExplorationSettings,
    origin: Coordinate = ORIGIN,
    logger: Optional[ChannelLogger] = None,
) -> SectorMap:
    return create_map(
        origin,
        global_seed=settings.global_seed,
        exploration_range=settings.exploration_range,
        generator=SectorGenerator(play_field=settings.play_field),
        logger=logger,
    )


def move_to(
    sector_map: SectorMap,
    target: Coordinate,
    *,
    generator: Optional[SectorGenerator] = None,
    logger: Optional[ChannelLogger] = None,
) -> SectorMap:
    """Move the player to ``target`` and discover its neighbourhood.

    Movement rules are the caller's business (see :func:`can_move_to`); any
    coordinate is accepted here.
    """

    log = logger or fallback_channel("map")
    generator = _generator_for(sector_map, generator)
    sectors = dict(sector_map.discovered_sectors)
    target_sector = sectors.get(target.key)
    if target_sector is None:
        target_sector = generator.generate(target, sector_map.global_seed)
    if not (target_sector.discovered and target_sector.explored):
        target_sector = replace(target_sector, discovered=True, explored=True)
        sectors[target.key] = target_sector
    discovered = _discover_around(sectors, target, sector_map.exploration_range, generator, sector_map.global_seed)
    log.info(
        "Moved %s -> %s (%s); %d sector(s) discovered",
        sector_map.player_position.key,
        target.key,
        target_sector.type.value,
        discovered,
    )
    return replace(
        sector_map,
        current_sector=target_sector,
        discovered_sectors=sectors,
        player_position=target,
    )


def expand_range(
    sector_map: SectorMap,
    exploration_range: int,
    *,
    generator: Optional[SectorGenerator] = None,
    logger: Optional[ChannelLogger] = None,
) -> SectorMap:
    """Change the exploration range and discover around the current position.

    Shrinking the range never forgets sectors.
    """

    if exploration_range < 0:
        raise ValueError(f"Exploration range must be non-negative, got {exploration_range}")
    log = logger or fallback_channel("map")
    generator = _generator_for(sector_map, generator)
    sectors = dict(sector_map.discovered_sectors)
    discovered = _discover_around(
        sectors, sector_map.player_position, exploration_range, generator, sector_map.global_seed
    )
    log.info("Exploration range %d -> %d; %d sector(s) discovered", sector_map.exploration_range, exploration_range, discovered)
    return replace(sector_map, discovered_sectors=sectors, exploration_range=exploration_range)


def adjacent_of(coordinates: Coordinate) -> List[Coordinate]:
    return [coordinates.offset(dx, dy) for dx, dy in _KING_MOVES]


def can_move_to(sector_map: SectorMap, target: Coordinate) -> bool:
    """Travel is limited to the four orthogonal neighbours (or staying put)."""

    return sector_map.player_position.manhattan(target) <= 1


__all__ = [
    "MapInvariantError",
    "ORIGIN",
    "SectorMap",
    "adjacent_of",
    "can_move_to",
    "create_map",
    "create_map_from_settings",
    "expand_range",
    "move_to",
]
