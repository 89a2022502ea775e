"""Command-line driver for the Frontier sector engine."""
from __future__ import annotations

import argparse
import cProfile
import io
import pstats
import sys
from pathlib import Path
from typing import List, Optional

from frontier.engine.logger import ChannelLogger, init_logger
from frontier.engine.settings import load_settings
from frontier.world.events import PlayerFacts, discover_anomaly, next_pending_event, resolve_choice, trigger_event
from frontier.world.procedural_sector import SectorGenerator
from frontier.world.random_stream import SeededRandom
from frontier.world.sector import Coordinate, Sector
from frontier.world.sector_map import SectorMap, can_move_to, create_map, move_to


SETTINGS_PATH = Path("settings.json")


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Explore procedurally generated sectors.")
    parser.add_argument(
        "moves",
        nargs="*",
        help='Target sectors as "x,y", visited in order.',
    )
    parser.add_argument("--seed", type=int, default=None, help="Override globalSeed from settings.json.")
    parser.add_argument("--range", dest="exploration_range", type=int, default=None, help="Override explorationRange.")
    parser.add_argument("--free-travel", action="store_true", help="Allow jumps farther than one sector.")
    parser.add_argument("--json", action="store_true", help="Print the final map as JSON.")
    parser.add_argument("--profile", action="store_true", help="Print the top 25 cumulative profiler entries.")
    return parser.parse_args(argv)


def describe(sector: Sector) -> str:
    parts = [
        f"[{sector.id}] {sector.name}",
        sector.type.value,
        f"difficulty {sector.difficulty}",
        f"hostility {sector.hostility}",
        f"resources {sector.resources.total()}",
    ]
    if sector.hazards:
        parts.append("hazards " + ", ".join(hazard.type.value for hazard in sector.hazards))
    if sector.nebula is not None:
        parts.append(f"{sector.nebula.kind.value} nebula")
    if sector.anomalies:
        parts.append("anomalies " + ", ".join(anomaly.type.value for anomaly in sector.anomalies))
    return " | ".join(parts)


def visit(sector_map: SectorMap, rng: SeededRandom, facts: PlayerFacts, log: ChannelLogger) -> SectorMap:
    """Fire the current sector's next event and scan its anomalies."""

    sector = sector_map.current_sector
    event = next_pending_event(sector, facts, rng.random, log)
    if event is not None:
        outcome = trigger_event(sector, event.id, log)
        if outcome is not None:
            sector = outcome.sector
            print(f"  event: {event.description}")
            for reward in outcome.rewards:
                print(f"    + {reward.description} ({reward.kind.value} {reward.amount})")
            for consequence in outcome.consequences:
                print(f"    - {consequence.description} ({consequence.kind.value} {consequence.amount})")
            if outcome.awaiting_choice:
                choice = outcome.choices[0]
                result = resolve_choice(outcome.event, choice.id, rng.random(), facts, sector.type, log)
                print(f"    choice '{choice.text}': {result.status.value}")
    for anomaly in sector.anomalies:
        discovery = discover_anomaly(sector, anomaly.id, log)
        if discovery is not None:
            sector = discovery.sector
            print(f"  anomaly: {discovery.effect.description}")
    return sector_map.replace_sector(sector)


def run(args: argparse.Namespace) -> SectorMap:
    settings = load_settings(SETTINGS_PATH)
    logger = init_logger(SETTINGS_PATH)
    global_seed = settings.global_seed if args.seed is None else args.seed
    exploration_range = settings.exploration_range if args.exploration_range is None else args.exploration_range
    generator = SectorGenerator(play_field=settings.play_field, logger=logger.channel("generation"))
    map_log = logger.channel("map")
    events_log = logger.channel("events")

    sector_map = create_map(
        global_seed=global_seed,
        exploration_range=exploration_range,
        generator=generator,
        logger=map_log,
    )
    rng = SeededRandom(global_seed)
    facts = PlayerFacts(health=100.0, credits=500.0)
    print(describe(sector_map.current_sector))
    for move in args.moves:
        try:
            target = Coordinate.from_key(move)
        except ValueError as exc:
            map_log.error("%s", exc)
            continue
        if not args.free_travel and not can_move_to(sector_map, target):
            map_log.warning("Cannot travel from %s to %s", sector_map.player_position.key, target.key)
            continue
        sector_map = move_to(sector_map, target, generator=generator, logger=map_log)
        print(describe(sector_map.current_sector))
        sector_map = visit(sector_map, rng, facts, events_log)
    min_x, min_y, max_x, max_y = sector_map.bounds()
    print(
        f"\n{len(sector_map.discovered_sectors)} sectors discovered, "
        f"{len(sector_map.explored_sectors())} explored, bounds ({min_x},{min_y})..({max_x},{max_y})"
    )
    return sector_map


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    profiler = cProfile.Profile()
    try:
        if args.profile:
            profiler.enable()
        sector_map = run(args)
    finally:
        if args.profile:
            profiler.disable()
            stats_stream = io.StringIO()
            stats = pstats.Stats(profiler, stream=stats_stream)
            stats.strip_dirs().sort_stats("cumulative").print_stats(25)
            print("\nProfiler results (top 25 cumulative):")
            print(stats_stream.getvalue())
    if args.json:
        sys.stdout.write(sector_map.to_json() + "\n")


if __name__ == "__main__":
    main()
