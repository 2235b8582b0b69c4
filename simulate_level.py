"""Headless level simulator.

Plays a built-in (or JSON-defined) level by picking a random valid swap each
turn with every animation delay set to zero, then prints the outcome. Handy as
a quick smoke check of the board rules.

Run with: ``python simulate_level.py --level 2 --seed 7``
"""
from __future__ import annotations

import argparse
import logging
import os
import random
import sys

ROOT = os.path.dirname(os.path.abspath(__file__))
SRC = os.path.join(ROOT, 'src')
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from happymatch.components.game_state import GamePhase
from happymatch.components.tile import Tile
from happymatch.events.bus import EVENT_CASCADE_STEP, EVENT_TICK, EventBus
from happymatch.factories.levels import get_level, load_levels
from happymatch.systems.board_ops import find_valid_swaps, get_entity_at
from happymatch.systems.level_system import LevelSystem
from happymatch.systems.match_resolution import MatchResolutionSystem
from happymatch.utils.game_state import get_game_state, get_progress
from happymatch.world import create_world


def simulate(level, *, seed: int | None = None, max_turns: int = 500) -> dict:
    rng = random.Random(seed)
    bus = EventBus()
    world = create_world(bus, rng=rng)
    level_system = LevelSystem(world, bus)
    resolver = MatchResolutionSystem(world, bus, swap_delay=0.0, clear_delay=0.0, settle_delay=0.0)
    steps = []
    bus.subscribe(EVENT_CASCADE_STEP, lambda sender, **kw: steps.append(kw))
    level_system.start_level(level)

    turns = 0
    while get_game_state(world).phase is GamePhase.IDLE and turns < max_turns:
        swaps = find_valid_swaps(world)
        if not swaps:
            break
        src, dst = rng.choice(swaps)
        src_tile = world.component_for_entity(get_entity_at(world, *src), Tile)
        dst_tile = world.component_for_entity(get_entity_at(world, *dst), Tile)
        if not resolver.request_swap(src_tile.tile_id, dst_tile.tile_id):
            break
        bus.emit(EVENT_TICK, dt=0.0)
        turns += 1

    progress = get_progress(world)
    return {
        "level": level.name or level.level_id,
        "phase": get_game_state(world).phase.name,
        "turns": turns,
        "score": progress.score,
        "moves_remaining": progress.moves_remaining,
        "items_collected": progress.items_collected,
        "ice_cleared": progress.ice_cleared,
        "max_combo": max((step["combo"] for step in steps), default=0),
    }


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--level", type=int, default=1, help="level id to play")
    parser.add_argument("--levels-file", help="JSON file with level definitions")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    parser.add_argument("--runs", type=int, default=1, help="number of games to play")
    parser.add_argument("-v", "--verbose", action="store_true", help="log cascade details")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    if args.levels_file:
        levels = {level.level_id: level for level in load_levels(args.levels_file)}
        level = levels.get(args.level)
    else:
        level = get_level(args.level)
    if level is None:
        parser.error(f"unknown level id {args.level}")

    for run_index in range(args.runs):
        seed = None if args.seed is None else args.seed + run_index
        result = simulate(level, seed=seed)
        print(
            f"{result['level']}: {result['phase']} after {result['turns']} turns, "
            f"score {result['score']}, moves left {result['moves_remaining']}, "
            f"items {result['items_collected']}, ice {result['ice_cleared']}, "
            f"best combo x{result['max_combo']}"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
