from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, Iterable, Sequence, Tuple

from esper import World

from happymatch.components.ice import Ice
from happymatch.components.ingredient import Ingredient
from happymatch.components.level import GoalMode, LevelConfig
from happymatch.components.special import Special, SpecialKind
from happymatch.components.tile import Tile
from happymatch.components.tile_flags import TileFlags
from happymatch.constants import INGREDIENT_COLOR, WILDCARD_COLOR
from happymatch.events.bus import EVENT_TICK, EventBus
from happymatch.systems.board import BoardSystem
from happymatch.systems.board_ops import TileView, get_entity_at, set_spawnable_tile_types
from happymatch.systems.level_system import LevelSystem
from happymatch.systems.match_resolution import MatchResolutionSystem
from happymatch.world import create_world

COLOR_CODES = {
    'R': 'red',
    'B': 'blue',
    'G': 'green',
    'Y': 'yellow',
    'P': 'purple',
    'O': 'orange',
}

# Run-free board with no valid swap of its own; tests overwrite the rows they need.
BASE_ROWS = [
    "RBRBRBRB",
    "GYGYGYGY",
    "BRBRBRBR",
    "YGYGYGYG",
    "RBRBRBRB",
    "GYGYGYGY",
    "BRBRBRBR",
    "YGYGYGYG",
]


class DummyWindow:
    def __init__(self, width=800, height=600):
        self.width = width
        self.height = height


class ScriptedRandom(random.Random):
    """Random source whose ``choice`` cycles through a fixed list of values.

    Values missing from the sequence being chosen from fall back to a seeded pick.
    ``random()`` always returns ``roll`` so probability checks are predictable.
    """

    def __init__(self, values: Sequence, roll: float = 0.99, seed: int = 1234):
        super().__init__(seed)
        self._values = list(values)
        self._index = 0
        self._roll = roll
        self.calls = 0

    def choice(self, seq):
        self.calls += 1
        if self._values:
            value = self._values[self._index % len(self._values)]
            self._index += 1
            if value in seq:
                return value
        return super().choice(seq)

    def random(self):
        return self._roll


def drive_ticks(bus: EventBus, count: int = 1, dt: float = 0.0) -> None:
    for _ in range(count):
        bus.emit(EVENT_TICK, dt=dt)


def score_level(moves: int = 10, target_score: int = 2000) -> LevelConfig:
    return LevelConfig(
        level_id=99,
        name="Test Level",
        mode=GoalMode.TARGET_SCORE,
        moves=moves,
        target_score=target_score,
    )


def paint_board(
    world: World,
    rows: Sequence[str],
    *,
    specials: Dict[Tuple[int, int], SpecialKind] | None = None,
    ice: Dict[Tuple[int, int], int] | None = None,
) -> None:
    """Recolor the tiles already on the board.

    Letters map through COLOR_CODES; ``W`` paints a Wildcard and ``I`` an ingredient.
    """
    specials = specials or {}
    ice = ice or {}
    for r, line in enumerate(rows):
        for c, code in enumerate(line):
            entity = get_entity_at(world, r, c)
            assert entity is not None, f"no tile at {(r, c)}"
            tile = world.component_for_entity(entity, Tile)
            special = world.component_for_entity(entity, Special)
            world.component_for_entity(entity, TileFlags).reset()
            world.component_for_entity(entity, Ice).level = ice.get((r, c), 0)
            if world.has_component(entity, Ingredient):
                world.remove_component(entity, Ingredient)
            special.kind = specials.get((r, c), SpecialKind.NONE)
            if code == 'W':
                tile.color = WILDCARD_COLOR
                special.kind = SpecialKind.WILDCARD
            elif code == 'I':
                tile.color = INGREDIENT_COLOR
                world.add_component(entity, Ingredient())
            else:
                tile.color = COLOR_CODES[code]


def with_rows(overrides: Dict[int, str]) -> list[str]:
    rows = list(BASE_ROWS)
    for index, line in overrides.items():
        rows[index] = line
    return rows


def tile_id_at(world: World, row: int, col: int) -> int:
    entity = get_entity_at(world, row, col)
    assert entity is not None
    return world.component_for_entity(entity, Tile).tile_id


def record(bus: EventBus, *names: str) -> Dict[str, list]:
    """Subscribe to events and collect their payloads by name."""
    received: Dict[str, list] = {name: [] for name in names}
    for name in names:
        bus.subscribe(name, lambda sender, _name=name, **kwargs: received[_name].append(kwargs))
    return received


@dataclass
class Game:
    bus: EventBus
    world: World
    levels: LevelSystem
    board: BoardSystem
    resolver: MatchResolutionSystem


def make_game(
    level: LevelConfig | None = None,
    *,
    rows: Iterable[str] | None = None,
    refill: Sequence[str] = ('purple', 'orange'),
    delay: float = 0.0,
    seed: int = 7,
) -> Game:
    """Start a level on a seeded board, then repaint it and script the refill colors."""
    bus = EventBus()
    world = create_world(bus, rng=random.Random(seed))
    levels = LevelSystem(world, bus)
    board = BoardSystem(world, bus)
    resolver = MatchResolutionSystem(world, bus, swap_delay=delay, clear_delay=delay, settle_delay=delay)
    levels.start_level(level or score_level())
    if rows is not None:
        paint_board(world, list(rows))
    set_spawnable_tile_types(world, refill)
    setattr(world, "random", ScriptedRandom(list(refill)))
    return Game(bus=bus, world=world, levels=levels, board=board, resolver=resolver)


def view_grid(
    rows: Sequence[str],
    *,
    specials: Dict[Tuple[int, int], SpecialKind] | None = None,
    ice: Dict[Tuple[int, int], int] | None = None,
) -> Dict[Tuple[int, int], TileView]:
    """Build a detached tile grid with row-major ids starting at 1."""
    specials = specials or {}
    ice = ice or {}
    grid: Dict[Tuple[int, int], TileView] = {}
    for r, line in enumerate(rows):
        for c, code in enumerate(line):
            special = specials.get((r, c), SpecialKind.NONE)
            ingredient = False
            if code == 'W':
                color, special = WILDCARD_COLOR, SpecialKind.WILDCARD
            elif code == 'I':
                color, ingredient = INGREDIENT_COLOR, True
            else:
                color = COLOR_CODES[code]
            grid[(r, c)] = TileView(
                tile_id=r * len(line) + c + 1,
                color=color,
                row=r,
                col=c,
                special=special,
                ice=ice.get((r, c), 0),
                ingredient=ingredient,
            )
    return grid
