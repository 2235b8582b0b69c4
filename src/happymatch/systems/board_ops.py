from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set, Tuple

from esper import World

from happymatch.components.board import Board
from happymatch.components.board_position import BoardPosition
from happymatch.components.ice import Ice
from happymatch.components.ingredient import Ingredient
from happymatch.components.level import LevelConfig
from happymatch.components.special import Special, SpecialKind
from happymatch.components.tile import Tile
from happymatch.components.tile_flags import TileFlags
from happymatch.components.tile_type_registry import TileTypeRegistry
from happymatch.components.tile_types import TileTypes
from happymatch.constants import BASE_COLORS, BOARD_GENERATION_ATTEMPTS, ICE_LOCKED
from happymatch.errors import BoardInvariantError

logger = logging.getLogger(__name__)

Position = Tuple[int, int]
Swap = Tuple[Position, Position]


@dataclass(frozen=True, slots=True)
class TileView:
    """Read-only snapshot of a tile handed to rule functions and the renderer."""

    tile_id: int
    color: str
    row: int
    col: int
    special: SpecialKind = SpecialKind.NONE
    ice: int = 0
    ingredient: bool = False
    is_new: bool = False
    is_matched: bool = False
    match_effect: Optional[SpecialKind] = None

    @property
    def position(self) -> Position:
        return self.row, self.col

    def moved_to(self, row: int, col: int) -> "TileView":
        return TileView(
            tile_id=self.tile_id,
            color=self.color,
            row=row,
            col=col,
            special=self.special,
            ice=self.ice,
            ingredient=self.ingredient,
            is_new=self.is_new,
            is_matched=self.is_matched,
            match_effect=self.match_effect,
        )


def get_tile_registry(world: World) -> TileTypes:
    for entity, _ in world.get_component(TileTypeRegistry):
        return world.component_for_entity(entity, TileTypes)
    raise RuntimeError("TileTypes definitions not found")


def set_spawnable_tile_types(world: World, type_names: Iterable[str]) -> List[str]:
    registry = get_tile_registry(world)
    registry.set_spawnable(type_names)
    return registry.spawnable_types()


def find_board(world: World) -> Optional[Board]:
    for _, board in world.get_component(Board):
        return board
    return None


def get_board(world: World) -> Board:
    board = find_board(world)
    if board is None:
        raise BoardInvariantError("Board not found")
    return board


def get_entity_at(world: World, row: int, col: int) -> int | None:
    for entity, (_, position) in world.get_components(Tile, BoardPosition):
        if position.row == row and position.col == col:
            return entity
    return None


def get_entity_for_tile(world: World, tile_id: int) -> int | None:
    for entity, tile in world.get_component(Tile):
        if tile.tile_id == tile_id:
            return entity
    return None


def tile_view(world: World, entity: int) -> TileView:
    tile = world.component_for_entity(entity, Tile)
    position = world.component_for_entity(entity, BoardPosition)
    special = world.component_for_entity(entity, Special)
    ice = world.component_for_entity(entity, Ice)
    flags = world.component_for_entity(entity, TileFlags)
    return TileView(
        tile_id=tile.tile_id,
        color=tile.color,
        row=position.row,
        col=position.col,
        special=special.kind,
        ice=ice.level,
        ingredient=world.has_component(entity, Ingredient),
        is_new=flags.is_new,
        is_matched=flags.is_matched,
        match_effect=flags.match_effect,
    )


def snapshot_tiles(world: World) -> List[TileView]:
    """Return every tile on the board ordered by tile id."""
    views = [tile_view(world, entity) for entity, _ in world.get_component(Tile)]
    views.sort(key=lambda view: view.tile_id)
    return views


def tile_grid(world: World) -> Dict[Position, TileView]:
    return {view.position: view for view in snapshot_tiles(world)}


def spawn_tile(
    world: World,
    board: Board,
    row: int,
    col: int,
    color: str,
    *,
    ice: int = 0,
    ingredient: bool = False,
    is_new: bool = False,
) -> int:
    entity = world.create_entity(
        Tile(tile_id=board.allocate_tile_id(), color=color),
        BoardPosition(row=row, col=col),
        Special(),
        Ice(level=ice),
        TileFlags(is_new=is_new),
    )
    if ingredient:
        world.add_component(entity, Ingredient())
    return entity


def clear_tiles(world: World) -> None:
    for entity, _ in list(world.get_component(Tile)):
        world.delete_entity(entity, immediate=True)


def are_adjacent(a: Position, b: Position) -> bool:
    ar, ac = a
    br, bc = b
    return (abs(ar - br) == 1 and ac == bc) or (abs(ac - bc) == 1 and ar == br)


def swap_tile_positions(world: World, entity_a: int, entity_b: int) -> None:
    pos_a: BoardPosition = world.component_for_entity(entity_a, BoardPosition)
    pos_b: BoardPosition = world.component_for_entity(entity_b, BoardPosition)
    pos_a.row, pos_b.row = pos_b.row, pos_a.row
    pos_a.col, pos_b.col = pos_b.col, pos_a.col


def validate_board(world: World) -> None:
    """Raise BoardInvariantError unless every cell holds exactly one tile with a unique id."""
    board = get_board(world)
    seen_positions: Set[Position] = set()
    seen_ids: Set[int] = set()
    for _, (tile, position) in world.get_components(Tile, BoardPosition):
        if not (0 <= position.row < board.rows and 0 <= position.col < board.cols):
            raise BoardInvariantError(
                f"Tile {tile.tile_id} is outside the board at ({position.row}, {position.col})"
            )
        pos = (position.row, position.col)
        if pos in seen_positions:
            raise BoardInvariantError(f"Cell {pos} is occupied more than once")
        if tile.tile_id in seen_ids:
            raise BoardInvariantError(f"Tile id {tile.tile_id} is used more than once")
        if tile.tile_id >= board.next_tile_id:
            raise BoardInvariantError(f"Tile id {tile.tile_id} was not allocated by the board")
        seen_positions.add(pos)
        seen_ids.add(tile.tile_id)
    expected = board.rows * board.cols
    if len(seen_positions) != expected:
        raise BoardInvariantError(f"Board holds {len(seen_positions)} tiles, expected {expected}")


def is_matchable(view: TileView) -> bool:
    return view.color in BASE_COLORS and not view.ingredient


def _color_map(grid: Dict[Position, TileView]) -> Dict[Position, Optional[str]]:
    return {pos: (view.color if is_matchable(view) else None) for pos, view in grid.items()}


def _has_line_match(colors: Dict[Position, Optional[str]], pos: Position) -> bool:
    """Return True if a horizontal or vertical run of three runs through pos."""
    row, col = pos
    color = colors.get(pos)
    if color is None:
        return False
    # Horizontal sweep
    h_len = 1
    c_left = col - 1
    while colors.get((row, c_left)) == color:
        h_len += 1
        c_left -= 1
    c_right = col + 1
    while colors.get((row, c_right)) == color:
        h_len += 1
        c_right += 1
    if h_len >= 3:
        return True
    # Vertical sweep
    v_len = 1
    r_up = row - 1
    while colors.get((r_up, col)) == color:
        v_len += 1
        r_up -= 1
    r_down = row + 1
    while colors.get((r_down, col)) == color:
        v_len += 1
        r_down += 1
    return v_len >= 3


def has_any_run(grid: Dict[Position, TileView]) -> bool:
    colors = _color_map(grid)
    return any(_has_line_match(colors, pos) for pos in colors)


def swap_creates_match(grid: Dict[Position, TileView], src: Position, dst: Position) -> bool:
    colors = _color_map(grid)
    if src not in colors or dst not in colors:
        return False
    colors[src], colors[dst] = colors[dst], colors[src]
    return _has_line_match(colors, src) or _has_line_match(colors, dst)


def valid_swaps_in_grid(grid: Dict[Position, TileView], rows: int, cols: int) -> List[Swap]:
    """Enumerate adjacent swaps that would produce a run or involve a Wildcard."""
    colors = _color_map(grid)
    swaps: List[Swap] = []
    for row in range(rows):
        for col in range(cols):
            pos = (row, col)
            if pos not in grid:
                continue
            for other in ((row, col + 1), (row + 1, col)):
                if other not in grid:
                    continue
                if grid[pos].special is SpecialKind.WILDCARD or grid[other].special is SpecialKind.WILDCARD:
                    swaps.append((pos, other))
                    continue
                trial = dict(colors)
                trial[pos], trial[other] = trial[other], trial[pos]
                if _has_line_match(trial, pos) or _has_line_match(trial, other):
                    swaps.append((pos, other))
    return swaps


def find_valid_swaps(world: World) -> List[Swap]:
    board = find_board(world)
    if board is None:
        return []
    return valid_swaps_in_grid(tile_grid(world), board.rows, board.cols)


def _pick_color(
    rng: random.Random,
    choices: List[str],
    layout: Dict[Position, Optional[str]],
    row: int,
    col: int,
) -> Optional[str]:
    """Choose a color that does not complete a triple with the two tiles left or above."""
    available = list(choices)
    left1 = layout.get((row, col - 1))
    if left1 is not None and left1 == layout.get((row, col - 2)):
        available = [c for c in available if c != left1]
    up1 = layout.get((row - 1, col))
    if up1 is not None and up1 == layout.get((row - 2, col)):
        available = [c for c in available if c != up1]
    if not available:
        return None
    return rng.choice(available)


def populate_board(
    world: World,
    level: LevelConfig,
    *,
    rng: random.Random | None = None,
    max_attempts: int = BOARD_GENERATION_ATTEMPTS,
) -> List[int]:
    """Fill an empty board with a run-free layout that still offers a valid swap.

    Ice is copied from the level layout, capped at the locked level.
    Returns the created tile entities in row-major order.
    """
    board = get_board(world)
    rng = rng or getattr(world, "random", None) or random.Random()
    choices = get_tile_registry(world).spawnable_types()
    for _ in range(max_attempts):
        layout: Dict[Position, Optional[str]] = {}
        valid_layout = True
        for row in range(board.rows):
            for col in range(board.cols):
                color = _pick_color(rng, choices, layout, row, col)
                if color is None:
                    valid_layout = False
                    break
                layout[(row, col)] = color
            if not valid_layout:
                break
        if not valid_layout:
            continue
        grid = {
            pos: TileView(tile_id=0, color=color, row=pos[0], col=pos[1])
            for pos, color in layout.items()
        }
        if not valid_swaps_in_grid(grid, board.rows, board.cols):
            continue
        entities: List[int] = []
        for row in range(board.rows):
            for col in range(board.cols):
                ice = min(level.ice_at(row, col), ICE_LOCKED)
                entities.append(spawn_tile(world, board, row, col, layout[(row, col)], ice=ice))
        return entities
    raise BoardInvariantError("Unable to generate a board without matches and with a valid swap")


def reshuffle_board(
    world: World,
    *,
    rng: random.Random | None = None,
    max_attempts: int = BOARD_GENERATION_ATTEMPTS,
) -> List[int]:
    """Recolor plain tiles in place until the board has no runs and a valid swap.

    Tile ids, specials, ingredients and ice stay where they are. Returns the ids
    of recolored tiles.
    """
    board = get_board(world)
    rng = rng or getattr(world, "random", None) or random.Random()
    choices = get_tile_registry(world).spawnable_types()
    plain: Dict[Position, int] = {}
    fixed: Dict[Position, Optional[str]] = {}
    for entity, (tile, position, special) in world.get_components(Tile, BoardPosition, Special):
        pos = (position.row, position.col)
        if special.kind is SpecialKind.NONE and not world.has_component(entity, Ingredient):
            plain[pos] = entity
        else:
            fixed[pos] = tile.color if tile.color in BASE_COLORS and not world.has_component(entity, Ingredient) else None
    grid = tile_grid(world)
    for _ in range(max_attempts):
        layout: Dict[Position, Optional[str]] = dict(fixed)
        for row in range(board.rows):
            for col in range(board.cols):
                if (row, col) not in plain:
                    continue
                color = _pick_color(rng, choices, layout, row, col)
                layout[(row, col)] = color if color is not None else rng.choice(choices)
        trial = {
            pos: TileView(
                tile_id=view.tile_id,
                color=layout[pos] if pos in plain else view.color,
                row=view.row,
                col=view.col,
                special=view.special,
                ice=view.ice,
                ingredient=view.ingredient,
            )
            for pos, view in grid.items()
        }
        if has_any_run(trial):
            continue
        if not valid_swaps_in_grid(trial, board.rows, board.cols):
            continue
        recolored: List[int] = []
        for pos, entity in plain.items():
            tile = world.component_for_entity(entity, Tile)
            tile.color = trial[pos].color
            recolored.append(tile.tile_id)
        recolored.sort()
        logger.info("Reshuffled %d tiles on a board without valid swaps", len(recolored))
        return recolored
    raise BoardInvariantError("Unable to reshuffle board into a playable layout")
