from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from esper import World

from happymatch.components.board_position import BoardPosition
from happymatch.components.ice import Ice
from happymatch.components.ingredient import Ingredient
from happymatch.components.level import GoalMode, LevelConfig
from happymatch.components.tile import Tile
from happymatch.components.tile_flags import TileFlags
from happymatch.constants import (
    INGREDIENT_BONUS,
    INGREDIENT_COLOR,
    INGREDIENT_SPAWN_CHANCE,
    POINTS_PER_TILE,
)
from happymatch.errors import BoardInvariantError
from happymatch.systems.board_ops import (
    Position,
    get_board,
    get_tile_registry,
    spawn_tile,
    validate_board,
)


@dataclass(slots=True)
class GravityMove:
    tile_id: int
    source: Position
    target: Position


@dataclass(slots=True)
class GravityResult:
    score_delta: int = 0
    removed_count: int = 0
    ice_cleared: int = 0
    items_collected: int = 0
    collected_ids: List[int] = field(default_factory=list)
    moves: List[GravityMove] = field(default_factory=list)
    new_tile_ids: List[int] = field(default_factory=list)


def apply_gravity_and_refill(
    world: World,
    removed_ids: Iterable[int],
    level: LevelConfig,
    rng: random.Random,
    *,
    shielded_ids: Iterable[int] = (),
    survivor_id: Optional[int] = None,
) -> GravityResult:
    """Remove tiles, collect bottom-row ingredients, drop survivors and refill from the top."""
    board = get_board(world)
    removed = set(removed_ids)
    shielded = set(shielded_ids)
    if survivor_id is not None and survivor_id in removed:
        raise BoardInvariantError(f"Special survivor {survivor_id} is in the removal set")
    result = GravityResult()

    by_tile_id: Dict[int, int] = {tile.tile_id: entity for entity, tile in world.get_component(Tile)}
    for tile_id in removed:
        entity = by_tile_id.get(tile_id)
        if entity is None:
            raise BoardInvariantError(f"Cannot remove unknown tile {tile_id}")
        if world.component_for_entity(entity, Ice).level > 0:
            result.ice_cleared += 1
    for tile_id in shielded:
        entity = by_tile_id.get(tile_id)
        if entity is None or tile_id in removed:
            continue
        ice: Ice = world.component_for_entity(entity, Ice)
        ice.level = max(0, ice.level - 1)

    for tile_id in removed:
        world.delete_entity(by_tile_id[tile_id], immediate=True)
    result.removed_count = len(removed)

    bottom = board.rows - 1
    for entity, (tile, position) in list(world.get_components(Tile, BoardPosition)):
        if position.row == bottom and world.has_component(entity, Ingredient):
            result.items_collected += 1
            result.collected_ids.append(tile.tile_id)
            world.delete_entity(entity, immediate=True)
    result.collected_ids.sort()

    columns: Dict[int, List[int]] = {col: [] for col in range(board.cols)}
    for entity, position in world.get_component(BoardPosition):
        columns[position.col].append(entity)

    spawnable = get_tile_registry(world).spawnable_types()
    for col in range(board.cols):
        entities = sorted(
            columns[col],
            key=lambda ent: world.component_for_entity(ent, BoardPosition).row,
            reverse=True,
        )
        place_row = bottom
        for entity in entities:
            position: BoardPosition = world.component_for_entity(entity, BoardPosition)
            if position.row != place_row:
                tile_id = world.component_for_entity(entity, Tile).tile_id
                result.moves.append(GravityMove(tile_id, (position.row, col), (place_row, col)))
                position.row = place_row
            world.component_for_entity(entity, TileFlags).reset()
            place_row -= 1
        while place_row >= 0:
            ingredient = level.mode is GoalMode.COLLECT_ITEMS and rng.random() < INGREDIENT_SPAWN_CHANCE
            color = INGREDIENT_COLOR if ingredient else rng.choice(spawnable)
            entity = spawn_tile(world, board, place_row, col, color, ingredient=ingredient, is_new=True)
            result.new_tile_ids.append(world.component_for_entity(entity, Tile).tile_id)
            place_row -= 1
        if place_row != -1:
            raise BoardInvariantError(f"Column {col} holds more tiles than the board has rows")

    result.score_delta = POINTS_PER_TILE * result.removed_count + INGREDIENT_BONUS * result.items_collected
    validate_board(world)
    return result
