import pytest

from happymatch.components.ice import Ice
from happymatch.components.ingredient import Ingredient
from happymatch.components.level import GoalMode, LevelConfig
from happymatch.constants import INGREDIENT_COLOR
from happymatch.errors import BoardInvariantError
from happymatch.systems.board_ops import get_entity_for_tile, tile_grid
from happymatch.systems.gravity import GravityMove, apply_gravity_and_refill
from tests.helpers import BASE_ROWS, ScriptedRandom, make_game, paint_board, score_level, tile_id_at, with_rows


def test_removed_tiles_collapse_column_and_refill_from_top():
    game = make_game(rows=BASE_ROWS)
    above = [tile_id_at(game.world, r, 0) for r in range(6)]
    removed = [tile_id_at(game.world, 7, 0), tile_id_at(game.world, 6, 0)]

    result = apply_gravity_and_refill(
        game.world, removed, score_level(), ScriptedRandom(['purple', 'orange'])
    )

    assert result.removed_count == 2
    assert result.score_delta == 20
    assert [tile_id_at(game.world, r + 2, 0) for r in range(6)] == above
    assert result.moves[0] == GravityMove(above[-1], (5, 0), (7, 0))
    assert len(result.moves) == 6
    assert result.new_tile_ids == [65, 66]
    grid = tile_grid(game.world)
    assert (grid[(1, 0)].tile_id, grid[(1, 0)].color) == (65, 'purple')
    assert (grid[(0, 0)].tile_id, grid[(0, 0)].color) == (66, 'orange')
    assert grid[(0, 0)].is_new and not grid[(2, 0)].is_new
    assert tile_id_at(game.world, 7, 1) == 58


def test_removed_iced_tile_counts_as_ice_cleared():
    game = make_game(rows=BASE_ROWS)
    paint_board(game.world, BASE_ROWS, ice={(7, 0): 1, (7, 1): 1})
    removed = [tile_id_at(game.world, 7, 0), tile_id_at(game.world, 7, 1)]
    result = apply_gravity_and_refill(game.world, removed, score_level(), ScriptedRandom(['purple']))
    assert result.ice_cleared == 2


def test_shielded_tile_loses_one_ice_layer_and_falls():
    game = make_game(rows=BASE_ROWS)
    paint_board(game.world, BASE_ROWS, ice={(5, 0): 2})
    locked = tile_id_at(game.world, 5, 0)
    result = apply_gravity_and_refill(
        game.world,
        [tile_id_at(game.world, 7, 0)],
        score_level(),
        ScriptedRandom(['purple']),
        shielded_ids=[locked],
    )
    assert result.ice_cleared == 0
    entity = get_entity_for_tile(game.world, locked)
    assert game.world.component_for_entity(entity, Ice).level == 1
    assert tile_id_at(game.world, 6, 0) == locked


def test_ingredient_on_bottom_row_is_collected():
    rows = with_rows({7: "IGYGYGYG"})
    game = make_game(rows=rows)
    ingredient = tile_id_at(game.world, 7, 0)
    result = apply_gravity_and_refill(
        game.world, [tile_id_at(game.world, 7, 1)], score_level(), ScriptedRandom(['purple'])
    )
    assert result.items_collected == 1
    assert result.collected_ids == [ingredient]
    assert result.score_delta == 1010
    assert get_entity_for_tile(game.world, ingredient) is None
    assert len(result.new_tile_ids) == 2


def test_ingredient_is_collected_on_the_step_after_it_lands():
    game = make_game(rows=with_rows({6: "IRBRBRBR"}))
    ingredient = tile_id_at(game.world, 6, 0)
    first = apply_gravity_and_refill(
        game.world, [tile_id_at(game.world, 7, 0)], score_level(), ScriptedRandom(['purple'])
    )
    assert first.items_collected == 0
    assert tile_id_at(game.world, 7, 0) == ingredient

    second = apply_gravity_and_refill(
        game.world, [tile_id_at(game.world, 7, 1)], score_level(), ScriptedRandom(['purple'])
    )
    assert second.collected_ids == [ingredient]


def test_collect_levels_can_refill_with_ingredients():
    level = LevelConfig(mode=GoalMode.COLLECT_ITEMS, moves=10, target_count=2)
    game = make_game(level, rows=BASE_ROWS)
    apply_gravity_and_refill(
        game.world, [tile_id_at(game.world, 7, 0)], level, ScriptedRandom(['purple'], roll=0.0)
    )
    entity = get_entity_for_tile(game.world, 65)
    assert game.world.has_component(entity, Ingredient)
    assert tile_grid(game.world)[(0, 0)].color == INGREDIENT_COLOR


def test_surviving_special_in_removal_set_is_rejected():
    game = make_game(rows=BASE_ROWS)
    tile_id = tile_id_at(game.world, 7, 0)
    with pytest.raises(BoardInvariantError):
        apply_gravity_and_refill(
            game.world, [tile_id], score_level(), ScriptedRandom(['purple']), survivor_id=tile_id
        )


def test_unknown_tile_in_removal_set_is_rejected():
    game = make_game(rows=BASE_ROWS)
    with pytest.raises(BoardInvariantError):
        apply_gravity_and_refill(game.world, [999], score_level(), ScriptedRandom(['purple']))
