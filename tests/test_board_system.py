from happymatch.components.game_state import GamePhase
from happymatch.events.bus import (
    EVENT_MOUSE_PRESS,
    EVENT_TILE_CLICK,
    EVENT_TILE_DESELECTED,
    EVENT_TILE_SELECTED,
    EVENT_TILE_SWAP_REQUEST,
)
from happymatch.utils.game_state import get_game_state, get_progress, set_game_phase
from tests.helpers import BASE_ROWS, make_game, record, tile_id_at


def _game():
    game = make_game(rows=BASE_ROWS)
    events = record(game.bus, EVENT_TILE_SELECTED, EVENT_TILE_DESELECTED, EVENT_TILE_SWAP_REQUEST)
    return game, events


def test_click_selects_tile():
    game, events = _game()
    tile = tile_id_at(game.world, 2, 3)
    game.bus.emit(EVENT_TILE_CLICK, tile_id=tile)
    assert game.board.selected == tile
    assert get_game_state(game.world).phase is GamePhase.SELECTED
    assert events[EVENT_TILE_SELECTED] == [{"tile_id": tile, "row": 2, "col": 3}]


def test_clicking_selected_tile_deselects():
    game, events = _game()
    tile = tile_id_at(game.world, 2, 3)
    game.bus.emit(EVENT_TILE_CLICK, tile_id=tile)
    game.bus.emit(EVENT_TILE_CLICK, tile_id=tile)
    assert game.board.selected is None
    assert get_game_state(game.world).phase is GamePhase.IDLE
    assert events[EVENT_TILE_DESELECTED][0]["reason"] == "same_tile"


def test_clicking_distant_tile_moves_selection():
    game, events = _game()
    first = tile_id_at(game.world, 0, 0)
    far = tile_id_at(game.world, 5, 5)
    game.bus.emit(EVENT_TILE_CLICK, tile_id=first)
    game.bus.emit(EVENT_TILE_CLICK, tile_id=far)
    assert game.board.selected == far
    assert events[EVENT_TILE_SWAP_REQUEST] == []


def test_clicking_neighbor_requests_swap_and_clears_selection():
    game, events = _game()
    first = tile_id_at(game.world, 4, 4)
    neighbor = tile_id_at(game.world, 4, 5)
    game.bus.emit(EVENT_TILE_CLICK, tile_id=first)
    game.bus.emit(EVENT_TILE_CLICK, tile_id=neighbor)
    assert events[EVENT_TILE_SWAP_REQUEST] == [{"src_id": first, "dst_id": neighbor}]
    assert game.board.selected is None
    # The base board has no matching swap, so the request is rejected and play stays idle.
    assert get_game_state(game.world).phase is GamePhase.IDLE
    assert get_progress(game.world).moves_remaining == 10


def test_right_click_clears_selection():
    game, events = _game()
    game.bus.emit(EVENT_TILE_CLICK, tile_id=tile_id_at(game.world, 1, 1))
    game.bus.emit(EVENT_MOUSE_PRESS, x=0, y=0, button=4)
    assert game.board.selected is None
    assert events[EVENT_TILE_DESELECTED][0]["reason"] == "right_click"


def test_clicks_ignored_outside_input_phases():
    game, events = _game()
    set_game_phase(game.world, game.bus, GamePhase.PROCESSING)
    game.bus.emit(EVENT_TILE_CLICK, tile_id=tile_id_at(game.world, 1, 1))
    assert game.board.selected is None
    assert events[EVENT_TILE_SELECTED] == []


def test_clicks_ignored_without_moves():
    game, events = _game()
    get_progress(game.world).moves_remaining = 0
    game.bus.emit(EVENT_TILE_CLICK, tile_id=tile_id_at(game.world, 1, 1))
    assert events[EVENT_TILE_SELECTED] == []


def test_level_start_clears_selection():
    game, _ = _game()
    game.bus.emit(EVENT_TILE_CLICK, tile_id=tile_id_at(game.world, 1, 1))
    game.levels.restart_level()
    assert game.board.selected is None
