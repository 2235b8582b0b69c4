from happymatch.components.game_state import GamePhase
from happymatch.constants import GRID_ROWS
from happymatch.events.bus import EVENT_TILE_CLICK, EVENT_MOUSE_PRESS, EVENT_TILE_SWAP_INVALID
from happymatch.rendering.context import build_render_context
from happymatch.rendering.hud_renderer import goal_text, hud_lines
from happymatch.systems.effect_lifecycle_system import EffectLifecycleSystem
from happymatch.systems.input import InputSystem
from happymatch.systems.render import RenderSystem
from happymatch.ui.layout import cell_at_point, compute_board_geometry, tile_center
from happymatch.utils.game_state import get_progress, set_game_phase
from tests.helpers import BASE_ROWS, DummyWindow, make_game, record, tile_id_at


def test_row_zero_is_drawn_at_top():
    tile_size, left, bottom = compute_board_geometry(800, 600)
    _, top_y = tile_center(0, 0, tile_size, left, bottom)
    _, bottom_y = tile_center(GRID_ROWS - 1, 0, tile_size, left, bottom)
    assert top_y > bottom_y
    assert bottom_y == bottom + tile_size / 2


def test_cell_at_point_inverts_tile_center():
    tile_size, left, bottom = compute_board_geometry(800, 600)
    for row, col in [(0, 0), (3, 5), (7, 7)]:
        x, y = tile_center(row, col, tile_size, left, bottom)
        assert cell_at_point(x, y, tile_size, left, bottom) == (row, col)
    assert cell_at_point(left - 1, bottom + 1, tile_size, left, bottom) is None


def test_render_context_snapshot():
    game = make_game(rows=BASE_ROWS)
    EffectLifecycleSystem(game.world, game.bus)
    game.bus.emit(EVENT_TILE_SWAP_INVALID, src_id=1, dst_id=2, reason="no_match")
    ctx = build_render_context(game.world, 800, 600)

    assert len(ctx.tiles) == 64
    assert set(ctx.centers) == set(range(1, 65))
    assert ctx.invalid_tile_ids == (1, 2)
    assert ctx.phase is GamePhase.IDLE
    assert ctx.level.config.level_id == 99
    # The context holds a copy so later score changes do not leak into a drawn frame.
    get_progress(game.world).score = 500
    assert ctx.progress.score == 0


def test_hud_lines_follow_phase():
    game = make_game(rows=BASE_ROWS)
    ctx = build_render_context(game.world, 800, 600)
    assert goal_text(ctx) == "Target: 0/2000"
    assert hud_lines(ctx)[:2] == ["Score: 0", "Moves: 10"]

    set_game_phase(game.world, game.bus, GamePhase.WON)
    won = build_render_context(game.world, 800, 600)
    assert "Level complete! Press N for the next level or R to replay" in hud_lines(won)

    set_game_phase(game.world, game.bus, GamePhase.MENU)
    assert hud_lines(build_render_context(game.world, 800, 600))[0] == "Happy Match"


def test_render_system_starts_without_context():
    game = make_game(rows=BASE_ROWS)
    render = RenderSystem(game.world, game.bus, DummyWindow())
    assert render.last_context is None


def test_left_click_on_board_becomes_tile_click():
    game = make_game(rows=BASE_ROWS)
    window = DummyWindow()
    InputSystem(game.bus, window, game.world)
    clicks = record(game.bus, EVENT_TILE_CLICK)[EVENT_TILE_CLICK]
    tile_size, left, bottom = compute_board_geometry(window.width, window.height)
    x, y = tile_center(2, 6, tile_size, left, bottom)

    game.bus.emit(EVENT_MOUSE_PRESS, x=x, y=y, button=1)
    game.bus.emit(EVENT_MOUSE_PRESS, x=x, y=y, button=4)
    game.bus.emit(EVENT_MOUSE_PRESS, x=1, y=1, button=1)

    assert clicks[0] == {"tile_id": tile_id_at(game.world, 2, 6)}
    assert len(clicks) == 1
