from typing import Optional, Tuple

from happymatch.constants import GRID_COLS, GRID_ROWS, BOTTOM_MARGIN, BOARD_MAX_WIDTH_PCT, BOARD_MAX_HEIGHT_PCT


def compute_board_geometry(window_width: int, window_height: int):
    """Return (tile_size, start_x, start_y) shared by rendering and input mapping."""
    # Compute maximum board area based on percentage caps instead of static reserves.
    max_board_w = window_width * BOARD_MAX_WIDTH_PCT
    max_board_h = (window_height - BOTTOM_MARGIN) * BOARD_MAX_HEIGHT_PCT
    tile_by_w = max_board_w / GRID_COLS
    tile_by_h = max_board_h / GRID_ROWS
    tile_size = int(min(tile_by_w, tile_by_h))
    if tile_size < 20:
        tile_size = 20
    total_width = GRID_COLS * tile_size
    start_x = (window_width - total_width) / 2
    start_y = BOTTOM_MARGIN
    return tile_size, start_x, start_y


def tile_center(row: int, col: int, tile_size: int, start_x: float, start_y: float) -> Tuple[float, float]:
    """Screen center of a cell; row 0 is drawn at the top of the board."""
    cx = start_x + col * tile_size + tile_size / 2
    cy = start_y + (GRID_ROWS - 1 - row) * tile_size + tile_size / 2
    return cx, cy


def cell_at_point(x: float, y: float, tile_size: int, start_x: float, start_y: float) -> Optional[Tuple[int, int]]:
    if x < start_x or x >= start_x + GRID_COLS * tile_size:
        return None
    if y < start_y or y >= start_y + GRID_ROWS * tile_size:
        return None
    col = int((x - start_x) // tile_size)
    row_from_bottom = int((y - start_y) // tile_size)
    return GRID_ROWS - 1 - row_from_bottom, col
