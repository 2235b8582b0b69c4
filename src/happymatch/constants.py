GRID_ROWS = 8
GRID_COLS = 8
TILE_SIZE = 64
BOTTOM_MARGIN = 20

# Board maximum footprint relative to window (percentage of window width/height).
BOARD_MAX_WIDTH_PCT = 0.75
BOARD_MAX_HEIGHT_PCT = 0.80

# ============================================================================
# TILE COLORS
# ============================================================================
BASE_COLORS = ('red', 'blue', 'green', 'yellow', 'purple', 'orange')
WILDCARD_COLOR = 'wildcard'
INGREDIENT_COLOR = 'ingredient'

TILE_PALETTE = {
    'red':        (239, 68, 68),
    'blue':       (59, 130, 246),
    'green':      (34, 197, 94),
    'yellow':     (250, 204, 21),
    'purple':     (168, 85, 247),
    'orange':     (249, 115, 22),
    'wildcard':   (241, 245, 249),
    'ingredient': (254, 205, 211),
}

# ============================================================================
# SCORING
# ============================================================================
POINTS_PER_TILE = 10
INGREDIENT_BONUS = 1000
INGREDIENT_SPAWN_CHANCE = 0.05

# Ice layers: 1 = single layer, 2 = locked (absorbs one hit before breaking).
ICE_LOCKED = 2

# ============================================================================
# TIMING (seconds)
# ============================================================================
SWAP_DURATION = 0.25
CLEAR_DURATION = 0.25
SETTLE_DURATION = 0.27
EFFECT_DISPLAY_WINDOW = 0.5
INVALID_MARKER_DURATION = 0.35

# Board generation retries before giving up.
BOARD_GENERATION_ATTEMPTS = 200
