"""Level definitions and the per-level runtime resource."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from happymatch.constants import BASE_COLORS, GRID_COLS, GRID_ROWS
from happymatch.errors import LevelConfigError

IceLayout = Tuple[Tuple[int, ...], ...]


class GoalMode(Enum):
    TARGET_SCORE = "target_score"
    CLEAR_ICE = "clear_ice"
    COLLECT_ITEMS = "collect_items"


@dataclass(frozen=True, slots=True)
class LevelConfig:
    """Immutable level description; validated on construction.

    A configuration that lacks the fields its goal mode needs raises
    ``LevelConfigError`` instead of producing an unwinnable level.
    """

    mode: GoalMode
    moves: int
    target_score: int = 0
    target_color: Optional[str] = None
    target_count: Optional[int] = None
    ice_layout: Optional[IceLayout] = None
    level_id: int = 0
    name: str = ""
    description: str = ""

    def __post_init__(self) -> None:
        validate_level_config(self)

    def ice_at(self, row: int, col: int) -> int:
        if self.ice_layout is None:
            return 0
        value = self.ice_layout[row][col]
        return value if value > 0 else 0


def validate_level_config(level: LevelConfig) -> None:
    label = level.name or f"level {level.level_id}"
    if not isinstance(level.mode, GoalMode):
        raise LevelConfigError(f"{label}: unknown goal mode {level.mode!r}")
    if level.moves <= 0:
        raise LevelConfigError(f"{label}: move budget must be positive, got {level.moves}")
    if level.target_color is not None and level.target_color not in BASE_COLORS:
        raise LevelConfigError(f"{label}: target color '{level.target_color}' is not a base color")
    if level.ice_layout is not None:
        if len(level.ice_layout) != GRID_ROWS or any(len(row) != GRID_COLS for row in level.ice_layout):
            raise LevelConfigError(f"{label}: ice layout must be {GRID_ROWS}x{GRID_COLS}")

    if level.mode is GoalMode.TARGET_SCORE:
        if level.target_color is not None:
            if not level.target_count or level.target_count <= 0:
                raise LevelConfigError(f"{label}: target color '{level.target_color}' needs a positive target count")
        elif level.target_score <= 0:
            raise LevelConfigError(f"{label}: target score mode needs a positive target score")
    elif level.mode is GoalMode.CLEAR_ICE:
        if level.ice_layout is None or not any(cell > 0 for row in level.ice_layout for cell in row):
            raise LevelConfigError(f"{label}: clear-ice mode needs an ice layout with at least one iced cell")
    elif level.mode is GoalMode.COLLECT_ITEMS:
        if not level.target_count or level.target_count <= 0:
            raise LevelConfigError(f"{label}: collect mode needs a positive target count")


@dataclass(slots=True)
class ActiveLevel:
    """Level currently being played plus values precomputed at level start."""

    config: LevelConfig
    total_ice: int = 0
