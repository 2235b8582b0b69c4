from __future__ import annotations

from enum import Enum

from happymatch.components.level import GoalMode, LevelConfig
from happymatch.components.progress import Progress


class LevelOutcome(Enum):
    IN_PROGRESS = "in_progress"
    WON = "won"
    LOST = "lost"


def count_initial_ice(level: LevelConfig) -> int:
    if level.ice_layout is None:
        return 0
    return sum(1 for row in level.ice_layout for cell in row if cell > 0)


def is_goal_met(level: LevelConfig, progress: Progress, total_ice: int) -> bool:
    if level.mode is GoalMode.TARGET_SCORE:
        if level.target_color is not None:
            return progress.items_collected >= (level.target_count or 0)
        return progress.score >= level.target_score
    if level.mode is GoalMode.CLEAR_ICE:
        return progress.ice_cleared >= total_ice
    if level.mode is GoalMode.COLLECT_ITEMS:
        return progress.items_collected >= (level.target_count or 0)
    raise ValueError(f"Unhandled goal mode: {level.mode!r}")


def evaluate_outcome(level: LevelConfig, progress: Progress, total_ice: int) -> LevelOutcome:
    """Win takes precedence over running out of moves on the same step."""
    if is_goal_met(level, progress, total_ice):
        return LevelOutcome.WON
    if progress.moves_remaining <= 0:
        return LevelOutcome.LOST
    return LevelOutcome.IN_PROGRESS
