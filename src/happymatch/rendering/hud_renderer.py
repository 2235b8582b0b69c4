from __future__ import annotations

from typing import TYPE_CHECKING

from happymatch.components.game_state import GamePhase
from happymatch.components.level import GoalMode

if TYPE_CHECKING:
    from happymatch.rendering.context import RenderContext

TEXT_COLOR = (241, 245, 249)


def goal_text(ctx: RenderContext) -> str:
    if ctx.level is None:
        return ""
    config = ctx.level.config
    progress = ctx.progress
    if config.mode is GoalMode.TARGET_SCORE:
        if config.target_color is not None:
            return f"{config.target_color.title()}: {progress.items_collected}/{config.target_count}"
        return f"Target: {progress.score}/{config.target_score}"
    if config.mode is GoalMode.CLEAR_ICE:
        return f"Ice: {progress.ice_cleared}/{ctx.level.total_ice}"
    return f"Cherries: {progress.items_collected}/{config.target_count}"


def hud_lines(ctx: RenderContext) -> list[str]:
    if ctx.phase is GamePhase.MENU:
        return ["Happy Match", "Press 1, 2 or 3 to pick a level"]
    lines = [
        f"Score: {ctx.progress.score}",
        f"Moves: {ctx.progress.moves_remaining}",
        goal_text(ctx),
    ]
    if ctx.progress.combo > 1:
        lines.append(f"Combo x{ctx.progress.combo}")
    if ctx.phase is GamePhase.WON:
        lines.append("Level complete! Press N for the next level or R to replay")
    elif ctx.phase is GamePhase.LOST:
        lines.append("Out of moves. Press R to retry or N to skip ahead")
    if ctx.narrative_text:
        lines.append(ctx.narrative_text)
    return lines


class HudRenderer:
    def __init__(self, line_height: int = 24, font_size: int = 14):
        self._line_height = line_height
        self._font_size = font_size

    def render(self, arcade, ctx: RenderContext) -> None:
        x = 16
        y = ctx.window_height - self._line_height
        for line in hud_lines(ctx):
            if line:
                arcade.draw_text(line, x, y, TEXT_COLOR, self._font_size)
            y -= self._line_height
