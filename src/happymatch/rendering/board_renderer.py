from __future__ import annotations

from typing import TYPE_CHECKING

from happymatch.components.special import SpecialKind
from happymatch.constants import GRID_COLS, GRID_ROWS
from happymatch.ui.layout import tile_center

if TYPE_CHECKING:
    from happymatch.components.tile_types import TileTypes
    from happymatch.rendering.context import RenderContext

ICE_COLOR = (186, 230, 253)
INVALID_COLOR = (239, 68, 68)
SELECTED_COLOR = (255, 255, 255)
MATCHED_ALPHA = 110


class BoardRenderer:
    def __init__(self, padding: int = 4):
        self._padding = padding

    def render(self, arcade, ctx: RenderContext, registry: TileTypes) -> None:
        draw_size = max(ctx.tile_size - self._padding, 4)
        radius = draw_size / 2
        invalid = set(ctx.invalid_tile_ids)
        outline_commands: list[tuple[float, float, float, tuple]] = []

        for view in ctx.tiles:
            cx, cy = ctx.centers[view.tile_id]
            r, g, b = registry.background_for(view.color)
            if view.is_matched:
                arcade.draw_circle_filled(cx, cy, radius * 0.8, (r, g, b, MATCHED_ALPHA))
            else:
                arcade.draw_circle_filled(cx, cy, radius, (r, g, b))
            self._draw_special(arcade, view.special, cx, cy, radius)
            if view.ice > 0:
                for layer in range(view.ice):
                    arcade.draw_circle_outline(cx, cy, radius - 2 - layer * 4, ICE_COLOR, 3)
            if view.ingredient:
                arcade.draw_circle_filled(cx, cy, radius * 0.3, (190, 18, 60))
            if view.tile_id in invalid:
                outline_commands.append((cx, cy, radius + 2, INVALID_COLOR))
            elif view.tile_id == ctx.selected_tile_id:
                outline_commands.append((cx, cy, radius + 3, SELECTED_COLOR))

        for cx, cy, outline_radius, color in outline_commands:
            arcade.draw_circle_outline(cx, cy, outline_radius, color, 3)

        for effect in ctx.detonations:
            self._draw_detonation(arcade, ctx, effect)

    @staticmethod
    def _draw_special(arcade, kind: SpecialKind, cx: float, cy: float, radius: float) -> None:
        stripe = (255, 255, 255)
        if kind is SpecialKind.NONE:
            return
        if kind is SpecialKind.ROW_CLEAR:
            arcade.draw_line(cx - radius * 0.7, cy, cx + radius * 0.7, cy, stripe, 4)
        elif kind is SpecialKind.COL_CLEAR:
            arcade.draw_line(cx, cy - radius * 0.7, cx, cy + radius * 0.7, stripe, 4)
        elif kind is SpecialKind.AREA_CLEAR:
            arcade.draw_circle_outline(cx, cy, radius * 0.55, stripe, 4)
        elif kind is SpecialKind.WILDCARD:
            arcade.draw_circle_outline(cx, cy, radius * 0.4, (0, 0, 0), 3)

    @staticmethod
    def _draw_detonation(arcade, ctx: RenderContext, effect) -> None:
        cx, cy = tile_center(effect.row, effect.col, ctx.tile_size, ctx.board_left, ctx.board_bottom)
        board_w = ctx.tile_size * GRID_COLS
        board_h = ctx.tile_size * GRID_ROWS
        flash = (255, 255, 255, 160)
        if effect.kind is SpecialKind.ROW_CLEAR:
            arcade.draw_line(ctx.board_left, cy, ctx.board_left + board_w, cy, flash, ctx.tile_size * 0.5)
        elif effect.kind is SpecialKind.COL_CLEAR:
            arcade.draw_line(cx, ctx.board_bottom, cx, ctx.board_bottom + board_h, flash, ctx.tile_size * 0.5)
        elif effect.kind is SpecialKind.AREA_CLEAR:
            arcade.draw_circle_filled(cx, cy, ctx.tile_size * 1.5, flash)
        else:
            arcade.draw_circle_outline(cx, cy, ctx.tile_size * 2, flash, 6)
