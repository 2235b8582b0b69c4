from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from esper import World

from happymatch.components.detonation_effect import DetonationEffect
from happymatch.components.game_state import GamePhase
from happymatch.components.level import ActiveLevel
from happymatch.components.narrative_message import NarrativeMessage
from happymatch.components.progress import Progress
from happymatch.systems.board_ops import TileView, snapshot_tiles
from happymatch.systems.effect_lifecycle_system import active_detonations, invalid_swap_tile_ids
from happymatch.ui.layout import compute_board_geometry, tile_center
from happymatch.utils.game_state import get_active_level, get_game_state, get_progress


@dataclass(slots=True)
class RenderContext:
    """Frame-scoped snapshot of everything the renderers draw."""

    window_width: int
    window_height: int
    tile_size: int
    board_left: float
    board_bottom: float
    phase: GamePhase
    progress: Progress
    tiles: List[TileView] = field(default_factory=list)
    centers: Dict[int, Tuple[float, float]] = field(default_factory=dict)
    detonations: List[DetonationEffect] = field(default_factory=list)
    invalid_tile_ids: Tuple[int, ...] = ()
    selected_tile_id: Optional[int] = None
    level: Optional[ActiveLevel] = None
    narrative_text: str = ""


def _narrative_text(world: World) -> str:
    for _, message in world.get_component(NarrativeMessage):
        return message.text
    return ""


def build_render_context(world: World, window_width: int, window_height: int) -> RenderContext:
    """Populate a RenderContext for the current frame; performs no drawing."""

    tile_size, board_left, board_bottom = compute_board_geometry(window_width, window_height)
    tiles = snapshot_tiles(world)
    centers = {
        view.tile_id: tile_center(view.row, view.col, tile_size, board_left, board_bottom)
        for view in tiles
    }
    state = get_game_state(world)
    progress = get_progress(world)
    return RenderContext(
        window_width=window_width,
        window_height=window_height,
        tile_size=tile_size,
        board_left=board_left,
        board_bottom=board_bottom,
        phase=state.phase,
        progress=Progress(
            score=progress.score,
            moves_remaining=progress.moves_remaining,
            items_collected=progress.items_collected,
            ice_cleared=progress.ice_cleared,
            combo=progress.combo,
        ),
        tiles=tiles,
        centers=centers,
        detonations=active_detonations(world),
        invalid_tile_ids=invalid_swap_tile_ids(world),
        selected_tile_id=state.selected_tile_id,
        level=get_active_level(world),
        narrative_text=_narrative_text(world),
    )
