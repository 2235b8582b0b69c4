from typing import Optional

from esper import World

from happymatch.events.bus import (
    EventBus,
    EVENT_MOUSE_PRESS,
    EVENT_TILE_CLICK,
    EVENT_TILE_DESELECTED,
    EVENT_TILE_SELECTED,
    EVENT_TILE_SWAP_REQUEST,
    EVENT_LEVEL_STARTED,
)
from happymatch.components.board_position import BoardPosition
from happymatch.components.game_state import GamePhase, INPUT_PHASES
from happymatch.systems.board_ops import are_adjacent, get_entity_for_tile
from happymatch.utils.game_state import get_game_state, get_progress, set_game_phase


class BoardSystem:
    """Turns tile clicks into selections and swap requests."""

    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.event_bus.subscribe(EVENT_TILE_CLICK, self.on_tile_click)
        self.event_bus.subscribe(EVENT_MOUSE_PRESS, self.on_mouse_press)
        self.event_bus.subscribe(EVENT_LEVEL_STARTED, self.on_level_started)

    @property
    def selected(self) -> Optional[int]:
        return get_game_state(self.world).selected_tile_id

    def on_level_started(self, sender, **kwargs):
        get_game_state(self.world).selected_tile_id = None

    def on_tile_click(self, sender, **kwargs):
        tile_id = kwargs.get('tile_id')
        if tile_id is None:
            return
        state = get_game_state(self.world)
        if state.phase not in INPUT_PHASES:
            return
        if get_progress(self.world).moves_remaining <= 0:
            return
        position = self._position_of(tile_id)
        if position is None:
            return
        selected = state.selected_tile_id
        if selected is None:
            self._select(tile_id, position)
            return
        if selected == tile_id:
            self._deselect(reason='same_tile')
            return
        selected_position = self._position_of(selected)
        if selected_position is None or not are_adjacent(selected_position, position):
            # Change selection to new tile
            self._select(tile_id, position)
            return
        state.selected_tile_id = None
        set_game_phase(self.world, self.event_bus, GamePhase.IDLE)
        self.event_bus.emit(EVENT_TILE_SWAP_REQUEST, src_id=selected, dst_id=tile_id)

    def on_mouse_press(self, sender, **kwargs):
        # Right-click always clears current selection
        # Arcade uses 4 for right mouse button (arcade.MOUSE_BUTTON_RIGHT)
        if kwargs.get('button') != 4:
            return
        state = get_game_state(self.world)
        if state.selected_tile_id is None:
            return
        self._deselect(reason='right_click')

    def _select(self, tile_id: int, position) -> None:
        state = get_game_state(self.world)
        state.selected_tile_id = tile_id
        set_game_phase(self.world, self.event_bus, GamePhase.SELECTED)
        self.event_bus.emit(EVENT_TILE_SELECTED, tile_id=tile_id, row=position[0], col=position[1])

    def _deselect(self, reason: str) -> None:
        state = get_game_state(self.world)
        prev = state.selected_tile_id
        state.selected_tile_id = None
        if state.phase is GamePhase.SELECTED:
            set_game_phase(self.world, self.event_bus, GamePhase.IDLE)
        self.event_bus.emit(EVENT_TILE_DESELECTED, tile_id=prev, reason=reason)

    def _position_of(self, tile_id: int):
        entity = get_entity_for_tile(self.world, tile_id)
        if entity is None:
            return None
        pos: BoardPosition = self.world.component_for_entity(entity, BoardPosition)
        return pos.row, pos.col
