from happymatch.events.bus import EventBus, EVENT_MOUSE_PRESS, EVENT_TILE_CLICK
from happymatch.components.game_state import GameState, INPUT_PHASES
from happymatch.systems.board_ops import get_entity_at
from happymatch.components.tile import Tile
from happymatch.ui.layout import cell_at_point, compute_board_geometry


class InputSystem:
    def __init__(self, event_bus: EventBus, window, world=None):
        self.event_bus = event_bus
        self.window = window
        self.world = world
        self.event_bus.subscribe(EVENT_MOUSE_PRESS, self.on_mouse_press)

    def on_mouse_press(self, sender, **kwargs):
        x = kwargs.get('x')
        y = kwargs.get('y')
        button = kwargs.get('button')
        if x is None or y is None:
            return
        # Left button (1) drives tile clicks; BoardSystem listens for right-click directly.
        if button != 1:
            return
        if self.world is None or not self._input_phase_active():
            return
        tile_size, start_x, start_y = compute_board_geometry(self.window.width, self.window.height)
        cell = cell_at_point(x, y, tile_size, start_x, start_y)
        if cell is None:
            return
        entity = get_entity_at(self.world, *cell)
        if entity is None:
            return
        tile = self.world.component_for_entity(entity, Tile)
        self.event_bus.emit(EVENT_TILE_CLICK, tile_id=tile.tile_id)

    def _input_phase_active(self) -> bool:
        states = list(self.world.get_component(GameState))
        if not states:
            return False
        return states[0][1].phase in INPUT_PHASES
