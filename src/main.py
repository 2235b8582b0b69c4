"""Entry point for the Happy Match puzzle.

Sets up ECS world, event bus, systems, and Arcade window.
"""
import logging

from arcade import Window, run, set_background_color, color, key
from happymatch.world import create_world
from happymatch.events.bus import (
    EventBus,
    EVENT_TICK,
    EVENT_MOUSE_PRESS,
    EVENT_LEVEL_START_REQUEST,
    EVENT_LEVEL_RESTART_REQUEST,
    EVENT_LEVEL_EXIT_REQUEST,
)
from happymatch.components.game_state import GameState, GamePhase
from happymatch.factories.levels import next_level_id
from happymatch.systems.board import BoardSystem
from happymatch.systems.effect_lifecycle_system import EffectLifecycleSystem
from happymatch.systems.input import InputSystem
from happymatch.systems.level_system import LevelSystem
from happymatch.systems.match_resolution import MatchResolutionSystem
from happymatch.systems.narrative_system import NarrativeSystem
from happymatch.systems.render import RenderSystem
from happymatch.utils.game_state import get_active_level

LEVEL_KEYS = {
    key.KEY_1: 1,
    key.KEY_2: 2,
    key.KEY_3: 3,
}


class HappyMatchWindow(Window):
    def __init__(self, narrative_provider=None):
        super().__init__(800, 600, "Happy Match", resizable=True)
        self.set_update_rate(1/60)
        self.event_bus = EventBus()
        self.world = create_world(self.event_bus, initial_phase=GamePhase.MENU)

        # Level flow
        self.level_system = LevelSystem(self.world, self.event_bus)
        self.narrative_system = NarrativeSystem(self.world, self.event_bus, provider=narrative_provider)

        # Interface systems
        self.render_system = RenderSystem(self.world, self.event_bus, self)
        self.input_system = InputSystem(self.event_bus, self, self.world)

        # Board systems
        self.board_system = BoardSystem(self.world, self.event_bus)
        self.match_resolution_system = MatchResolutionSystem(self.world, self.event_bus)
        self.effect_lifecycle_system = EffectLifecycleSystem(self.world, self.event_bus)

        set_background_color(color.BLACK)

    def on_draw(self):
        self.clear()
        self.render_system.process()

    def on_update(self, delta_time: float):
        self.event_bus.emit(EVENT_TICK, dt=delta_time)

    def on_mouse_press(self, x: float, y: float, button: int, modifiers: int):
        self.event_bus.emit(EVENT_MOUSE_PRESS, x=x, y=y, button=button)

    def on_key_press(self, symbol: int, modifiers: int):
        state = self._get_game_state()
        if state is None:
            return
        if symbol in LEVEL_KEYS and state.phase in (GamePhase.MENU, GamePhase.WON, GamePhase.LOST):
            self.event_bus.emit(EVENT_LEVEL_START_REQUEST, level_id=LEVEL_KEYS[symbol], level=None)
        elif symbol == key.N and state.phase in (GamePhase.WON, GamePhase.LOST):
            active = get_active_level(self.world)
            if active is not None:
                self.event_bus.emit(
                    EVENT_LEVEL_START_REQUEST, level_id=next_level_id(active.config.level_id), level=None
                )
        elif symbol == key.R and state.phase is not GamePhase.MENU:
            self.event_bus.emit(EVENT_LEVEL_RESTART_REQUEST)
        elif symbol == key.ESCAPE:
            self.event_bus.emit(EVENT_LEVEL_EXIT_REQUEST)

    def _get_game_state(self) -> GameState | None:
        for _, state in self.world.get_component(GameState):
            return state
        return None


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    window = HappyMatchWindow()
    run()


if __name__ == "__main__":
    main()
