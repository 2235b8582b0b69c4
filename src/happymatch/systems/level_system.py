from __future__ import annotations

import logging
from typing import Optional

from esper import World

from happymatch.components.board import Board
from happymatch.components.game_state import GamePhase
from happymatch.components.level import ActiveLevel, LevelConfig
from happymatch.components.progress import Progress
from happymatch.constants import GRID_COLS, GRID_ROWS
from happymatch.events.bus import (
    EventBus,
    EVENT_BOARD_CHANGED,
    EVENT_LEVEL_EXIT_REQUEST,
    EVENT_LEVEL_EXITED,
    EVENT_LEVEL_RESTART_REQUEST,
    EVENT_LEVEL_START_REQUEST,
    EVENT_LEVEL_STARTED,
)
from happymatch.factories.levels import get_level
from happymatch.systems.board_ops import clear_tiles, populate_board, validate_board
from happymatch.systems.win_loss import count_initial_ice
from happymatch.utils.game_state import (
    emit_progress,
    get_active_level,
    get_game_state,
    set_game_phase,
)

logger = logging.getLogger(__name__)


class LevelSystem:
    """Creates a fresh board, progress and active level whenever a level starts."""

    def __init__(self, world: World, event_bus: EventBus, *, rows: int = GRID_ROWS, cols: int = GRID_COLS):
        self.world = world
        self.event_bus = event_bus
        self.rows = rows
        self.cols = cols
        self.event_bus.subscribe(EVENT_LEVEL_START_REQUEST, self.on_level_start_request)
        self.event_bus.subscribe(EVENT_LEVEL_RESTART_REQUEST, self.on_level_restart_request)
        self.event_bus.subscribe(EVENT_LEVEL_EXIT_REQUEST, self.on_level_exit_request)

    def on_level_start_request(self, sender, **kwargs):
        level = kwargs.get("level")
        if level is None:
            level_id = kwargs.get("level_id")
            level = get_level(level_id) if level_id is not None else None
        if level is None:
            logger.warning("Ignoring start request for unknown level %r", kwargs.get("level_id"))
            return
        self.start_level(level)

    def on_level_restart_request(self, sender, **kwargs):
        self.restart_level()

    def on_level_exit_request(self, sender, **kwargs):
        self.exit_to_menu()

    def start_level(self, level: LevelConfig | int) -> LevelConfig:
        if isinstance(level, int):
            config = get_level(level)
            if config is None:
                raise KeyError(f"Unknown level id: {level}")
            level = config
        self._clear_board()
        board_entity = self.world.create_entity(Board(rows=self.rows, cols=self.cols))
        self._set_level_resources(level)
        populate_board(self.world, level)
        validate_board(self.world)
        state = get_game_state(self.world)
        state.selected_tile_id = None
        logger.info("Starting level %s '%s' (%s, %d moves)", level.level_id, level.name, level.mode.value, level.moves)
        self.event_bus.emit(EVENT_LEVEL_STARTED, level_id=level.level_id, mode=level.mode)
        set_game_phase(self.world, self.event_bus, GamePhase.IDLE)
        emit_progress(self.world, self.event_bus)
        self.event_bus.emit(EVENT_BOARD_CHANGED, reason="level_start", board_entity=board_entity)
        return level

    def restart_level(self) -> Optional[LevelConfig]:
        active = get_active_level(self.world)
        if active is None:
            return None
        logger.info("Restarting level %s", active.config.level_id)
        return self.start_level(active.config)

    def exit_to_menu(self) -> None:
        get_game_state(self.world).selected_tile_id = None
        level_id = None
        for entity, active in list(self.world.get_component(ActiveLevel)):
            level_id = active.config.level_id
            self.world.remove_component(entity, ActiveLevel)
        self.event_bus.emit(EVENT_LEVEL_EXITED, level_id=level_id)
        set_game_phase(self.world, self.event_bus, GamePhase.MENU)

    def _clear_board(self) -> None:
        clear_tiles(self.world)
        for entity, _ in list(self.world.get_component(Board)):
            self.world.delete_entity(entity, immediate=True)

    def _set_level_resources(self, level: LevelConfig) -> None:
        for entity, progress in self.world.get_component(Progress):
            progress.score = 0
            progress.moves_remaining = level.moves
            progress.items_collected = 0
            progress.ice_cleared = 0
            progress.combo = 1
            self.world.add_component(entity, ActiveLevel(config=level, total_ice=count_initial_ice(level)))
            return
        raise RuntimeError("Progress resource not found")
