from __future__ import annotations

from typing import Optional

from esper import World

from happymatch.components.game_state import GamePhase, GameState
from happymatch.components.progress import Progress
from happymatch.components.level import ActiveLevel
from happymatch.events.bus import EVENT_GAME_PHASE_CHANGED, EVENT_PROGRESS_CHANGED, EventBus


def get_game_state(world: World) -> GameState:
    for _, state in world.get_component(GameState):
        return state
    raise RuntimeError("GameState resource not found")


def get_progress(world: World) -> Progress:
    for _, progress in world.get_component(Progress):
        return progress
    raise RuntimeError("Progress resource not found")


def get_active_level(world: World) -> Optional[ActiveLevel]:
    for _, active in world.get_component(ActiveLevel):
        return active
    return None


def set_game_phase(world: World, event_bus: EventBus, phase: GamePhase) -> None:
    """Update the global game phase and emit a change event when it differs."""

    state = get_game_state(world)
    previous_phase = state.phase
    if previous_phase == phase:
        return
    state.phase = phase
    event_bus.emit(
        EVENT_GAME_PHASE_CHANGED,
        previous_phase=previous_phase,
        new_phase=phase,
    )


def emit_progress(world: World, event_bus: EventBus) -> None:
    progress = get_progress(world)
    event_bus.emit(
        EVENT_PROGRESS_CHANGED,
        score=progress.score,
        moves_remaining=progress.moves_remaining,
        items_collected=progress.items_collected,
        ice_cleared=progress.ice_cleared,
        combo=progress.combo,
    )
