import random

from esper import World
from happymatch.events.bus import EventBus
from happymatch.components.game_state import GameState, GamePhase
from happymatch.components.progress import Progress
from happymatch.components.narrative_message import NarrativeMessage
from happymatch.components.tile_type_registry import TileTypeRegistry
from happymatch.components.tile_types import TileTypes
from happymatch.constants import BASE_COLORS, TILE_PALETTE


def create_world(
    event_bus: EventBus,
    initial_phase: GamePhase = GamePhase.MENU,
    *,
    rng: random.Random | None = None,
) -> World:
    world = World()
    setattr(world, "random", rng or random.Random())

    # Register the global game state resource.
    state_entity = world.create_entity()
    world.add_component(state_entity, GameState(phase=initial_phase))
    world.add_component(state_entity, Progress())
    world.add_component(state_entity, NarrativeMessage())

    # Create single registry entity with canonical colors
    world.create_entity(
        TileTypeRegistry(),
        TileTypes(
            types=dict(TILE_PALETTE),
            spawnable=list(BASE_COLORS),
        ),
    )
    return world
