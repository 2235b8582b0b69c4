from __future__ import annotations

from typing import List, Tuple

from esper import World

from happymatch.components.detonation_effect import DetonationEffect
from happymatch.components.duration import Duration
from happymatch.components.invalid_swap_marker import InvalidSwapMarker
from happymatch.constants import EFFECT_DISPLAY_WINDOW, INVALID_MARKER_DURATION
from happymatch.events.bus import (
    EventBus,
    EVENT_DETONATION,
    EVENT_LEVEL_STARTED,
    EVENT_TICK,
    EVENT_TILE_SWAP_INVALID,
)

# Rejections that point at two real tiles on the board.
MARKED_REJECTIONS = frozenset({"not_adjacent", "no_match"})


class EffectLifecycleSystem:
    """Spawns short-lived detonation and invalid-swap entities and expires them on ticks."""

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        *,
        effect_window: float = EFFECT_DISPLAY_WINDOW,
        invalid_window: float = INVALID_MARKER_DURATION,
    ):
        self.world = world
        self.event_bus = event_bus
        self.effect_window = effect_window
        self.invalid_window = invalid_window
        self.event_bus.subscribe(EVENT_DETONATION, self.on_detonation)
        self.event_bus.subscribe(EVENT_TILE_SWAP_INVALID, self.on_swap_invalid)
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)
        self.event_bus.subscribe(EVENT_LEVEL_STARTED, self.on_level_started)

    def on_detonation(self, sender, **kwargs):
        for detonation in kwargs.get("detonations") or []:
            self.world.create_entity(
                DetonationEffect(
                    tile_id=detonation.tile_id,
                    kind=detonation.kind,
                    row=detonation.row,
                    col=detonation.col,
                    color=detonation.color,
                ),
                Duration(self.effect_window),
            )

    def on_swap_invalid(self, sender, **kwargs):
        reason = kwargs.get("reason")
        if reason not in MARKED_REJECTIONS:
            return
        tile_ids = tuple(t for t in (kwargs.get("src_id"), kwargs.get("dst_id")) if t is not None)
        # Only one marker is shown at a time.
        for entity, _ in list(self.world.get_component(InvalidSwapMarker)):
            self.world.delete_entity(entity, immediate=True)
        self.world.create_entity(
            InvalidSwapMarker(tile_ids=tile_ids, reason=reason),
            Duration(self.invalid_window),
        )

    def on_tick(self, sender, **kwargs):
        dt = kwargs.get("dt", 0.0)
        expired: List[int] = []
        for entity, duration in self.world.get_component(Duration):
            duration.elapsed += dt
            if duration.expired:
                expired.append(entity)
        for entity in expired:
            self.world.delete_entity(entity, immediate=True)

    def on_level_started(self, sender, **kwargs):
        for entity, _ in list(self.world.get_component(Duration)):
            self.world.delete_entity(entity, immediate=True)


def active_detonations(world: World) -> List[DetonationEffect]:
    return [effect for _, effect in world.get_component(DetonationEffect)]


def invalid_swap_tile_ids(world: World) -> Tuple[int, ...]:
    for _, marker in world.get_component(InvalidSwapMarker):
        return marker.tile_ids
    return ()
