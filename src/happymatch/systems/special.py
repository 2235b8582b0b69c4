from __future__ import annotations

from typing import Iterable, Optional

from esper import World

from happymatch.components.special import Special, SpecialKind
from happymatch.components.tile import Tile
from happymatch.components.tile_flags import TileFlags
from happymatch.constants import WILDCARD_COLOR
from happymatch.systems.board_ops import get_entity_for_tile
from happymatch.systems.match import SpecialDirective


def mark_matched(world: World, tile_ids: Iterable[int], effect: Optional[SpecialKind] = None) -> None:
    """Flag tiles for the clear animation; ``effect`` tags the run that forms a special."""
    wanted = set(tile_ids)
    for _, (tile, flags) in world.get_components(Tile, TileFlags):
        if tile.tile_id in wanted:
            flags.is_matched = True
            if effect is not None:
                flags.match_effect = effect


def synthesize_special(world: World, directive: SpecialDirective) -> Optional[int]:
    """Turn the directive's survivor into a special tile and return its entity.

    The survivor keeps its place on the board; a new Wildcard drops its color so
    it no longer joins runs.
    """
    entity = get_entity_for_tile(world, directive.tile_id)
    if entity is None:
        return None
    special: Special = world.component_for_entity(entity, Special)
    special.kind = directive.kind
    if directive.kind is SpecialKind.WILDCARD:
        world.component_for_entity(entity, Tile).color = WILDCARD_COLOR
    world.component_for_entity(entity, TileFlags).reset()
    return entity
