"""Chain-reaction expansion of a removal set through special tiles."""
from __future__ import annotations

import random
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from happymatch.components.special import SpecialKind
from happymatch.constants import BASE_COLORS, ICE_LOCKED
from happymatch.systems.board_ops import TileView


@dataclass(frozen=True, slots=True)
class Detonation:
    tile_id: int
    kind: SpecialKind
    row: int
    col: int
    color: Optional[str] = None


@dataclass(slots=True)
class ExplosionResult:
    removed_ids: List[int] = field(default_factory=list)
    shielded_ids: List[int] = field(default_factory=list)
    detonations: List[Detonation] = field(default_factory=list)


def blast_targets(
    tile: TileView,
    tiles: List[TileView],
    rng: random.Random,
) -> Tuple[List[int], Optional[str]]:
    """Return the ids a special tile hits and, for Wildcards, the color it picked."""
    kind = tile.special
    if kind is SpecialKind.ROW_CLEAR:
        return [t.tile_id for t in tiles if t.row == tile.row], None
    if kind is SpecialKind.COL_CLEAR:
        return [t.tile_id for t in tiles if t.col == tile.col], None
    if kind is SpecialKind.AREA_CLEAR:
        return [
            t.tile_id for t in tiles
            if abs(t.row - tile.row) <= 1 and abs(t.col - tile.col) <= 1
        ], None
    if kind is SpecialKind.WILDCARD:
        color = rng.choice(BASE_COLORS)
        return color_targets(tiles, color), color
    raise ValueError(f"Unhandled special kind: {kind!r}")


def color_targets(tiles: Iterable[TileView], color: str) -> List[int]:
    return [t.tile_id for t in tiles if t.color == color and not t.ingredient]


def propagate_explosions(
    tiles: Iterable[TileView],
    seed_ids: Iterable[int],
    *,
    rng: random.Random,
    protected_ids: Iterable[int] = (),
    direct: Optional[Mapping[int, str]] = None,
) -> ExplosionResult:
    """Expand ``seed_ids`` into the full removal set.

    Every tile is expanded at most once. Protected tiles never join the
    removal set. Locked tiles absorb the hit and are reported as shielded.
    Tiles listed in ``direct`` were triggered by the player and clear their
    given color instead of rolling a random one.
    """
    tile_list = sorted(tiles, key=lambda t: t.tile_id)
    by_id: Dict[int, TileView] = {t.tile_id: t for t in tile_list}
    protected = set(protected_ids)
    direct = dict(direct or {})
    queue = deque(list(direct.keys()) + list(seed_ids))
    visited = set()
    result = ExplosionResult()

    while queue:
        tile_id = queue.popleft()
        if tile_id in visited or tile_id in protected:
            continue
        tile = by_id.get(tile_id)
        if tile is None:
            continue
        visited.add(tile_id)

        if tile_id in direct:
            color = direct[tile_id]
            result.removed_ids.append(tile_id)
            result.detonations.append(Detonation(tile_id, tile.special, tile.row, tile.col, color))
            queue.extend(color_targets(tile_list, color))
            continue

        if tile.ice >= ICE_LOCKED:
            result.shielded_ids.append(tile_id)
            continue

        result.removed_ids.append(tile_id)
        if tile.special is SpecialKind.NONE:
            continue
        targets, color = blast_targets(tile, tile_list, rng)
        result.detonations.append(
            Detonation(tile_id, tile.special, tile.row, tile.col, color if color is not None else tile.color)
        )
        queue.extend(targets)
    return result
