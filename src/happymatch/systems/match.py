"""Run detection and special-tile directives.

Runs are scanned row by row, then column by column. The directive rules are
applied in priority order and only the first one that applies is returned:

1. a run of five or more yields a Wildcard,
2. the first horizontal run crossing a vertical run yields an area clear,
3. a run of exactly four yields a line clear perpendicular to the run.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from happymatch.components.special import SpecialKind
from happymatch.systems.board_ops import Position, TileView, is_matchable


class Axis(Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


@dataclass(frozen=True, slots=True)
class Run:
    axis: Axis
    color: str
    tile_ids: Tuple[int, ...]
    positions: Tuple[Position, ...]

    def __len__(self) -> int:
        return len(self.tile_ids)


@dataclass(frozen=True, slots=True)
class SpecialDirective:
    kind: SpecialKind
    tile_id: int


@dataclass(frozen=True, slots=True)
class MatchResult:
    matched_ids: Tuple[int, ...] = ()
    runs: Tuple[Run, ...] = field(default_factory=tuple)
    directive: Optional[SpecialDirective] = None

    @property
    def has_match(self) -> bool:
        return bool(self.matched_ids)


def _scan_line(grid: Dict[Position, TileView], cells: List[Position], axis: Axis) -> List[Run]:
    runs: List[Run] = []
    current: List[TileView] = []

    def flush() -> None:
        if len(current) >= 3:
            runs.append(
                Run(
                    axis=axis,
                    color=current[0].color,
                    tile_ids=tuple(view.tile_id for view in current),
                    positions=tuple(view.position for view in current),
                )
            )

    for pos in cells:
        view = grid.get(pos)
        if view is None or not is_matchable(view):
            flush()
            current = []
            continue
        if current and current[-1].color == view.color:
            current.append(view)
        else:
            flush()
            current = [view]
    flush()
    return runs


def find_runs(grid: Dict[Position, TileView], rows: int, cols: int) -> List[Run]:
    """Return maximal runs of three or more, horizontal runs first."""
    runs: List[Run] = []
    for r in range(rows):
        runs.extend(_scan_line(grid, [(r, c) for c in range(cols)], Axis.HORIZONTAL))
    for c in range(cols):
        runs.extend(_scan_line(grid, [(r, c) for r in range(rows)], Axis.VERTICAL))
    return runs


def _spawn_id(run: Run, last_moved_id: Optional[int], fallback_index: int) -> int:
    if last_moved_id is not None and last_moved_id in run.tile_ids:
        return last_moved_id
    return run.tile_ids[fallback_index]


def choose_directive(runs: List[Run], last_moved_id: Optional[int] = None) -> Optional[SpecialDirective]:
    for run in runs:
        if len(run) >= 5:
            return SpecialDirective(SpecialKind.WILDCARD, _spawn_id(run, last_moved_id, 2))

    horizontal = [run for run in runs if run.axis is Axis.HORIZONTAL]
    vertical = [run for run in runs if run.axis is Axis.VERTICAL]
    for h_run in horizontal:
        for v_run in vertical:
            shared = [tile_id for tile_id in h_run.tile_ids if tile_id in v_run.tile_ids]
            if shared:
                return SpecialDirective(SpecialKind.AREA_CLEAR, shared[0])

    for run in runs:
        if len(run) == 4:
            kind = SpecialKind.COL_CLEAR if run.axis is Axis.HORIZONTAL else SpecialKind.ROW_CLEAR
            return SpecialDirective(kind, _spawn_id(run, last_moved_id, 1))
    return None


def detect_matches(
    grid: Dict[Position, TileView],
    rows: int,
    cols: int,
    last_moved_id: Optional[int] = None,
) -> MatchResult:
    runs = find_runs(grid, rows, cols)
    if not runs:
        return MatchResult()
    matched: List[int] = []
    seen = set()
    for run in runs:
        for tile_id in run.tile_ids:
            if tile_id not in seen:
                seen.add(tile_id)
                matched.append(tile_id)
    return MatchResult(
        matched_ids=tuple(matched),
        runs=tuple(runs),
        directive=choose_directive(runs, last_moved_id),
    )
