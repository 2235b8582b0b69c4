from __future__ import annotations

import logging
import random
from collections import Counter
from typing import Dict, List, Optional

from esper import World

from happymatch.components.game_state import GamePhase, TERMINAL_PHASES
from happymatch.components.special import SpecialKind
from happymatch.constants import BASE_COLORS, CLEAR_DURATION, SETTLE_DURATION, SWAP_DURATION
from happymatch.components.level import GoalMode
from happymatch.events.bus import (
    EventBus,
    EVENT_BOARD_CHANGED,
    EVENT_BOARD_RESHUFFLED,
    EVENT_CASCADE_COMPLETE,
    EVENT_CASCADE_STEP,
    EVENT_DETONATION,
    EVENT_GRAVITY_APPLIED,
    EVENT_LEVEL_ENDED,
    EVENT_LEVEL_EXITED,
    EVENT_LEVEL_STARTED,
    EVENT_MATCH_CLEARED,
    EVENT_MATCH_FOUND,
    EVENT_REFILL_COMPLETED,
    EVENT_SPECIAL_CREATED,
    EVENT_TICK,
    EVENT_TILE_SWAP_INVALID,
    EVENT_TILE_SWAP_REQUEST,
    EVENT_TILE_SWAP_VALID,
)
from happymatch.systems.board_ops import (
    TileView,
    are_adjacent,
    find_valid_swaps,
    get_board,
    get_entity_for_tile,
    reshuffle_board,
    snapshot_tiles,
    swap_tile_positions,
    tile_grid,
    tile_view,
    validate_board,
)
from happymatch.systems.explosion import ExplosionResult, propagate_explosions
from happymatch.systems.gravity import apply_gravity_and_refill
from happymatch.systems.match import MatchResult, detect_matches
from happymatch.systems.special import mark_matched, synthesize_special
from happymatch.systems.win_loss import LevelOutcome, evaluate_outcome
from happymatch.utils.game_state import (
    emit_progress,
    get_active_level,
    get_game_state,
    get_progress,
    set_game_phase,
)

logger = logging.getLogger(__name__)

STAGE_RESOLVE = "resolve"
STAGE_COLLAPSE = "collapse"
STAGE_DETECT = "detect"


class MatchResolutionSystem:
    """Drives a player swap through detection, clearing, gravity and cascades.

    Each stage waits a fixed delay measured in EVENT_TICK time; with all
    delays at zero a single tick resolves the whole cascade.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        *,
        swap_delay: float = SWAP_DURATION,
        clear_delay: float = CLEAR_DURATION,
        settle_delay: float = SETTLE_DURATION,
    ):
        self.world = world
        self.event_bus = event_bus
        self.swap_delay = swap_delay
        self.clear_delay = clear_delay
        self.settle_delay = settle_delay
        self.event_bus.subscribe(EVENT_TILE_SWAP_REQUEST, self.on_swap_request)
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)
        self.event_bus.subscribe(EVENT_LEVEL_STARTED, self.on_level_started)
        self.event_bus.subscribe(EVENT_LEVEL_EXITED, self.on_level_exited)
        self._reset()

    def _reset(self) -> None:
        self._stage: Optional[str] = None
        self._delay = 0.0
        self._elapsed = 0.0
        self.depth = 0
        self._forced = False
        self._forced_pair: tuple[int, int] | None = None
        self._last_moved_id: Optional[int] = None
        self._pending: Optional[ExplosionResult] = None
        self._survivor_id: Optional[int] = None

    @property
    def busy(self) -> bool:
        return self._stage is not None

    def _rng(self) -> random.Random:
        rng = getattr(self.world, "random", None)
        return rng if isinstance(rng, random.Random) else random.Random()

    def _schedule(self, stage: str, delay: float) -> None:
        self._stage = stage
        self._delay = max(0.0, delay)

    def on_level_started(self, sender, **kwargs):
        self._reset()

    def on_level_exited(self, sender, **kwargs):
        if self.busy:
            logger.debug("Dropping cascade at depth %d on level exit", self.depth)
        self._reset()

    def on_swap_request(self, sender, **kwargs):
        src_id = kwargs.get("src_id")
        dst_id = kwargs.get("dst_id")
        if src_id is None or dst_id is None:
            return
        self.request_swap(src_id, dst_id)

    def on_tick(self, sender, **kwargs):
        if self._stage is None:
            return
        self._elapsed += kwargs.get("dt", 0.0)
        while self._stage is not None and self._elapsed >= self._delay:
            self._elapsed -= self._delay
            stage = self._stage
            self._stage = None
            self._run_stage(stage)
        if self._stage is None:
            self._elapsed = 0.0

    def _run_stage(self, stage: str) -> None:
        if get_active_level(self.world) is None or get_game_state(self.world).phase is GamePhase.MENU:
            # Left the level mid-cascade.
            self._reset()
            return
        if stage == STAGE_RESOLVE:
            self._resolve_swap()
        elif stage == STAGE_COLLAPSE:
            self._collapse()
        elif stage == STAGE_DETECT:
            self._detect_next()
        else:
            raise ValueError(f"Unknown cascade stage: {stage}")

    # ------------------------------------------------------------------
    # Swap validation
    # ------------------------------------------------------------------
    def request_swap(self, src_id: int, dst_id: int) -> bool:
        """Attempt a player swap; returns False and emits a rejection instead of raising."""
        state = get_game_state(self.world)
        progress = get_progress(self.world)
        if self.busy or state.phase in (GamePhase.SWAPPING, GamePhase.PROCESSING):
            return self._reject(src_id, dst_id, "busy")
        if state.phase in TERMINAL_PHASES:
            return self._reject(src_id, dst_id, "terminal")
        if state.phase is GamePhase.MENU or get_active_level(self.world) is None:
            return self._reject(src_id, dst_id, "no_level")
        if progress.moves_remaining <= 0:
            return self._reject(src_id, dst_id, "no_moves")
        src_entity = get_entity_for_tile(self.world, src_id)
        dst_entity = get_entity_for_tile(self.world, dst_id)
        if src_entity is None or dst_entity is None or src_id == dst_id:
            return self._reject(src_id, dst_id, "unknown_tile")
        src_view = tile_view(self.world, src_entity)
        dst_view = tile_view(self.world, dst_entity)
        if not are_adjacent(src_view.position, dst_view.position):
            return self._reject(src_id, dst_id, "not_adjacent")

        forced = SpecialKind.WILDCARD in (src_view.special, dst_view.special)
        if not forced and not self._swap_matches(src_view, dst_view):
            return self._reject(src_id, dst_id, "no_match")

        progress.combo = 1
        progress.moves_remaining -= 1
        swap_tile_positions(self.world, src_entity, dst_entity)
        self.depth = 0
        self._forced = forced
        self._forced_pair = (src_id, dst_id) if forced else None
        self._last_moved_id = dst_id
        state.selected_tile_id = None
        set_game_phase(self.world, self.event_bus, GamePhase.SWAPPING)
        self.event_bus.emit(EVENT_TILE_SWAP_VALID, src_id=src_id, dst_id=dst_id, forced=forced)
        emit_progress(self.world, self.event_bus)
        logger.debug("Swap %s <-> %s accepted (forced=%s)", src_id, dst_id, forced)
        self._schedule(STAGE_RESOLVE, self.swap_delay)
        return True

    def _swap_matches(self, src_view: TileView, dst_view: TileView) -> bool:
        board = get_board(self.world)
        grid = tile_grid(self.world)
        grid[src_view.position] = dst_view.moved_to(*src_view.position)
        grid[dst_view.position] = src_view.moved_to(*dst_view.position)
        return detect_matches(grid, board.rows, board.cols).has_match

    def _reject(self, src_id: int, dst_id: int, reason: str) -> bool:
        logger.debug("Swap %s <-> %s rejected: %s", src_id, dst_id, reason)
        self.event_bus.emit(EVENT_TILE_SWAP_INVALID, src_id=src_id, dst_id=dst_id, reason=reason)
        return False

    # ------------------------------------------------------------------
    # Cascade stages
    # ------------------------------------------------------------------
    def _resolve_swap(self) -> None:
        set_game_phase(self.world, self.event_bus, GamePhase.PROCESSING)
        if self._forced and self._forced_pair is not None:
            self._start_forced_step(*self._forced_pair)
            return
        board = get_board(self.world)
        match = detect_matches(tile_grid(self.world), board.rows, board.cols, self._last_moved_id)
        if not match.has_match:
            # Validation guaranteed a match; an empty result means the board changed underneath.
            self._settle()
            return
        self._start_step(match)

    def _start_forced_step(self, src_id: int, dst_id: int) -> None:
        tiles = snapshot_tiles(self.world)
        by_id = {view.tile_id: view for view in tiles}
        src_view, dst_view = by_id[src_id], by_id[dst_id]
        if src_view.special is SpecialKind.WILDCARD:
            wildcard, partner = src_view, dst_view
        else:
            wildcard, partner = dst_view, src_view
        if partner.color in BASE_COLORS and not partner.ingredient:
            color = partner.color
        else:
            color = self._rng().choice(BASE_COLORS)
        seeds: List[int] = []
        if partner.special is SpecialKind.WILDCARD:
            seeds.append(partner.tile_id)
        explosion = propagate_explosions(
            tiles,
            seeds,
            rng=self._rng(),
            direct={wildcard.tile_id: color},
        )
        self.depth += 1
        self._survivor_id = None
        self.event_bus.emit(
            EVENT_MATCH_FOUND,
            matched_ids=list(explosion.removed_ids),
            directive=None,
            forced=True,
        )
        self._mark_clear(explosion)

    def _start_step(self, match: MatchResult) -> None:
        self.depth += 1
        self._forced = False
        directive = match.directive
        self.event_bus.emit(
            EVENT_MATCH_FOUND,
            matched_ids=list(match.matched_ids),
            directive=directive,
            forced=False,
        )
        survivor_id: Optional[int] = None
        if directive is not None:
            mark_matched(self.world, match.matched_ids, directive.kind)
            entity = synthesize_special(self.world, directive)
            if entity is not None:
                survivor_id = directive.tile_id
                view = tile_view(self.world, entity)
                self.event_bus.emit(
                    EVENT_SPECIAL_CREATED,
                    tile_id=survivor_id,
                    kind=directive.kind,
                    row=view.row,
                    col=view.col,
                )
        seeds = [tile_id for tile_id in match.matched_ids if tile_id != survivor_id]
        explosion = propagate_explosions(
            snapshot_tiles(self.world),
            seeds,
            rng=self._rng(),
            protected_ids=[survivor_id] if survivor_id is not None else (),
        )
        self._survivor_id = survivor_id
        self._mark_clear(explosion)

    def _mark_clear(self, explosion: ExplosionResult) -> None:
        mark_matched(self.world, explosion.removed_ids)
        if explosion.detonations:
            self.event_bus.emit(EVENT_DETONATION, detonations=list(explosion.detonations))
        self._pending = explosion
        self._schedule(STAGE_COLLAPSE, self.clear_delay)

    def _collapse(self) -> None:
        explosion = self._pending or ExplosionResult()
        self._pending = None
        active = get_active_level(self.world)
        if active is None:
            self._reset()
            return
        level = active.config
        progress = get_progress(self.world)

        color_items = 0
        if level.mode is GoalMode.TARGET_SCORE and level.target_color is not None:
            removed = set(explosion.removed_ids)
            colors: Dict[str, int] = Counter(
                view.color for view in snapshot_tiles(self.world) if view.tile_id in removed
            )
            color_items = colors.get(level.target_color, 0)

        result = apply_gravity_and_refill(
            self.world,
            explosion.removed_ids,
            level,
            self._rng(),
            shielded_ids=explosion.shielded_ids,
            survivor_id=self._survivor_id,
        )
        self._survivor_id = None
        score_gained = result.score_delta * progress.combo
        progress.score += score_gained
        progress.ice_cleared += result.ice_cleared
        progress.items_collected += result.items_collected + color_items

        self.event_bus.emit(
            EVENT_MATCH_CLEARED,
            removed_ids=list(explosion.removed_ids),
            shielded_ids=list(explosion.shielded_ids),
            collected_ids=list(result.collected_ids),
        )
        self.event_bus.emit(EVENT_GRAVITY_APPLIED, moves=list(result.moves))
        self.event_bus.emit(EVENT_REFILL_COMPLETED, new_tile_ids=list(result.new_tile_ids))
        self.event_bus.emit(
            EVENT_CASCADE_STEP,
            depth=self.depth,
            combo=progress.combo,
            base_score=result.score_delta,
            score_gained=score_gained,
            removed_ids=list(explosion.removed_ids),
            forced=self._forced,
        )
        emit_progress(self.world, self.event_bus)
        self.event_bus.emit(EVENT_BOARD_CHANGED, reason="cascade")
        logger.debug(
            "Cascade step %d: removed %d tiles, +%d points at combo x%d",
            self.depth,
            result.removed_count,
            score_gained,
            progress.combo,
        )
        self._forced = False
        self._schedule(STAGE_DETECT, self.settle_delay)

    def _detect_next(self) -> None:
        board = get_board(self.world)
        match = detect_matches(tile_grid(self.world), board.rows, board.cols, None)
        if not match.has_match:
            self._settle()
            return
        progress = get_progress(self.world)
        progress.combo += 1
        emit_progress(self.world, self.event_bus)
        self._start_step(match)

    def _settle(self) -> None:
        active = get_active_level(self.world)
        progress = get_progress(self.world)
        depth = self.depth
        self._reset()
        if active is None:
            return
        outcome = evaluate_outcome(active.config, progress, active.total_ice)
        if outcome is LevelOutcome.WON:
            set_game_phase(self.world, self.event_bus, GamePhase.WON)
        elif outcome is LevelOutcome.LOST:
            set_game_phase(self.world, self.event_bus, GamePhase.LOST)
        else:
            set_game_phase(self.world, self.event_bus, GamePhase.IDLE)
            if not find_valid_swaps(self.world):
                recolored = reshuffle_board(self.world, rng=self._rng())
                self.event_bus.emit(EVENT_BOARD_RESHUFFLED, tile_ids=recolored)
                self.event_bus.emit(EVENT_BOARD_CHANGED, reason="reshuffle")
        validate_board(self.world)
        self.event_bus.emit(EVENT_CASCADE_COMPLETE, depth=depth)
        if outcome is not LevelOutcome.IN_PROGRESS:
            logger.info("Level %s with score %d", outcome.value, progress.score)
            self.event_bus.emit(
                EVENT_LEVEL_ENDED,
                status=outcome.value,
                score=progress.score,
                moves_remaining=progress.moves_remaining,
            )
