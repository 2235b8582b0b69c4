from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # weak=False keeps bound methods of systems that are not stored anywhere alive.
        sig.connect(fn, weak=False)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# SYSTEM & TIMING
# ============================================================================
EVENT_TICK = "tick"


# ============================================================================
# INPUT & INTERACTION
# ============================================================================
EVENT_MOUSE_PRESS = "mouse_press"          # payload: x, y, button
EVENT_TILE_CLICK = "tile_click"            # payload: tile_id=int


# ============================================================================
# TILE & BOARD MECHANICS
# ============================================================================
EVENT_TILE_SELECTED = "tile_selected"              # payload: tile_id, row, col
EVENT_TILE_DESELECTED = "tile_deselected"          # payload: tile_id, reason=str
EVENT_TILE_SWAP_REQUEST = "tile_swap_request"      # payload: src_id=int, dst_id=int
EVENT_TILE_SWAP_VALID = "tile_swap_valid"          # payload: src_id, dst_id, forced=bool
EVENT_TILE_SWAP_INVALID = "tile_swap_invalid"      # payload: src_id, dst_id, reason=str
EVENT_MATCH_FOUND = "match_found"                  # payload: matched_ids=list[int], directive=SpecialDirective|None, forced=bool
EVENT_SPECIAL_CREATED = "special_created"          # payload: tile_id, kind=SpecialKind, row, col
EVENT_DETONATION = "detonation"                    # payload: detonations=list[Detonation]
EVENT_MATCH_CLEARED = "match_cleared"              # payload: removed_ids=list[int], shielded_ids=list[int], collected_ids=list[int]
EVENT_GRAVITY_APPLIED = "gravity_applied"          # payload: moves=list[GravityMove]
EVENT_REFILL_COMPLETED = "refill_completed"        # payload: new_tile_ids=list[int]
EVENT_CASCADE_STEP = "cascade_step"                # payload: depth, combo, base_score, score_gained, removed_ids, forced
EVENT_CASCADE_COMPLETE = "cascade_complete"        # payload: depth=int
EVENT_BOARD_CHANGED = "board_changed"              # payload: reason=str
EVENT_BOARD_RESHUFFLED = "board_reshuffled"        # payload: tile_ids=list[int]


# ============================================================================
# PROGRESS & LEVEL FLOW
# ============================================================================
EVENT_PROGRESS_CHANGED = "progress_changed"        # payload: score, moves_remaining, items_collected, ice_cleared, combo
EVENT_GAME_PHASE_CHANGED = "game_phase_changed"    # payload: previous_phase=GamePhase|None, new_phase=GamePhase
EVENT_LEVEL_START_REQUEST = "level_start_request"  # payload: level_id=int|None, level=LevelConfig|None
EVENT_LEVEL_RESTART_REQUEST = "level_restart_request"  # payload: None
EVENT_LEVEL_EXIT_REQUEST = "level_exit_request"    # payload: None
EVENT_LEVEL_STARTED = "level_started"              # payload: level_id=int, mode=GoalMode
EVENT_LEVEL_ENDED = "level_ended"                  # payload: status=str ('won'|'lost'), score=int, moves_remaining=int
EVENT_LEVEL_EXITED = "level_exited"                # payload: level_id=int|None


# ============================================================================
# NARRATIVE
# ============================================================================
EVENT_NARRATIVE_READY = "narrative_ready"          # payload: status=str, text=str
