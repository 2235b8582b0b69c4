from dataclasses import dataclass

@dataclass(slots=True)
class Progress:
    """Per-level counters shown to the player and read by the win/loss evaluator."""

    score: int = 0
    moves_remaining: int = 0
    items_collected: int = 0
    ice_cleared: int = 0
    combo: int = 1
