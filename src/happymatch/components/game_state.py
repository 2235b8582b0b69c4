"""Game state resource describing the orchestrator phase."""
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class GamePhase(Enum):
    """Phases of the swap/cascade state machine."""
    MENU = auto()
    IDLE = auto()
    SELECTED = auto()
    SWAPPING = auto()
    PROCESSING = auto()
    WON = auto()
    LOST = auto()


TERMINAL_PHASES = frozenset({GamePhase.WON, GamePhase.LOST})
INPUT_PHASES = frozenset({GamePhase.IDLE, GamePhase.SELECTED})


@dataclass
class GameState:
    """Singleton component storing the current phase and tile selection."""
    phase: GamePhase = GamePhase.MENU
    selected_tile_id: Optional[int] = None
