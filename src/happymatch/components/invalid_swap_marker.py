from dataclasses import dataclass
from typing import Tuple

@dataclass(slots=True)
class InvalidSwapMarker:
    tile_ids: Tuple[int, ...]
    reason: str = "no_match"
