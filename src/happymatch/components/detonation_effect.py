from dataclasses import dataclass
from typing import Optional

from happymatch.components.special import SpecialKind


@dataclass(slots=True)
class DetonationEffect:
    tile_id: int
    kind: SpecialKind
    row: int
    col: int
    color: Optional[str] = None
