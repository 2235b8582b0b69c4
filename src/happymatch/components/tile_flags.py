from dataclasses import dataclass
from typing import Optional

from happymatch.components.special import SpecialKind


@dataclass(slots=True)
class TileFlags:
    """Presentation flags read by the renderer.

    is_new: spawned by the most recent refill.
    is_matched: part of the removal set currently being cleared.
    match_effect: special kind being synthesized from this tile's run, if any.
    """
    is_new: bool = False
    is_matched: bool = False
    match_effect: Optional[SpecialKind] = None

    def reset(self) -> None:
        self.is_new = False
        self.is_matched = False
        self.match_effect = None
