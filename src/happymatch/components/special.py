from dataclasses import dataclass
from enum import Enum


class SpecialKind(Enum):
    """Closed set of special tile variants; explosion handling covers every member."""
    NONE = "none"
    ROW_CLEAR = "row_clear"
    COL_CLEAR = "col_clear"
    AREA_CLEAR = "area_clear"
    WILDCARD = "wildcard"


@dataclass(slots=True)
class Special:
    kind: SpecialKind = SpecialKind.NONE
