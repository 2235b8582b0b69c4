from dataclasses import dataclass, field
from typing import Dict, Iterable, Tuple, List

@dataclass(slots=True)
class TileTypes:
    """Canonical tile color definitions stored on a single entity.

    ``types`` maps every known color name (including non-matching variants) to RGB.
    ``spawnable`` lists the base colors refill and board generation may draw from.
    """
    types: Dict[str, Tuple[int,int,int]]
    spawnable: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.spawnable:
            # Preserve order while filtering unknown names.
            seen: set[str] = set()
            filtered: List[str] = []
            for name in self.spawnable:
                if name in self.types and name not in seen:
                    filtered.append(name)
                    seen.add(name)
            self.spawnable = filtered or list(self.types.keys())
        else:
            self.spawnable = list(self.types.keys())

    def background_for(self, color: str) -> Tuple[int,int,int]:
        return self.types[color]

    def spawnable_types(self) -> List[str]:
        return list(self.spawnable)

    def set_spawnable(self, type_names: Iterable[str]) -> None:
        seen: set[str] = set()
        filtered: List[str] = []
        for name in type_names:
            if name in self.types and name not in seen:
                filtered.append(name)
                seen.add(name)
        if not filtered:
            raise ValueError("At least one known color must stay spawnable")
        self.spawnable = filtered
