from dataclasses import dataclass

@dataclass(slots=True)
class Ice:
    """Ice overlay; 0 = none, 1 = single layer, 2 = locked."""
    level: int = 0
