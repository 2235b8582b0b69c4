from dataclasses import dataclass

@dataclass(slots=True)
class TileTypeRegistry:
    """Tag component marking the singleton tile color registry entity."""
    pass
