from dataclasses import dataclass

@dataclass(slots=True)
class Tile:
    """Identity and color of a board tile.

    Colors are semantic names; the RGB lookup lives on the TileTypes registry entity.
    """
    tile_id: int
    color: str
