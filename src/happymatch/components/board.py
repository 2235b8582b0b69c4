from dataclasses import dataclass

@dataclass(slots=True)
class Board:
    rows: int
    cols: int
    next_tile_id: int = 1

    def allocate_tile_id(self) -> int:
        """Hand out the next tile id; ids are never reused on this board."""
        tile_id = self.next_tile_id
        self.next_tile_id += 1
        return tile_id
