from dataclasses import dataclass

@dataclass(slots=True)
class Ingredient:
    """Tag for collectible tiles that never match and are collected on the bottom row."""
