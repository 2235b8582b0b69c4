class LevelConfigError(ValueError):
    """Raised when a level definition lacks what its goal mode requires."""


class BoardInvariantError(RuntimeError):
    """Raised when board occupancy, tile ids or refill leave an invalid grid."""
