"""Built-in level list and JSON level loading."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional

from happymatch.components.level import GoalMode, IceLayout, LevelConfig
from happymatch.errors import LevelConfigError


def _checkerboard_ice(iced_rows: int, rows: int = 8, cols: int = 8) -> IceLayout:
    layout = []
    for r in range(rows):
        if r < iced_rows:
            layout.append(tuple((r + c) % 2 for c in range(cols)))
        else:
            layout.append(tuple(0 for _ in range(cols)))
    return tuple(layout)


LEVELS: Mapping[int, LevelConfig] = {
    1: LevelConfig(
        level_id=1,
        name="Sweet Start",
        description="Collect 15 Red Candies",
        mode=GoalMode.TARGET_SCORE,
        moves=15,
        target_score=2000,
        target_color="red",
        target_count=15,
    ),
    2: LevelConfig(
        level_id=2,
        name="Frosty Peaks",
        description="Break all the Ice!",
        mode=GoalMode.CLEAR_ICE,
        moves=20,
        target_score=3000,
        ice_layout=_checkerboard_ice(4),
    ),
    3: LevelConfig(
        level_id=3,
        name="Cherry Drop",
        description="Bring 2 Cherries to the bottom!",
        mode=GoalMode.COLLECT_ITEMS,
        moves=25,
        target_score=4000,
        target_count=2,
    ),
}


def all_levels() -> Iterable[LevelConfig]:
    return LEVELS.values()


def get_level(level_id: int) -> LevelConfig | None:
    return LEVELS.get(level_id)


def next_level_id(level_id: int) -> int:
    """Id of the built-in level after ``level_id``, wrapping back to the first."""
    ids = sorted(LEVELS)
    later = [candidate for candidate in ids if candidate > level_id]
    return later[0] if later else ids[0]


def _parse_mode(value: Any, label: str) -> GoalMode:
    if isinstance(value, GoalMode):
        return value
    try:
        return GoalMode(str(value).lower())
    except ValueError:
        try:
            return GoalMode[str(value).upper()]
        except KeyError:
            raise LevelConfigError(f"{label}: unknown goal mode '{value}'") from None


def _parse_ice(value: Any, label: str) -> Optional[IceLayout]:
    if value is None:
        return None
    try:
        return tuple(tuple(int(cell) for cell in row) for row in value)
    except (TypeError, ValueError):
        raise LevelConfigError(f"{label}: ice layout must be a grid of integers") from None


def level_from_mapping(data: Mapping[str, Any]) -> LevelConfig:
    """Build a validated LevelConfig from a JSON-style mapping."""
    label = str(data.get("name") or data.get("id") or "<unnamed level>")
    if "mode" not in data:
        raise LevelConfigError(f"{label}: missing goal mode")
    if "moves" not in data:
        raise LevelConfigError(f"{label}: missing move budget")
    target_count = data.get("target_count")
    try:
        return LevelConfig(
            level_id=int(data.get("id", 0)),
            name=str(data.get("name", "")),
            description=str(data.get("description", "")),
            mode=_parse_mode(data["mode"], label),
            moves=int(data["moves"]),
            target_score=int(data.get("target_score", 0)),
            target_color=data.get("target_color"),
            target_count=int(target_count) if target_count is not None else None,
            ice_layout=_parse_ice(data.get("ice_layout"), label),
        )
    except (TypeError, ValueError) as exc:
        if isinstance(exc, LevelConfigError):
            raise
        raise LevelConfigError(f"{label}: {exc}") from exc


def load_levels(path: Path | str) -> List[LevelConfig]:
    """Load level definitions from a JSON file holding a list or ``{"levels": [...]}``."""
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    entries = raw.get("levels", []) if isinstance(raw, dict) else raw
    if not isinstance(entries, list):
        raise LevelConfigError(f"{path}: expected a list of levels")
    return [level_from_mapping(entry) for entry in entries]
