import json

import pytest

from happymatch.components.level import GoalMode, LevelConfig
from happymatch.errors import LevelConfigError
from happymatch.factories.levels import all_levels, level_from_mapping, load_levels, next_level_id


def test_builtin_levels():
    names = [level.name for level in all_levels()]
    assert names == ["Sweet Start", "Frosty Peaks", "Cherry Drop"]


@pytest.mark.parametrize("kwargs", [
    dict(mode=GoalMode.TARGET_SCORE, moves=0, target_score=100),
    dict(mode=GoalMode.TARGET_SCORE, moves=10),
    dict(mode=GoalMode.TARGET_SCORE, moves=10, target_color="red"),
    dict(mode=GoalMode.TARGET_SCORE, moves=10, target_color="pink", target_count=3),
    dict(mode=GoalMode.CLEAR_ICE, moves=10),
    dict(mode=GoalMode.CLEAR_ICE, moves=10, ice_layout=tuple((0,) * 8 for _ in range(8))),
    dict(mode=GoalMode.CLEAR_ICE, moves=10, ice_layout=((1,),)),
    dict(mode=GoalMode.COLLECT_ITEMS, moves=10),
])
def test_invalid_configs_raise(kwargs):
    with pytest.raises(LevelConfigError):
        LevelConfig(**kwargs)


def test_level_from_mapping_accepts_mode_names_and_values():
    by_value = level_from_mapping({"id": 7, "mode": "collect_items", "moves": 12, "target_count": 3})
    by_name = level_from_mapping({"id": 8, "mode": "COLLECT_ITEMS", "moves": "12", "target_count": "3"})
    assert by_value.mode is by_name.mode is GoalMode.COLLECT_ITEMS
    assert by_name.moves == 12 and by_name.target_count == 3


@pytest.mark.parametrize("data", [
    {"moves": 5, "target_score": 10},
    {"mode": "target_score", "target_score": 10},
    {"mode": "bonus_round", "moves": 5},
    {"mode": "target_score", "moves": "many", "target_score": 10},
    {"mode": "clear_ice", "moves": 5, "ice_layout": [["x"]]},
])
def test_level_from_mapping_rejects_bad_data(data):
    with pytest.raises(LevelConfigError):
        level_from_mapping(data)


def test_load_levels_from_json(tmp_path):
    ice = [[1 if r == 0 else 0 for _ in range(8)] for r in range(8)]
    path = tmp_path / "levels.json"
    path.write_text(json.dumps({"levels": [
        {"id": 1, "name": "Warmup", "mode": "target_score", "moves": 5, "target_score": 300},
        {"id": 2, "name": "Thaw", "mode": "clear_ice", "moves": 9, "ice_layout": ice},
    ]}), encoding="utf-8")

    levels = load_levels(path)
    assert [level.name for level in levels] == ["Warmup", "Thaw"]
    assert levels[1].ice_at(0, 3) == 1
    assert levels[1].ice_at(4, 3) == 0


def test_load_levels_rejects_non_list(tmp_path):
    path = tmp_path / "levels.json"
    path.write_text(json.dumps({"levels": {"id": 1}}), encoding="utf-8")
    with pytest.raises(LevelConfigError):
        load_levels(path)


def test_next_level_wraps_to_first():
    assert next_level_id(1) == 2
    assert next_level_id(2) == 3
    assert next_level_id(3) == 1
    assert next_level_id(99) == 1
