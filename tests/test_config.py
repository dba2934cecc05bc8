import re

import pytest

from mapsmith.dungeon.config import (
    MIXED,
    ConfigError,
    GeneratorConfig,
    LayoutConfig,
    build_config_hash,
    parse_generator_config,
)


def test_defaults_are_filled():
    cfg = parse_generator_config({})
    assert cfg == GeneratorConfig()
    assert cfg.layout.corridor_style == MIXED
    assert cfg.doors.door_frequency == 0.65
    assert cfg.content.dressing_density == 0.35


def test_partial_sections_merge_with_defaults():
    cfg = parse_generator_config({"theme": "  crypt ", "layout": {"roomDensity": 0.4}})
    assert cfg.theme == "crypt"
    assert cfg.layout.room_density == 0.4
    assert cfg.layout.min_room_size == LayoutConfig().min_room_size


@pytest.mark.parametrize(
    "doc,field",
    [
        ({"width": 10}, "width"),
        ({"height": 401}, "height"),
        ({"cellSize": 8}, "cellSize"),
        ({"layout": {"roomDensity": 0.9}}, "layout.roomDensity"),
        ({"layout": {"corridorStyle": "DIAGONAL"}}, "layout.corridorStyle"),
        ({"doors": {"lockedDoorChance": 1.5}}, "doors.lockedDoorChance"),
        ({"content": {"trapDensity": -0.1}}, "content.trapDensity"),
        ({"theme": ""}, "theme"),
        ({"width": "wide"}, "width"),
        ({"layout": "dense"}, "layout"),
    ],
)
def test_out_of_range_values_are_rejected(doc, field):
    with pytest.raises(ConfigError) as exc:
        parse_generator_config(doc)
    assert exc.value.field == field


def test_max_room_size_must_exceed_min():
    with pytest.raises(ConfigError) as exc:
        parse_generator_config({"layout": {"minRoomSize": 8, "maxRoomSize": 8}})
    assert exc.value.field == "layout.maxRoomSize"
    assert isinstance(exc.value, ValueError)


def test_config_hash_shape_and_stability():
    cfg = GeneratorConfig(width=60, height=60, theme="crypt")
    h = build_config_hash("seed-deterministic", cfg)
    assert re.fullmatch(r"[0-9a-f]{16}", h)
    assert h == build_config_hash("seed-deterministic", GeneratorConfig(width=60, height=60, theme="crypt"))
    assert h != build_config_hash("other-seed", cfg)
    assert h != build_config_hash("seed-deterministic", GeneratorConfig(width=61, height=60, theme="crypt"))


def test_integral_floats_hash_like_integers():
    as_float = GeneratorConfig.from_dict({"width": 60.0, "height": 60})
    as_int = GeneratorConfig.from_dict({"width": 60, "height": 60})
    assert build_config_hash("s", as_float) == build_config_hash("s", as_int)
    assert parse_generator_config({"width": 60.0}).width == 60


def test_round_trip_through_document():
    cfg = parse_generator_config({"width": 80, "layout": {"corridorStyle": "WINDING"}})
    assert GeneratorConfig.from_dict(cfg.to_dict()) == cfg
