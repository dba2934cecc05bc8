import pytest

from mapsmith.dungeon import (
    build_config_hash,
    build_default_seed,
    generate_base_map,
    generate_with_metrics,
    get_generator_version,
    integrity_violations,
    parse_generator_config,
)
from mapsmith.dungeon.models import ALGORITHM_VERSION
from mapsmith.dungeon.rooms import overlaps, placement_padding
from tests.dungeon_test_utils import connected_room_ids, room_contains

SEEDS = ["alpha", "beta", "gamma", "seed-deterministic"]


def test_same_seed_and_config_reproduce_the_layout(crypt_config):
    a = generate_base_map("seed-deterministic", crypt_config)
    b = generate_base_map("seed-deterministic", crypt_config)
    assert a.metadata.config_hash == b.metadata.config_hash
    assert a.metadata.config_hash == build_config_hash("seed-deterministic", crypt_config)
    assert a.rooms == b.rooms
    assert a.corridors == b.corridors
    assert a.doors == b.doors
    assert a.traps == b.traps
    assert a.encounters == b.encounters
    assert a.treasures == b.treasures
    assert a.dressing == b.dressing


def test_different_seeds_differ(crypt_config):
    a = generate_base_map("alpha", crypt_config)
    b = generate_base_map("beta", crypt_config)
    assert a.rooms != b.rooms


def test_metadata_and_history(base_map):
    meta = base_map.metadata
    assert meta.algorithm_version == ALGORITHM_VERSION == get_generator_version()
    assert meta.seed == "seed-deterministic"
    assert meta.generated_at.endswith("Z")
    assert len(meta.pass_history) == 1
    entry = meta.pass_history[0]
    assert (entry.pass_name, entry.scope) == ("LAYOUT", "FULL")
    assert entry.changed_counts == base_map.counts()
    assert entry.config_hash == meta.config_hash


@pytest.mark.parametrize("seed", SEEDS)
@pytest.mark.parametrize("style", ["STRAIGHT", "WINDING", "MIXED"])
def test_generated_maps_are_referentially_sound(seed, style):
    cfg = parse_generator_config({"width": 50, "height": 50, "layout": {"corridorStyle": style}})
    dungeon_map = generate_base_map(seed, cfg)
    assert integrity_violations(dungeon_map) == []
    assert len(dungeon_map.rooms) >= 2
    assert connected_room_ids(dungeon_map) == {r.id for r in dungeon_map.rooms}


@pytest.mark.parametrize("density", [0.15, 0.45])
def test_rooms_never_overlap_and_stay_in_bounds(density):
    cfg = parse_generator_config({"width": 80, "height": 80, "layout": {"roomDensity": density}})
    dungeon_map = generate_base_map("overlap-check", cfg)
    pad = placement_padding(cfg)
    rooms = dungeon_map.rooms
    for i, a in enumerate(rooms):
        assert a.x >= 1 and a.y >= 1
        assert a.x + a.width <= cfg.width - 1
        assert a.y + a.height <= cfg.height - 1
        assert a.width % 2 == 1 and a.height % 2 == 1
        for b in rooms[i + 1:]:
            assert not overlaps(a, b, pad), f"{a.id} overlaps {b.id}"


def test_room_numbers_follow_placement_order(base_map):
    assert [r.room_number for r in base_map.rooms] == list(range(1, len(base_map.rooms) + 1))
    assert base_map.rooms[0].id == "room-1"


def test_corridors_run_between_their_rooms(base_map):
    rooms = {r.id: r for r in base_map.rooms}
    assert len(base_map.corridors) >= len(base_map.rooms) - 1
    for c in base_map.corridors:
        assert len(c.points) >= 2
        assert room_contains(rooms[c.from_room_id], c.points[0])
        assert room_contains(rooms[c.to_room_id], c.points[-1])


def test_doors_sit_on_corridor_endpoints(base_map):
    corridors = {c.id: c for c in base_map.corridors}
    for d in base_map.doors:
        c = corridors[d.corridor_id]
        assert (d.x, d.y) in (c.points[0], c.points[-1])


def test_content_targets_existing_rooms():
    cfg = parse_generator_config({
        "width": 60,
        "height": 60,
        "content": {"trapDensity": 1, "encounterDensity": 1, "treasureDensity": 1, "dressingDensity": 1},
    })
    dungeon_map = generate_base_map("content", cfg)
    n = len(dungeon_map.rooms)
    assert len(dungeon_map.traps) == n
    assert len(dungeon_map.encounters) == n
    assert len(dungeon_map.treasures) == n
    assert len(dungeon_map.dressing) == n
    base_dc = {"HIGH": 16, "MEDIUM": 13, "LOW": 10}
    for t in dungeon_map.traps:
        assert base_dc[t.severity] <= t.detect_dc <= base_dc[t.severity] + 3
        assert base_dc[t.severity] + 1 <= t.disarm_dc <= base_dc[t.severity] + 4
    assert all(not x.is_locked for x in dungeon_map.traps + dungeon_map.encounters)


def test_zero_densities_produce_no_content():
    cfg = parse_generator_config({
        "content": {"trapDensity": 0, "encounterDensity": 0, "treasureDensity": 0, "dressingDensity": 0},
        "doors": {"doorFrequency": 0},
    })
    dungeon_map = generate_base_map("empty", cfg)
    assert dungeon_map.traps == dungeon_map.encounters == dungeon_map.treasures == dungeon_map.dressing == ()
    assert dungeon_map.doors == ()


def test_metrics_are_reported(crypt_config):
    _, metrics = generate_with_metrics("seed-deterministic", crypt_config)
    assert metrics["rooms_placed"] >= 2
    assert metrics["rooms_target"] >= 8
    assert metrics["spanning_edges"] == metrics["rooms_placed"] - 1
    assert metrics["corridors_routed"] + metrics["corridor_fallbacks"] == (
        metrics["spanning_edges"] + metrics["extra_edges"]
    )
    assert set(metrics["phase_ms"]) == {"layout", "doors", "traps", "encounters", "treasure", "dressing"}


def test_metrics_timing_can_be_disabled(monkeypatch, crypt_config):
    monkeypatch.setenv("MAPSMITH_GENERATION_METRICS", "0")
    _, metrics = generate_with_metrics("seed-deterministic", crypt_config)
    assert metrics["phase_ms"] == {}


def test_generation_logs_structured_event(capsys, crypt_config):
    generate_base_map("log-check", crypt_config)
    err = capsys.readouterr().err
    assert "event=dungeon_generated" in err
    assert "seed=log-check" in err


def test_default_seed_format():
    seed = build_default_seed()
    prefix, _, suffix = seed.partition("-")
    assert prefix == "dungeon"
    assert suffix and all(ch in "0123456789abcdefghijklmnopqrstuvwxyz" for ch in suffix)
