from mapsmith.dungeon import generate_base_map, parse_generator_config, to_player_safe_map
from mapsmith.dungeon.models import Corridor, Door, Encounter, Trap, Zone
from tests.dungeon_test_utils import make_map, room


def _map_with_secrets():
    a, b, s = room("a", 1, 1, 1), room("b", 2, 10, 1), room("s", 3, 20, 1, secret=True)
    corridors = [
        Corridor("c-ab", "a", "b", ((3, 2), (10, 2))),
        Corridor("c-as", "a", "s", ((2, 3), (20, 3))),
    ]
    doors = [
        Door("d-open", 3, 2, "c-ab"),
        Door("d-hidden", 10, 2, "c-ab", is_secret=True),
        Door("d-to-secret", 20, 3, "c-as"),
    ]
    traps = [Trap("t-a", "a", "Low Trap", "LOW", "t", "e", 10, 11), Trap("t-s", "s", "Low Trap", "LOW", "t", "e", 10, 11)]
    encounters = [Encounter("e-s", "s", "Lair", "HARD", "boss")]
    zones = [Zone("z-1", "HAZARD", "inside secret", ((20, 1),))]
    return make_map([a, b, s], corridors=corridors, doors=doors, traps=traps, encounters=encounters, zones=zones)


def test_secret_rooms_and_their_dependents_are_removed():
    view = to_player_safe_map(_map_with_secrets())
    assert [r.id for r in view.rooms] == ["a", "b"]
    assert [c.id for c in view.corridors] == ["c-ab"]
    assert [d.id for d in view.doors] == ["d-open"]
    assert [t.id for t in view.traps] == ["t-a"]
    assert view.encounters == ()
    # zones pass through unfiltered
    assert [z.id for z in view.zones] == ["z-1"]


def test_projection_is_idempotent_and_pure():
    original = _map_with_secrets()
    before = original.to_dict()
    once = to_player_safe_map(original)
    assert to_player_safe_map(once) == once
    assert original.to_dict() == before
    assert once.metadata == original.metadata


def test_generated_maps_hide_every_secret():
    cfg = parse_generator_config({
        "width": 70,
        "height": 70,
        "layout": {"secretRoomChance": 0.5},
        "doors": {"secretDoorChance": 0.5},
    })
    view = to_player_safe_map(generate_base_map("secretive", cfg))
    assert not any(r.is_secret for r in view.rooms)
    assert not any(d.is_secret for d in view.doors)
    visible = {r.id for r in view.rooms}
    assert all(c.from_room_id in visible and c.to_room_id in visible for c in view.corridors)
    assert all(t.room_id in visible for t in view.traps)
