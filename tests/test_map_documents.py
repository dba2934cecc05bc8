import copy
import json

import pytest

from mapsmith.dungeon import ValidationError, apply_patch, integrity_violations, parse_dungeon_map
from mapsmith.dungeon.actions import DrawWallSegment, PaintZone
from mapsmith.dungeon.models import Corridor, Door
from tests.dungeon_test_utils import make_map, room


def test_generated_map_round_trips_through_json(base_map):
    edited = apply_patch(base_map, [
        DrawWallSegment(x1=1, y1=1, x2=4, y2=1),
        PaintZone(zone_type="FACTION", label="goblins", cells=((2, 2), (3, 2))),
    ])
    doc = json.loads(json.dumps(edited.to_dict()))
    assert parse_dungeon_map(doc) == edited
    assert parse_dungeon_map(doc).to_dict() == doc


def test_document_uses_camel_case_keys(base_map):
    doc = base_map.to_dict()
    assert doc["schemaVersion"] == 1
    assert doc["gridType"] == "SQUARE"
    assert set(doc["rooms"][0]) == {"id", "roomNumber", "x", "y", "width", "height", "isSecret"}
    assert set(doc["metadata"]) == {"algorithmVersion", "configHash", "generatedAt", "seed", "passHistory"}
    entry = doc["metadata"]["passHistory"][0]
    assert entry["pass"] == "LAYOUT" and entry["scope"] == "FULL"
    assert list(entry["changedCounts"]) == ["rooms", "corridors", "doors", "traps", "encounters", "treasure", "dressing"]


@pytest.mark.parametrize(
    "mutate,field,code",
    [
        (lambda d: d.pop("metadata"), "metadata", "required"),
        (lambda d: d.update(schemaVersion=2), "schemaVersion", "choices"),
        (lambda d: d.update(width="40"), "width", "type"),
        (lambda d: d["corridors"][0].update(points=[{"x": 1, "y": 1}]), "corridors[0].points", "min_items"),
        (lambda d: d["rooms"][0].pop("roomNumber"), "rooms[0].roomNumber", "required"),
        (lambda d: d["rooms"][0].update(isSecret="yes"), "rooms[0].isSecret", "type"),
        (lambda d: d.update(doors={}), "doors", "type"),
        (lambda d: d["metadata"].update(seed=""), "metadata.seed", "empty"),
        (lambda d: d["metadata"]["passHistory"][0].update(scope="DRESSING"), "metadata.passHistory[0].scope", "choices"),
    ],
)
def test_malformed_documents_are_rejected(base_map, mutate, field, code):
    doc = copy.deepcopy(base_map.to_dict())
    mutate(doc)
    with pytest.raises(ValidationError) as exc:
        parse_dungeon_map(doc)
    assert (exc.value.field, exc.value.code) == (field, code)


def test_missing_optional_collections_default_to_empty():
    doc = make_map().to_dict()
    for key in ("walls", "zones", "traps"):
        doc.pop(key)
    parsed = parse_dungeon_map(doc)
    assert parsed.walls == () and parsed.zones == () and parsed.traps == ()


def test_integrity_violations_name_dangling_references():
    m = make_map(
        [room("a", 1, 1, 1), room("a", 2, 10, 1)],
        corridors=[Corridor("c-1", "a", "gone", ((0, 0), (1, 0)))],
        doors=[Door("d-1", 0, 0, "c-missing")],
    )
    problems = integrity_violations(m)
    assert "duplicate room id a" in problems
    assert "corridor c-1 references missing room gone" in problems
    assert "door d-1 references missing corridor c-missing" in problems
    assert integrity_violations(make_map([room("a", 1, 1, 1)])) == []


def test_room_cells_and_lookup():
    r = room("a", 1, 2, 3, w=2, h=3)
    assert sorted(r.cells()) == [(2, 3), (2, 4), (2, 5), (3, 3), (3, 4), (3, 5)]
    m = make_map([r, room("b", 2, 10, 10)])
    assert m.room_by_id("b").room_number == 2
    assert m.room_by_id("missing") is None
