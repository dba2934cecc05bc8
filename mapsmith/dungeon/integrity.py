"""Referential-integrity checks over a dungeon map.

Used by the CLI ``check`` command, the seed diagnostics script and tests.
Returns human-readable violation strings; an empty list means the map is
consistent.
"""
from __future__ import annotations
from collections import Counter
from typing import List

from .models import DungeonMap


def _duplicates(kind: str, items) -> List[str]:
    counts = Counter(item.id for item in items)
    return [f"duplicate {kind} id {item_id}" for item_id, n in counts.items() if n > 1]


def integrity_violations(dungeon_map: DungeonMap) -> List[str]:
    problems: List[str] = []
    room_ids = {r.id for r in dungeon_map.rooms}
    corridor_ids = {c.id for c in dungeon_map.corridors}

    for kind, items in (
        ('room', dungeon_map.rooms),
        ('corridor', dungeon_map.corridors),
        ('door', dungeon_map.doors),
        ('wall', dungeon_map.walls),
        ('trap', dungeon_map.traps),
        ('encounter', dungeon_map.encounters),
        ('treasure', dungeon_map.treasures),
        ('dressing', dungeon_map.dressing),
        ('zone', dungeon_map.zones),
    ):
        problems.extend(_duplicates(kind, items))

    for c in dungeon_map.corridors:
        for end in (c.from_room_id, c.to_room_id):
            if end not in room_ids:
                problems.append(f"corridor {c.id} references missing room {end}")
        if len(c.points) < 2:
            problems.append(f"corridor {c.id} has fewer than 2 points")

    for d in dungeon_map.doors:
        if d.corridor_id not in corridor_ids:
            problems.append(f"door {d.id} references missing corridor {d.corridor_id}")

    for kind, items in (
        ('trap', dungeon_map.traps),
        ('encounter', dungeon_map.encounters),
        ('treasure', dungeon_map.treasures),
        ('dressing', dungeon_map.dressing),
    ):
        for item in items:
            if item.room_id not in room_ids:
                problems.append(f"{kind} {item.id} references missing room {item.room_id}")

    return problems
