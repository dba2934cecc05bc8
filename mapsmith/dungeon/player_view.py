"""Player-safe projection of a dungeon map."""
from __future__ import annotations

from .models import DungeonMap


def to_player_safe_map(dungeon_map: DungeonMap) -> DungeonMap:
    """Drop secret rooms and doors plus everything hanging off a hidden room.

    Corridors survive only when both endpoints are visible; doors survive only
    on surviving corridors. Walls, zones and metadata pass through unchanged.
    """
    rooms = [r for r in dungeon_map.rooms if not r.is_secret]
    visible = {r.id for r in rooms}
    corridors = [
        c for c in dungeon_map.corridors
        if c.from_room_id in visible and c.to_room_id in visible
    ]
    live = {c.id for c in corridors}
    return dungeon_map.evolve(
        rooms=rooms,
        corridors=corridors,
        doors=[d for d in dungeon_map.doors if not d.is_secret and d.corridor_id in live],
        traps=[t for t in dungeon_map.traps if t.room_id in visible],
        encounters=[e for e in dungeon_map.encounters if e.room_id in visible],
        treasures=[t for t in dungeon_map.treasures if t.room_id in visible],
        dressing=[d for d in dungeon_map.dressing if d.room_id in visible],
    )
