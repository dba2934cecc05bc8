"""Helpers shared by the dungeon tests."""

from mapsmith.dungeon.models import ALGORITHM_VERSION, DungeonMap, MapMetadata, Room


def make_map(rooms=(), width=40, height=40, **collections):
    """Hand-built map with fixed metadata; ``collections`` are DungeonMap fields."""
    meta = MapMetadata(
        algorithm_version=ALGORITHM_VERSION,
        config_hash="0" * 16,
        generated_at="2024-01-01T00:00:00.000Z",
        seed="hand-built",
    )
    fields = {k: tuple(v) for k, v in collections.items()}
    return DungeonMap(width=width, height=height, cell_size=32, metadata=meta, rooms=tuple(rooms), **fields)


def room(room_id, number, x, y, w=3, h=3, secret=False):
    return Room(id=room_id, room_number=number, x=x, y=y, width=w, height=h, is_secret=secret)


def connected_room_ids(dungeon_map):
    """Room ids reachable from the first room over corridors."""
    if not dungeon_map.rooms:
        return set()
    adj = {r.id: set() for r in dungeon_map.rooms}
    for c in dungeon_map.corridors:
        adj[c.from_room_id].add(c.to_room_id)
        adj[c.to_room_id].add(c.from_room_id)
    start = dungeon_map.rooms[0].id
    seen = {start}
    stack = [start]
    while stack:
        cur = stack.pop()
        for nxt in adj[cur]:
            if nxt not in seen:
                seen.add(nxt)
                stack.append(nxt)
    return seen


def room_contains(r, point):
    x, y = point
    return r.x <= x < r.x + r.width and r.y <= y < r.y + r.height
