"""Map patch engine: folds editor actions over a map.

Every action yields an ``ActionOutcome``; an action that references a missing
entity is reported as ``NOOP`` rather than raised. Room removal cascades to
corridors, the doors on those corridors and the room's content.
"""
from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Sequence, Tuple
import uuid

from mapsmith.logging_utils import get_logger
from mapsmith.settings import get_settings

from . import actions as act
from .actions import Action, action_from_dict
from .models import Corridor, Door, DungeonMap, Room, WallSegment, Zone
from .pipeline import utc_now_iso

log = get_logger("mapsmith.dungeon.editor")

APPLIED = 'APPLIED'
NOOP = 'NOOP'

IdFactory = Callable[[str], str]

# TOGGLE_LOCK entity type -> DungeonMap collection
LOCK_COLLECTIONS = {
    'DOOR': 'doors',
    'TRAP': 'traps',
    'ENCOUNTER': 'encounters',
    'TREASURE': 'treasures',
    'DRESSING': 'dressing',
}


class PatchError(ValueError):
    pass


@dataclass(frozen=True)
class ActionOutcome:
    index: int
    type: str
    status: str
    reason: Optional[str] = None

    def to_dict(self):
        out = {'index': self.index, 'type': self.type, 'status': self.status}
        if self.reason:
            out['reason'] = self.reason
        return out


def default_id_factory(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


def _has(items, entity_id: str) -> bool:
    return any(item.id == entity_id for item in items)


def _update_by_id(items, entity_id: str, **changes):
    return [replace(item, **changes) if item.id == entity_id else item for item in items]


def _toggle_by_id(items, entity_id: str, flag: str):
    return [replace(item, **{flag: not getattr(item, flag)}) if item.id == entity_id else item for item in items]


def _without_id(items, entity_id: str):
    return [item for item in items if item.id != entity_id]


def renumber_auto(rooms: Sequence[Room]) -> List[Room]:
    ordered = sorted(rooms, key=lambda r: (r.y, r.x))
    return [replace(room, room_number=n) for n, room in enumerate(ordered, start=1)]


def renumber_explicit(rooms: Sequence[Room], order: Sequence[str]) -> List[Room]:
    """Number ``order`` first (unknown and repeated ids skipped), then the rest by (number, id)."""
    by_id = {room.id: room for room in rooms}
    out: List[Room] = []
    seen = set()
    for room_id in order:
        if room_id in seen or room_id not in by_id:
            continue
        seen.add(room_id)
        out.append(replace(by_id[room_id], room_number=len(out) + 1))
    rest = sorted((r for r in rooms if r.id not in seen), key=lambda r: (r.room_number, r.id))
    for room in rest:
        out.append(replace(room, room_number=len(out) + 1))
    return out


def _add_room(m: DungeonMap, a: act.AddRoom, new_id: IdFactory):
    number = a.room_number or ((m.rooms[-1].room_number if m.rooms else 0) + 1)
    room = Room(new_id('room'), number, a.x, a.y, a.width, a.height, a.is_secret)
    rooms = sorted(list(m.rooms) + [room], key=lambda r: r.room_number)
    return m.evolve(rooms=rooms), None


def _move_room(m: DungeonMap, a: act.MoveRoom, new_id: IdFactory):
    if m.room_by_id(a.room_id) is None:
        return m, 'room not found'
    return m.evolve(rooms=_update_by_id(m.rooms, a.room_id, x=a.x, y=a.y)), None


def _resize_room(m: DungeonMap, a: act.ResizeRoom, new_id: IdFactory):
    if m.room_by_id(a.room_id) is None:
        return m, 'room not found'
    return m.evolve(rooms=_update_by_id(m.rooms, a.room_id, width=a.width, height=a.height)), None


def _remove_room(m: DungeonMap, a: act.RemoveRoom, new_id: IdFactory):
    if m.room_by_id(a.room_id) is None:
        return m, 'room not found'
    rid = a.room_id
    corridors = [c for c in m.corridors if c.from_room_id != rid and c.to_room_id != rid]
    live = {c.id for c in corridors}
    return m.evolve(
        rooms=_without_id(m.rooms, rid),
        corridors=corridors,
        doors=[d for d in m.doors if d.corridor_id in live],
        traps=[t for t in m.traps if t.room_id != rid],
        encounters=[e for e in m.encounters if e.room_id != rid],
        treasures=[t for t in m.treasures if t.room_id != rid],
        dressing=[d for d in m.dressing if d.room_id != rid],
    ), None


def _add_corridor(m: DungeonMap, a: act.AddCorridor, new_id: IdFactory):
    if m.room_by_id(a.from_room_id) is None or m.room_by_id(a.to_room_id) is None:
        return m, 'room not found'
    corridor = Corridor(new_id('corridor'), a.from_room_id, a.to_room_id, tuple(a.points))
    return m.evolve(corridors=list(m.corridors) + [corridor]), None


def _remove_corridor(m: DungeonMap, a: act.RemoveCorridor, new_id: IdFactory):
    if not _has(m.corridors, a.corridor_id):
        return m, 'corridor not found'
    return m.evolve(
        corridors=_without_id(m.corridors, a.corridor_id),
        doors=[d for d in m.doors if d.corridor_id != a.corridor_id],
    ), None


def _add_door(m: DungeonMap, a: act.AddDoor, new_id: IdFactory):
    if not _has(m.corridors, a.corridor_id):
        return m, 'corridor not found'
    door = Door(new_id('door'), a.x, a.y, a.corridor_id, a.is_locked, a.is_secret, a.is_special)
    return m.evolve(doors=list(m.doors) + [door]), None


def _move_door(m: DungeonMap, a: act.MoveDoor, new_id: IdFactory):
    if not _has(m.doors, a.door_id):
        return m, 'door not found'
    return m.evolve(doors=_update_by_id(m.doors, a.door_id, x=a.x, y=a.y)), None


def _remove_door(m: DungeonMap, a: act.RemoveDoor, new_id: IdFactory):
    if not _has(m.doors, a.door_id):
        return m, 'door not found'
    return m.evolve(doors=_without_id(m.doors, a.door_id)), None


def _toggle_door_secret(m: DungeonMap, a: act.ToggleDoorSecret, new_id: IdFactory):
    if not _has(m.doors, a.door_id):
        return m, 'door not found'
    return m.evolve(doors=_toggle_by_id(m.doors, a.door_id, 'is_secret')), None


def _toggle_door_lock(m: DungeonMap, a: act.ToggleDoorLock, new_id: IdFactory):
    if not _has(m.doors, a.door_id):
        return m, 'door not found'
    return m.evolve(doors=_toggle_by_id(m.doors, a.door_id, 'is_locked')), None


def _draw_wall(m: DungeonMap, a: act.DrawWallSegment, new_id: IdFactory):
    wall = WallSegment(new_id('wall'), a.x1, a.y1, a.x2, a.y2)
    return m.evolve(walls=list(m.walls) + [wall]), None


def _erase_wall(m: DungeonMap, a: act.EraseWallSegment, new_id: IdFactory):
    if not _has(m.walls, a.wall_id):
        return m, 'wall not found'
    return m.evolve(walls=_without_id(m.walls, a.wall_id)), None


def _renumber(m: DungeonMap, a: act.RenumberRooms, new_id: IdFactory):
    if a.mode == 'EXPLICIT' and a.room_order:
        return m.evolve(rooms=renumber_explicit(m.rooms, a.room_order)), None
    return m.evolve(rooms=renumber_auto(m.rooms)), None


def _paint_zone(m: DungeonMap, a: act.PaintZone, new_id: IdFactory):
    zone = Zone(new_id('zone'), a.zone_type, a.label, tuple(a.cells))
    return m.evolve(zones=list(m.zones) + [zone]), None


def _clear_zone(m: DungeonMap, a: act.ClearZone, new_id: IdFactory):
    if not _has(m.zones, a.zone_id):
        return m, 'zone not found'
    return m.evolve(zones=_without_id(m.zones, a.zone_id)), None


def _toggle_lock(m: DungeonMap, a: act.ToggleLock, new_id: IdFactory):
    name = LOCK_COLLECTIONS[a.entity_type]
    items = getattr(m, name)
    if not _has(items, a.entity_id):
        return m, f'{a.entity_type.lower()} not found'
    return m.evolve(**{name: _toggle_by_id(items, a.entity_id, 'is_locked')}), None


HANDLERS = {
    act.AddRoom: _add_room,
    act.MoveRoom: _move_room,
    act.ResizeRoom: _resize_room,
    act.RemoveRoom: _remove_room,
    act.AddCorridor: _add_corridor,
    act.RemoveCorridor: _remove_corridor,
    act.AddDoor: _add_door,
    act.MoveDoor: _move_door,
    act.RemoveDoor: _remove_door,
    act.ToggleDoorSecret: _toggle_door_secret,
    act.ToggleDoorLock: _toggle_door_lock,
    act.DrawWallSegment: _draw_wall,
    act.EraseWallSegment: _erase_wall,
    act.RenumberRooms: _renumber,
    act.PaintZone: _paint_zone,
    act.ClearZone: _clear_zone,
    act.ToggleLock: _toggle_lock,
}


def apply_action(
    dungeon_map: DungeonMap,
    action: Action,
    index: int = 0,
    id_factory: Optional[IdFactory] = None,
) -> Tuple[DungeonMap, ActionOutcome]:
    handler = HANDLERS.get(type(action))
    if handler is None:
        raise PatchError(f"Unsupported action: {type(action).__name__}")
    updated, reason = handler(dungeon_map, action, id_factory or default_id_factory)
    if reason is None:
        return updated, ActionOutcome(index, action.TYPE, APPLIED)
    if log.is_enabled("debug"):
        log.debug(event="patch_action_noop", index=index, type=action.TYPE, reason=reason)
    return updated, ActionOutcome(index, action.TYPE, NOOP, reason)


def _coerce_actions(actions: Sequence) -> List[Action]:
    return [a if isinstance(a, Action) else action_from_dict(a) for a in actions]


def apply_patch_with_report(
    dungeon_map: DungeonMap,
    actions: Sequence,
    id_factory: Optional[IdFactory] = None,
) -> Tuple[DungeonMap, List[ActionOutcome]]:
    """Apply ``actions`` in order; return the new map and one outcome per action.

    ``actions`` may mix ``Action`` instances and camelCase dicts. The list must
    hold between 1 and ``MAPSMITH_MAX_PATCH_ACTIONS`` entries. Pass history is
    left untouched and ``generatedAt`` is refreshed once per call.
    """
    limit = get_settings().max_patch_actions
    if not 1 <= len(actions) <= limit:
        raise PatchError(f"A patch must contain between 1 and {limit} actions (got {len(actions)})")
    parsed = _coerce_actions(actions)
    current = dungeon_map
    outcomes: List[ActionOutcome] = []
    for index, action in enumerate(parsed):
        current, outcome = apply_action(current, action, index, id_factory)
        outcomes.append(outcome)
    current = current.evolve(metadata=replace(current.metadata, generated_at=utc_now_iso()))
    applied = sum(1 for o in outcomes if o.status == APPLIED)
    log.info(event="map_patched", actions=len(outcomes), applied=applied, noop=len(outcomes) - applied)
    return current, outcomes


def apply_patch(dungeon_map: DungeonMap, actions: Sequence, id_factory: Optional[IdFactory] = None) -> DungeonMap:
    return apply_patch_with_report(dungeon_map, actions, id_factory)[0]


__all__ = [
    'APPLIED',
    'NOOP',
    'ActionOutcome',
    'PatchError',
    'apply_action',
    'apply_patch',
    'apply_patch_with_report',
    'default_id_factory',
    'renumber_auto',
    'renumber_explicit',
]
