"""Map patch actions.

Each action is a frozen dataclass carrying its wire ``TYPE`` and a validation
schema for its camelCase payload. ``action_from_dict`` dispatches on the
``type`` discriminator.
"""
from __future__ import annotations
from dataclasses import dataclass, fields
from typing import Any, ClassVar, Dict, Optional, Tuple

from .models import Point, ZONE_TYPES
from .validation import ValidationError, require

LOCKABLE_TYPES = ('DOOR', 'TRAP', 'ENCOUNTER', 'TREASURE', 'DRESSING')
RENUMBER_MODES = ('AUTO', 'EXPLICIT')

_ID = ('str', True, {'min_len': 1})
_COORD = ('int', True)
_ORIGIN = ('int', True, {'min': 0})
_EXTENT = ('int', True, {'min': 2, 'max': 80})
_FLAG = ('bool', False, {'default': False})


def _camel(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


def _points_in(value) -> Tuple[Point, ...]:
    return tuple((p['x'], p['y']) for p in value)


@dataclass(frozen=True)
class Action:
    TYPE: ClassVar[str] = ''
    SCHEMA: ClassVar[Dict[str, tuple]] = {}

    @classmethod
    def from_dict(cls, doc: Dict[str, Any]) -> "Action":
        data = require(doc, cls.SCHEMA)
        kwargs = {}
        for f in fields(cls):
            key = _camel(f.name)
            if key not in data:
                continue
            value = data[key]
            if key in ('points', 'cells'):
                value = _points_in(value)
            elif key == 'roomOrder':
                value = tuple(value)
            kwargs[f.name] = value
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {'type': self.TYPE}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in ('points', 'cells'):
                value = [{'x': x, 'y': y} for x, y in value]
            elif isinstance(value, tuple):
                value = list(value)
            if value is not None:
                out[_camel(f.name)] = value
        return out


@dataclass(frozen=True)
class AddRoom(Action):
    TYPE: ClassVar[str] = 'ADD_ROOM'
    SCHEMA: ClassVar[Dict[str, tuple]] = {
        'roomNumber': ('int', False, {'min': 1}),
        'x': _ORIGIN,
        'y': _ORIGIN,
        'width': _EXTENT,
        'height': _EXTENT,
        'isSecret': _FLAG,
    }
    x: int = 0
    y: int = 0
    width: int = 2
    height: int = 2
    is_secret: bool = False
    room_number: Optional[int] = None


@dataclass(frozen=True)
class MoveRoom(Action):
    TYPE: ClassVar[str] = 'MOVE_ROOM'
    SCHEMA: ClassVar[Dict[str, tuple]] = {'roomId': _ID, 'x': _ORIGIN, 'y': _ORIGIN}
    room_id: str = ''
    x: int = 0
    y: int = 0


@dataclass(frozen=True)
class ResizeRoom(Action):
    TYPE: ClassVar[str] = 'RESIZE_ROOM'
    SCHEMA: ClassVar[Dict[str, tuple]] = {'roomId': _ID, 'width': _EXTENT, 'height': _EXTENT}
    room_id: str = ''
    width: int = 2
    height: int = 2


@dataclass(frozen=True)
class RemoveRoom(Action):
    TYPE: ClassVar[str] = 'REMOVE_ROOM'
    SCHEMA: ClassVar[Dict[str, tuple]] = {'roomId': _ID}
    room_id: str = ''


@dataclass(frozen=True)
class AddCorridor(Action):
    TYPE: ClassVar[str] = 'ADD_CORRIDOR'
    SCHEMA: ClassVar[Dict[str, tuple]] = {
        'fromRoomId': _ID,
        'toRoomId': _ID,
        'points': ('points', True, {'min_items': 2}),
    }
    from_room_id: str = ''
    to_room_id: str = ''
    points: Tuple[Point, ...] = ()


@dataclass(frozen=True)
class RemoveCorridor(Action):
    TYPE: ClassVar[str] = 'REMOVE_CORRIDOR'
    SCHEMA: ClassVar[Dict[str, tuple]] = {'corridorId': _ID}
    corridor_id: str = ''


@dataclass(frozen=True)
class AddDoor(Action):
    TYPE: ClassVar[str] = 'ADD_DOOR'
    SCHEMA: ClassVar[Dict[str, tuple]] = {
        'corridorId': _ID,
        'x': _COORD,
        'y': _COORD,
        'isLocked': _FLAG,
        'isSecret': _FLAG,
        'isSpecial': _FLAG,
    }
    corridor_id: str = ''
    x: int = 0
    y: int = 0
    is_locked: bool = False
    is_secret: bool = False
    is_special: bool = False


@dataclass(frozen=True)
class MoveDoor(Action):
    TYPE: ClassVar[str] = 'MOVE_DOOR'
    SCHEMA: ClassVar[Dict[str, tuple]] = {'doorId': _ID, 'x': _COORD, 'y': _COORD}
    door_id: str = ''
    x: int = 0
    y: int = 0


@dataclass(frozen=True)
class RemoveDoor(Action):
    TYPE: ClassVar[str] = 'REMOVE_DOOR'
    SCHEMA: ClassVar[Dict[str, tuple]] = {'doorId': _ID}
    door_id: str = ''


@dataclass(frozen=True)
class ToggleDoorSecret(Action):
    TYPE: ClassVar[str] = 'TOGGLE_DOOR_SECRET'
    SCHEMA: ClassVar[Dict[str, tuple]] = {'doorId': _ID}
    door_id: str = ''


@dataclass(frozen=True)
class ToggleDoorLock(Action):
    TYPE: ClassVar[str] = 'TOGGLE_DOOR_LOCK'
    SCHEMA: ClassVar[Dict[str, tuple]] = {'doorId': _ID}
    door_id: str = ''


@dataclass(frozen=True)
class DrawWallSegment(Action):
    TYPE: ClassVar[str] = 'DRAW_WALL_SEGMENT'
    SCHEMA: ClassVar[Dict[str, tuple]] = {'x1': _COORD, 'y1': _COORD, 'x2': _COORD, 'y2': _COORD}
    x1: int = 0
    y1: int = 0
    x2: int = 0
    y2: int = 0


@dataclass(frozen=True)
class EraseWallSegment(Action):
    TYPE: ClassVar[str] = 'ERASE_WALL_SEGMENT'
    SCHEMA: ClassVar[Dict[str, tuple]] = {'wallId': _ID}
    wall_id: str = ''


@dataclass(frozen=True)
class RenumberRooms(Action):
    TYPE: ClassVar[str] = 'RENUMBER_ROOMS'
    SCHEMA: ClassVar[Dict[str, tuple]] = {
        'mode': ('str', False, {'choices': RENUMBER_MODES, 'default': 'AUTO'}),
        'roomOrder': ('list', False, {'item_type': 'str', 'max_items': 500, 'default': []}),
    }
    mode: str = 'AUTO'
    room_order: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PaintZone(Action):
    TYPE: ClassVar[str] = 'PAINT_ZONE'
    SCHEMA: ClassVar[Dict[str, tuple]] = {
        'zoneType': ('str', True, {'choices': ZONE_TYPES}),
        'label': ('str', True, {'min_len': 1, 'max_len': 100}),
        'cells': ('points', True, {'min_items': 1, 'max_items': 5000}),
    }
    zone_type: str = 'SAFE'
    label: str = ''
    cells: Tuple[Point, ...] = ()


@dataclass(frozen=True)
class ClearZone(Action):
    TYPE: ClassVar[str] = 'CLEAR_ZONE'
    SCHEMA: ClassVar[Dict[str, tuple]] = {'zoneId': _ID}
    zone_id: str = ''


@dataclass(frozen=True)
class ToggleLock(Action):
    TYPE: ClassVar[str] = 'TOGGLE_LOCK'
    SCHEMA: ClassVar[Dict[str, tuple]] = {
        'entityType': ('str', True, {'choices': LOCKABLE_TYPES}),
        'entityId': _ID,
    }
    entity_type: str = 'DOOR'
    entity_id: str = ''


ACTION_TYPES: Dict[str, type] = {
    cls.TYPE: cls
    for cls in (
        AddRoom, MoveRoom, ResizeRoom, RemoveRoom, AddCorridor, RemoveCorridor,
        AddDoor, MoveDoor, RemoveDoor, ToggleDoorSecret, ToggleDoorLock,
        DrawWallSegment, EraseWallSegment, RenumberRooms, PaintZone, ClearZone, ToggleLock,
    )
}


def action_from_dict(doc: Any) -> Action:
    if not isinstance(doc, dict):
        raise ValidationError('__root__', 'action must be an object', 'type')
    kind = doc.get('type')
    cls = ACTION_TYPES.get(kind) if isinstance(kind, str) else None
    if cls is None:
        raise ValidationError('type', f'unknown action type {kind!r}', 'choices')
    return cls.from_dict(doc)


__all__ = [
    'Action',
    'AddRoom',
    'MoveRoom',
    'ResizeRoom',
    'RemoveRoom',
    'AddCorridor',
    'RemoveCorridor',
    'AddDoor',
    'MoveDoor',
    'RemoveDoor',
    'ToggleDoorSecret',
    'ToggleDoorLock',
    'DrawWallSegment',
    'EraseWallSegment',
    'RenumberRooms',
    'PaintZone',
    'ClearZone',
    'ToggleLock',
    'ACTION_TYPES',
    'LOCKABLE_TYPES',
    'action_from_dict',
]
