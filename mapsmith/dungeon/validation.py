"""Lightweight document validation for persisted maps and patch actions.

Provides minimal schema-like checking with clear, consistent errors so a
malformed document is rejected before it reaches the engine. Not a general
JSON Schema implementation.

Schema Mini-Language (Python dict):
{
  'fieldName': ('type', required: bool, extras: dict)
}
Supported types: 'str', 'int', 'num', 'bool', 'list', 'dict', 'points'
Extras examples:
  max_len / min_len / allow_empty (str)
  min / max (int, num)
  choices (str, int)
  item_type (list element primitive type), min_items / max_items (list, points)
  default (value filled in when an optional field is missing)

Example:
 schema = {
   'label': ('str', True, {'min_len': 1, 'max_len': 100})
 }
 ok, data_or_err = validate(data, schema)

If invalid: (False, {'field': 'label', 'error': 'too long', 'code': 'max_len'})
If valid: (True, normalized_data)

``require`` wraps ``validate`` and raises ``ValidationError`` instead.
"""
from __future__ import annotations
from typing import Any, Dict, Tuple

from .config import GRID_TYPES
from .models import (
    DIFFICULTIES,
    PASS_NAMES,
    SCHEMA_VERSION,
    SCOPES,
    TRAP_SEVERITIES,
    TREASURE_CATEGORIES,
    TREASURE_RARITIES,
    ZONE_TYPES,
    DungeonMap,
)

PRIMITIVES = {
    'str': str,
    'int': int,
    'num': (int, float),
    'bool': bool,
    'list': list,
    'dict': dict,
    'points': list,
}


class ValidationError(Exception):
    def __init__(self, field: str, message: str, code: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message
        self.code = code

    def to_dict(self) -> Dict[str, str]:
        return {'field': self.field, 'error': self.message, 'code': self.code}


def _fail(field: str, message: str, code: str) -> Tuple[bool, Dict[str, Any]]:
    return False, {'field': field, 'error': message, 'code': code}


def _is_type(value: Any, type_name: str) -> bool:
    # bool is an int subclass; keep the two apart
    if type_name in ('int', 'num') and isinstance(value, bool):
        return False
    return isinstance(value, PRIMITIVES[type_name])


def _check_points(name: str, value: list) -> Tuple[bool, Dict[str, Any]]:
    for idx, elem in enumerate(value):
        if not isinstance(elem, dict):
            return _fail(f'{name}[{idx}]', 'expected point object', 'type')
        for axis in ('x', 'y'):
            if axis not in elem:
                return _fail(f'{name}[{idx}].{axis}', 'missing required field', 'required')
            if not _is_type(elem[axis], 'int'):
                return _fail(f'{name}[{idx}].{axis}', 'expected int', 'type')
    return True, {}


def validate(payload: Any, schema: Dict[str, tuple], path: str = '') -> Tuple[bool, Dict[str, Any]]:
    if not isinstance(payload, dict):
        return _fail(path or '__root__', 'payload must be an object', 'type')
    out = {}
    for name, spec in schema.items():
        if not isinstance(spec, tuple) or len(spec) < 2:
            return _fail('__schema__', f'invalid spec for {name}', 'schema')
        type_name, required = spec[0], spec[1]
        extras = spec[2] if len(spec) > 2 else {}
        if type_name not in PRIMITIVES:
            return _fail('__schema__', f'unsupported type {type_name}', 'schema')
        field = f'{path}.{name}' if path else name
        if name not in payload or payload[name] is None:
            if required:
                return _fail(field, 'missing required field', 'required')
            if 'default' in extras:
                out[name] = extras['default']
            continue
        value = payload[name]
        if not _is_type(value, type_name):
            return _fail(field, f'expected {type_name}', 'type')
        if 'choices' in extras and value not in extras['choices']:
            return _fail(field, f'must be one of {", ".join(str(c) for c in extras["choices"])}', 'choices')
        if type_name == 'str':
            s = value.strip() if not extras.get('allow_empty') else value
            if not extras.get('allow_empty') and len(s) == 0:
                return _fail(field, 'must not be empty', 'empty')
            if 'max_len' in extras and len(value) > extras['max_len']:
                return _fail(field, 'too long', 'max_len')
            if 'min_len' in extras and len(value) < extras['min_len']:
                return _fail(field, 'too short', 'min_len')
            out[name] = value if extras.get('preserve_whitespace') else s
        elif type_name in ('int', 'num'):
            if 'min' in extras and value < extras['min']:
                return _fail(field, f'must be >= {extras["min"]}', 'min')
            if 'max' in extras and value > extras['max']:
                return _fail(field, f'must be <= {extras["max"]}', 'max')
            out[name] = value
        elif type_name in ('list', 'points'):
            if 'min_items' in extras and len(value) < extras['min_items']:
                return _fail(field, f'needs at least {extras["min_items"]} items', 'min_items')
            if 'max_items' in extras and len(value) > extras['max_items']:
                return _fail(field, f'allows at most {extras["max_items"]} items', 'max_items')
            if type_name == 'points':
                ok, err = _check_points(field, value)
                if not ok:
                    return ok, err
            item_type = extras.get('item_type')
            if item_type:
                if item_type not in PRIMITIVES:
                    return _fail('__schema__', f'unsupported item_type {item_type}', 'schema')
                for idx, elem in enumerate(value):
                    if not _is_type(elem, item_type):
                        return _fail(field, f'element {idx} not {item_type}', 'item_type')
            out[name] = value
        else:
            out[name] = value
    return True, out


def require(payload: Any, schema: Dict[str, tuple], path: str = '') -> Dict[str, Any]:
    ok, data = validate(payload, schema, path)
    if not ok:
        raise ValidationError(data['field'], data['error'], data['code'])
    return data


ID = ('str', True, {'min_len': 1})
TEXT = ('str', True, {'allow_empty': True})
LOCK = ('bool', False, {'default': False})

ROOM = {
    'id': ID,
    'roomNumber': ('int', True, {'min': 1}),
    'x': ('int', True),
    'y': ('int', True),
    'width': ('int', True, {'min': 1}),
    'height': ('int', True, {'min': 1}),
    'isSecret': LOCK,
}
CORRIDOR = {
    'id': ID,
    'fromRoomId': ID,
    'toRoomId': ID,
    'points': ('points', True, {'min_items': 2}),
}
DOOR = {
    'id': ID,
    'x': ('int', True),
    'y': ('int', True),
    'corridorId': ID,
    'isLocked': LOCK,
    'isSecret': LOCK,
    'isSpecial': LOCK,
}
WALL = {
    'id': ID,
    'x1': ('int', True),
    'y1': ('int', True),
    'x2': ('int', True),
    'y2': ('int', True),
}
TRAP = {
    'id': ID,
    'roomId': ID,
    'name': TEXT,
    'severity': ('str', True, {'choices': TRAP_SEVERITIES}),
    'trigger': TEXT,
    'effect': TEXT,
    'detectDc': ('int', True),
    'disarmDc': ('int', True),
    'isLocked': LOCK,
}
ENCOUNTER = {
    'id': ID,
    'roomId': ID,
    'title': TEXT,
    'difficulty': ('str', True, {'choices': DIFFICULTIES}),
    'summary': TEXT,
    'isLocked': LOCK,
}
TREASURE = {
    'id': ID,
    'roomId': ID,
    'category': ('str', True, {'choices': TREASURE_CATEGORIES}),
    'rarity': ('str', True, {'choices': TREASURE_RARITIES}),
    'summary': TEXT,
    'isLocked': LOCK,
}
DRESSING = {
    'id': ID,
    'roomId': ID,
    'text': TEXT,
    'isLocked': LOCK,
}
ZONE = {
    'id': ID,
    'type': ('str', True, {'choices': ZONE_TYPES}),
    'label': TEXT,
    'cells': ('points', True),
}
PASS_HISTORY_ENTRY = {
    'pass': ('str', True, {'choices': PASS_NAMES}),
    'scope': ('str', True, {'choices': SCOPES}),
    'startedAt': ID,
    'finishedAt': ID,
    'seed': ID,
    'configHash': ID,
    'changedCounts': ('dict', False),
}
METADATA = {
    'algorithmVersion': ID,
    'configHash': ID,
    'generatedAt': ID,
    'seed': ID,
    'passHistory': ('list', False, {'item_type': 'dict'}),
}
DUNGEON_MAP = {
    'schemaVersion': ('int', True, {'choices': (SCHEMA_VERSION,)}),
    'gridType': ('str', False, {'choices': GRID_TYPES}),
    'width': ('int', True, {'min': 1}),
    'height': ('int', True, {'min': 1}),
    'cellSize': ('int', True, {'min': 1}),
    'metadata': ('dict', True),
}

COLLECTIONS = {
    'rooms': ROOM,
    'corridors': CORRIDOR,
    'doors': DOOR,
    'walls': WALL,
    'traps': TRAP,
    'encounters': ENCOUNTER,
    'treasures': TREASURE,
    'dressing': DRESSING,
    'zones': ZONE,
}


def validate_dungeon_document(doc: Any) -> None:
    """Raise ``ValidationError`` on the first structural problem in ``doc``."""
    require(doc, DUNGEON_MAP)
    for key, schema in COLLECTIONS.items():
        items = doc.get(key)
        if items is None:
            continue
        if not isinstance(items, list):
            raise ValidationError(key, 'expected list', 'type')
        for idx, item in enumerate(items):
            require(item, schema, f'{key}[{idx}]')
    meta = doc['metadata']
    require(meta, METADATA, 'metadata')
    for idx, entry in enumerate(meta.get('passHistory') or []):
        data = require(entry, PASS_HISTORY_ENTRY, f'metadata.passHistory[{idx}]')
        for name, count in (data.get('changedCounts') or {}).items():
            if not _is_type(count, 'int'):
                raise ValidationError(f'metadata.passHistory[{idx}].changedCounts.{name}', 'expected int', 'type')


def parse_dungeon_map(doc: Any) -> DungeonMap:
    validate_dungeon_document(doc)
    return DungeonMap.from_dict(doc)


__all__ = [
    'ValidationError',
    'validate',
    'require',
    'validate_dungeon_document',
    'parse_dungeon_map',
]
