"""Dungeon map data model.

Entities are frozen dataclasses and collections are rebuilt on every change,
so a ``DungeonMap`` handed to a caller is never mutated by a later call.
``to_dict``/``from_dict`` convert to and from the persisted camelCase document.
"""
from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

Point = Tuple[int, int]

SCHEMA_VERSION = 1
ALGORITHM_VERSION = "1.1.0"

TRAP_SEVERITIES = ("LOW", "MEDIUM", "HIGH")
DIFFICULTIES = ("EASY", "MEDIUM", "HARD", "DEADLY")
TREASURE_CATEGORIES = ("COIN", "ITEM", "ART", "MAGIC")
TREASURE_RARITIES = ("COMMON", "UNCOMMON", "RARE", "VERY_RARE")
ZONE_TYPES = ("SAFE", "HAZARD", "FACTION")
PASS_NAMES = ("LAYOUT", "DOORS", "TRAPS", "ENCOUNTERS", "TREASURE", "DRESSING")
SCOPES = ("FULL", "LAYOUT", "DOORS", "TRAPS", "ENCOUNTERS", "TREASURE")


def _pt(p: Point) -> Dict[str, int]:
    return {"x": p[0], "y": p[1]}


def _from_pt(d: Dict[str, Any]) -> Point:
    return (d["x"], d["y"])


@dataclass(frozen=True)
class Room:
    id: str
    room_number: int
    x: int
    y: int
    width: int
    height: int
    is_secret: bool = False

    @property
    def center(self) -> Point:
        return (self.x + self.width // 2, self.y + self.height // 2)

    def cells(self):
        for ix in range(self.x, self.x + self.width):
            for iy in range(self.y, self.y + self.height):
                yield ix, iy

    def to_dict(self):
        return {
            "id": self.id, "roomNumber": self.room_number, "x": self.x, "y": self.y,
            "width": self.width, "height": self.height, "isSecret": self.is_secret,
        }

    @classmethod
    def from_dict(cls, d):
        return cls(d["id"], d["roomNumber"], d["x"], d["y"], d["width"], d["height"], d.get("isSecret", False))


@dataclass(frozen=True)
class Corridor:
    id: str
    from_room_id: str
    to_room_id: str
    points: Tuple[Point, ...]

    def to_dict(self):
        return {
            "id": self.id, "fromRoomId": self.from_room_id, "toRoomId": self.to_room_id,
            "points": [_pt(p) for p in self.points],
        }

    @classmethod
    def from_dict(cls, d):
        return cls(d["id"], d["fromRoomId"], d["toRoomId"], tuple(_from_pt(p) for p in d["points"]))


@dataclass(frozen=True)
class Door:
    id: str
    x: int
    y: int
    corridor_id: str
    is_locked: bool = False
    is_secret: bool = False
    is_special: bool = False

    def to_dict(self):
        return {
            "id": self.id, "x": self.x, "y": self.y, "corridorId": self.corridor_id,
            "isLocked": self.is_locked, "isSecret": self.is_secret, "isSpecial": self.is_special,
        }

    @classmethod
    def from_dict(cls, d):
        return cls(
            d["id"], d["x"], d["y"], d["corridorId"],
            d.get("isLocked", False), d.get("isSecret", False), d.get("isSpecial", False),
        )


@dataclass(frozen=True)
class WallSegment:
    id: str
    x1: int
    y1: int
    x2: int
    y2: int

    def to_dict(self):
        return {"id": self.id, "x1": self.x1, "y1": self.y1, "x2": self.x2, "y2": self.y2}

    @classmethod
    def from_dict(cls, d):
        return cls(d["id"], d["x1"], d["y1"], d["x2"], d["y2"])


@dataclass(frozen=True)
class Trap:
    id: str
    room_id: str
    name: str
    severity: str
    trigger: str
    effect: str
    detect_dc: int
    disarm_dc: int
    is_locked: bool = False

    def to_dict(self):
        return {
            "id": self.id, "roomId": self.room_id, "name": self.name, "severity": self.severity,
            "trigger": self.trigger, "effect": self.effect, "detectDc": self.detect_dc,
            "disarmDc": self.disarm_dc, "isLocked": self.is_locked,
        }

    @classmethod
    def from_dict(cls, d):
        return cls(
            d["id"], d["roomId"], d["name"], d["severity"], d["trigger"], d["effect"],
            d["detectDc"], d["disarmDc"], d.get("isLocked", False),
        )


@dataclass(frozen=True)
class Encounter:
    id: str
    room_id: str
    title: str
    difficulty: str
    summary: str
    is_locked: bool = False

    def to_dict(self):
        return {
            "id": self.id, "roomId": self.room_id, "title": self.title,
            "difficulty": self.difficulty, "summary": self.summary, "isLocked": self.is_locked,
        }

    @classmethod
    def from_dict(cls, d):
        return cls(d["id"], d["roomId"], d["title"], d["difficulty"], d["summary"], d.get("isLocked", False))


@dataclass(frozen=True)
class Treasure:
    id: str
    room_id: str
    category: str
    rarity: str
    summary: str
    is_locked: bool = False

    def to_dict(self):
        return {
            "id": self.id, "roomId": self.room_id, "category": self.category,
            "rarity": self.rarity, "summary": self.summary, "isLocked": self.is_locked,
        }

    @classmethod
    def from_dict(cls, d):
        return cls(d["id"], d["roomId"], d["category"], d["rarity"], d["summary"], d.get("isLocked", False))


@dataclass(frozen=True)
class Dressing:
    id: str
    room_id: str
    text: str
    is_locked: bool = False

    def to_dict(self):
        return {"id": self.id, "roomId": self.room_id, "text": self.text, "isLocked": self.is_locked}

    @classmethod
    def from_dict(cls, d):
        return cls(d["id"], d["roomId"], d["text"], d.get("isLocked", False))


@dataclass(frozen=True)
class Zone:
    id: str
    type: str
    label: str
    cells: Tuple[Point, ...]

    def to_dict(self):
        return {"id": self.id, "type": self.type, "label": self.label, "cells": [_pt(c) for c in self.cells]}

    @classmethod
    def from_dict(cls, d):
        return cls(d["id"], d["type"], d["label"], tuple(_from_pt(c) for c in d["cells"]))


# Document key for each changed-count slot; "treasure" is singular on purpose.
COUNT_KEYS = ("rooms", "corridors", "doors", "traps", "encounters", "treasure", "dressing")


@dataclass(frozen=True)
class PassHistoryEntry:
    pass_name: str
    scope: str
    started_at: str
    finished_at: str
    seed: str
    config_hash: str
    changed_counts: Dict[str, int] = field(default_factory=dict)

    def to_dict(self):
        return {
            "pass": self.pass_name, "scope": self.scope, "startedAt": self.started_at,
            "finishedAt": self.finished_at, "seed": self.seed, "configHash": self.config_hash,
            "changedCounts": {k: self.changed_counts[k] for k in COUNT_KEYS if k in self.changed_counts},
        }

    @classmethod
    def from_dict(cls, d):
        return cls(
            d["pass"], d["scope"], d["startedAt"], d["finishedAt"], d["seed"], d["configHash"],
            dict(d.get("changedCounts") or {}),
        )


@dataclass(frozen=True)
class MapMetadata:
    algorithm_version: str
    config_hash: str
    generated_at: str
    seed: str
    pass_history: Tuple[PassHistoryEntry, ...] = ()

    def to_dict(self):
        return {
            "algorithmVersion": self.algorithm_version, "configHash": self.config_hash,
            "generatedAt": self.generated_at, "seed": self.seed,
            "passHistory": [e.to_dict() for e in self.pass_history],
        }

    @classmethod
    def from_dict(cls, d):
        return cls(
            d["algorithmVersion"], d["configHash"], d["generatedAt"], d["seed"],
            tuple(PassHistoryEntry.from_dict(e) for e in d.get("passHistory") or []),
        )


@dataclass(frozen=True)
class DungeonMap:
    width: int
    height: int
    cell_size: int
    metadata: MapMetadata
    grid_type: str = "SQUARE"
    schema_version: int = SCHEMA_VERSION
    rooms: Tuple[Room, ...] = ()
    corridors: Tuple[Corridor, ...] = ()
    doors: Tuple[Door, ...] = ()
    walls: Tuple[WallSegment, ...] = ()
    traps: Tuple[Trap, ...] = ()
    encounters: Tuple[Encounter, ...] = ()
    treasures: Tuple[Treasure, ...] = ()
    dressing: Tuple[Dressing, ...] = ()
    zones: Tuple[Zone, ...] = ()

    def evolve(self, **changes) -> "DungeonMap":
        """Copy with replaced fields; list values are frozen into tuples."""
        for k, v in changes.items():
            if isinstance(v, list):
                changes[k] = tuple(v)
        return replace(self, **changes)

    def room_by_id(self, room_id: str) -> Optional[Room]:
        for room in self.rooms:
            if room.id == room_id:
                return room
        return None

    def counts(self) -> Dict[str, int]:
        return {
            "rooms": len(self.rooms),
            "corridors": len(self.corridors),
            "doors": len(self.doors),
            "traps": len(self.traps),
            "encounters": len(self.encounters),
            "treasure": len(self.treasures),
            "dressing": len(self.dressing),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schemaVersion": self.schema_version,
            "gridType": self.grid_type,
            "width": self.width,
            "height": self.height,
            "cellSize": self.cell_size,
            "rooms": [r.to_dict() for r in self.rooms],
            "corridors": [c.to_dict() for c in self.corridors],
            "doors": [d.to_dict() for d in self.doors],
            "walls": [w.to_dict() for w in self.walls],
            "traps": [t.to_dict() for t in self.traps],
            "encounters": [e.to_dict() for e in self.encounters],
            "treasures": [t.to_dict() for t in self.treasures],
            "dressing": [d.to_dict() for d in self.dressing],
            "zones": [z.to_dict() for z in self.zones],
            "metadata": self.metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DungeonMap":
        """Rebuild from a document. Assumes structural validity (see validation.parse_dungeon_map)."""
        return cls(
            width=d["width"],
            height=d["height"],
            cell_size=d["cellSize"],
            grid_type=d.get("gridType", "SQUARE"),
            schema_version=d.get("schemaVersion", SCHEMA_VERSION),
            metadata=MapMetadata.from_dict(d["metadata"]),
            rooms=tuple(Room.from_dict(x) for x in d.get("rooms") or []),
            corridors=tuple(Corridor.from_dict(x) for x in d.get("corridors") or []),
            doors=tuple(Door.from_dict(x) for x in d.get("doors") or []),
            walls=tuple(WallSegment.from_dict(x) for x in d.get("walls") or []),
            traps=tuple(Trap.from_dict(x) for x in d.get("traps") or []),
            encounters=tuple(Encounter.from_dict(x) for x in d.get("encounters") or []),
            treasures=tuple(Treasure.from_dict(x) for x in d.get("treasures") or []),
            dressing=tuple(Dressing.from_dict(x) for x in d.get("dressing") or []),
            zones=tuple(Zone.from_dict(x) for x in d.get("zones") or []),
        )


__all__ = [
    "Point",
    "Room",
    "Corridor",
    "Door",
    "WallSegment",
    "Trap",
    "Encounter",
    "Treasure",
    "Dressing",
    "Zone",
    "PassHistoryEntry",
    "MapMetadata",
    "DungeonMap",
    "SCHEMA_VERSION",
    "ALGORITHM_VERSION",
    "COUNT_KEYS",
    "SCOPES",
    "PASS_NAMES",
]
