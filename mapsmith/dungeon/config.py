"""Generator configuration dataclasses, document conversion and config hash.

``parse_generator_config`` is the validation boundary used by callers (CLI,
services) before handing a config to the engine; the generator itself assumes
it receives a valid ``GeneratorConfig``.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import hashlib
import json

STRAIGHT = "STRAIGHT"
WINDING = "WINDING"
MIXED = "MIXED"
CORRIDOR_STYLES = (STRAIGHT, WINDING, MIXED)
GRID_TYPES = ("SQUARE",)


class ConfigError(ValueError):
    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


@dataclass(frozen=True)
class LayoutConfig:
    room_density: float = 0.25
    min_room_size: int = 4
    max_room_size: int = 10
    corridor_style: str = MIXED
    connectivity_strictness: float = 0.7
    secret_room_chance: float = 0.1


@dataclass(frozen=True)
class DoorConfig:
    door_frequency: float = 0.65
    locked_door_chance: float = 0.2
    secret_door_chance: float = 0.08
    special_door_chance: float = 0.05


@dataclass(frozen=True)
class ContentConfig:
    trap_density: float = 0.15
    encounter_density: float = 0.3
    treasure_density: float = 0.2
    dressing_density: float = 0.35


@dataclass(frozen=True)
class GeneratorConfig:
    grid_type: str = "SQUARE"
    width: int = 40
    height: int = 40
    cell_size: int = 32
    theme: str = "ruins"
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    doors: DoorConfig = field(default_factory=DoorConfig)
    content: ContentConfig = field(default_factory=ContentConfig)

    def to_dict(self) -> Dict[str, Any]:
        # Key order is part of the config hash input; keep it stable.
        return {
            "gridType": self.grid_type,
            "width": self.width,
            "height": self.height,
            "cellSize": self.cell_size,
            "theme": self.theme,
            "layout": {
                "roomDensity": self.layout.room_density,
                "minRoomSize": self.layout.min_room_size,
                "maxRoomSize": self.layout.max_room_size,
                "corridorStyle": self.layout.corridor_style,
                "connectivityStrictness": self.layout.connectivity_strictness,
                "secretRoomChance": self.layout.secret_room_chance,
            },
            "doors": {
                "doorFrequency": self.doors.door_frequency,
                "lockedDoorChance": self.doors.locked_door_chance,
                "secretDoorChance": self.doors.secret_door_chance,
                "specialDoorChance": self.doors.special_door_chance,
            },
            "content": {
                "trapDensity": self.content.trap_density,
                "encounterDensity": self.content.encounter_density,
                "treasureDensity": self.content.treasure_density,
                "dressingDensity": self.content.dressing_density,
            },
        }

    @classmethod
    def from_dict(cls, doc: Optional[Dict[str, Any]]) -> "GeneratorConfig":
        """Build a config from a camelCase document, filling defaults. No range checks."""
        doc = doc or {}
        lay = doc.get("layout") or {}
        drs = doc.get("doors") or {}
        cnt = doc.get("content") or {}
        d_lay, d_drs, d_cnt = LayoutConfig(), DoorConfig(), ContentConfig()
        return cls(
            grid_type=doc.get("gridType", "SQUARE"),
            width=doc.get("width", 40),
            height=doc.get("height", 40),
            cell_size=doc.get("cellSize", 32),
            theme=doc.get("theme", "ruins"),
            layout=LayoutConfig(
                room_density=lay.get("roomDensity", d_lay.room_density),
                min_room_size=lay.get("minRoomSize", d_lay.min_room_size),
                max_room_size=lay.get("maxRoomSize", d_lay.max_room_size),
                corridor_style=lay.get("corridorStyle", d_lay.corridor_style),
                connectivity_strictness=lay.get("connectivityStrictness", d_lay.connectivity_strictness),
                secret_room_chance=lay.get("secretRoomChance", d_lay.secret_room_chance),
            ),
            doors=DoorConfig(
                door_frequency=drs.get("doorFrequency", d_drs.door_frequency),
                locked_door_chance=drs.get("lockedDoorChance", d_drs.locked_door_chance),
                secret_door_chance=drs.get("secretDoorChance", d_drs.secret_door_chance),
                special_door_chance=drs.get("specialDoorChance", d_drs.special_door_chance),
            ),
            content=ContentConfig(
                trap_density=cnt.get("trapDensity", d_cnt.trap_density),
                encounter_density=cnt.get("encounterDensity", d_cnt.encounter_density),
                treasure_density=cnt.get("treasureDensity", d_cnt.treasure_density),
                dressing_density=cnt.get("dressingDensity", d_cnt.dressing_density),
            ),
        )


# (path, lo, hi, integer-only)
_RANGES = [
    ("width", 20, 400, True),
    ("height", 20, 400, True),
    ("cellSize", 16, 128, True),
    ("layout.roomDensity", 0.02, 0.8, False),
    ("layout.minRoomSize", 3, 24, True),
    ("layout.maxRoomSize", 4, 36, True),
    ("layout.connectivityStrictness", 0, 1, False),
    ("layout.secretRoomChance", 0, 1, False),
    ("doors.doorFrequency", 0, 1, False),
    ("doors.lockedDoorChance", 0, 1, False),
    ("doors.secretDoorChance", 0, 1, False),
    ("doors.specialDoorChance", 0, 1, False),
    ("content.trapDensity", 0, 1, False),
    ("content.encounterDensity", 0, 1, False),
    ("content.treasureDensity", 0, 1, False),
    ("content.dressingDensity", 0, 1, False),
]


def _lookup(doc: Dict[str, Any], path: str):
    cur: Any = doc
    for part in path.split("."):
        cur = cur[part]
    return cur


def parse_generator_config(doc: Optional[Dict[str, Any]]) -> GeneratorConfig:
    """Fill defaults and validate ranges; raises ConfigError on the first problem."""
    if doc is not None and not isinstance(doc, dict):
        raise ConfigError("__root__", "config must be an object")
    for section in ("layout", "doors", "content"):
        if doc and section in doc and not isinstance(doc[section], dict):
            raise ConfigError(section, "must be an object")
    config = GeneratorConfig.from_dict(doc)
    normalized = config.to_dict()
    for path, lo, hi, integral in _RANGES:
        value = _lookup(normalized, path)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(path, "must be a number")
        if integral and not (isinstance(value, int) or float(value).is_integer()):
            raise ConfigError(path, "must be an integer")
        if value < lo or value > hi:
            raise ConfigError(path, f"must be between {lo} and {hi}")
    if config.grid_type not in GRID_TYPES:
        raise ConfigError("gridType", f"must be one of {', '.join(GRID_TYPES)}")
    if config.layout.corridor_style not in CORRIDOR_STYLES:
        raise ConfigError("layout.corridorStyle", f"must be one of {', '.join(CORRIDOR_STYLES)}")
    theme = config.theme.strip() if isinstance(config.theme, str) else ""
    if not theme or len(theme) > 80:
        raise ConfigError("theme", "must be 1-80 characters")
    if config.layout.max_room_size <= config.layout.min_room_size:
        raise ConfigError("layout.maxRoomSize", "Max room size must be greater than min room size.")
    return GeneratorConfig.from_dict({
        **normalized,
        "theme": theme,
        "width": int(config.width),
        "height": int(config.height),
        "cellSize": int(config.cell_size),
        "layout": {
            **normalized["layout"],
            "minRoomSize": int(config.layout.min_room_size),
            "maxRoomSize": int(config.layout.max_room_size),
        },
    })


def _js_numbers(value):
    # Integral floats serialize as integers so the hash matches JSON.stringify output.
    if isinstance(value, dict):
        return {k: _js_numbers(v) for k, v in value.items()}
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def build_config_hash(seed: str, config: GeneratorConfig) -> str:
    payload = json.dumps(_js_numbers(config.to_dict()), separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(f"{seed}:{payload}".encode("utf-8")).hexdigest()[:16]


__all__ = [
    "GeneratorConfig",
    "LayoutConfig",
    "DoorConfig",
    "ContentConfig",
    "ConfigError",
    "parse_generator_config",
    "build_config_hash",
    "STRAIGHT",
    "WINDING",
    "MIXED",
    "CORRIDOR_STYLES",
]
