"""Door pass: probabilistic doors at both ends of every corridor."""
from __future__ import annotations
from typing import List, Sequence

from .config import DoorConfig
from .models import Corridor, Door, Point
from .rng import SeededRandom


def _roll_door(rng: SeededRandom, cfg: DoorConfig, n: int, at: Point, corridor_id: str) -> Door:
    # Draw order (locked, secret, special) is part of the reproducible stream.
    is_locked = rng.random() < cfg.locked_door_chance
    is_secret = rng.random() < cfg.secret_door_chance
    is_special = rng.random() < cfg.special_door_chance
    return Door(
        id=f"door-{n}",
        x=at[0],
        y=at[1],
        corridor_id=corridor_id,
        is_locked=is_locked,
        is_secret=is_secret,
        is_special=is_special,
    )


def generate_doors(corridors: Sequence[Corridor], cfg: DoorConfig, rng: SeededRandom) -> List[Door]:
    doors: List[Door] = []
    for corridor in corridors:
        if len(corridor.points) < 2:
            continue
        for end in (corridor.points[0], corridor.points[-1]):
            if rng.random() <= cfg.door_frequency:
                doors.append(_roll_door(rng, cfg, len(doors) + 1, end, corridor.id))
    return doors


def door_identity(door: Door):
    """Doors are matched across regenerations by corridor and position, not id."""
    return (door.corridor_id, door.x, door.y)
