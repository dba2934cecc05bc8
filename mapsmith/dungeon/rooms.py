import math
from dataclasses import dataclass
from typing import Dict, List

from mapsmith.logging_utils import get_logger

from .config import GeneratorConfig
from .models import Room
from .rng import SeededRandom

log = get_logger("mapsmith.dungeon.rooms")

MIN_TARGET_ROOMS = 8
MAX_TARGET_ROOMS = 220
ATTEMPTS_PER_ROOM = 40
FALLBACK_ROOM_SIZE = 6


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int


def target_room_count(config: GeneratorConfig) -> int:
    lay = config.layout
    avg_room_area = max(9, ((lay.min_room_size + lay.max_room_size) / 2) ** 2)
    raw = math.floor(config.width * config.height * lay.room_density / (avg_room_area * 1.8))
    return max(MIN_TARGET_ROOMS, min(MAX_TARGET_ROOMS, raw))


def placement_padding(config: GeneratorConfig) -> int:
    # Dense layouts may pack rooms wall-to-wall.
    return 0 if config.layout.room_density >= 0.3 else 1


def overlaps(a, b, padding: int = 1) -> bool:
    return (
        a.x < b.x + b.width + padding
        and a.x + a.width + padding > b.x
        and a.y < b.y + b.height + padding
        and a.y + a.height + padding > b.y
    )


def _odd_size(rng: SeededRandom, lo: int, hi: int) -> int:
    size = rng.random_int(lo, hi)
    if size % 2 == 0:
        size = size + 1 if size + 1 <= hi else size - 1
    return size


def place_rooms(config: GeneratorConfig, rng: SeededRandom, metrics: Dict) -> List[Room]:
    """Place non-overlapping rooms by rejection sampling.

    Candidate sizes are odd so room centers land on whole cells. Returns rooms
    in placement order (room numbers 1..N). Falls back to two fixed corner rooms
    if fewer than two could be placed.
    """
    lay = config.layout
    target = target_room_count(config)
    max_attempts = target * ATTEMPTS_PER_ROOM
    padding = placement_padding(config)
    rooms: List[Room] = []
    attempts = 0
    while len(rooms) < target and attempts < max_attempts:
        attempts += 1
        w = _odd_size(rng, lay.min_room_size, lay.max_room_size)
        h = _odd_size(rng, lay.min_room_size, lay.max_room_size)
        if w >= config.width - 2 or h >= config.height - 2:
            continue
        x = rng.random_int(1, max(1, config.width - w - 1))
        y = rng.random_int(1, max(1, config.height - h - 1))
        is_secret = rng.random() < lay.secret_room_chance
        candidate = Rect(x, y, w, h)
        if any(overlaps(candidate, r, padding) for r in rooms):
            continue
        n = len(rooms) + 1
        rooms.append(Room(id=f"room-{n}", room_number=n, x=x, y=y, width=w, height=h, is_secret=is_secret))

    metrics['rooms_target'] = target
    metrics['placement_attempts'] = attempts
    if len(rooms) < 2:
        log.warn(event="room_placement_fallback", placed=len(rooms), target=target, attempts=attempts)
        rooms = fallback_rooms(config)
        metrics['fallback_rooms_used'] = len(rooms)
    metrics['rooms_placed'] = len(rooms)
    return rooms


def fallback_rooms(config: GeneratorConfig) -> List[Room]:
    s = FALLBACK_ROOM_SIZE
    return [
        Room(id="room-fallback-a", room_number=1, x=2, y=2, width=s, height=s, is_secret=False),
        Room(
            id="room-fallback-b",
            room_number=2,
            x=max(10, config.width - 10),
            y=max(10, config.height - 10),
            width=s,
            height=s,
            is_secret=False,
        ),
    ]
