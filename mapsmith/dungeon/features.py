"""Content passes: traps, encounters, treasure and dressing.

Each pass first selects rooms with one Bernoulli draw per room, then rolls
attributes for the selected rooms in order. Tiered attributes read a single
draw against an ordered threshold ladder.
"""
from __future__ import annotations
from typing import List, Sequence, Tuple

from .models import Dressing, Encounter, Room, Trap, Treasure
from .rng import SeededRandom

Ladder = Sequence[Tuple[float, str]]

TRAP_SEVERITY_LADDER: Ladder = ((0.2, "HIGH"), (0.6, "MEDIUM"))
TRAP_BASE_DC = {"HIGH": 16, "MEDIUM": 13, "LOW": 10}
DIFFICULTY_LADDER: Ladder = ((0.2, "DEADLY"), (0.45, "HARD"), (0.75, "MEDIUM"))
RARITY_LADDER: Ladder = ((0.1, "VERY_RARE"), (0.25, "RARE"), (0.55, "UNCOMMON"))
CATEGORY_LADDER: Ladder = ((0.2, "MAGIC"), (0.5, "ITEM"), (0.75, "ART"))

TRAP_TRIGGERS = {
    "HIGH": [
        "glyph carved above the room {n} doorway",
        "pressure plate hidden under the room {n} altar",
    ],
    "MEDIUM": [
        "tripwire strung across the room {n} threshold",
        "loose flagstone in the middle of room {n}",
    ],
    "LOW": [
        "pressure plate near room {n} entry",
        "creaking board beside the room {n} wall",
    ],
}

TRAP_EFFECTS = {
    "HIGH": [
        "Heavy damage and restrained condition",
        "Ceiling block drop; save or be crushed",
        "Poisoned darts; damage and poisoned condition",
    ],
    "MEDIUM": [
        "Damage and slowed movement",
        "Spiked pit (10 ft); falling damage",
        "Burst of cold; damage and speed halved",
    ],
    "LOW": [
        "Alarm bell alerts a nearby room",
        "Minor damage and knocked prone",
        "Smoke fills the room; lightly obscured",
    ],
}

DRESSING_DETAILS = [
    "cold drafts carry the smell of {theme}",
    "scratched tally marks cover one wall",
    "a collapsed shelf spills brittle scrolls",
    "dripping water pools in a cracked basin",
    "faded murals hint at the {theme}'s builders",
    "bones are stacked neatly in one corner",
    "a rusted brazier still holds warm ash",
]


def ladder(r: float, rungs: Ladder, default: str) -> str:
    for threshold, value in rungs:
        if r < threshold:
            return value
    return default


def _select(rooms: Sequence[Room], density: float, rng: SeededRandom) -> List[Room]:
    return [room for room in rooms if rng.random() < density]


def generate_traps(rooms: Sequence[Room], density: float, rng: SeededRandom) -> List[Trap]:
    traps: List[Trap] = []
    for index, room in enumerate(_select(rooms, density, rng), start=1):
        severity = ladder(rng.random(), TRAP_SEVERITY_LADDER, "LOW")
        base = TRAP_BASE_DC[severity]
        detect_dc = base + rng.random_int(0, 3)
        disarm_dc = base + rng.random_int(1, 4)
        trigger = rng.choice(TRAP_TRIGGERS[severity]).format(n=room.room_number)
        effect = rng.choice(TRAP_EFFECTS[severity])
        traps.append(Trap(
            id=f"trap-{index}",
            room_id=room.id,
            name=f"{severity.title()} Trap",
            severity=severity,
            trigger=trigger[0].upper() + trigger[1:],
            effect=effect,
            detect_dc=detect_dc,
            disarm_dc=disarm_dc,
        ))
    return traps


def generate_encounters(rooms: Sequence[Room], density: float, theme: str, rng: SeededRandom) -> List[Encounter]:
    encounters: List[Encounter] = []
    for index, room in enumerate(_select(rooms, density, rng), start=1):
        difficulty = ladder(rng.random(), DIFFICULTY_LADDER, "EASY")
        encounters.append(Encounter(
            id=f"encounter-{index}",
            room_id=room.id,
            title=f"Encounter {room.room_number}",
            difficulty=difficulty,
            summary=f"{difficulty.title()} skirmish with {theme}-aligned foes.",
        ))
    return encounters


def generate_treasure(rooms: Sequence[Room], density: float, rng: SeededRandom) -> List[Treasure]:
    treasures: List[Treasure] = []
    for index, room in enumerate(_select(rooms, density, rng), start=1):
        rarity = ladder(rng.random(), RARITY_LADDER, "COMMON")
        category = ladder(rng.random(), CATEGORY_LADDER, "COIN")
        treasures.append(Treasure(
            id=f"treasure-{index}",
            room_id=room.id,
            category=category,
            rarity=rarity,
            summary=f"{rarity.replace('_', ' ').title()} {category.lower()} cache.",
        ))
    return treasures


def generate_dressing(rooms: Sequence[Room], density: float, theme: str, rng: SeededRandom) -> List[Dressing]:
    dressing: List[Dressing] = []
    for index, room in enumerate(_select(rooms, density, rng), start=1):
        detail = rng.choice(DRESSING_DETAILS).format(theme=theme)
        dressing.append(Dressing(
            id=f"dressing-{index}",
            room_id=room.id,
            text=f"Room {room.room_number}: {detail}.",
        ))
    return dressing
