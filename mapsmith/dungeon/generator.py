"""Structural generation phases: room placement, room graph, corridor routing."""
from __future__ import annotations
from typing import Dict, List, NamedTuple

from mapsmith.logging_utils import get_logger

from .config import GeneratorConfig
from .connectivity import build_room_graph
from .metrics import init_metrics
from .models import Corridor, Room
from .rng import SeededRandom
from .rooms import place_rooms
from .tunnels import BlockGrid, route_corridor

log = get_logger("mapsmith.dungeon.generator")


class LayoutOutputs(NamedTuple):
    rooms: List[Room]
    corridors: List[Corridor]
    metrics: Dict


class LayoutGenerator:
    def __init__(self, config: GeneratorConfig, rng: SeededRandom):
        self.config = config
        self.rng = rng

    def place_rooms(self, metrics: Dict) -> List[Room]:
        return place_rooms(self.config, self.rng, metrics)

    def route_corridors(self, rooms: List[Room], metrics: Dict) -> List[Corridor]:
        lay = self.config.layout
        ordered, edges = build_room_graph(rooms, lay.connectivity_strictness, self.rng, metrics)
        grid = BlockGrid(self.config.width, self.config.height, rooms)
        corridors: List[Corridor] = []
        fallbacks = 0
        for n, (i, j) in enumerate(edges, start=1):
            a, b = ordered[i], ordered[j]
            points, used_fallback = route_corridor(a, b, grid, lay.corridor_style, self.rng, metrics)
            if used_fallback:
                fallbacks += 1
                log.warn(event="corridor_fallback", from_room=a.id, to_room=b.id)
            corridors.append(Corridor(id=f"corridor-{n}", from_room_id=a.id, to_room_id=b.id, points=tuple(points)))
        metrics['corridors_routed'] = len(corridors) - fallbacks
        metrics['corridor_fallbacks'] = fallbacks
        return corridors

    def run(self) -> LayoutOutputs:
        metrics = init_metrics()
        rooms = self.place_rooms(metrics)
        corridors = self.route_corridors(rooms, metrics)
        return LayoutOutputs(rooms, corridors, metrics)
