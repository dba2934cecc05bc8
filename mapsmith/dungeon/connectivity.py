"""Room connectivity graph.

Rooms are first put in a stable (x, y) order; candidate edges are every pair
of rooms weighted by the Manhattan distance between centers. A spanning set is
grown from the first room by always taking the cheapest candidate that reaches
a new room, then a strictness-driven number of extra (loop) edges is added.
"""
from __future__ import annotations
import heapq
import math
from typing import Dict, List, Sequence, Tuple

from .models import Room
from .rng import SeededRandom

Edge = Tuple[int, int]
WeightedEdge = Tuple[int, int, int]  # (distance, i, j) with i < j


def sort_rooms_for_graph(rooms: Sequence[Room]) -> List[Room]:
    return sorted(rooms, key=lambda r: (r.x, r.y))


def candidate_edges(rooms: Sequence[Room]) -> List[WeightedEdge]:
    centers = [r.center for r in rooms]
    edges: List[WeightedEdge] = []
    for i in range(len(centers)):
        x1, y1 = centers[i]
        for j in range(i + 1, len(centers)):
            x2, y2 = centers[j]
            edges.append((abs(x1 - x2) + abs(y1 - y2), i, j))
    edges.sort()
    return edges


def spanning_edges(count: int, edges: Sequence[WeightedEdge]) -> List[Edge]:
    """Grow a connected edge set from node 0.

    Each step takes the first edge in ``edges`` order with exactly one endpoint
    already connected. A heap over (distance, i, j) yields the same pick as
    rescanning the sorted list, without the quadratic rescan.
    """
    if count < 2:
        return []
    adjacency: Dict[int, List[WeightedEdge]] = {n: [] for n in range(count)}
    for e in edges:
        adjacency[e[1]].append(e)
        adjacency[e[2]].append(e)
    connected = {0}
    heap = list(adjacency[0])
    heapq.heapify(heap)
    chosen: List[Edge] = []
    while heap and len(connected) < count:
        _d, i, j = heapq.heappop(heap)
        if i in connected and j in connected:
            continue
        new = j if i in connected else i
        connected.add(new)
        chosen.append((i, j))
        for e in adjacency[new]:
            other = e[2] if e[1] == new else e[1]
            if other not in connected:
                heapq.heappush(heap, e)
    return chosen


def extra_edges(
    count: int,
    edges: Sequence[WeightedEdge],
    selected: Sequence[Edge],
    strictness: float,
    rng: SeededRandom,
) -> List[Edge]:
    target = math.floor((count - 1) * strictness * 0.65)
    if target <= 0:
        return []
    accept_rate = 0.25 + 0.6 * strictness
    taken = set(selected)
    extras: List[Edge] = []
    for _d, i, j in edges:
        if len(extras) >= target:
            break
        if (i, j) in taken:
            continue
        if rng.random() < accept_rate:
            extras.append((i, j))
            taken.add((i, j))
    return extras


def build_room_graph(rooms: Sequence[Room], strictness: float, rng: SeededRandom, metrics: Dict) -> Tuple[List[Room], List[Edge]]:
    """Return (rooms in graph order, edges as index pairs into that order)."""
    ordered = sort_rooms_for_graph(rooms)
    edges = candidate_edges(ordered)
    span = spanning_edges(len(ordered), edges)
    extras = extra_edges(len(ordered), edges, span, strictness, rng)
    metrics['spanning_edges'] = len(span)
    metrics['extra_edges'] = len(extras)
    return ordered, span + extras
