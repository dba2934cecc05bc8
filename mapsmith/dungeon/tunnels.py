from collections import deque
from contextlib import contextmanager
from typing import Deque, Dict, Iterable, List, Optional, Sequence, Tuple

from .config import MIXED, WINDING
from .models import Point, Room
from .rng import SeededRandom

DIRECTIONS: Tuple[Tuple[int, int], ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))
MIXED_SHUFFLE_CHANCE = 0.35


class BlockGrid:
    """Flat occupancy grid; a cell is blocked when it lies inside any room."""

    def __init__(self, width: int, height: int, rooms: Iterable[Room] = ()):
        self.width = width
        self.height = height
        self.cells = bytearray(width * height)
        for room in rooms:
            for x, y in room.cells():
                if self.in_bounds(x, y):
                    self.cells[y * width + x] = 1

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_blocked(self, x: int, y: int) -> bool:
        return self.cells[y * self.width + x] == 1

    @contextmanager
    def opened(self, points: Iterable[Point]):
        """Temporarily unblock ``points`` (routing endpoints of the current edge)."""
        saved = []
        for x, y in points:
            if self.in_bounds(x, y):
                idx = y * self.width + x
                saved.append((idx, self.cells[idx]))
                self.cells[idx] = 0
        try:
            yield self
        finally:
            for idx, value in reversed(saved):
                self.cells[idx] = value


def anchor_points(room: Room, toward: Point) -> Tuple[Point, Point]:
    """(anchor, outer): boundary cell of ``room`` facing ``toward`` and the cell just outside it."""
    cx, cy = room.center
    dx, dy = toward[0] - cx, toward[1] - cy
    if abs(dx) >= abs(dy):
        if dx >= 0:
            anchor = (room.x + room.width - 1, cy)
            return anchor, (anchor[0] + 1, cy)
        anchor = (room.x, cy)
        return anchor, (anchor[0] - 1, cy)
    if dy >= 0:
        anchor = (cx, room.y + room.height - 1)
        return anchor, (cx, anchor[1] + 1)
    anchor = (cx, room.y)
    return anchor, (cx, anchor[1] - 1)


def _direction_order(x: int, y: int, goal: Point, style: str, rng: SeededRandom) -> Sequence[Tuple[int, int]]:
    if style == WINDING or (style == MIXED and rng.random() < MIXED_SHUFFLE_CHANCE):
        return rng.shuffle(list(DIRECTIONS))
    gx, gy = goal
    return sorted(DIRECTIONS, key=lambda d: abs(x + d[0] - gx) + abs(y + d[1] - gy))


def bfs_path(grid: BlockGrid, start: Point, goal: Point, style: str, rng: SeededRandom, metrics: Optional[Dict] = None) -> Optional[List[Point]]:
    """Breadth-first search over unblocked cells.

    Neighbour visit order only breaks ties between equally short frontiers, so
    the greedy order biases toward the target without guaranteeing the
    geometrically straightest path. Returns None when ``goal`` is unreachable.
    """
    if not grid.in_bounds(*start) or not grid.in_bounds(*goal):
        return None
    if grid.is_blocked(*start) or grid.is_blocked(*goal):
        return None
    if start == goal:
        return [start]
    w, h = grid.width, grid.height
    cells = grid.cells
    parent: Dict[Point, Optional[Point]] = {start: None}
    q: Deque[Point] = deque([start])
    expansions = 0
    found = False
    while q and not found:
        x, y = q.popleft()
        expansions += 1
        for dx, dy in _direction_order(x, y, goal, style, rng):
            nx, ny = x + dx, y + dy
            if not (0 <= nx < w and 0 <= ny < h):
                continue
            nxt = (nx, ny)
            if nxt in parent or cells[ny * w + nx]:
                continue
            parent[nxt] = (x, y)
            if nxt == goal:
                found = True
                break
            q.append(nxt)
    if metrics is not None:
        metrics['bfs_expansions'] = metrics.get('bfs_expansions', 0) + expansions
    if not found:
        return None
    path: List[Point] = []
    cur: Optional[Point] = goal
    while cur is not None:
        path.append(cur)
        cur = parent[cur]
    path.reverse()
    return path


def _dedupe(points: Iterable[Point]) -> List[Point]:
    out: List[Point] = []
    for p in points:
        if not out or out[-1] != p:
            out.append(p)
    return out


def compress_path(points: Sequence[Point]) -> List[Point]:
    """Drop consecutive duplicates and intermediate collinear points."""
    pts = _dedupe(points)
    if len(pts) <= 2:
        return pts
    out = [pts[0]]
    for i in range(1, len(pts) - 1):
        px, py = out[-1]
        cx, cy = pts[i]
        nx, ny = pts[i + 1]
        if (px == cx == nx) or (py == cy == ny):
            continue
        out.append(pts[i])
    out.append(pts[-1])
    return _dedupe(out)


def route_corridor(
    a: Room,
    b: Room,
    grid: BlockGrid,
    style: str,
    rng: SeededRandom,
    metrics: Optional[Dict] = None,
) -> Tuple[List[Point], bool]:
    """Route a corridor polyline from room ``a`` to room ``b``.

    Returns (points, used_fallback). When BFS cannot connect the outer points
    the raw four points (anchor, outer, outer, anchor) are returned as-is; that
    fallback is not checked against other rooms.
    """
    a_anchor, a_outer = anchor_points(a, b.center)
    b_anchor, b_outer = anchor_points(b, a.center)
    with grid.opened((a_anchor, a_outer, b_outer, b_anchor)):
        path = bfs_path(grid, a_outer, b_outer, style, rng, metrics)
    if path is None:
        return [a_anchor, a_outer, b_outer, b_anchor], True
    return compress_path([a_anchor] + path + [b_anchor]), False
