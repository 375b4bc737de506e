"""
Road network between settlements.

A minimum spanning tree guarantees every settlement is reachable; a few
short extra edges add loops. Each connection is then routed along the
region neighbor graph with A*, avoiding water and preferring low ground.
"""

import heapq
import math
from itertools import count
from typing import Dict, List, Sequence, Tuple

import structlog
from pydantic import BaseModel, Field

from .alea_prng import AleaPRNG
from .generator import MapData
from .settlements import Settlement
from .voronoi_graph import Point
from ..utils.random import ROADS_SEED_OFFSET, stage_prng

logger = structlog.get_logger()

EXTRA_EDGE_RATIO = 0.3  # extra edges per tree edge
EXTRA_EDGE_PROBABILITY = 0.6
ELEVATION_PENALTY = 2.0


class Road(BaseModel):
    """A resolved road between two settlements."""

    from_id: int = Field(description="Settlement id at the start of the path")
    to_id: int = Field(description="Settlement id at the end of the path")
    path: List[Point] = Field(description="Region centers the road passes through")
    length: float = Field(description="Total polyline length")


class RoadNetwork(BaseModel):
    """Roads plus settlement adjacency keyed by settlement id."""

    roads: List[Road] = Field(default_factory=list)
    adjacency: Dict[int, List[int]] = Field(default_factory=dict)


def euclidean(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def path_length(path: Sequence[Point]) -> float:
    return sum(euclidean(path[i - 1], path[i]) for i in range(1, len(path)))


def build_mst(points: Sequence[Point]) -> List[Tuple[int, int]]:
    """
    Prim's minimum spanning tree over a complete graph of points.

    O(n^2), fine for settlement counts.

    Returns:
        Tree edges as (vertex, parent) index pairs
    """
    n = len(points)
    edges: List[Tuple[int, int]] = []
    in_tree = [False] * n
    min_cost = [math.inf] * n
    min_edge = [-1] * n
    min_cost[0] = 0.0

    for _ in range(n):
        u = -1
        for v in range(n):
            if not in_tree[v] and (u == -1 or min_cost[v] < min_cost[u]):
                u = v

        in_tree[u] = True
        if min_edge[u] != -1:
            edges.append((u, min_edge[u]))

        for v in range(n):
            if not in_tree[v]:
                d = euclidean(points[u], points[v])
                if d < min_cost[v]:
                    min_cost[v] = d
                    min_edge[v] = u

    return edges


def add_extra_edges(
    points: Sequence[Point], tree_edges: List[Tuple[int, int]], prng: AleaPRNG
) -> List[Tuple[int, int]]:
    """
    Short non-tree edges for loops and shortcuts.

    Candidates are visited shortest first; each is accepted with a fixed
    probability until ``max(1, floor(0.3 * tree edges))`` are taken.
    """
    n = len(points)
    existing = {(min(a, b), max(a, b)) for a, b in tree_edges}

    candidates = []
    for i in range(n):
        for j in range(i + 1, n):
            if (i, j) not in existing:
                candidates.append((euclidean(points[i], points[j]), i, j))
    candidates.sort(key=lambda c: c[0])

    max_extras = max(1, math.floor(len(tree_edges) * EXTRA_EDGE_RATIO))
    extras: List[Tuple[int, int]] = []
    for _, i, j in candidates:
        if len(extras) >= max_extras:
            break
        if prng.random() < EXTRA_EDGE_PROBABILITY:
            extras.append((i, j))

    return extras


def find_path(start: int, goal: int, map_data: MapData) -> List[Point]:
    """
    A* over the region neighbor graph.

    Step cost is the center distance times (1 + 2 * destination elevation),
    never below the distance itself, so the straight-line heuristic is
    admissible. Ocean is impassable; lakes are impassable unless they are
    the start or goal region.

    Returns:
        Region centers from start to goal, a single point when start == goal,
        or the straight line [start, goal] when no route exists
    """
    regions = map_data.regions
    start_point = regions[start].point
    goal_point = regions[goal].point

    if start == goal:
        return [start_point]

    tie = count()
    open_heap = [(euclidean(start_point, goal_point), next(tie), start)]
    came_from: Dict[int, int] = {}
    g_score: Dict[int, float] = {start: 0.0}
    closed = set()

    while open_heap:
        _, _, current = heapq.heappop(open_heap)
        if current in closed:
            continue

        if current == goal:
            indices = [current]
            while current in came_from:
                current = came_from[current]
                indices.append(current)
            indices.reverse()
            return [regions[i].point for i in indices]

        closed.add(current)
        cc = regions[current]

        for neighbor_idx in cc.neighbors:
            neighbor = regions[neighbor_idx]
            # Skip ocean / inland water (coast is allowed, shoreline towns live there)
            if neighbor.ocean:
                continue
            if neighbor.water and neighbor_idx != goal and neighbor_idx != start:
                continue

            move_cost = euclidean(cc.point, neighbor.point) * (
                1 + neighbor.elevation * ELEVATION_PENALTY
            )
            tentative = g_score[current] + move_cost

            if tentative < g_score.get(neighbor_idx, math.inf):
                came_from[neighbor_idx] = current
                g_score[neighbor_idx] = tentative
                heapq.heappush(
                    open_heap,
                    (tentative + euclidean(neighbor.point, goal_point), next(tie), neighbor_idx),
                )

    # Fallback: straight line (regions cut off by water)
    logger.warning("No road path found, using straight line", start=start, goal=goal)
    return [start_point, goal_point]


def build_roads(settlements: Sequence[Settlement], map_data: MapData, seed: int) -> RoadNetwork:
    """
    Connect settlements with a terrain-following road network.

    Args:
        settlements: Placed settlements
        map_data: Finished map
        seed: Map seed; the stage runs on its own offset stream

    Returns:
        RoadNetwork with one road per accepted pair and symmetric adjacency
    """
    if len(settlements) < 2:
        return RoadNetwork(
            roads=[], adjacency={s.id: [] for s in settlements}
        )

    logger.info("Building roads", settlements=len(settlements))

    prng = stage_prng(seed, ROADS_SEED_OFFSET)
    regions = map_data.regions
    points = [regions[s.region].point for s in settlements]

    tree_edges = build_mst(points)
    extra_edges = add_extra_edges(points, tree_edges, prng)

    roads: List[Road] = []
    adjacency: Dict[int, List[int]] = {s.id: [] for s in settlements}

    for i, j in tree_edges + extra_edges:
        a = settlements[i]
        b = settlements[j]
        path = find_path(a.region, b.region, map_data)
        roads.append(Road(from_id=a.id, to_id=b.id, path=path, length=path_length(path)))
        adjacency[a.id].append(b.id)
        adjacency[b.id].append(a.id)

    logger.info("Roads built", tree_edges=len(tree_edges), extra_edges=len(extra_edges))
    return RoadNetwork(roads=roads, adjacency=adjacency)
