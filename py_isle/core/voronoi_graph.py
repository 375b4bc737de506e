"""Voronoi/Delaunay dual graph construction for the island generator."""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np
import structlog
from scipy.spatial import Delaunay

from .alea_prng import AleaPRNG
from .biomes import BiomeType

logger = structlog.get_logger()

Point = Tuple[float, float]

# Points are kept this far from the map edge while scattering and relaxing
POINT_MARGIN = 10.0
# Corner positions are keyed on a grid of 1/CORNER_KEY_SCALE map units
CORNER_KEY_SCALE = 10.0
# Corners within this distance of the map edge are border corners
BORDER_TOLERANCE = 1.0
LLOYD_ITERATIONS = 2


@dataclass
class Region:
    """One polygonal map cell (Voronoi cell around a seed point)."""

    index: int
    point: Point
    ocean: bool = False
    water: bool = False
    coast: bool = False
    border: bool = False
    elevation: float = 0.0
    moisture: float = 0.0
    biome: BiomeType = BiomeType.OCEAN

    neighbors: List[int] = field(default_factory=list)  # region indices
    borders: List[int] = field(default_factory=list)    # edge indices
    corners: List[int] = field(default_factory=list)    # corner indices, angular order


@dataclass
class Corner:
    """A polygon vertex: the circumcenter of one or more Delaunay triangles."""

    index: int
    point: Point
    ocean: bool = False
    water: bool = False
    coast: bool = False
    border: bool = False
    elevation: float = 0.0
    moisture: float = 0.0
    coast_distance: float = math.inf  # raw BFS elevation before rank-normalization

    touches: List[int] = field(default_factory=list)    # region indices
    protrudes: List[int] = field(default_factory=list)  # edge indices
    adjacent: List[int] = field(default_factory=list)   # corner indices

    river: int = 0
    downslope: Optional[int] = None
    watershed: Optional[int] = None
    watershed_size: int = 0


@dataclass
class Edge:
    """Boundary segment between two regions, running from corner v0 to v1."""

    index: int
    d0: Optional[int]
    d1: Optional[int]
    v0: Optional[int]
    v1: Optional[int]
    midpoint: Optional[Point] = None
    river: int = 0


@dataclass
class MapGraph:
    """Arena owning every Region, Corner and Edge of one generation run.

    All cross references are indices into these lists.
    """

    width: float
    height: float
    regions: List[Region]
    corners: List[Corner]
    edges: List[Edge]

    def region_points(self) -> np.ndarray:
        """Region centers as an (n, 2) array."""
        return np.array([r.point for r in self.regions], dtype=np.float64)

    def corner_points(self) -> np.ndarray:
        """Corner positions as an (n, 2) array."""
        return np.array([c.point for c in self.corners], dtype=np.float64)

    def edge_between(self, a: int, b: int) -> Optional[Edge]:
        """Find the edge joining corners ``a`` and ``b``, if any."""
        for edge_idx in self.corners[a].protrudes:
            edge = self.edges[edge_idx]
            if (edge.v0 == a and edge.v1 == b) or (edge.v0 == b and edge.v1 == a):
                return edge
        return None


def compute_circumcenters(points: np.ndarray, simplices: np.ndarray) -> np.ndarray:
    """
    Circumcenters of every triangle.

    Degenerate (collinear) triangles fall back to their centroid.

    Args:
        points: (n, 2) point coordinates
        simplices: (m, 3) triangle vertex indices

    Returns:
        (m, 2) circumcenter coordinates
    """
    a = points[simplices[:, 0]]
    b = points[simplices[:, 1]]
    c = points[simplices[:, 2]]
    ax, ay = a[:, 0], a[:, 1]
    bx, by = b[:, 0], b[:, 1]
    cx, cy = c[:, 0], c[:, 1]

    d = 2 * (ax * (by - cy) + bx * (cy - ay) + cx * (ay - by))
    degenerate = np.abs(d) < 1e-10
    safe_d = np.where(degenerate, 1.0, d)

    a2 = ax * ax + ay * ay
    b2 = bx * bx + by * by
    c2 = cx * cx + cy * cy
    ux = (a2 * (by - cy) + b2 * (cy - ay) + c2 * (ay - by)) / safe_d
    uy = (a2 * (cx - bx) + b2 * (ax - cx) + c2 * (bx - ax)) / safe_d

    centroid = (a + b + c) / 3.0
    ux = np.where(degenerate, centroid[:, 0], ux)
    uy = np.where(degenerate, centroid[:, 1], uy)
    return np.column_stack([ux, uy])


def point_margin(width: float, height: float) -> float:
    """Edge margin for seed points, shrunk on maps too small for the default."""
    return min(POINT_MARGIN, width / 4, height / 4)


def generate_points(num_points: int, width: float, height: float, prng: AleaPRNG) -> np.ndarray:
    """
    Scatter points uniformly inside the map margin.

    Draws x then y for each point, in order, from ``prng``.
    """
    margin = point_margin(width, height)
    coords = []
    for _ in range(num_points):
        x = prng.uniform(margin, width - margin)
        y = prng.uniform(margin, height - margin)
        coords.append((x, y))
    return np.array(coords, dtype=np.float64)


def relax_points(points: np.ndarray, width: float, height: float,
                 n_iterations: int = LLOYD_ITERATIONS) -> np.ndarray:
    """Apply Lloyd's relaxation to improve point distribution.

    Each point moves to the mean of the circumcenters of its Delaunay
    triangles, clamped to the point margin. Only points whose Voronoi cell
    is closed inside the map move: hull points and points with any
    circumcenter outside the map stay where they are.

    Args:
        points: Points to relax
        width: Map width
        height: Map height
        n_iterations: Number of relaxation iterations

    Returns:
        Relaxed point coordinates
    """
    logger.info("Starting Lloyd's relaxation", iterations=n_iterations)

    points = points.copy()
    n_points = len(points)
    margin = point_margin(width, height)

    for iteration in range(n_iterations):
        tri = Delaunay(points)
        centers = compute_circumcenters(points, tri.simplices)

        inside = (
            (centers[:, 0] >= 0) & (centers[:, 0] <= width)
            & (centers[:, 1] >= 0) & (centers[:, 1] <= height)
        )

        sums = np.zeros((n_points, 2), dtype=np.float64)
        counts = np.zeros(n_points, dtype=np.int64)
        open_cell = np.zeros(n_points, dtype=bool)
        open_cell[np.unique(tri.convex_hull)] = True
        for k in range(3):
            np.add.at(sums, tri.simplices[:, k], centers)
            np.add.at(counts, tri.simplices[:, k], 1)
            # A single out-of-bounds circumcenter leaves the cell unclosed
            open_cell[tri.simplices[~inside, k]] = True

        moved = (counts > 0) & ~open_cell
        if not moved.any():
            break
        centroids = sums[moved] / counts[moved][:, None]
        points[moved, 0] = np.clip(centroids[:, 0], margin, width - margin)
        points[moved, 1] = np.clip(centroids[:, 1], margin, height - margin)

        logger.info(f"Relaxation iteration {iteration + 1} complete")

    return points


def build_graph(num_points: int, width: float, height: float, prng: AleaPRNG) -> MapGraph:
    """
    Generate the complete Region/Corner/Edge graph.

    Args:
        num_points: Number of regions, at least 3
        width: Map width, positive
        height: Map height, positive
        prng: Map generator; consumes two draws per point

    Returns:
        Fully connected MapGraph with every terrain field at its default

    Raises:
        ValueError: On fewer than 3 points or non-positive dimensions
    """
    if num_points < 3:
        raise ValueError(f"num_points must be at least 3, got {num_points}")
    if width <= 0 or height <= 0:
        raise ValueError(f"map dimensions must be positive, got {width}x{height}")

    logger.info("Building Voronoi graph", width=width, height=height, num_points=num_points)

    points = generate_points(num_points, width, height, prng)
    points = relax_points(points, width, height)

    tri = Delaunay(points)
    simplices = tri.simplices
    circumcenters = compute_circumcenters(points, simplices)

    logger.info("Delaunay triangulation calculated", triangles=len(simplices))

    regions = [
        Region(index=i, point=(float(x), float(y)))
        for i, (x, y) in enumerate(points)
    ]
    corners: List[Corner] = []
    corner_lookup: Dict[Tuple[int, int], int] = {}

    def get_corner(x: float, y: float) -> int:
        x = min(max(x, 0.0), width)
        y = min(max(y, 0.0), height)
        key = (
            int(math.floor(x * CORNER_KEY_SCALE + 0.5)),
            int(math.floor(y * CORNER_KEY_SCALE + 0.5)),
        )
        idx = corner_lookup.get(key)
        if idx is None:
            idx = len(corners)
            corners.append(
                Corner(
                    index=idx,
                    point=(x, y),
                    border=(
                        x <= BORDER_TOLERANCE
                        or x >= width - BORDER_TOLERANCE
                        or y <= BORDER_TOLERANCE
                        or y >= height - BORDER_TOLERANCE
                    ),
                )
            )
            corner_lookup[key] = idx
        return idx

    # One corner per triangle (after dedup), linked to the triangle's regions
    triangle_corners = np.empty(len(simplices), dtype=np.int64)
    for t, (p0, p1, p2) in enumerate(simplices):
        cx, cy = circumcenters[t]
        c = get_corner(float(cx), float(cy))
        triangle_corners[t] = c
        corner = corners[c]
        for p in (int(p0), int(p1), int(p2)):
            if p not in corner.touches:
                corner.touches.append(p)
            if c not in regions[p].corners:
                regions[p].corners.append(c)

    # One edge per triangle side, recorded from the lower-numbered triangle
    edges: List[Edge] = []
    for t, simplex in enumerate(simplices):
        for k in range(3):
            opposite = int(tri.neighbors[t][k])
            if opposite != -1 and opposite < t:
                continue

            p0 = int(simplex[(k + 1) % 3])
            p1 = int(simplex[(k + 2) % 3])
            c0 = int(triangle_corners[t])
            c1 = int(triangle_corners[opposite]) if opposite != -1 else None

            midpoint = None
            if c1 is not None:
                a = corners[c0].point
                b = corners[c1].point
                midpoint = ((a[0] + b[0]) / 2, (a[1] + b[1]) / 2)

            edge = Edge(index=len(edges), d0=p0, d1=p1, v0=c0, v1=c1, midpoint=midpoint)
            edges.append(edge)

            if p1 not in regions[p0].neighbors:
                regions[p0].neighbors.append(p1)
            if p0 not in regions[p1].neighbors:
                regions[p1].neighbors.append(p0)
            regions[p0].borders.append(edge.index)
            regions[p1].borders.append(edge.index)

            corners[c0].protrudes.append(edge.index)
            if c1 is not None and c1 != c0:
                corners[c1].protrudes.append(edge.index)
                if c1 not in corners[c0].adjacent:
                    corners[c0].adjacent.append(c1)
                if c0 not in corners[c1].adjacent:
                    corners[c1].adjacent.append(c0)

    for region in regions:
        sort_corners(region, corners)

    logger.info(
        "Voronoi graph built",
        regions=len(regions), corners=len(corners), edges=len(edges),
    )

    return MapGraph(width=width, height=height, regions=regions, corners=corners, edges=edges)


def sort_corners(region: Region, corners: List[Corner]) -> None:
    """Sort a region's corners by angle around its center."""
    cx, cy = region.point
    region.corners.sort(
        key=lambda c: math.atan2(corners[c].point[1] - cy, corners[c].point[0] - cx)
    )
