"""
Noisy edge paths for polygon boundaries.

Each land-only Voronoi edge (v0 -> v1) gets a fixed number of intermediate
points displaced laterally along the direction between its two region
centers. The topological graph is never modified; the paths are a pure
output artifact that renderers may use or ignore.
"""

from dataclasses import dataclass, field
from typing import Dict, List

import structlog

from .alea_prng import AleaPRNG
from .generator import MapData
from .voronoi_graph import Point, Region
from ..utils.random import NOISY_EDGES_SEED_OFFSET, stage_prng

logger = structlog.get_logger()

NUM_POINTS = 4  # intermediate points between each vertex pair
BIOME_BOUNDARY_AMPLITUDE = 0.04
SAME_BIOME_AMPLITUDE = 0.02


@dataclass
class NoisyEdges:
    """Perturbed paths keyed by edge index, each running v0 -> v1 inclusive."""

    paths: Dict[int, List[Point]] = field(default_factory=dict)


def _lerp(a: Point, b: Point, t: float) -> Point:
    return (a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t)


def noisy_line(
    prng: AleaPRNG,
    v0: Point,
    v1: Point,
    d0: Point,
    d1: Point,
    amplitude: float,
) -> List[Point]:
    """
    Generate a noisy path from v0 to v1.

    Args:
        prng: Stage generator, one draw per intermediate point
        v0, v1: Edge endpoints
        d0, d1: Centers of the two regions the edge separates
        amplitude: Maximum displacement as a fraction of |d1 - d0|

    Returns:
        [v0, NUM_POINTS displaced points, v1]
    """
    perp_x = d1[0] - d0[0]
    perp_y = d1[1] - d0[1]
    perp_len = (perp_x * perp_x + perp_y * perp_y) ** 0.5

    points = [v0]
    for i in range(1, NUM_POINTS + 1):
        t = i / (NUM_POINTS + 1)
        base = _lerp(v0, v1, t)
        offset = prng.uniform(-amplitude, amplitude) * perp_len
        if perp_len > 0:
            points.append(
                (base[0] + perp_x / perp_len * offset, base[1] + perp_y / perp_len * offset)
            )
        else:
            points.append(base)
    points.append(v1)
    return points


def build_noisy_edges(map_data: MapData, seed: int) -> NoisyEdges:
    """
    Pre-compute noisy paths for every valid land-only edge.

    Args:
        map_data: Finished map
        seed: Map seed; the stage runs on its own offset stream

    Returns:
        NoisyEdges with one path per interior land edge
    """
    prng = stage_prng(seed, NOISY_EDGES_SEED_OFFSET)
    regions = map_data.regions
    corners = map_data.corners
    paths: Dict[int, List[Point]] = {}

    for edge in map_data.edges:
        if edge.d0 is None or edge.d1 is None or edge.v0 is None or edge.v1 is None:
            continue

        r0 = regions[edge.d0]
        r1 = regions[edge.d1]
        if r0.water or r0.ocean or r1.water or r1.ocean:
            continue

        amplitude = BIOME_BOUNDARY_AMPLITUDE if r0.biome != r1.biome else SAME_BIOME_AMPLITUDE
        paths[edge.index] = noisy_line(
            prng, corners[edge.v0].point, corners[edge.v1].point, r0.point, r1.point, amplitude
        )

    logger.info("Noisy edges built", paths=len(paths))
    return NoisyEdges(paths=paths)


def build_noisy_polygon(region: Region, map_data: MapData, noisy: NoisyEdges) -> List[Point]:
    """
    Outline of a region, walking its corners with noisy paths substituted.

    Shared edges with a stored path contribute every point but the last
    (the next edge starts there); paths are reversed when walked v1 -> v0.
    Edges without a path contribute their straight corner.
    """
    corners = map_data.corners
    ring = region.corners
    if len(ring) < 3:
        return [corners[c].point for c in ring]

    edge_lookup = {}
    for edge_idx in region.borders:
        edge = map_data.edges[edge_idx]
        if edge.v0 is not None and edge.v1 is not None:
            edge_lookup[(edge.v0, edge.v1)] = edge
            edge_lookup[(edge.v1, edge.v0)] = edge

    outline: List[Point] = []
    for i, c0 in enumerate(ring):
        c1 = ring[(i + 1) % len(ring)]
        edge = edge_lookup.get((c0, c1))

        if edge is not None and edge.index in noisy.paths:
            path = noisy.paths[edge.index]
            if c0 == edge.v0:
                outline.extend(path[:-1])
            else:
                outline.extend(reversed(path[1:]))
        else:
            outline.append(corners[c0].point)

    return outline
