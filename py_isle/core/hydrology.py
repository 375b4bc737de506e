"""
Hydrology pass: downslopes, watersheds, rivers and moisture.

This module implements:
- Downslope selection (each corner drains to its lowest strictly lower neighbor)
- Watershed labelling along the downslope chains
- River tracing from shuffled highland sources with merge-and-stop joins
- Moisture as a multi-source decaying flood fill, rank-normalized
"""

from collections import deque
from dataclasses import dataclass
from typing import Dict, List, Optional

import structlog

from .alea_prng import AleaPRNG
from .voronoi_graph import Corner, MapGraph

logger = structlog.get_logger()


@dataclass
class HydrologyOptions:
    """River and moisture parameters."""

    river_source_min_elevation: float = 0.3  # Sources must lie strictly above this
    moisture_decay: float = 0.9  # Multiplier per hop of the moisture flood fill
    water_moisture: float = 1.0  # Seed value at water corners
    river_moisture_factor: float = 0.2  # Seed value per unit of river flow
    river_moisture_cap: float = 3.0


class Hydrology:
    """Handles downslopes, river generation and moisture."""

    def __init__(
        self,
        graph: MapGraph,
        river_count: int,
        prng: AleaPRNG,
        options: Optional[HydrologyOptions] = None,
    ):
        """
        Initialize hydrology system.

        Args:
            graph: MapGraph with water and elevation assigned
            river_count: Number of river sources to trace
            prng: Map generator, consumed by the source shuffle
            options: River and moisture parameters
        """
        self.graph = graph
        self.river_count = river_count
        self.prng = prng
        self.options = options or HydrologyOptions()

    def calculate_downslopes(self) -> None:
        """
        Point each corner at its lowest adjacent corner.

        Only a strictly lower neighbor qualifies; ties with the corner's own
        elevation leave it as a local minimum (downslope None).
        """
        corners = self.graph.corners
        for corner in corners:
            lowest = corner
            for adj_idx in corner.adjacent:
                adj = corners[adj_idx]
                if adj.elevation < lowest.elevation:
                    lowest = adj
            corner.downslope = None if lowest is corner else lowest.index

    def calculate_watersheds(self) -> Dict[int, int]:
        """
        Label every corner with the terminal corner of its downslope chain.

        A chain ends at the first ocean or coast corner, or at a local
        minimum. Elevation strictly decreases along a chain, so it always ends.

        Returns:
            Corner count per watershed terminal
        """
        corners = self.graph.corners
        for corner in corners:
            corner.watershed = None
            corner.watershed_size = 0

        for corner in corners:
            if corner.watershed is not None:
                continue
            chain: List[Corner] = []
            current = corner
            while current.watershed is None:
                chain.append(current)
                if current.ocean or current.coast or current.downslope is None:
                    current.watershed = current.index
                    break
                current = corners[current.downslope]
            terminal = current.watershed
            for c in chain:
                c.watershed = terminal

        sizes: Dict[int, int] = {}
        for corner in corners:
            sizes[corner.watershed] = sizes.get(corner.watershed, 0) + 1
        for terminal, size in sizes.items():
            corners[terminal].watershed_size = size

        logger.info("Watersheds calculated", watersheds=len(sizes))
        return sizes

    def create_rivers(self) -> int:
        """
        Trace rivers down the downslope chains.

        Candidate sources are non-ocean, non-coast corners above the source
        elevation, shuffled with the map generator. Each source walks downhill
        incrementing corner and edge flow; reaching a corner that already
        carries a river increments it once and stops.

        Returns:
            Number of sources traced
        """
        logger.info("Creating rivers", river_count=self.river_count)

        corners = self.graph.corners
        candidates = [
            c for c in corners
            if not c.ocean and not c.coast
            and c.elevation > self.options.river_source_min_elevation
        ]
        self.prng.shuffle(candidates)

        sources = 0
        for source in candidates:
            if sources >= self.river_count:
                break

            current: Optional[Corner] = source
            while current is not None and not current.ocean:
                if current.river > 0:
                    # Join existing river
                    current.river += 1
                    break

                current.river += 1

                if current.downslope is not None:
                    for edge_idx in current.protrudes:
                        edge = self.graph.edges[edge_idx]
                        if (
                            (edge.v0 == current.index and edge.v1 == current.downslope)
                            or (edge.v1 == current.index and edge.v0 == current.downslope)
                        ):
                            edge.river += 1
                    current = corners[current.downslope]
                else:
                    current = None

            sources += 1

        logger.info(
            "Rivers created",
            sources=sources,
            candidates=len(candidates),
            river_corners=sum(1 for c in corners if c.river > 0),
            river_edges=sum(1 for e in self.graph.edges if e.river > 0),
        )
        return sources

    def assign_moisture(self) -> None:
        """
        Spread moisture from water and rivers, then rank-normalize.

        FIFO flood fill that overwrites and re-enqueues a corner whenever a
        strictly larger decayed value reaches it, so a corner can be
        revisited as better sources arrive. The final value is the maximum
        decayed value over all sources.
        """
        logger.info("Assigning moisture")

        opts = self.options
        corners = self.graph.corners

        queue = deque()
        for corner in corners:
            if corner.water or corner.river > 0:
                if corner.river > 0:
                    corner.moisture = min(
                        opts.river_moisture_cap, corner.river * opts.river_moisture_factor
                    )
                else:
                    corner.moisture = opts.water_moisture
                queue.append(corner.index)
            else:
                corner.moisture = 0.0

        while queue:
            current = corners[queue.popleft()]
            for adj_idx in current.adjacent:
                adj = corners[adj_idx]
                new_moisture = current.moisture * opts.moisture_decay
                if new_moisture > adj.moisture:
                    adj.moisture = new_moisture
                    queue.append(adj_idx)

        land_corners = sorted((c for c in corners if not c.ocean), key=lambda c: c.moisture)
        denominator = (len(land_corners) - 1) or 1
        for i, corner in enumerate(land_corners):
            corner.moisture = i / denominator

        # Ocean is saturated; river spill can push its raw value past 1
        for corner in corners:
            if corner.ocean:
                corner.moisture = min(corner.moisture, 1.0)

        for region in self.graph.regions:
            total = sum(corners[c].moisture for c in region.corners)
            region.moisture = total / (len(region.corners) or 1)

        logger.info("Moisture assigned", land_corners=len(land_corners))

    def run(self) -> None:
        """Downslopes, watersheds, rivers, then moisture."""
        self.calculate_downslopes()
        self.calculate_watersheds()
        self.create_rivers()
        self.assign_moisture()
