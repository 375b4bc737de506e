"""
Island shape: land/water assignment and elevation.

This module implements the first two terrain phases:
- Water assignment from a noisy radial island shape, with an ocean
  flood-fill from the map border separating ocean from lakes
- Elevation as hop distance from the coast, rank-normalized with a
  square-root curve so lowlands stay flat and peaks get steep
"""

import math
from collections import deque
from dataclasses import dataclass
from typing import Optional

import numpy as np
import structlog

from .alea_prng import AleaPRNG
from .noise import SimplexNoise
from .voronoi_graph import MapGraph

logger = structlog.get_logger()


@dataclass
class TerrainOptions:
    """Island shape and elevation parameters."""

    shape_offset: float = 0.3  # Subtracted from the scaled radial distance
    water_threshold: float = 0.3  # Shape values above this are water
    noise_scale: float = 0.01  # Map units to noise units
    noise_amplitude: float = 0.4
    noise_octaves: int = 4
    ocean_fraction: float = 0.5  # Share of ocean corners that makes a region ocean
    elevation_step: float = 0.01  # Raw elevation gained per hop inland


class Terrain:
    """Assigns water, coast and elevation to a freshly built graph."""

    def __init__(
        self,
        graph: MapGraph,
        island_factor: float,
        lake_factor: float,
        prng: AleaPRNG,
        options: Optional[TerrainOptions] = None,
    ):
        """
        Initialize the terrain pass.

        Args:
            graph: MapGraph straight from build_graph
            island_factor: Radial bias of the coastline, larger = smaller island
            lake_factor: Share of water corners that makes a region water
            prng: Map generator, consumed by the noise permutation table
            options: Shape and elevation parameters
        """
        self.graph = graph
        self.island_factor = island_factor
        self.lake_factor = lake_factor
        self.prng = prng
        self.options = options or TerrainOptions()

    def island_shape(self) -> np.ndarray:
        """
        Shape scalar for every corner; water where it exceeds the threshold.

        Builds the noise field from ``prng``, so call exactly once per run.
        """
        opts = self.options
        noise = SimplexNoise(self.prng)

        points = self.graph.corner_points()
        cx = self.graph.width / 2
        cy = self.graph.height / 2
        dx = (points[:, 0] - cx) / cx
        dy = (points[:, 1] - cy) / cy
        distance = np.sqrt(dx * dx + dy * dy)

        noise_val = noise.fbm(
            points[:, 0] * opts.noise_scale,
            points[:, 1] * opts.noise_scale,
            opts.noise_octaves,
        )
        return distance * self.island_factor - opts.shape_offset + noise_val * opts.noise_amplitude

    def assign_water(self) -> None:
        """
        Mark water, ocean and coast on corners and regions.

        Border corners seed a flood fill over adjacent water corners; water
        the fill never reaches is lake.
        """
        logger.info("Assigning water", island_factor=self.island_factor,
                    lake_factor=self.lake_factor)

        corners = self.graph.corners
        regions = self.graph.regions

        shape = self.island_shape()
        for corner in corners:
            corner.water = bool(shape[corner.index] > self.options.water_threshold)
            corner.ocean = corner.border

        queue = deque()
        for corner in corners:
            if corner.border:
                corner.ocean = True
                corner.water = True
                queue.append(corner.index)

        while queue:
            current = queue.popleft()
            for adj_idx in corners[current].adjacent:
                adj = corners[adj_idx]
                if adj.water and not adj.ocean:
                    adj.ocean = True
                    queue.append(adj_idx)

        for region in regions:
            num_water = 0
            num_ocean = 0
            for c in region.corners:
                if corners[c].water:
                    num_water += 1
                if corners[c].ocean:
                    num_ocean += 1

            n = len(region.corners)
            region.water = num_water >= n * self.lake_factor
            region.ocean = num_ocean >= n * self.options.ocean_fraction

            # Border cells are always ocean
            if any(corners[c].border for c in region.corners):
                region.border = True
                region.ocean = True
                region.water = True

        for region in regions:
            if not region.water:
                region.coast = any(regions[n].ocean for n in region.neighbors)

        for corner in corners:
            ocean_count = sum(1 for r in corner.touches if regions[r].ocean)
            land_count = sum(1 for r in corner.touches if not regions[r].water)
            corner.coast = land_count > 0 and ocean_count > 0

        logger.info(
            "Water assigned",
            ocean_regions=sum(r.ocean for r in regions),
            lake_regions=sum(r.water and not r.ocean for r in regions),
            coast_regions=sum(r.coast for r in regions),
        )

    def assign_elevation(self) -> None:
        """
        Elevation from hop distance to the coast, then rank-normalized.

        Ocean and coast corners start at 0; a hop inland adds the elevation
        step and only ever lowers a land corner's value. Water corners are
        never entered, so lakes keep an infinite raw value and end up at
        the top of the ranking. Non-ocean corners are then reassigned
        sqrt(rank / (count - 1)).
        """
        logger.info("Assigning elevation")

        corners = self.graph.corners
        step = self.options.elevation_step

        queue = deque()
        for corner in corners:
            if corner.ocean or corner.coast:
                corner.elevation = 0.0
                queue.append(corner.index)
            else:
                corner.elevation = math.inf

        while queue:
            current = corners[queue.popleft()]
            new_elevation = current.elevation + step
            for adj_idx in current.adjacent:
                adj = corners[adj_idx]
                if not adj.water and new_elevation < adj.elevation:
                    adj.elevation = new_elevation
                    queue.append(adj_idx)

        for corner in corners:
            corner.coast_distance = corner.elevation

        land_corners = sorted((c for c in corners if not c.ocean), key=lambda c: c.elevation)
        denominator = (len(land_corners) - 1) or 1
        for i, corner in enumerate(land_corners):
            corner.elevation = math.sqrt(i / denominator)

        for corner in corners:
            if corner.ocean:
                corner.elevation = 0.0

        for region in self.graph.regions:
            total = sum(corners[c].elevation for c in region.corners)
            region.elevation = total / (len(region.corners) or 1)

        logger.info("Elevation assigned", land_corners=len(land_corners))

    def run(self) -> None:
        """Water then elevation, in that order."""
        self.assign_water()
        self.assign_elevation()
