"""
Read-only statistics over a finished map.
"""

from collections import deque
from typing import Dict

import numpy as np
from pydantic import BaseModel, Field

from .biomes import BIOME_NAMES
from .generator import MapData


class MapSummary(BaseModel):
    """Region, water and biome counts for one generated map."""

    seed: int
    regions: int
    corners: int
    edges: int
    land_regions: int = Field(description="Regions that are neither ocean nor lake")
    ocean_regions: int
    lake_regions: int = Field(description="Water regions not connected to the ocean")
    coast_regions: int
    river_corners: int = Field(description="Corners carrying river flow")
    river_edges: int
    biomes: Dict[str, int] = Field(default_factory=dict, description="Region count per biome name")
    mean_land_elevation: float
    mean_land_moisture: float

    @property
    def land_fraction(self) -> float:
        return self.land_regions / self.regions if self.regions else 0.0


def summarize_map(map_data: MapData) -> MapSummary:
    """Collect counts and land averages for a map."""
    regions = map_data.regions
    land = [r for r in regions if not r.water]

    biomes: Dict[str, int] = {}
    for region in regions:
        name = BIOME_NAMES[region.biome]
        biomes[name] = biomes.get(name, 0) + 1

    if land:
        mean_elevation = float(np.mean([r.elevation for r in land]))
        mean_moisture = float(np.mean([r.moisture for r in land]))
    else:
        mean_elevation = mean_moisture = 0.0

    return MapSummary(
        seed=map_data.config.seed,
        regions=len(regions),
        corners=len(map_data.corners),
        edges=len(map_data.edges),
        land_regions=len(land),
        ocean_regions=sum(1 for r in regions if r.ocean),
        lake_regions=sum(1 for r in regions if r.water and not r.ocean),
        coast_regions=sum(1 for r in regions if r.coast),
        river_corners=sum(1 for c in map_data.corners if c.river > 0),
        river_edges=sum(1 for e in map_data.edges if e.river > 0),
        biomes=dict(sorted(biomes.items())),
        mean_land_elevation=mean_elevation,
        mean_land_moisture=mean_moisture,
    )


def ocean_is_connected(map_data: MapData) -> bool:
    """
    True when every ocean region is reachable from a border region
    through ocean neighbors only.
    """
    regions = map_data.regions
    ocean = [r.index for r in regions if r.ocean]
    if not ocean:
        return True

    seen = set()
    queue = deque(r.index for r in regions if r.ocean and r.border)
    seen.update(queue)
    while queue:
        current = queue.popleft()
        for neighbor in regions[current].neighbors:
            if neighbor not in seen and regions[neighbor].ocean:
                seen.add(neighbor)
                queue.append(neighbor)

    return len(seen) == len(ocean)
