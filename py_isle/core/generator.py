"""
Main map generator that runs the terrain pipeline end to end.

Process:
1. build_graph() - Relaxed points, Delaunay triangulation, dual graph
2. Terrain.run() - Island shape, ocean flood fill, coast, elevation
3. Hydrology.run() - Downslopes, watersheds, rivers, moisture
4. BiomeClassifier.assign_biomes() - Per-region biome lookup

Each stage finishes before the next starts, and one AleaPRNG seeded with
the map seed is threaded through the graph, water and river stages.
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Union

import structlog
from pydantic import BaseModel, ConfigDict, Field

from .alea_prng import AleaPRNG
from .biomes import BiomeClassifier
from .hydrology import Hydrology
from .terrain import Terrain
from .voronoi_graph import Corner, Edge, MapGraph, Region, build_graph

logger = structlog.get_logger()


class MapConfig(BaseModel):
    """Map generation options."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    seed: int = Field(default=12345, description="Seed for every random stream of the map")
    width: float = Field(default=800, gt=0, description="Map width")
    height: float = Field(default=600, gt=0, description="Map height")
    num_points: int = Field(default=2000, ge=3, description="Number of regions")
    island_factor: float = Field(
        default=1.07, description="Coastline bias: 1.0 = full island, larger = smaller island"
    )
    lake_factor: float = Field(
        default=0.3, description="Share of water corners that makes a region water"
    )
    river_count: int = Field(default=50, ge=0, description="Number of river sources")


DEFAULT_CONFIG = MapConfig()


@dataclass
class MapData:
    """Finished terrain graph plus the configuration that produced it."""

    graph: MapGraph
    config: MapConfig

    @property
    def regions(self) -> List[Region]:
        return self.graph.regions

    @property
    def corners(self) -> List[Corner]:
        return self.graph.corners

    @property
    def edges(self) -> List[Edge]:
        return self.graph.edges


def generate(config: Optional[Union[MapConfig, dict]] = None, **overrides: Any) -> MapData:
    """
    Generate a complete island map.

    Args:
        config: MapConfig, or a dict of its fields; defaults if omitted
        **overrides: Individual MapConfig fields, applied on top of ``config``

    Returns:
        MapData with every region, corner and edge populated

    Raises:
        pydantic.ValidationError: If the configuration violates a precondition
            (fewer than 3 points, non-positive dimensions, negative river count)
    """
    if config is None:
        config = MapConfig(**overrides)
    elif isinstance(config, MapConfig):
        if overrides:
            config = MapConfig(**{**config.model_dump(), **overrides})
    else:
        config = MapConfig(**{**config, **overrides})

    logger.info("Generating map", **config.model_dump())

    prng = AleaPRNG(config.seed)

    graph = build_graph(config.num_points, config.width, config.height, prng)

    Terrain(graph, config.island_factor, config.lake_factor, prng).run()

    Hydrology(graph, config.river_count, prng).run()

    BiomeClassifier(graph).assign_biomes()

    logger.info("Map generation complete", seed=config.seed, prng_calls=prng.call_count)
    return MapData(graph=graph, config=config)
