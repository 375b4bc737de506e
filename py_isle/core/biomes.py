"""
Biome classification from water flags, elevation and moisture.

The lookup is a total function over [0, 1] x [0, 1]: every land region
falls into exactly one elevation band, and every band's moisture cutoffs
end with an unconditional fallthrough.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Dict, Optional

import structlog

if TYPE_CHECKING:
    from .voronoi_graph import MapGraph, Region

logger = structlog.get_logger()


class BiomeType(IntEnum):
    """Biome types of the elevation/moisture diagram."""

    OCEAN = 0
    LAKE = 1
    BEACH = 2
    ICE = 3
    MARSH = 4
    SNOW = 5
    TUNDRA = 6
    BARE = 7
    SCORCHED = 8
    TAIGA = 9
    SHRUBLAND = 10
    TEMPERATE_DESERT = 11
    TEMPERATE_RAIN_FOREST = 12
    TEMPERATE_DECIDUOUS_FOREST = 13
    GRASSLAND = 14
    TROPICAL_RAIN_FOREST = 15
    TROPICAL_SEASONAL_FOREST = 16
    SUBTROPICAL_DESERT = 17


# Biome names for display
BIOME_NAMES = {
    BiomeType.OCEAN: "Ocean",
    BiomeType.LAKE: "Lake",
    BiomeType.BEACH: "Beach",
    BiomeType.ICE: "Ice",
    BiomeType.MARSH: "Marsh",
    BiomeType.SNOW: "Snow",
    BiomeType.TUNDRA: "Tundra",
    BiomeType.BARE: "Bare",
    BiomeType.SCORCHED: "Scorched",
    BiomeType.TAIGA: "Taiga",
    BiomeType.SHRUBLAND: "Shrubland",
    BiomeType.TEMPERATE_DESERT: "Temperate Desert",
    BiomeType.TEMPERATE_RAIN_FOREST: "Temperate Rain Forest",
    BiomeType.TEMPERATE_DECIDUOUS_FOREST: "Temperate Deciduous Forest",
    BiomeType.GRASSLAND: "Grassland",
    BiomeType.TROPICAL_RAIN_FOREST: "Tropical Rain Forest",
    BiomeType.TROPICAL_SEASONAL_FOREST: "Tropical Seasonal Forest",
    BiomeType.SUBTROPICAL_DESERT: "Subtropical Desert",
}

# Fill colors for renderers, as 0xRRGGBB
BIOME_COLORS = {
    BiomeType.OCEAN: 0x44447A,
    BiomeType.LAKE: 0x336699,
    BiomeType.BEACH: 0xA09077,
    BiomeType.ICE: 0x99FFFF,
    BiomeType.MARSH: 0x2F6666,
    BiomeType.SNOW: 0xFFFFFF,
    BiomeType.TUNDRA: 0xBBBBAA,
    BiomeType.BARE: 0x888888,
    BiomeType.SCORCHED: 0x555555,
    BiomeType.TAIGA: 0x99AA77,
    BiomeType.SHRUBLAND: 0x889977,
    BiomeType.TEMPERATE_DESERT: 0xC9D29B,
    BiomeType.TEMPERATE_RAIN_FOREST: 0x448855,
    BiomeType.TEMPERATE_DECIDUOUS_FOREST: 0x679459,
    BiomeType.GRASSLAND: 0x88AA55,
    BiomeType.TROPICAL_RAIN_FOREST: 0x337755,
    BiomeType.TROPICAL_SEASONAL_FOREST: 0x559944,
    BiomeType.SUBTROPICAL_DESERT: 0xD2B98B,
}


@dataclass
class BiomeOptions:
    """Band boundaries of the biome diagram."""

    marsh_elevation: float = 0.1  # Lakes below this elevation are marsh
    high_elevation: float = 0.8
    upper_elevation: float = 0.6
    mid_elevation: float = 0.3


def get_biome(
    ocean: bool,
    water: bool,
    coast: bool,
    elevation: float,
    moisture: float,
    options: Optional[BiomeOptions] = None,
) -> BiomeType:
    """
    Look up the biome for one region's flags and scalars.

    Args:
        ocean, water, coast: Region flags
        elevation: Region elevation in [0, 1]
        moisture: Region moisture in [0, 1]
        options: Band boundaries, defaults if omitted

    Returns:
        The single matching BiomeType
    """
    opts = options or BiomeOptions()

    if ocean:
        return BiomeType.OCEAN

    if water:
        if elevation < opts.marsh_elevation:
            return BiomeType.MARSH
        return BiomeType.LAKE

    if coast:
        return BiomeType.BEACH

    e = elevation
    m = moisture

    if e > opts.high_elevation:
        if m > 0.5:
            return BiomeType.SNOW
        if m > 0.33:
            return BiomeType.TUNDRA
        if m > 0.16:
            return BiomeType.BARE
        return BiomeType.SCORCHED

    if e > opts.upper_elevation:
        if m > 0.66:
            return BiomeType.TAIGA
        if m > 0.33:
            return BiomeType.SHRUBLAND
        return BiomeType.TEMPERATE_DESERT

    if e > opts.mid_elevation:
        if m > 0.83:
            return BiomeType.TEMPERATE_RAIN_FOREST
        if m > 0.5:
            return BiomeType.TEMPERATE_DECIDUOUS_FOREST
        if m > 0.16:
            return BiomeType.GRASSLAND
        return BiomeType.TEMPERATE_DESERT

    if m > 0.66:
        return BiomeType.TROPICAL_RAIN_FOREST
    if m > 0.33:
        return BiomeType.TROPICAL_SEASONAL_FOREST
    if m > 0.16:
        return BiomeType.GRASSLAND
    return BiomeType.SUBTROPICAL_DESERT


class BiomeClassifier:
    """Assigns a biome to every region of a finished terrain graph."""

    def __init__(self, graph: "MapGraph", options: Optional[BiomeOptions] = None):
        """
        Initialize biome classifier.

        Args:
            graph: MapGraph with water, elevation and moisture assigned
            options: Biome band boundaries
        """
        self.graph = graph
        self.options = options or BiomeOptions()

    def classify_region(self, region: "Region") -> BiomeType:
        """Biome for a single region."""
        return get_biome(
            region.ocean,
            region.water,
            region.coast,
            region.elevation,
            region.moisture,
            self.options,
        )

    def assign_biomes(self) -> Dict[BiomeType, int]:
        """
        Classify every region in place.

        Returns:
            Region count per biome
        """
        logger.info("Assigning biomes")

        counts: Dict[BiomeType, int] = {}
        for region in self.graph.regions:
            region.biome = self.classify_region(region)
            counts[region.biome] = counts.get(region.biome, 0) + 1

        logger.info(
            "Biomes assigned",
            distribution={BIOME_NAMES[b]: n for b, n in sorted(counts.items())},
        )
        return counts
