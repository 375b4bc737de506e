"""
Core map generation functionality.
"""

from .alea_prng import AleaPRNG
from .voronoi_graph import Region, Corner, Edge, MapGraph, build_graph
from .biomes import BiomeType, BIOME_NAMES, BIOME_COLORS, get_biome
from .generator import MapConfig, MapData, generate
from .noisy_edges import NoisyEdges, build_noisy_edges, build_noisy_polygon
from .settlements import (Settlement, SettlementOptions, SettlementResult, SettlementType,
                          PlacementRule, place_settlements)
from .roads import Road, RoadNetwork, build_roads
from .map_analysis import MapSummary, summarize_map, ocean_is_connected

__all__ = ['AleaPRNG', 'Region', 'Corner', 'Edge', 'MapGraph', 'build_graph',
           'BiomeType', 'BIOME_NAMES', 'BIOME_COLORS', 'get_biome',
           'MapConfig', 'MapData', 'generate',
           'NoisyEdges', 'build_noisy_edges', 'build_noisy_polygon',
           'Settlement', 'SettlementOptions', 'SettlementResult', 'SettlementType',
           'PlacementRule', 'place_settlements',
           'Road', 'RoadNetwork', 'build_roads',
           'MapSummary', 'summarize_map', 'ocean_is_connected']
