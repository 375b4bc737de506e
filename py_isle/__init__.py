"""
Seeded fantasy island map generator.
"""

from .core import (MapConfig, MapData, generate, build_noisy_edges, place_settlements,
                   build_roads, summarize_map)

__version__ = "0.1.0"

__all__ = ['MapConfig', 'MapData', 'generate', 'build_noisy_edges', 'place_settlements',
           'build_roads', 'summarize_map']
