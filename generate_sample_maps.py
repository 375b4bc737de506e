#!/usr/bin/env python3
"""
Generate sample islands and print a summary of each.

This includes:
1. Terrain pipeline (graph, water, elevation, rivers, moisture, biomes)
2. Noisy edge paths
3. Settlement placement with names
4. Road network

Usage:
    python generate_sample_maps.py [seed ...]

If no seed is provided, defaults to 12345
"""

import sys
from pathlib import Path
sys.path.append(str(Path(__file__).parent))

from py_isle.config import settings
from py_isle.core.generator import generate
from py_isle.core.map_analysis import ocean_is_connected, summarize_map
from py_isle.core.noisy_edges import build_noisy_edges
from py_isle.core.roads import build_roads
from py_isle.core.settlements import place_settlements
from py_isle.utils.logging import configure_logging


def create_sample_map(seed, num_towns=15):
    """Run every stage for one seed and print what came out."""

    print(f"\nGenerating island for seed {seed}...")
    print(f"  Dimensions: {settings.default_map_width}x{settings.default_map_height}")
    print(f"  Regions: {settings.default_num_points}")

    map_data = generate(
        seed=seed,
        width=settings.default_map_width,
        height=settings.default_map_height,
        num_points=settings.default_num_points,
    )
    summary = summarize_map(map_data)

    print(f"  Land: {summary.land_regions} regions ({summary.land_fraction * 100:.1f}%), "
          f"ocean: {summary.ocean_regions}, lakes: {summary.lake_regions}, "
          f"coast: {summary.coast_regions}")
    print(f"  Rivers: {summary.river_edges} edges over {summary.river_corners} corners")
    print(f"  Mean land elevation {summary.mean_land_elevation:.2f}, "
          f"moisture {summary.mean_land_moisture:.2f}")
    print(f"  Ocean connected to border: {ocean_is_connected(map_data)}")
    print("  Biomes:")
    for name, count in sorted(summary.biomes.items(), key=lambda item: -item[1]):
        print(f"    {name:<28} {count}")

    noisy = build_noisy_edges(map_data, seed)
    print(f"  Noisy edge paths: {len(noisy.paths)}")

    result = place_settlements(map_data, total_towns=num_towns, seed=seed)
    print(f"  Settlements: {result.stats.total}/{num_towns}")
    for settlement in result.settlements:
        print(f"    #{settlement.id:<3} {settlement.name:<24} {settlement.type.value:<10} "
              f"{settlement.size.value:<7} ({settlement.x:.0f}, {settlement.y:.0f})")
    for rule_index in result.stats.unfulfilled_rules:
        print(f"    minimum not met for rule {rule_index}")

    network = build_roads(result.settlements, map_data, seed)
    total_length = sum(road.length for road in network.roads)
    print(f"  Roads: {len(network.roads)} totalling {total_length:.0f} units")

    return map_data


def main():
    configure_logging(level="WARNING")

    seeds = [int(arg) for arg in sys.argv[1:]] or [12345]
    for seed in seeds:
        create_sample_map(seed)


if __name__ == "__main__":
    main()
