"""Tests for water assignment and elevation."""

import math

import pytest

from py_isle.core.alea_prng import AleaPRNG
from py_isle.core.terrain import Terrain, TerrainOptions
from py_isle.core.voronoi_graph import build_graph


@pytest.fixture(scope="module")
def terrain_graph():
    prng = AleaPRNG(2024)
    graph = build_graph(400, 600, 500, prng)
    Terrain(graph, 1.07, 0.3, prng).run()
    return graph


class TestWater:
    """Test ocean, lake and coast flags."""

    def test_border_corners_are_ocean(self, terrain_graph):
        for corner in terrain_graph.corners:
            if corner.border:
                assert corner.ocean
                assert corner.water

    def test_border_regions_are_ocean(self, terrain_graph):
        for region in terrain_graph.regions:
            if region.border:
                assert region.ocean
                assert region.water

    def test_ocean_corners_are_water(self, terrain_graph):
        assert all(c.water for c in terrain_graph.corners if c.ocean)

    def test_ocean_regions_are_water(self, terrain_graph):
        assert all(r.water for r in terrain_graph.regions if r.ocean)

    def test_has_land_and_ocean(self, terrain_graph):
        assert any(not r.water for r in terrain_graph.regions)
        assert any(r.ocean for r in terrain_graph.regions)

    def test_coast_regions(self, terrain_graph):
        """Coast is land with at least one ocean neighbor."""
        regions = terrain_graph.regions
        for region in regions:
            expected = not region.water and any(regions[n].ocean for n in region.neighbors)
            assert region.coast == expected

    def test_coast_corners(self, terrain_graph):
        regions = terrain_graph.regions
        for corner in terrain_graph.corners:
            touches_ocean = any(regions[r].ocean for r in corner.touches)
            touches_land = any(not regions[r].water for r in corner.touches)
            assert corner.coast == (touches_ocean and touches_land)

    def test_larger_island_factor_shrinks_land(self):
        def land_count(factor):
            prng = AleaPRNG(7)
            graph = build_graph(300, 400, 400, prng)
            Terrain(graph, factor, 0.3, prng).run()
            return sum(1 for r in graph.regions if not r.water)

        assert land_count(1.6) < land_count(0.9)


class TestElevation:
    """Test coast-distance elevation."""

    def test_range(self, terrain_graph):
        for corner in terrain_graph.corners:
            assert 0.0 <= corner.elevation <= 1.0
        for region in terrain_graph.regions:
            assert 0.0 <= region.elevation <= 1.0

    def test_ocean_is_zero(self, terrain_graph):
        assert all(c.elevation == 0.0 for c in terrain_graph.corners if c.ocean)

    def test_coast_distance_start(self, terrain_graph):
        for corner in terrain_graph.corners:
            if corner.ocean or corner.coast:
                assert corner.coast_distance == 0.0

    def test_monotonic_in_coast_distance(self, terrain_graph):
        """Corners further from the coast are never lower."""
        land = [c for c in terrain_graph.corners if not c.ocean]
        ordered = sorted(land, key=lambda c: c.coast_distance)
        for a, b in zip(ordered, ordered[1:]):
            if a.coast_distance < b.coast_distance:
                assert a.elevation <= b.elevation

    def test_lakes_keep_infinite_distance(self, terrain_graph):
        for corner in terrain_graph.corners:
            if corner.water and not corner.ocean and not corner.coast:
                assert math.isinf(corner.coast_distance)

    def test_coast_distance_steps(self, terrain_graph):
        """Reached land corners sit one step above some neighbor."""
        step = TerrainOptions().elevation_step
        corners = terrain_graph.corners
        for corner in corners:
            d = corner.coast_distance
            if d == 0.0 or math.isinf(d):
                continue
            assert any(
                corners[a].coast_distance + step == pytest.approx(d)
                for a in corner.adjacent
            )

    def test_region_elevation_is_corner_mean(self, terrain_graph):
        corners = terrain_graph.corners
        for region in terrain_graph.regions:
            expected = sum(corners[c].elevation for c in region.corners) / len(region.corners)
            assert region.elevation == pytest.approx(expected)

    def test_highest_land_corner_reaches_one(self, terrain_graph):
        land = [c for c in terrain_graph.corners if not c.ocean]
        assert max(c.elevation for c in land) == pytest.approx(1.0)
