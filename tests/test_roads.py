"""Tests for the settlement road network."""

import math
from collections import deque

import pytest

from py_isle.core.alea_prng import AleaPRNG
from py_isle.core.roads import (
    RoadNetwork, add_extra_edges, build_mst, build_roads, find_path, path_length
)
from py_isle.core.settlements import Settlement, SettlementSize, SettlementType, place_settlements


def make_settlement(map_data, sid, region_idx):
    region = map_data.regions[region_idx]
    return Settlement(
        id=sid,
        region=region_idx,
        type=SettlementType.INLAND,
        size=SettlementSize.SMALL,
        name=f"Town {sid}",
        x=region.point[0],
        y=region.point[1],
        elevation=region.elevation,
        rule_index=0,
    )


def two_hop_land_pair(map_data):
    """Two land regions two steps apart with a land region between them."""
    regions = map_data.regions
    for start in regions:
        if start.water:
            continue
        for middle in start.neighbors:
            if regions[middle].water:
                continue
            for goal in regions[middle].neighbors:
                if (goal != start.index and goal not in start.neighbors
                        and not regions[goal].water):
                    return start, goal
    raise AssertionError("map has no two-hop land pair")


@pytest.fixture(scope="module")
def settlements(default_map):
    return place_settlements(default_map, total_towns=15).settlements


@pytest.fixture(scope="module")
def network(default_map, settlements):
    return build_roads(settlements, default_map, default_map.config.seed)


class TestSpanningTree:
    """Test Prim's tree and the extra edges."""

    def test_line(self):
        edges = build_mst([(0.0, 0.0), (1.0, 0.0), (3.0, 0.0)])
        assert len(edges) == 2
        assert {frozenset(e) for e in edges} == {frozenset((0, 1)), frozenset((1, 2))}

    def test_tree_spans(self):
        prng = AleaPRNG(1)
        points = [(prng.uniform(0, 100), prng.uniform(0, 100)) for _ in range(20)]
        edges = build_mst(points)
        assert len(edges) == 19

        seen = {0}
        changed = True
        while changed:
            changed = False
            for a, b in edges:
                if (a in seen) != (b in seen):
                    seen.update((a, b))
                    changed = True
        assert seen == set(range(20))

    def test_extra_edges(self):
        prng = AleaPRNG(2)
        points = [(prng.uniform(0, 100), prng.uniform(0, 100)) for _ in range(15)]
        tree = build_mst(points)
        extras = add_extra_edges(points, tree, AleaPRNG(3))
        tree_pairs = {frozenset(e) for e in tree}
        assert len(extras) <= max(1, math.floor(len(tree) * 0.3))
        for i, j in extras:
            assert i < j
            assert frozenset((i, j)) not in tree_pairs

    def test_no_extras_for_two_points(self):
        points = [(0.0, 0.0), (10.0, 0.0)]
        tree = build_mst(points)
        assert add_extra_edges(points, tree, AleaPRNG(4)) == []


class TestFindPath:
    """Test A* routing over regions."""

    def test_same_region(self, default_map):
        land = next(r for r in default_map.regions if not r.water)
        assert find_path(land.index, land.index, default_map) == [land.point]

    def test_neighbors(self, default_map):
        regions = default_map.regions
        a = next(
            r for r in regions
            if not r.water and any(not regions[n].water for n in r.neighbors)
        )
        b = next(n for n in a.neighbors if not regions[n].water)
        path = find_path(a.index, b, default_map)
        assert path[0] == a.point
        assert path[-1] == regions[b].point

    def test_unreachable_falls_back_to_straight_line(self, default_map):
        regions = default_map.regions
        land = next(r for r in regions if not r.water)
        ocean = next(r for r in regions if r.ocean)
        assert find_path(land.index, ocean.index, default_map) == [land.point, ocean.point]

    def test_path_steps_between_neighbors(self, default_map, network):
        by_point = {r.point: r for r in default_map.regions}
        for road in network.roads:
            if len(road.path) < 3:
                continue
            for p, q in zip(road.path, road.path[1:]):
                assert by_point[q].index in by_point[p].neighbors

    def test_path_avoids_ocean(self, default_map, network):
        by_point = {r.point: r for r in default_map.regions}
        for road in network.roads:
            for point in road.path[1:-1]:
                assert not by_point[point].ocean


class TestBuildRoads:
    """Test the full road network."""

    def test_road_count(self, settlements, network):
        tree = len(settlements) - 1
        assert tree <= len(network.roads) <= tree + max(1, math.floor(tree * 0.3))

    def test_connected(self, settlements, network):
        ids = [s.id for s in settlements]
        seen = {ids[0]}
        queue = deque([ids[0]])
        while queue:
            current = queue.popleft()
            for other in network.adjacency[current]:
                if other not in seen:
                    seen.add(other)
                    queue.append(other)
        assert seen == set(ids)

    def test_adjacency_symmetric(self, network):
        for a, others in network.adjacency.items():
            for b in others:
                assert a in network.adjacency[b]

    def test_paths_join_settlements(self, settlements, network):
        by_id = {s.id: s for s in settlements}
        for road in network.roads:
            assert road.path[0] == (by_id[road.from_id].x, by_id[road.from_id].y)
            assert road.path[-1] == (by_id[road.to_id].x, by_id[road.to_id].y)
            assert road.length == pytest.approx(path_length(road.path))

    def test_road_never_shorter_than_direct(self, settlements, network):
        by_id = {s.id: s for s in settlements}
        for road in network.roads:
            a = by_id[road.from_id]
            b = by_id[road.to_id]
            assert road.length >= math.hypot(a.x - b.x, a.y - b.y) - 1e-9

    def test_deterministic(self, default_map, settlements, network):
        again = build_roads(settlements, default_map, default_map.config.seed)
        assert again == network

    def test_two_settlements_one_road(self, default_map):
        regions = default_map.regions
        start, goal = two_hop_land_pair(default_map)
        pair = [make_settlement(default_map, 0, start.index), make_settlement(default_map, 1, goal)]

        network = build_roads(pair, default_map, 5)
        assert len(network.roads) == 1
        road = network.roads[0]
        assert len(road.path) >= 3
        direct = math.dist(start.point, regions[goal].point)
        assert road.length >= direct
        assert network.adjacency == {0: [1], 1: [0]}

    def test_single_settlement(self, default_map):
        land = next(r for r in default_map.regions if not r.water)
        network = build_roads([make_settlement(default_map, 4, land.index)], default_map, 1)
        assert network == RoadNetwork(roads=[], adjacency={4: []})

    def test_no_settlements(self, default_map):
        assert build_roads([], default_map, 1) == RoadNetwork()
