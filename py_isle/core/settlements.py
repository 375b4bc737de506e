"""
Rule-driven settlement placement.

Process:
1. Cache candidate regions per category (shoreline, river, elevation band, inland)
2. Minimum pass - rules by priority place until their min_count is met
3. Target pass - the rule furthest below its target share places next,
   falling back to the first rule with room when the chosen one is exhausted
4. Each placement rolls a size tier and gets a unique synthesized name

Every placement keeps at least ``min_distance`` between region centers and
uses each region at most once. Placing fewer settlements than requested is
a valid outcome reported through the stats, never an error.
"""

import math
from enum import Enum
from typing import Dict, List, Optional, Set

import numpy as np
import structlog
from pydantic import BaseModel, ConfigDict, Field
from sklearn.neighbors import KDTree

from .alea_prng import AleaPRNG
from .generator import MapData
from .name_generator import TownNameGenerator
from .voronoi_graph import Region

logger = structlog.get_logger()


class SettlementType(str, Enum):
    """Terrain category a settlement was placed for."""

    SHORELINE = "shoreline"
    RIVER = "river"
    ELEVATION = "elevation"
    INLAND = "inland"


class SettlementSize(str, Enum):
    """Size tier, drives icon choice in renderers."""

    LARGE = "large"
    MEDIUM = "medium"
    SMALL = "small"


# (large below, medium below) thresholds of the size roll per type
SIZE_THRESHOLDS = {
    SettlementType.SHORELINE: (0.35, 0.75),  # ports and trade hubs
    SettlementType.RIVER: (0.2, 0.7),  # trade stops
    SettlementType.ELEVATION: (0.15, 0.45),  # outposts and keeps
    SettlementType.INLAND: (0.1, 0.45),  # villages and hamlets
}


class PlacementRule(BaseModel):
    """A placement constraint for one terrain category."""

    model_config = ConfigDict(frozen=True)

    type: SettlementType = Field(description="Terrain category of candidate regions")
    target_percent: float = Field(ge=0, le=1, description="Share of total settlements")
    min_count: int = Field(default=0, ge=0, description="Guaranteed placements")
    max_count: int = Field(default=0, ge=0, description="Placement cap, 0 = unbounded")
    priority: int = Field(default=5, description="Higher priorities place first")
    elevation_min: Optional[float] = Field(
        default=None, description="Lower bound of the elevation band (elevation rules)"
    )
    elevation_max: Optional[float] = Field(
        default=None, description="Upper bound of the elevation band (elevation rules)"
    )


def default_rules() -> List[PlacementRule]:
    """The five standard rules: shoreline, river, high and mid elevation, inland."""
    return [
        PlacementRule(type=SettlementType.SHORELINE, target_percent=0.3, min_count=2, priority=10),
        PlacementRule(type=SettlementType.RIVER, target_percent=0.25, min_count=2, priority=8),
        PlacementRule(
            type=SettlementType.ELEVATION, target_percent=0.15, min_count=1, max_count=3,
            elevation_min=0.6, elevation_max=1.0, priority=6,
        ),
        PlacementRule(
            type=SettlementType.ELEVATION, target_percent=0.2, min_count=1,
            elevation_min=0.3, elevation_max=0.6, priority=4,
        ),
        PlacementRule(type=SettlementType.INLAND, target_percent=0.1, priority=2),
    ]


class SettlementOptions(BaseModel):
    """Settlement placement options."""

    total_towns: int = Field(default=15, ge=0, description="Target number of settlements")
    min_distance: float = Field(
        default=40, ge=0, description="Minimum distance between settlement regions"
    )
    rules: List[PlacementRule] = Field(default_factory=default_rules)
    seed: Optional[int] = Field(default=None, description="Placement seed, map seed if None")


class Settlement(BaseModel):
    """Data structure for a placed settlement."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(description="Unique settlement identifier")
    region: int = Field(description="Index of the owning region")
    type: SettlementType = Field(description="Category it was placed for")
    size: SettlementSize = Field(description="Size tier")
    name: str = Field(description="Unique settlement name")
    x: float = Field(description="X coordinate")
    y: float = Field(description="Y coordinate")
    elevation: float = Field(description="Elevation of the owning region")
    rule_index: int = Field(description="Index into the options' rules of the placing rule")


class SettlementStats(BaseModel):
    """Placement outcome summary."""

    total: int = 0
    by_type: Dict[str, int] = Field(default_factory=dict)
    rules_fulfilled: bool = True
    unfulfilled_rules: List[int] = Field(
        default_factory=list, description="Rule indices whose minimum could not be met"
    )


class SettlementResult(BaseModel):
    """Settlements plus placement stats."""

    settlements: List[Settlement]
    stats: SettlementStats


class Settlements:
    """Places settlements on a finished map according to placement rules."""

    def __init__(self, map_data: MapData, options: Optional[SettlementOptions] = None):
        """
        Initialize placement with the map and options.

        Args:
            map_data: Finished map from generate()
            options: SettlementOptions, defaults if omitted
        """
        self.map_data = map_data
        self.options = options or SettlementOptions()

        seed = self.options.seed if self.options.seed is not None else map_data.config.seed
        self.seed = seed
        self.prng = AleaPRNG(seed)
        self.name_generator = TownNameGenerator(seed)

        self.land_regions: List[Region] = []
        self.shoreline_regions: List[Region] = []
        self.river_regions: List[Region] = []
        self._cache_valid_locations()

        self.settlements: List[Settlement] = []
        self.placed: Set[int] = set()
        self.rule_counts: Dict[int, int] = {}

    def _cache_valid_locations(self) -> None:
        """Compute per-category candidate regions once."""
        regions = self.map_data.regions

        self.land_regions = [r for r in regions if not r.water and not r.ocean]
        self.shoreline_regions = [r for r in self.land_regions if r.coast]

        # Land on either side of a river edge, in edge order
        river_set: Dict[int, None] = {}
        for edge in self.map_data.edges:
            if edge.river > 0:
                for side in (edge.d0, edge.d1):
                    if side is not None and not regions[side].water:
                        river_set[side] = None
        self.river_regions = [regions[i] for i in river_set]
        self._river_indices = set(river_set)

        logger.info(
            "Candidate regions cached",
            land=len(self.land_regions),
            shoreline=len(self.shoreline_regions),
            river=len(self.river_regions),
        )

    def get_candidates_for_rule(self, rule: PlacementRule) -> List[Region]:
        """Candidate regions of a rule's category, ignoring occupancy and spacing."""
        if rule.type is SettlementType.SHORELINE:
            return self.shoreline_regions

        if rule.type is SettlementType.RIVER:
            # River regions that aren't on the shoreline, to differentiate
            return [r for r in self.river_regions if not r.coast]

        if rule.type is SettlementType.ELEVATION:
            lo = rule.elevation_min if rule.elevation_min is not None else 0.0
            hi = rule.elevation_max if rule.elevation_max is not None else 1.0
            return [
                r for r in self.land_regions
                if lo <= r.elevation <= hi and not r.coast
            ]

        return [
            r for r in self.land_regions
            if not r.coast and r.index not in self._river_indices
        ]

    def valid_candidates(self, rule: PlacementRule) -> List[Region]:
        """
        Candidates that are unoccupied and far enough from every settlement.

        Spacing is checked with a KDTree over the placed settlement centers.
        """
        candidates = [r for r in self.get_candidates_for_rule(rule) if r.index not in self.placed]
        if not candidates or not self.settlements:
            return candidates

        placed_positions = np.array([[s.x, s.y] for s in self.settlements])
        tree = KDTree(placed_positions)
        distances, _ = tree.query(np.array([r.point for r in candidates]), k=1)

        return [
            r for r, d in zip(candidates, distances[:, 0])
            if d >= self.options.min_distance
        ]

    def find_valid_region(self, rule: PlacementRule) -> Optional[Region]:
        """Random valid candidate for ``rule``, or None when exhausted."""
        valid = self.valid_candidates(rule)
        if not valid:
            return None
        self.prng.shuffle(valid)
        return valid[0]

    def _at_max(self, rule_index: int, rule: PlacementRule) -> bool:
        return rule.max_count > 0 and self.rule_counts.get(rule_index, 0) >= rule.max_count

    def select_rule_by_target(self, ordered: List[int]) -> Optional[int]:
        """
        Rule most under-represented relative to its target share.

        When every rule is at or above its target, a random rule with
        remaining capacity is chosen instead.

        Args:
            ordered: Rule indices in priority order

        Returns:
            Rule index, or None when every rule is at its cap
        """
        rules = self.options.rules
        total_target = self.options.total_towns

        best_rule = None
        best_deficit = -math.inf
        for idx in ordered:
            rule = rules[idx]
            if self._at_max(idx, rule):
                continue
            target_count = math.floor(rule.target_percent * total_target)
            deficit = target_count - self.rule_counts.get(idx, 0)
            if deficit > best_deficit:
                best_deficit = deficit
                best_rule = idx

        if best_deficit <= 0:
            available = [idx for idx in ordered if not self._at_max(idx, rules[idx])]
            if not available:
                return None
            return available[self.prng.randint(0, len(available) - 1)]

        return best_rule

    def find_fallback_rule(self, ordered: List[int]) -> Optional[int]:
        """First rule in priority order, below its cap, with a valid candidate."""
        rules = self.options.rules
        for idx in ordered:
            if self._at_max(idx, rules[idx]):
                continue
            if self.valid_candidates(rules[idx]):
                return idx
        return None

    def determine_size(self, settlement_type: SettlementType) -> SettlementSize:
        """Roll a size tier from the type's distribution."""
        roll = self.prng.random()
        large, medium = SIZE_THRESHOLDS[settlement_type]
        if roll < large:
            return SettlementSize.LARGE
        if roll < medium:
            return SettlementSize.MEDIUM
        return SettlementSize.SMALL

    def create_settlement(self, region: Region, rule_index: int) -> Settlement:
        """Create and record a settlement for ``region``."""
        rule = self.options.rules[rule_index]
        size = self.determine_size(rule.type)

        settlement = Settlement(
            id=len(self.settlements),
            region=region.index,
            type=rule.type,
            size=size,
            name=self.name_generator.generate_name(rule.type),
            x=region.point[0],
            y=region.point[1],
            elevation=region.elevation,
            rule_index=rule_index,
        )

        self.settlements.append(settlement)
        self.placed.add(region.index)
        self.rule_counts[rule_index] = self.rule_counts.get(rule_index, 0) + 1
        return settlement

    def generate(self) -> SettlementResult:
        """
        Run both placement passes.

        Returns:
            SettlementResult with settlements in placement order
        """
        logger.info(
            "Placing settlements",
            total_towns=self.options.total_towns,
            min_distance=self.options.min_distance,
            rules=len(self.options.rules),
        )

        rules = self.options.rules
        total = self.options.total_towns
        stats = SettlementStats()

        # Highest priority first, stable for equal priorities
        ordered = sorted(range(len(rules)), key=lambda i: -rules[i].priority)

        for idx in ordered:
            rule = rules[idx]
            placed = 0
            while placed < rule.min_count and len(self.settlements) < total:
                region = self.find_valid_region(rule)
                if region is None:
                    stats.rules_fulfilled = False
                    stats.unfulfilled_rules.append(idx)
                    logger.warning(
                        "Rule minimum not met",
                        rule=idx, type=rule.type.value,
                        placed=placed, min_count=rule.min_count,
                    )
                    break
                self.create_settlement(region, idx)
                placed += 1

        while len(self.settlements) < total:
            idx = self.select_rule_by_target(ordered)
            if idx is None:
                break

            region = self.find_valid_region(rules[idx])
            if region is None:
                idx = self.find_fallback_rule(ordered)
                if idx is None:
                    break
                region = self.find_valid_region(rules[idx])
                if region is None:
                    break

            self.create_settlement(region, idx)

        for settlement in self.settlements:
            key = settlement.type.value
            stats.by_type[key] = stats.by_type.get(key, 0) + 1
        stats.total = len(self.settlements)

        if stats.total < total:
            logger.warning("Settlement target not reached", placed=stats.total, target=total)

        logger.info("Settlements placed", total=stats.total, by_type=stats.by_type)
        return SettlementResult(settlements=list(self.settlements), stats=stats)


def place_settlements(
    map_data: MapData, options: Optional[SettlementOptions] = None, **overrides
) -> SettlementResult:
    """
    Place settlements on a finished map.

    Args:
        map_data: Finished map from generate()
        options: SettlementOptions, defaults if omitted
        **overrides: Individual SettlementOptions fields applied on top

    Returns:
        SettlementResult with settlements and stats
    """
    if options is None:
        options = SettlementOptions(**overrides)
    elif overrides:
        options = SettlementOptions(**{**options.model_dump(), **overrides})
    return Settlements(map_data, options).generate()


def default_settlement_options(**overrides) -> SettlementOptions:
    """Default options with individual fields replaced."""
    return SettlementOptions(**overrides)


def elevation_rule(
    elevation_min: float,
    elevation_max: float,
    target_percent: float,
    min_count: int = 0,
    priority: int = 5,
) -> PlacementRule:
    """Unbounded elevation-band rule."""
    return PlacementRule(
        type=SettlementType.ELEVATION,
        target_percent=target_percent,
        min_count=min_count,
        max_count=0,
        elevation_min=elevation_min,
        elevation_max=elevation_max,
        priority=priority,
    )
