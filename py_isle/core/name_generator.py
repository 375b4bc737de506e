"""
Settlement name synthesis.

Names are assembled from word pools by one of several patterns, with
location-flavoured pools (shore, river, mountain, inland) chosen by the
settlement's placement type. Uniqueness is enforced per generator.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, List, Set

from pydantic import BaseModel, ConfigDict, Field

from .alea_prng import AleaPRNG

MAX_NAME_ATTEMPTS = 20

# Generic pools, usable by any settlement
PREFIXES = [
    "Al", "Ash", "Bel", "Black", "Bran", "Brier", "Cal", "Cedar", "Clear",
    "Crag", "Cross", "Dark", "Dawn", "Dell", "Dun", "East", "Elder", "Elk",
    "Ever", "Fair", "Fall", "Far", "Fern", "Glen", "Gold", "Gran", "Gray",
    "Green", "Hallow", "Haver", "Hawk", "High", "Hollow", "Horn", "Iron",
    "Ivy", "Keld", "King", "Lake", "Lark", "Leaf", "Long", "Low", "Lynn",
    "Maple", "Marsh", "Mead", "Mill", "Mist", "Moon", "Moss", "New", "Night",
    "North", "Oak", "Old", "Pine", "Raven", "Red", "River", "Rock", "Rose",
    "Salt", "Sand", "Shadow", "Silver", "South", "Spring", "Star", "Still",
    "Stone", "Storm", "Summer", "Sun", "Swan", "Thorn", "Thunder", "West",
    "White", "Wild", "Willow", "Wind", "Winter", "Wolf", "Wood",
]

SUFFIXES = [
    "bury", "by", "crest", "dale", "den", "fall", "feld", "field", "ford",
    "gate", "garde", "glen", "grove", "ham", "haven", "helm", "hill", "hold",
    "hollow", "holt", "keep", "lake", "land", "leigh", "ley", "loch", "lyn",
    "march", "mead", "mere", "mill", "mont", "moor", "mouth", "ness", "point",
    "pool", "rest", "ridge", "shire", "side", "stead", "stone", "thorpe",
    "ton", "vale", "view", "ville", "wall", "ward", "watch", "water", "way",
    "well", "wick", "wind", "wood", "worth", "wrath",
]

THE_PLACES = [
    "Anchorage", "Bluffs", "Citadel", "Cliffs", "Crossing", "Dell", "Downs",
    "Falls", "Fens", "Ford", "Forge", "Garrison", "Glen", "Grove", "Harbor",
    "Haven", "Heights", "Highlands", "Holdfast", "Hollows", "Marches",
    "Meadows", "Mill", "Narrows", "Oasis", "Outpost", "Pass", "Pines",
    "Plains", "Point", "Pools", "Reach", "Refuge", "Ridge", "Shallows",
    "Shire", "Shore", "Springs", "Strand", "Summit", "Tides", "Vale",
    "Watch", "Waters", "Waypoint", "Wilds", "Woods",
]

POSSESSIVE_NAMES = [
    "Baker's", "Baron's", "Bishop's", "Brewer's", "Captain's", "Cooper's",
    "Dragon's", "Earl's", "Farmer's", "Fisher's", "Giant's", "Harper's",
    "Hunter's", "King's", "Knight's", "Lady's", "Lord's", "Maiden's",
    "Merchant's", "Miller's", "Miner's", "Queen's", "Raven's", "Sailor's",
    "Shepherd's", "Smith's", "Trader's", "Wanderer's", "Widow's", "Wolf's",
]

DESCRIPTIVES = [
    "Ancient", "Bright", "Broken", "Dark", "Dry", "East", "Far", "First",
    "Free", "Great", "Hidden", "High", "Last", "Little", "Lone", "Lost",
    "Low", "Middle", "New", "North", "Old", "Outer", "Silent", "Small",
    "South", "Twin", "Upper", "West", "White", "Young",
]

GENERIC_PLACES = ["Town", "City", "Gate", "Point", "View", "End", "Base", "Post"]
POSSESSIVE_PLACES = [
    "Rest", "Landing", "Crossing", "Watch", "Hold", "Keep", "Point", "Haven", "Reach", "End",
]
COMPOUND_ENDINGS = [
    "Bay", "Keep", "Hold", "Port", "Falls", "Gate", "Watch", "Reach", "Point", "Cove",
]


class NamePattern(Enum):
    """Structures a settlement name can take."""

    PREFIX_SUFFIX = "prefix_suffix"  # Oakdale, Riverford
    FEATURE_GENERIC = "feature_generic"  # Harbor Town, Peak View
    THE_PLACE = "the_place"  # The Crossing, The Heights
    POSSESSIVE = "possessive"  # King's Landing, Fisher's Rest
    DESCRIPTIVE = "descriptive"  # North Haven, Old Mill
    COMPOUND = "compound"  # Blackwater Bay, Stormwind Keep


class NamePools(BaseModel):
    """Location-flavoured word pools for one settlement type."""

    model_config = ConfigDict(frozen=True)

    prefixes: List[str] = Field(description="Capitalized leading words")
    suffixes: List[str] = Field(description="Lower-case endings")


FEATURE_POOLS: Dict[str, NamePools] = {
    "shoreline": NamePools(
        prefixes=[
            "Anchor", "Bay", "Beacon", "Breaker", "Brine", "Cape", "Cliff", "Coral",
            "Cove", "Drift", "Gull", "Harbor", "Helm", "Isle", "Keel", "Mast",
            "Pearl", "Port", "Reef", "Sail", "Salt", "Sand", "Sea", "Shell", "Ship",
            "Shore", "Storm", "Surf", "Tide", "Wave", "Whale", "Wind",
        ],
        suffixes=[
            "anchor", "bay", "beach", "cape", "cove", "harbor", "haven", "helm",
            "hook", "isle", "landing", "pier", "point", "port", "quay", "reef",
            "sail", "sand", "sea", "shore", "tide", "watch", "water", "wharf",
        ],
    ),
    "river": NamePools(
        prefixes=[
            "Beck", "Bridge", "Brook", "Creek", "Current", "Eddy", "Falls", "Ferry",
            "Fisher", "Float", "Flow", "Ford", "Mill", "Otter", "Pike", "Pond",
            "Pool", "Rapid", "Reed", "River", "Rush", "Salmon", "Shallow", "Spring",
            "Still", "Stream", "Swift", "Trout", "Wade", "Water", "Weir", "Willow",
        ],
        suffixes=[
            "bank", "beck", "bridge", "brook", "creek", "crossing", "eddy", "falls",
            "ferry", "ford", "mill", "mouth", "pool", "rapids", "run", "shallows",
            "spring", "stream", "wade", "water", "weir",
        ],
    ),
    "elevation": NamePools(
        prefixes=[
            "Aerie", "Crag", "Crown", "Eagle", "Frost", "Giant", "Granite", "Gray",
            "Height", "High", "Ice", "Iron", "King", "Loft", "Lone", "North",
            "Peak", "Pinnacle", "Ram", "Ridge", "Rock", "Rook", "Sky", "Slate",
            "Snow", "Spur", "Steep", "Stone", "Storm", "Summit", "Thunder", "Tower",
            "Wind", "Winter",
        ],
        suffixes=[
            "aerie", "bluff", "cairn", "cliff", "crag", "crest", "crown", "fall",
            "frost", "gate", "guard", "height", "helm", "hold", "horn", "keep",
            "mount", "peak", "perch", "ridge", "rock", "spire", "stone", "summit",
            "top", "tower", "view", "watch", "wind",
        ],
    ),
    "inland": NamePools(
        prefixes=[
            "Amber", "Apple", "Autumn", "Barley", "Berry", "Briar", "Broad", "Copper",
            "Deer", "Dust", "Farm", "Fawn", "Field", "Fox", "Gold", "Grain", "Grass",
            "Green", "Harvest", "Hay", "Hearth", "Hedge", "Herd", "Honey", "Meadow",
            "Oak", "Oxen", "Pasture", "Plow", "Prairie", "Quiet", "Rye", "Shepherd",
            "Shire", "Wheat", "Wild", "Wood",
        ],
        suffixes=[
            "acre", "barn", "borough", "bury", "dale", "farm", "field", "fold",
            "garden", "glade", "green", "grove", "hamlet", "hearth", "hill", "home",
            "hurst", "land", "lea", "meadow", "mill", "plain", "ranch", "rest",
            "shade", "shire", "stead", "thwaite", "vale", "village", "wood",
        ],
    ),
}


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:]


class TownNameGenerator:
    """Generates unique settlement names from location-aware patterns."""

    def __init__(self, seed: int):
        """Initialize with its own AleaPRNG stream seeded from ``seed``."""
        self.prng = AleaPRNG(seed)
        self.used_names: Set[str] = set()

    def generate_name(self, settlement_type: str) -> str:
        """Generate a unique name for a settlement of the given placement type.

        Args:
            settlement_type: shoreline, river, elevation or inland

        Returns:
            A name not returned before by this generator
        """
        settlement_type = getattr(settlement_type, "value", settlement_type)

        name = self._create_name(settlement_type)
        attempts = 1
        while name in self.used_names and attempts < MAX_NAME_ATTEMPTS:
            name = self._create_name(settlement_type)
            attempts += 1

        if name in self.used_names:
            num = 2
            while f"{name} {num}" in self.used_names:
                num += 1
            name = f"{name} {num}"

        self.used_names.add(name)
        return name

    def reset(self) -> None:
        """Forget used names (for regeneration)."""
        self.used_names.clear()

    def _create_name(self, settlement_type: str) -> str:
        # Feature-based names are more likely (60% chance)
        if self.prng.random() < 0.6:
            return self._create_feature_based_name(settlement_type)
        return self._pick(PREFIXES) + self._pick(SUFFIXES)

    def _create_feature_based_name(self, settlement_type: str) -> str:
        pattern = self._select_pattern()
        pools = self._get_feature_pools(settlement_type)

        if pattern is NamePattern.FEATURE_GENERIC:
            return f"{self._pick(pools.prefixes)} {self._pick(GENERIC_PLACES)}"

        if pattern is NamePattern.THE_PLACE:
            if self.prng.random() < 0.5 and pools.suffixes:
                return f"The {_capitalize(self._pick(pools.suffixes))}"
            return f"The {self._pick(THE_PLACES)}"

        if pattern is NamePattern.POSSESSIVE:
            possessive = self._pick(POSSESSIVE_NAMES)
            if self.prng.random() < 0.5 and pools.suffixes:
                place = _capitalize(self._pick(pools.suffixes))
            else:
                place = self._pick(POSSESSIVE_PLACES)
            return f"{possessive} {place}"

        if pattern is NamePattern.DESCRIPTIVE:
            adjective = self._pick(DESCRIPTIVES)
            if self.prng.random() < 0.5:
                noun = self._pick(pools.prefixes)
            else:
                noun = _capitalize(self._pick(pools.suffixes))
            return f"{adjective} {noun}"

        if pattern is NamePattern.COMPOUND:
            prefix = self._pick(PREFIXES)
            middle = self._pick(pools.prefixes).lower()
            return f"{prefix}{middle} {self._pick(COMPOUND_ENDINGS)}"

        # Mix feature-specific with generic for variety
        use_feature_prefix = self.prng.random() < 0.7
        use_feature_suffix = self.prng.random() < 0.7
        prefix = self._pick(pools.prefixes) if use_feature_prefix else self._pick(PREFIXES)
        suffix = self._pick(pools.suffixes) if use_feature_suffix else self._pick(SUFFIXES)
        return prefix + suffix

    def _select_pattern(self) -> NamePattern:
        roll = self.prng.random()
        if roll < 0.35:
            return NamePattern.PREFIX_SUFFIX
        if roll < 0.50:
            return NamePattern.DESCRIPTIVE
        if roll < 0.65:
            return NamePattern.POSSESSIVE
        if roll < 0.80:
            return NamePattern.COMPOUND
        if roll < 0.90:
            return NamePattern.THE_PLACE
        return NamePattern.FEATURE_GENERIC

    @staticmethod
    def _get_feature_pools(settlement_type: str) -> NamePools:
        return FEATURE_POOLS.get(settlement_type, FEATURE_POOLS["inland"])

    def _pick(self, words: List[str]) -> str:
        return words[self.prng.randint(0, len(words) - 1)]


def generate_town_names(settlements: Iterable, seed: int) -> Dict[int, str]:
    """
    Fresh names for a batch of settlements.

    Args:
        settlements: Objects with ``id`` and ``type`` attributes
        seed: Seed for the name stream

    Returns:
        Mapping of settlement id to name
    """
    generator = TownNameGenerator(seed)
    return {s.id: generator.generate_name(s.type) for s in settlements}
