"""
Random number generation utilities.

Every stage that needs randomness gets its own AleaPRNG instance, built
from the map seed plus a fixed stage offset. There is no module-level
generator: two stages never share hidden state.
"""

from ..core.alea_prng import AleaPRNG

# Offsets added to the map seed for the stages that run on their own stream
NOISY_EDGES_SEED_OFFSET = 77777
ROADS_SEED_OFFSET = 9999


def derive_seed(seed: int, offset: int) -> int:
    """
    Build a stage sub-seed from the map seed.

    Args:
        seed: Map (or caller-supplied) seed
        offset: Stage-specific constant

    Returns:
        Integer seed for the stage generator
    """
    return int(seed) + offset


def stage_prng(seed: int, offset: int = 0) -> AleaPRNG:
    """
    Create the Alea PRNG for one stage.

    Args:
        seed: Map (or caller-supplied) seed
        offset: Stage-specific constant, 0 for the main map stream

    Returns:
        Fresh AleaPRNG instance
    """
    return AleaPRNG(derive_seed(seed, offset))
