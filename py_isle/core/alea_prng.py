"""
Python implementation of the Alea PRNG used for all map generation.

Based on Johannes Baagøe's Alea algorithm. The generator state is three
fractional registers plus a carry, mixed from the seed by the "Mash" hash,
so a given seed produces the same sequence on every platform. System
entropy is never consulted.
"""

from typing import Any, MutableSequence, Sequence, TypeVar

T = TypeVar("T")


def _uint32(n):
    """Convert to unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


class AleaPRNG:
    """
    Alea PRNG with the convenience helpers the generation stages need.

    Accepts an integer, a string, or an iterable of either as the seed.
    """

    def __init__(self, seed: Any):
        """Initialize with seed string or number."""
        self.call_count = 0

        if hasattr(seed, "__iter__") and not isinstance(seed, str):
            args = list(seed)
        else:
            args = [seed]

        mash_n = 0xEFC8249D  # 4022871197

        def mash(data):
            nonlocal mash_n
            data = str(data)
            for char in data:
                mash_n = mash_n + ord(char)
                h = 0.02519603282416938 * mash_n
                mash_n = _uint32(h)
                h -= mash_n
                h *= mash_n
                mash_n = _uint32(h)
                h -= mash_n
                mash_n += h * 0x100000000  # 2^32
            return _uint32(mash_n) * 2.3283064365386963e-10  # 2^-32

        self.s0 = mash(" ")
        self.s1 = mash(" ")
        self.s2 = mash(" ")
        self.c = 1

        for arg in args:
            self.s0 -= mash(arg)
            if self.s0 < 0:
                self.s0 += 1
            self.s1 -= mash(arg)
            if self.s1 < 0:
                self.s1 += 1
            self.s2 -= mash(arg)
            if self.s2 < 0:
                self.s2 += 1

    def random(self) -> float:
        """Generate next random number in [0, 1)."""
        self.call_count += 1
        t = 2091639 * self.s0 + self.c * 2.3283064365386963e-10  # 2^-32
        self.s0 = self.s1
        self.s1 = self.s2
        self.c = int(t)
        self.s2 = t - self.c
        return self.s2

    def uniform(self, lo: float, hi: float) -> float:
        """Random float in [lo, hi)."""
        return lo + self.random() * (hi - lo)

    def randint(self, lo: int, hi: int) -> int:
        """Random integer in [lo, hi], both ends inclusive."""
        return lo + int(self.random() * (hi - lo + 1))

    def shuffle(self, seq: MutableSequence[T]) -> MutableSequence[T]:
        """Fisher-Yates shuffle in place, walking from the end.

        Returns the same sequence for chaining.
        """
        for i in range(len(seq) - 1, 0, -1):
            j = self.randint(0, i)
            seq[i], seq[j] = seq[j], seq[i]
        return seq

    def choice(self, seq: Sequence[T]) -> T:
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[int(self.random() * len(seq))]

