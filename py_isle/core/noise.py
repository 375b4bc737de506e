"""
Coherent noise for coastline irregularity.

2D simplex noise (Gustavson's formulation) with a permutation table drawn
from the map's AleaPRNG, plus a fractal sum of octaves. Both functions
accept scalars or numpy arrays of coordinates.
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray

from .alea_prng import AleaPRNG

_F2 = 0.5 * (np.sqrt(3.0) - 1.0)
_G2 = (3.0 - np.sqrt(3.0)) / 6.0

_GRADIENTS = np.array(
    [
        [1, 1], [-1, 1], [1, -1], [-1, -1],
        [1, 0], [-1, 0], [1, 0], [-1, 0],
        [0, 1], [0, -1], [0, 1], [0, -1],
    ],
    dtype=np.float64,
)


class SimplexNoise:
    """Seeded 2D simplex noise."""

    def __init__(self, prng: AleaPRNG):
        """
        Build the permutation table.

        Args:
            prng: Generator the table is shuffled with; consumes 255 draws
        """
        table = list(range(256))
        prng.shuffle(table)
        self.perm = np.array(table + table, dtype=np.int64)
        self.perm_mod12 = self.perm % 12

    def noise2d(self, x: ArrayLike, y: ArrayLike) -> NDArray[np.float64]:
        """
        Evaluate noise at (x, y).

        Returns:
            Values roughly in [-1, 1], same shape as the broadcast inputs
        """
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)

        # Skew into simplex space to find the containing cell
        s = (x + y) * _F2
        i = np.floor(x + s)
        j = np.floor(y + s)
        t = (i + j) * _G2
        x0 = x - (i - t)
        y0 = y - (j - t)

        # Which of the two triangles of the cell we are in
        i1 = (x0 > y0).astype(np.int64)
        j1 = 1 - i1

        x1 = x0 - i1 + _G2
        y1 = y0 - j1 + _G2
        x2 = x0 - 1.0 + 2.0 * _G2
        y2 = y0 - 1.0 + 2.0 * _G2

        ii = i.astype(np.int64) & 255
        jj = j.astype(np.int64) & 255
        gi0 = self.perm_mod12[ii + self.perm[jj]]
        gi1 = self.perm_mod12[ii + i1 + self.perm[jj + j1]]
        gi2 = self.perm_mod12[ii + 1 + self.perm[jj + 1]]

        n0 = self._contribution(gi0, x0, y0)
        n1 = self._contribution(gi1, x1, y1)
        n2 = self._contribution(gi2, x2, y2)

        return 70.0 * (n0 + n1 + n2)

    @staticmethod
    def _contribution(gi, dx, dy):
        t = 0.5 - dx * dx - dy * dy
        grad = _GRADIENTS[gi]
        dot = grad[..., 0] * dx + grad[..., 1] * dy
        t = np.where(t < 0, 0.0, t)
        return t ** 4 * dot

    def fbm(self, x: ArrayLike, y: ArrayLike, octaves: int = 4) -> NDArray[np.float64]:
        """
        Fractal Brownian motion: octaves at doubling frequency, halving amplitude.

        Args:
            x, y: Sample coordinates
            octaves: Number of noise layers to sum

        Returns:
            Sum normalized by the total amplitude, roughly in [-1, 1]
        """
        value = np.zeros(np.broadcast(np.asarray(x), np.asarray(y)).shape)
        amplitude = 1.0
        frequency = 1.0
        max_value = 0.0

        for _ in range(octaves):
            value = value + amplitude * self.noise2d(
                np.asarray(x) * frequency, np.asarray(y) * frequency
            )
            max_value += amplitude
            amplitude *= 0.5
            frequency *= 2.0

        if max_value == 0:
            return value
        return value / max_value
