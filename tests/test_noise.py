"""Tests for seeded simplex noise."""

import numpy as np

from py_isle.core.alea_prng import AleaPRNG
from py_isle.core.noise import SimplexNoise


class TestSimplexNoise:
    """Test noise determinism and value ranges."""

    def test_permutation_table(self):
        noise = SimplexNoise(AleaPRNG(1))
        assert len(noise.perm) == 512
        assert sorted(noise.perm[:256].tolist()) == list(range(256))
        np.testing.assert_array_equal(noise.perm[:256], noise.perm[256:])

    def test_consumes_shuffle_draws(self):
        prng = AleaPRNG(1)
        SimplexNoise(prng)
        assert prng.call_count == 255

    def test_deterministic(self):
        xs = np.linspace(0, 10, 50)
        ys = np.linspace(5, -5, 50)
        a = SimplexNoise(AleaPRNG(42)).noise2d(xs, ys)
        b = SimplexNoise(AleaPRNG(42)).noise2d(xs, ys)
        np.testing.assert_array_equal(a, b)

    def test_seed_changes_field(self):
        xs = np.linspace(0.1, 10.1, 50)
        ys = np.linspace(0.3, 7.3, 50)
        a = SimplexNoise(AleaPRNG(1)).noise2d(xs, ys)
        b = SimplexNoise(AleaPRNG(2)).noise2d(xs, ys)
        assert not np.array_equal(a, b)

    def test_range(self):
        rng = np.random.default_rng(0)
        xs = rng.uniform(-100, 100, 2000)
        ys = rng.uniform(-100, 100, 2000)
        values = SimplexNoise(AleaPRNG(3)).noise2d(xs, ys)
        assert np.all(values >= -1.0)
        assert np.all(values <= 1.0)

    def test_scalar_input(self):
        value = SimplexNoise(AleaPRNG(3)).noise2d(0.5, 0.25)
        assert np.shape(value) == ()

    def test_zero_at_lattice_origin(self):
        value = SimplexNoise(AleaPRNG(3)).noise2d(0.0, 0.0)
        assert abs(float(value)) < 1e-12

    def test_fbm_normalized(self):
        rng = np.random.default_rng(1)
        xs = rng.uniform(0, 8, 1000)
        ys = rng.uniform(0, 6, 1000)
        values = SimplexNoise(AleaPRNG(4)).fbm(xs, ys, octaves=4)
        assert values.shape == (1000,)
        assert np.all(np.abs(values) <= 1.0)

    def test_fbm_single_octave_is_noise(self):
        noise = SimplexNoise(AleaPRNG(5))
        xs = np.array([0.3, 1.7, 4.2])
        ys = np.array([2.1, 0.4, 3.3])
        np.testing.assert_allclose(noise.fbm(xs, ys, octaves=1), noise.noise2d(xs, ys))
