"""Shared fixtures: maps are expensive, so they are built once per session."""

import pytest

from py_isle.core.generator import generate


@pytest.fixture(scope="session")
def small_map():
    """The reference scenario: seed 12345, 800x600, 500 points, 10 rivers."""
    return generate(seed=12345, width=800, height=600, num_points=500, river_count=10)


@pytest.fixture(scope="session")
def default_map():
    """A full-size map with default options."""
    return generate()
