"""Root conftest.py - Shared pytest fixtures for all tests."""

import matplotlib
import numpy as np
import pytest

matplotlib.use('Agg')


@pytest.fixture
def rng():
    """Seeded random number generator for reproducibility."""
    return np.random.default_rng(42)
