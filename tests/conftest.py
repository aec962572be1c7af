"""Pytest configuration - headless pygame / matplotlib and shared fixtures."""
import os

# Must be set before pygame opens anything.
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest

from parameters import GalaxyParameters


@pytest.fixture
def params():
    """Fresh parameter store with the startup defaults."""
    return GalaxyParameters()


@pytest.fixture
def rng():
    """Seeded generator so runs are repeatable."""
    return np.random.default_rng(1234)


@pytest.fixture
def shape_params():
    """The parameter set the per-mode bound checks use."""
    return GalaxyParameters(count=1000, radius=5, branches=3, spin=1, randomnessPower=3)
