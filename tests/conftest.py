"""
Shared fixtures
"""

import numpy as np
import pytest

from racer import Checkpoint, Track, Vector2D, Wall
from racer.training import SimulatedClock


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded random generator"""
    return np.random.default_rng(1234)


@pytest.fixture
def clock() -> SimulatedClock:
    """Clock advancing one 16 ms step per read"""
    return SimulatedClock()


@pytest.fixture
def corridor() -> Track:
    """Straight corridor along +x, walls at y = +-50, checkpoints every 100 units"""
    walls = [
        Wall(Vector2D(-100.0, -50.0), Vector2D(1000.0, -50.0)),
        Wall(Vector2D(-100.0, 50.0), Vector2D(1000.0, 50.0)),
    ]
    checkpoints = [
        Checkpoint(Vector2D(100.0 * (i + 1), -50.0), Vector2D(100.0 * (i + 1), 50.0), id=i)
        for i in range(5)
    ]
    return Track(walls, checkpoints, start_position=Vector2D(0.0, 0.0), start_angle=0.0)
