"""
Track suppliers
"""

import numpy as np

from racer.errors import InvalidConfigurationError
from racer.state import Checkpoint, Track, Vector2D, Wall


def _ring(cx: float, cy: float, radius: float, segments: int) -> list:
    """Closed polygon of ``segments`` walls approximating a circle"""
    angles = np.linspace(0.0, 2 * np.pi, segments + 1)
    points = [Vector2D(float(cx + np.cos(a) * radius), float(cy + np.sin(a) * radius)) for a in angles]
    return [Wall(points[i], points[i + 1]) for i in range(segments)]


def create_oval_track(
    width: float = 600.0,
    height: float = 600.0,
    segments: int = 64,
    checkpoint_count: int = 24,
) -> Track:
    """
    Circular ring track centred in a ``width`` x ``height`` area

    Outer radius is 40% and inner radius 25% of the smaller dimension.
    Checkpoints are radial gates with ids increasing in the direction of
    travel; the start pose sits mid-ring on checkpoint 0, heading along
    the ring.
    """
    if width <= 0 or height <= 0 or segments < 3 or checkpoint_count < 1:
        raise InvalidConfigurationError("track dimensions and counts must be positive")

    cx = width / 2
    cy = height / 2
    outer_radius = min(width, height) * 0.4
    inner_radius = min(width, height) * 0.25

    walls = _ring(cx, cy, outer_radius, segments) + _ring(cx, cy, inner_radius, segments)

    checkpoints = []
    for i in range(checkpoint_count):
        angle = 2 * np.pi * i / checkpoint_count
        direction = Vector2D(float(np.cos(angle)), float(np.sin(angle)))
        checkpoints.append(
            Checkpoint(
                start=Vector2D(cx + direction.x * inner_radius, cy + direction.y * inner_radius),
                end=Vector2D(cx + direction.x * outer_radius, cy + direction.y * outer_radius),
                id=i,
            )
        )

    return Track(
        walls=walls,
        checkpoints=checkpoints,
        start_position=Vector2D(cx + (inner_radius + outer_radius) / 2, cy),
        start_angle=np.pi / 2,
    )
