"""
Wall collision and checkpoint contact tests
"""

from typing import Optional, Sequence

import numpy as np

from racer.geometry import point_to_segments_distance, segment_array
from racer.state import Car, Checkpoint


def check_wall_collision(car: Car, walls, collision_radius: float) -> bool:
    """
    True iff the car centre is closer than ``collision_radius`` to any wall

    Args:
        car: Car to test
        walls: Track walls, as Wall objects or an [N x 4] segment array
        collision_radius: Contact distance (units)
    """
    distances = point_to_segments_distance(car.position, segment_array(walls))
    return bool(np.any(distances < collision_radius))


def check_checkpoint_collisions(
    car: Car,
    checkpoints: Sequence[Checkpoint],
    collision_radius: float,
    segments: Optional[np.ndarray] = None,
) -> bool:
    """
    Credit the car for the next checkpoint in sequence, if it touches it

    Only the checkpoint whose id equals ``checkpoints_passed`` modulo the
    checkpoint count counts; touching any other checkpoint is a no-op.
    At most one checkpoint is credited per call.

    Args:
        car: Car updated in place
        checkpoints: Track checkpoints in sequence order
        collision_radius: Contact distance (units)
        segments: Optional precomputed [N x 4] array for ``checkpoints``

    Returns:
        True if ``checkpoints_passed`` was advanced
    """
    if not checkpoints:
        return False

    expected_id = car.checkpoints_passed % len(checkpoints)
    if segments is None:
        segments = segment_array(checkpoints)
    distances = point_to_segments_distance(car.position, segments)

    for checkpoint, dist in zip(checkpoints, distances):
        if dist < collision_radius and checkpoint.id == expected_id:
            car.checkpoints_passed += 1
            return True
    return False
