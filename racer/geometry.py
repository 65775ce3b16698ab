"""
Planar vector math and segment geometry
"""

from dataclasses import dataclass
from typing import Optional, Tuple
import math
import numpy as np

PARALLEL_EPSILON = 1e-10


@dataclass(frozen=True)
class Vector2D:
    """Planar point or direction"""

    x: float
    y: float


def distance(p1: Vector2D, p2: Vector2D) -> float:
    """Euclidean distance between two points"""
    return math.hypot(p1.x - p2.x, p1.y - p2.y)


def normalize(vector: Vector2D) -> Vector2D:
    """Unit vector in the direction of ``vector``; the zero vector maps to itself"""
    length = math.hypot(vector.x, vector.y)
    if length == 0:
        return Vector2D(0.0, 0.0)
    return Vector2D(vector.x / length, vector.y / length)


def rotate(point: Vector2D, angle: float) -> Vector2D:
    """Rotate ``point`` about the origin by ``angle`` radians (counter-clockwise)"""
    cos = math.cos(angle)
    sin = math.sin(angle)
    return Vector2D(point.x * cos - point.y * sin, point.x * sin + point.y * cos)


def line_intersection(
    a1: Vector2D, a2: Vector2D, b1: Vector2D, b2: Vector2D
) -> Optional[Vector2D]:
    """
    Intersection point of segments a1-a2 and b1-b2

    Args:
        a1, a2: First segment endpoints
        b1, b2: Second segment endpoints

    Returns:
        Intersection point, or None when the segments are parallel or the
        crossing lies outside either segment
    """
    denom = (a1.x - a2.x) * (b1.y - b2.y) - (a1.y - a2.y) * (b1.x - b2.x)
    if abs(denom) < PARALLEL_EPSILON:
        return None

    t = ((a1.x - b1.x) * (b1.y - b2.y) - (a1.y - b1.y) * (b1.x - b2.x)) / denom
    u = -((a1.x - a2.x) * (a1.y - b1.y) - (a1.y - a2.y) * (a1.x - b1.x)) / denom

    if 0.0 <= t <= 1.0 and 0.0 <= u <= 1.0:
        return Vector2D(a1.x + t * (a2.x - a1.x), a1.y + t * (a2.y - a1.y))
    return None


def point_to_segment_distance(p: Vector2D, s1: Vector2D, s2: Vector2D) -> float:
    """
    Shortest distance from ``p`` to segment s1-s2

    The projection parameter is clamped to [0, 1]. A zero-length segment
    degenerates to the distance to its single point.
    """
    ax = p.x - s1.x
    ay = p.y - s1.y
    cx = s2.x - s1.x
    cy = s2.y - s1.y

    len_sq = cx * cx + cy * cy
    if len_sq == 0:
        return math.hypot(ax, ay)

    param = max(0.0, min(1.0, (ax * cx + ay * cy) / len_sq))
    return math.hypot(p.x - (s1.x + param * cx), p.y - (s1.y + param * cy))


def ray_intersections(
    origin: Vector2D, end: Vector2D, segments: np.ndarray
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Intersect one segment against many at once

    Same arithmetic as ``line_intersection``, evaluated over an [N x 4]
    array of (x1, y1, x2, y2) rows.

    Args:
        origin: Ray start
        end: Ray end
        segments: [N x 4] segment array

    Returns:
        Tuple of (t, hit_mask): t is the parameter along origin->end for
        each segment, hit_mask marks segments actually crossed
    """
    if len(segments) == 0:
        return np.empty(0), np.zeros(0, dtype=bool)

    x3, y3, x4, y4 = segments[:, 0], segments[:, 1], segments[:, 2], segments[:, 3]
    x1, y1, x2, y2 = origin.x, origin.y, end.x, end.y

    denom = (x1 - x2) * (y3 - y4) - (y1 - y2) * (x3 - x4)
    parallel = np.abs(denom) < PARALLEL_EPSILON
    safe_denom = np.where(parallel, 1.0, denom)

    t = ((x1 - x3) * (y3 - y4) - (y1 - y3) * (x3 - x4)) / safe_denom
    u = -((x1 - x2) * (y1 - y3) - (y1 - y2) * (x1 - x3)) / safe_denom

    hit_mask = ~parallel & (t >= 0.0) & (t <= 1.0) & (u >= 0.0) & (u <= 1.0)
    return t, hit_mask


def point_to_segments_distance(p: Vector2D, segments: np.ndarray) -> np.ndarray:
    """Vectorised ``point_to_segment_distance`` over an [N x 4] segment array"""
    if len(segments) == 0:
        return np.empty(0)

    sx, sy = segments[:, 0], segments[:, 1]
    cx = segments[:, 2] - sx
    cy = segments[:, 3] - sy
    ax = p.x - sx
    ay = p.y - sy

    len_sq = cx * cx + cy * cy
    degenerate = len_sq == 0
    param = np.where(degenerate, 0.0, (ax * cx + ay * cy) / np.where(degenerate, 1.0, len_sq))
    param = np.clip(param, 0.0, 1.0)

    return np.hypot(ax - param * cx, ay - param * cy)


def segment_array(segments) -> np.ndarray:
    """
    [N x 4] array for a sequence of Wall/Checkpoint segments

    Arrays are passed through unchanged.
    """
    if isinstance(segments, np.ndarray):
        return segments
    return np.array(
        [[s.start.x, s.start.y, s.end.x, s.end.y] for s in segments], dtype=float
    ).reshape(-1, 4)
