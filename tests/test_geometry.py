"""
Unit tests for vector and segment geometry.
"""

import math

import numpy as np
import pytest

from racer.geometry import (
    distance,
    line_intersection,
    normalize,
    point_to_segment_distance,
    point_to_segments_distance,
    ray_intersections,
    rotate,
)
from racer.state import Vector2D


class TestVectorPrimitives:
    """Test suite for distance, normalize and rotate"""

    def test_distance(self) -> None:
        """Test the 3-4-5 triangle"""
        assert distance(Vector2D(0.0, 0.0), Vector2D(3.0, 4.0)) == 5.0

    def test_normalize_unit_length(self) -> None:
        """Test that normalize gives a unit vector"""
        v = normalize(Vector2D(3.0, 4.0))

        assert abs(v.x - 0.6) < 1e-12
        assert abs(v.y - 0.8) < 1e-12

    def test_normalize_zero_vector(self) -> None:
        """Test that the zero vector normalizes to itself instead of dividing by zero"""
        assert normalize(Vector2D(0.0, 0.0)) == Vector2D(0.0, 0.0)

    def test_rotate_quarter_turn(self) -> None:
        """Test that rotate turns counter-clockwise"""
        v = rotate(Vector2D(1.0, 0.0), math.pi / 2)

        assert abs(v.x) < 1e-12
        assert abs(v.y - 1.0) < 1e-12


class TestLineIntersection:
    """Test suite for segment-segment intersection"""

    def test_crossing_segments(self) -> None:
        """Test the canonical crossing at (5, 0)"""
        point = line_intersection(
            Vector2D(0.0, 0.0), Vector2D(10.0, 0.0), Vector2D(5.0, -5.0), Vector2D(5.0, 5.0)
        )

        assert point is not None
        assert abs(point.x - 5.0) < 1e-12
        assert abs(point.y) < 1e-12

    def test_parallel_segments(self) -> None:
        """Test that parallel segments never intersect"""
        assert line_intersection(
            Vector2D(0.0, 0.0), Vector2D(10.0, 0.0), Vector2D(0.0, 1.0), Vector2D(10.0, 1.0)
        ) is None

    def test_collinear_segments(self) -> None:
        """Test that overlapping collinear segments are treated as parallel"""
        assert line_intersection(
            Vector2D(0.0, 0.0), Vector2D(10.0, 0.0), Vector2D(5.0, 0.0), Vector2D(15.0, 0.0)
        ) is None

    def test_intersection_outside_segment(self) -> None:
        """Test that lines crossing beyond a segment's end do not intersect"""
        assert line_intersection(
            Vector2D(0.0, 0.0), Vector2D(4.0, 0.0), Vector2D(5.0, -5.0), Vector2D(5.0, 5.0)
        ) is None

    def test_touching_endpoint(self) -> None:
        """Test that parameters exactly at 0 or 1 still count"""
        point = line_intersection(
            Vector2D(0.0, 0.0), Vector2D(5.0, 0.0), Vector2D(5.0, -5.0), Vector2D(5.0, 5.0)
        )

        assert point == Vector2D(5.0, 0.0)

    def test_vectorised_matches_scalar(self) -> None:
        """Test that the batch form agrees with the scalar form"""
        origin, end = Vector2D(0.0, 0.0), Vector2D(10.0, 0.0)
        segments = np.array([
            [5.0, -5.0, 5.0, 5.0],  # crosses at t = 0.5
            [0.0, 1.0, 10.0, 1.0],  # parallel
            [20.0, -5.0, 20.0, 5.0],  # beyond the ray
            [2.0, -1.0, 2.0, 1.0],  # crosses at t = 0.2
        ])

        t, hit_mask = ray_intersections(origin, end, segments)

        assert hit_mask.tolist() == [True, False, False, True]
        assert abs(t[0] - 0.5) < 1e-12
        assert abs(t[3] - 0.2) < 1e-12

    def test_vectorised_empty(self) -> None:
        """Test that an empty segment array gives empty results"""
        t, hit_mask = ray_intersections(Vector2D(0.0, 0.0), Vector2D(1.0, 0.0), np.empty((0, 4)))

        assert len(t) == 0
        assert not hit_mask.any()


class TestPointToSegmentDistance:
    """Test suite for point-to-segment distance"""

    def test_perpendicular_projection(self) -> None:
        """Test that a point beside the segment measures straight across"""
        d = point_to_segment_distance(Vector2D(5.0, 3.0), Vector2D(0.0, 0.0), Vector2D(10.0, 0.0))

        assert abs(d - 3.0) < 1e-12

    def test_projection_clamped_to_endpoint(self) -> None:
        """Test that points beyond the segment measure to the nearest endpoint"""
        d = point_to_segment_distance(Vector2D(13.0, 4.0), Vector2D(0.0, 0.0), Vector2D(10.0, 0.0))

        assert abs(d - 5.0) < 1e-12

    def test_zero_length_segment(self) -> None:
        """Test that a degenerate segment measures to its single point"""
        d = point_to_segment_distance(Vector2D(3.0, 4.0), Vector2D(0.0, 0.0), Vector2D(0.0, 0.0))

        assert d == 5.0

    def test_vectorised_matches_scalar(self) -> None:
        """Test that the batch form agrees with the scalar form"""
        p = Vector2D(3.0, 4.0)
        segments = np.array([
            [0.0, 0.0, 10.0, 0.0],
            [0.0, 0.0, 0.0, 0.0],
            [10.0, 10.0, 20.0, 10.0],
        ])

        distances = point_to_segments_distance(p, segments)
        expected = [
            point_to_segment_distance(p, Vector2D(r[0], r[1]), Vector2D(r[2], r[3])) for r in segments
        ]

        np.testing.assert_allclose(distances, expected)

    @pytest.mark.parametrize("x", [-5.0, 0.0, 2.5, 10.0, 15.0])
    def test_distance_never_negative(self, x: float) -> None:
        """Test that distances are never negative"""
        assert point_to_segment_distance(Vector2D(x, -1.0), Vector2D(0.0, 0.0), Vector2D(10.0, 0.0)) >= 0
