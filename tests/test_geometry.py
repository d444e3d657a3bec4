"""
Tests for geometry primitives
=============================
"""

import math
import pytest
import numpy as np
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from modules.utils.geometry import (
    distance_2d, distance_3d, clamp, safe_ratio, polar_from_center, signed_angle, lerp,
)


class TestDistances:
    def test_distance_2d_ignores_z(self):
        assert distance_2d((0, 0, 5), (3, 4, -5)) == pytest.approx(5.0)

    def test_distance_3d(self):
        assert distance_3d((0, 0, 0), (1, 2, 2)) == pytest.approx(3.0)

    def test_distance_accepts_arrays(self):
        a = np.array([0.1, 0.2, 0.3])
        assert distance_3d(a, a) == 0.0


class TestScalarHelpers:
    def test_clamp(self):
        assert clamp(-0.2) == 0.0
        assert clamp(1.7) == 1.0
        assert clamp(0.3) == 0.3
        assert clamp(5, -1, 2) == 2

    def test_safe_ratio_zero_denominator(self):
        assert safe_ratio(1.0, 0.0) == 0.0
        assert safe_ratio(1.0, 1e-9, default=-1.0) == -1.0

    def test_safe_ratio_normal(self):
        assert safe_ratio(1.0, 4.0) == pytest.approx(0.25)

    def test_signed_angle(self):
        assert signed_angle(1.0, 0.0) == pytest.approx(0.0)
        assert signed_angle(0.0, 1.0) == pytest.approx(math.pi / 2)

    def test_lerp(self):
        assert lerp(0.0, 10.0, 0.1) == pytest.approx(1.0)
        assert lerp(5.0, 5.0, 0.1) == pytest.approx(5.0)


class TestPolar:
    """Clockwise-from-up angle and 0..100 distance around (0.5, 0.5)."""

    def test_center_has_zero_distance(self):
        angle, distance = polar_from_center(0.5, 0.5)
        assert distance == 0
        assert 0 <= angle < 360

    @pytest.mark.parametrize("x,y,expected_angle", [
        (0.5, 0.0, 0),      # up
        (1.0, 0.5, 90),     # right
        (0.5, 1.0, 180),    # down
        (0.0, 0.5, 270),    # left
    ])
    def test_cardinal_directions(self, x, y, expected_angle):
        angle, distance = polar_from_center(x, y)
        assert angle == expected_angle
        assert distance == 100

    @pytest.mark.parametrize("x,y,expected_angle", [
        (1.0, 0.0, 45),
        (1.0, 1.0, 135),
        (0.0, 1.0, 225),
        (0.0, 0.0, 315),
    ])
    def test_corners_are_capped(self, x, y, expected_angle):
        angle, distance = polar_from_center(x, y)
        assert angle == expected_angle
        assert distance == 100

    def test_half_radius(self):
        assert polar_from_center(0.75, 0.5) == (90, 50)

    def test_range_over_grid(self):
        for x in np.linspace(0.0, 1.0, 21):
            for y in np.linspace(0.0, 1.0, 21):
                angle, distance = polar_from_center(float(x), float(y))
                assert 0 <= angle < 360
                assert 0 <= distance <= 100
                assert isinstance(angle, int) and isinstance(distance, int)
