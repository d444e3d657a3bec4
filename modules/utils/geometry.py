"""
Pure 2D/3D geometry primitives shared by the recognition modules.

All helpers accept numpy arrays or plain sequences and never raise on a
zero denominator; callers pick the fallback value.
"""

import math
import numpy as np

EPSILON = 1e-6


def distance_2d(a, b) -> float:
    """Euclidean distance using only the x/y components."""
    return float(math.hypot(float(a[0]) - float(b[0]), float(a[1]) - float(b[1])))


def distance_3d(a, b) -> float:
    """Euclidean distance between two 3D points."""
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    return float(np.linalg.norm(a[:3] - b[:3]))


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def safe_ratio(numerator: float, denominator: float, default: float = 0.0) -> float:
    """numerator / denominator, or `default` when the denominator is ~0."""
    if abs(denominator) < EPSILON:
        return default
    return numerator / denominator


def polar_from_center(x: float, y: float, cx: float = 0.5, cy: float = 0.5,
                      radius: float = 0.5) -> tuple:
    """Screen-space polar coordinates of (x, y) around a centre point.

    Angle is measured clockwise from "up" (0 = up, 90 = right, 180 = down,
    270 = left) and rounded to whole degrees. Distance is 0 at the centre
    and 100 at `radius`, capped at 100.

    Returns:
        (angle, distance) as ints
    """
    dx = x - cx
    dy = y - cy
    raw = math.hypot(dx, dy)
    distance = min(100, int(round(raw / radius * 100)))

    angle = int(round(math.degrees(math.atan2(dy, dx)) + 90))
    if angle < 0:
        angle += 360
    return angle % 360, distance


def signed_angle(dx: float, dy: float) -> float:
    """atan2(dy, dx) in radians."""
    return math.atan2(dy, dx)


def lerp(current, target, factor: float):
    """Exponential smoothing step: move `current` toward `target` by `factor`."""
    return current + (target - current) * factor
