from __future__ import annotations

import math


def clamp(value: float, low: float, high: float) -> float:
    if value < low:
        return low
    if value > high:
        return high
    return value


def clamp01(value: float) -> float:
    return clamp(value, 0.0, 1.0)


def safe_asin(value: float) -> float:
    """`math.asin` with the argument clamped into [-1, 1].

    Ratios such as `radius / distance` can land a few ulps past 1.0 when the two
    are nearly equal.
    """

    return math.asin(clamp(float(value), -1.0, 1.0))


def safe_sqrt(value: float) -> float:
    if value <= 0.0:
        return 0.0
    return math.sqrt(value)
