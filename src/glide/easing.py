"""Eased interpolation of cursor positions over a time span."""

from __future__ import annotations

from enum import Enum
from typing import Protocol

from easing_functions import CubicEaseInOut, QuadEaseIn, QuadEaseOut

from .geom import Vec2
from .math import clamp01


class _EasingCallable(Protocol):
    def ease(self, alpha: float) -> float: ...


class Easing(Enum):
    NONE = "none"
    IN = "in"
    OUT = "out"
    IN_OUT_CUBIC = "in_out_cubic"


_CURVES: dict[Easing, _EasingCallable] = {
    Easing.IN: QuadEaseIn(start=0.0, end=1.0, duration=1.0),
    Easing.OUT: QuadEaseOut(start=0.0, end=1.0, duration=1.0),
    Easing.IN_OUT_CUBIC: CubicEaseInOut(start=0.0, end=1.0, duration=1.0),
}


def ease(easing: Easing, progress: float) -> float:
    """Map linear progress in [0, 1] through the easing curve."""
    progress = clamp01(float(progress))
    curve = _CURVES.get(easing)
    if curve is None:
        return progress
    return float(curve.ease(progress))


def value_at(
    time: float,
    start_value: Vec2,
    end_value: Vec2,
    start_time: float,
    end_time: float,
    easing: Easing = Easing.NONE,
) -> Vec2:
    if time >= end_time:
        return end_value
    if time <= start_time:
        return start_value
    span = float(end_time) - float(start_time)
    return Vec2.lerp(start_value, end_value, ease(easing, (float(time) - float(start_time)) / span))
