"""Playable objects consumed by the generator.

Three kinds exist: instantaneous point targets, path targets that must be
followed for their duration, and rotation targets that must be spun around a
fixed centre. Objects are read-only inputs; the generator never mutates them.
"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import TypeAlias

from glide.geom import Vec2
from glide.math import clamp01

DEFAULT_OBJECT_RADIUS = 32.0
# Ticks closer than this many milliseconds of travel to a span end are skipped.
TICK_END_CLEARANCE_MS = 10.0


class AutoplayInputError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class PointTarget:
    start_time: float
    position: Vec2
    radius: float = DEFAULT_OBJECT_RADIUS

    @property
    def end_time(self) -> float:
        return self.start_time

    @property
    def end_position(self) -> Vec2:
        return self.position


@dataclass(frozen=True, slots=True)
class PathTick:
    time: float
    position: Vec2


@dataclass(frozen=True, slots=True)
class PathTarget:
    """A target dragged along a polyline, optionally bouncing back and forth.

    `velocity` is in playfield units per millisecond. `length` trims (or extends
    along the last segment) the polyline to the expected travel distance; when
    omitted the polyline length is used.
    """

    start_time: float
    control_points: tuple[Vec2, ...]
    velocity: float
    repeat_count: int = 1
    length: float | None = None
    tick_distance: float = 0.0
    radius: float = DEFAULT_OBJECT_RADIUS
    _cumulative: tuple[float, ...] = field(init=False, repr=False, compare=False)
    _ticks: tuple[PathTick, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        points = tuple(self.control_points)
        if len(points) < 2:
            raise AutoplayInputError(f"path needs at least 2 control points, got {len(points)}")
        if not (float(self.velocity) > 0.0):
            raise AutoplayInputError(f"path velocity must be positive, got {self.velocity}")
        if int(self.repeat_count) < 1:
            raise AutoplayInputError(f"path repeat_count must be >= 1, got {self.repeat_count}")
        if float(self.tick_distance) < 0.0:
            raise AutoplayInputError(f"path tick_distance must be non-negative, got {self.tick_distance}")

        cumulative = [0.0]
        for prev, cur in zip(points, points[1:]):
            cumulative.append(cumulative[-1] + prev.distance_to(cur))
        object.__setattr__(self, "control_points", points)
        object.__setattr__(self, "_cumulative", tuple(cumulative))

        if self.length is not None and not (float(self.length) > 0.0):
            raise AutoplayInputError(f"path length must be positive, got {self.length}")
        if not (self.distance > 0.0):
            raise AutoplayInputError("path has zero length")
        object.__setattr__(self, "_ticks", tuple(self._build_ticks()))

    @property
    def position(self) -> Vec2:
        return self.control_points[0]

    @property
    def distance(self) -> float:
        if self.length is not None:
            return float(self.length)
        return float(self._cumulative[-1])

    @property
    def span_duration(self) -> float:
        return self.distance / float(self.velocity)

    @property
    def duration(self) -> float:
        return self.span_duration * int(self.repeat_count)

    @property
    def end_time(self) -> float:
        return float(self.start_time) + self.duration

    @property
    def end_position(self) -> Vec2:
        return self.position_at(1.0)

    @property
    def ticks(self) -> tuple[PathTick, ...]:
        return self._ticks

    def curve_position_at(self, progress: float) -> Vec2:
        """Point at `progress` of the travel distance along the polyline, ignoring repeats."""
        target = clamp01(progress) * self.distance
        cumulative = self._cumulative
        points = self.control_points
        segment = bisect_right(cumulative, target) - 1
        segment = max(0, min(segment, len(points) - 2))
        seg_start = cumulative[segment]
        seg_length = cumulative[segment + 1] - seg_start
        if seg_length <= 0.0:
            return points[segment]
        # Past the polyline end the last segment is extended.
        return Vec2.lerp(points[segment], points[segment + 1], (target - seg_start) / seg_length)

    def position_at(self, progress: float) -> Vec2:
        """Position at `progress` of the whole duration, bouncing on every repeat."""
        progress = clamp01(progress)
        repeat_count = int(self.repeat_count)
        span_index = int(progress * repeat_count)
        span_progress = (progress * repeat_count) % 1.0
        if span_index % 2 == 1:
            span_progress = 1.0 - span_progress
        return self.curve_position_at(span_progress)

    def _build_ticks(self) -> list[PathTick]:
        length = self.distance
        tick_distance = min(float(self.tick_distance), length)
        if tick_distance <= 0.0:
            return []
        min_distance_from_end = float(self.velocity) * TICK_END_CLEARANCE_MS
        span_duration = self.span_duration

        ticks: list[PathTick] = []
        for span in range(int(self.repeat_count)):
            span_start = float(self.start_time) + span * span_duration
            reversed_span = span % 2 == 1
            span_ticks: list[PathTick] = []
            step = 1
            while True:
                distance = tick_distance * step
                if distance > length - min_distance_from_end:
                    break
                distance_progress = distance / length
                time_progress = 1.0 - distance_progress if reversed_span else distance_progress
                span_ticks.append(
                    PathTick(
                        time=span_start + time_progress * span_duration,
                        position=self.curve_position_at(distance_progress),
                    )
                )
                step += 1
            if reversed_span:
                span_ticks.reverse()
            ticks.extend(span_ticks)
        return ticks


@dataclass(frozen=True, slots=True)
class RotationTarget:
    start_time: float
    end_time: float
    centre: Vec2 = field(default_factory=lambda: Vec2(256.0, 192.0))
    radius: float = DEFAULT_OBJECT_RADIUS

    def __post_init__(self) -> None:
        if float(self.end_time) < float(self.start_time):
            raise AutoplayInputError(
                f"rotation ends before it starts: start={self.start_time} end={self.end_time}"
            )

    @property
    def position(self) -> Vec2:
        return self.centre

    @property
    def end_position(self) -> Vec2:
        return self.centre

    @property
    def duration(self) -> float:
        return float(self.end_time) - float(self.start_time)


PlayableObject: TypeAlias = PointTarget | PathTarget | RotationTarget


def sort_by_end_time(objects: Iterable[PlayableObject]) -> list[PlayableObject]:
    """Stable sort by end time, the order the generator expects its input in."""
    return sorted(objects, key=lambda obj: float(obj.end_time))


def validate_objects(objects: Sequence[PlayableObject]) -> None:
    prev_end: float | None = None
    for index, obj in enumerate(objects):
        if not isinstance(obj, (PointTarget, PathTarget, RotationTarget)):
            raise AutoplayInputError(f"object {index} has unsupported type {type(obj).__name__}")
        end_time = float(obj.end_time)
        if prev_end is not None and end_time < prev_end:
            raise AutoplayInputError(
                f"objects must be sorted by end time: object {index} ends at {end_time} before {prev_end}"
            )
        prev_end = end_time
