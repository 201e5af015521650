from __future__ import annotations

from glide.geom import Vec2

from .objects import PathTarget, PlayableObject, PointTarget, RotationTarget, sort_by_end_time

SAMPLE_PATH_LENGTH = 200.0
SAMPLE_PATH_VELOCITY = 0.2
SAMPLE_TICK_DISTANCE = 100.0


def _path(start_time: float, start: tuple[float, float], end: tuple[float, float]) -> PathTarget:
    return PathTarget(
        start_time=start_time,
        control_points=(Vec2(*start), Vec2(*end)),
        velocity=SAMPLE_PATH_VELOCITY,
        length=SAMPLE_PATH_LENGTH,
        tick_distance=SAMPLE_TICK_DISTANCE,
    )


def two_b_sample_objects() -> list[PlayableObject]:
    """Chart exercising concurrent objects, sorted by end time.

    Sections, in order: two points at the same time; a path with points during
    it; a path with points on its tick and its end; two paths with
    non-overlapping ticks; two paths starting together; a rotation with points
    and a path during it.
    """

    objects: list[PlayableObject] = []
    time = 1500.0

    objects.append(PointTarget(time, Vec2(0.0, 0.0)))
    objects.append(PointTarget(time, Vec2(0.0, 100.0)))

    time += 1500.0
    objects.append(_path(time, (100.0, 0.0), (300.0, 0.0)))
    time += 250.0
    objects.append(PointTarget(time, Vec2(150.0, 100.0)))
    time += 500.0
    objects.append(PointTarget(time, Vec2(250.0, 100.0)))

    time += 1750.0
    objects.append(_path(time, (100.0, 200.0), (300.0, 200.0)))
    time += 500.0
    objects.append(PointTarget(time, Vec2(200.0, 300.0)))
    time += 500.0
    objects.append(PointTarget(time, Vec2(300.0, 300.0)))

    time += 1500.0
    objects.append(_path(time, (100.0, 0.0), (300.0, 0.0)))
    time += 250.0
    objects.append(_path(time, (150.0, 200.0), (350.0, 200.0)))

    time += 2250.0
    objects.append(_path(time, (100.0, 0.0), (300.0, 0.0)))
    objects.append(_path(time, (100.0, 200.0), (300.0, 200.0)))

    time += 2500.0
    objects.append(RotationTarget(time, time + 5000.0))
    time += 250.0
    objects.append(PointTarget(time, Vec2(100.0, 0.0)))
    time += 250.0
    objects.append(PointTarget(time, Vec2(200.0, 0.0)))
    time += 250.0
    objects.append(PointTarget(time, Vec2(300.0, 0.0)))
    time += 250.0
    objects.append(_path(time, (400.0, 0.0), (400.0, 200.0)))

    return sort_by_end_time(objects)
