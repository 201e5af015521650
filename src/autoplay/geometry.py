from __future__ import annotations

from glide.geom import Vec2
from glide.math import safe_asin, safe_sqrt

from .objects import PathTarget

# Below this distance from the centre the cursor is treated as sitting on it.
CENTRE_EPSILON = 1e-9


def tangent_entry(previous: Vec2, centre: Vec2, radius: float) -> tuple[Vec2, int]:
    """Return `(entry_position, direction)` for starting circular motion around `centre`.

    - Outside the circle: the entry is the tangent point reached by moving along a
      tangent line from `previous`, so the approach flows into the circle.
    - Inside the circle: the entry is the radial projection of `previous` onto it.
    - On the centre: the entry is the point directly above the centre.

    `direction` is the sign applied to the angular velocity (+1 or -1).
    """

    radius = float(radius)
    offset = centre - previous
    distance = offset.length()

    if distance > radius:
        # Angle between the centre offset and the tangent point offset.
        angle = safe_asin(radius / distance)
        direction = -1 if angle > 0.0 else 1
        to_tangent = offset.rotated(angle).with_length(safe_sqrt(distance * distance - radius * radius))
        return previous + to_tangent, direction

    if distance > CENTRE_EPSILON:
        return centre - offset * (radius / distance), 1

    return centre + Vec2(0.0, -radius), 1


def circle_position_at(angle: float, radius: float) -> Vec2:
    return Vec2.from_polar(float(angle), float(radius))


def entry_angle(entry: Vec2, centre: Vec2) -> float:
    difference = entry - centre
    if difference.length_sq() == 0.0:
        return 0.0
    return difference.to_angle()


def path_position_at(path: PathTarget, progress: float) -> Vec2:
    return path.position_at(progress)
