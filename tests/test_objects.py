from __future__ import annotations

import pytest

from glide.geom import Vec2

from autoplay.objects import (
    AutoplayInputError,
    PathTarget,
    PointTarget,
    RotationTarget,
    sort_by_end_time,
    validate_objects,
)


def _straight_path(**kwargs) -> PathTarget:  # noqa: ANN003
    params = {
        "start_time": 1000.0,
        "control_points": (Vec2(100.0, 0.0), Vec2(300.0, 0.0)),
        "velocity": 0.2,
    }
    params.update(kwargs)
    return PathTarget(**params)


def test_path_duration_follows_length_velocity_and_repeats() -> None:
    path = _straight_path(repeat_count=3)

    assert path.span_duration == pytest.approx(1000.0)
    assert path.duration == pytest.approx(3000.0)
    assert path.end_time == pytest.approx(4000.0)


def test_path_position_bounces_on_repeats() -> None:
    path = _straight_path(repeat_count=2)

    assert path.position_at(0.25).isclose(Vec2(200.0, 0.0))
    assert path.position_at(0.5).isclose(Vec2(300.0, 0.0))
    assert path.position_at(0.75).isclose(Vec2(200.0, 0.0))
    assert path.end_position.isclose(Vec2(100.0, 0.0))


def test_path_length_override_extends_last_segment() -> None:
    path = _straight_path(length=250.0)

    assert path.end_position.isclose(Vec2(350.0, 0.0))
    assert path.curve_position_at(0.4).isclose(Vec2(200.0, 0.0))


def test_path_ticks_skip_span_end_and_reverse_on_odd_spans() -> None:
    path = _straight_path(repeat_count=2, tick_distance=100.0)

    # 200 units long: a tick at 100 per span; the one at 200 sits on the span end.
    assert [tick.time for tick in path.ticks] == pytest.approx([1500.0, 2500.0])
    assert all(tick.position.isclose(Vec2(200.0, 0.0)) for tick in path.ticks)


def test_path_ticks_are_time_ordered_on_reversed_spans() -> None:
    path = _straight_path(repeat_count=2, tick_distance=50.0)

    times = [tick.time for tick in path.ticks]
    assert times == sorted(times)
    assert times == pytest.approx([1250.0, 1500.0, 1750.0, 2250.0, 2500.0, 2750.0])
    assert path.ticks[3].position.isclose(Vec2(250.0, 0.0))


@pytest.mark.parametrize(
    ("kwargs", "match"),
    [
        ({"control_points": (Vec2(0.0, 0.0),)}, "control points"),
        ({"velocity": 0.0}, "velocity"),
        ({"repeat_count": 0}, "repeat_count"),
        ({"length": -5.0}, "length"),
        ({"control_points": (Vec2(1.0, 1.0), Vec2(1.0, 1.0))}, "zero length"),
    ],
)
def test_path_rejects_malformed_input(kwargs: dict, match: str) -> None:
    with pytest.raises(AutoplayInputError, match=match):
        _straight_path(**kwargs)


def test_rotation_rejects_negative_duration() -> None:
    with pytest.raises(AutoplayInputError, match="ends before"):
        RotationTarget(start_time=2000.0, end_time=1000.0)


def test_validate_objects_requires_end_time_order() -> None:
    point = PointTarget(5000.0, Vec2(0.0, 0.0))
    path = _straight_path()

    validate_objects([path, point])
    with pytest.raises(AutoplayInputError, match="sorted by end time"):
        validate_objects([point, path])
    assert sort_by_end_time([point, path]) == [path, point]


def test_validate_objects_rejects_unknown_types() -> None:
    with pytest.raises(AutoplayInputError, match="unsupported type"):
        validate_objects([object()])  # type: ignore[list-item]
