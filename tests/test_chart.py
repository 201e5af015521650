from __future__ import annotations

import json
from pathlib import Path

import pytest

from glide.geom import Vec2

from autoplay.chart import ChartError, decode_chart, dump_chart, dump_chart_file, load_chart
from autoplay.objects import PathTarget, PointTarget, RotationTarget
from autoplay.samples import two_b_sample_objects


def test_decode_chart_builds_objects_sorted_by_end_time() -> None:
    raw = {
        "objects": [
            {"kind": "rotation", "time": 1000, "end_time": 4000},
            {"kind": "point", "time": 1500, "position": [10, 20]},
            {
                "kind": "path",
                "time": 500,
                "points": [[0, 0], [100, 0]],
                "velocity": 0.1,
                "repeats": 2,
                "tick_distance": 50,
            },
        ]
    }

    objects = decode_chart(json.dumps(raw).encode("utf-8"))

    assert [type(obj) for obj in objects] == [PointTarget, PathTarget, RotationTarget]
    assert objects[0].position == Vec2(10.0, 20.0)
    assert objects[1].end_time == pytest.approx(2500.0)
    assert objects[2].centre == Vec2(256.0, 192.0)


def test_decode_chart_rejects_unknown_kind() -> None:
    raw = {"objects": [{"kind": "slider", "time": 0}]}

    with pytest.raises(ChartError, match="invalid chart"):
        decode_chart(json.dumps(raw).encode("utf-8"))


def test_decode_chart_reports_invalid_objects() -> None:
    raw = {"objects": [{"kind": "rotation", "time": 10, "end_time": 5}]}

    with pytest.raises(ChartError, match="chart object 0"):
        decode_chart(json.dumps(raw).encode("utf-8"))


def test_sample_chart_file_loads_back(tmp_path: Path) -> None:
    path = tmp_path / "sample.json"
    objects = two_b_sample_objects()

    dump_chart_file(path, objects, title="sample")

    assert load_chart(path) == objects


def test_dump_chart_is_readable_json() -> None:
    blob = dump_chart([PointTarget(100.0, Vec2(1.0, 2.0))])

    assert json.loads(blob) == {
        "objects": [{"kind": "point", "time": 100.0, "position": [1.0, 2.0], "radius": 32.0}],
        "title": "",
    }
