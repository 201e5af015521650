from __future__ import annotations

import gzip
import json
from pathlib import Path

import pytest

from glide.geom import Vec2

from autoplay.frames import ButtonState, ReplayFrame
from autoplay.generator import generate_replay
from autoplay.objects import PointTarget
from autoplay.replay import (
    Replay,
    ReplayCodecError,
    ReplayHeader,
    StaleReplayWarning,
    dump_replay,
    dump_replay_file,
    load_replay,
    load_replay_file,
    stale_generator_version,
)


def _replay() -> Replay:
    return generate_replay(
        [PointTarget(1000.0, Vec2(10.0, 20.0)), PointTarget(1000.0, Vec2(30.0, 40.0))],
        speed=1.25,
    )


def test_replay_codec_roundtrip() -> None:
    replay = _replay()

    decoded = load_replay(dump_replay(replay))

    assert decoded == replay
    assert decoded.header.speed == 1.25
    assert decoded.header.object_count == 2


def test_replay_dump_is_stable() -> None:
    replay = _replay()

    assert dump_replay(replay) == dump_replay(replay)


def test_replay_load_accepts_plain_json_bytes() -> None:
    replay = _replay()

    plain = gzip.decompress(dump_replay(replay))

    assert load_replay(plain).frames == replay.frames


def test_replay_file_roundtrip(tmp_path: Path) -> None:
    path = tmp_path / "out" / "replay.json.gz"
    path.parent.mkdir()
    replay = _replay()

    dump_replay_file(path, replay)

    assert load_replay_file(path) == replay


def test_replay_frames_are_compact_arrays() -> None:
    replay = Replay(
        header=ReplayHeader(generator_version="1.0.0"),
        frames=(ReplayFrame(0.5, Vec2(1.0, 2.0), ButtonState.BUTTON_B),),
    )

    obj = json.loads(gzip.decompress(dump_replay(replay)))

    assert obj["v"] == 1
    assert obj["frames"] == [[0.5, 1.0, 2.0, 2]]
    assert obj["header"]["generator_version"] == "1.0.0"


@pytest.mark.parametrize(
    ("obj", "match"),
    [
        ({"v": 2, "header": {}, "frames": []}, "unsupported replay version"),
        ({"v": 1, "header": [], "frames": []}, "header must be an object"),
        ({"v": 1, "header": {}, "frames": {}}, "frames must be a list"),
        ({"v": 1, "header": {}, "frames": [[0.0, 1.0, 2.0]]}, "must be \\[time, x, y, buttons\\]"),
        ({"v": 1, "header": {}, "frames": [[0.0, 1.0, 2.0, 3]]}, "invalid buttons"),
        ({"v": 1, "header": {}, "frames": [[5.0, 0.0, 0.0, 0], [4.0, 0.0, 0.0, 0]]}, "back in time"),
    ],
)
def test_replay_codec_rejects_malformed_input(obj: dict, match: str) -> None:
    with pytest.raises(ReplayCodecError, match=match):
        load_replay(json.dumps(obj).encode("utf-8"))


def test_replay_codec_rejects_garbage() -> None:
    with pytest.raises(ReplayCodecError, match="not valid JSON"):
        load_replay(b"\x00\x01 not json")


def test_replay_load_warns_when_written_by_another_generator() -> None:
    replay = Replay(header=ReplayHeader(generator_version="0.0.1"), frames=())

    with pytest.warns(StaleReplayWarning, match="written by generator 0.0.1"):
        loaded = load_replay(dump_replay(replay), warn_stale=True)

    assert loaded == replay


def test_replay_load_warns_without_recorded_generator_version() -> None:
    data = json.dumps({"v": 1, "header": {}, "frames": []}).encode("utf-8")

    with pytest.warns(StaleReplayWarning, match="records no generator version"):
        load_replay(data, warn_stale=True)


def test_replay_load_is_silent_for_current_generator(recwarn: pytest.WarningsRecorder) -> None:
    load_replay(dump_replay(_replay()), warn_stale=True)

    assert not [warning for warning in recwarn if issubclass(warning.category, StaleReplayWarning)]


def test_stale_generator_version_compares_against_given_version() -> None:
    header = ReplayHeader(generator_version="1.0.0")

    assert stale_generator_version(header, current_version="1.0.0") is None
    assert "1.0.0" in stale_generator_version(header, current_version="2.0.0")
    missing = ReplayHeader(generator_version="")
    assert "no generator version" in stale_generator_version(missing, current_version="1.0.0")
