from __future__ import annotations

import gzip
import json
import warnings
from dataclasses import asdict
from pathlib import Path
from typing import Any

from glide.geom import Vec2

from ..frames import BOTH_BUTTONS, ButtonState, ReplayFrame
from .types import REPLAY_FORMAT_VERSION, Replay, ReplayHeader

_GZIP_MAGIC = b"\x1f\x8b"


class ReplayCodecError(ValueError):
    pass


class StaleReplayWarning(UserWarning):
    """A loaded replay was written by another generator build."""


def stale_generator_version(header: ReplayHeader, *, current_version: str | None = None) -> str | None:
    """Describe why `header` may not match a fresh run, or return None.

    Frames depend on the generator build, so a replay written by another build
    (or one that does not record its build) may differ from regenerating the
    same chart now.
    """

    if current_version is None:
        from .. import __version__

        current_version = __version__
    recorded = str(header.generator_version)
    if not recorded:
        return f"replay records no generator version; a fresh run with {current_version} may differ"
    if recorded != str(current_version):
        return f"replay was written by generator {recorded}; a fresh run with {current_version} may differ"
    return None


def warn_if_stale(replay: Replay, *, current_version: str | None = None) -> Replay:
    message = stale_generator_version(replay.header, current_version=current_version)
    if message is not None:
        warnings.warn(message, StaleReplayWarning, stacklevel=3)
    return replay


def _is_gzip(data: bytes) -> bool:
    return data.startswith(_GZIP_MAGIC)


def _header_from_dict(data: dict[str, Any]) -> ReplayHeader:
    generator_version = data.get("generator_version")
    try:
        return ReplayHeader(
            generator_version="" if generator_version is None else str(generator_version),
            speed=float(data.get("speed", 1.0)),
            delayed_movements=bool(data.get("delayed_movements", False)),
            frame_delay_ms=float(data.get("frame_delay_ms", 1000.0 / 60.0)),
            object_count=int(data.get("object_count", 0)),
        )
    except (TypeError, ValueError) as exc:
        raise ReplayCodecError(f"invalid replay header: {exc}") from exc


def _frame_from_array(index: int, value: Any) -> ReplayFrame:
    if not isinstance(value, list) or len(value) != 4:
        raise ReplayCodecError(f"replay frame {index} must be [time, x, y, buttons]: {value!r}")
    time, x, y, buttons = value
    try:
        buttons_i = int(buttons)
        frame = ReplayFrame(time=float(time), position=Vec2(float(x), float(y)), buttons=ButtonState(buttons_i))
    except (TypeError, ValueError) as exc:
        raise ReplayCodecError(f"replay frame {index} is malformed: {value!r}") from exc
    if buttons_i & ~int(BOTH_BUTTONS) or buttons_i == int(BOTH_BUTTONS):
        raise ReplayCodecError(f"replay frame {index} has invalid buttons: {buttons_i}")
    return frame


def replay_to_obj(replay: Replay) -> dict[str, Any]:
    return {
        "v": int(replay.version),
        "header": asdict(replay.header),
        "frames": [
            [float(frame.time), float(frame.position.x), float(frame.position.y), int(frame.buttons)]
            for frame in replay.frames
        ],
    }


def replay_from_obj(obj: dict[str, Any]) -> Replay:
    version = int(obj.get("v", 0))
    if version != REPLAY_FORMAT_VERSION:
        raise ReplayCodecError(f"unsupported replay version: {version}")

    header_in = obj.get("header")
    if not isinstance(header_in, dict):
        raise ReplayCodecError("replay header must be an object")
    header = _header_from_dict(header_in)

    frames_in = obj.get("frames")
    if not isinstance(frames_in, list):
        raise ReplayCodecError("replay frames must be a list")
    frames = tuple(_frame_from_array(index, raw) for index, raw in enumerate(frames_in))

    for index in range(1, len(frames)):
        if frames[index].time < frames[index - 1].time:
            raise ReplayCodecError(f"replay frame {index} goes back in time")

    return Replay(header=header, frames=frames, version=version)


def dump_replay(replay: Replay) -> bytes:
    """Serialize a replay as a gzipped JSON blob.

    The gzip header is written with mtime=0 for stable content hashing.
    """

    obj = replay_to_obj(replay)
    raw = json.dumps(obj, separators=(",", ":"), sort_keys=True).encode("utf-8")
    return gzip.compress(raw, compresslevel=9, mtime=0)


def load_replay(data: bytes, *, warn_stale: bool = False) -> Replay:
    """Decode a gzipped or plain JSON replay.

    With `warn_stale`, a `StaleReplayWarning` is issued when the replay was not
    written by the running generator build.
    """

    try:
        if _is_gzip(data):
            data = gzip.decompress(data)
        obj = json.loads(data.decode("utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ReplayCodecError(f"replay is not valid JSON: {exc}") from exc
    if not isinstance(obj, dict):
        raise ReplayCodecError("replay root must be an object")
    replay = replay_from_obj(obj)
    if warn_stale:
        warn_if_stale(replay)
    return replay


def dump_replay_file(path: Path, replay: Replay) -> None:
    path = Path(path)
    path.write_bytes(dump_replay(replay))


def load_replay_file(path: Path, *, warn_stale: bool = False) -> Replay:
    path = Path(path)
    return load_replay(path.read_bytes(), warn_stale=warn_stale)
