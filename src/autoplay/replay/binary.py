from __future__ import annotations

import io
from pathlib import Path
from typing import Final

from construct import Array, Byte, Const, ConstError, ConstructError, Float32l, Float64l, Int16ul, Int32ul
from construct import PascalString, Padding, StreamError, Struct, Terminated, TerminatedError

from glide.geom import Vec2

from ..frames import BOTH_BUTTONS, ButtonState, ReplayFrame
from .codec import ReplayCodecError, warn_if_stale
from .types import REPLAY_FORMAT_VERSION, Replay, ReplayHeader

MAGIC: Final[bytes] = b"AUTOPLAY\x00"

FLAG_DELAYED_MOVEMENTS: Final[int] = 1 << 0

_MAGIC = Const(MAGIC)

_HEADER_V1 = Struct(
    "version" / Int16ul,
    "flags" / Int16ul,
    "frame_count" / Int32ul,
    "object_count" / Int32ul,
    Padding(4),
    "frame_delay_ms" / Float64l,
    "speed" / Float64l,
    "generator_version" / PascalString(Byte, "utf8"),
)

_FRAME_V1 = Struct(
    "time" / Float64l,
    "x" / Float32l,
    "y" / Float32l,
    "buttons" / Byte,
    Padding(3),
)


def loads(data: bytes, *, warn_stale: bool = False) -> Replay:
    stream = io.BytesIO(data)

    try:
        _MAGIC.parse_stream(stream)
    except StreamError as exc:
        raise ReplayCodecError("unexpected EOF") from exc
    except ConstError as exc:
        raise ReplayCodecError("invalid magic") from exc

    try:
        header_raw = _HEADER_V1.parse_stream(stream)
    except ConstructError as exc:
        raise ReplayCodecError("unexpected EOF") from exc

    version = int(header_raw["version"])
    if version != REPLAY_FORMAT_VERSION:
        raise ReplayCodecError(f"unsupported replay version: {version}")

    try:
        frames_raw = Array(int(header_raw["frame_count"]), _FRAME_V1).parse_stream(stream)
        Terminated.parse_stream(stream)
    except StreamError as exc:
        raise ReplayCodecError("unexpected EOF") from exc
    except TerminatedError as exc:
        raise ReplayCodecError("trailing data") from exc
    except ConstructError as exc:
        raise ReplayCodecError(str(exc)) from exc

    frames: list[ReplayFrame] = []
    for index, entry in enumerate(frames_raw):
        buttons = int(entry["buttons"])
        if buttons & ~int(BOTH_BUTTONS) or buttons == int(BOTH_BUTTONS):
            raise ReplayCodecError(f"replay frame {index} has invalid buttons: {buttons}")
        frames.append(
            ReplayFrame(
                time=float(entry["time"]),
                position=Vec2(float(entry["x"]), float(entry["y"])),
                buttons=ButtonState(buttons),
            )
        )

    flags = int(header_raw["flags"])
    header = ReplayHeader(
        generator_version=str(header_raw["generator_version"]),
        speed=float(header_raw["speed"]),
        delayed_movements=(flags & FLAG_DELAYED_MOVEMENTS) != 0,
        frame_delay_ms=float(header_raw["frame_delay_ms"]),
        object_count=int(header_raw["object_count"]),
    )
    replay = Replay(header=header, frames=tuple(frames), version=version)
    if warn_stale:
        warn_if_stale(replay)
    return replay


def load(path: Path, *, warn_stale: bool = False) -> Replay:
    return loads(Path(path).read_bytes(), warn_stale=warn_stale)


def dumps(replay: Replay) -> bytes:
    header = replay.header
    flags = 0
    if header.delayed_movements:
        flags |= FLAG_DELAYED_MOVEMENTS

    header_raw = {
        "version": int(REPLAY_FORMAT_VERSION),
        "flags": int(flags),
        "frame_count": len(replay.frames),
        "object_count": int(header.object_count) & 0xFFFF_FFFF,
        "frame_delay_ms": float(header.frame_delay_ms),
        "speed": float(header.speed),
        "generator_version": str(header.generator_version),
    }

    frames_raw = [
        {
            "time": float(frame.time),
            "x": float(frame.position.x),
            "y": float(frame.position.y),
            "buttons": int(frame.buttons) & 0xFF,
        }
        for frame in replay.frames
    ]

    out = bytearray()
    out += MAGIC
    try:
        out += _HEADER_V1.build(header_raw)
        out += Array(len(frames_raw), _FRAME_V1).build(frames_raw)
    except ConstructError as exc:
        raise ReplayCodecError(str(exc)) from exc

    return bytes(out)


def dump(replay: Replay, path: Path) -> None:
    Path(path).write_bytes(dumps(replay))
