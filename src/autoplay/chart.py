"""JSON chart files: the object list the CLI generates replays from."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import msgspec

from glide.geom import Vec2

from .objects import (
    DEFAULT_OBJECT_RADIUS,
    PathTarget,
    PlayableObject,
    PointTarget,
    RotationTarget,
    sort_by_end_time,
)


class ChartError(ValueError):
    pass


class PointEntry(msgspec.Struct, tag="point", tag_field="kind", forbid_unknown_fields=True, kw_only=True):
    time: float
    position: tuple[float, float]
    radius: float = DEFAULT_OBJECT_RADIUS


class PathEntry(msgspec.Struct, tag="path", tag_field="kind", forbid_unknown_fields=True, kw_only=True):
    time: float
    points: list[tuple[float, float]]
    velocity: float
    repeats: int = 1
    length: float | None = None
    tick_distance: float = 0.0
    radius: float = DEFAULT_OBJECT_RADIUS


class RotationEntry(msgspec.Struct, tag="rotation", tag_field="kind", forbid_unknown_fields=True, kw_only=True):
    time: float
    end_time: float
    centre: tuple[float, float] = (256.0, 192.0)
    radius: float = DEFAULT_OBJECT_RADIUS


ChartEntry = PointEntry | PathEntry | RotationEntry


class ChartFile(msgspec.Struct, forbid_unknown_fields=True):
    objects: list[ChartEntry]
    title: str = ""


def entry_to_object(entry: ChartEntry) -> PlayableObject:
    match entry:
        case PointEntry():
            return PointTarget(start_time=entry.time, position=Vec2.from_pair(entry.position), radius=entry.radius)
        case PathEntry():
            return PathTarget(
                start_time=entry.time,
                control_points=tuple(Vec2.from_pair(point) for point in entry.points),
                velocity=entry.velocity,
                repeat_count=entry.repeats,
                length=entry.length,
                tick_distance=entry.tick_distance,
                radius=entry.radius,
            )
        case RotationEntry():
            return RotationTarget(
                start_time=entry.time,
                end_time=entry.end_time,
                centre=Vec2.from_pair(entry.centre),
                radius=entry.radius,
            )
    raise ChartError(f"unsupported chart entry: {type(entry).__name__}")


def object_to_entry(obj: PlayableObject) -> ChartEntry:
    match obj:
        case PointTarget():
            return PointEntry(time=float(obj.start_time), position=obj.position.to_pair(), radius=float(obj.radius))
        case PathTarget():
            return PathEntry(
                time=float(obj.start_time),
                points=[point.to_pair() for point in obj.control_points],
                velocity=float(obj.velocity),
                repeats=int(obj.repeat_count),
                length=None if obj.length is None else float(obj.length),
                tick_distance=float(obj.tick_distance),
                radius=float(obj.radius),
            )
        case RotationTarget():
            return RotationEntry(
                time=float(obj.start_time),
                end_time=float(obj.end_time),
                centre=obj.centre.to_pair(),
                radius=float(obj.radius),
            )
    raise ChartError(f"unsupported object type: {type(obj).__name__}")


def decode_chart(data: bytes) -> list[PlayableObject]:
    """Decode chart JSON into playable objects sorted by end time."""
    try:
        chart = msgspec.json.decode(data, type=ChartFile)
    except (msgspec.ValidationError, msgspec.DecodeError) as exc:
        raise ChartError(f"invalid chart: {exc}") from exc

    objects: list[PlayableObject] = []
    for index, entry in enumerate(chart.objects):
        try:
            objects.append(entry_to_object(entry))
        except ValueError as exc:
            raise ChartError(f"chart object {index}: {exc}") from exc
    return sort_by_end_time(objects)


def load_chart(path: Path) -> list[PlayableObject]:
    return decode_chart(Path(path).read_bytes())


def dump_chart(objects: Iterable[PlayableObject], *, title: str = "") -> bytes:
    chart = ChartFile(objects=[object_to_entry(obj) for obj in objects], title=title)
    return msgspec.json.format(msgspec.json.encode(chart), indent=2)


def dump_chart_file(path: Path, objects: Iterable[PlayableObject], *, title: str = "") -> None:
    Path(path).write_bytes(dump_chart(objects, title=title))
