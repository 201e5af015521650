"""First-pass timeline: the important moments of a chart, ordered by time and priority."""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from enum import IntEnum

from glide.geom import Vec2

from .config import DEFAULT_SETTINGS, GeneratorSettings
from .debug_log import trace
from .geometry import circle_position_at, entry_angle, path_position_at, tangent_entry
from .mods import NO_SCALING, SupportsTimeScaling
from .objects import AutoplayInputError, PathTarget, PlayableObject, PointTarget, RotationTarget
from .spins import SpinRegistry, SpinWindow


class EventKind(IntEnum):
    # Sorted by importance; lower values come first among events sharing a timestamp.
    CLICK = 0
    HOLD_TICK = 1
    SPIN_SAMPLE = 2
    PATH_END = 3


@dataclass(frozen=True, slots=True)
class TimelineEvent:
    time: float
    position: Vec2
    kind: EventKind
    # Index of the producing object in the input sequence. Used only to tell
    # whether two events belong to the same object.
    object_index: int | None = None

    @property
    def sort_key(self) -> tuple[float, int]:
        return float(self.time), int(self.kind)


class Timeline:
    """Events kept sorted by `(time, kind)`; equal keys keep insertion order."""

    def __init__(self, events: Iterable[TimelineEvent] = ()) -> None:
        self._events: list[TimelineEvent] = []
        for event in events:
            self.insert(event)

    @property
    def events(self) -> list[TimelineEvent]:
        """The live event list. Conflict resolution edits it in place."""
        return self._events

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[TimelineEvent]:
        return iter(self._events)

    def __getitem__(self, index: int) -> TimelineEvent:
        return self._events[index]

    def insert(self, event: TimelineEvent) -> int:
        index = bisect_right(self._events, event.sort_key, key=lambda item: item.sort_key)
        self._events.insert(index, event)
        return index

    def last_before(self, time: float) -> TimelineEvent | None:
        index = bisect_left(self._events, float(time), key=lambda item: float(item.time))
        if index <= 0:
            return None
        return self._events[index - 1]


@dataclass(frozen=True, slots=True)
class SpinPath:
    """The circle the cursor follows through one spin window."""

    window: SpinWindow
    centre: Vec2
    radius: float
    entry_angle: float
    direction: int
    ms_per_radian: float
    scaling: SupportsTimeScaling = NO_SCALING

    def position_at(self, time: float) -> Vec2:
        elapsed = float(self.scaling.scale_duration(float(time) - float(self.window.start_time))) * self.direction
        return self.centre + circle_position_at(elapsed / self.ms_per_radian + self.entry_angle, self.radius)


class EventCollector:
    def __init__(
        self,
        *,
        settings: GeneratorSettings = DEFAULT_SETTINGS,
        scaling: SupportsTimeScaling = NO_SCALING,
    ) -> None:
        self._settings = settings
        self._scaling = scaling
        self.timeline = Timeline()
        self.spins = SpinRegistry()
        self.spin_paths: list[SpinPath] = []
        self._rotations: list[tuple[int, RotationTarget]] = []

    def collect(self, objects: Sequence[PlayableObject], *, cursor: Vec2) -> Timeline:
        """Fill the timeline from `objects`, then synthesize samples for every spin window.

        `cursor` is the position the cursor holds before the first event (the last
        emitted frame); spin entries with no earlier event start from it.
        """

        for index, obj in enumerate(objects):
            self.add_object(index, obj)
        sample_count = 0
        for window in self.spins:
            sample_count += self.add_spin_samples(window, cursor=cursor)
        trace(
            "collect",
            objects=len(objects),
            events=len(self.timeline),
            spin_windows=len(self.spins),
            spin_samples=sample_count,
        )
        return self.timeline

    def add_object(self, index: int, obj: PlayableObject) -> None:
        match obj:
            case PointTarget():
                self.timeline.insert(TimelineEvent(float(obj.start_time), obj.position, EventKind.CLICK, index))
            case PathTarget():
                self._add_path(index, obj)
            case RotationTarget():
                self.spins.insert(SpinWindow(float(obj.start_time), float(obj.end_time)))
                self._rotations.append((index, obj))
            case _:
                raise AutoplayInputError(f"object {index} has unsupported type {type(obj).__name__}")

    def _add_path(self, index: int, path: PathTarget) -> None:
        insert = self.timeline.insert
        start_time = float(path.start_time)
        duration = path.duration

        insert(TimelineEvent(start_time, path.position, EventKind.CLICK, index))

        for tick in path.ticks:
            insert(TimelineEvent(float(tick.time), tick.position, EventKind.HOLD_TICK, index))

        span_duration = path.span_duration
        for repeat in range(1, int(path.repeat_count)):
            offset = repeat * span_duration
            insert(
                TimelineEvent(
                    start_time + offset,
                    path_position_at(path, offset / duration),
                    EventKind.HOLD_TICK,
                    index,
                )
            )

        # Reaction tick shortly before the end keeps the end attached to this path.
        lead_in_time = max(start_time + duration / 2.0, path.end_time - float(self._settings.path_end_lead_in_ms))
        insert(
            TimelineEvent(
                lead_in_time,
                path_position_at(path, (lead_in_time - start_time) / duration),
                EventKind.HOLD_TICK,
                index,
            )
        )

        insert(TimelineEvent(path.end_time, path.end_position, EventKind.PATH_END, index))

    def add_spin_samples(self, window: SpinWindow, *, cursor: Vec2) -> int:
        settings = self._settings
        scaling = self._scaling

        previous = self.timeline.last_before(window.start_time)
        previous_position = previous.position if previous is not None else cursor

        centre = self.window_centre(window)
        radius = float(settings.spin_radius)
        entry, direction = tangent_entry(previous_position, centre, radius)
        spin_path = SpinPath(
            window=window,
            centre=centre,
            radius=radius,
            entry_angle=entry_angle(entry, centre),
            direction=direction,
            ms_per_radian=float(settings.spin_ms_per_radian),
            scaling=scaling,
        )
        self.spin_paths.append(spin_path)

        start_time = float(window.start_time)
        end_time = float(window.end_time)
        step = float(scaling.scale_rate(settings.frame_delay_ms))

        # The window start is pressed by the rotation itself; sampling begins one step in.
        sample_times: list[float] = []
        step_index = 1
        while start_time + step_index * step < end_time:
            sample_times.append(start_time + step_index * step)
            step_index += 1
        # The window end is always sampled, on the step grid or not.
        sample_times.append(end_time)

        for time in sample_times:
            self.timeline.insert(
                TimelineEvent(time, spin_path.position_at(time), EventKind.SPIN_SAMPLE, self.rotation_owner(time))
            )
        return len(sample_times)

    def window_centre(self, window: SpinWindow) -> Vec2:
        """Centre of the earliest-starting rotation inside `window`."""
        candidates = [
            (float(obj.start_time), index, obj) for index, obj in self._rotations if window.contains(obj.start_time)
        ]
        if not candidates:
            return self._settings.centre
        return min(candidates, key=lambda item: (item[0], item[1]))[2].centre

    def rotation_owner(self, time: float) -> int | None:
        """Index of the latest-starting rotation that covers `time`."""
        owner: int | None = None
        owner_start = 0.0
        for index, obj in self._rotations:
            if not (float(obj.start_time) <= time <= float(obj.end_time)):
                continue
            if owner is None or float(obj.start_time) >= owner_start:
                owner = index
                owner_start = float(obj.start_time)
        return owner
