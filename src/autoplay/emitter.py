"""Turns the resolved timeline and the object list into output frames.

Emission runs in two layers over one `FrameBuffer`:

1. The timeline layer presses on every resolved event, releases before the next
   click and follows a path between consecutive events that belong to it. All
   frames it writes hold `BUTTON_A` provisionally.
2. The object layer plays the objects in the order their presses appear. For
   each one it decides whether the cursor has to travel to the object or can
   hit it in place, adds eased travel frames when it must move, and picks the
   button: travelling resets alternation, hitting in place alternates. Paths
   and rotations are then held over their whole duration: releases inside the
   hold are dropped and gaps between the object's own frames are filled at the
   frame step. The chosen button is written over the object's own held frames
   only, and a release follows the object's end when nothing later closes it.
"""

from __future__ import annotations

from collections.abc import Sequence

from glide.easing import Easing, value_at
from glide.geom import Vec2

from .config import DEFAULT_SETTINGS, GeneratorSettings
from .debug_log import trace
from .frames import (
    BOTH_BUTTONS,
    ButtonState,
    ButtonStateError,
    FrameBuffer,
    FrameKind,
    button_for_index,
    other_button,
)
from .mods import NO_SCALING, SupportsTimeScaling
from .objects import PathTarget, PlayableObject, PointTarget, RotationTarget
from .timeline import EventKind, SpinPath, Timeline, TimelineEvent

# Rotations let go one millisecond after the regular key-up delay.
ROTATION_RELEASE_EXTRA_MS = 1.0


class FrameEmitter:
    def __init__(
        self,
        frames: FrameBuffer,
        *,
        settings: GeneratorSettings = DEFAULT_SETTINGS,
        scaling: SupportsTimeScaling = NO_SCALING,
        delayed_movements: bool = False,
    ) -> None:
        self.frames = frames
        self._settings = settings
        self._scaling = scaling
        self._delayed_movements = bool(delayed_movements)
        self._frame_step = float(scaling.scale_rate(settings.frame_delay_ms))
        self._reaction_time = float(scaling.scale_rate(settings.reaction_time_ms))
        self.button_index = 0

    @property
    def preferred_easing(self) -> Easing:
        return Easing.IN_OUT_CUBIC if self._delayed_movements else Easing.OUT

    # Timeline layer.

    def emit_timeline(self, timeline: Timeline, objects: Sequence[PlayableObject]) -> int:
        """Emit press, hold and release frames for every resolved event."""

        frames = self.frames
        start_count = len(frames)
        events = list(timeline)
        key_up = float(self._settings.key_up_delay_ms)

        for index, event in enumerate(events):
            self._press(event)

            if index + 1 == len(events):
                release_time = event.time + key_up if event.kind == EventKind.CLICK else event.time
                frames.insert(release_time, event.position, ButtonState.NONE, kind=FrameKind.RELEASE, owner=event.object_index)
                break

            next_event = events[index + 1]
            if next_event.kind == EventKind.CLICK:
                release_time = event.time
                # Only clicks get the key-up delay; holds have already been held.
                if event.kind == EventKind.CLICK:
                    release_time = min(event.time + key_up, next_event.time)
                frames.insert(release_time, event.position, ButtonState.NONE, kind=FrameKind.RELEASE, owner=event.object_index)
                continue

            if event.object_index is None or event.object_index != next_event.object_index:
                continue
            owner = objects[event.object_index]
            if isinstance(owner, PathTarget):
                self._follow_path(owner, event, next_event)

        emitted = len(frames) - start_count
        trace("emit_timeline", events=len(events), frames=emitted)
        return emitted

    def _press(self, event: TimelineEvent) -> None:
        kind = FrameKind.PRESS if event.kind == EventKind.CLICK else FrameKind.HOLD
        self.frames.insert(event.time, event.position, ButtonState.BUTTON_A, kind=kind, owner=event.object_index)

    def _follow_path(self, path: PathTarget, event: TimelineEvent, next_event: TimelineEvent) -> None:
        start_time = float(path.start_time)
        duration = path.duration
        time = event.time + self._frame_step
        while time < next_event.time:
            position = path.position_at((time - start_time) / duration)
            self.frames.insert(time, position, ButtonState.BUTTON_A, kind=FrameKind.HOLD, owner=event.object_index)
            time += self._frame_step

    # Object layer.

    def emit_objects(self, objects: Sequence[PlayableObject], spin_paths: Sequence[SpinPath] = ()) -> int:
        """Place travel frames, assign buttons and hold objects to their end.

        `spin_paths` are the circles the timeline layer sampled; rotations are
        pressed and held along them.
        """

        frames = self.frames
        start_count = len(frames)
        travelled = 0
        filled = 0
        released = 0
        self.button_index = 0

        rotation_presses = 0
        for index, obj in enumerate(objects):
            if isinstance(obj, RotationTarget) and self._press_index(index, obj) is None:
                self._insert_rotation_press(index, obj, spin_paths)
                rotation_presses += 1

        press_indices = {index: self._press_index(index, obj) for index, obj in enumerate(objects)}
        for index, press_index in press_indices.items():
            if press_index is None:
                raise RuntimeError(f"object {index} has no press frame")
        # Frames are never reordered, so the initial press order holds throughout.
        order = sorted(press_indices, key=lambda index: press_indices[index])

        for index in order:
            obj = objects[index]
            if self._move_to_object(index, obj, self._require_press(index, obj)):
                travelled += 1
            button = self._choose_button(index, self._require_press(index, obj))
            if isinstance(obj, (PathTarget, RotationTarget)):
                filled += self._hold(index, obj, spin_paths)
            self._assign_button(index, obj, button)
            if self._release(index, obj, spin_paths):
                released += 1

        trace(
            "emit_objects",
            objects=len(objects),
            frames=len(frames) - start_count,
            travelled=travelled,
            rotation_presses=rotation_presses,
            filled=filled,
            released=released,
        )
        return len(frames) - start_count

    def _press_index(self, index: int, obj: PlayableObject) -> int | None:
        """Index of the frame `obj` is pressed on, at its start time."""
        start_time = float(obj.start_time)
        press_index = self.frames.first_owned(index, not_before=start_time)
        if press_index is None or self.frames[press_index].time > start_time:
            return None
        return press_index

    def _require_press(self, index: int, obj: PlayableObject) -> int:
        press_index = self._press_index(index, obj)
        if press_index is None:
            raise RuntimeError(f"object {index} lost its press frame")
        return press_index

    def _insert_rotation_press(self, index: int, rotation: RotationTarget, spin_paths: Sequence[SpinPath]) -> int:
        start_time = float(rotation.start_time)
        position = _spin_path_for(index, rotation, spin_paths).position_at(start_time)
        return self.frames.insert(start_time, position, ButtonState.BUTTON_A, kind=FrameKind.PRESS, owner=index)

    def _object_easing(self, obj: PlayableObject, origin: Vec2) -> Easing:
        match obj:
            case RotationTarget():
                # Entering from outside the circle starts spinning right after arriving.
                if origin.distance_to(obj.centre) > float(self._settings.spin_radius):
                    return Easing.IN
                return self.preferred_easing
            case PointTarget() | PathTarget():
                return self.preferred_easing
        raise TypeError(f"unsupported object type: {type(obj).__name__}")

    def needs_travel(self, origin: Vec2, target: Vec2, time_difference: float, radius: float) -> bool:
        """Whether the cursor has to move to the target instead of hitting it in place.

        Close targets in quick succession are hit in place. The distance allowed
        grows as the time between them shrinks, and at or beyond the snap time
        threshold the cursor always moves.
        """

        if not (time_difference > 0.0):
            return False
        settings = self._settings
        if time_difference >= float(settings.snap_time_threshold_ms):
            return True
        threshold = float(radius) * (float(settings.snap_radius_factor) + float(settings.snap_time_factor) / time_difference)
        return origin.distance_to(target) > threshold

    def _move_to_object(self, index: int, obj: PlayableObject, press_index: int) -> bool:
        frames = self.frames
        press = frames[press_index]
        reference = frames.last_held_reference(press_index)
        if reference is None:
            self.button_index += 1
            return False

        time_difference = float(self._scaling.scale_duration(press.time - reference.time))
        if not self.needs_travel(reference.position, press.position, time_difference, float(obj.radius)):
            self.button_index += 1
            return False

        target_time = float(press.time)
        previous = frames[press_index - 1]
        start_position = previous.position
        start_time = float(previous.time)
        start_buttons = previous.buttons
        easing = self._object_easing(obj, reference.position)

        # Wait until the object could have been seen and reacted to.
        wait_time = target_time - max(0.0, float(self._settings.time_preempt_ms) - self._reaction_time)
        if wait_time > start_time:
            frames.insert(wait_time, start_position, start_buttons, kind=FrameKind.WAIT, owner=index)
            start_time = wait_time

        time = start_time + self._frame_step
        while time < target_time:
            position = value_at(time, start_position, press.position, start_time, target_time, easing)
            frames.insert(time, position, start_buttons, kind=FrameKind.TRAVEL, owner=index)
            time += self._frame_step

        self.button_index = 0
        return True

    def _choose_button(self, index: int, press_index: int) -> ButtonState:
        frames = self.frames
        button = button_for_index(self.button_index)
        if press_index > 0:
            previous_button = frames[press_index - 1].buttons
            if previous_button != ButtonState.NONE:
                if previous_button == BOTH_BUTTONS:
                    raise ButtonStateError(
                        f"both buttons held before object {index} at t={frames[press_index - 1].time}"
                    )
                # Force alternation when the held button is the one we would press.
                if previous_button == button:
                    button = other_button(button)
        return button

    def _hold(self, index: int, obj: PathTarget | RotationTarget, spin_paths: Sequence[SpinPath]) -> int:
        """Keep `obj` pressed from its start to its end; returns the frames added."""

        frames = self.frames
        start_time = float(obj.start_time)
        end_time = float(obj.end_time)
        frames.remove_releases(after=self._require_press(index, obj), before_time=end_time)

        times = [frames[i].time for i in frames.owned_indices(index, start=start_time, end=end_time)]
        added = 0
        if times[-1] < end_time:
            position = self._hold_position(index, obj, end_time, spin_paths)
            frames.insert(end_time, position, ButtonState.BUTTON_A, kind=FrameKind.HOLD, owner=index)
            times.append(end_time)
            added += 1

        for previous, following in zip(times, times[1:]):
            time = previous + self._frame_step
            while time < following:
                position = self._hold_position(index, obj, time, spin_paths)
                frames.insert(time, position, ButtonState.BUTTON_A, kind=FrameKind.HOLD, owner=index)
                added += 1
                time += self._frame_step
        return added

    def _hold_position(
        self,
        index: int,
        obj: PathTarget | RotationTarget,
        time: float,
        spin_paths: Sequence[SpinPath],
    ) -> Vec2:
        if isinstance(obj, RotationTarget):
            return _spin_path_for(index, obj, spin_paths).position_at(time)
        if obj.duration <= 0.0:
            return obj.end_position
        return obj.position_at((time - float(obj.start_time)) / obj.duration)

    def _assign_button(self, index: int, obj: PlayableObject, button: ButtonState) -> None:
        frames = self.frames
        for frame_index in frames.owned_indices(index, start=float(obj.start_time), end=float(obj.end_time)):
            if frames[frame_index].buttons != ButtonState.NONE:
                frames.set_buttons(frame_index, button)

    def _release(self, index: int, obj: PlayableObject, spin_paths: Sequence[SpinPath]) -> bool:
        """Release after `obj` ends unless the buffer already ends released."""

        frames = self.frames
        end_time = float(obj.end_time)
        release_time = end_time + float(self._settings.key_up_delay_ms)
        if isinstance(obj, RotationTarget):
            release_time += ROTATION_RELEASE_EXTRA_MS
        last = frames.last
        if last.time > release_time or last.buttons == ButtonState.NONE:
            return False

        if isinstance(obj, (PathTarget, RotationTarget)):
            position = self._hold_position(index, obj, end_time, spin_paths)
        else:
            position = obj.end_position
        frames.insert(release_time, position, ButtonState.NONE, kind=FrameKind.RELEASE, owner=index)
        return True


def _spin_path_for(index: int, rotation: RotationTarget, spin_paths: Sequence[SpinPath]) -> SpinPath:
    start_time = float(rotation.start_time)
    for spin_path in spin_paths:
        if spin_path.window.contains(start_time):
            return spin_path
    raise RuntimeError(f"rotation {index} at t={start_time} has no spin path")
