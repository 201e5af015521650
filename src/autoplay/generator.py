from __future__ import annotations

from collections.abc import Sequence

from .config import DEFAULT_SETTINGS, GeneratorSettings
from .conflicts import resolve_conflicts
from .debug_log import trace
from .emitter import FrameEmitter
from .frames import ButtonState, FrameBuffer, FrameKind, ReplayFrame
from .mods import NO_SCALING, SupportsTimeScaling, TimeScaling
from .objects import PlayableObject, validate_objects
from .replay.types import Replay, ReplayHeader
from .timeline import EventCollector

# Offsets of the idle and centred bootstrap frames before the earliest object.
BOOTSTRAP_IDLE_LEAD_MS = 1500.0
BOOTSTRAP_CENTRE_LEAD_MS = 1000.0


class AutoGenerator:
    """Synthesizes the frames of a perfect play for a list of objects.

    `objects` must be sorted by end time. A generator instance runs once; call
    `generate()` and keep the result.
    """

    def __init__(
        self,
        objects: Sequence[PlayableObject],
        *,
        settings: GeneratorSettings = DEFAULT_SETTINGS,
        scaling: SupportsTimeScaling = NO_SCALING,
        delayed_movements: bool = False,
    ) -> None:
        self.objects = tuple(objects)
        self.settings = settings
        self.scaling = scaling
        self.delayed_movements = bool(delayed_movements)
        self._frames: tuple[ReplayFrame, ...] | None = None

    def _bootstrap(self, frames: FrameBuffer) -> None:
        settings = self.settings
        if self.objects:
            reference_time = min(float(obj.start_time) for obj in self.objects)
        else:
            reference_time = 0.0
        idle = settings.idle
        for time, position in (
            (float(settings.bootstrap_time_ms), idle),
            (reference_time - BOOTSTRAP_IDLE_LEAD_MS, idle),
            (reference_time - BOOTSTRAP_CENTRE_LEAD_MS, settings.centre),
        ):
            frames.insert(time, position, ButtonState.NONE, kind=FrameKind.BOOTSTRAP)

    def generate(self) -> tuple[ReplayFrame, ...]:
        if self._frames is not None:
            return self._frames

        validate_objects(self.objects)
        frames = FrameBuffer()
        self._bootstrap(frames)

        if self.objects:
            collector = EventCollector(settings=self.settings, scaling=self.scaling)
            timeline = collector.collect(self.objects, cursor=frames.last.position)
            resolve_conflicts(timeline.events)

            emitter = FrameEmitter(
                frames,
                settings=self.settings,
                scaling=self.scaling,
                delayed_movements=self.delayed_movements,
            )
            emitter.emit_timeline(timeline, self.objects)
            emitter.emit_objects(self.objects, collector.spin_paths)

        self._frames = frames.freeze()
        trace(
            "generate",
            objects=len(self.objects),
            frames=len(self._frames),
            delayed_movements=self.delayed_movements,
        )
        return self._frames


def generate_replay(
    objects: Sequence[PlayableObject],
    *,
    settings: GeneratorSettings = DEFAULT_SETTINGS,
    speed: float = 1.0,
    delayed_movements: bool = False,
) -> Replay:
    scaling = TimeScaling(speed=speed)
    generator = AutoGenerator(objects, settings=settings, scaling=scaling, delayed_movements=delayed_movements)
    frames = generator.generate()
    header = ReplayHeader(
        speed=float(scaling.speed),
        delayed_movements=bool(delayed_movements),
        frame_delay_ms=float(settings.frame_delay_ms),
        object_count=len(generator.objects),
    )
    return Replay(header=header, frames=frames)
