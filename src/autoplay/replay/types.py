from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, TypeAlias

from ..frames import ButtonState, ReplayFrame

ReplayFormatVersion: TypeAlias = Literal[1]

REPLAY_FORMAT_VERSION: ReplayFormatVersion = 1


def _default_generator_version() -> str:
    from .. import __version__

    return str(__version__)


@dataclass(frozen=True, slots=True)
class ReplayHeader:
    generator_version: str = field(default_factory=_default_generator_version)
    speed: float = 1.0
    delayed_movements: bool = False
    frame_delay_ms: float = 1000.0 / 60.0
    object_count: int = 0


@dataclass(frozen=True, slots=True)
class Replay:
    header: ReplayHeader
    frames: tuple[ReplayFrame, ...]
    version: int = REPLAY_FORMAT_VERSION

    @property
    def start_time(self) -> float:
        return float(self.frames[0].time) if self.frames else 0.0

    @property
    def end_time(self) -> float:
        return float(self.frames[-1].time) if self.frames else 0.0

    def press_count(self, button: ButtonState) -> int:
        """Number of frames where `button` goes down."""
        count = 0
        held = ButtonState.NONE
        for frame in self.frames:
            if (frame.buttons & button) and not (held & button):
                count += 1
            held = frame.buttons
        return count
