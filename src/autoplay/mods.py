from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


class SupportsTimeScaling(Protocol):
    def scale_duration(self, ms: float) -> float: ...

    def scale_rate(self, ms: float) -> float: ...


@dataclass(frozen=True, slots=True)
class TimeScaling:
    """Playback speed modifier expressed as the two conversions the generator needs.

    `scale_duration` turns a chart-time span into the span the player experiences
    (a 1.5x speed mod makes 300 ms feel like 200 ms). `scale_rate` goes the other
    way and is used for fixed real-time quantities such as the frame step and the
    reaction time, which must cover more chart time when the chart runs faster.
    """

    speed: float = 1.0

    def __post_init__(self) -> None:
        speed = float(self.speed)
        if not (speed > 0.0):
            raise ValueError(f"speed must be positive, got {speed}")
        object.__setattr__(self, "speed", speed)

    def scale_duration(self, ms: float) -> float:
        return float(ms) / self.speed

    def scale_rate(self, ms: float) -> float:
        return float(ms) * self.speed


NO_SCALING = TimeScaling()
