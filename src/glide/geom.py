from __future__ import annotations

from dataclasses import dataclass
import math


@dataclass(slots=True, frozen=True)
class Vec2:
    x: float = 0.0
    y: float = 0.0

    def length_sq(self) -> float:
        return self.x * self.x + self.y * self.y

    def length(self) -> float:
        return math.sqrt(self.length_sq())

    def __add__(self, other: Vec2) -> Vec2:
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vec2) -> Vec2:
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Vec2:
        return Vec2(self.x * scalar, self.y * scalar)

    def __rmul__(self, scalar: float) -> Vec2:
        return self * scalar

    def __truediv__(self, scalar: float) -> Vec2:
        return Vec2(self.x / scalar, self.y / scalar)

    def normalized(self) -> Vec2:
        magnitude_sq = self.length_sq()
        if magnitude_sq <= 0.0:
            return Vec2()
        inv_magnitude = 1.0 / math.sqrt(magnitude_sq)
        return Vec2(self.x * inv_magnitude, self.y * inv_magnitude)

    def with_length(self, length: float) -> Vec2:
        return self.normalized() * float(length)

    def distance_to(self, other: Vec2) -> float:
        return (other - self).length()

    @classmethod
    def from_angle(cls, theta: float) -> Vec2:
        return cls(x=math.cos(theta), y=math.sin(theta))

    @classmethod
    def from_polar(cls, theta: float, radius: float = 1.0) -> Vec2:
        return cls.from_angle(theta) * radius

    @classmethod
    def from_pair(cls, value: tuple[float, float] | list[float]) -> Vec2:
        if len(value) != 2:
            raise ValueError(f"expected an (x, y) pair, got {value!r}")
        return cls(x=float(value[0]), y=float(value[1]))

    def to_angle(self) -> float:
        return math.atan2(self.y, self.x)

    def to_pair(self) -> tuple[float, float]:
        return self.x, self.y

    def rotated(self, theta: float) -> Vec2:
        cos_theta = math.cos(theta)
        sin_theta = math.sin(theta)
        return Vec2(
            x=self.x * cos_theta - self.y * sin_theta,
            y=self.x * sin_theta + self.y * cos_theta,
        )

    def isclose(self, other: Vec2, *, abs_tol: float = 1e-9) -> bool:
        return math.isclose(self.x, other.x, abs_tol=abs_tol) and math.isclose(self.y, other.y, abs_tol=abs_tol)

    @staticmethod
    def lerp(a: Vec2, b: Vec2, t: float) -> Vec2:
        return Vec2(
            x=a.x + (b.x - a.x) * t,
            y=a.y + (b.y - a.y) * t,
        )
