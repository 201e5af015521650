from __future__ import annotations

from pathlib import Path

import msgspec

from glide.geom import Vec2

SETTINGS_SUFFIXES = (".json", ".toml")


class SettingsError(ValueError):
    pass


class GeneratorSettings(msgspec.Struct, frozen=True, forbid_unknown_fields=True, kw_only=True):
    frame_delay_ms: float = 1000.0 / 60.0
    key_up_delay_ms: float = 50.0
    spin_radius: float = 50.0
    spin_ms_per_radian: float = 20.0
    path_end_lead_in_ms: float = 36.0
    snap_time_threshold_ms: float = 266.0
    snap_radius_factor: float = 1.5
    snap_time_factor: float = 100.0
    reaction_time_ms: float = 100.0
    time_preempt_ms: float = 600.0
    playfield_centre: tuple[float, float] = (256.0, 192.0)
    idle_position: tuple[float, float] = (256.0, 500.0)
    bootstrap_time_ms: float = -100000.0

    def __post_init__(self) -> None:
        if not (self.frame_delay_ms > 0.0):
            raise ValueError(f"frame_delay_ms must be positive, got {self.frame_delay_ms}")
        if not (self.spin_radius > 0.0):
            raise ValueError(f"spin_radius must be positive, got {self.spin_radius}")
        if not (self.spin_ms_per_radian > 0.0):
            raise ValueError(f"spin_ms_per_radian must be positive, got {self.spin_ms_per_radian}")
        if self.key_up_delay_ms < 0.0:
            raise ValueError(f"key_up_delay_ms must be non-negative, got {self.key_up_delay_ms}")

    @property
    def centre(self) -> Vec2:
        return Vec2.from_pair(self.playfield_centre)

    @property
    def idle(self) -> Vec2:
        return Vec2.from_pair(self.idle_position)


DEFAULT_SETTINGS = GeneratorSettings()


def decode_settings(data: bytes, *, fmt: str = "json") -> GeneratorSettings:
    try:
        if fmt == "json":
            return msgspec.json.decode(data, type=GeneratorSettings)
        if fmt == "toml":
            return msgspec.toml.decode(data, type=GeneratorSettings)
    except (msgspec.ValidationError, msgspec.DecodeError) as exc:
        raise SettingsError(f"invalid generator settings: {exc}") from exc
    raise SettingsError(f"unknown settings format: {fmt!r}")


def load_settings(path: Path) -> GeneratorSettings:
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in SETTINGS_SUFFIXES:
        raise SettingsError(f"settings file must be one of {', '.join(SETTINGS_SUFFIXES)}: {path}")
    return decode_settings(path.read_bytes(), fmt=suffix.lstrip("."))
