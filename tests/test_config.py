from __future__ import annotations

from pathlib import Path

import pytest

from glide.geom import Vec2

from autoplay.config import DEFAULT_SETTINGS, GeneratorSettings, SettingsError, decode_settings, load_settings


def test_default_settings_match_generator_constants() -> None:
    settings = DEFAULT_SETTINGS

    assert settings.frame_delay_ms == pytest.approx(1000.0 / 60.0)
    assert settings.key_up_delay_ms == 50.0
    assert settings.spin_radius == 50.0
    assert settings.spin_ms_per_radian == 20.0
    assert settings.snap_time_threshold_ms == 266.0
    assert settings.centre == Vec2(256.0, 192.0)
    assert settings.idle == Vec2(256.0, 500.0)


def test_load_settings_from_toml(tmp_path: Path) -> None:
    path = tmp_path / "settings.toml"
    path.write_text('frame_delay_ms = 10.0\nplayfield_centre = [320.0, 240.0]\n', encoding="utf-8")

    settings = load_settings(path)

    assert settings.frame_delay_ms == 10.0
    assert settings.centre == Vec2(320.0, 240.0)
    assert settings.key_up_delay_ms == DEFAULT_SETTINGS.key_up_delay_ms


def test_load_settings_from_json(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text('{"spin_radius": 40}', encoding="utf-8")

    assert load_settings(path) == GeneratorSettings(spin_radius=40.0)


def test_decode_settings_rejects_unknown_fields() -> None:
    with pytest.raises(SettingsError, match="invalid generator settings"):
        decode_settings(b'{"frame_rate": 60}')


def test_decode_settings_rejects_non_positive_step() -> None:
    with pytest.raises(SettingsError, match="frame_delay_ms"):
        decode_settings(b'{"frame_delay_ms": 0}')


def test_load_settings_rejects_unknown_suffix(tmp_path: Path) -> None:
    path = tmp_path / "settings.yaml"
    path.write_text("spin_radius: 40\n", encoding="utf-8")

    with pytest.raises(SettingsError, match="must be one of"):
        load_settings(path)
