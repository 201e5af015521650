from __future__ import annotations

import math

import pytest

from glide.geom import Vec2
from glide.math import clamp, clamp01, safe_asin, safe_sqrt


def test_vec2_length_and_length_sq() -> None:
    vec = Vec2(3.0, 4.0)

    assert math.isclose(vec.length_sq(), 25.0, abs_tol=1e-9)
    assert math.isclose(vec.length(), 5.0, abs_tol=1e-9)


def test_vec2_normalized_returns_unit_vector_without_mutating_original() -> None:
    vec = Vec2(3.0, 4.0)

    normalized = vec.normalized()

    assert normalized is not vec
    assert math.isclose(normalized.x, 0.6, abs_tol=1e-9)
    assert math.isclose(normalized.y, 0.8, abs_tol=1e-9)
    assert vec == Vec2(3.0, 4.0)


def test_vec2_normalized_zero_vector_stays_zero() -> None:
    assert Vec2().normalized() == Vec2()


def test_vec2_with_length_keeps_direction() -> None:
    result = Vec2(0.0, -2.0).with_length(5.0)

    assert result.isclose(Vec2(0.0, -5.0))


def test_vec2_rotated_quarter_turn() -> None:
    result = Vec2(1.0, 0.0).rotated(math.pi / 2.0)

    assert result.isclose(Vec2(0.0, 1.0))


def test_vec2_polar_and_angle_roundtrip() -> None:
    vec = Vec2.from_polar(0.75, 50.0)

    assert math.isclose(vec.length(), 50.0, abs_tol=1e-9)
    assert math.isclose(vec.to_angle(), 0.75, abs_tol=1e-9)


def test_vec2_from_pair_rejects_wrong_arity() -> None:
    assert Vec2.from_pair((1, 2)) == Vec2(1.0, 2.0)
    with pytest.raises(ValueError, match="pair"):
        Vec2.from_pair([1.0, 2.0, 3.0])


def test_vec2_lerp_extrapolates_past_one() -> None:
    assert Vec2.lerp(Vec2(0.0, 0.0), Vec2(10.0, 0.0), 1.5).isclose(Vec2(15.0, 0.0))


def test_scalar_helpers_clamp_their_domains() -> None:
    assert clamp(5.0, 0.0, 3.0) == 3.0
    assert clamp01(-0.5) == 0.0
    assert safe_asin(1.0000001) == pytest.approx(math.pi / 2.0)
    assert safe_sqrt(-1e-12) == 0.0
