from __future__ import annotations

import itertools

import pytest

from autoplay.spins import SpinRegistry, SpinWindow


def _registry(*windows: tuple[float, float]) -> SpinRegistry:
    registry = SpinRegistry()
    for start, end in windows:
        registry.insert(SpinWindow(start, end))
    return registry


def test_spin_registry_keeps_disjoint_windows_sorted() -> None:
    registry = _registry((5000.0, 6000.0), (1000.0, 2000.0), (3000.0, 4000.0))

    assert registry.windows == (
        SpinWindow(1000.0, 2000.0),
        SpinWindow(3000.0, 4000.0),
        SpinWindow(5000.0, 6000.0),
    )


def test_spin_registry_merges_overlapping_run() -> None:
    registry = _registry((1000.0, 2000.0), (3000.0, 4000.0), (5000.0, 6000.0))

    merged = registry.insert(SpinWindow(1500.0, 3500.0))

    assert merged == SpinWindow(1000.0, 4000.0)
    assert registry.windows == (SpinWindow(1000.0, 4000.0), SpinWindow(5000.0, 6000.0))


def test_spin_registry_merges_touching_windows() -> None:
    registry = _registry((1000.0, 2000.0), (2000.0, 2500.0))

    assert registry.windows == (SpinWindow(1000.0, 2500.0),)


def test_spin_registry_contained_window_is_noop() -> None:
    registry = _registry((1000.0, 5000.0))

    registry.insert(SpinWindow(2000.0, 3000.0))
    registry.insert(SpinWindow(2000.0, 3000.0))

    assert registry.windows == (SpinWindow(1000.0, 5000.0),)


def test_spin_registry_is_insertion_order_independent() -> None:
    windows = [(0.0, 100.0), (50.0, 300.0), (400.0, 500.0), (500.0, 520.0), (900.0, 1000.0), (250.0, 260.0)]
    expected = _registry(*windows).windows

    for order in itertools.permutations(windows):
        assert _registry(*order).windows == expected

    assert expected == (SpinWindow(0.0, 300.0), SpinWindow(400.0, 520.0), SpinWindow(900.0, 1000.0))


def test_spin_window_rejects_negative_duration() -> None:
    with pytest.raises(ValueError, match="ends before"):
        SpinWindow(10.0, 5.0)
