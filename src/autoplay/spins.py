from __future__ import annotations

from bisect import bisect_left, bisect_right
from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SpinWindow:
    start_time: float
    end_time: float

    def __post_init__(self) -> None:
        if float(self.end_time) < float(self.start_time):
            raise ValueError(f"spin window ends before it starts: {self.start_time} > {self.end_time}")

    @property
    def duration(self) -> float:
        return float(self.end_time) - float(self.start_time)

    def contains(self, time: float) -> bool:
        return float(self.start_time) <= float(time) <= float(self.end_time)


class SpinRegistry:
    """Sorted, disjoint time windows during which the cursor has to spin.

    Inserting a window that overlaps or touches existing ones replaces all of them
    with a single window spanning the union, so `windows[i].end_time <
    windows[i + 1].start_time` always holds.
    """

    def __init__(self) -> None:
        self._windows: list[SpinWindow] = []

    @property
    def windows(self) -> tuple[SpinWindow, ...]:
        return tuple(self._windows)

    def __len__(self) -> int:
        return len(self._windows)

    def __iter__(self) -> Iterator[SpinWindow]:
        return iter(tuple(self._windows))

    def insert(self, window: SpinWindow) -> SpinWindow:
        """Insert `window`, merging it with any neighbours it reaches.

        Returns the window that now covers the inserted span.
        """

        windows = self._windows
        # Rightmost window ending strictly before the new one starts.
        insert_after = bisect_left(windows, float(window.start_time), key=lambda item: float(item.end_time)) - 1
        # Leftmost window starting strictly after the new one ends.
        insert_before = bisect_right(windows, float(window.end_time), key=lambda item: float(item.start_time))

        if insert_before == insert_after + 1:
            windows.insert(insert_after + 1, window)
            return window

        merged = SpinWindow(
            start_time=min(float(windows[insert_after + 1].start_time), float(window.start_time)),
            end_time=max(float(windows[insert_before - 1].end_time), float(window.end_time)),
        )
        windows[insert_after + 1 : insert_before] = [merged]
        return merged
