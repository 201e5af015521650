from __future__ import annotations

from bisect import bisect_left, bisect_right
from collections.abc import Iterator
from dataclasses import dataclass
from enum import IntEnum, IntFlag

from glide.geom import Vec2


class ButtonState(IntFlag):
    NONE = 0
    BUTTON_A = 1 << 0
    BUTTON_B = 1 << 1


BOTH_BUTTONS = ButtonState.BUTTON_A | ButtonState.BUTTON_B


def other_button(button: ButtonState) -> ButtonState:
    return BOTH_BUTTONS & ~ButtonState(button)


def button_for_index(button_index: int) -> ButtonState:
    return ButtonState.BUTTON_A if int(button_index) % 2 == 0 else ButtonState.BUTTON_B


class ButtonStateError(RuntimeError):
    pass


class FrameKind(IntEnum):
    BOOTSTRAP = 0
    PRESS = 1
    HOLD = 2
    RELEASE = 3
    TRAVEL = 4
    WAIT = 5


@dataclass(frozen=True, slots=True)
class ReplayFrame:
    time: float
    position: Vec2
    buttons: ButtonState = ButtonState.NONE

    @property
    def is_held(self) -> bool:
        return self.buttons != ButtonState.NONE


@dataclass(slots=True)
class FrameEntry:
    """A frame while generation is still running.

    `buttons` is the only field later passes rewrite. `kind` and `owner` record
    why the frame exists and which object it was emitted for.
    """

    time: float
    position: Vec2
    buttons: ButtonState
    kind: FrameKind
    owner: int | None = None

    def freeze(self) -> ReplayFrame:
        return ReplayFrame(time=float(self.time), position=self.position, buttons=ButtonState(self.buttons))


def _check_buttons(buttons: ButtonState, *, time: float) -> ButtonState:
    buttons = ButtonState(buttons)
    if buttons == BOTH_BUTTONS:
        raise ButtonStateError(f"both buttons held at t={time}")
    return buttons


class FrameBuffer:
    """Time-ordered output frames.

    Frames are never moved. The button state of frames already in the buffer
    may be rewritten through `set_buttons`, and releases that fall inside a
    hold are dropped through `remove_releases`; nothing else changes emitted
    output after the fact.
    """

    def __init__(self) -> None:
        self._entries: list[FrameEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[FrameEntry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> FrameEntry:
        return self._entries[index]

    @property
    def last(self) -> FrameEntry:
        if not self._entries:
            raise IndexError("frame buffer is empty")
        return self._entries[-1]

    def insertion_index(self, time: float) -> int:
        """Index a frame at `time` would take: after every frame at or before `time`."""
        return bisect_right(self._entries, float(time), key=lambda entry: float(entry.time))

    def last_index_at_or_before(self, time: float) -> int:
        return self.insertion_index(time) - 1

    def insert(
        self,
        time: float,
        position: Vec2,
        buttons: ButtonState,
        *,
        kind: FrameKind,
        owner: int | None = None,
    ) -> int:
        time = float(time)
        entry = FrameEntry(time=time, position=position, buttons=_check_buttons(buttons, time=time), kind=kind, owner=owner)
        index = self.insertion_index(time)
        self._entries.insert(index, entry)
        return index

    def first_owned(self, owner: int, *, not_before: float) -> int | None:
        """Index of the first frame emitted for `owner` at or after `not_before`."""
        start = bisect_left(self._entries, float(not_before), key=lambda entry: float(entry.time))
        for index in range(start, len(self._entries)):
            if self._entries[index].owner == owner:
                return index
        return None

    def owned_indices(self, owner: int, *, start: float, end: float) -> list[int]:
        """Indices of the non-release frames of `owner` within `[start, end]`."""
        first = bisect_left(self._entries, float(start), key=lambda entry: float(entry.time))
        stop = self.insertion_index(end)
        return [
            index
            for index in range(first, stop)
            if self._entries[index].owner == owner and self._entries[index].kind != FrameKind.RELEASE
        ]

    def remove_releases(self, *, after: int, before_time: float) -> int:
        """Drop release frames past index `after` and earlier than `before_time`."""
        stop = bisect_left(self._entries, float(before_time), key=lambda entry: float(entry.time))
        kept = [entry for entry in self._entries[after + 1 : stop] if entry.kind != FrameKind.RELEASE]
        removed = (stop - after - 1) - len(kept)
        if removed > 0:
            self._entries[after + 1 : stop] = kept
        return max(removed, 0)

    def last_held_reference(self, index: int) -> FrameEntry | None:
        """Last frame before `index` that is not a release."""
        for entry in reversed(self._entries[:index]):
            if entry.kind != FrameKind.RELEASE:
                return entry
        return None

    def set_buttons(self, index: int, buttons: ButtonState) -> None:
        entry = self._entries[index]
        entry.buttons = _check_buttons(buttons, time=entry.time)

    def freeze(self) -> tuple[ReplayFrame, ...]:
        return tuple(entry.freeze() for entry in self._entries)
