from __future__ import annotations

from .debug_log import trace
from .timeline import EventKind, TimelineEvent

_LEADS_INTO_PATH_END = (EventKind.CLICK, EventKind.HOLD_TICK)


def _same_time_run_end(events: list[TimelineEvent], index: int) -> int:
    time = events[index].time
    end = index + 1
    while end < len(events) and events[end].time == time:
        end += 1
    return end


def resolve_conflicts(events: list[TimelineEvent]) -> list[TimelineEvent]:
    """Reduce every timestamp to at most one held event, in place.

    Clicks sharing a timestamp are all kept. A hold tick, spin sample or path end
    keeps its place and drops every later event at its timestamp (events are
    sorted by priority, so those are always of equal or lower importance). A path
    end whose predecessor is not a click or tick of the same path is dropped.

    Returns `events` for chaining. Running it again changes nothing.
    """

    dropped = 0
    index = 0
    while index < len(events):
        event = events[index]
        match event.kind:
            case EventKind.CLICK:
                index += 1
                continue
            case EventKind.PATH_END:
                previous = events[index - 1] if index > 0 else None
                if (
                    previous is None
                    or previous.kind not in _LEADS_INTO_PATH_END
                    or previous.object_index != event.object_index
                ):
                    del events[index]
                    dropped += 1
                    continue
            case EventKind.HOLD_TICK | EventKind.SPIN_SAMPLE:
                pass

        end = _same_time_run_end(events, index)
        dropped += end - index - 1
        del events[index + 1 : end]
        index += 1

    trace("resolve", events=len(events), dropped=dropped)
    return events
