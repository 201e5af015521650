from __future__ import annotations

from .codec import (
    ReplayCodecError,
    StaleReplayWarning,
    dump_replay,
    dump_replay_file,
    load_replay,
    load_replay_file,
    stale_generator_version,
)
from .types import REPLAY_FORMAT_VERSION, Replay, ReplayHeader

__all__ = [
    "REPLAY_FORMAT_VERSION",
    "Replay",
    "ReplayCodecError",
    "ReplayHeader",
    "StaleReplayWarning",
    "dump_replay",
    "dump_replay_file",
    "load_replay",
    "load_replay_file",
    "stale_generator_version",
]
