from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PlaybackState(Enum):
    """Playback states driven by the navigator."""
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"


@dataclass(frozen=True)
class PlaybackContext:
    """Read-only view of the navigator's state."""
    state: PlaybackState
    current_track_id: str | None
    shuffle_enabled: bool
    source_ids: tuple[str, ...] | None
    shuffled_ids: tuple[str, ...] | None
