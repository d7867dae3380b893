from __future__ import annotations

import time
from dataclasses import dataclass, replace
from typing import Any, Iterable, Optional

ID_WIDTH = 20


def format_time(seconds: float) -> str:
    """Format a duration in seconds as M:SS."""
    total = max(0, int(seconds))
    minutes, secs = divmod(total, 60)
    return f"{minutes}:{secs:02d}"


@dataclass(frozen=True)
class Track:
    """Represents a music track in the library."""
    id: str
    content_hash: str
    track_number: int
    file_path: str
    title: str
    artist: Optional[str] = None
    album: Optional[str] = None
    duration_seconds: float = 0.0
    lyrics: Optional[str] = None

    @property
    def duration(self) -> str:
        return format_time(self.duration_seconds)

    def renumbered(self, track_number: int) -> Track:
        return replace(self, track_number=track_number)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "content_hash": self.content_hash,
            "track_number": self.track_number,
            "file_path": self.file_path,
            "title": self.title,
            "artist": self.artist,
            "album": self.album,
            "duration_seconds": self.duration_seconds,
            "lyrics": self.lyrics,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Track:
        return cls(
            id=str(data["id"]),
            content_hash=data["content_hash"],
            track_number=int(data.get("track_number", 0)),
            file_path=data["file_path"],
            title=data.get("title") or "",
            artist=data.get("artist"),
            album=data.get("album"),
            duration_seconds=float(data.get("duration_seconds") or 0.0),
            lyrics=data.get("lyrics"),
        )


def number_tracks(tracks: Iterable[Track]) -> list[Track]:
    """Order tracks by stable ID and assign track numbers 1..N."""
    ordered = sorted(tracks, key=lambda t: t.id)
    return [
        track if track.track_number == index else track.renumbered(index)
        for index, track in enumerate(ordered, start=1)
    ]


class StableIdMinter:
    """Mints creation-ordered track IDs.

    IDs are zero-padded nanosecond timestamps, so string order is creation
    order. The minter never goes backwards, even across restarts, because it
    is seeded with the largest ID already in the library.
    """

    def __init__(self, existing_ids: Iterable[str] = ()):
        self._last = 0
        for track_id in existing_ids:
            if track_id.isdigit():
                self._last = max(self._last, int(track_id))

    def mint(self) -> str:
        self._last = max(time.time_ns(), self._last + 1)
        return f"{self._last:0{ID_WIDTH}d}"
