from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Iterable


@dataclass(frozen=True)
class PlaylistEntry:
    """A weak reference from a playlist slot to a library track."""
    track_id: str
    position: int


def renumber(track_ids: Iterable[str]) -> tuple[PlaylistEntry, ...]:
    """Build entries with contiguous 1-based positions."""
    return tuple(
        PlaylistEntry(track_id=track_id, position=index)
        for index, track_id in enumerate(track_ids, start=1)
    )


@dataclass(frozen=True)
class Playlist:
    """A named, ordered list of track references."""
    name: str
    entries: tuple[PlaylistEntry, ...] = ()
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def track_ids(self) -> list[str]:
        return [entry.track_id for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)

    def with_track_ids(self, track_ids: Iterable[str]) -> Playlist:
        return replace(self, entries=renumber(track_ids))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "songs": [
                {"track_id": entry.track_id, "position": entry.position}
                for entry in self.entries
            ],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Playlist:
        songs = sorted(data.get("songs", []), key=lambda s: s.get("position", 0))
        return cls(
            id=data["id"],
            name=data["name"],
            entries=tuple(
                PlaylistEntry(track_id=str(s["track_id"]), position=int(s["position"]))
                for s in songs
            ),
        )
