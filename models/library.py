from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from models.playlist import Playlist
from models.track import Track


@dataclass(frozen=True)
class LibrarySnapshot:
    """Immutable state published by the library manager after each mutation."""
    tracks: tuple[Track, ...]
    playlists: tuple[Playlist, ...]
    music_dir: Optional[str]
    revision: int
    save_error: Optional[str] = None

    def track_by_id(self, track_id: str) -> Optional[Track]:
        for track in self.tracks:
            if track.id == track_id:
                return track
        return None

    def playlist_by_id(self, playlist_id: str) -> Optional[Playlist]:
        for playlist in self.playlists:
            if playlist.id == playlist_id:
                return playlist
        return None
