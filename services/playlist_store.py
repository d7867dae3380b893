from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from models.playlist import Playlist

logger = logging.getLogger(__name__)


class PlaylistStore:
    """In-memory ordered playlists.

    Every mutation leaves entry positions as a contiguous 1..M sequence.
    Persisting the result is the caller's job.
    """

    def __init__(self, playlists: Optional[Iterable[Playlist]] = None):
        self._playlists: List[Playlist] = [
            playlist.with_track_ids(playlist.track_ids) for playlist in (playlists or [])
        ]

    @property
    def playlists(self) -> tuple[Playlist, ...]:
        return tuple(self._playlists)

    def get(self, playlist_id: str) -> Optional[Playlist]:
        index = self._index_of(playlist_id)
        return self._playlists[index] if index is not None else None

    def create_playlist(self, name: str) -> Playlist:
        """Append an empty playlist. Names need not be unique."""
        playlist = Playlist(name=name)
        self._playlists.append(playlist)
        logger.info(f"Created playlist '{name}' ({playlist.id})")
        return playlist

    def delete_playlist(self, playlist_id: str) -> bool:
        index = self._index_of(playlist_id)
        if index is None:
            return False
        removed = self._playlists.pop(index)
        logger.info(f"Deleted playlist '{removed.name}' ({removed.id})")
        return True

    def add_tracks(self, track_ids: Iterable[str], playlist_id: str) -> Optional[Playlist]:
        """Append track references in the given order."""
        index = self._index_of(playlist_id)
        if index is None:
            return None
        playlist = self._playlists[index]
        updated = playlist.with_track_ids(playlist.track_ids + list(track_ids))
        self._playlists[index] = updated
        return updated

    def remove_tracks(self, track_ids: Iterable[str], playlist_id: str) -> Optional[Playlist]:
        """Remove every entry referencing one of ``track_ids`` and renumber."""
        index = self._index_of(playlist_id)
        if index is None:
            return None
        to_remove = set(track_ids)
        playlist = self._playlists[index]
        updated = playlist.with_track_ids(
            track_id for track_id in playlist.track_ids if track_id not in to_remove
        )
        self._playlists[index] = updated
        return updated

    def reorder(self, playlist_id: str, from_index: int, to_index: int) -> bool:
        """Move the entry at ``from_index`` to ``to_index`` (0-based).

        Out-of-range indices are ignored and return False.
        """
        index = self._index_of(playlist_id)
        if index is None:
            return False
        playlist = self._playlists[index]
        count = len(playlist)
        if not (0 <= from_index < count and 0 <= to_index < count):
            logger.debug(f"Ignoring reorder {from_index}->{to_index} on playlist of {count}")
            return False

        track_ids = playlist.track_ids
        moved = track_ids.pop(from_index)
        track_ids.insert(to_index, moved)
        self._playlists[index] = playlist.with_track_ids(track_ids)
        return True

    def prune(self, valid_track_ids: Iterable[str]) -> int:
        """Drop entries whose track is not in ``valid_track_ids``.

        Returns:
            Number of entries removed across all playlists.
        """
        valid = set(valid_track_ids)
        removed = 0
        for index, playlist in enumerate(self._playlists):
            kept = [track_id for track_id in playlist.track_ids if track_id in valid]
            if len(kept) != len(playlist):
                removed += len(playlist) - len(kept)
                self._playlists[index] = playlist.with_track_ids(kept)
        if removed:
            logger.info(f"Pruned {removed} playlist entries referencing removed tracks")
        return removed

    def _index_of(self, playlist_id: str) -> Optional[int]:
        for index, playlist in enumerate(self._playlists):
            if playlist.id == playlist_id:
                return index
        return None
