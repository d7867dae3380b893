from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from models.library import LibrarySnapshot
from models.playlist import Playlist
from models.track import Track, number_tracks
from services.errors import PersistenceError, ReconciliationInProgress
from services.file_access import DirectoryGrant
from services.library_reconciler import LibraryReconciler, ReconcileResult
from services.library_store import LibraryStore
from services.playlist_store import PlaylistStore

logger = logging.getLogger(__name__)

Listener = Callable[[LibrarySnapshot], None]


class LibraryManager:
    """Owns the library and playlists.

    All mutations go through this class. Each one persists the new state and
    publishes an immutable ``LibrarySnapshot`` to subscribers; the snapshot is
    also returned to the caller.

    State changes happen under ``_lock``; subscribers are always called after
    it has been released, so a subscriber may call back into the manager from
    any thread.
    """

    def __init__(
        self,
        store: LibraryStore,
        reconciler: Optional[LibraryReconciler] = None,
    ):
        self.store = store
        self.reconciler = reconciler or LibraryReconciler()

        self._lock = threading.RLock()
        self._refresh_lock = threading.Lock()
        self._cancel_event = threading.Event()

        self._tracks: List[Track] = []
        self._playlists = PlaylistStore()
        self._grant = DirectoryGrant(None)
        self._listeners: List[Listener] = []
        self._revision = 0
        self._save_error: Optional[str] = None
        self._snapshot = self._build_snapshot()

    # Loading and publishing

    def load(self) -> LibrarySnapshot:
        """Load the saved library, starting empty if it cannot be read."""
        try:
            data = self.store.load()
        except PersistenceError as e:
            logger.error(f"Error loading library: {e}")
            return self._publish(persist=False)

        with self._lock:
            self._tracks = number_tracks(data.tracks)
            self._playlists = PlaylistStore(data.playlists)
            self._playlists.prune(track.id for track in self._tracks)
            self._grant = DirectoryGrant(Path(data.music_dir) if data.music_dir else None)
        return self._publish(persist=False)

    @property
    def snapshot(self) -> LibrarySnapshot:
        return self._snapshot

    @property
    def tracks(self) -> tuple[Track, ...]:
        return self._snapshot.tracks

    @property
    def playlists(self) -> tuple[Playlist, ...]:
        return self._snapshot.playlists

    @property
    def music_directory(self) -> Optional[Path]:
        return self._grant.path

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register for snapshots published after every mutation.

        Returns:
            A callable that removes the subscription.
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _build_snapshot(self) -> LibrarySnapshot:
        return LibrarySnapshot(
            tracks=tuple(self._tracks),
            playlists=self._playlists.playlists,
            music_dir=str(self._grant.path) if self._grant.path else None,
            revision=self._revision,
            save_error=self._save_error,
        )

    def _publish(self, persist: bool = True) -> LibrarySnapshot:
        """Optionally persist, take a snapshot, then notify subscribers.

        A failed save is logged and reported in the snapshot; in-memory state
        is kept either way. Must not be called while holding ``_lock``.
        """
        with self._lock:
            if persist:
                self._save()
            self._revision += 1
            self._snapshot = self._build_snapshot()
            snapshot = self._snapshot
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Library listener failed: {e}", exc_info=True)
        return snapshot

    def _save(self) -> None:
        music_dir = str(self._grant.path) if self._grant.path else None
        try:
            self.store.save(self._tracks, self._playlists.playlists, music_dir)
            self._save_error = None
        except PersistenceError as e:
            logger.error(f"Error saving library: {e}")
            self._save_error = str(e)

    # Music directory and refresh

    def select_music_directory(self, path: Path, refresh: bool = True) -> LibrarySnapshot:
        """Use ``path`` as the music directory and optionally rescan it.

        Raises:
            NoDirectorySelected: If ``path`` is not a directory.
            DirectoryAccessError: If it cannot be read.
        """
        grant = DirectoryGrant(path)
        grant.validate()
        with self._lock:
            self._grant = grant
        logger.info(f"Music directory set to {grant.path}")
        snapshot = self._publish()
        if refresh:
            self.refresh_library()
            snapshot = self.snapshot
        return snapshot

    def refresh_library(self) -> ReconcileResult:
        """Rescan the music directory and commit the reconciled library.

        Blocking; call it from a worker thread. Nothing is committed if the
        directory is inaccessible or the refresh is cancelled.

        Raises:
            NoDirectorySelected: No directory selected, or it went stale.
            DirectoryAccessError: The directory cannot be read.
            ReconciliationInProgress: Another refresh is still running.
        """
        if not self._refresh_lock.acquire(blocking=False):
            raise ReconciliationInProgress("A library refresh is already running")

        try:
            self._cancel_event.clear()
            with self._lock:
                grant = self._grant
                existing = list(self._tracks)

            with grant.access() as root:
                result = self.reconciler.reconcile(existing, root, self._cancel_event)

            if not result.committable:
                logger.warning(
                    f"Library refresh not committed "
                    f"(cancelled={result.cancelled}, root_accessible={result.root_accessible})"
                )
                return result

            with self._lock:
                self._tracks = list(result.tracks)
                self._playlists.prune(track.id for track in self._tracks)
            self._publish()
            return result
        finally:
            self._refresh_lock.release()

    def cancel_refresh(self) -> None:
        """Ask a running refresh to stop before the next file."""
        self._cancel_event.set()

    @property
    def is_refreshing(self) -> bool:
        return self._refresh_lock.locked()

    # Tracks

    def remove_tracks(self, track_ids: Iterable[str]) -> LibrarySnapshot:
        """Remove tracks from the library and from every playlist."""
        to_remove = set(track_ids)
        with self._lock:
            remaining = [track for track in self._tracks if track.id not in to_remove]
            if len(remaining) == len(self._tracks):
                return self._snapshot
            logger.info(f"Removing {len(self._tracks) - len(remaining)} tracks from library")
            self._tracks = number_tracks(remaining)
            self._playlists.prune(track.id for track in self._tracks)
        return self._publish()

    def remove_track(self, track_id: str) -> LibrarySnapshot:
        return self.remove_tracks([track_id])

    def track_by_id(self, track_id: str) -> Optional[Track]:
        return self._snapshot.track_by_id(track_id)

    def search(self, query: str, tracks: Optional[Sequence[Track]] = None) -> List[Track]:
        """Filter tracks by a case-insensitive match on title, artist or album."""
        source = list(self._snapshot.tracks if tracks is None else tracks)
        needle = query.strip().lower()
        if not needle:
            return source
        return [
            track for track in source
            if needle in track.title.lower()
            or (track.artist and needle in track.artist.lower())
            or (track.album and needle in track.album.lower())
        ]

    # Playlists

    def create_playlist(self, name: str) -> Playlist:
        with self._lock:
            playlist = self._playlists.create_playlist(name)
        self._publish()
        return playlist

    def delete_playlist(self, playlist_id: str) -> LibrarySnapshot:
        with self._lock:
            self._playlists.delete_playlist(playlist_id)
        return self._publish()

    def add_tracks_to_playlist(self, track_ids: Iterable[str], playlist_id: str) -> LibrarySnapshot:
        """Append tracks to a playlist. IDs not in the library are ignored."""
        with self._lock:
            known = {track.id for track in self._tracks}
            wanted = list(track_ids)
            valid = [track_id for track_id in wanted if track_id in known]
            if len(valid) != len(wanted):
                logger.warning(f"Ignoring {len(wanted) - len(valid)} unknown track IDs for playlist {playlist_id}")
            self._playlists.add_tracks(valid, playlist_id)
        return self._publish()

    def remove_tracks_from_playlist(self, track_ids: Iterable[str], playlist_id: str) -> LibrarySnapshot:
        with self._lock:
            self._playlists.remove_tracks(track_ids, playlist_id)
        return self._publish()

    def reorder_playlist(self, playlist_id: str, from_index: int, to_index: int) -> LibrarySnapshot:
        """Move a playlist entry. Invalid indices leave the playlist as it was."""
        with self._lock:
            self._playlists.reorder(playlist_id, from_index, to_index)
        return self._publish()

    def playlist_tracks(self, playlist_id: str) -> List[Track]:
        """Resolve a playlist's entries to library tracks in position order."""
        snapshot = self._snapshot
        playlist = snapshot.playlist_by_id(playlist_id)
        if playlist is None:
            return []
        by_id = {track.id: track for track in snapshot.tracks}
        return [by_id[entry.track_id] for entry in playlist.entries if entry.track_id in by_id]
