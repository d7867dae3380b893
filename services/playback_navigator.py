"""Playback navigation: current track, shuffle order, next/previous.

The navigator is a small state machine over IDLE, PLAYING and PAUSED with an
orthogonal shuffle flag. Every command runs under one lock. The audio
output's "finished" notification arrives on its own thread, so it is posted to
a queue and applied in arrival order before the next command, or when the UI
calls ``process_events()``.
"""

from __future__ import annotations

import logging
import queue
import random
import threading
from typing import Callable, List, Optional, Protocol, Sequence

from models.playback import PlaybackContext, PlaybackState
from models.track import Track
from services.errors import PlaybackError

logger = logging.getLogger(__name__)


class AudioOutput(Protocol):
    """Decode/output primitives the navigator drives."""

    def play(self, file_path: str) -> None: ...

    def pause(self) -> None: ...

    def resume(self) -> None: ...

    def stop(self) -> None: ...

    def seek(self, position: float) -> None: ...

    def get_position(self) -> float: ...


class PlaybackNavigator:
    """Computes and drives traversal over the library or a chosen collection."""

    def __init__(
        self,
        output: AudioOutput,
        library: Callable[[], Sequence[Track]],
        rng: Optional[random.Random] = None,
        artwork_loader: Optional[Callable[[str], Optional[bytes]]] = None,
    ):
        """Initialize the navigator.

        Args:
            output: Audio output collaborator.
            library: Returns the current full library; used when no source
                collection has been set.
            rng: Random generator for shuffling. Defaults to SystemRandom.
            artwork_loader: Optional callable returning cover art for a path.
        """
        self.output = output
        self._library = library
        self._rng = rng or random.SystemRandom()
        self._artwork_loader = artwork_loader

        self._lock = threading.RLock()
        self._events: queue.SimpleQueue[Optional[str]] = queue.SimpleQueue()

        self._state = PlaybackState.IDLE
        self._current: Optional[Track] = None
        self._source: Optional[List[Track]] = None
        self._shuffle_enabled = False
        self._shuffled: Optional[List[Track]] = None
        self._artwork: Optional[bytes] = None

    # Read-only state

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def current_track(self) -> Optional[Track]:
        return self._current

    @property
    def current_lyrics(self) -> Optional[str]:
        return self._current.lyrics if self._current else None

    @property
    def current_artwork(self) -> Optional[bytes]:
        return self._artwork

    @property
    def shuffle_enabled(self) -> bool:
        return self._shuffle_enabled

    @property
    def context(self) -> PlaybackContext:
        with self._lock:
            return PlaybackContext(
                state=self._state,
                current_track_id=self._current.id if self._current else None,
                shuffle_enabled=self._shuffle_enabled,
                source_ids=tuple(t.id for t in self._source) if self._source is not None else None,
                shuffled_ids=tuple(t.id for t in self._shuffled) if self._shuffled is not None else None,
            )

    def effective_collection(self) -> List[Track]:
        """The order next/previous walk: shuffled, else source, else library."""
        with self._lock:
            if self._shuffle_enabled and self._shuffled is not None:
                return list(self._shuffled)
            if self._source is not None:
                return list(self._source)
            return list(self._library())

    # Source and shuffle

    def set_source_collection(self, tracks: Optional[Sequence[Track]]) -> None:
        """Replace the source collection; None falls back to the full library.

        With shuffle on, a fresh shuffled order is generated immediately.
        """
        with self._lock:
            self._drain_events()
            self._source = list(tracks) if tracks is not None else None
            if self._shuffle_enabled:
                self._shuffled = self._shuffle(self._source_or_library())
            else:
                self._shuffled = None

    def toggle_shuffle(self) -> bool:
        """Flip shuffle. Turning it on snapshots a new random order.

        Returns:
            The new shuffle flag.
        """
        with self._lock:
            self._drain_events()
            self._shuffle_enabled = not self._shuffle_enabled
            if self._shuffle_enabled:
                self._shuffled = self._shuffle(self._source_or_library())
            else:
                self._shuffled = None
            logger.info(f"Shuffle {'on' if self._shuffle_enabled else 'off'}")
            return self._shuffle_enabled

    # Transport

    def play(self, track: Track, source: Optional[Sequence[Track]] = None) -> bool:
        """Start playing ``track``, optionally switching source collection first.

        Returns:
            True if the audio output started the track.
        """
        with self._lock:
            self._drain_events()
            if source is not None:
                self.set_source_collection(source)
            return self._start(track)

    def pause(self) -> None:
        with self._lock:
            self._drain_events()
            if self._current is None or self._state != PlaybackState.PLAYING:
                return
            self.output.pause()
            self._state = PlaybackState.PAUSED

    def resume(self) -> None:
        with self._lock:
            self._drain_events()
            if self._current is None or self._state != PlaybackState.PAUSED:
                return
            self.output.resume()
            self._state = PlaybackState.PLAYING

    def toggle_pause(self) -> None:
        """Pause, resume, or replay the current track if playback went idle."""
        with self._lock:
            self._drain_events()
            if self._state == PlaybackState.PLAYING:
                self.pause()
            elif self._state == PlaybackState.PAUSED:
                self.resume()
            elif self._current is not None:
                self._start(self._resolve(self._current))

    def stop(self) -> None:
        with self._lock:
            self._drain_events()
            if self._current is None:
                return
            self.output.stop()
            self._state = PlaybackState.IDLE
            self._current = None
            self._artwork = None

    def next(self) -> Optional[Track]:
        """Play the entry after the current one. No wraparound.

        Returns:
            The track now playing, or None if nothing changed.
        """
        with self._lock:
            self._drain_events()
            return self._step(1)

    def previous(self) -> Optional[Track]:
        """Play the entry before the current one.

        Returns:
            The track now playing, or None if nothing changed.
        """
        with self._lock:
            self._drain_events()
            return self._step(-1)

    def seek(self, position: float) -> bool:
        """Seek within the current track; out-of-range positions are ignored."""
        with self._lock:
            self._drain_events()
            track = self._current
            if track is None or not 0 <= position <= track.duration_seconds:
                return False
            self.output.seek(position)
            return True

    def get_position(self) -> float:
        if self._current is None:
            return 0.0
        return self.output.get_position()

    # Track-finished events

    def post_finished(self, file_path: Optional[str] = None) -> None:
        """Queue a natural end-of-track notification. Safe from any thread.

        Args:
            file_path: File that finished. A notification for a file that is
                no longer current is dropped.
        """
        self._events.put(file_path)

    def process_events(self) -> None:
        """Apply queued notifications."""
        with self._lock:
            self._drain_events()

    def _drain_events(self) -> None:
        while True:
            try:
                file_path = self._events.get_nowait()
            except queue.Empty:
                return
            self._on_finished(file_path)

    def _on_finished(self, file_path: Optional[str]) -> None:
        current = self._current
        if current is None or self._state != PlaybackState.PLAYING:
            return
        if file_path is not None and file_path != current.file_path:
            logger.debug(f"Ignoring stale finished event for {file_path}")
            return

        logger.debug(f"Track finished: {current.title}")
        if self._step(1) is None:
            logger.info("Reached end of collection")
            self._state = PlaybackState.IDLE

    # Internals

    def _source_or_library(self) -> List[Track]:
        if self._source is not None:
            return list(self._source)
        return list(self._library())

    def _shuffle(self, tracks: List[Track]) -> List[Track]:
        shuffled = list(tracks)
        self._rng.shuffle(shuffled)
        return shuffled

    def _step(self, offset: int) -> Optional[Track]:
        current = self._current
        if current is None:
            return None

        collection = self.effective_collection()
        index = next((i for i, t in enumerate(collection) if t.id == current.id), None)
        if index is None:
            logger.debug(f"Current track {current.id} not in active collection")
            return None

        target = index + offset
        if not 0 <= target < len(collection):
            return None

        track = self._resolve(collection[target])
        return track if self._start(track) else None

    def _resolve(self, track: Track) -> Track:
        """Return the library's current copy of ``track``, which may have a new path."""
        for candidate in self._library():
            if candidate.id == track.id:
                return candidate
        return track

    def _start(self, track: Track) -> bool:
        try:
            self.output.play(track.file_path)
        except PlaybackError as e:
            logger.error(f"Error playing {track.file_path}: {e}")
            return False

        self._current = track
        self._state = PlaybackState.PLAYING
        self._artwork = self._artwork_loader(track.file_path) if self._artwork_loader else None
        logger.info(f"Playing '{track.title}' by {track.artist or 'Unknown Artist'}")
        return True
