import logging
import time
from typing import Callable, List, Optional

import pygame

from services.errors import PlaybackError

logger = logging.getLogger(__name__)


class AudioPlayer:
    """pygame mixer audio output.

    Plays one file at a time and reports natural end of track through
    ``on_finished`` callbacks, fired from ``poll()``.
    """

    def __init__(self, volume: float = 0.7):
        try:
            pygame.mixer.init(frequency=44100, size=-16, channels=2, buffer=512)
        except pygame.error as e:
            raise RuntimeError(f"Failed to initialize audio output: {e}") from e

        self._current_path: Optional[str] = None
        self._volume: float = volume
        self._playing: bool = False
        self._paused: bool = False
        self._start_time: float = 0
        self._pause_position: float = 0
        self._finished_callbacks: List[Callable[[Optional[str]], None]] = []

        pygame.mixer.music.set_volume(self._volume)

    def on_finished(self, callback: Callable[[Optional[str]], None]) -> None:
        """Register a callback for natural end of track; it gets the file path."""
        self._finished_callbacks.append(callback)

    def play(self, file_path: str) -> None:
        """Load and play an audio file."""
        try:
            pygame.mixer.music.load(file_path)
            pygame.mixer.music.play()
        except pygame.error as e:
            self._playing = False
            self._paused = False
            self._current_path = None
            raise PlaybackError(f"Cannot play {file_path}: {e}") from e

        self._current_path = file_path
        self._playing = True
        self._paused = False
        self._start_time = time.time()
        self._pause_position = 0

    def pause(self) -> None:
        """Pause playback."""
        if self._playing and not self._paused:
            pygame.mixer.music.pause()
            self._paused = True
            self._pause_position = time.time() - self._start_time

    def resume(self) -> None:
        """Resume playback from paused state."""
        if self._playing and self._paused:
            pygame.mixer.music.unpause()
            self._paused = False
            self._start_time = time.time() - self._pause_position

    def stop(self) -> None:
        """Stop playback and reset position."""
        pygame.mixer.music.stop()
        self._playing = False
        self._paused = False
        self._current_path = None
        self._start_time = 0
        self._pause_position = 0

    def seek(self, position: float) -> None:
        """Jump to ``position`` seconds in the current file."""
        if not self._playing:
            return
        try:
            pygame.mixer.music.play(start=position)
        except pygame.error as e:
            logger.warning(f"Seek failed: {e}")
            return
        if self._paused:
            pygame.mixer.music.pause()
            self._pause_position = position
        else:
            self._start_time = time.time() - position

    def get_position(self) -> float:
        """Return current playback position in seconds."""
        if not self._playing:
            return 0.0
        if self._paused:
            return self._pause_position
        return time.time() - self._start_time

    def track_ended_naturally(self) -> bool:
        """True once the mixer has run out of audio for an unpaused track."""
        return self._playing and not self._paused and not pygame.mixer.music.get_busy()

    def poll(self) -> None:
        """Fire finished callbacks if the current track ended on its own."""
        if not self.track_ended_naturally():
            return
        finished_path = self._current_path
        self._playing = False
        self._current_path = None
        for callback in self._finished_callbacks:
            try:
                callback(finished_path)
            except Exception as e:
                logger.error(f"Finished callback failed: {e}", exc_info=True)

    def shutdown(self) -> None:
        self.stop()
        pygame.mixer.quit()
