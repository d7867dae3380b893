from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from models.playlist import Playlist
from models.track import Track
from services.errors import PersistenceError

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


@dataclass
class LibraryData:
    """Everything persisted between sessions."""
    tracks: list[Track] = field(default_factory=list)
    playlists: list[Playlist] = field(default_factory=list)
    music_dir: Optional[str] = None


class LibraryStore:
    """Loads and saves the library as a JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> LibraryData:
        """Load the saved library.

        Returns:
            LibraryData; empty if no file has been saved yet.

        Raises:
            PersistenceError: If the file exists but cannot be read or parsed.
                A copy of an unparseable file is kept next to it with a
                ``.corrupt`` suffix.
        """
        if not self.path.exists():
            logger.info(f"No saved library at {self.path}, starting empty")
            return LibraryData()

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            data = LibraryData(
                tracks=[Track.from_dict(item) for item in raw.get("library", [])],
                playlists=[Playlist.from_dict(item) for item in raw.get("playlists", [])],
                music_dir=raw.get("music_dir"),
            )
        except OSError as e:
            raise PersistenceError(f"Cannot read library file {self.path}: {e}") from e
        except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
            self._keep_corrupt_copy()
            raise PersistenceError(f"Corrupted library file {self.path}: {e}") from e

        logger.info(f"Loaded {len(data.tracks)} tracks and {len(data.playlists)} playlists from {self.path}")
        return data

    def save(
        self,
        tracks: Sequence[Track],
        playlists: Sequence[Playlist],
        music_dir: Optional[str] = None,
    ) -> None:
        """Write the library atomically.

        Raises:
            PersistenceError: If the file cannot be written.
        """
        payload = {
            "version": FORMAT_VERSION,
            "music_dir": music_dir,
            "library": [track.to_dict() for track in tracks],
            "playlists": [playlist.to_dict() for playlist in playlists],
        }

        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_name = f.name
                json.dump(payload, f, indent=2)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise PersistenceError(f"Cannot write library file {self.path}: {e}") from e

        logger.debug(f"Saved {len(tracks)} tracks and {len(playlists)} playlists to {self.path}")

    def _keep_corrupt_copy(self) -> None:
        backup = self.path.with_name(self.path.name + ".corrupt")
        try:
            shutil.copy2(self.path, backup)
            logger.warning(f"Kept a copy of the corrupted library file at {backup}")
        except OSError as e:
            logger.error(f"Failed to back up corrupted library file: {e}")
