from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from mutagen import File as MutagenFile
from mutagen.flac import FLAC

logger = logging.getLogger(__name__)

LYRICS_KEYS = ("lyrics", "unsyncedlyrics")
MP4_LYRICS_KEY = "\xa9lyr"
MP4_COVER_KEY = "covr"


@dataclass(frozen=True)
class TrackTags:
    """Tags read from an audio file."""
    title: str
    artist: Optional[str] = None
    album: Optional[str] = None
    duration_seconds: float = 0.0
    lyrics: Optional[str] = None
    artwork: Optional[bytes] = None


def _first(tags: Any, key: str) -> Optional[str]:
    try:
        value = tags.get(key)
    except Exception:
        return None
    if not value:
        return None
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    text = str(value).strip() if value is not None else ""
    return text or None


class MetadataExtractor:
    """Reads tags, lyrics and artwork with mutagen.

    Never raises for unreadable or untagged files: the title falls back to the
    file name stem and optional fields stay empty.
    """

    def read_tags(self, file_path: Union[str, Path], include_artwork: bool = False) -> TrackTags:
        """Read tags from an audio file.

        Args:
            file_path: Path to the audio file.
            include_artwork: Also read embedded cover art bytes.

        Returns:
            TrackTags with fallbacks for anything missing.
        """
        path = Path(file_path)
        fallback = TrackTags(title=path.stem)

        try:
            audio = MutagenFile(path, easy=True)
        except Exception as e:
            logger.warning(f"Could not read tags from {path}: {e}")
            return fallback

        if audio is None:
            logger.debug(f"Unrecognised audio format: {path}")
            return fallback

        tags = audio.tags or {}
        duration = 0.0
        try:
            if audio.info and getattr(audio.info, "length", None):
                duration = float(audio.info.length)
        except (TypeError, ValueError):
            duration = 0.0

        lyrics = None
        artwork = None
        try:
            raw = MutagenFile(path)
            if raw is not None:
                lyrics = self._read_lyrics(raw)
                if include_artwork:
                    artwork = self._read_artwork(raw)
        except Exception as e:
            logger.warning(f"Could not read lyrics/artwork from {path}: {e}")

        return TrackTags(
            title=_first(tags, "title") or path.stem,
            artist=_first(tags, "artist"),
            album=_first(tags, "album"),
            duration_seconds=duration,
            lyrics=lyrics,
            artwork=artwork,
        )

    def read_artwork(self, file_path: Union[str, Path]) -> Optional[bytes]:
        """Return embedded cover art bytes, or None."""
        try:
            raw = MutagenFile(Path(file_path))
        except Exception as e:
            logger.debug(f"Could not read artwork from {file_path}: {e}")
            return None
        if raw is None:
            return None
        return self._read_artwork(raw)

    @staticmethod
    def _read_lyrics(audio: Any) -> Optional[str]:
        tags = getattr(audio, "tags", None)
        if not tags:
            return None

        text = None
        if hasattr(tags, "getall"):
            frames = tags.getall("USLT")
            if frames:
                text = getattr(frames[0], "text", None)
        elif MP4_LYRICS_KEY in tags:
            text = _first(tags, MP4_LYRICS_KEY)
        else:
            for key in LYRICS_KEYS:
                text = _first(tags, key) or _first(tags, key.upper())
                if text:
                    break

        if text is None:
            return None
        text = str(text).strip()
        return text or None

    @staticmethod
    def _read_artwork(audio: Any) -> Optional[bytes]:
        if isinstance(audio, FLAC) and audio.pictures:
            return bytes(audio.pictures[0].data)

        tags = getattr(audio, "tags", None)
        if not tags:
            return None

        if hasattr(tags, "getall"):
            frames = tags.getall("APIC")
            if frames:
                return bytes(frames[0].data)
            return None

        covers = tags.get(MP4_COVER_KEY) if hasattr(tags, "get") else None
        if covers:
            return bytes(covers[0])
        return None
