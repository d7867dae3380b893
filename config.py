"""Runtime configuration for CRATE, read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_DATA_DIR = Path.home() / ".local" / "share" / "crate"
DEFAULT_MUSIC_DIR = Path.home() / "Music"
DEFAULT_EXTENSIONS = frozenset({".mp3", ".flac", ".wav", ".ogg", ".m4a"})
LIBRARY_FILE_NAME = "library.json"
LOG_FILE_NAME = "crate.log"


def _parse_extensions(raw: str) -> frozenset[str]:
    extensions = set()
    for item in raw.split(","):
        item = item.strip().lower()
        if not item:
            continue
        extensions.add(item if item.startswith(".") else f".{item}")
    return frozenset(extensions)


@dataclass(frozen=True)
class AppConfig:
    """Application settings.

    Environment variables:
        CRATE_DATA_DIR: Where the library file and log live.
        CRATE_MUSIC_DIR: Music directory used until one is selected.
        CRATE_LOG_LEVEL: Logging level name.
        CRATE_EXTENSIONS: Comma-separated audio extensions to scan.
    """
    data_dir: Path = DEFAULT_DATA_DIR
    default_music_dir: Optional[Path] = DEFAULT_MUSIC_DIR
    log_level: str = "INFO"
    extensions: frozenset[str] = DEFAULT_EXTENSIONS

    @property
    def library_file(self) -> Path:
        return self.data_dir / LIBRARY_FILE_NAME

    @property
    def log_file(self) -> Path:
        return self.data_dir / LOG_FILE_NAME

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> AppConfig:
        env = os.environ if environ is None else environ

        data_dir = Path(env["CRATE_DATA_DIR"]).expanduser() if env.get("CRATE_DATA_DIR") else DEFAULT_DATA_DIR
        music_dir = Path(env["CRATE_MUSIC_DIR"]).expanduser() if env.get("CRATE_MUSIC_DIR") else DEFAULT_MUSIC_DIR
        log_level = (env.get("CRATE_LOG_LEVEL") or "INFO").upper()

        extensions = DEFAULT_EXTENSIONS
        if env.get("CRATE_EXTENSIONS"):
            extensions = _parse_extensions(env["CRATE_EXTENSIONS"]) or DEFAULT_EXTENSIONS

        return cls(
            data_dir=data_dir,
            default_music_dir=music_dir,
            log_level=log_level,
            extensions=extensions,
        )
