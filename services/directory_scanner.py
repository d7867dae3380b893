from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, Optional

logger = logging.getLogger(__name__)

IGNORE_FILE_NAME = ".ignore"
SUPPORTED_EXTENSIONS = frozenset({".mp3", ".flac", ".wav", ".ogg", ".m4a"})


def load_ignore_patterns(root: Path) -> list[str]:
    """Read newline-separated substring patterns from ``root/.ignore``.

    Blank lines are dropped. A missing or unreadable file means no patterns.
    """
    ignore_file = root / IGNORE_FILE_NAME
    try:
        content = ignore_file.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        logger.debug(f"No {IGNORE_FILE_NAME} file in {root}")
        return []
    except OSError as e:
        logger.warning(f"Could not read {ignore_file}: {e}")
        return []

    patterns = [line for line in content.split("\n") if line.strip()]
    logger.debug(f"Loaded {len(patterns)} ignore patterns from {ignore_file}")
    return patterns


class DirectoryScanner:
    """Walks a music directory and yields candidate audio files.

    Each call to ``scan`` re-reads the ignore file; no state is kept between
    calls. Enumeration order is whatever the filesystem returns.
    """

    def __init__(self, extensions: Optional[Iterable[str]] = None):
        self.extensions = frozenset(
            ext.lower() for ext in (extensions or SUPPORTED_EXTENSIONS)
        )

    def scan(self, root: Path) -> Iterator[Path]:
        """Yield audio file paths under ``root``, recursively.

        Filters, in order: regular file, not matching an ignore pattern,
        supported extension.
        """
        root = Path(root)
        patterns = load_ignore_patterns(root)

        def on_error(error: OSError) -> None:
            logger.warning(f"Cannot list {error.filename}: {error.strerror}")

        for dirpath, _dirnames, filenames in os.walk(root, onerror=on_error):
            for filename in filenames:
                path = Path(dirpath) / filename
                if not self._is_regular_file(path):
                    continue
                path_str = str(path)
                if any(pattern in path_str for pattern in patterns):
                    continue
                if path.suffix.lower() not in self.extensions:
                    continue
                yield path

    @staticmethod
    def _is_regular_file(path: Path) -> bool:
        try:
            return path.is_file()
        except OSError:
            return False
