from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from services.errors import DirectoryAccessError, NoDirectorySelected

logger = logging.getLogger(__name__)


class DirectoryGrant:
    """Access grant for the user's music directory.

    ``access()`` is a scoped acquisition: the grant is marked active for the
    duration of the ``with`` block and always released, including when the
    body raises.
    """

    def __init__(self, path: Optional[Path]):
        self.path = Path(path).expanduser() if path else None
        self._active = 0

    @property
    def is_active(self) -> bool:
        return self._active > 0

    def validate(self) -> Path:
        """Check the directory is still usable.

        Raises:
            NoDirectorySelected: No directory, or it no longer exists.
            DirectoryAccessError: It exists but cannot be listed.
        """
        if self.path is None:
            raise NoDirectorySelected("No music directory selected")
        if not self.path.is_dir():
            raise NoDirectorySelected(f"Music directory no longer exists: {self.path}")
        if not os.access(self.path, os.R_OK | os.X_OK):
            raise DirectoryAccessError(f"Cannot access music directory: {self.path}")
        return self.path

    @contextmanager
    def access(self) -> Iterator[Path]:
        root = self.validate()
        self._active += 1
        logger.debug(f"Acquired access to {root}")
        try:
            yield root
        finally:
            self._active -= 1
            logger.debug(f"Released access to {root}")
