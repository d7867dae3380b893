class CrateError(Exception):
    """Base class for library and playback errors."""


class NoDirectorySelected(CrateError):
    """No usable music directory: never chosen, or the saved one went stale."""


class DirectoryAccessError(CrateError):
    """The music directory exists but cannot be read."""


class ReconciliationInProgress(CrateError):
    """A library refresh is already running."""


class PersistenceError(CrateError):
    """The library file could not be read or written."""


class PlaybackError(CrateError):
    """The audio output could not start a track."""
