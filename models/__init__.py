from .track import Track, StableIdMinter, format_time, number_tracks
from .playlist import Playlist, PlaylistEntry
from .playback import PlaybackState, PlaybackContext
from .library import LibrarySnapshot

__all__ = [
    "Track",
    "StableIdMinter",
    "format_time",
    "number_tracks",
    "Playlist",
    "PlaylistEntry",
    "PlaybackState",
    "PlaybackContext",
    "LibrarySnapshot",
]
