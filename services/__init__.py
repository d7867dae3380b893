from .content_identity import hash_bytes, hash_file
from .metadata_extractor import MetadataExtractor, TrackTags
from .directory_scanner import DirectoryScanner
from .library_reconciler import LibraryReconciler, ReconcileResult
from .playlist_store import PlaylistStore
from .library_store import LibraryStore, LibraryData
from .file_access import DirectoryGrant
from .library_manager import LibraryManager
from .playback_navigator import PlaybackNavigator, AudioOutput

__all__ = [
    'hash_bytes',
    'hash_file',
    'MetadataExtractor',
    'TrackTags',
    'DirectoryScanner',
    'LibraryReconciler',
    'ReconcileResult',
    'PlaylistStore',
    'LibraryStore',
    'LibraryData',
    'DirectoryGrant',
    'LibraryManager',
    'PlaybackNavigator',
    'AudioOutput',
]
