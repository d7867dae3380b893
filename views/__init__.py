from .library import LibraryView
from .now_playing import NowPlayingView

__all__ = ["LibraryView", "NowPlayingView"]
