from textual.app import ComposeResult
from textual.containers import Container, Vertical, VerticalScroll
from textual.widgets import Static

from models.playback import PlaybackState
from models.track import format_time
from services.playback_navigator import PlaybackNavigator

PROGRESS_UPDATE_INTERVAL = 1.0


class NowPlayingView(Container):
    """Widget displaying the current track, its state and lyrics."""

    DEFAULT_CSS = """
    NowPlayingView {
        background: #161616;
        border: solid #2bb3a3;
        padding: 1;
    }

    NowPlayingView .track-title {
        color: #e0a526;
        text-style: bold;
    }

    NowPlayingView .track-metadata {
        color: #8a8a8a;
    }

    NowPlayingView #np-lyrics {
        color: #f4d06f;
        margin-top: 1;
    }
    """

    def __init__(self, navigator: PlaybackNavigator, **kwargs):
        """Initialize NowPlayingView with a navigator reference."""
        super().__init__(**kwargs)
        self.navigator = navigator
        self._update_timer = None

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static("No track playing", id="np-title", classes="track-title")
            yield Static("Artist: Unknown", id="np-artist", classes="track-metadata")
            yield Static("Album: Unknown", id="np-album", classes="track-metadata")
            yield Static("0:00 / 0:00", id="np-time", classes="track-metadata")
            yield Static("State: Idle", id="np-state", classes="track-metadata")
            yield Static("", id="np-artwork", classes="track-metadata")
            with VerticalScroll():
                yield Static("", id="np-lyrics")

    def on_mount(self) -> None:
        self._update_timer = self.set_interval(PROGRESS_UPDATE_INTERVAL, self.update_progress)
        self.update_progress()

    def update_progress(self) -> None:
        """Refresh every field from the navigator."""
        track = self.navigator.current_track
        state = self.navigator.state

        if track:
            self.query_one("#np-title", Static).update(track.title)
            self.query_one("#np-artist", Static).update(f"Artist: {track.artist or 'Unknown'}")
            self.query_one("#np-album", Static).update(f"Album: {track.album or 'Unknown'}")
            position = self.navigator.get_position() if state != PlaybackState.IDLE else 0.0
            self.query_one("#np-time", Static).update(
                f"{format_time(position)} / {format_time(track.duration_seconds)}"
            )
            artwork = self.navigator.current_artwork
            self.query_one("#np-artwork", Static).update(
                f"Artwork: {len(artwork) // 1024} KB embedded" if artwork else ""
            )
            self.query_one("#np-lyrics", Static).update(self.navigator.current_lyrics or "")
        else:
            self.query_one("#np-title", Static).update("No track playing")
            self.query_one("#np-artist", Static).update("Artist: Unknown")
            self.query_one("#np-album", Static).update("Album: Unknown")
            self.query_one("#np-time", Static).update("0:00 / 0:00")
            self.query_one("#np-artwork", Static).update("")
            self.query_one("#np-lyrics", Static).update("")

        self.query_one("#np-state", Static).update(f"State: {state.value.capitalize()}")
