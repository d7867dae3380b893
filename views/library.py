from __future__ import annotations

from typing import Callable, Sequence

from textual.app import ComposeResult
from textual.containers import Container
from textual.message import Message
from textual.widgets import Input, Label, ListItem, ListView

from models.track import Track
from styles import PLAYING_ICON


class LibraryView(Container):
    """Track list for the active collection, with vim navigation and search."""

    DEFAULT_CSS = """
    LibraryView {
        background: #161616;
        border: solid #e0a526;
        padding: 1;
    }

    LibraryView > Label {
        color: #e0a526;
        text-style: bold;
        padding: 0 0 1 0;
    }

    LibraryView > #search-input {
        display: none;
    }

    LibraryView > #search-input.visible {
        display: block;
    }
    """

    BINDINGS = [
        ("j", "move_down", "Move down"),
        ("k", "move_up", "Move up"),
        ("escape", "clear_search", "Clear search"),
    ]

    class TrackChosen(Message):
        """Posted when the user picks a track to play."""

        def __init__(self, track: Track, collection: list[Track]) -> None:
            super().__init__()
            self.track = track
            self.collection = collection

    def __init__(self, search: Callable[[str, Sequence[Track]], list[Track]], *args, **kwargs):
        """Initialize LibraryView.

        Args:
            search: Filters a collection by a query string.
        """
        super().__init__(*args, **kwargs)
        self._search = search
        self.collection_title = "Library"
        self.collection: list[Track] = []
        self.tracks: list[Track] = []
        self.query_text = ""
        self.playing_track_id: str | None = None

    def compose(self) -> ComposeResult:
        yield Label(f"🎵 {self.collection_title}", id="library-title")
        yield Input(placeholder="Search title, artist or album", id="search-input")
        yield ListView(id="track-list")

    def show_collection(self, title: str, tracks: Sequence[Track]) -> None:
        """Display ``tracks`` under ``title``, keeping the current search."""
        self.collection_title = title
        self.collection = list(tracks)
        self.query_one("#library-title", Label).update(f"🎵 {title}")
        self._apply_search()

    def set_playing(self, track_id: str | None) -> None:
        self.playing_track_id = track_id
        self._populate_list()

    def _apply_search(self) -> None:
        self.tracks = self._search(self.query_text, self.collection)
        self._populate_list()

    def _populate_list(self) -> None:
        list_view = self.query_one("#track-list", ListView)
        index = list_view.index
        list_view.clear()
        for track in self.tracks:
            marker = PLAYING_ICON if track.id == self.playing_track_id else " "
            artist = track.artist or "Unknown Artist"
            album = track.album or "Unknown Album"
            list_view.append(ListItem(Label(
                f"{marker} {track.track_number:>4}  {track.title} - {artist} ({album}) [{track.duration}]"
            )))
        if self.tracks and index is not None:
            list_view.index = min(index, len(self.tracks) - 1)

    @property
    def is_filtered(self) -> bool:
        return bool(self.query_text.strip())

    @property
    def selected_index(self) -> int | None:
        index = self.query_one("#track-list", ListView).index
        if index is None or not 0 <= index < len(self.tracks):
            return None
        return index

    def selected_track(self) -> Track | None:
        index = self.selected_index
        return self.tracks[index] if index is not None else None

    def select_index(self, index: int) -> None:
        if 0 <= index < len(self.tracks):
            self.query_one("#track-list", ListView).index = index

    def open_search(self) -> None:
        search_input = self.query_one("#search-input", Input)
        search_input.add_class("visible")
        search_input.focus()

    def action_clear_search(self) -> None:
        search_input = self.query_one("#search-input", Input)
        search_input.value = ""
        search_input.remove_class("visible")
        self.query_text = ""
        self._apply_search()
        self.query_one("#track-list", ListView).focus()

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "search-input":
            self.query_text = event.value
            self._apply_search()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "search-input":
            self.query_one("#track-list", ListView).focus()

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        index = event.list_view.index
        if index is not None and 0 <= index < len(self.tracks):
            self.post_message(self.TrackChosen(self.tracks[index], list(self.tracks)))

    def action_move_down(self) -> None:
        """Move selection down in the list (j key)."""
        self.query_one("#track-list", ListView).action_cursor_down()

    def action_move_up(self) -> None:
        """Move selection up in the list (k key)."""
        self.query_one("#track-list", ListView).action_cursor_up()
