from __future__ import annotations

from typing import Sequence

from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, ListItem, ListView

from models.playlist import Playlist

NEW_PLAYLIST = "__new_playlist__"

DIALOG_CSS = """
    {screen} {{
        align: center middle;
    }}

    {screen} > Container {{
        width: 60;
        height: auto;
        max-height: 80%;
        background: #161616;
        border: thick #2bb3a3;
        padding: 1 2;
    }}

    {screen} Horizontal {{
        height: auto;
        margin-top: 1;
    }}

    {screen} ListView {{
        height: auto;
        max-height: 16;
    }}
"""


class PlaylistNameScreen(ModalScreen[str | None]):
    """Modal screen asking for a new playlist name."""

    DEFAULT_CSS = DIALOG_CSS.format(screen="PlaylistNameScreen")

    BINDINGS = [("escape", "cancel", "Cancel")]

    def compose(self) -> ComposeResult:
        with Container():
            yield Label("📼 New Playlist")
            yield Input(placeholder="Playlist name", id="playlist-name-input")
            with Horizontal():
                yield Button("Create", id="playlist-create-button", variant="success")
                yield Button("Cancel", id="playlist-cancel-button", variant="default")

    def on_mount(self) -> None:
        self.query_one("#playlist-name-input", Input).focus()

    def _submit(self) -> None:
        name = self.query_one("#playlist-name-input", Input).value.strip()
        if not name:
            self.notify("Playlist name cannot be empty", severity="warning", timeout=2)
            return
        self.dismiss(name)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "playlist-create-button":
            self._submit()
        elif event.button.id == "playlist-cancel-button":
            self.dismiss(None)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self._submit()

    def action_cancel(self) -> None:
        self.dismiss(None)


class PlaylistPickerScreen(ModalScreen[str | None]):
    """Modal list of playlists to add a track to.

    Dismisses with the chosen playlist ID, ``NEW_PLAYLIST`` for the
    "New playlist..." entry, or None when cancelled.
    """

    DEFAULT_CSS = DIALOG_CSS.format(screen="PlaylistPickerScreen")

    BINDINGS = [
        ("escape", "cancel", "Cancel"),
        ("j", "move_down", "Down"),
        ("k", "move_up", "Up"),
    ]

    def __init__(self, track_title: str, playlists: Sequence[Playlist]) -> None:
        super().__init__()
        self.track_title = track_title
        self.choices = [playlist.id for playlist in playlists] + [NEW_PLAYLIST]
        self.labels = [f"{playlist.name} ({len(playlist)})" for playlist in playlists] + ["+ New playlist..."]

    def compose(self) -> ComposeResult:
        with Container():
            yield Label(f"Add \"{self.track_title}\" to:", markup=False)
            yield ListView(*(ListItem(Label(label, markup=False)) for label in self.labels), id="playlist-choices")

    def on_mount(self) -> None:
        self.query_one("#playlist-choices", ListView).focus()

    def on_list_view_selected(self, event: ListView.Selected) -> None:
        index = event.list_view.index
        if index is not None and 0 <= index < len(self.choices):
            self.dismiss(self.choices[index])

    def action_move_down(self) -> None:
        self.query_one("#playlist-choices", ListView).action_cursor_down()

    def action_move_up(self) -> None:
        self.query_one("#playlist-choices", ListView).action_cursor_up()

    def action_cancel(self) -> None:
        self.dismiss(None)


class ConfirmScreen(ModalScreen[bool]):
    """Yes/no confirmation for destructive actions."""

    DEFAULT_CSS = DIALOG_CSS.format(screen="ConfirmScreen")

    BINDINGS = [
        ("escape", "cancel", "Cancel"),
        ("y", "confirm", "Yes"),
        ("n", "cancel", "No"),
    ]

    def __init__(self, message: str) -> None:
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        with Container():
            yield Label(self.message, markup=False)
            with Horizontal():
                yield Button("Yes (y)", id="confirm-yes-button", variant="error")
                yield Button("No (n)", id="confirm-no-button", variant="default")

    def on_mount(self) -> None:
        self.query_one("#confirm-no-button", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "confirm-yes-button")

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)
