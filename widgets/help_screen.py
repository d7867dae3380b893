from __future__ import annotations

from textual.screen import ModalScreen
from textual.widgets import Static, Button
from textual.containers import Container, VerticalScroll
from textual.app import ComposeResult

HELP_TEXT = """[bold #e0a526]CRATE - Terminal Music Library[/bold #e0a526]

[bold]NAVIGATION[/bold]
  j/k         Move down/up in track list
  Enter       Play selected track
  Tab         Cycle Library / playlists
  /           Search title, artist or album

[bold]PLAYBACK[/bold]
  Space       Play/Pause (replays the last track once stopped)
  n           Next track
  p           Previous track
  z           Toggle shuffle
  [ / ]       Seek back/forward 10s

[bold]PLAYLISTS[/bold]
  c           New playlist
  a           Add selected track to a playlist
  x           Remove selected track from this playlist
  J/K         Move selected entry down/up
  D           Delete this playlist

[bold]LIBRARY[/bold]
  Delete      Remove selected track from the library
  r           Rescan music directory
  o           Choose music directory
  h/?         Show this help
  q           Quit

[bold]NOTES[/bold]
  • Tracks keep their identity when files are moved or renamed
  • Identical copies of a file are listed once
  • A .ignore file in the music directory skips any path
    containing one of its lines
  • ♪ marks the playing track"""


class HelpScreen(ModalScreen[None]):
    """Modal screen displaying key bindings."""

    DEFAULT_CSS = """
    HelpScreen {
        align: center middle;
    }

    #help-container {
        width: 72;
        height: 80%;
        background: #161616;
        border: thick #2bb3a3;
        padding: 1 2;
    }

    #help-scroll {
        width: 100%;
        height: 1fr;
        margin-bottom: 1;
    }

    #help-close-button {
        width: 100%;
        background: #262626;
        color: #e0a526;
        border: solid #e0a526;
        text-style: bold;
    }
    """

    BINDINGS = [
        ("escape", "close", "Close"),
        ("j", "scroll_down", "Down"),
        ("k", "scroll_up", "Up"),
    ]

    def compose(self) -> ComposeResult:
        with Container(id="help-container"):
            with VerticalScroll(id="help-scroll"):
                yield Static(HELP_TEXT, id="help-content")
            yield Button("Close (Esc)", id="help-close-button", variant="primary")

    def on_mount(self) -> None:
        self.query_one("#help-close-button", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "help-close-button":
            self.dismiss()

    def action_close(self) -> None:
        self.dismiss()

    def action_scroll_down(self) -> None:
        self.query_one("#help-scroll", VerticalScroll).scroll_down()

    def action_scroll_up(self) -> None:
        self.query_one("#help-scroll", VerticalScroll).scroll_up()
