from __future__ import annotations

from pathlib import Path

from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label


class DirectoryPromptScreen(ModalScreen[Path | None]):
    """Modal screen asking for the music directory path."""

    DEFAULT_CSS = """
    DirectoryPromptScreen {
        align: center middle;
    }

    #directory-prompt-container {
        width: 70;
        height: auto;
        background: #161616;
        border: thick #2bb3a3;
        padding: 1 2;
    }

    #directory-prompt-buttons {
        height: auto;
        margin-top: 1;
    }
    """

    def __init__(self, initial: Path | None = None) -> None:
        super().__init__()
        self.initial = initial

    def compose(self) -> ComposeResult:
        with Container(id="directory-prompt-container"):
            yield Label("📁 Music Directory", id="directory-prompt-title")
            yield Label("Enter the folder that holds your music:")
            yield Input(
                value=str(self.initial) if self.initial else "",
                placeholder=str(Path.home() / "Music"),
                id="directory-input",
            )
            with Horizontal(id="directory-prompt-buttons"):
                yield Button("Select", id="directory-confirm-button", variant="success")
                yield Button("Cancel", id="directory-cancel-button", variant="default")

    def on_mount(self) -> None:
        self.query_one("#directory-input", Input).focus()

    def _submit(self) -> None:
        value = self.query_one("#directory-input", Input).value.strip()
        self.dismiss(Path(value).expanduser() if value else None)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "directory-confirm-button":
            self._submit()
        elif event.button.id == "directory-cancel-button":
            self.dismiss(None)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self._submit()
