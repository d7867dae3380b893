from textual.widgets import Static
from textual.reactive import reactive
from textual.containers import Vertical
from textual.app import ComposeResult
from textual.css.query import NoMatches
from rich.text import Text
from styles import COLOR_ACCENT, COLOR_PRIMARY, COLOR_MUTED, COLOR_DIM, COLOR_ERROR

CRATE_ASCII = """
  ▄████▄   ██▀███   ▄▄▄     ▄▄▄█████▓▓█████
 ▒██▀ ▀█  ▓██ ▒ ██▒▒████▄   ▓  ██▒ ▓▒▓█   ▀
 ▒▓█    ▄ ▓██ ░▄█ ▒▒██  ▀█▄ ▒ ▓██░ ▒░▒███
 ▒▓▓▄ ▄██▒▒██▀▀█▄  ░██▄▄▄▄██░ ▓██▓ ░ ▒▓█  ▄
 ▒ ▓███▀ ░░██▓ ▒██▒ ▓█   ▓██▒ ▒██▒ ░ ░▒████▒
"""


class Header(Vertical):
    """Logo plus a status line: collection, track count, shuffle, refresh."""

    DEFAULT_CSS = """
    Header {
        height: auto;
    }

    #header-logo {
        color: #2bb3a3;
    }
    """

    collection_name: reactive[str] = reactive("Library")
    track_count: reactive[int] = reactive(0)
    is_shuffle: reactive[bool] = reactive(False)
    is_refreshing: reactive[bool] = reactive(False)
    save_error: reactive[str] = reactive("")

    def compose(self) -> ComposeResult:
        yield Static(CRATE_ASCII, id="header-logo")
        yield Static("─" * 80, id="header-divider")
        yield Static(self._render_status(), id="header-status")

    def _render_status(self) -> Text:
        result = Text()
        result.append("Viewing ", style=COLOR_MUTED)
        result.append(self.collection_name, style=f"{COLOR_PRIMARY} bold")
        result.append(f" ({self.track_count} tracks)", style=COLOR_MUTED)

        result.append("    │    Shuffle ", style=COLOR_MUTED)
        if self.is_shuffle:
            result.append("ON", style=f"{COLOR_PRIMARY} bold")
        else:
            result.append("OFF", style=COLOR_DIM)

        if self.is_refreshing:
            result.append("    │    ", style=COLOR_MUTED)
            result.append("Scanning…", style=f"{COLOR_ACCENT} bold")

        if self.save_error:
            result.append("    │    ", style=COLOR_MUTED)
            result.append("Library not saved", style=f"{COLOR_ERROR} bold")

        return result

    def _refresh_status(self) -> None:
        try:
            self.query_one("#header-status", Static).update(self._render_status())
        except NoMatches:
            pass

    def watch_collection_name(self, new_value: str) -> None:
        self._refresh_status()

    def watch_track_count(self, new_value: int) -> None:
        self._refresh_status()

    def watch_is_shuffle(self, new_value: bool) -> None:
        self._refresh_status()

    def watch_is_refreshing(self, new_value: bool) -> None:
        self._refresh_status()

    def watch_save_error(self, new_value: str) -> None:
        self._refresh_status()
