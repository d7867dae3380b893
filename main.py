from textual.app import App, ComposeResult
from textual.widgets import Footer
from textual.containers import Horizontal
from textual.binding import Binding
import asyncio
import logging
import threading
from pathlib import Path

from config import AppConfig
from models.library import LibrarySnapshot
from services.audio_player import AudioPlayer
from services.errors import DirectoryAccessError, NoDirectorySelected, ReconciliationInProgress
from services.library_manager import LibraryManager
from services.library_reconciler import LibraryReconciler
from services.directory_scanner import DirectoryScanner
from services.library_store import LibraryStore
from services.metadata_extractor import MetadataExtractor
from services.playback_navigator import PlaybackNavigator
from views import LibraryView, NowPlayingView
from widgets import (
    NEW_PLAYLIST,
    ConfirmScreen,
    DirectoryPromptScreen,
    Header,
    HelpScreen,
    PlaylistNameScreen,
    PlaylistPickerScreen,
)

TRACK_END_CHECK_INTERVAL = 0.5
SEEK_STEP_SECONDS = 10.0

logger = logging.getLogger(__name__)


def setup_logging(config: AppConfig) -> Path:
    """Log to a file in the data directory; the terminal belongs to the UI."""
    config.data_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(config.log_file)
        ]
    )
    return config.log_file


class CrateApp(App):
    """A terminal music library and player built with Textual."""

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("space", "play_pause", "Play/Pause"),
        Binding("n", "next_track", "Next"),
        Binding("p", "previous_track", "Prev"),
        Binding("z", "toggle_shuffle", "Shuffle"),
        Binding("r", "refresh_library", "Rescan"),
        Binding("tab", "cycle_collection", "Library/Playlists", priority=True),
        Binding("/", "search", "Search"),
        Binding("o", "choose_directory", "Music dir"),
        Binding("c", "new_playlist", "New playlist"),
        Binding("a", "add_to_playlist", "Add to playlist"),
        Binding("x", "remove_from_playlist", "Remove from playlist", show=False),
        Binding("D", "delete_playlist", "Delete playlist", show=False),
        Binding("J", "move_entry(1)", "Move down", show=False),
        Binding("K", "move_entry(-1)", "Move up", show=False),
        Binding("delete", "remove_from_library", "Remove from library", show=False),
        Binding("left_square_bracket", "seek(-1)", "Seek -10s", show=False),
        Binding("right_square_bracket", "seek(1)", "Seek +10s", show=False),
        Binding("h", "show_help", "Help"),
        Binding("?", "show_help", "Help", show=False),
    ]

    def __init__(self, config: AppConfig, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.config = config

        logger.info("Starting CRATE application")

        self.audio_player = AudioPlayer()
        extractor = MetadataExtractor()
        self.library_manager = LibraryManager(
            LibraryStore(config.library_file),
            LibraryReconciler(DirectoryScanner(config.extensions), extractor),
        )
        self.navigator = PlaybackNavigator(
            self.audio_player,
            library=lambda: self.library_manager.tracks,
            artwork_loader=extractor.read_artwork,
        )
        self.audio_player.on_finished(self.navigator.post_finished)
        self.library_manager.subscribe(self._on_library_changed)

        self._collection_index = 0
        logger.info("Services initialized successfully")

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="top-container"):
            yield LibraryView(self.library_manager.search, id="library")
            yield NowPlayingView(self.navigator, id="now_playing")
        yield Footer()

    def on_mount(self) -> None:
        self.library_manager.load()

        default_dir = self.config.default_music_dir
        if self.library_manager.music_directory is None and default_dir and default_dir.is_dir():
            logger.info(f"No music directory selected, using {default_dir}")
            self.library_manager.select_music_directory(default_dir, refresh=False)

        self.query_one("#library", LibraryView).query_one("#track-list").focus()
        self.run_worker(self._refresh_library(), exclusive=True, group="refresh")
        self.set_interval(TRACK_END_CHECK_INTERVAL, self._check_track_end)

    # Library state

    def _on_library_changed(self, snapshot: LibrarySnapshot) -> None:
        if threading.current_thread() is threading.main_thread():
            self._apply_snapshot(snapshot)
        else:
            self.call_from_thread(self._apply_snapshot, snapshot)

    def _apply_snapshot(self, snapshot: LibrarySnapshot) -> None:
        header = self.query_one(Header)
        header.save_error = snapshot.save_error or ""
        self._show_current_collection()

    def _collections(self) -> list[tuple[str, str | None]]:
        names: list[tuple[str, str | None]] = [("Library", None)]
        names.extend((playlist.name, playlist.id) for playlist in self.library_manager.playlists)
        return names

    def _show_current_collection(self) -> None:
        collections = self._collections()
        if self._collection_index >= len(collections):
            self._collection_index = 0
        name, playlist_id = collections[self._collection_index]
        if playlist_id is None:
            tracks = list(self.library_manager.tracks)
        else:
            tracks = self.library_manager.playlist_tracks(playlist_id)

        library_view = self.query_one("#library", LibraryView)
        library_view.show_collection(name, tracks)
        library_view.set_playing(self.navigator.current_track.id if self.navigator.current_track else None)

        header = self.query_one(Header)
        header.collection_name = name
        header.track_count = len(tracks)

    async def _refresh_library(self) -> None:
        """Rescan the music directory in a background thread.

        Displays user-friendly messages when there is nothing to scan.
        """
        header = self.query_one(Header)
        header.is_refreshing = True
        try:
            logger.info("Starting music library refresh")
            result = await asyncio.to_thread(self.library_manager.refresh_library)

            if not result.committable:
                self.notify("Library refresh did not complete; nothing changed", severity="warning")
            elif not result.tracks:
                self.notify(
                    f"No music files found in {self.library_manager.music_directory}",
                    severity="warning",
                    timeout=8
                )
            else:
                message = f"✓ {len(result.tracks)} tracks ({result.added} new, {result.removed} removed)"
                if result.skipped_unreadable:
                    message += f"\n{result.skipped_unreadable} files could not be read"
                self.notify(message, severity="information", timeout=3)

        except NoDirectorySelected as e:
            logger.warning(f"Refresh skipped: {e}")
            self.notify("No music directory selected", severity="warning", timeout=5)
            self.action_choose_directory()

        except DirectoryAccessError as e:
            logger.error(f"Permission denied accessing music directory: {e}")
            self.notify(
                "❌ Cannot access music directory\n\nPlease check its permissions",
                severity="error",
                timeout=10
            )

        except ReconciliationInProgress:
            self.notify("A library scan is already running", timeout=3)

        finally:
            header.is_refreshing = False

    # Playback

    def on_library_view_track_chosen(self, message: LibraryView.TrackChosen) -> None:
        if not self.navigator.play(message.track, source=message.collection):
            self.notify(f"❌ Cannot play {message.track.title}", severity="error", timeout=3)
        self._after_navigation()

    def _after_navigation(self) -> None:
        track = self.navigator.current_track
        self.query_one("#library", LibraryView).set_playing(track.id if track else None)
        self.query_one("#now_playing", NowPlayingView).update_progress()

    def _check_track_end(self) -> None:
        """Forward natural end of track to the navigator and advance."""
        previous = self.navigator.current_track
        self.audio_player.poll()
        self.navigator.process_events()
        if self.navigator.current_track is not previous:
            self._after_navigation()

    def action_play_pause(self) -> None:
        self.navigator.toggle_pause()
        self.query_one("#now_playing", NowPlayingView).update_progress()

    def action_next_track(self) -> None:
        self.navigator.next()
        self._after_navigation()

    def action_previous_track(self) -> None:
        self.navigator.previous()
        self._after_navigation()

    def action_toggle_shuffle(self) -> None:
        enabled = self.navigator.toggle_shuffle()
        self.query_one(Header).is_shuffle = enabled
        self.notify(f"Shuffle {'on' if enabled else 'off'}", timeout=1.5)

    def action_seek(self, direction: int) -> None:
        position = self.navigator.get_position() + direction * SEEK_STEP_SECONDS
        track = self.navigator.current_track
        if track is not None:
            self.navigator.seek(min(max(position, 0.0), track.duration_seconds))

    # Navigation between collections

    def action_cycle_collection(self) -> None:
        self._collection_index = (self._collection_index + 1) % len(self._collections())
        self._show_current_collection()

    def action_search(self) -> None:
        self.query_one("#library", LibraryView).open_search()

    def action_refresh_library(self) -> None:
        self.run_worker(self._refresh_library(), exclusive=True, group="refresh")

    def action_choose_directory(self) -> None:
        self.push_screen(
            DirectoryPromptScreen(self.library_manager.music_directory or self.config.default_music_dir),
            callback=self._handle_directory_choice,
        )

    def _handle_directory_choice(self, path: Path | None) -> None:
        if path is None:
            return
        try:
            self.library_manager.select_music_directory(path, refresh=False)
        except (NoDirectorySelected, DirectoryAccessError) as e:
            logger.warning(f"Rejected music directory {path}: {e}")
            self.notify(f"❌ {e}", severity="error", timeout=5)
            return
        self.action_refresh_library()

    # Playlists

    def _current_playlist_id(self) -> str | None:
        collections = self._collections()
        if self._collection_index >= len(collections):
            return None
        return collections[self._collection_index][1]

    def _library_view(self) -> LibraryView:
        return self.query_one("#library", LibraryView)

    def action_new_playlist(self) -> None:
        self._prompt_new_playlist([])

    def _prompt_new_playlist(self, track_ids: list[str]) -> None:
        def create(name: str | None) -> None:
            if name is None:
                return
            playlist = self.library_manager.create_playlist(name)
            if track_ids:
                self.library_manager.add_tracks_to_playlist(track_ids, playlist.id)
            self.notify(f"Created playlist {name}", timeout=2)

        self.push_screen(PlaylistNameScreen(), callback=create)

    def action_add_to_playlist(self) -> None:
        track = self._library_view().selected_track()
        if track is None:
            return

        def add(choice: str | None) -> None:
            if choice is None:
                return
            if choice == NEW_PLAYLIST:
                self._prompt_new_playlist([track.id])
                return
            self.library_manager.add_tracks_to_playlist([track.id], choice)
            self.notify(f"Added {track.title}", timeout=2)

        self.push_screen(PlaylistPickerScreen(track.title, self.library_manager.playlists), callback=add)

    def action_remove_from_playlist(self) -> None:
        playlist_id = self._current_playlist_id()
        track = self._library_view().selected_track()
        if playlist_id is None or track is None:
            return
        self.library_manager.remove_tracks_from_playlist([track.id], playlist_id)

    def action_delete_playlist(self) -> None:
        playlist_id = self._current_playlist_id()
        if playlist_id is None:
            return
        name = self._collections()[self._collection_index][0]

        def delete(confirmed: bool | None) -> None:
            if confirmed:
                self.library_manager.delete_playlist(playlist_id)
                self.notify(f"Deleted playlist {name}", timeout=2)

        self.push_screen(ConfirmScreen(f"Delete playlist '{name}'?"), callback=delete)

    def action_move_entry(self, offset: int) -> None:
        playlist_id = self._current_playlist_id()
        library_view = self._library_view()
        index = library_view.selected_index
        if playlist_id is None or index is None:
            return
        if library_view.is_filtered:
            self.notify("Clear the search to reorder a playlist", severity="warning", timeout=2)
            return
        self.library_manager.reorder_playlist(playlist_id, index, index + offset)
        library_view.select_index(index + offset)

    def action_remove_from_library(self) -> None:
        track = self._library_view().selected_track()
        if track is None:
            return

        def remove(confirmed: bool | None) -> None:
            if confirmed:
                self.library_manager.remove_track(track.id)
                self.notify(f"Removed {track.title} from the library", timeout=2)

        self.push_screen(
            ConfirmScreen(f"Remove '{track.title}' from the library and all playlists?"),
            callback=remove,
        )

    def action_show_help(self) -> None:
        self.push_screen(HelpScreen())

    def action_quit(self) -> None:
        self.library_manager.cancel_refresh()
        self.audio_player.shutdown()
        self.exit()


def main():
    """Entry point for the CRATE application.

    Handles initialization errors and provides user-friendly error messages.
    """
    config = AppConfig.from_env()
    log_file = setup_logging(config)

    try:
        logger.info("=" * 60)
        logger.info("CRATE starting up")
        logger.info("=" * 60)

        app = CrateApp(config)
        app.run()

        logger.info("CRATE shut down cleanly")

    except RuntimeError as e:
        logger.critical(f"Fatal error during startup: {e}")
        print("\n❌ CRATE cannot start\n")
        print(f"{e}\n")
        print(f"Check {log_file} for more details.\n")
        raise SystemExit(1)
    except KeyboardInterrupt:
        logger.info("CRATE interrupted by user")
        raise SystemExit(0)


if __name__ == "__main__":
    main()
