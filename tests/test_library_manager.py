import threading

import pytest

from services.content_identity import hash_file
from services.errors import (
    DirectoryAccessError,
    NoDirectorySelected,
    PersistenceError,
    ReconciliationInProgress,
)
from services.library_manager import LibraryManager
from services.library_reconciler import LibraryReconciler
from services.library_store import LibraryStore


@pytest.fixture
def populated(manager, music_dir, write_file):
    write_file(music_dir, "a.mp3", b"a")
    write_file(music_dir, "b.mp3", b"b")
    manager.select_music_directory(music_dir)
    return manager


def _ids_by_title(manager):
    return {track.title: track.id for track in manager.tracks}


def test_remove_track_prunes_playlists_and_renumbers(populated):
    ids = _ids_by_title(populated)
    playlist = populated.create_playlist("P")
    populated.add_tracks_to_playlist([ids["A"], ids["B"]], playlist.id)

    snapshot = populated.remove_track(ids["A"])

    assert [t.id for t in snapshot.tracks] == [ids["B"]]
    assert snapshot.tracks[0].track_number == 1
    entries = snapshot.playlist_by_id(playlist.id).entries
    assert [(e.track_id, e.position) for e in entries] == [(ids["B"], 1)]


def test_refresh_prunes_playlists_of_deleted_files(populated, music_dir):
    ids = _ids_by_title(populated)
    playlist = populated.create_playlist("P")
    populated.add_tracks_to_playlist([ids["B"], ids["A"]], playlist.id)

    (music_dir / "b.mp3").unlink()
    result = populated.refresh_library()

    assert result.removed == 1
    assert populated.snapshot.playlist_by_id(playlist.id).track_ids == [ids["A"]]


def test_state_survives_a_restart(populated, store, reconciler, music_dir):
    playlist = populated.create_playlist("Keep")
    populated.add_tracks_to_playlist([t.id for t in populated.tracks], playlist.id)

    reopened = LibraryManager(store, reconciler)
    snapshot = reopened.load()

    assert snapshot.tracks == populated.tracks
    assert snapshot.playlists == populated.playlists
    assert reopened.music_directory == music_dir


def test_refresh_without_directory_raises(manager):
    with pytest.raises(NoDirectorySelected):
        manager.refresh_library()


def test_stale_directory_raises_and_keeps_library(populated, music_dir):
    before = populated.tracks
    for path in music_dir.iterdir():
        path.unlink()
    music_dir.rmdir()

    with pytest.raises(NoDirectorySelected):
        populated.refresh_library()

    assert populated.tracks == before


def test_unreadable_directory_is_rejected(manager, music_dir, monkeypatch):
    monkeypatch.setattr("services.file_access.os.access", lambda path, mode: False)

    with pytest.raises(DirectoryAccessError):
        manager.select_music_directory(music_dir)


def test_concurrent_refresh_is_rejected(store, extractor, music_dir, write_file):
    write_file(music_dir, "a.mp3", b"a")
    started = threading.Event()
    release = threading.Event()

    def slow_hasher(path):
        started.set()
        release.wait(timeout=5)
        return hash_file(path)

    manager = LibraryManager(store, LibraryReconciler(extractor=extractor, hasher=slow_hasher))
    manager.select_music_directory(music_dir, refresh=False)

    worker = threading.Thread(target=manager.refresh_library)
    worker.start()
    try:
        assert started.wait(timeout=5)
        assert manager.is_refreshing
        with pytest.raises(ReconciliationInProgress):
            manager.refresh_library()
    finally:
        release.set()
        worker.join(timeout=5)

    assert not manager.is_refreshing
    assert len(manager.tracks) == 1


def test_cancelled_refresh_commits_nothing(store, extractor, music_dir, write_file):
    write_file(music_dir, "a.mp3", b"a")
    write_file(music_dir, "b.mp3", b"b")
    holder = {}

    def cancelling_hasher(path):
        holder["manager"].cancel_refresh()
        return hash_file(path)

    manager = LibraryManager(store, LibraryReconciler(extractor=extractor, hasher=cancelling_hasher))
    holder["manager"] = manager
    manager.select_music_directory(music_dir, refresh=False)

    result = manager.refresh_library()

    assert result.cancelled
    assert manager.tracks == ()


def test_failed_save_keeps_memory_state_and_reports(populated, monkeypatch):
    def failing_save(*args, **kwargs):
        raise PersistenceError("disk full")

    monkeypatch.setattr(populated.store, "save", failing_save)

    playlist = populated.create_playlist("Unsaved")

    assert populated.snapshot.playlist_by_id(playlist.id) is not None
    assert populated.snapshot.save_error == "disk full"


def test_subscribers_receive_snapshots_until_unsubscribed(manager):
    received = []
    unsubscribe = manager.subscribe(received.append)

    manager.create_playlist("One")
    unsubscribe()
    manager.create_playlist("Two")

    assert len(received) == 1
    assert [p.name for p in received[0].playlists] == ["One"]


def test_failing_subscriber_does_not_break_mutation(manager):
    def broken(snapshot):
        raise ValueError("boom")

    manager.subscribe(broken)
    playlist = manager.create_playlist("Still works")

    assert manager.snapshot.playlist_by_id(playlist.id) is not None


def test_snapshots_are_immutable_views(populated):
    before = populated.snapshot
    populated.remove_track(populated.tracks[0].id)

    assert len(before.tracks) == 2
    assert populated.snapshot.revision > before.revision


def test_add_tracks_ignores_unknown_ids(populated):
    ids = _ids_by_title(populated)
    playlist = populated.create_playlist("P")

    populated.add_tracks_to_playlist(["nope", ids["A"]], playlist.id)

    assert populated.snapshot.playlist_by_id(playlist.id).track_ids == [ids["A"]]


def test_playlist_tracks_follow_entry_order(populated):
    ids = _ids_by_title(populated)
    playlist = populated.create_playlist("P")
    populated.add_tracks_to_playlist([ids["A"], ids["B"]], playlist.id)

    populated.reorder_playlist(playlist.id, 1, 0)

    assert [t.title for t in populated.playlist_tracks(playlist.id)] == ["B", "A"]
    assert populated.playlist_tracks("missing") == []


def test_remove_tracks_from_playlist_and_delete(populated):
    ids = _ids_by_title(populated)
    playlist = populated.create_playlist("P")
    populated.add_tracks_to_playlist([ids["A"], ids["B"]], playlist.id)

    populated.remove_tracks_from_playlist([ids["A"]], playlist.id)
    assert populated.snapshot.playlist_by_id(playlist.id).track_ids == [ids["B"]]
    assert len(populated.tracks) == 2

    populated.delete_playlist(playlist.id)
    assert populated.playlists == ()


def test_search_matches_title_artist_and_album(populated):
    assert [t.title for t in populated.search("a")] == ["A"]
    assert len(populated.search("TESTER")) == 2
    assert len(populated.search("fixt")) == 2
    assert len(populated.search("  ")) == 2
    assert populated.search("zzz") == []


def test_corrupt_saved_library_starts_empty(tmp_path, reconciler):
    path = tmp_path / "library.json"
    path.write_text("][")
    manager = LibraryManager(LibraryStore(path), reconciler)

    snapshot = manager.load()

    assert snapshot.tracks == ()
    assert (tmp_path / "library.json.corrupt").exists()


def _mutate_from_worker(manager, name):
    """Create a playlist on another thread; True if it finished in time."""
    worker = threading.Thread(target=manager.create_playlist, args=(name,))
    worker.start()
    worker.join(timeout=2)
    return not worker.is_alive()


def test_listener_may_mutate_from_another_thread(manager):
    outcomes = []

    def listener(snapshot):
        if len(snapshot.playlists) == 1:
            outcomes.append(_mutate_from_worker(manager, "From listener"))

    manager.subscribe(listener)
    manager.create_playlist("First")

    assert outcomes == [True]
    assert [p.name for p in manager.playlists] == ["First", "From listener"]


def test_refresh_listener_may_mutate_from_another_thread(populated, music_dir, write_file):
    write_file(music_dir, "c.mp3", b"c")
    outcomes = []

    def listener(snapshot):
        if len(snapshot.tracks) == 3 and not snapshot.playlists:
            outcomes.append(_mutate_from_worker(populated, "During refresh"))

    populated.subscribe(listener)
    populated.refresh_library()

    assert outcomes == [True]
    assert len(populated.tracks) == 3
    assert [p.name for p in populated.playlists] == ["During refresh"]
