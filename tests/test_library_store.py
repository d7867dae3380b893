import json

import pytest

from models.playlist import Playlist
from services.errors import PersistenceError
from services.library_store import LibraryStore


def test_missing_file_loads_empty(tmp_path):
    data = LibraryStore(tmp_path / "library.json").load()

    assert data.tracks == []
    assert data.playlists == []
    assert data.music_dir is None


def test_save_then_load_restores_everything(tmp_path, make_tracks):
    store = LibraryStore(tmp_path / "library.json")
    tracks = make_tracks("a", "b")
    playlist = Playlist(name="Favourites").with_track_ids([tracks[1].id, tracks[0].id])

    store.save(tracks, [playlist], "/music")
    data = store.load()

    assert data.tracks == tracks
    assert data.playlists == [playlist]
    assert data.music_dir == "/music"


def test_saved_file_format(tmp_path, make_tracks):
    path = tmp_path / "library.json"
    tracks = make_tracks("a")
    LibraryStore(path).save(tracks, [Playlist(name="P", id="p1").with_track_ids([tracks[0].id])])

    raw = json.loads(path.read_text())

    assert raw["version"] == 1
    assert raw["library"][0]["id"] == tracks[0].id
    assert raw["playlists"][0]["songs"] == [{"track_id": tracks[0].id, "position": 1}]


def test_save_leaves_no_temporary_files(tmp_path, make_tracks):
    store = LibraryStore(tmp_path / "library.json")
    store.save(make_tracks("a"), [])
    store.save(make_tracks("a", "b"), [])

    assert [p.name for p in tmp_path.iterdir()] == ["library.json"]


def test_corrupt_file_raises_and_keeps_a_copy(tmp_path):
    path = tmp_path / "library.json"
    path.write_text("{not json")

    with pytest.raises(PersistenceError):
        LibraryStore(path).load()

    assert (tmp_path / "library.json.corrupt").read_text() == "{not json"


def test_unwritable_location_raises_persistence_error(tmp_path, make_tracks):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file where a directory should be")

    with pytest.raises(PersistenceError):
        LibraryStore(blocker / "library.json").save(make_tracks("a"), [])
