from models.playlist import Playlist, PlaylistEntry
from services.playlist_store import PlaylistStore


def _positions(playlist):
    return [entry.position for entry in playlist.entries]


def _store_with(*track_ids):
    store = PlaylistStore()
    playlist = store.create_playlist("Mix")
    store.add_tracks(track_ids, playlist.id)
    return store, playlist.id


def test_create_playlist_is_empty_and_names_may_repeat():
    store = PlaylistStore()
    first = store.create_playlist("Road trip")
    second = store.create_playlist("Road trip")

    assert first.id != second.id
    assert len(first) == 0
    assert [p.name for p in store.playlists] == ["Road trip", "Road trip"]


def test_add_tracks_appends_in_order():
    store, playlist_id = _store_with("A", "B")
    updated = store.add_tracks(["C"], playlist_id)

    assert updated.track_ids == ["A", "B", "C"]
    assert _positions(updated) == [1, 2, 3]


def test_add_to_unknown_playlist_returns_none():
    assert PlaylistStore().add_tracks(["A"], "missing") is None


def test_reorder_moves_entry_and_renumbers():
    store, playlist_id = _store_with("A", "B", "C")

    assert store.reorder(playlist_id, 2, 0)

    playlist = store.get(playlist_id)
    assert playlist.track_ids == ["C", "A", "B"]
    assert _positions(playlist) == [1, 2, 3]


def test_reorder_out_of_range_is_a_no_op():
    store, playlist_id = _store_with("A", "B", "C")

    assert not store.reorder(playlist_id, 3, 0)
    assert not store.reorder(playlist_id, 0, -1)
    assert store.get(playlist_id).track_ids == ["A", "B", "C"]


def test_remove_tracks_renumbers_remaining_entries():
    store, playlist_id = _store_with("A", "B", "C", "B")

    updated = store.remove_tracks(["B"], playlist_id)

    assert updated.track_ids == ["A", "C"]
    assert _positions(updated) == [1, 2]


def test_prune_drops_dangling_references_everywhere():
    store = PlaylistStore()
    first = store.create_playlist("One")
    second = store.create_playlist("Two")
    store.add_tracks(["A", "B"], first.id)
    store.add_tracks(["B", "C"], second.id)

    removed = store.prune({"A", "C"})

    assert removed == 2
    assert store.get(first.id).track_ids == ["A"]
    assert store.get(second.id).track_ids == ["C"]
    assert _positions(store.get(second.id)) == [1]


def test_delete_playlist():
    store, playlist_id = _store_with("A")

    assert store.delete_playlist(playlist_id)
    assert not store.delete_playlist(playlist_id)
    assert store.playlists == ()


def test_loaded_playlists_get_contiguous_positions():
    gappy = Playlist(
        name="Imported",
        entries=(PlaylistEntry("A", 2), PlaylistEntry("B", 7)),
    )

    store = PlaylistStore([gappy])

    assert _positions(store.get(gappy.id)) == [1, 2]
