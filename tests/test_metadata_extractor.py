from services.metadata_extractor import MetadataExtractor


def test_garbage_file_falls_back_to_file_stem(tmp_path):
    path = tmp_path / "Untitled Demo.mp3"
    path.write_bytes(b"\x00not really audio\x00" * 8)

    tags = MetadataExtractor().read_tags(path)

    assert tags.title == "Untitled Demo"
    assert tags.artist is None
    assert tags.album is None
    assert tags.duration_seconds == 0.0
    assert tags.lyrics is None


def test_missing_file_falls_back_to_file_stem(tmp_path):
    tags = MetadataExtractor().read_tags(tmp_path / "gone.flac", include_artwork=True)

    assert tags.title == "gone"
    assert tags.artwork is None


def test_artwork_of_unreadable_file_is_none(tmp_path):
    path = tmp_path / "noise.m4a"
    path.write_bytes(b"noise")

    assert MetadataExtractor().read_artwork(path) is None
