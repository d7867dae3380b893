import pytest

from services.errors import DirectoryAccessError, NoDirectorySelected
from services.file_access import DirectoryGrant


def test_access_is_scoped_to_the_with_block(music_dir):
    grant = DirectoryGrant(music_dir)

    with grant.access() as root:
        assert root == music_dir
        assert grant.is_active

    assert not grant.is_active


def test_access_is_released_when_the_body_raises(music_dir):
    grant = DirectoryGrant(music_dir)

    with pytest.raises(RuntimeError):
        with grant.access():
            raise RuntimeError("scan failed")

    assert not grant.is_active


def test_no_directory_means_no_access():
    grant = DirectoryGrant(None)

    with pytest.raises(NoDirectorySelected):
        with grant.access():
            pass

    assert not grant.is_active


def test_stale_directory_is_reported_as_not_selected(tmp_path):
    with pytest.raises(NoDirectorySelected):
        DirectoryGrant(tmp_path / "gone").validate()


def test_unlistable_directory_is_an_access_error(music_dir, monkeypatch):
    monkeypatch.setattr("services.file_access.os.access", lambda path, mode: False)

    with pytest.raises(DirectoryAccessError):
        DirectoryGrant(music_dir).validate()
