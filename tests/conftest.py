from pathlib import Path
from typing import Optional

import pytest

from models.track import Track
from services.errors import PlaybackError
from services.library_manager import LibraryManager
from services.library_reconciler import LibraryReconciler
from services.library_store import LibraryStore
from services.metadata_extractor import TrackTags


class FakeExtractor:
    """Tags derived from the file name; no audio decoding."""

    def __init__(self, duration: float = 180.0):
        self.duration = duration
        self.calls: list[str] = []

    def read_tags(self, file_path, include_artwork: bool = False) -> TrackTags:
        self.calls.append(str(file_path))
        stem = Path(file_path).stem
        return TrackTags(title=stem.title(), artist="Tester", album="Fixtures", duration_seconds=self.duration)

    def read_artwork(self, file_path) -> Optional[bytes]:
        return None


class RecordingOutput:
    """Audio output that records every call."""

    def __init__(self):
        self.calls: list[tuple] = []
        self.fail_paths: set[str] = set()
        self.position = 0.0

    def play(self, file_path: str) -> None:
        if file_path in self.fail_paths:
            raise PlaybackError(f"cannot decode {file_path}")
        self.calls.append(("play", file_path))

    def pause(self) -> None:
        self.calls.append(("pause",))

    def resume(self) -> None:
        self.calls.append(("resume",))

    def stop(self) -> None:
        self.calls.append(("stop",))

    def seek(self, position: float) -> None:
        self.calls.append(("seek", position))

    def get_position(self) -> float:
        return self.position


@pytest.fixture
def music_dir(tmp_path):
    root = tmp_path / "music"
    root.mkdir()
    return root


@pytest.fixture
def write_file():
    def _write(root: Path, relative: str, content: bytes) -> Path:
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path
    return _write


@pytest.fixture
def extractor():
    return FakeExtractor()


@pytest.fixture
def reconciler(extractor):
    return LibraryReconciler(extractor=extractor)


@pytest.fixture
def store(tmp_path):
    return LibraryStore(tmp_path / "data" / "library.json")


@pytest.fixture
def manager(store, reconciler):
    return LibraryManager(store, reconciler)


@pytest.fixture
def output():
    return RecordingOutput()


@pytest.fixture
def make_tracks():
    def _make(*names: str, duration: float = 200.0) -> list[Track]:
        return [
            Track(
                id=f"{index:020d}",
                content_hash=f"hash-{name}",
                track_number=index,
                file_path=f"/music/{name}.mp3",
                title=name,
                duration_seconds=duration,
            )
            for index, name in enumerate(names, start=1)
        ]
    return _make
