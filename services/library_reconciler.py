"""Reconciles a directory scan against the existing library.

Identity rules, in priority order:
    1. same file path as an existing track -> keep that track's ID
    2. same content hash as an existing track -> keep that track's ID
    3. otherwise -> mint a new ID

Candidates are processed in lexicographic path order, so the outcome does not
depend on filesystem enumeration order. Within one pass the first path with a
given content hash wins and later copies are skipped, and an existing ID is
handed out at most once.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence

from models.track import StableIdMinter, Track, number_tracks
from services.content_identity import hash_file
from services.directory_scanner import DirectoryScanner
from services.metadata_extractor import MetadataExtractor

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Outcome of one reconciliation pass."""
    tracks: list[Track] = field(default_factory=list)
    cancelled: bool = False
    root_accessible: bool = True
    files_processed: int = 0
    skipped_unreadable: int = 0
    skipped_duplicate: int = 0
    reused_by_path: int = 0
    reused_by_hash: int = 0
    added: int = 0
    removed: int = 0
    duration_seconds: float = 0.0

    @property
    def committable(self) -> bool:
        return self.root_accessible and not self.cancelled


@dataclass
class _Candidate:
    path: str
    content_hash: str
    track_id: Optional[str] = None


class LibraryReconciler:
    """Builds a new, stably-identified library from a directory scan."""

    def __init__(
        self,
        scanner: Optional[DirectoryScanner] = None,
        extractor: Optional[MetadataExtractor] = None,
        hasher: Callable[[Path], str] = hash_file,
    ):
        self.scanner = scanner or DirectoryScanner()
        self.extractor = extractor or MetadataExtractor()
        self.hasher = hasher

    def reconcile(
        self,
        existing: Sequence[Track],
        root: Path,
        cancel_event: Optional[threading.Event] = None,
    ) -> ReconcileResult:
        """Reconcile ``existing`` against the audio files under ``root``.

        Args:
            existing: The current library.
            root: Music directory to scan.
            cancel_event: Checked between files; when set, the pass stops and
                the existing library is returned unchanged.

        Returns:
            ReconcileResult. Committing ``result.tracks`` is up to the caller;
            nothing is committed when the root is inaccessible or the pass was
            cancelled, and in both cases ``tracks`` is the existing library.
        """
        start_time = time.monotonic()
        root = Path(root)
        result = ReconcileResult()

        if not root.is_dir() or not os.access(root, os.R_OK | os.X_OK):
            logger.error(f"Music directory is not accessible: {root}")
            result.root_accessible = False
            result.tracks = list(existing)
            return result

        logger.info(f"Starting library refresh of {root} ({len(existing)} tracks known)")

        candidates = self._hash_candidates(
            sorted(str(path) for path in self.scanner.scan(root)),
            result,
            cancel_event,
        )
        if candidates is None:
            logger.info("Library refresh cancelled, keeping existing library")
            result.cancelled = True
            result.tracks = list(existing)
            return result

        if not root.is_dir():
            logger.error(f"Music directory disappeared during refresh: {root}")
            result.root_accessible = False
            result.tracks = list(existing)
            return result

        self._resolve_identities(candidates, existing, result)

        tracks = []
        for candidate in candidates:
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Library refresh cancelled, keeping existing library")
                result.cancelled = True
                result.tracks = list(existing)
                return result
            tracks.append(self._build_track(candidate))

        result.tracks = number_tracks(tracks)
        kept_ids = {track.id for track in result.tracks}
        result.removed = sum(1 for track in existing if track.id not in kept_ids)
        result.duration_seconds = time.monotonic() - start_time

        logger.info(
            f"Refresh complete. Processed {result.files_processed} files, "
            f"skipped {result.skipped_unreadable} unreadable, "
            f"skipped {result.skipped_duplicate} duplicates, "
            f"reused {result.reused_by_path} by path, "
            f"reused {result.reused_by_hash} by hash, "
            f"added {result.added}, removed {result.removed}, "
            f"resulting in {len(result.tracks)} tracks "
            f"({result.duration_seconds:.2f}s)"
        )
        return result

    def _hash_candidates(
        self,
        paths: Iterable[str],
        result: ReconcileResult,
        cancel_event: Optional[threading.Event],
    ) -> Optional[list[_Candidate]]:
        candidates: list[_Candidate] = []
        hash_to_path: dict[str, str] = {}

        for path in paths:
            if cancel_event is not None and cancel_event.is_set():
                return None

            result.files_processed += 1
            try:
                content_hash = self.hasher(Path(path))
            except OSError as e:
                logger.warning(f"Failed to read {path} for hashing: {e}")
                result.skipped_unreadable += 1
                continue

            claimed_by = hash_to_path.get(content_hash)
            if claimed_by is not None and claimed_by != path:
                logger.debug(f"Skipping duplicate content {content_hash[:12]} at {path}, claimed by {claimed_by}")
                result.skipped_duplicate += 1
                continue

            hash_to_path[content_hash] = path
            candidates.append(_Candidate(path=path, content_hash=content_hash))

        return candidates

    @staticmethod
    def _resolve_identities(
        candidates: list[_Candidate],
        existing: Sequence[Track],
        result: ReconcileResult,
    ) -> None:
        by_path = {track.file_path: track for track in existing}
        by_hash: dict[str, Track] = {}
        for track in sorted(existing, key=lambda t: t.id):
            by_hash.setdefault(track.content_hash, track)

        claimed: set[str] = set()

        for candidate in candidates:
            match = by_path.get(candidate.path)
            if match is not None and match.id not in claimed:
                candidate.track_id = match.id
                claimed.add(match.id)
                result.reused_by_path += 1
                logger.debug(f"Reusing {match.id} by path for {candidate.path}")

        for candidate in candidates:
            if candidate.track_id is not None:
                continue
            match = by_hash.get(candidate.content_hash)
            if match is not None and match.id not in claimed:
                candidate.track_id = match.id
                claimed.add(match.id)
                result.reused_by_hash += 1
                logger.debug(f"Reusing {match.id} by hash for {candidate.path} (was {match.file_path})")

        minter = StableIdMinter(track.id for track in existing)
        for candidate in candidates:
            if candidate.track_id is None:
                candidate.track_id = minter.mint()
                result.added += 1
                logger.debug(f"Adding new track {candidate.track_id} at {candidate.path}")

    def _build_track(self, candidate: _Candidate) -> Track:
        tags = self.extractor.read_tags(candidate.path)
        return Track(
            id=candidate.track_id,
            content_hash=candidate.content_hash,
            track_number=0,
            file_path=candidate.path,
            title=tags.title,
            artist=tags.artist,
            album=tags.album,
            duration_seconds=tags.duration_seconds,
            lyrics=tags.lyrics,
        )
