"""Album grouping for standalone audio files."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from ..config import UNTAGGED_ALBUM
from ..models.inspection import Diagnostic, DiagnosticKind
from ..models.library import MusicTrack
from ..utils.concurrency import run_ordered

if TYPE_CHECKING:
    from ..extractors.tags import AudioTagReader
    from ..models.media import AudioTags

logger = logging.getLogger(__name__)


class StandaloneAudioClassifier:
    """Groups audio files that no cue sheet claimed into albums by their tags."""

    def __init__(
        self,
        tag_reader: AudioTagReader,
        max_workers: int = 4,
        show_progress: bool = True,
    ) -> None:
        self._tags = tag_reader
        self._max_workers = max_workers
        self._show_progress = show_progress

    def classify(
        self, audio_paths: list[str], root: str
    ) -> tuple[dict[str, list[MusicTrack]], list[Diagnostic]]:
        """Read tags for every file and bucket the tracks by album, in input order."""
        outcomes = run_ordered(
            self._tags.read_tags,
            audio_paths,
            max_workers=self._max_workers,
            desc="Audio files",
            unit="file",
            show_progress=self._show_progress,
        )

        albums: dict[str, list[MusicTrack]] = {}
        diagnostics = []
        for path, outcome in zip(audio_paths, outcomes):
            if outcome.error is not None:
                logger.warning(f"Skipping {path}: {outcome.error.reason}")
                diagnostics.append(
                    Diagnostic(kind=DiagnosticKind.PROBE_FAILURE, path=path, message=outcome.error.reason)
                )
                continue
            album, track = self._to_track(path, outcome.value, root)
            albums.setdefault(album, []).append(track)
        return albums, diagnostics

    def _to_track(self, path: str, tags: AudioTags, root: str) -> tuple[str, MusicTrack]:
        album = tags.album or UNTAGGED_ALBUM
        track = MusicTrack(
            title=tags.title or os.path.basename(path),
            artist=tags.artist,
            track_number=tags.track_number,
            duration_seconds=round(tags.duration_seconds or 0.0, 2),
            source=os.path.relpath(path, root),
        )
        return album, track
