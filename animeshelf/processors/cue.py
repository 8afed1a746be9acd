"""Cue sheet segmentation into per-track album entries."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..exceptions import CueParseError, TagReadFailure
from ..models.inspection import Diagnostic, DiagnosticKind
from ..models.library import MusicTrack
from ..models.media import CueFile
from ..utils.concurrency import run_ordered

if TYPE_CHECKING:
    from ..extractors.cuesheet import CueParser
    from ..extractors.tags import AudioTagReader

logger = logging.getLogger(__name__)


@dataclass
class CueTrackEntry:
    """A cue track reduced to its start marks, in seconds."""

    track_number: int
    title: str | None
    artist: str | None
    index_one_seconds: float
    index_zero_seconds: float | None = None


def build_track_entries(cue_file: CueFile) -> list[CueTrackEntry]:
    """Convert a FILE block's tracks to entries sorted by track number.

    Raises CueParseError if a track has no INDEX 01.
    """
    entries = []
    for track in cue_file.tracks:
        index_zero = None
        index_one = None
        for index in track.indexes:
            if index.number == 0:
                index_zero = index.total_seconds
            elif index.number == 1:
                index_one = index.total_seconds
        if index_one is None:
            raise CueParseError(f"track {track.number} of {cue_file.name} has no INDEX 01")
        entries.append(
            CueTrackEntry(
                track_number=track.number,
                title=track.title,
                artist=track.performer,
                index_one_seconds=index_one,
                index_zero_seconds=index_zero,
            )
        )
    entries.sort(key=lambda e: e.track_number)
    return entries


def segment_durations(entries: list[CueTrackEntry], total_duration: float) -> list[float]:
    """Duration of each track, rounded to 0.01s.

    A track lasts until the next track starts: the next pre-gap (INDEX 00)
    when there is one, otherwise the next INDEX 01. The last track runs to
    the end of the file.
    """
    durations = []
    for idx, entry in enumerate(entries):
        if idx == len(entries) - 1:
            end = total_duration
        else:
            following = entries[idx + 1]
            if following.index_zero_seconds is not None:
                end = following.index_zero_seconds
            else:
                end = following.index_one_seconds
        durations.append(round(end - entry.index_one_seconds, 2))
    return durations


@dataclass
class CueJob:
    """One referenced audio file of a cue sheet, resolved against the pool."""

    cue_path: str
    album: str
    audio_path: str
    entries: list[CueTrackEntry]


@dataclass
class CueSegmentation:
    """Albums built from cue sheets plus the audio files they did not consume."""

    albums: dict[str, list[MusicTrack]] = field(default_factory=dict)
    remaining_pool: list[str] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


class CueSegmenter:
    """Turns cue sheets and their referenced audio files into album tracks."""

    def __init__(
        self,
        parser: CueParser,
        tag_reader: AudioTagReader,
        max_workers: int = 4,
        show_progress: bool = True,
    ) -> None:
        self._parser = parser
        self._tags = tag_reader
        self._max_workers = max_workers
        self._show_progress = show_progress

    def plan(
        self, cue_paths: list[str], pool: list[str]
    ) -> tuple[list[CueJob], CueSegmentation]:
        """Parse sheets and claim their audio files from the pool.

        Returns the jobs to measure, in sheet then FILE order, and a
        CueSegmentation holding the remaining pool and diagnostics so far.
        """
        result = CueSegmentation(remaining_pool=list(pool))
        jobs: list[CueJob] = []

        for cue_path in cue_paths:
            try:
                sheet = self._parser.parse(cue_path)
            except CueParseError as e:
                logger.warning(f"Skipping cue sheet {cue_path}: {e}")
                result.diagnostics.append(
                    Diagnostic(kind=DiagnosticKind.CUE_PARSE_FAILURE, path=cue_path, message=str(e))
                )
                continue

            album = sheet.title or os.path.splitext(os.path.basename(cue_path))[0]
            cue_dir = os.path.dirname(cue_path)

            for cue_file in sheet.files:
                audio_path = os.path.normpath(os.path.join(cue_dir, cue_file.name))
                if audio_path not in result.remaining_pool:
                    logger.warning(f"Cue sheet {cue_path} references missing file {audio_path}")
                    result.diagnostics.append(
                        Diagnostic(
                            kind=DiagnosticKind.RESOLUTION_FAILURE,
                            path=cue_path,
                            message=f"referenced file not found: {audio_path}",
                        )
                    )
                    continue
                result.remaining_pool.remove(audio_path)

                if not cue_file.tracks:
                    continue

                try:
                    entries = build_track_entries(cue_file)
                except CueParseError as e:
                    logger.warning(f"Skipping {audio_path} in {cue_path}: {e}")
                    result.diagnostics.append(
                        Diagnostic(kind=DiagnosticKind.CUE_PARSE_FAILURE, path=cue_path, message=str(e))
                    )
                    continue

                jobs.append(
                    CueJob(cue_path=cue_path, album=album, audio_path=audio_path, entries=entries)
                )

        return jobs, result

    def _measure(self, job: CueJob) -> float:
        tags = self._tags.read_tags(job.audio_path)
        if not tags.duration_seconds:
            raise TagReadFailure(job.audio_path, "no duration reported")
        return tags.duration_seconds

    def segment(self, cue_paths: list[str], pool: list[str], root: str) -> CueSegmentation:
        """Segment every cue sheet. Sheets sharing an album name are merged in sheet order."""
        jobs, result = self.plan(cue_paths, pool)

        outcomes = run_ordered(
            self._measure,
            jobs,
            max_workers=self._max_workers,
            desc="Cue sheets",
            unit="file",
            show_progress=self._show_progress,
        )

        for job, outcome in zip(jobs, outcomes):
            if outcome.error is not None:
                logger.warning(f"Skipping tracks of {job.audio_path}: {outcome.error.reason}")
                result.diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.PROBE_FAILURE,
                        path=job.audio_path,
                        message=outcome.error.reason,
                    )
                )
                continue

            source = os.path.relpath(job.audio_path, root)
            durations = segment_durations(job.entries, outcome.value)
            tracks = result.albums.setdefault(job.album, [])
            for entry, duration in zip(job.entries, durations):
                tracks.append(
                    MusicTrack(
                        title=entry.title or f"Track {entry.track_number:02d}",
                        artist=entry.artist,
                        track_number=entry.track_number,
                        duration_seconds=duration,
                        source=source,
                    )
                )

        return result
