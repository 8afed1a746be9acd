"""Catalog building logic."""

from __future__ import annotations

import logging
import os
import threading
from typing import TYPE_CHECKING

from ..config import InspectorConfig
from ..exceptions import InspectionCancelled, ScanFailure
from ..models.inspection import InspectResult, InspectStatus
from ..models.library import LibraryEntry, MusicTrack
from .classifier import classify_files
from .cue import CueSegmenter
from .episodes import EpisodeMatcher, SubtitleStrategy, match_subtitles_by_stem
from .music import StandaloneAudioClassifier

if TYPE_CHECKING:
    from ..extractors.cuesheet import CueParser
    from ..extractors.probe import MediaProber
    from ..extractors.tags import AudioTagReader
    from ..extractors.walker import DirectoryWalker

logger = logging.getLogger(__name__)


def merge_albums(
    target: dict[str, list[MusicTrack]], extra: dict[str, list[MusicTrack]]
) -> dict[str, list[MusicTrack]]:
    """Append extra's tracks after target's, album by album. Returns target."""
    for album, tracks in extra.items():
        target.setdefault(album, []).extend(tracks)
    return target


class CatalogBuilder:
    """Runs one inspection pass over a library root and assembles its entry."""

    def __init__(
        self,
        walker: DirectoryWalker,
        prober: MediaProber,
        tag_reader: AudioTagReader,
        cue_parser: CueParser,
        config: InspectorConfig | None = None,
        subtitle_strategy: SubtitleStrategy = match_subtitles_by_stem,
    ) -> None:
        self._config = config or InspectorConfig()
        self._walker = walker
        self._episodes = EpisodeMatcher(
            prober,
            subtitle_strategy=subtitle_strategy,
            max_workers=self._config.max_workers,
            show_progress=self._config.show_progress,
        )
        self._cue = CueSegmenter(
            cue_parser,
            tag_reader,
            max_workers=self._config.max_workers,
            show_progress=self._config.show_progress,
        )
        self._standalone = StandaloneAudioClassifier(
            tag_reader,
            max_workers=self._config.max_workers,
            show_progress=self._config.show_progress,
        )

    def build(
        self,
        title: str,
        root: str,
        force: bool = False,
        cancel: threading.Event | None = None,
    ) -> InspectResult:
        """Inspect root and build a LibraryEntry for it.

        Returns FAILED when the root cannot be listed or holds no files, and
        NEEDS_CONFIRMATION when it holds more files than the configured
        threshold and force is not set. Raises InspectionCancelled if cancel
        is set between stages; nothing is returned in that case.
        """
        root = os.path.abspath(root)

        try:
            files = self._walker.list_all(root)
        except ScanFailure as e:
            logger.error(f"Cannot inspect '{title}': {e}")
            return InspectResult.failed(str(e))

        if not files:
            logger.error(f"Cannot inspect '{title}': no files found in {root}")
            return InspectResult.failed(f"No files found in {root}")

        threshold = self._config.confirm_threshold
        if len(files) > threshold and not force:
            logger.info(
                f"{root} holds {len(files)} files (threshold {threshold}); confirmation required"
            )
            return InspectResult.needs_confirmation(len(files))

        self._check_cancel(cancel, "classification")
        classification = classify_files(files, root)

        self._check_cancel(cancel, "episode matching")
        logger.info(f"Resolving videos of '{title}'")
        sections, diagnostics = self._episodes.match_all(classification.video_directories())

        self._check_cancel(cancel, "cue segmentation")
        logger.info(f"Resolving audio of '{title}'")
        segmentation = self._cue.segment(classification.cue_sheets, classification.standalone_audio, root)
        diagnostics.extend(segmentation.diagnostics)

        self._check_cancel(cancel, "standalone audio")
        standalone, problems = self._standalone.classify(segmentation.remaining_pool, root)
        diagnostics.extend(problems)

        self._check_cancel(cancel, "publishing")
        entry = LibraryEntry(
            title=title,
            root_path=root,
            video_sections=sections,
            albums=merge_albums(segmentation.albums, standalone),
        )

        logger.info(
            f"Inspected '{title}': {entry.episode_count} episodes, "
            f"{entry.track_count} tracks, {len(diagnostics)} problems"
        )
        return InspectResult(
            status=InspectStatus.OK,
            entry=entry,
            diagnostics=diagnostics,
            file_count=len(files),
        )

    def _check_cancel(self, cancel: threading.Event | None, stage: str) -> None:
        if cancel is not None and cancel.is_set():
            logger.info(f"Inspection cancelled before {stage}")
            raise InspectionCancelled(f"Inspection cancelled before {stage}")
