"""File classification by extension."""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from ..config import (
    COMPANION_AUDIO_FORMATS,
    CUE_FORMATS,
    STANDALONE_AUDIO_FORMATS,
    SUBTITLE_FORMATS,
    VIDEO_FORMATS,
)
from ..utils.paths import directory_key, lower_ext

logger = logging.getLogger(__name__)


@dataclass
class ClassifiedBucket:
    """Video-related files of one directory, in listing order."""

    videos: list[str] = field(default_factory=list)
    companion_audio: list[str] = field(default_factory=list)
    subtitles: list[str] = field(default_factory=list)


@dataclass
class Classification:
    """Result of classifying a flat file list.

    ``directories`` is keyed by directory relative to the root ("" for the
    root itself) in first-seen order. Cue sheets and standalone audio are
    kept global because an album may span directories.
    """

    directories: dict[str, ClassifiedBucket] = field(default_factory=dict)
    cue_sheets: list[str] = field(default_factory=list)
    standalone_audio: list[str] = field(default_factory=list)

    def video_directories(self) -> dict[str, ClassifiedBucket]:
        """Buckets that hold at least one video."""
        return {key: bucket for key, bucket in self.directories.items() if bucket.videos}


def classify_files(files: Iterable[str], root: str) -> Classification:
    """Partition files into typed buckets. Unknown extensions are ignored."""
    result = Classification()

    for file_path in files:
        ext = lower_ext(file_path)

        if ext in CUE_FORMATS:
            result.cue_sheets.append(file_path)
            continue
        if ext in STANDALONE_AUDIO_FORMATS:
            result.standalone_audio.append(file_path)
            continue
        if ext not in VIDEO_FORMATS and ext not in SUBTITLE_FORMATS and ext not in COMPANION_AUDIO_FORMATS:
            continue

        bucket = result.directories.setdefault(directory_key(root, file_path), ClassifiedBucket())
        if ext in VIDEO_FORMATS:
            bucket.videos.append(file_path)
        elif ext in SUBTITLE_FORMATS:
            bucket.subtitles.append(file_path)
        else:
            bucket.companion_audio.append(file_path)

    logger.debug(
        f"Classified {sum(len(b.videos) for b in result.directories.values())} videos in "
        f"{len(result.directories)} directories, {len(result.cue_sheets)} cue sheets, "
        f"{len(result.standalone_audio)} audio files"
    )
    return result
