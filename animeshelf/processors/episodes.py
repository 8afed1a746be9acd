"""Episode matching: pair each video with its subtitles and companion audio."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from ..models.inspection import Diagnostic, DiagnosticKind
from ..models.library import VideoRecord, VideoSection
from ..models.media import StreamInfo
from ..utils.concurrency import run_ordered
from ..utils.formatting import format_sample_rate, language_name
from .classifier import ClassifiedBucket

if TYPE_CHECKING:
    from ..extractors.probe import MediaProber

logger = logging.getLogger(__name__)

COMPANION_EXT = ".mka"
COMPANION_MARKER = "MKA:"

# match(video_path, subtitle_candidates) -> labels of the matching subtitles
SubtitleStrategy = Callable[[str, list[str]], list[str]]


def match_subtitles_by_stem(video_path: str, candidates: list[str]) -> list[str]:
    """Match subtitle files whose name extends the video's stem.

    For "ep01.mkv":
        "ep01.ass"     -> ".ass"      (final extension replaced)
        "ep01.chs.ass" -> ".chs.ass"  (language/variant suffix kept)

    Each candidate is checked independently, so an ambiguous subtitle can
    match more than one video.
    """
    video_ext = os.path.splitext(video_path)[1]
    labels = []
    for subtitle in candidates:
        cut_a = subtitle.rfind(".")
        if cut_a == -1:
            continue
        stem_a = subtitle[:cut_a]
        if stem_a + video_ext == video_path:
            labels.append(subtitle[cut_a:])
            continue

        cut_b = stem_a.rfind(".")
        if cut_b == -1:
            continue
        stem_b = stem_a[:cut_b]
        if stem_b + video_ext == video_path:
            labels.append(subtitle[cut_b:])
    return labels


def companion_path(video_path: str) -> str:
    """Sibling .mka path for a video: /dir/ep01.mkv -> /dir/ep01.mka"""
    return os.path.splitext(video_path)[0] + COMPANION_EXT


def describe_audio_stream(stream: StreamInfo, companion: bool = False) -> str:
    """Build the display string for an audio stream.

    Example: "MKA:[Japanese] <Commentary> FLAC, 2ch, 48kHz"
    """
    text = COMPANION_MARKER if companion else ""
    language = language_name(stream.language_tag)
    if language:
        text += f"[{language}] "
    if stream.title_tag:
        text += f"<{stream.title_tag}> "
    text += f"{(stream.codec_name or 'unknown').upper()}, "
    text += f"{stream.channels or 0}ch, "
    text += format_sample_rate(stream.sample_rate_hz)
    return text


def describe_subtitle_stream(stream: StreamInfo) -> str | None:
    """Label for an embedded subtitle stream; untagged streams are not listed."""
    language = language_name(stream.language_tag)
    if not language:
        return None
    if stream.title_tag:
        return f"{language}({stream.title_tag})"
    return language


@dataclass
class EpisodeJob:
    """A video with its already matched sidecar files, ready to probe."""

    video_path: str
    subtitle_labels: list[str] = field(default_factory=list)
    companion: str | None = None


class EpisodeMatcher:
    """Builds one VideoSection per video-bearing directory."""

    def __init__(
        self,
        prober: MediaProber,
        subtitle_strategy: SubtitleStrategy = match_subtitles_by_stem,
        max_workers: int = 4,
        show_progress: bool = True,
    ) -> None:
        self._prober = prober
        self._match_subtitles = subtitle_strategy
        self._max_workers = max_workers
        self._show_progress = show_progress

    def plan(self, bucket: ClassifiedBucket) -> list[EpisodeJob]:
        """Pair every video of a bucket with its subtitles and companion audio."""
        jobs = []
        claimed: set[str] = set()
        # Keyed with a lower-case extension so ep01.MKA pairs with ep01.mkv
        available = {companion_path(path): path for path in bucket.companion_audio}

        for video in bucket.videos:
            companion = available.get(companion_path(video))
            if companion is not None and companion not in claimed:
                claimed.add(companion)
            else:
                if companion in claimed:
                    logger.warning(f"Companion audio {companion} already claimed; not attached to {video}")
                companion = None

            jobs.append(
                EpisodeJob(
                    video_path=video,
                    subtitle_labels=self._match_subtitles(video, list(bucket.subtitles)),
                    companion=companion,
                )
            )
        return jobs

    def build_record(self, job: EpisodeJob) -> VideoRecord:
        """Probe a video (and its companion) into a VideoRecord.

        Raises ProbeFailure if either file cannot be probed.
        """
        probed = self._prober.probe(job.video_path)

        resolution = ""
        subtitles = list(job.subtitle_labels)
        audio_tracks = []

        for stream in probed.streams:
            if stream.kind == "video":
                if not resolution and stream.width and stream.height:
                    resolution = f"{stream.width}x{stream.height}"
            elif stream.kind == "subtitle":
                label = describe_subtitle_stream(stream)
                if label:
                    subtitles.append(label)
            elif stream.kind == "audio":
                audio_tracks.append(describe_audio_stream(stream))

        if job.companion:
            companion_probe = self._prober.probe(job.companion)
            for stream in companion_probe.streams:
                if stream.kind == "audio":
                    audio_tracks.append(describe_audio_stream(stream, companion=True))

        return VideoRecord(
            basename=os.path.basename(job.video_path),
            duration_seconds=round(probed.duration_seconds, 2),
            size_bytes=probed.size_bytes,
            resolution=resolution,
            audio_tracks=audio_tracks,
            subtitle_tracks=subtitles,
        )

    def match_directory(
        self, key: str, bucket: ClassifiedBucket
    ) -> tuple[VideoSection, list[Diagnostic]]:
        """Probe a directory's videos concurrently, keeping listing order."""
        jobs = self.plan(bucket)
        outcomes = run_ordered(
            self.build_record,
            jobs,
            max_workers=self._max_workers,
            desc=f"Videos in {key or '.'}",
            unit="video",
            show_progress=self._show_progress,
        )

        section = VideoSection(directory_key=key)
        diagnostics = []
        for job, outcome in zip(jobs, outcomes):
            if outcome.error is not None:
                logger.warning(f"Skipping {job.video_path}: {outcome.error.reason}")
                diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.PROBE_FAILURE,
                        path=outcome.error.path,
                        message=outcome.error.reason,
                    )
                )
                continue
            section.episodes.append(outcome.value)
        return section, diagnostics

    def match_all(
        self, directories: dict[str, ClassifiedBucket]
    ) -> tuple[list[VideoSection], list[Diagnostic]]:
        """Build sections for every directory, in directory order."""
        sections = []
        diagnostics = []
        for key, bucket in directories.items():
            section, problems = self.match_directory(key, bucket)
            sections.append(section)
            diagnostics.extend(problems)
        return sections, diagnostics
