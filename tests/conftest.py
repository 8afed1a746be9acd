"""Shared fakes for the inspector's collaborators."""

import threading

import pytest

from animeshelf.config import InspectorConfig
from animeshelf.exceptions import CueParseError, ProbeFailure, ScanFailure, TagReadFailure
from animeshelf.models.media import AudioTags, ProbeResult, StreamInfo


def video_probe(
    duration: float = 1420.0,
    size: int = 350_000_000,
    width: int = 1920,
    height: int = 1080,
    audio: list[StreamInfo] | None = None,
    subtitles: list[StreamInfo] | None = None,
) -> ProbeResult:
    """Build a ProbeResult resembling a typical fansub mkv."""
    streams = [StreamInfo(kind="video", width=width, height=height, codec_name="hevc")]
    if audio is None:
        audio = [
            StreamInfo(
                kind="audio",
                codec_name="flac",
                channels=2,
                sample_rate_hz=48000,
                language_tag="jpn",
            )
        ]
    streams.extend(audio)
    streams.extend(subtitles or [])
    return ProbeResult(duration_seconds=duration, size_bytes=size, streams=streams)


class FakeWalker:
    def __init__(self, files: list[str] | None = None, error: Exception | None = None) -> None:
        self.files = files or []
        self.error = error
        self.calls = 0

    def list_all(self, root: str) -> list[str]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.files)


class FakeProber:
    """Returns canned probe results; can fail or hold back chosen paths."""

    def __init__(
        self,
        results: dict[str, ProbeResult] | None = None,
        failures: set[str] | None = None,
        wait_for: dict[str, threading.Event] | None = None,
        signal: dict[str, threading.Event] | None = None,
    ) -> None:
        self.results = results or {}
        self.failures = failures or set()
        self.wait_for = wait_for or {}
        self.signal = signal or {}
        self.calls: list[str] = []
        self.completed: list[str] = []
        self._lock = threading.Lock()

    def probe(self, path: str) -> ProbeResult:
        with self._lock:
            self.calls.append(path)
        if path in self.wait_for:
            self.wait_for[path].wait(timeout=5)
        try:
            if path in self.failures:
                raise ProbeFailure(path, "invalid data found when processing input")
            return self.results.get(path) or video_probe()
        finally:
            with self._lock:
                self.completed.append(path)
            if path in self.signal:
                self.signal[path].set()


class FakeTagReader:
    def __init__(
        self,
        tags: dict[str, AudioTags] | None = None,
        failures: set[str] | None = None,
    ) -> None:
        self.tags = tags or {}
        self.failures = failures or set()
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def read_tags(self, path: str) -> AudioTags:
        with self._lock:
            self.calls.append(path)
        if path in self.failures:
            raise TagReadFailure(path, "could not read tags: unsupported format")
        return self.tags.get(path) or AudioTags(duration_seconds=240.0)


class FakeCueParser:
    def __init__(self, sheets: dict | None = None) -> None:
        self.sheets = sheets or {}

    def parse(self, path: str):
        sheet = self.sheets.get(path)
        if sheet is None:
            raise CueParseError(f"could not read {path}")
        return sheet


@pytest.fixture
def inspector_config():
    """Quiet config with enough workers to run every probe at once."""
    return InspectorConfig(max_workers=8, show_progress=False)


@pytest.fixture
def scan_error():
    return ScanFailure("Library folder not found or not a directory: /missing")
