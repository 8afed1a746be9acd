"""Data models for media probes, library entries and inspection results."""

from .inspection import Diagnostic, DiagnosticKind, InspectResult, InspectStatus
from .library import LibraryEntry, MusicTrack, VideoRecord, VideoSection
from .media import AudioTags, CueFile, CueIndex, CueSheet, CueTrack, ProbeResult, StreamInfo

__all__ = [
    "AudioTags",
    "CueFile",
    "CueIndex",
    "CueSheet",
    "CueTrack",
    "Diagnostic",
    "DiagnosticKind",
    "InspectResult",
    "InspectStatus",
    "LibraryEntry",
    "MusicTrack",
    "ProbeResult",
    "StreamInfo",
    "VideoRecord",
    "VideoSection",
]
