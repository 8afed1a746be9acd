"""Data returned by the media collaborators (prober, tag reader, cue parser)."""

from dataclasses import dataclass, field

FRAMES_PER_SECOND = 75  # cue sheet frames


@dataclass
class StreamInfo:
    """One stream of a probed container."""

    kind: str  # "video", "audio", "subtitle", or whatever ffprobe reports
    width: int | None = None
    height: int | None = None
    codec_name: str | None = None
    channels: int | None = None
    sample_rate_hz: int | None = None
    language_tag: str | None = None
    title_tag: str | None = None


@dataclass
class ProbeResult:
    """Container-level technical metadata for a media file."""

    duration_seconds: float
    size_bytes: int
    streams: list[StreamInfo] = field(default_factory=list)


@dataclass
class AudioTags:
    """Common tags and duration of an audio file."""

    title: str | None = None
    artist: str | None = None
    album: str | None = None
    track_number: int | None = None
    duration_seconds: float | None = None


@dataclass
class CueIndex:
    """An INDEX line: a time position in minutes, seconds and frames."""

    number: int
    minutes: int
    seconds: int
    frames: int

    @property
    def total_seconds(self) -> float:
        return self.minutes * 60 + self.seconds + self.frames / FRAMES_PER_SECOND


@dataclass
class CueTrack:
    number: int
    title: str | None = None
    performer: str | None = None
    indexes: list[CueIndex] = field(default_factory=list)


@dataclass
class CueFile:
    """A FILE block of a cue sheet and the tracks it declares."""

    name: str
    tracks: list[CueTrack] = field(default_factory=list)


@dataclass
class CueSheet:
    title: str | None = None
    performer: str | None = None
    files: list[CueFile] = field(default_factory=list)
