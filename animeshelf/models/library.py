"""Library catalog data models."""

import os
from dataclasses import dataclass, field

from ..exceptions import LibraryError

OVERLAY_FIELDS = ("title", "second_title", "airdate", "description")


@dataclass
class VideoRecord:
    """One episode file with its matched subtitles and audio tracks.

    The overlay fields (title, second_title, airdate, description) are
    supplied by the user or a metadata fetch and are never derived from
    the files themselves.
    """

    basename: str
    duration_seconds: float
    size_bytes: int
    resolution: str = ""
    audio_tracks: list[str] = field(default_factory=list)
    subtitle_tracks: list[str] = field(default_factory=list)
    title: str | None = None
    second_title: str | None = None
    airdate: str | None = None
    description: str | None = None

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dictionary."""
        data = {
            "basename": self.basename,
            "duration_seconds": self.duration_seconds,
            "size_bytes": self.size_bytes,
            "resolution": self.resolution,
            "audio_tracks": list(self.audio_tracks),
            "subtitle_tracks": list(self.subtitle_tracks),
        }
        # Overlays are omitted until set
        for name in OVERLAY_FIELDS:
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "VideoRecord":
        return cls(
            basename=data["basename"],
            duration_seconds=data.get("duration_seconds", 0.0),
            size_bytes=data.get("size_bytes", 0),
            resolution=data.get("resolution", ""),
            audio_tracks=list(data.get("audio_tracks", [])),
            subtitle_tracks=list(data.get("subtitle_tracks", [])),
            title=data.get("title"),
            second_title=data.get("second_title"),
            airdate=data.get("airdate"),
            description=data.get("description"),
        )

    def has_overlays(self) -> bool:
        return any(getattr(self, name) is not None for name in OVERLAY_FIELDS)


@dataclass
class VideoSection:
    """Episodes found in one directory of the library root."""

    directory_key: str
    display_name: str | None = None
    episodes: list[VideoRecord] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dictionary."""
        data = {
            "directory_key": self.directory_key,
            "episodes": [episode.to_dict() for episode in self.episodes],
        }
        if self.display_name is not None:
            data["display_name"] = self.display_name
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "VideoSection":
        return cls(
            directory_key=data["directory_key"],
            display_name=data.get("display_name"),
            episodes=[VideoRecord.from_dict(e) for e in data.get("episodes", [])],
        )

    def episode(self, basename: str) -> VideoRecord | None:
        for episode in self.episodes:
            if episode.basename == basename:
                return episode
        return None


@dataclass
class MusicTrack:
    """A track of an album, either a whole file or a cue-defined segment."""

    title: str
    artist: str | None
    track_number: int | None
    duration_seconds: float  # rounded to 0.01s
    source: str = ""  # path of the measured file, relative to the library root

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dictionary."""
        return {
            "title": self.title,
            "artist": self.artist,
            "track_number": self.track_number,
            "duration_seconds": self.duration_seconds,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MusicTrack":
        return cls(
            title=data["title"],
            artist=data.get("artist"),
            track_number=data.get("track_number"),
            duration_seconds=data.get("duration_seconds", 0.0),
            source=data.get("source", ""),
        )


@dataclass
class LibraryEntry:
    """Everything inspected for one anime title."""

    title: str
    root_path: str
    video_sections: list[VideoSection] = field(default_factory=list)
    albums: dict[str, list[MusicTrack]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dictionary."""
        return {
            "title": self.title,
            "root_path": self.root_path,
            "video_sections": [section.to_dict() for section in self.video_sections],
            "albums": {
                name: [track.to_dict() for track in tracks]
                for name, tracks in self.albums.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LibraryEntry":
        return cls(
            title=data["title"],
            root_path=data["root_path"],
            video_sections=[VideoSection.from_dict(s) for s in data.get("video_sections", [])],
            albums={
                name: [MusicTrack.from_dict(t) for t in tracks]
                for name, tracks in data.get("albums", {}).items()
            },
        )

    @property
    def episode_count(self) -> int:
        return sum(len(section.episodes) for section in self.video_sections)

    @property
    def track_count(self) -> int:
        return sum(len(tracks) for tracks in self.albums.values())

    def section(self, directory_key: str) -> VideoSection:
        for section in self.video_sections:
            if section.directory_key == directory_key:
                return section
        raise LibraryError(f"No video section for directory '{directory_key}' in '{self.title}'")

    def rename_section(self, directory_key: str, display_name: str | None) -> None:
        """Set or clear the display name of a section. The key never changes."""
        self.section(directory_key).display_name = display_name

    def reorder_section(self, directory_key: str, new_order: list[int]) -> None:
        """Reorder a section's episodes; new_order lists the old indexes in their new order."""
        section = self.section(directory_key)
        if sorted(new_order) != list(range(len(section.episodes))):
            raise LibraryError(
                f"Order {new_order} is not a permutation of {len(section.episodes)} episodes"
            )
        section.episodes = [section.episodes[index] for index in new_order]

    def apply_episode_data(self, directory_key: str, rows: list[dict]) -> int:
        """Overlay per-episode data onto a section in order.

        The first row goes to the first episode and so on; surplus rows or
        episodes are left alone. Returns the number of episodes updated.
        """
        section = self.section(directory_key)
        count = min(len(section.episodes), len(rows))
        for episode, row in zip(section.episodes[:count], rows[:count]):
            for name in OVERLAY_FIELDS:
                if name in row:
                    setattr(episode, name, row[name])
        return count

    def update_episode_field(self, video_path: str, name: str, value: str | None) -> None:
        """Set one overlay field on the episode at video_path (absolute path)."""
        if name not in OVERLAY_FIELDS:
            raise LibraryError(f"'{name}' is not an editable episode field")
        target = os.path.normpath(video_path)
        for section in self.video_sections:
            for episode in section.episodes:
                full_path = os.path.join(self.root_path, section.directory_key, episode.basename)
                if os.path.normpath(full_path) == target:
                    setattr(episode, name, value)
                    return
        raise LibraryError(f"No episode at {video_path} in '{self.title}'")

    def carry_overlays_from(self, previous: "LibraryEntry") -> None:
        """Copy overlays and section names from an earlier inspection.

        Episodes are matched by directory key and basename; episodes that no
        longer exist simply lose their overlays.
        """
        old_sections = {s.directory_key: s for s in previous.video_sections}
        for section in self.video_sections:
            old = old_sections.get(section.directory_key)
            if old is None:
                continue
            if section.display_name is None:
                section.display_name = old.display_name
            for episode in section.episodes:
                old_episode = old.episode(episode.basename)
                if old_episode is None:
                    continue
                for name in OVERLAY_FIELDS:
                    value = getattr(old_episode, name)
                    if value is not None:
                        setattr(episode, name, value)
