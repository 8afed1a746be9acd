"""Audio tag and duration reading using TinyTag."""

import logging

from tinytag import TinyTag

from ..exceptions import TagReadFailure
from ..models.media import AudioTags

logger = logging.getLogger(__name__)


def parse_track_number(value) -> int | None:
    """Parse a track number tag ("3", "03/12", 3) into an integer."""
    if value is None:
        return None
    if isinstance(value, int):
        return value
    track_str = str(value).strip()
    if "/" in track_str:
        track_str = track_str.split("/")[0].strip()
    return int(track_str) if track_str.isdigit() else None


class AudioTagReader:
    """Reads common tags and duration from an audio file."""

    def read_tags(self, file_path: str) -> AudioTags:
        """Read tags from an audio file.

        Raises TagReadFailure if TinyTag cannot parse the file.
        """
        try:
            tag = TinyTag.get(str(file_path))
        except Exception as e:
            raise TagReadFailure(str(file_path), f"could not read tags: {e}") from e

        return AudioTags(
            title=tag.title or None,
            artist=tag.artist or None,
            album=tag.album or None,
            track_number=parse_track_number(tag.track),
            duration_seconds=float(tag.duration) if tag.duration else None,
        )
