"""Exception types raised by the inspector and its collaborators."""


class AnimeShelfError(Exception):
    """Base class for all library inspector errors."""


class ScanFailure(AnimeShelfError):
    """The library root could not be listed. Fatal to an inspection pass."""


class ProbeFailure(AnimeShelfError):
    """A single media file could not be probed."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class TagReadFailure(ProbeFailure):
    """A single audio file's tags could not be read."""


class CueParseError(AnimeShelfError):
    """A cue sheet could not be read or parsed."""


class InspectionCancelled(AnimeShelfError):
    """The inspection pass was aborted between stages."""


class LibraryError(AnimeShelfError):
    """An operation on the library list was rejected."""
