"""Extractor modules: directory listing, ffprobe, audio tags and cue sheets."""

from .cuesheet import CueParser
from .probe import MediaProber
from .tags import AudioTagReader
from .walker import DirectoryWalker

__all__ = ["AudioTagReader", "CueParser", "DirectoryWalker", "MediaProber"]
