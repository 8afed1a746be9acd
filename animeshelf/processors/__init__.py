"""Processor modules for classification, matching and catalog building."""

from .catalog import CatalogBuilder
from .classifier import classify_files
from .cue import CueSegmenter
from .episodes import EpisodeMatcher, match_subtitles_by_stem
from .music import StandaloneAudioClassifier

__all__ = [
    "CatalogBuilder",
    "CueSegmenter",
    "EpisodeMatcher",
    "StandaloneAudioClassifier",
    "classify_files",
    "match_subtitles_by_stem",
]
