"""Service modules for the library list and saved entries."""

from .library import LibraryIndex
from .store import EntryStore

__all__ = ["EntryStore", "LibraryIndex"]
