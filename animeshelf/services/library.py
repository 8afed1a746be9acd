"""The ordered list of anime titles and their folders."""

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

from ..exceptions import LibraryError
from ..utils.paths import sanitize_filename

logger = logging.getLogger(__name__)


@dataclass
class IndexEntry:
    title: str
    path: str


class LibraryIndex:
    """Titles in user order, each pointing at its library root.

    Persisted as a JSON list of {"title", "path"} objects. A missing or
    corrupt file starts an empty library.
    """

    def __init__(self, index_file: Path) -> None:
        self._index_file = index_file
        self._entries: list[IndexEntry] = self._load()

    def _load(self) -> list[IndexEntry]:
        if not self._index_file.exists():
            return []
        try:
            with open(self._index_file, encoding="utf-8") as f:
                data = json.load(f)
            return [IndexEntry(title=item["title"], path=item["path"]) for item in data]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Could not read library index {self._index_file}: {e}")
            return []

    def save(self) -> None:
        self._index_file.parent.mkdir(parents=True, exist_ok=True)
        json_str = json.dumps([asdict(e) for e in self._entries], indent=2, ensure_ascii=False)
        with open(self._index_file, "w", encoding="utf-8") as f:
            f.write(json_str)

    def __len__(self) -> int:
        return len(self._entries)

    def titles(self) -> list[str]:
        return [e.title for e in self._entries]

    def paths(self) -> list[str]:
        return [e.path for e in self._entries]

    def exists(self, title: str) -> bool:
        return any(e.title == title for e in self._entries)

    def get_path(self, title: str) -> str:
        for entry in self._entries:
            if entry.title == title:
                return entry.path
        raise LibraryError(f"No library entry titled '{title}'")

    def _check_available(self, title: str, ignore: str | None = None) -> None:
        """Reject titles that clash with another entry, also by saved file name."""
        if self.exists(title):
            raise LibraryError(f"Title '{title}' already exists")
        file_name = sanitize_filename(title)
        for entry in self._entries:
            if entry.title != ignore and sanitize_filename(entry.title) == file_name:
                raise LibraryError(
                    f"Title '{title}' would share its saved entry file with '{entry.title}'"
                )

    def add(self, title: str, path: str) -> None:
        self._check_available(title)
        self._entries.append(IndexEntry(title=title, path=path))

    def remove(self, title: str) -> None:
        for idx, entry in enumerate(self._entries):
            if entry.title == title:
                del self._entries[idx]
                return
        raise LibraryError(f"No library entry titled '{title}'")

    def rename(self, old_title: str, new_title: str) -> None:
        self._check_available(new_title, ignore=old_title)
        for entry in self._entries:
            if entry.title == old_title:
                entry.title = new_title
                return
        raise LibraryError(f"No library entry titled '{old_title}'")

    def move(self, source_idx: int, destination_idx: int) -> None:
        """Move one title to a new position (drag-and-drop reorder)."""
        size = len(self._entries)
        if not (0 <= source_idx < size and 0 <= destination_idx < size):
            raise LibraryError(f"Positions must be between 0 and {size - 1}")
        entry = self._entries.pop(source_idx)
        self._entries.insert(destination_idx, entry)

    def sort_by_title(self) -> None:
        self._entries.sort(key=lambda e: e.title)
