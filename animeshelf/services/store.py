"""JSON persistence of inspected library entries."""

import json
import logging
from pathlib import Path

from ..models.library import LibraryEntry
from ..utils.paths import sanitize_filename

logger = logging.getLogger(__name__)


class EntryStore:
    """Saves one JSON file per library entry."""

    def __init__(self, entries_dir: Path) -> None:
        self._entries_dir = entries_dir

    def path_for(self, title: str) -> Path:
        return self._entries_dir / f"{sanitize_filename(title)}.json"

    def exists(self, title: str) -> bool:
        return self.path_for(title).exists()

    def load(self, title: str) -> LibraryEntry | None:
        """Load a saved entry, or None if it is missing or unreadable."""
        path = self.path_for(title)
        if not path.exists():
            return None
        try:
            with open(path, encoding="utf-8") as f:
                return LibraryEntry.from_dict(json.load(f))
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Could not load entry '{title}' from {path}: {e}")
            return None

    def save(self, entry: LibraryEntry) -> Path:
        """Write an entry to disk and return its path."""
        self._entries_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(entry.title)
        try:
            json_str = json.dumps(entry.to_dict(), indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.error(f"Failed to serialize entry '{entry.title}' to JSON: {e}")
            raise
        with open(path, "w", encoding="utf-8") as f:
            f.write(json_str)
        logger.debug(f"Saved entry '{entry.title}' to {path}")
        return path

    def delete(self, title: str) -> bool:
        """Delete a saved entry. Returns False if there was nothing to delete."""
        path = self.path_for(title)
        if not path.exists():
            return False
        path.unlink()
        logger.debug(f"Deleted entry file {path}")
        return True

    def rename(self, old_title: str, entry: LibraryEntry) -> Path:
        """Save entry under its (new) title and drop the file of old_title."""
        new_path = self.save(entry)
        old_path = self.path_for(old_title)
        if old_path != new_path and old_path.exists():
            old_path.unlink()
        return new_path
