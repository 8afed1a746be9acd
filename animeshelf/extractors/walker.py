"""Recursive listing of a library root."""

import logging
from pathlib import Path

from ..exceptions import ScanFailure

logger = logging.getLogger(__name__)


class DirectoryWalker:
    """Lists every file below a root directory."""

    def list_all(self, root: str | Path) -> list[str]:
        """Return absolute paths of all files under root, sorted.

        Raises ScanFailure if the root is missing or cannot be read.
        """
        root_path = Path(root)
        if not root_path.is_dir():
            raise ScanFailure(f"Library folder not found or not a directory: {root_path}")

        try:
            files = [str(p.absolute()) for p in root_path.rglob("*") if p.is_file()]
        except OSError as e:
            raise ScanFailure(f"Could not list {root_path}: {e}") from e

        logger.debug(f"Listed {len(files)} files under {root_path}")
        return sorted(files)
