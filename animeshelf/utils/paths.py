"""Path helpers and filename sanitization."""

import os
import re


def directory_key(root: str, file_path: str) -> str:
    """Return the directory of file_path relative to root.

    Files directly under the root map to "".
    Example: ("/anime", "/anime/S1/01.mkv") -> "S1"
    """
    relative = os.path.relpath(file_path, root)
    key = os.path.dirname(relative)
    return "" if key == os.curdir else key


def lower_ext(file_path: str) -> str:
    """Return the lower-cased final extension including the dot, or ""."""
    return os.path.splitext(file_path)[1].lower()


def sanitize_filename(name: str, fallback: str = "untitled") -> str:
    """Sanitize a title for use as a file name.

    Keeps unicode word characters (titles are often Japanese or Chinese),
    spaces, dots and dashes; everything else becomes an underscore.

    Example: "Re:Zero / Season 2" -> "Re_Zero _ Season 2"
    """
    if not name:
        return fallback

    sanitized = re.sub(r"[^\w\s.\-]", "_", name)

    # Collapse whitespace runs
    sanitized = re.sub(r"\s+", " ", sanitized)

    # Leading dots would make hidden files; trailing dots break Windows
    sanitized = sanitized.strip(" .")

    if not sanitized:
        return fallback

    return sanitized
