"""Display formatting for durations, sizes, sample rates and languages."""

import math

# ISO 639-2 codes seen in fansub releases
LANGUAGE_NAMES = {
    "chi": "Chinese",
    "zho": "Chinese",
    "eng": "English",
    "jpn": "Japanese",
    "kor": "Korean",
    "rus": "Russian",
    "fre": "French",
    "fra": "French",
    "ger": "German",
    "deu": "German",
    "spa": "Spanish",
    "ita": "Italian",
    "por": "Portuguese",
}


def language_name(tag: str | None) -> str | None:
    """Map a language tag to a display name, falling back to the tag itself."""
    if not tag:
        return None
    return LANGUAGE_NAMES.get(tag.lower(), tag)


def format_sample_rate(sample_rate: int | None) -> str:
    """Format a sample rate in the largest whole unit.

    Example: 48000 -> "48kHz", 2822400 -> "2MHz", 800 -> "800Hz"
    """
    if not sample_rate:
        return "0Hz"
    if sample_rate >= 1_000_000:
        return f"{sample_rate // 1_000_000}MHz"
    if sample_rate >= 1000:
        return f"{sample_rate // 1000}kHz"
    return f"{sample_rate}Hz"


def format_bytes(size: int, decimals: int = 2) -> str:
    """Format a byte count with binary units.

    Example: 1536 -> "1.5 KB", 0 -> "0 Bytes"
    """
    if size <= 0:
        return "0 Bytes"

    units = ["Bytes", "KB", "MB", "GB", "TB"]
    exponent = min(int(math.floor(math.log(size, 1024))), len(units) - 1)
    value = round(size / 1024**exponent, max(decimals, 0))
    # Drop trailing zeros the way a float repr would
    text = f"{value:.{max(decimals, 0)}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text} {units[exponent]}"


def format_duration(total_seconds: float) -> str:
    """Format seconds as [h:]m:ss.

    Example: 1425.3 -> "23:45", 3725 -> "1:02:05"
    """
    total = int(round(total_seconds))
    hours, remainder = divmod(total, 3600)
    minutes, seconds = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"
