"""Media probing with ffprobe."""

import json
import logging
import os
import subprocess

from ..exceptions import ProbeFailure
from ..models.media import ProbeResult, StreamInfo

logger = logging.getLogger(__name__)


def _to_int(value) -> int | None:
    if value is None:
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def parse_ffprobe_output(payload: dict) -> ProbeResult:
    """Convert ffprobe's JSON (-show_format -show_streams) into a ProbeResult.

    Raises ValueError if the container duration is missing.
    """
    fmt = payload.get("format") or {}
    try:
        duration = float(fmt["duration"])
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError("no container duration reported") from e

    streams = []
    for stream in payload.get("streams") or []:
        tags = stream.get("tags") or {}
        streams.append(
            StreamInfo(
                kind=stream.get("codec_type", ""),
                width=_to_int(stream.get("width")),
                height=_to_int(stream.get("height")),
                codec_name=stream.get("codec_name"),
                channels=_to_int(stream.get("channels")),
                sample_rate_hz=_to_int(stream.get("sample_rate")),
                # Matroska tags come through lower-cased, MP4 ones sometimes not
                language_tag=tags.get("language") or tags.get("LANGUAGE"),
                title_tag=tags.get("title") or tags.get("TITLE"),
            )
        )

    return ProbeResult(
        duration_seconds=duration,
        size_bytes=_to_int(fmt.get("size")) or 0,
        streams=streams,
    )


class MediaProber:
    """Runs ffprobe on a file and returns its stream-level metadata."""

    def __init__(self, ffprobe_path: str = "ffprobe", timeout: float = 300.0) -> None:
        self._ffprobe = ffprobe_path
        self._timeout = timeout

    def probe(self, file_path: str) -> ProbeResult:
        """Probe a media file.

        Raises ProbeFailure if ffprobe is missing, fails, times out, or
        returns output without a usable duration.
        """
        cmd = [
            self._ffprobe,
            "-v",
            "error",
            "-show_format",
            "-show_streams",
            "-of",
            "json",
            str(file_path),
        ]

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ProbeFailure(str(file_path), f"ffprobe timed out after {self._timeout}s") from e
        except FileNotFoundError as e:
            logger.error("ffprobe not found. Please install ffmpeg.")
            raise ProbeFailure(str(file_path), "ffprobe not found") from e
        except (UnicodeDecodeError, OSError) as e:
            raise ProbeFailure(str(file_path), f"could not run ffprobe: {e}") from e

        if result.returncode != 0:
            raise ProbeFailure(str(file_path), f"ffprobe failed: {result.stderr.strip()[:200]}")

        try:
            probed = parse_ffprobe_output(json.loads(result.stdout))
        except ValueError as e:
            raise ProbeFailure(str(file_path), f"unusable ffprobe output: {e}") from e

        if not probed.size_bytes:
            try:
                probed.size_bytes = os.path.getsize(file_path)
            except OSError as e:
                logger.debug(f"Could not stat {file_path}: {e}")

        return probed
