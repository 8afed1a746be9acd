"""Configuration management for the library inspector."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv


# File classification by extension
VIDEO_FORMATS = {".mkv", ".mp4", ".flv", ".avi"}
SUBTITLE_FORMATS = {".ass", ".ssa", ".srt", ".smi", ".sub"}
COMPANION_AUDIO_FORMATS = {".mka"}
CUE_FORMATS = {".cue"}
STANDALONE_AUDIO_FORMATS = {".flac", ".ogg", ".wav"}

UNTAGGED_ALBUM = "Untagged"
DEFAULT_CONFIRM_THRESHOLD = 1000


@dataclass
class PathConfig:
    """File path configuration."""

    data_dir: Path
    index_file: Path
    entries_dir: Path

    @classmethod
    def from_data_dir(cls, data_dir: Path) -> "PathConfig":
        return cls(
            data_dir=data_dir,
            index_file=data_dir / "library.json",
            entries_dir=data_dir / "entries",
        )

    def ensure(self) -> None:
        """Create the data directories if they are missing."""
        self.entries_dir.mkdir(parents=True, exist_ok=True)


@dataclass
class InspectorConfig:
    """Inspection pass settings."""

    confirm_threshold: int = DEFAULT_CONFIRM_THRESHOLD
    max_workers: int = 4
    ffprobe_path: str = "ffprobe"
    probe_timeout: float = 300.0  # seconds, enforced by the ffprobe subprocess
    show_progress: bool = True

    def validate(self) -> None:
        if self.confirm_threshold < 0:
            raise ValueError(f"Confirm threshold must be >= 0, got {self.confirm_threshold}")
        if self.max_workers < 1:
            raise ValueError(f"Worker count must be >= 1, got {self.max_workers}")
        if self.probe_timeout <= 0:
            raise ValueError(f"Probe timeout must be positive, got {self.probe_timeout}")


@dataclass
class Config:
    """Main configuration container."""

    paths: PathConfig
    inspector: InspectorConfig = field(default_factory=InspectorConfig)

    @classmethod
    def from_environment(cls, env_path: Path | None = None) -> "Config":
        """Load configuration from environment variables."""
        if env_path:
            load_dotenv(env_path)
        else:
            load_dotenv()

        data_dir = Path(
            os.getenv("ANIMESHELF_DATA_DIR", str(Path.home() / ".animeshelf"))
        ).expanduser()

        try:
            inspector = InspectorConfig(
                confirm_threshold=int(
                    os.getenv("ANIMESHELF_CONFIRM_THRESHOLD", str(DEFAULT_CONFIRM_THRESHOLD))
                ),
                max_workers=int(os.getenv("ANIMESHELF_WORKERS", "4")),
                ffprobe_path=os.getenv("ANIMESHELF_FFPROBE", "ffprobe"),
                probe_timeout=float(os.getenv("ANIMESHELF_PROBE_TIMEOUT", "300")),
                show_progress=os.getenv("ANIMESHELF_PROGRESS", "true").lower() == "true",
            )
        except ValueError as e:
            raise ValueError(f"Invalid numeric setting in environment: {e}") from e

        return cls(paths=PathConfig.from_data_dir(data_dir), inspector=inspector)

    def validate(self) -> None:
        """Validate the configuration."""
        self.inspector.validate()
        if self.paths.data_dir.exists() and not self.paths.data_dir.is_dir():
            raise ValueError(f"Data directory is not a directory: {self.paths.data_dir}")


def configure_logging(verbose: bool = False) -> None:
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
