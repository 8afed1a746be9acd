"""Outcome of an inspection pass."""

from dataclasses import dataclass, field
from enum import Enum

from .library import LibraryEntry


class InspectStatus(Enum):
    OK = "ok"
    FAILED = "failed"
    NEEDS_CONFIRMATION = "needs_confirmation"


class DiagnosticKind(Enum):
    PROBE_FAILURE = "probe_failure"
    RESOLUTION_FAILURE = "resolution_failure"
    CUE_PARSE_FAILURE = "cue_parse_failure"


@dataclass
class Diagnostic:
    """A per-file problem that did not abort the pass."""

    kind: DiagnosticKind
    path: str
    message: str

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.path}: {self.message}"


@dataclass
class InspectResult:
    """Result of one inspection pass.

    ``entry`` is only set when ``status`` is OK. ``file_count`` is the number
    of files the walker listed (also reported for NEEDS_CONFIRMATION).
    """

    status: InspectStatus
    entry: LibraryEntry | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)
    file_count: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is InspectStatus.OK

    @classmethod
    def failed(cls, error: str, file_count: int = 0) -> "InspectResult":
        return cls(status=InspectStatus.FAILED, error=error, file_count=file_count)

    @classmethod
    def needs_confirmation(cls, file_count: int) -> "InspectResult":
        return cls(status=InspectStatus.NEEDS_CONFIRMATION, file_count=file_count)
