"""sigcheck data models for scan parameters, progress and results."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from sigcheck.config import MSG_DETECTION_FAILED


# ---------------------------------------------------------------------------
# Terminal outcomes
# ---------------------------------------------------------------------------

COMPLETED: str = "completed"
CANCELLED: str = "cancelled"
FAILED: str = "failed"


def normalize_extension(token: str) -> str:
    """Lower-case an extension token and strip blanks and leading dots."""
    return token.strip().lstrip(".").lower()


# ---------------------------------------------------------------------------
# ScanParameters model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScanParameters:
    """Input of a single scan invocation.

    Attributes:
        root: Directory to scan.  Must exist when the scan starts.
        extensions: Extension tokens without the leading dot.  Matching is
            case-insensitive, so tokens are stored lower-cased.  An empty
            set yields no candidates; it is never a wildcard.
        recursive: Whether nested directories are included.
    """

    root: Path
    extensions: frozenset[str] = frozenset()
    recursive: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.extensions, str):
            raise TypeError("extensions must be a collection of tokens, not a string")
        normalized = frozenset(
            ext for ext in (normalize_extension(t) for t in self.extensions) if ext
        )
        object.__setattr__(self, "root", Path(self.root))
        object.__setattr__(self, "extensions", normalized)

    @classmethod
    def from_text(
        cls,
        root: str | Path,
        file_types: str,
        recursive: bool = False,
    ) -> "ScanParameters":
        """Build parameters from a comma-separated list such as ``"exe, dll"``."""
        return cls(
            root=Path(root),
            extensions=frozenset(file_types.split(",")),
            recursive=recursive,
        )


# ---------------------------------------------------------------------------
# ScanProgress model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScanProgress:
    """Snapshot emitted after each processed file.

    Attributes:
        percentage: ``floor(100 * processed / total_candidates)``.
        current_file: Base name of the file just processed.
        signed_so_far: Files classified signed so far.
        unsigned_so_far: Files classified unsigned (or failed) so far.
        total_candidates: Number of candidates in this scan.
    """

    percentage: int = 0
    current_file: str = ""
    signed_so_far: int = 0
    unsigned_so_far: int = 0
    total_candidates: int = 0

    @property
    def processed(self) -> int:
        return self.signed_so_far + self.unsigned_so_far


# ---------------------------------------------------------------------------
# Enumeration & classification variants
# ---------------------------------------------------------------------------


@dataclass
class EnumerationResult:
    """Candidate files plus the number of directories that were skipped."""

    files: list[str] = field(default_factory=list)
    skipped_directories: int = 0


class Verdict(str, Enum):
    SIGNED = "signed"
    UNSIGNED = "unsigned"
    FAILED = "failed"


@dataclass(frozen=True)
class Classification:
    """Outcome of asking the oracle about one file.

    ``FAILED`` means the oracle raised; such files are reported as
    unsigned with the failure reason appended to the path.
    """

    path: str
    verdict: Verdict
    reason: str = ""

    @property
    def is_signed(self) -> bool:
        return self.verdict is Verdict.SIGNED

    @property
    def entry(self) -> str:
        """The string recorded in the result lists."""
        if self.verdict is Verdict.FAILED:
            return MSG_DETECTION_FAILED.format(path=self.path, reason=self.reason)
        return self.path


# ---------------------------------------------------------------------------
# ScanResult model
# ---------------------------------------------------------------------------


@dataclass
class ScanResult:
    """Terminal result of one scan invocation.

    Attributes:
        signed_files: Full paths classified as signed, in scan order.
        unsigned_files: Full paths classified as unsigned.  Files the
            oracle failed on carry a ``(Detection failed: ...)`` suffix.
        message: Human-readable summary of the terminal state.
        total_candidates: Number of files the enumerator produced.
        skipped_directories: Directories the enumerator could not read.
        cancelled: The scan stopped because cancellation was requested.
        failed: The scan stopped because of an unrecoverable error.
    """

    signed_files: list[str] = field(default_factory=list)
    unsigned_files: list[str] = field(default_factory=list)
    message: str = ""
    total_candidates: int = 0
    skipped_directories: int = 0
    cancelled: bool = False
    failed: bool = False

    def __post_init__(self) -> None:
        if self.cancelled and self.failed:
            raise ValueError("a scan result cannot be both cancelled and failed")

    # --- helpers ---

    @property
    def total_files_checked(self) -> int:
        return len(self.signed_files) + len(self.unsigned_files)

    @property
    def outcome(self) -> str:
        """One of ``completed``, ``cancelled`` or ``failed``."""
        if self.failed:
            return FAILED
        if self.cancelled:
            return CANCELLED
        return COMPLETED

    def to_dict(self) -> dict:
        """Return a JSON-serializable dictionary of the full scan result."""
        return {
            "outcome": self.outcome,
            "message": self.message,
            "total_candidates": self.total_candidates,
            "total_files_checked": self.total_files_checked,
            "skipped_directories": self.skipped_directories,
            "cancelled": self.cancelled,
            "failed": self.failed,
            "signed_files": list(self.signed_files),
            "unsigned_files": list(self.unsigned_files),
        }
