"""sigcheck configuration constants."""

from sigcheck import __app_name__, __version__

APP_NAME: str = __app_name__
VERSION: str = __version__

# Extensions offered when the caller does not pick any
DEFAULT_FILE_TYPES: list[str] = [
    "exe",
    "dll",
    "winmd",
]

DEFAULT_RECURSIVE: bool = True

# Yield to the host scheduler after this many files
YIELD_EVERY: int = 10

DEFAULT_ORACLE: str = "sigcheck.oracles.wintrust:WinTrustOracle"

# ---------------------------------------------------------------------------
# Terminal messages
# ---------------------------------------------------------------------------

MSG_NO_FILES: str = "No files found matching the specified criteria"
MSG_CANCELLED: str = "Operation was cancelled"
MSG_COMPLETED: str = "Check completed! Processed {count} files"
MSG_ERROR: str = "Error during check: {error}"
MSG_DETECTION_FAILED: str = "{path} (Detection failed: {reason})"
