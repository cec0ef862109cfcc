"""sigcheck utility helpers."""

import os
from datetime import timedelta
from pathlib import Path


def validate_path(path: str) -> Path:
    """Resolve and validate that *path* points to an existing directory.

    Args:
        path: Raw path string from the CLI.

    Returns:
        Resolved ``Path`` object.

    Raises:
        FileNotFoundError: If the path does not exist.
        NotADirectoryError: If the path is not a directory.
    """
    resolved = Path(path).resolve()

    if not resolved.exists():
        raise FileNotFoundError(f"Path does not exist: {resolved}")

    if not resolved.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {resolved}")

    return resolved


def display_name(path: str) -> str:
    """Return the base name shown for *path* in progress updates."""
    return os.path.basename(path)


def format_elapsed(elapsed: timedelta) -> str:
    """Format an elapsed duration for status lines.

    Examples: ``350ms``, ``4.2s``, ``2m 5s``, ``1h 2m 3s``, ``1d 2h 3m 4s``.
    """
    total_seconds = elapsed.total_seconds()
    if total_seconds < 1:
        return f"{total_seconds * 1000:.0f}ms"
    if total_seconds < 60:
        return f"{total_seconds:.1f}s"

    whole = int(total_seconds)
    days, rem = divmod(whole, 86400)
    hours, rem = divmod(rem, 3600)
    minutes, seconds = divmod(rem, 60)

    if days:
        return f"{days}d {hours}h {minutes}m {seconds}s"
    if hours:
        return f"{hours}h {minutes}m {seconds}s"
    return f"{minutes}m {seconds}s"


def printable_path(path: str) -> str:
    """Return *path* in a form any UTF-8 console can write.

    File names that are not valid UTF-8 come back from ``os.walk`` with
    surrogate escapes; their raw bytes are shown as ``\\xNN`` instead.
    """
    return os.fsencode(path).decode("utf-8", "backslashreplace")
