"""Candidate file enumeration.

Walks the scan root once and keeps every file whose name matches one of
the requested ``*.<extension>`` patterns, case-insensitively.  Directories
that cannot be listed are skipped and counted rather than failing the
whole enumeration.
"""

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from sigcheck.models import EnumerationResult, normalize_extension

logger = logging.getLogger(__name__)


def _build_suffixes(extensions: Iterable[str]) -> tuple[str, ...]:
    """Turn extension tokens into the lower-case suffixes matched by ``*.<ext>``."""
    tokens = {normalize_extension(ext) for ext in extensions}
    return tuple(sorted(f".{ext}" for ext in tokens if ext))


def enumerate_candidates(
    root: str | Path,
    extensions: Iterable[str],
    recursive: bool = False,
) -> EnumerationResult:
    """Collect the files under *root* that match *extensions*.

    Args:
        root: Directory to search.
        extensions: Extension tokens without the leading dot.  An empty
            collection matches nothing.
        recursive: Descend into nested directories.

    Returns:
        An :class:`EnumerationResult` with absolute paths in a stable order
        (top-down, entries sorted by name) and the number of sub-directories
        that could not be read.  Each path appears once: extension tokens
        collapse into one suffix set and a single walk that does not follow
        symlinks never visits a directory twice.

    Raises:
        FileNotFoundError: If *root* does not exist.
        NotADirectoryError: If *root* is not a directory.
        OSError: If *root* itself cannot be listed.
    """
    result = EnumerationResult()
    suffixes = _build_suffixes(extensions)
    if not suffixes:
        return result

    root_path = os.path.abspath(root)
    if not os.path.exists(root_path):
        raise FileNotFoundError(f"Scan root does not exist: {root_path}")
    if not os.path.isdir(root_path):
        raise NotADirectoryError(f"Scan root is not a directory: {root_path}")

    def _on_error(err: OSError) -> None:
        if err.filename is None or os.path.abspath(err.filename) == root_path:
            raise err
        # Unreadable or vanished sub-directory
        logger.debug("Skipping directory %s: %s", err.filename, err.strerror or err)
        result.skipped_directories += 1

    for dirpath, dirnames, filenames in os.walk(root_path, onerror=_on_error):
        if recursive:
            dirnames.sort()
        else:
            dirnames[:] = []

        for filename in sorted(filenames):
            if not filename.lower().endswith(suffixes):
                continue

            result.files.append(os.path.join(dirpath, filename))

    logger.debug(
        "Enumerated %d candidate(s) under %s (%d directories skipped)",
        len(result.files),
        root_path,
        result.skipped_directories,
    )
    return result
