"""Logging setup for the command-line front end.

Library modules only create ``logging.getLogger(__name__)`` loggers; the
CLI decides where records go by calling :func:`setup_logging` once.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT: str = "%(message)s"
LOG_DATE_FORMAT: str = "[%X]"


def setup_logging(verbose: bool = False, console: Console | None = None) -> None:
    """Route log records through Rich on stderr.

    Args:
        verbose: Log at ``DEBUG`` instead of ``WARNING``.
        console: Console to render to; defaults to a new stderr console.
    """
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=verbose,
        rich_tracebacks=True,
        markup=False,
    )
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=[handler],
        force=True,
    )
