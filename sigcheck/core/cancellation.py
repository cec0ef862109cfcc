"""Cooperative cancellation shared between a caller and a running scan."""

import threading
from typing import Protocol


class CancellationSignal(Protocol):
    """Anything the scan loop can poll for a cancellation request."""

    def is_cancellation_requested(self) -> bool: ...


class CancellationToken:
    """Thread-safe, externally settable cancellation flag.

    The caller keeps the token and calls :meth:`cancel` from any thread
    (a Ctrl-C handler, a timeout, a UI button).  The scan loop only reads
    it, once per file.
    """

    __slots__ = ("_event",)

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    def is_cancellation_requested(self) -> bool:
        return self._event.is_set()

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self._event.is_set()})"


class _NeverCancelled:
    __slots__ = ()

    def is_cancellation_requested(self) -> bool:
        return False


NEVER_CANCELLED: CancellationSignal = _NeverCancelled()
