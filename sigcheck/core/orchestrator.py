"""Scan orchestration.

Enumerates candidates **once**, then walks them sequentially: each file is
handed to the signature oracle, the verdict is recorded and a progress
snapshot is pushed to the caller.  Cancellation is polled before every
file.  Per-file oracle errors and unreadable directories are absorbed;
anything else ends the scan with ``failed=True``.  Nothing but caller
contract violations ever escapes as an exception.
"""

import asyncio
import logging
import time
from collections.abc import Callable

from sigcheck.config import (
    MSG_CANCELLED,
    MSG_COMPLETED,
    MSG_ERROR,
    MSG_NO_FILES,
    YIELD_EVERY,
)
from sigcheck.core.cancellation import NEVER_CANCELLED, CancellationSignal
from sigcheck.core.enumerator import enumerate_candidates
from sigcheck.models import (
    Classification,
    ScanParameters,
    ScanProgress,
    ScanResult,
    Verdict,
)
from sigcheck.oracles.base import SignatureOracle
from sigcheck.utils import display_name

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ScanProgress], None]


def classify(oracle: SignatureOracle, path: str) -> Classification:
    """Ask *oracle* about *path*, turning oracle errors into a ``FAILED`` verdict."""
    try:
        signed = oracle.is_signed(path)
    except Exception as exc:  # noqa: BLE001
        reason = str(exc) or type(exc).__name__
        logger.warning("Signature detection failed for %s: %s", path, reason)
        return Classification(path=path, verdict=Verdict.FAILED, reason=reason)

    return Classification(
        path=path,
        verdict=Verdict.SIGNED if signed else Verdict.UNSIGNED,
    )


# ---------------------------------------------------------------------------
# Per-invocation state
# ---------------------------------------------------------------------------


class _ScanSession:
    """Accumulators and counters owned by a single scan invocation."""

    def __init__(
        self,
        parameters: ScanParameters,
        oracle: SignatureOracle,
        progress: ProgressCallback | None,
        cancel_token: CancellationSignal | None,
    ) -> None:
        self.parameters = parameters
        self.oracle = oracle
        self.progress = progress
        self.cancel_token = cancel_token if cancel_token is not None else NEVER_CANCELLED
        self.candidates: list[str] = []
        self.skipped_directories = 0
        self.signed: list[str] = []
        self.unsigned: list[str] = []

    def enumerate(self) -> list[str]:
        found = enumerate_candidates(
            self.parameters.root,
            self.parameters.extensions,
            self.parameters.recursive,
        )
        self.candidates = found.files
        self.skipped_directories = found.skipped_directories
        return self.candidates

    def cancel_requested(self) -> bool:
        return self.cancel_token.is_cancellation_requested()

    def process(self, index: int) -> None:
        path = self.candidates[index]
        outcome = classify(self.oracle, path)
        if outcome.is_signed:
            self.signed.append(outcome.entry)
        else:
            self.unsigned.append(outcome.entry)

        if self.progress is not None:
            total = len(self.candidates)
            self.progress(
                ScanProgress(
                    percentage=100 * (index + 1) // total,
                    current_file=display_name(path),
                    signed_so_far=len(self.signed),
                    unsigned_so_far=len(self.unsigned),
                    total_candidates=total,
                )
            )

    # --- terminal results ---

    def _result(self, message: str, *, cancelled: bool = False, failed: bool = False) -> ScanResult:
        return ScanResult(
            signed_files=list(self.signed),
            unsigned_files=list(self.unsigned),
            message=message,
            total_candidates=len(self.candidates),
            skipped_directories=self.skipped_directories,
            cancelled=cancelled,
            failed=failed,
        )

    def empty(self) -> ScanResult:
        logger.info("No candidates under %s", self.parameters.root)
        return self._result(MSG_NO_FILES)

    def completed(self) -> ScanResult:
        logger.info(
            "Scan of %s completed: %d signed, %d unsigned",
            self.parameters.root,
            len(self.signed),
            len(self.unsigned),
        )
        return self._result(MSG_COMPLETED.format(count=len(self.candidates)))

    def cancelled(self) -> ScanResult:
        logger.info(
            "Scan of %s cancelled after %d of %d files",
            self.parameters.root,
            len(self.signed) + len(self.unsigned),
            len(self.candidates),
        )
        return self._result(MSG_CANCELLED, cancelled=True)

    def failed(self, exc: Exception) -> ScanResult:
        logger.exception("Scan of %s failed", self.parameters.root)
        return self._result(MSG_ERROR.format(error=str(exc) or type(exc).__name__), failed=True)


def _check_arguments(parameters: ScanParameters, oracle: SignatureOracle, yield_every: int) -> None:
    if not isinstance(parameters, ScanParameters):
        raise TypeError(f"parameters must be ScanParameters, got {type(parameters).__name__}")
    if not callable(getattr(oracle, "is_signed", None)):
        raise TypeError("oracle must provide an is_signed(path) method")
    if yield_every < 1:
        raise ValueError("yield_every must be at least 1")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def run_scan(
    parameters: ScanParameters,
    oracle: SignatureOracle,
    progress: ProgressCallback | None = None,
    cancel_token: CancellationSignal | None = None,
    *,
    yield_every: int = YIELD_EVERY,
) -> ScanResult:
    """Classify every candidate under ``parameters.root`` as signed or unsigned.

    Args:
        parameters: Root, extension set and recursion flag.
        oracle: Verdict provider consulted once per candidate.
        progress: Optional callback receiving one :class:`ScanProgress`
            per processed file, in processing order.
        cancel_token: Optional signal polled before each file.
        yield_every: Release the GIL to other threads every this many files.

    Returns:
        A :class:`ScanResult` describing a completed, cancelled or failed scan.

    Raises:
        TypeError, ValueError: For invalid arguments, before any work starts.
    """
    _check_arguments(parameters, oracle, yield_every)
    session = _ScanSession(parameters, oracle, progress, cancel_token)
    logger.info(
        "Scanning %s for %s (recursive=%s)",
        parameters.root,
        ", ".join(sorted(parameters.extensions)) or "<no extensions>",
        parameters.recursive,
    )

    try:
        candidates = session.enumerate()
        if not candidates:
            return session.empty()

        for index in range(len(candidates)):
            if session.cancel_requested():
                return session.cancelled()
            session.process(index)
            if index % yield_every == 0:
                time.sleep(0)

        return session.completed()
    except Exception as exc:  # noqa: BLE001
        return session.failed(exc)


async def run_scan_async(
    parameters: ScanParameters,
    oracle: SignatureOracle,
    progress: ProgressCallback | None = None,
    cancel_token: CancellationSignal | None = None,
    *,
    yield_every: int = YIELD_EVERY,
) -> ScanResult:
    """Coroutine flavour of :func:`run_scan`.

    Same semantics, but control is handed back to the event loop every
    *yield_every* files so other tasks (a UI, a timeout watcher that calls
    ``cancel()``) keep running during the scan.
    """
    _check_arguments(parameters, oracle, yield_every)
    session = _ScanSession(parameters, oracle, progress, cancel_token)
    logger.info("Scanning %s asynchronously", parameters.root)

    try:
        candidates = session.enumerate()
        if not candidates:
            return session.empty()

        for index in range(len(candidates)):
            if session.cancel_requested():
                return session.cancelled()
            session.process(index)
            if index % yield_every == 0:
                await asyncio.sleep(0)

        return session.completed()
    except Exception as exc:  # noqa: BLE001
        return session.failed(exc)
