"""Scan engine: file enumeration, cancellation and orchestration."""

from sigcheck.core.cancellation import CancellationSignal, CancellationToken
from sigcheck.core.enumerator import enumerate_candidates
from sigcheck.core.orchestrator import run_scan, run_scan_async

__all__ = [
    "CancellationSignal",
    "CancellationToken",
    "enumerate_candidates",
    "run_scan",
    "run_scan_async",
]
