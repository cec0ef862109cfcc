"""Signature oracles: the verdict providers consumed by the scan engine."""

from sigcheck.oracles.base import (
    CallableOracle,
    OracleLoadError,
    OracleUnavailableError,
    SignatureOracle,
    load_oracle,
)

__all__ = [
    "CallableOracle",
    "OracleLoadError",
    "OracleUnavailableError",
    "SignatureOracle",
    "load_oracle",
]
