"""Signature oracle interface.

An oracle answers a single question: does this file currently carry a
valid trust-chain signature?  The scan engine treats it as an opaque
boolean verdict and never looks at signature formats itself.
"""

import importlib
import inspect
import os
from abc import ABC, abstractmethod
from collections.abc import Callable


class OracleUnavailableError(RuntimeError):
    """The oracle cannot run on this platform or installation."""


class OracleLoadError(ValueError):
    """An oracle reference of the form ``module:attr`` could not be resolved."""


class SignatureOracle(ABC):
    """Base class for signature oracles.

    Subclasses implement :meth:`_verify`.  :meth:`is_signed` fails closed
    for blank paths and paths that are not regular files, so ``_verify``
    only ever sees existing files.
    """

    name: str = "oracle"

    def is_signed(self, path: str) -> bool:
        if not path or not path.strip():
            return False
        if not os.path.isfile(path):
            return False
        return self._verify(path)

    @abstractmethod
    def _verify(self, path: str) -> bool:
        """Return ``True`` if the existing file at *path* is validly signed."""


class CallableOracle(SignatureOracle):
    """Adapt a plain ``path -> bool`` function to the oracle interface."""

    def __init__(self, func: Callable[[str], bool], name: str | None = None) -> None:
        self._func = func
        self.name = name or getattr(func, "__name__", "callable")

    def _verify(self, path: str) -> bool:
        return bool(self._func(path))


def load_oracle(reference: str) -> SignatureOracle:
    """Resolve a ``module:attr`` reference into a ready-to-use oracle.

    *attr* may name a :class:`SignatureOracle` subclass (instantiated with
    no arguments), an oracle instance, or a plain callable taking a path.

    Raises:
        OracleLoadError: If the reference is malformed or cannot be imported.
        OracleUnavailableError: If the oracle refuses to run here.
    """
    module_name, sep, attr = reference.partition(":")
    if not sep or not module_name or not attr:
        raise OracleLoadError(
            f"Invalid oracle reference {reference!r}; expected 'module:attr'"
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise OracleLoadError(f"Cannot import oracle module {module_name!r}: {exc}") from exc

    try:
        target = getattr(module, attr)
    except AttributeError as exc:
        raise OracleLoadError(f"Module {module_name!r} has no attribute {attr!r}") from exc

    if inspect.isclass(target) and issubclass(target, SignatureOracle):
        try:
            return target()
        except TypeError as exc:
            raise OracleLoadError(f"Cannot instantiate oracle {reference!r}: {exc}") from exc
    if isinstance(target, SignatureOracle):
        return target
    if callable(target):
        return CallableOracle(target, name=attr)

    raise OracleLoadError(f"{reference!r} is not an oracle or a callable")
