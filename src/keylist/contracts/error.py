"""Error envelopes and exit codes for the keylist CLI.

Library code raises ordinary exceptions: ``IndexError`` from positional edits,
:class:`EnvelopeError` subclasses for unreadable documents and for a key
sequence that disagrees with its hash index. Only the CLI boundary turns them
into a one-line JSON envelope on stderr plus a stable exit code.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum
from functools import wraps
from typing import Any, NoReturn, TypeVar

logger = logging.getLogger("keylist")
T = TypeVar("T")


class Exit(IntEnum):
    """Stable exit codes shared across the CLI."""

    OK = 0
    BAD_INPUT = 2
    INVARIANT = 3
    INTERNAL = 4
    IO = 5


@dataclass(slots=True)
class ErrorEnvelope:
    """Machine-readable error contract for CLI failures."""

    error: str
    detail: str
    hint: str | None = None

    def to_json(self) -> str:
        payload = {"error": self.error, "detail": self.detail}
        if self.hint:
            payload["hint"] = self.hint
        return json.dumps(payload, ensure_ascii=False)


class EnvelopeError(Exception):
    """Base exception that carries an optional hint for the error envelope."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class BadInputError(EnvelopeError):
    """Malformed user input: wire documents, config values, CLI literals."""


class InvariantError(EnvelopeError):
    """Key sequence and hash index disagree."""


class IOErrorEnvelope(EnvelopeError):  # noqa: N818 - mirrors Exit.IO
    """Raised for IO errors that should map to Exit.IO."""


@dataclass(frozen=True, slots=True)
class _Rule:
    exc_type: type[BaseException]
    code: Exit
    label: str
    hint: str | None = None


# First match wins; an exception's own hint overrides the rule's.
_RULES: tuple[_Rule, ...] = (
    _Rule(BadInputError, Exit.BAD_INPUT, "BadInput"),
    _Rule(
        InvariantError,
        Exit.INVARIANT,
        "Invariant",
        "rows were edited outside push/insert/remove; rebuild the keylist from its pairs",
    ),
    _Rule(IOErrorEnvelope, Exit.IO, "IO"),
    _Rule(IndexError, Exit.BAD_INPUT, "IndexOutOfRange", "check `len` before indexing"),
    _Rule(FileNotFoundError, Exit.IO, "FileNotFound"),
)


def classify(exc: BaseException) -> tuple[Exit, ErrorEnvelope]:
    """Map ``exc`` to the exit code and envelope the CLI reports for it."""

    for rule in _RULES:
        if isinstance(exc, rule.exc_type):
            hint = getattr(exc, "hint", None) or rule.hint
            return rule.code, ErrorEnvelope(error=rule.label, detail=str(exc), hint=hint)
    return Exit.INTERNAL, ErrorEnvelope(error="Unhandled", detail=f"{type(exc).__name__}: {exc}")


def die(code: Exit, kind: str, detail: str, hint: str | None = None) -> NoReturn:
    """Write a JSON error envelope to stderr and exit with ``code``."""

    env = ErrorEnvelope(error=kind, detail=detail, hint=hint)
    sys.stderr.write(env.to_json() + "\n")
    try:
        sys.stderr.flush()
    finally:
        sys.exit(int(code))


def guard_cli(fn: Callable[..., T]) -> Callable[..., T]:
    """Decorate a CLI handler to enforce exit codes and error envelopes."""

    @wraps(fn)
    def _wrapped(*args: Any, **kwargs: Any) -> T:
        try:
            return fn(*args, **kwargs)
        except Exception as exc:
            code, envelope = classify(exc)
            if code is Exit.INTERNAL:
                logger.exception("Unhandled CLI exception")
            die(code, envelope.error, envelope.detail, hint=envelope.hint)

    return _wrapped


__all__ = [
    "Exit",
    "ErrorEnvelope",
    "EnvelopeError",
    "BadInputError",
    "InvariantError",
    "IOErrorEnvelope",
    "classify",
    "guard_cli",
    "die",
]
