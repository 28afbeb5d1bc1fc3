"""
Operation result envelope and the exception → error-code mapping.

Every operation function returns an :class:`OperationResult` instead of
raising. The error codes are the contract shared with the API (which maps
them to HTTP statuses) and the CLI (which prints them):

    ======================  ==========================================
    Code                    Raised by
    ======================  ==========================================
    VALIDATION_FAILED       bad family / deal type / keys, no store
    PARSE_FAILED            unparseable execution timestamp
    SERIALIZATION_FAILED    a header that cannot be written as JSON
    NOT_SUPPORTED           by-keys lookup on a family without one
    INTERNAL                store errors and anything unexpected
    ======================  ==========================================
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from tradespine.core.errors import (
    ErrorCategory,
    ParseError,
    SerializationError,
    TradeSpineError,
    UnsupportedLookupError,
)

T = TypeVar("T")

VALIDATION_FAILED = "VALIDATION_FAILED"
PARSE_FAILED = "PARSE_FAILED"
SERIALIZATION_FAILED = "SERIALIZATION_FAILED"
NOT_SUPPORTED = "NOT_SUPPORTED"
INTERNAL = "INTERNAL"


def error_code(exc: Exception) -> str:
    """Error code for an exception escaping an operation."""
    if isinstance(exc, SerializationError):
        return SERIALIZATION_FAILED
    if isinstance(exc, ParseError):
        return PARSE_FAILED
    if isinstance(exc, UnsupportedLookupError):
        return NOT_SUPPORTED
    if isinstance(exc, (ValueError, KeyError)):
        return VALIDATION_FAILED
    return INTERNAL


@dataclass(frozen=True, slots=True)
class OperationError:
    """Why an operation failed.

    Attributes:
        code: One of the module-level codes.
        message: Human-readable description.
        category: Category of the underlying :class:`TradeSpineError`, if any.
        details: Error context (deal key, deal type, offending value ...).
    """

    code: str
    message: str
    category: ErrorCategory | None = None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class OperationResult(Generic[T]):
    """Envelope returned by every operation function."""

    success: bool
    data: T | None = None
    error: OperationError | None = None
    elapsed_ms: float = 0.0
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(
        cls,
        data: T,
        *,
        elapsed_ms: float = 0.0,
        metadata: dict[str, Any] | None = None,
    ) -> OperationResult[T]:
        return cls(success=True, data=data, elapsed_ms=elapsed_ms, metadata=metadata or {})

    @classmethod
    def fail(
        cls,
        code: str,
        message: str,
        *,
        category: ErrorCategory | None = None,
        details: dict[str, Any] | None = None,
        elapsed_ms: float = 0.0,
    ) -> OperationResult[T]:
        return cls(
            success=False,
            error=OperationError(code, message, category, details or {}),
            elapsed_ms=elapsed_ms,
        )

    @classmethod
    def from_exception(
        cls, exc: Exception, prefix: str, *, elapsed_ms: float = 0.0
    ) -> OperationResult[T]:
        """Failed result for *exc*; ``TradeSpineError`` context becomes ``details``."""
        # KeyError's str() is the repr of its argument
        message = exc.args[0] if isinstance(exc, KeyError) and exc.args else str(exc)
        if isinstance(exc, TradeSpineError):
            return cls.fail(
                error_code(exc),
                f"{prefix}: {message}",
                category=exc.category,
                details=exc.context.to_dict(),
                elapsed_ms=elapsed_ms,
            )
        return cls.fail(error_code(exc), f"{prefix}: {message}", elapsed_ms=elapsed_ms)


class Stopwatch:
    """Wall-clock timer started on construction."""

    __slots__ = ("_start",)

    def __init__(self) -> None:
        self._start = time.perf_counter()

    @property
    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self._start) * 1000


def start_timer() -> Stopwatch:
    return Stopwatch()


__all__ = [
    "INTERNAL",
    "NOT_SUPPORTED",
    "PARSE_FAILED",
    "SERIALIZATION_FAILED",
    "VALIDATION_FAILED",
    "OperationError",
    "OperationResult",
    "Stopwatch",
    "error_code",
    "start_timer",
]
