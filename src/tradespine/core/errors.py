"""
Structured error types for trade-spine.

Every error raised by trade-spine code extends ``TradeSpineError`` so that the
ops layer can map it to a result code, the API can render it as a problem
response, and the logs carry the same category/context fields everywhere.

Manifesto:
    - **Store errors are not ours:** driver exceptions from the ledger or the
      analytics store propagate unmodified; trade-spine never wraps or retries
      them
    - **Decode errors abort the fetch:** a timestamp that matches none of the
      accepted layouts is fatal to the whole family fetch
    - **Serialization errors abort the batch:** a header that cannot become a
      detail blob stops the upsert before anything is written
    - **Shape anomalies are not errors:** an unparseable pricing formula simply
      decodes to nothing

Architecture:
    ::

        TradeSpineError
        ├── DatabaseConnectionError   adapter could not connect (DATABASE)
        ├── ParseError                source data failed to parse (PARSE)
        │   └── ExecutionTimestampError
        ├── SerializationError        header → JSON failed (PARSE)
        ├── ConfigError               bad settings / URL (CONFIG)
        └── UnsupportedLookupError    family has no by-keys lookup (VALIDATION)

Tags:
    errors, exceptions, error-category, trade-spine
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories used for routing and result codes."""

    DATABASE = "DATABASE"
    PARSE = "PARSE"
    VALIDATION = "VALIDATION"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        deal_type: Deal family tag the failing operation was working on
        deal_key: Deal key of the offending row, if known
        operation: Name of the operation (``fetch``, ``submit``, ...)
        metadata: Additional key-value pairs
    """

    deal_type: str | None = None
    deal_key: int | None = None
    operation: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        for key in ("deal_type", "deal_key", "operation"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class TradeSpineError(Exception):
    """
    Base exception for all trade-spine errors.

    Carries a category, a retryable flag (always ``False`` by default since
    trade-spine performs no retries of its own), structured context and an
    optional cause which is also chained as ``__cause__``.

    Examples:
        >>> err = TradeSpineError("boom").with_context(deal_type="POPTS")
        >>> err.context.deal_type
        'POPTS'
        >>> err.to_dict()["category"]
        'INTERNAL'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> TradeSpineError:
        """Add context to this error (fluent API)."""
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# DATABASE
# =============================================================================


class DatabaseConnectionError(TradeSpineError):
    """An adapter failed to open its connection or pool."""

    default_category = ErrorCategory.DATABASE


# =============================================================================
# DATA ERRORS
# =============================================================================


class ParseError(TradeSpineError):
    """Source data could not be parsed."""

    default_category = ErrorCategory.PARSE


class ExecutionTimestampError(ParseError):
    """An execution date/time matched none of the accepted layouts."""

    def __init__(self, value: str, layouts: tuple[str, ...], **kwargs: Any):
        self.value = value
        self.layouts = layouts
        super().__init__(
            f"cannot parse execution timestamp {value!r} with layouts {list(layouts)}",
            **kwargs,
        )


class SerializationError(TradeSpineError):
    """A deal header could not be serialized to its detail blob."""

    default_category = ErrorCategory.PARSE


# =============================================================================
# CONFIGURATION / USAGE
# =============================================================================


class ConfigError(TradeSpineError):
    """Invalid or missing configuration."""

    default_category = ErrorCategory.CONFIG


class UnsupportedLookupError(TradeSpineError):
    """The deal family does not provide the requested lookup."""

    default_category = ErrorCategory.VALIDATION

    def __init__(self, deal_type: str, lookup: str = "by-keys"):
        super().__init__(
            f"{lookup} lookup is not implemented for deal family {deal_type}",
            context=ErrorContext(deal_type=deal_type, operation=lookup),
        )


__all__ = [
    "ConfigError",
    "DatabaseConnectionError",
    "ErrorCategory",
    "ErrorContext",
    "ExecutionTimestampError",
    "ParseError",
    "SerializationError",
    "TradeSpineError",
    "UnsupportedLookupError",
]
