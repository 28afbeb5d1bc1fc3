"""trade-spine core -- domain-agnostic primitives.

Architecture::

    Layer 1 -- Type System & Errors
        errors.py          Structured error hierarchy (TradeSpineError, ParseError, ...)
        result.py          Result[T] envelope (Ok / Err / try_result)
        protocols.py       Cursor, Connection, RowSource
        timestamps.py      UTC helpers + execution-timestamp layouts (stdlib-only)

    Layer 2 -- Database
        dialect.py         SQL dialect abstraction (SQLite, PostgreSQL, Oracle)
        adapters/          Database adapters + URL registry

    Layer 3 -- Processing Primitives
        watermarks.py      Extraction-run cursor store (append-only)

    Layer 4 -- Ambient
        logging.py         structlog configuration
        settings.py        pydantic-settings configuration
"""

from tradespine.core.errors import (
    ConfigError,
    DatabaseConnectionError,
    ErrorCategory,
    ExecutionTimestampError,
    ParseError,
    SerializationError,
    TradeSpineError,
    UnsupportedLookupError,
)
from tradespine.core.result import Err, Ok, Result, try_result
from tradespine.core.watermarks import ExtractionRun, ExtractionRunStore

__all__ = [
    "ConfigError",
    "DatabaseConnectionError",
    "ErrorCategory",
    "ExecutionTimestampError",
    "ParseError",
    "SerializationError",
    "TradeSpineError",
    "UnsupportedLookupError",
    "Err",
    "Ok",
    "Result",
    "try_result",
    "ExtractionRun",
    "ExtractionRunStore",
]
