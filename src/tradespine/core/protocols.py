"""
Structural protocols shared across trade-spine.

``Connection`` is what the analytics repositories need from a DB-API
connection inside ``adapter.transaction()``. ``RowSource`` is the only thing
the ledger fetchers need from the ledger: a ``query`` method returning
dict rows. A ``DatabaseAdapter`` satisfies it, and so does the fake ledger
used in tests.

Tags:
    protocol, connection, row-source, trade-spine
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Cursor(Protocol):
    """Minimal DB-API cursor."""

    description: Any

    def execute(self, sql: str, params: Any = ()) -> Any: ...

    def executemany(self, sql: str, params: Sequence[Any]) -> Any: ...

    def fetchone(self) -> Any: ...

    def fetchall(self) -> list: ...


@runtime_checkable
class Connection(Protocol):
    """
    Minimal synchronous DB-API connection.

    Implementations: ``sqlite3.Connection``, psycopg2 pooled connections,
    ``oracledb`` pooled connections.
    """

    def cursor(self) -> Cursor:
        """Open a cursor."""
        ...

    def commit(self) -> None:
        """Commit current transaction."""
        ...

    def rollback(self) -> None:
        """Rollback current transaction."""
        ...


@runtime_checkable
class RowSource(Protocol):
    """Anything that can run a parameterized SELECT and return dict rows.

    Column names are expected in lower case.
    """

    def query(
        self, sql: str, params: Sequence[Any] | Mapping[str, Any] = ()
    ) -> list[dict[str, Any]]: ...


__all__ = [
    "Connection",
    "Cursor",
    "RowSource",
]
