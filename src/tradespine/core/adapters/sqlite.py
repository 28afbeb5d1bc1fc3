"""SQLite adapter: the default analytics store and the test store.

One connection per adapter, shared across threads (the API runs sync
routes in a threadpool). ``datetime`` and ``date`` parameters are bound as
ISO 8601 text, the same form the writers use for the timestamp columns, so
comparisons against stored values are plain string comparisons.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any

from tradespine.core.errors import DatabaseConnectionError
from tradespine.core.protocols import Connection

from .base import DatabaseAdapter, Params
from .types import DatabaseConfig, DatabaseType


def _iso(value: Any) -> Any:
    return value.isoformat() if isinstance(value, date) else value


class SQLiteAdapter(DatabaseAdapter):
    """SQLite store at *path* (``:memory:`` by default).

    Args:
        path: Database file, ``:memory:`` or a ``file:`` URI.
        readonly: Reject writes (``PRAGMA query_only``).
        timeout: Seconds to wait on a locked database.
    """

    def __init__(self, path: str = ":memory:", *, readonly: bool = False, timeout: float = 5.0):
        super().__init__(DatabaseConfig(db_type=DatabaseType.SQLITE, path=path, readonly=readonly))
        self._timeout = timeout
        self._conn: sqlite3.Connection | None = None

    def connect(self) -> None:
        path = self._config.path or ":memory:"
        try:
            self._conn = sqlite3.connect(
                path,
                timeout=self._timeout,
                check_same_thread=False,
                uri=path.startswith("file:"),
            )
            if self._config.readonly:
                self._conn.execute("PRAGMA query_only = ON")
        except sqlite3.Error as e:
            raise DatabaseConnectionError(f"cannot open SQLite store {path!r}: {e}", cause=e) from e
        self._connected = True

    def disconnect(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            self._connected = False

    def get_connection(self) -> Connection:
        if self._conn is None:
            self.connect()
        return self._conn

    def _bind(self, params: Params) -> Params:
        if isinstance(params, Mapping):
            return {name: _iso(value) for name, value in params.items()}
        return [_iso(value) for value in params]

    def insert_returning_id(
        self,
        conn: Connection,
        table: str,
        columns: Sequence[str],
        values: Sequence[Any],
        id_column: str,  # noqa: ARG002
    ) -> int:
        cursor = conn.cursor()
        cursor.execute(
            f"INSERT INTO {table} ({', '.join(columns)}) "
            f"VALUES ({self.dialect.placeholders(len(columns))})",
            self._bind(values),
        )
        # the rowid of an INTEGER PRIMARY KEY table is the key itself
        return int(cursor.lastrowid)


__all__ = ["SQLiteAdapter"]
