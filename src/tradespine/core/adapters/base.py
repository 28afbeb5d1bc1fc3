"""Database adapter base classes.

Manifesto:
    The ledger (read-only, Oracle in production) and the analytics store
    (SQLite, PostgreSQL or Oracle) are reached through the same adapter
    interface, so fetchers and repositories never depend on a specific
    driver. What trade-spine needs from a store is small:

    - ``query()`` for ledger reads and reference lookups, dict rows with
      lower-case keys
    - ``executemany()`` for the processed-trade upsert, one transaction
    - ``insert_returning_id()`` for appending an extraction run and
      learning its ``run_id`` on the same connection
    - ``transaction()`` for DDL and multi-statement writes

    Adapters differ only in how they hold connections (one SQLite
    connection, or a driver pool) and in the driver quirks below them.

Tags:
    database, abstract-base, adapter-pattern, trade-spine
"""

from __future__ import annotations

import importlib
from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from types import ModuleType
from typing import Any, ClassVar

from tradespine.core.dialect import Dialect, get_dialect
from tradespine.core.errors import ConfigError, DatabaseConnectionError
from tradespine.core.logging import get_logger
from tradespine.core.protocols import Connection

from .types import DatabaseConfig, DatabaseType

logger = get_logger(__name__)

Params = Sequence[Any] | Mapping[str, Any]


def rows_as_dicts(cursor: Any) -> list[dict[str, Any]]:
    """Fetch every row of ``cursor`` as a dict keyed by lower-case column name."""
    if cursor.description is None:
        return []
    columns = [desc[0].lower() for desc in cursor.description]
    return [dict(zip(columns, row, strict=False)) for row in cursor.fetchall()]


class DatabaseAdapter(ABC):
    """Common read/write surface over one trade-spine store."""

    def __init__(self, config: DatabaseConfig):
        self._config = config
        self._connected = False
        self._dialect: Dialect = get_dialect(config.db_type.value)

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    @property
    def db_type(self) -> DatabaseType:
        return self._config.db_type

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    @property
    def is_connected(self) -> bool:
        return self._connected

    @abstractmethod
    def connect(self) -> None: ...

    @abstractmethod
    def disconnect(self) -> None: ...

    @abstractmethod
    def get_connection(self) -> Connection:
        """A connection to run statements on (from the pool, where there is one)."""

    def _return_connection(self, conn: Any) -> None:
        """Hand a connection back; single-connection adapters keep it."""

    def _bind(self, params: Params) -> Params:
        """Driver-ready parameters; the default passes them through."""
        return params

    # -- statements ----------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Commit on success, roll back and re-raise on error."""
        conn = self.get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._return_connection(conn)

    def execute(self, sql: str, params: Params = ()) -> int:
        """Run one statement in its own transaction; returns the rowcount."""
        with self.transaction() as conn:
            cursor = conn.cursor()
            cursor.execute(sql, self._bind(params))
            return cursor.rowcount

    def executemany(self, sql: str, params: list[Sequence[Any]]) -> int:
        """Run *sql* once per parameter set, all in one transaction.

        Returns the number of parameter sets (driver rowcounts for a MERGE
        or an upsert are not comparable across drivers). An empty list is a
        no-op that opens no transaction.
        """
        if not params:
            return 0
        with self.transaction() as conn:
            cursor = conn.cursor()
            cursor.executemany(sql, [self._bind(p) for p in params])
        return len(params)

    def insert_returning_id(
        self,
        conn: Connection,
        table: str,
        columns: Sequence[str],
        values: Sequence[Any],
        id_column: str,
    ) -> int:
        """Insert one row on *conn* and return its generated *id_column*."""
        sql = (
            f"INSERT INTO {table} ({', '.join(columns)}) "
            f"VALUES ({self._dialect.placeholders(len(columns))}) RETURNING {id_column}"
        )
        cursor = conn.cursor()
        cursor.execute(sql, self._bind(values))
        return int(cursor.fetchone()[0])

    def query(self, sql: str, params: Params = ()) -> list[dict[str, Any]]:
        """Run a SELECT and return every row as a lower-case-keyed dict."""
        conn = self.get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(sql, self._bind(params))
            return rows_as_dicts(cursor)
        finally:
            self._return_connection(conn)

    def query_one(self, sql: str, params: Params = ()) -> dict[str, Any] | None:
        results = self.query(sql, params)
        return results[0] if results else None

    def __enter__(self) -> DatabaseAdapter:
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._config.to_connection_string()!r})"


class PooledAdapter(DatabaseAdapter):
    """Adapter over a DB-API driver's connection pool.

    Subclasses name the driver module and build, borrow from and close the
    pool. Opening the pool maps a missing driver to :class:`ConfigError`
    and any driver error to :class:`DatabaseConnectionError` carrying the
    masked store URL.
    """

    driver: ClassVar[str]

    def __init__(self, config: DatabaseConfig):
        super().__init__(config)
        self._pool: Any = None

    @abstractmethod
    def _create_pool(self, driver: ModuleType) -> Any: ...

    @abstractmethod
    def _acquire(self) -> Connection: ...

    @abstractmethod
    def _release(self, conn: Any) -> None: ...

    @abstractmethod
    def _close_pool(self) -> None: ...

    def connect(self) -> None:
        try:
            driver = importlib.import_module(self.driver)
        except ImportError:
            raise ConfigError(
                f"{self.driver} is required for {self.db_type.value} stores",
            ) from None

        url = self._config.to_connection_string()
        try:
            self._pool = self._create_pool(driver)
        except driver.Error as e:
            raise DatabaseConnectionError(f"cannot open a pool on {url}: {e}", cause=e) from e
        self._connected = True
        logger.debug("store_pool_opened", url=url, size=self._config.pool_size)

    def disconnect(self) -> None:
        if self._pool is not None:
            self._close_pool()
            self._pool = None
            self._connected = False

    def get_connection(self) -> Connection:
        if self._pool is None:
            self.connect()
        return self._acquire()

    def _return_connection(self, conn: Any) -> None:
        if self._pool is not None:
            self._release(conn)


__all__ = [
    "DatabaseAdapter",
    "Params",
    "PooledAdapter",
    "rows_as_dicts",
]
