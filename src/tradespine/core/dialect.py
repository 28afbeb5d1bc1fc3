"""SQL dialect abstraction for the analytics store.

The analytics tables (extraction runs, processed trades, reference data)
are written through a ``Dialect`` so that the same repository code runs on
SQLite (tests, single-node installs), PostgreSQL and Oracle. Ledger queries
do not go through this layer: they use named binds, which both ``oracledb``
and ``sqlite3`` accept as-is.

Architecture::

    Repository code:
    ┌────────────────────────────────────────────────────────────────┐
    │  sql = d.upsert("processed_trades", cols, ["trade_id", ...])   │
    │  cursor.executemany(sql, rows)                                 │
    └────────────────────────────────────────────────────────────────┘
                              │
                              ▼
         ┌──────────┐   ┌──────────────┐   ┌──────────────────┐
         │ SQLite   │   │ PostgreSQL   │   │  Oracle          │
         │ ?, ?, ?  │   │ %s, %s, %s   │   │ :1, :2, :3       │
         │ ON CONFL │   │ ON CONFLICT  │   │ MERGE ... DUAL   │
         └──────────┘   └──────────────┘   └──────────────────┘

Examples:
    >>> from tradespine.core.dialect import SQLiteDialect
    >>> d = SQLiteDialect()
    >>> d.placeholders(3)
    '?, ?, ?'

Tags:
    dialect, sql, portability, sqlite, postgresql, oracle, trade-spine
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Dialect(Protocol):
    """SQL dialect contract.

    Every method returns a SQL fragment valid for the target database.
    """

    @property
    def name(self) -> str:
        """Human-readable dialect name (e.g. ``'sqlite'``)."""
        ...

    # -- Placeholder generation --------------------------------------------

    def placeholder(self, index: int) -> str:
        """Single positional placeholder (0-based index)."""
        ...

    def placeholders(self, count: int) -> str:
        """Comma-separated placeholder list."""
        ...

    # -- Timestamp expressions ---------------------------------------------

    def now(self) -> str:
        """SQL expression for the current timestamp."""
        ...

    # -- Upsert ------------------------------------------------------------

    def upsert(self, table: str, columns: list[str], key_columns: list[str]) -> str:
        """Insert-or-update statement keyed by ``key_columns``."""
        ...

    # -- DDL ---------------------------------------------------------------

    def auto_increment(self) -> str:
        """Column definition for an auto-incrementing integer primary key."""
        ...

    def timestamp_type(self) -> str:
        """Column type for a date/time value."""
        ...

    def text_type(self) -> str:
        """Column type for unbounded text (JSON blobs, concatenated messages)."""
        ...


class SQLiteDialect:
    """SQLite dialect: ``?`` placeholders, ``datetime('now')``."""

    @property
    def name(self) -> str:
        return "sqlite"

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "?"

    def placeholders(self, count: int) -> str:
        return ", ".join("?" for _ in range(count))

    def now(self) -> str:
        return "datetime('now')"

    def upsert(self, table: str, columns: list[str], key_columns: list[str]) -> str:
        cols = ", ".join(columns)
        ph = self.placeholders(len(columns))
        keys = ", ".join(key_columns)
        update_cols = [c for c in columns if c not in key_columns]
        updates = ", ".join(f"{c} = excluded.{c}" for c in update_cols)
        return (
            f"INSERT INTO {table} ({cols}) VALUES ({ph}) "
            f"ON CONFLICT ({keys}) DO UPDATE SET {updates}"
        )

    def auto_increment(self) -> str:
        return "INTEGER PRIMARY KEY AUTOINCREMENT"

    def timestamp_type(self) -> str:
        return "TEXT"

    def text_type(self) -> str:
        return "TEXT"


class PostgreSQLDialect:
    """PostgreSQL dialect: ``%s`` placeholders (psycopg2), ``NOW()``."""

    @property
    def name(self) -> str:
        return "postgresql"

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "%s"

    def placeholders(self, count: int) -> str:
        return ", ".join("%s" for _ in range(count))

    def now(self) -> str:
        return "NOW()"

    def upsert(self, table: str, columns: list[str], key_columns: list[str]) -> str:
        cols = ", ".join(columns)
        ph = self.placeholders(len(columns))
        keys = ", ".join(key_columns)
        update_cols = [c for c in columns if c not in key_columns]
        updates = ", ".join(f"{c} = EXCLUDED.{c}" for c in update_cols)
        return (
            f"INSERT INTO {table} ({cols}) VALUES ({ph}) "
            f"ON CONFLICT ({keys}) DO UPDATE SET {updates}"
        )

    def auto_increment(self) -> str:
        return "SERIAL PRIMARY KEY"

    def timestamp_type(self) -> str:
        return "TIMESTAMP"

    def text_type(self) -> str:
        return "TEXT"


class OracleDialect:
    """Oracle dialect: ``:1, :2`` numbered placeholders, ``SYSTIMESTAMP``."""

    @property
    def name(self) -> str:
        return "oracle"

    def placeholder(self, index: int) -> str:
        return f":{index + 1}"

    def placeholders(self, count: int) -> str:
        return ", ".join(f":{i + 1}" for i in range(count))

    def now(self) -> str:
        return "SYSTIMESTAMP"

    def upsert(self, table: str, columns: list[str], key_columns: list[str]) -> str:
        cols = ", ".join(columns)
        vals = ", ".join(f"src.c{i}" for i in range(len(columns)))
        source = ", ".join(f"{self.placeholder(i)} AS c{i}" for i in range(len(columns)))
        key_matches = " AND ".join(
            f"tgt.{k} = src.c{columns.index(k)}" for k in key_columns
        )
        update_cols = [c for c in columns if c not in key_columns]
        updates = ", ".join(f"tgt.{c} = src.c{columns.index(c)}" for c in update_cols)
        return (
            f"MERGE INTO {table} tgt "
            f"USING (SELECT {source} FROM DUAL) src "
            f"ON ({key_matches}) "
            f"WHEN MATCHED THEN UPDATE SET {updates} "
            f"WHEN NOT MATCHED THEN INSERT ({cols}) VALUES ({vals})"
        )

    def auto_increment(self) -> str:
        return "NUMBER GENERATED ALWAYS AS IDENTITY PRIMARY KEY"

    def timestamp_type(self) -> str:
        return "TIMESTAMP"

    def text_type(self) -> str:
        return "CLOB"


# =========================================================================
# Registry / Factory
# =========================================================================

_DIALECTS: dict[str, Dialect] = {
    "sqlite": SQLiteDialect(),
    "postgresql": PostgreSQLDialect(),
    "postgres": PostgreSQLDialect(),  # alias
    "oracle": OracleDialect(),
}


def get_dialect(db_type: str) -> Dialect:
    """Get a dialect by database type name.

    Raises:
        ValueError: If ``db_type`` is not recognised.
    """
    key = db_type.lower()
    if key not in _DIALECTS:
        raise ValueError(
            f"Unknown dialect '{db_type}'. "
            f"Supported: {sorted(set(_DIALECTS) - {'postgres'})}"
        )
    return _DIALECTS[key]


__all__ = [
    "Dialect",
    "OracleDialect",
    "PostgreSQLDialect",
    "SQLiteDialect",
    "get_dialect",
]
