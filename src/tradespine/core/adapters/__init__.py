"""Database adapters: one interface for the ledger and the analytics store.

Architecture::

    DatabaseAdapter (base.py)        query / executemany / insert_returning_id / transaction
        |-- SQLiteAdapter            stdlib sqlite3 (tests, single-node analytics)
        |-- PooledAdapter            driver pool lifecycle and error mapping
            |-- PostgreSQLAdapter    psycopg2 (shared analytics store)
            |-- OracleAdapter        oracledb (ledger)

    adapter_from_url (registry.py)   URL from settings -> adapter
    DatabaseConfig (types.py)        Connection parameters, URL parsing

Guardrails:
    ❌ ``conn.execute("SELECT * FROM t WHERE id=" + user_input)``
    ✅ ``adapter.query("SELECT * FROM t WHERE id = :id", {"id": user_input})``

Tags:
    database, adapters, sqlite, postgresql, oracle, trade-spine
"""

from tradespine.core.dialect import Dialect, get_dialect
from tradespine.core.protocols import Connection

from .base import DatabaseAdapter, PooledAdapter, rows_as_dicts
from .oracle import OracleAdapter
from .postgresql import PostgreSQLAdapter
from .registry import adapter_for, adapter_from_url
from .sqlite import SQLiteAdapter
from .types import DatabaseConfig, DatabaseType

__all__ = [
    # Types
    "DatabaseType",
    "DatabaseConfig",
    # Protocols / Abstractions
    "Connection",
    "Dialect",
    "get_dialect",
    # Base class
    "DatabaseAdapter",
    "PooledAdapter",
    "rows_as_dicts",
    # Implementations
    "SQLiteAdapter",
    "PostgreSQLAdapter",
    "OracleAdapter",
    # Factory
    "adapter_for",
    "adapter_from_url",
]
