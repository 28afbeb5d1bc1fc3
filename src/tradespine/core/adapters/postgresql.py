"""PostgreSQL adapter for a shared analytics store (psycopg2 threaded pool).

The ledger never lives here; only analytics SQL (``%s`` binds from
``PostgreSQLDialect``) runs on this adapter. Sessions identify themselves
as ``tradespine`` in ``pg_stat_activity``.
"""

from __future__ import annotations

from types import ModuleType
from typing import Any

from tradespine.core.protocols import Connection

from .base import PooledAdapter

APPLICATION_NAME = "tradespine"


class PostgreSQLAdapter(PooledAdapter):
    driver = "psycopg2"

    def _create_pool(self, driver: ModuleType) -> Any:  # noqa: ARG002
        from psycopg2.pool import ThreadedConnectionPool

        cfg = self._config
        return ThreadedConnectionPool(
            minconn=1,
            maxconn=cfg.pool_size,
            host=cfg.host,
            port=cfg.port,
            dbname=cfg.database,
            user=cfg.username,
            password=cfg.password,
            connect_timeout=cfg.connect_timeout,
            application_name=APPLICATION_NAME,
        )

    def _acquire(self) -> Connection:
        return self._pool.getconn()

    def _release(self, conn: Any) -> None:
        self._pool.putconn(conn)

    def _close_pool(self) -> None:
        self._pool.closeall()


__all__ = ["APPLICATION_NAME", "PostgreSQLAdapter"]
