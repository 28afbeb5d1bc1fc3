"""Oracle adapter (python-oracledb, thin mode).

The ledger is an Oracle schema, so this is what the header fetchers read
from in production; it can also host the analytics store.

- Ledger SQL binds by name (``:trade_date``, ``:k0``) from a dict;
  analytics SQL uses the numbered ``:1`` binds of ``OracleDialect``.
- ``processed_trades.trade_detail`` is a CLOB. LOBs are fetched as plain
  strings so rows read back like they do from the other stores.
- ``RETURNING`` yields no result set on Oracle; the generated run id comes
  back through an ``INTO`` output bind variable.
"""

from __future__ import annotations

from collections.abc import Sequence
from types import ModuleType
from typing import Any

from tradespine.core.protocols import Connection

from .base import PooledAdapter


class OracleAdapter(PooledAdapter):
    """Oracle store behind an ``oracledb`` session pool."""

    driver = "oracledb"

    def _create_pool(self, driver: ModuleType) -> Any:
        driver.defaults.fetch_lobs = False
        cfg = self._config
        return driver.create_pool(
            user=cfg.username,
            password=cfg.password,
            dsn=driver.makedsn(cfg.host, cfg.port, service_name=cfg.database),
            min=1,
            max=cfg.pool_size,
            increment=1,
        )

    def _acquire(self) -> Connection:
        return self._pool.acquire()

    def _release(self, conn: Any) -> None:
        self._pool.release(conn)

    def _close_pool(self) -> None:
        self._pool.close()

    def insert_returning_id(
        self,
        conn: Connection,
        table: str,
        columns: Sequence[str],
        values: Sequence[Any],
        id_column: str,
    ) -> int:
        cursor = conn.cursor()
        out = cursor.var(int)
        sql = (
            f"INSERT INTO {table} ({', '.join(columns)}) "
            f"VALUES ({self.dialect.placeholders(len(columns))}) "
            f"RETURNING {id_column} INTO :{len(columns) + 1}"
        )
        cursor.execute(sql, [*values, out])
        return int(out.getvalue()[0])


__all__ = ["OracleAdapter"]
