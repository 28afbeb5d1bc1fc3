"""Reference lookups from the analytics store.

The scoring models compare each trade against two reference sets: the
portfolio-to-risk-entity mapping and the latest limits-and-ratings (LAR)
report. trade-spine only reads them.
"""

from __future__ import annotations

from typing import Any

from tradespine.analytics.schema import (
    ANALYTICS_TABLES,
    LAR_NUMERIC_COLUMNS,
    LAR_TIMESTAMP_COLUMNS,
)
from tradespine.core.adapters import DatabaseAdapter
from tradespine.core.logging import get_logger
from tradespine.core.timestamps import coerce_datetime
from tradespine.domain.reference import LarBaseRecord, PortfolioRiskMapping

logger = get_logger(__name__)

DEFAULT_SOURCE_SYSTEM = "NUCLEUS"


class ReferenceRepository:
    """Read-only access to the reference tables.

    Args:
        adapter: Analytics-store adapter.
        source_system: Source-system tag of the ledger in the reference data.
    """

    def __init__(
        self, adapter: DatabaseAdapter, source_system: str = DEFAULT_SOURCE_SYSTEM
    ) -> None:
        self._adapter = adapter
        self._source_system = source_system

    def portfolio_risk_mappings(
        self, source_system: str | None = None
    ) -> list[PortfolioRiskMapping]:
        """Portfolio → risk legal entity mappings for one source system."""
        d = self._adapter.dialect
        rows = self._query(
            "portfolio_risk_mappings",
            f"SELECT source_system, portfolio, legal_entity "
            f"FROM {ANALYTICS_TABLES['portfolio_risk']} "
            f"WHERE source_system = {d.placeholder(0)}",
            (source_system or self._source_system,),
        )
        return [
            PortfolioRiskMapping(
                source_system=row["source_system"],
                portfolio=row["portfolio"],
                legal_entity=row["legal_entity"] or "",
            )
            for row in rows
        ]

    def lar_base(self) -> list[LarBaseRecord]:
        """Rows of the latest LAR report, each with the legal entity of its
        product. An empty table yields no rows."""
        d = self._adapter.dialect
        lar = ANALYTICS_TABLES["lar_base"]
        columns = ", ".join(
            "lps.legal_entity AS legal_entity" if name == "legal_entity" else f"lb.{name}"
            for name in LarBaseRecord.field_names()
        )
        sql = (
            f"SELECT {columns} "
            f"FROM {lar} lb "
            f"LEFT JOIN {ANALYTICS_TABLES['lar_product_ref']} lps "
            f"ON lb.product = lps.product_name AND lps.source_system = {d.placeholder(0)} "
            f"WHERE lb.reporting_date = "
            f"(SELECT COALESCE(MAX(reporting_date), {d.now()}) FROM {lar})"
        )
        rows = self._query("lar_base", sql, (self._source_system,))
        return [_lar_from_row(row) for row in rows]

    def _query(self, name: str, sql: str, params: tuple) -> list[dict[str, Any]]:
        try:
            rows = self._adapter.query(sql, params)
        except Exception as e:
            logger.debug("reference_query_failed", source=name, error=str(e))
            raise
        logger.debug("reference_rows_loaded", source=name, rows=len(rows))
        return rows


def _lar_from_row(row: dict[str, Any]) -> LarBaseRecord:
    values: dict[str, Any] = {}
    for name in LarBaseRecord.field_names():
        value = row.get(name)
        if name in LAR_TIMESTAMP_COLUMNS:
            values[name] = coerce_datetime(value)
        elif name in LAR_NUMERIC_COLUMNS:
            values[name] = float(value) if value is not None else 0.0
        else:
            values[name] = "" if value is None else str(value)
    return LarBaseRecord(**values)


__all__ = [
    "DEFAULT_SOURCE_SYSTEM",
    "ReferenceRepository",
]
