"""
Processed-trade writer: merge anomaly findings into the upsert payload.

Manifesto:
    Each extraction cycle ends with one write: every reconstructed header
    becomes a ``processed_trades`` row, whether or not a model flagged it.

    - **Flagged only:** only findings scored ``NO`` contribute; every other
      label is ignored
    - **Build, then write:** every row is serialized before the first
      statement runs, so a bad header writes nothing
    - **One statement, one transaction:** the batch goes out as a single
      ``executemany`` of the dialect upsert keyed by (trade_id, deal_type)
    - **Empty is a no-op:** no rows, no transaction

Architecture:
    ::

        headers ──┐
                  ├── build_row(header, findings[deal_key]) ──► ProcessedTrade
        findings ─┘            │  message    = "m1 msg1;m2 msg2"
                               │  parameters = '{"...": ...};{"...": ...}'
                               ▼
        adapter.executemany(dialect.upsert("processed_trades", ...), rows)

Tags:
    anomaly, merge, upsert, processed-trades, trade-spine
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sequence

from tradespine.core.adapters import DatabaseAdapter
from tradespine.core.errors import ErrorContext, SerializationError
from tradespine.core.logging import get_logger
from tradespine.domain.findings import Finding, ProcessedTrade
from tradespine.domain.trades import DealHeader

logger = get_logger(__name__)

PROCESSED_TRADES_TABLE = "processed_trades"
PROCESSED_TRADE_COLUMNS = [
    "trade_id",
    "deal_type",
    "portfolio_id",
    "transaction_date",
    "trade_detail",
    "anomaly_detected",
    "anomaly_test_result",
    "model_parameters",
]
KEY_COLUMNS = ["trade_id", "deal_type"]


def group_findings(findings: Iterable[Finding]) -> dict[int, list[Finding]]:
    """Group findings by deal key, keeping their order."""
    grouped: dict[int, list[Finding]] = {}
    for finding in findings:
        grouped.setdefault(finding.deal_key, []).append(finding)
    return grouped


def build_row(header: DealHeader, findings: Sequence[Finding] = ()) -> ProcessedTrade:
    """Merge one header with its findings.

    Raises:
        SerializationError: if the header or a finding payload is not
            JSON-serializable.
    """
    flagged = [finding for finding in findings if finding.is_flagged]
    try:
        detail = json.dumps(header.to_dict())
        parameters = ";".join(finding.to_json() for finding in flagged)
    except (TypeError, ValueError) as e:
        raise SerializationError(
            f"cannot serialize deal {header.deal_key} ({header.deal_type}): {e}",
            context=ErrorContext(deal_type=header.deal_type, deal_key=header.deal_key),
            cause=e,
        ) from e
    message = ";".join(finding.summary() for finding in flagged)
    return ProcessedTrade(
        trade_id=header.deal_key,
        deal_type=header.deal_type,
        portfolio_id=header.portfolio_id,
        transaction_date=header.transaction_date,
        trade_detail=detail,
        anomaly_detected=bool(message),
        anomaly_test_result=message or None,
        model_parameters=parameters or None,
    )


class ProcessedTradeWriter:
    """Bulk upsert of processed trades into the analytics store.

    Args:
        adapter: Analytics-store adapter holding ``processed_trades``.
    """

    def __init__(self, adapter: DatabaseAdapter) -> None:
        self._adapter = adapter

    def build(
        self,
        headers: Sequence[DealHeader],
        findings: Mapping[int, Sequence[Finding]] | None = None,
    ) -> list[ProcessedTrade]:
        findings = findings or {}
        return [build_row(header, findings.get(header.deal_key, ())) for header in headers]

    def submit(
        self,
        headers: Sequence[DealHeader],
        findings: Mapping[int, Sequence[Finding]] | None = None,
    ) -> int:
        """Upsert one row per header; returns the number of rows written.

        *findings* maps a deal key to the model outputs for that deal.
        """
        if not headers:
            return 0
        rows = self.build(headers, findings)
        sql = self._adapter.dialect.upsert(
            PROCESSED_TRADES_TABLE, PROCESSED_TRADE_COLUMNS, KEY_COLUMNS
        )
        params = [_row_params(row) for row in rows]
        try:
            written = self._adapter.executemany(sql, params)
        except Exception as e:
            logger.debug("processed_trades_upsert_failed", rows=len(params), error=str(e))
            raise
        logger.info(
            "processed_trades_written",
            rows=written,
            flagged=sum(1 for row in rows if row.anomaly_detected),
        )
        return written


def _row_params(row: ProcessedTrade) -> tuple:
    return (
        row.trade_id,
        row.deal_type,
        row.portfolio_id,
        row.transaction_date,
        row.trade_detail,
        1 if row.anomaly_detected else 0,
        row.anomaly_test_result,
        row.model_parameters,
    )


__all__ = [
    "PROCESSED_TRADES_TABLE",
    "PROCESSED_TRADE_COLUMNS",
    "ProcessedTradeWriter",
    "build_row",
    "group_findings",
]
