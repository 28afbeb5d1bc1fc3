"""
Shared pytest fixtures for trade-spine tests.

This module provides:
- ``FakeLedger``: a row source that records every query and replays queued
  result sets in order
- An in-memory SQLite analytics store with the schema applied
- Row and header factories for the ledger families

Usage:
    def test_something(ledger, analytics):
        ledger.queue([party_row("power_key", 1)])
        ...
"""

from __future__ import annotations

from collections.abc import Generator, Mapping, Sequence
from datetime import datetime
from typing import Any

import pytest

from tradespine.analytics.schema import create_schema
from tradespine.core.adapters import SQLiteAdapter
from tradespine.domain.trades import DealHeader, DealTerm, PriceIndex

TRADE_DATE = datetime(2022, 5, 5)


class FakeLedger:
    """Row source that records ``(sql, params)`` and replays queued rows.

    Each call to :meth:`query` consumes the next queued result set; once
    the queue is empty every further query returns no rows.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []
        self._results: list[list[dict[str, Any]]] = []
        self.error: Exception | None = None

    def queue(self, *result_sets: Sequence[Mapping[str, Any]]) -> FakeLedger:
        for rows in result_sets:
            self._results.append([dict(row) for row in rows])
        return self

    def query(self, sql: str, params: Any = ()) -> list[dict[str, Any]]:
        self.calls.append((sql, params))
        if self.error is not None:
            raise self.error
        if not self._results:
            return []
        return self._results.pop(0)

    @property
    def sql(self) -> list[str]:
        return [sql for sql, _ in self.calls]

    @property
    def params(self) -> list[Any]:
        return [params for _, params in self.calls]


# =============================================================================
# Factories
# =============================================================================


def party_row(key_column: str, key: int, **overrides: Any) -> dict[str, Any]:
    """A primary-query row with every column the families share."""
    row: dict[str, Any] = {
        key_column: key,
        "transaction_date": TRADE_DATE,
        "total_quantity": 100.0,
        "cy_company_key": 10,
        "company": "ACME",
        "companylongname": "Acme Power LLC",
        "companycode": "ACM",
        "legalentity": "SENA",
        "legalentitylongname": "In-house Trading",
        "cylegalentitykey": 20,
        "contractnumber": "C-100",
        "confirmformat": "EEI",
        "region": "WEST",
        "hs_hedge_key": "H1",
        "prtportfolio": 7,
        "portfolio": "WEST POWER",
        "ur_trader": "jdoe",
        "tz_time_zone": "PPT",
        "createdby": "jdoe",
        "create_date": datetime(2022, 5, 5, 8, 0, 0),
        "modifiedby": "asmith",
        "modify_date": datetime(2022, 5, 5, 9, 30, 0),
        "execution_date": "2022-05-05",
        "execution_time": "08:18:55 AM",
    }
    row.update(overrides)
    return row


def make_header(deal_key: int = 1, deal_type: str = "EMSSN", **overrides: Any) -> DealHeader:
    """A small but complete header with one term and one index."""
    values: dict[str, Any] = {
        "deal_key": deal_key,
        "deal_type": deal_type,
        "transaction_date": TRADE_DATE,
        "portfolio_id": 7,
        "portfolio": "WEST POWER",
        "company": "ACME",
        "direction": "PURCHASE",
        "terms": [
            DealTerm(
                vol_seq=1,
                beg_date=datetime(2022, 6, 1),
                end_date=datetime(2022, 6, 30),
                volume=25.0,
                formula1="[GD|HOU SHP CHNL|DAILY]",
                indexes1=[PriceIndex(1, "GD", "HOU SHP CHNL", "DAILY")],
            )
        ],
    }
    values.update(overrides)
    return DealHeader(**values)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture()
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture()
def analytics() -> Generator[SQLiteAdapter, None, None]:
    """In-memory analytics store with every table created."""
    adapter = SQLiteAdapter()
    adapter.connect()
    create_schema(adapter)
    yield adapter
    adapter.disconnect()
