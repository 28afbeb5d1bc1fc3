"""
Extraction-run cursor store for incremental trade extraction.

Before a family fetch the caller reads the latest run for
``(deal_type, trade_date)``; its ``cutoff`` becomes the "changed since"
bound of the ledger query. After a successful fetch the caller records a
new run. Rows are only ever appended.

Manifesto:
    - **Append-only:** ``record()`` inserts; nothing is updated in place, so
      retried runs never overwrite each other
    - **Ids from the insert:** the database hands back the new ``run_id``
      on the inserting connection; in memory, ids are assigned under a lock
    - **Most recent by run id:** ``latest()`` picks the greatest ``run_id``
      for the pair, never the greatest cutoff (cutoff and wall-clock run
      time may diverge)
    - **Absent is not an error:** ``latest()`` returns ``None`` when no run
      exists, meaning every row counts as changed
    - **Store errors propagate:** driver errors reach the caller unmodified,
      and nothing is retried

Architecture:
    ::

        latest("EMSSN", 2022-05-05)          record("EMSSN", 2022-05-05, t2)
              │                                     │
              ▼                                     ▼
        ┌──────────────────────────────────────────────────────────────┐
        │ trade_extraction_runs (or in-memory list)                    │
        │ run_id | transaction_date | deal_type | cutoff | created_at  │
        │   41   | 2022-05-05       | EMSSN     | t1     | ...         │
        │   42   | 2022-05-05       | EMSSN     | t2     | ...  ◄──    │
        └──────────────────────────────────────────────────────────────┘

Examples:
    >>> from datetime import datetime
    >>> store = ExtractionRunStore()
    >>> day = datetime(2022, 5, 5)
    >>> store.latest("EMSSN", day) is None
    True
    >>> _ = store.record("EMSSN", day, datetime(2022, 5, 5, 8))
    >>> _ = store.record("EMSSN", day, datetime(2022, 5, 5, 9))
    >>> store.latest("EMSSN", day).cutoff.hour
    9

Tags:
    watermark, cursor, incremental, extraction-run, trade-spine

STDLIB ONLY - NO PYDANTIC.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from tradespine.core.adapters import DatabaseAdapter
from tradespine.core.logging import get_logger
from tradespine.core.timestamps import coerce_datetime, utc_now

logger = get_logger(__name__)

RUNS_TABLE = "trade_extraction_runs"


# ---------------------------------------------------------------------------
# Value object
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ExtractionRun:
    """One recorded extraction run for a (deal_type, trade date) pair.

    Attributes:
        run_id: Monotonic identifier; the greatest id is the current cursor.
        transaction_date: Trade date the run covered (midnight).
        deal_type: Deal family tag (``EMSSN``, ``POPTS``, ...).
        cutoff: The "changed since" timestamp the next run should use.
        created_at: When the run row was written.
    """

    run_id: int
    transaction_date: datetime
    deal_type: str
    cutoff: datetime
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "transaction_date": self.transaction_date.isoformat(),
            "deal_type": self.deal_type,
            "cutoff": self.cutoff.isoformat(),
            "created_at": self.created_at.isoformat(),
        }


def trade_day(value: datetime | date) -> datetime:
    """Truncate to midnight; the cursor is keyed by calendar day."""
    return datetime(value.year, value.month, value.day)


# ---------------------------------------------------------------------------
# ExtractionRunStore
# ---------------------------------------------------------------------------


class ExtractionRunStore:
    """Persistence-agnostic extraction-run store.

    If *adapter* is supplied, runs are persisted to the
    ``trade_extraction_runs`` table (see
    :func:`tradespine.analytics.schema.create_schema`). Otherwise an
    in-memory list is used.

    Args:
        adapter: Optional analytics-store adapter.
    """

    def __init__(self, adapter: DatabaseAdapter | None = None) -> None:
        self._adapter = adapter
        self._mem: list[ExtractionRun] = []
        self._mem_lock = threading.Lock()

    # -- core operations -----------------------------------------------------

    def latest(self, deal_type: str, trade_date: datetime | date) -> ExtractionRun | None:
        """Most recent run for the pair, or ``None`` if there is none."""
        day = trade_day(trade_date)
        if self._adapter is not None:
            return self._latest_db(deal_type, day)
        runs = self._history_mem(deal_type, day)
        return runs[-1] if runs else None

    def record(
        self, deal_type: str, trade_date: datetime | date, cutoff: datetime
    ) -> ExtractionRun:
        """Append a new run and return it."""
        day = trade_day(trade_date)
        created_at = utc_now()
        if self._adapter is not None:
            return self._record_db(deal_type, day, cutoff, created_at)
        with self._mem_lock:
            run = ExtractionRun(
                run_id=len(self._mem) + 1,
                transaction_date=day,
                deal_type=deal_type,
                cutoff=cutoff,
                created_at=created_at,
            )
            self._mem.append(run)
        return run

    def history(self, deal_type: str, trade_date: datetime | date) -> list[ExtractionRun]:
        """Every run for the pair in run-id order."""
        day = trade_day(trade_date)
        if self._adapter is not None:
            return self._history_db(deal_type, day)
        return self._history_mem(deal_type, day)

    # -- internal: memory backend -------------------------------------------

    def _history_mem(self, deal_type: str, day: datetime) -> list[ExtractionRun]:
        with self._mem_lock:
            runs = list(self._mem)
        return [run for run in runs if run.deal_type == deal_type and run.transaction_date == day]

    # -- internal: database backend ------------------------------------------

    def _key_params(self, deal_type: str, day: datetime) -> tuple[datetime, str]:
        return (day, deal_type)

    def _latest_db(self, deal_type: str, day: datetime) -> ExtractionRun | None:
        assert self._adapter is not None
        d = self._adapter.dialect
        sql = (
            f"SELECT run_id, transaction_date, deal_type, cutoff, created_at "
            f"FROM {RUNS_TABLE} "
            f"WHERE transaction_date = {d.placeholder(0)} AND deal_type = {d.placeholder(1)} "
            f"AND run_id = (SELECT MAX(run_id) FROM {RUNS_TABLE} "
            f"WHERE transaction_date = {d.placeholder(2)} AND deal_type = {d.placeholder(3)})"
        )
        try:
            row = self._adapter.query_one(sql, self._key_params(deal_type, day) * 2)
        except Exception as e:
            logger.debug("extraction_run_lookup_failed", deal_type=deal_type, error=str(e))
            raise
        return _row_to_run(row) if row else None

    def _history_db(self, deal_type: str, day: datetime) -> list[ExtractionRun]:
        assert self._adapter is not None
        d = self._adapter.dialect
        rows = self._adapter.query(
            f"SELECT run_id, transaction_date, deal_type, cutoff, created_at "
            f"FROM {RUNS_TABLE} "
            f"WHERE transaction_date = {d.placeholder(0)} AND deal_type = {d.placeholder(1)} "
            f"ORDER BY run_id",
            self._key_params(deal_type, day),
        )
        return [_row_to_run(row) for row in rows]

    def _record_db(
        self, deal_type: str, day: datetime, cutoff: datetime, created_at: datetime
    ) -> ExtractionRun:
        assert self._adapter is not None
        try:
            with self._adapter.transaction() as conn:
                run_id = self._adapter.insert_returning_id(
                    conn,
                    RUNS_TABLE,
                    ("transaction_date", "deal_type", "cutoff", "created_at"),
                    (day, deal_type, cutoff, created_at),
                    "run_id",
                )
        except Exception as e:
            logger.debug("extraction_run_insert_failed", deal_type=deal_type, error=str(e))
            raise
        logger.info(
            "extraction_run_recorded",
            deal_type=deal_type,
            trade_date=day.date().isoformat(),
            run_id=run_id,
        )
        return ExtractionRun(
            run_id=run_id,
            transaction_date=day,
            deal_type=deal_type,
            cutoff=cutoff,
            created_at=created_at,
        )


def _row_to_run(row: dict[str, Any]) -> ExtractionRun:
    return ExtractionRun(
        run_id=int(row["run_id"]),
        transaction_date=coerce_datetime(row["transaction_date"]),
        deal_type=row["deal_type"],
        cutoff=coerce_datetime(row["cutoff"]),
        created_at=coerce_datetime(row["created_at"]),
    )


__all__ = [
    "RUNS_TABLE",
    "ExtractionRun",
    "ExtractionRunStore",
    "trade_day",
]
