"""Tests for the append-only extraction-run store (memory and SQLite)."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime

import pytest

from tradespine.analytics.schema import create_schema
from tradespine.core.adapters import SQLiteAdapter
from tradespine.core.watermarks import RUNS_TABLE, ExtractionRunStore, trade_day

DAY = datetime(2022, 5, 5)
OTHER_CUTOFF = datetime(2022, 5, 5, 9, 30)


class InterleavedWriterAdapter(SQLiteAdapter):
    """Another writer appends a run right after each of ours."""

    def insert_returning_id(self, conn, table, columns, values, id_column):
        run_id = super().insert_returning_id(conn, table, columns, values, id_column)
        other = list(values)
        other[columns.index("cutoff")] = OTHER_CUTOFF
        super().insert_returning_id(conn, table, columns, other, id_column)
        return run_id


@pytest.fixture(params=["memory", "sqlite"])
def store(request, analytics):
    if request.param == "memory":
        return ExtractionRunStore()
    return ExtractionRunStore(analytics)


class TestExtractionRunStore:
    def test_latest_is_none_when_no_run(self, store):
        assert store.latest("EMSSN", DAY) is None

    def test_record_returns_run(self, store):
        run = store.record("EMSSN", DAY, datetime(2022, 5, 5, 8))
        assert run.deal_type == "EMSSN"
        assert run.transaction_date == DAY
        assert run.cutoff == datetime(2022, 5, 5, 8)
        assert run.run_id >= 1

    def test_latest_is_greatest_run_id_not_greatest_cutoff(self, store):
        store.record("EMSSN", DAY, datetime(2022, 5, 5, 10))
        store.record("EMSSN", DAY, datetime(2022, 5, 5, 9))
        latest = store.latest("EMSSN", DAY)
        assert latest.cutoff == datetime(2022, 5, 5, 9)

    def test_runs_are_keyed_by_deal_type(self, store):
        store.record("EMSSN", DAY, datetime(2022, 5, 5, 8))
        assert store.latest("POPTS", DAY) is None

    def test_runs_are_keyed_by_trade_day(self, store):
        store.record("EMSSN", DAY, datetime(2022, 5, 5, 8))
        assert store.latest("EMSSN", datetime(2022, 5, 6)) is None

    def test_trade_date_time_of_day_is_ignored(self, store):
        store.record("EMSSN", datetime(2022, 5, 5, 17, 45), datetime(2022, 5, 5, 8))
        assert store.latest("EMSSN", date(2022, 5, 5)) is not None

    def test_history_in_run_id_order(self, store):
        first = store.record("EMSSN", DAY, datetime(2022, 5, 5, 8))
        second = store.record("EMSSN", DAY, datetime(2022, 5, 5, 9))
        store.record("POPTS", DAY, datetime(2022, 5, 5, 9))
        history = store.history("EMSSN", DAY)
        assert [run.run_id for run in history] == [first.run_id, second.run_id]

    def test_to_dict_uses_iso_strings(self, store):
        run = store.record("EMSSN", DAY, datetime(2022, 5, 5, 8))
        data = run.to_dict()
        assert data["transaction_date"] == "2022-05-05T00:00:00"
        assert data["cutoff"] == "2022-05-05T08:00:00"


class TestSqliteBackend:
    def test_rows_are_appended(self, analytics):
        store = ExtractionRunStore(analytics)
        store.record("EMSSN", DAY, datetime(2022, 5, 5, 8))
        store.record("EMSSN", DAY, datetime(2022, 5, 5, 9))
        rows = analytics.query(f"SELECT COUNT(*) AS n FROM {RUNS_TABLE}")
        assert rows[0]["n"] == 2

    def test_store_errors_propagate(self):
        bare = SQLiteAdapter()
        with pytest.raises(Exception, match="no such table"):
            ExtractionRunStore(bare).latest("EMSSN", DAY)
        bare.disconnect()

    def test_run_id_comes_from_our_own_insert(self):
        adapter = InterleavedWriterAdapter()
        create_schema(adapter)
        store = ExtractionRunStore(adapter)

        ours = store.record("EMSSN", DAY, datetime(2022, 5, 5, 8))

        row = adapter.query_one(
            f"SELECT cutoff FROM {RUNS_TABLE} WHERE run_id = ?", (ours.run_id,)
        )
        assert row["cutoff"] == "2022-05-05T08:00:00"
        assert store.latest("EMSSN", DAY).cutoff == OTHER_CUTOFF
        assert store.latest("EMSSN", DAY).run_id == ours.run_id + 1
        adapter.disconnect()


class TestMemoryBackend:
    def test_concurrent_records_get_distinct_ids(self):
        store = ExtractionRunStore()
        with ThreadPoolExecutor(max_workers=8) as pool:
            runs = list(
                pool.map(
                    lambda i: store.record("EMSSN", DAY, datetime(2022, 5, 5, 8, i % 60)),
                    range(200),
                )
            )
        assert sorted(run.run_id for run in runs) == list(range(1, 201))
        assert len(store.history("EMSSN", DAY)) == 200


class TestTradeDay:
    def test_truncates_to_midnight(self):
        assert trade_day(datetime(2022, 5, 5, 23, 59)) == DAY

    def test_accepts_date(self):
        assert trade_day(date(2022, 5, 5)) == DAY
