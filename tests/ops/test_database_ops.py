"""Tests for the analytics-store operations."""

from __future__ import annotations

from tradespine.analytics.schema import ANALYTICS_TABLES
from tradespine.core.adapters import SQLiteAdapter
from tradespine.ops import OperationContext
from tradespine.ops.database import initialize_analytics


class TestInitializeAnalytics:
    def test_requires_analytics(self):
        result = initialize_analytics(OperationContext())
        assert not result.success
        assert result.error.code == "VALIDATION_FAILED"

    def test_creates_tables(self):
        adapter = SQLiteAdapter()
        adapter.connect()
        try:
            result = initialize_analytics(OperationContext(analytics=adapter))
            assert result.success
            assert result.data.tables == list(ANALYTICS_TABLES.values())
            assert adapter.query("SELECT * FROM trade_extraction_runs") == []
        finally:
            adapter.disconnect()

    def test_dry_run_creates_nothing(self):
        adapter = SQLiteAdapter()
        adapter.connect()
        try:
            result = initialize_analytics(OperationContext(analytics=adapter, dry_run=True))
            assert result.data.dry_run is True
            assert result.data.tables == list(ANALYTICS_TABLES.values())
            tables = adapter.query("SELECT name FROM sqlite_master WHERE type = 'table'")
            assert tables == []
        finally:
            adapter.disconnect()

    def test_store_error(self):
        adapter = SQLiteAdapter(readonly=True)
        adapter.connect()
        try:
            result = initialize_analytics(OperationContext(analytics=adapter))
            assert result.error.code == "INTERNAL"
        finally:
            adapter.disconnect()
