"""
Analytics store: schema, processed-trade upsert and reference lookups.
"""

from tradespine.analytics.processed_trades import (
    ProcessedTradeWriter,
    build_row,
    group_findings,
)
from tradespine.analytics.reference import ReferenceRepository
from tradespine.analytics.schema import ANALYTICS_TABLES, analytics_ddl, create_schema

__all__ = [
    "ANALYTICS_TABLES",
    "ProcessedTradeWriter",
    "ReferenceRepository",
    "analytics_ddl",
    "build_row",
    "create_schema",
    "group_findings",
]
