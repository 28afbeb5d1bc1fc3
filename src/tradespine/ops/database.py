"""
Analytics-store operations.

Thin wrapper around :func:`tradespine.analytics.schema.create_schema`.
"""

from __future__ import annotations

from tradespine.analytics.schema import ANALYTICS_TABLES, create_schema
from tradespine.core.logging import get_logger
from tradespine.ops.context import OperationContext
from tradespine.ops.responses import SchemaInitResult
from tradespine.ops.result import INTERNAL, VALIDATION_FAILED, OperationResult, start_timer

logger = get_logger(__name__)


def initialize_analytics(ctx: OperationContext) -> OperationResult[SchemaInitResult]:
    """Create every analytics table (idempotent)."""
    timer = start_timer()

    if ctx.analytics is None:
        return OperationResult.fail(
            VALIDATION_FAILED,
            "analytics store is not configured",
            elapsed_ms=timer.elapsed_ms,
        )
    if ctx.dry_run:
        return OperationResult.ok(
            SchemaInitResult(tables=list(ANALYTICS_TABLES.values()), dry_run=True),
            elapsed_ms=timer.elapsed_ms,
        )

    try:
        tables = create_schema(ctx.analytics)
    except Exception as exc:
        logger.exception("analytics_init_failed", error=str(exc))
        return OperationResult.fail(
            INTERNAL,
            f"Failed to initialise analytics store: {exc}",
            elapsed_ms=timer.elapsed_ms,
        )
    return OperationResult.ok(SchemaInitResult(tables=tables), elapsed_ms=timer.elapsed_ms)


__all__ = ["initialize_analytics"]
