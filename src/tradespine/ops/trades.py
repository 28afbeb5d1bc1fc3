"""
Trade extraction operations.

Typed wrappers around the family fetchers, the extraction-run store, the
processed-trade writer and the reference repository. Every function takes
an :class:`OperationContext`, returns an :class:`OperationResult` and never
raises. Exceptions are mapped to result codes by
:func:`tradespine.ops.result.error_code`.
"""

from __future__ import annotations

from datetime import datetime

from tradespine.analytics.processed_trades import ProcessedTradeWriter, group_findings
from tradespine.analytics.reference import ReferenceRepository
from tradespine.core.logging import LogContext, get_logger
from tradespine.core.timestamps import ZERO_TIME
from tradespine.core.watermarks import ExtractionRun
from tradespine.domain.reference import LarBaseRecord, PortfolioRiskMapping
from tradespine.ledger.fetchers import FETCHERS, HeaderFetcher, get_fetcher
from tradespine.ops.context import OperationContext
from tradespine.ops.requests import (
    FetchByKeysRequest,
    FetchDealsRequest,
    GetLastRunRequest,
    InsertRunRequest,
    ProcessTradesRequest,
    RunCycleRequest,
)
from tradespine.ops.responses import CycleSummary, FetchedDeals, ProcessedBatch
from tradespine.ops.result import INTERNAL, VALIDATION_FAILED, OperationResult, start_timer

logger = get_logger(__name__)

TCC_FAMILY = "tcc-ftr"


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


def _fail(exc: Exception, action: str, elapsed_ms: float) -> OperationResult:
    """Failed result for *exc*, logged at a level matching its code."""
    result = OperationResult.from_exception(exc, f"Failed to {action}", elapsed_ms=elapsed_ms)
    if result.error.code == INTERNAL:
        logger.exception("op_failed", action=action, error=str(exc))
    else:
        logger.warning("op_failed", action=action, code=result.error.code, error=str(exc))
    return result


def _validate_family(family: str) -> str | None:
    if family not in FETCHERS:
        return f"unknown deal family {family!r}; expected one of {sorted(FETCHERS)}"
    return None


def _fetcher(ctx: OperationContext, family: str, tcc_deal_type: str | None) -> HeaderFetcher:
    kwargs = {"intercompany_names": ctx.intercompany_names}
    if family == TCC_FAMILY and tcc_deal_type is not None:
        kwargs["deal_type"] = tcc_deal_type
    return get_fetcher(family, ctx.ledger, **kwargs)


def _no_analytics(elapsed_ms: float) -> OperationResult:
    return OperationResult.fail(
        VALIDATION_FAILED,
        "analytics store is not configured",
        elapsed_ms=elapsed_ms,
    )


# ------------------------------------------------------------------ #
# Deal extraction
# ------------------------------------------------------------------ #


def fetch_deals(
    ctx: OperationContext,
    request: FetchDealsRequest,
) -> OperationResult[FetchedDeals]:
    """Fetch the headers of one family changed since ``last_run_time``."""
    timer = start_timer()

    problem = _validate_family(request.family)
    if problem:
        return OperationResult.fail(VALIDATION_FAILED, problem, elapsed_ms=timer.elapsed_ms)

    with LogContext(request_id=ctx.request_id, family=request.family):
        try:
            fetcher = _fetcher(ctx, request.family, request.tcc_deal_type)
            deals = fetcher.fetch(request.trade_date, request.last_run_time)
        except Exception as exc:
            return _fail(exc, f"fetch {request.family} deals", timer.elapsed_ms)

    return OperationResult.ok(
        FetchedDeals(family=request.family, deal_type=fetcher.deal_type, deals=deals),
        elapsed_ms=timer.elapsed_ms,
    )


def fetch_deals_by_keys(
    ctx: OperationContext,
    request: FetchByKeysRequest,
) -> OperationResult[FetchedDeals]:
    """Fetch explicit deal keys of one family (power families only)."""
    timer = start_timer()

    problem = _validate_family(request.family)
    if problem:
        return OperationResult.fail(VALIDATION_FAILED, problem, elapsed_ms=timer.elapsed_ms)

    with LogContext(request_id=ctx.request_id, family=request.family):
        try:
            fetcher = _fetcher(ctx, request.family, None)
            deals = fetcher.fetch_by_keys(request.keys)
        except Exception as exc:
            return _fail(exc, f"fetch {request.family} deals by key", timer.elapsed_ms)

    return OperationResult.ok(
        FetchedDeals(family=request.family, deal_type=fetcher.deal_type, deals=deals),
        elapsed_ms=timer.elapsed_ms,
    )


def process_trades(
    ctx: OperationContext,
    request: ProcessTradesRequest,
) -> OperationResult[ProcessedBatch]:
    """Merge findings into the headers and upsert the processed trades."""
    timer = start_timer()

    if ctx.analytics is None:
        return _no_analytics(timer.elapsed_ms)

    writer = ProcessedTradeWriter(ctx.analytics)
    findings = group_findings(request.findings)

    with LogContext(request_id=ctx.request_id):
        try:
            if ctx.dry_run:
                rows = writer.build(request.headers, findings)
                return OperationResult.ok(
                    ProcessedBatch(
                        rows_written=0,
                        flagged=sum(1 for row in rows if row.anomaly_detected),
                        dry_run=True,
                    ),
                    elapsed_ms=timer.elapsed_ms,
                )
            flagged = sum(
                1
                for header in request.headers
                if any(f.is_flagged for f in findings.get(header.deal_key, ()))
            )
            written = writer.submit(request.headers, findings)
        except Exception as exc:
            return _fail(exc, "process trades", timer.elapsed_ms)

    return OperationResult.ok(
        ProcessedBatch(rows_written=written, flagged=flagged),
        elapsed_ms=timer.elapsed_ms,
    )


# ------------------------------------------------------------------ #
# Extraction runs
# ------------------------------------------------------------------ #


def get_last_extraction_run(
    ctx: OperationContext,
    request: GetLastRunRequest,
) -> OperationResult[ExtractionRun | None]:
    """Latest run for (deal_type, trade_date); ``None`` when there is none."""
    timer = start_timer()

    if not request.deal_type:
        return OperationResult.fail(
            VALIDATION_FAILED, "deal_type is required", elapsed_ms=timer.elapsed_ms
        )

    try:
        run = ctx.runs.latest(request.deal_type, request.trade_date)
    except Exception as exc:
        return _fail(exc, "get last extraction run", timer.elapsed_ms)
    return OperationResult.ok(run, elapsed_ms=timer.elapsed_ms)


def list_extraction_runs(
    ctx: OperationContext,
    request: GetLastRunRequest,
) -> OperationResult[list[ExtractionRun]]:
    """Every run for (deal_type, trade_date) in run-id order."""
    timer = start_timer()

    if not request.deal_type:
        return OperationResult.fail(
            VALIDATION_FAILED, "deal_type is required", elapsed_ms=timer.elapsed_ms
        )

    try:
        runs = ctx.runs.history(request.deal_type, request.trade_date)
    except Exception as exc:
        return _fail(exc, "list extraction runs", timer.elapsed_ms)
    return OperationResult.ok(runs, elapsed_ms=timer.elapsed_ms)


def insert_extraction_run(
    ctx: OperationContext,
    request: InsertRunRequest,
) -> OperationResult[ExtractionRun | None]:
    """Append an extraction run."""
    timer = start_timer()

    if not request.deal_type:
        return OperationResult.fail(
            VALIDATION_FAILED, "deal_type is required", elapsed_ms=timer.elapsed_ms
        )
    if ctx.dry_run:
        return OperationResult.ok(None, elapsed_ms=timer.elapsed_ms, metadata={"dry_run": True})

    try:
        run = ctx.runs.record(request.deal_type, request.trade_date, request.cutoff)
    except Exception as exc:
        return _fail(exc, "insert extraction run", timer.elapsed_ms)
    return OperationResult.ok(run, elapsed_ms=timer.elapsed_ms)


def run_extraction_cycle(
    ctx: OperationContext,
    request: RunCycleRequest,
) -> OperationResult[CycleSummary]:
    """One incremental cycle for one family.

    Reads the cursor, fetches everything changed since its cutoff (every
    row when there is no cursor) and records a new run stamped with the
    moment the cycle started. Nothing is recorded when the fetch fails.
    """
    timer = start_timer()
    started = datetime.now()

    problem = _validate_family(request.family)
    if problem:
        return OperationResult.fail(VALIDATION_FAILED, problem, elapsed_ms=timer.elapsed_ms)
    if request.submit and ctx.analytics is None:
        return _no_analytics(timer.elapsed_ms)

    with LogContext(request_id=ctx.request_id, family=request.family):
        try:
            fetcher = _fetcher(ctx, request.family, request.tcc_deal_type)
            previous = ctx.runs.latest(fetcher.deal_type, request.trade_date)
            since = previous.cutoff if previous is not None else ZERO_TIME
            deals = fetcher.fetch(request.trade_date, since)

            written = 0
            if request.submit and not ctx.dry_run:
                written = ProcessedTradeWriter(ctx.analytics).submit(deals)

            run = None
            if not ctx.dry_run:
                run = ctx.runs.record(fetcher.deal_type, request.trade_date, started)
        except Exception as exc:
            return _fail(exc, f"run {request.family} extraction cycle", timer.elapsed_ms)

        logger.info(
            "extraction_cycle_completed",
            deal_type=fetcher.deal_type,
            deals=len(deals),
            rows_written=written,
            dry_run=ctx.dry_run,
        )

    return OperationResult.ok(
        CycleSummary(
            family=request.family,
            deal_type=fetcher.deal_type,
            since=since,
            run=run,
            deals=deals,
            rows_written=written,
        ),
        elapsed_ms=timer.elapsed_ms,
    )


# ------------------------------------------------------------------ #
# Reference data
# ------------------------------------------------------------------ #


def list_portfolio_risk_mappings(
    ctx: OperationContext,
    source_system: str | None = None,
) -> OperationResult[list[PortfolioRiskMapping]]:
    """Portfolio → risk legal entity mappings."""
    timer = start_timer()

    if ctx.analytics is None:
        return _no_analytics(timer.elapsed_ms)
    try:
        repo = ReferenceRepository(ctx.analytics, ctx.reference_source_system)
        rows = repo.portfolio_risk_mappings(source_system)
    except Exception as exc:
        return _fail(exc, "list portfolio risk mappings", timer.elapsed_ms)
    return OperationResult.ok(rows, elapsed_ms=timer.elapsed_ms)


def list_lar_base(ctx: OperationContext) -> OperationResult[list[LarBaseRecord]]:
    """Rows of the latest LAR report."""
    timer = start_timer()

    if ctx.analytics is None:
        return _no_analytics(timer.elapsed_ms)
    try:
        repo = ReferenceRepository(ctx.analytics, ctx.reference_source_system)
        rows = repo.lar_base()
    except Exception as exc:
        return _fail(exc, "list LAR base", timer.elapsed_ms)
    return OperationResult.ok(rows, elapsed_ms=timer.elapsed_ms)


__all__ = [
    "fetch_deals",
    "fetch_deals_by_keys",
    "get_last_extraction_run",
    "insert_extraction_run",
    "list_extraction_runs",
    "list_lar_base",
    "list_portfolio_risk_mappings",
    "process_trades",
    "run_extraction_cycle",
]
