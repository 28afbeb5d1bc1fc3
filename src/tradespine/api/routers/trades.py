"""
Trades router: deal extraction, processed-trade upsert, extraction runs
and reference data.

Endpoints:
    GET    /trades/deals/{family}                          Changed deals of a family
    GET    /trades/deals/{family}/by-keys?keys=1&keys=2    Deals by key (power families)
    POST   /trades/process                                 Merge findings and upsert
    GET    /trades/extraction-runs/{trade_date}/{deal_type}  Latest extraction run
    POST   /trades/extraction-runs                         Record an extraction run
    GET    /trades/portfolio-risk-mappings                 Portfolio → risk entity
    GET    /trades/lar-base                                Latest LAR report

Tags:
    trade-spine, api, trades, extraction, watermark
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from fastapi import APIRouter, Path, Query, Request

from tradespine.api.deps import OpContext
from tradespine.api.middleware.errors import problem_response
from tradespine.api.schemas.common import SuccessResponse
from tradespine.api.schemas.trades import InsertRunBody, ProcessTradesBody
from tradespine.api.utils import _dc, _handle_error
from tradespine.ops import trades as ops
from tradespine.ops.requests import (
    FetchByKeysRequest,
    FetchDealsRequest,
    GetLastRunRequest,
    InsertRunRequest,
    ProcessTradesRequest,
)
from tradespine.ops.result import VALIDATION_FAILED

router = APIRouter(prefix="/trades")


@router.get("/deals/{family}", response_model=SuccessResponse[dict[str, Any]])
def fetch_deals(
    ctx: OpContext,
    request: Request,
    family: str = Path(description="Deal family, e.g. 'power-swap'"),
    trade_date: date = Query(description="Trade date (ISO 8601)"),
    last_run_time: datetime | None = Query(
        None, description="Only deals changed after this moment; omit for all"
    ),
    deal_type: str | None = Query(
        None, description="TCC/FTR deal type: 'FTROPT' | 'FTRSWP' | 'TCCSWP'"
    ),
):
    """Reconstructed deal headers of one family for a trade date."""
    result = ops.fetch_deals(
        ctx,
        FetchDealsRequest(
            family=family,
            trade_date=trade_date,
            last_run_time=last_run_time,
            tcc_deal_type=deal_type,
        ),
    )
    if not result.success:
        return _handle_error(result, str(request.url))
    return SuccessResponse(data=_dc(result.data), elapsed_ms=result.elapsed_ms)


@router.get("/deals/{family}/by-keys", response_model=SuccessResponse[dict[str, Any]])
def fetch_deals_by_keys(
    ctx: OpContext,
    request: Request,
    family: str = Path(description="Deal family"),
    keys: list[int] = Query(description="Deal keys; repeat the parameter"),
):
    """Deal headers for explicit keys (power, power-swap and power-options)."""
    result = ops.fetch_deals_by_keys(ctx, FetchByKeysRequest(family=family, keys=keys))
    if not result.success:
        return _handle_error(result, str(request.url))
    return SuccessResponse(data=_dc(result.data), elapsed_ms=result.elapsed_ms)


@router.post("/process", response_model=SuccessResponse[dict[str, Any]])
def process_trades(ctx: OpContext, request: Request, body: ProcessTradesBody):
    """Merge flagged findings into the deals and upsert the processed trades."""
    try:
        headers = body.headers()
    except (TypeError, ValueError) as e:
        return problem_response(
            status=400,
            title=f"Invalid deal payload: {e}",
            instance=str(request.url),
            code=VALIDATION_FAILED,
        )
    result = ops.process_trades(
        ctx,
        ProcessTradesRequest(
            headers=headers,
            findings=[finding.to_finding() for finding in body.findings],
        ),
    )
    if not result.success:
        return _handle_error(result, str(request.url))
    return SuccessResponse(data=_dc(result.data), elapsed_ms=result.elapsed_ms)


@router.get(
    "/extraction-runs/{trade_date}/{deal_type}",
    response_model=SuccessResponse[dict[str, Any] | None],
)
def get_last_extraction_run(
    ctx: OpContext,
    request: Request,
    trade_date: date = Path(description="Trade date (ISO 8601)"),
    deal_type: str = Path(description="Deal type tag, e.g. 'EMSSN'"),
):
    """Latest extraction run for the pair; ``data`` is null when none exists."""
    result = ops.get_last_extraction_run(
        ctx, GetLastRunRequest(deal_type=deal_type, trade_date=trade_date)
    )
    if not result.success:
        return _handle_error(result, str(request.url))
    return SuccessResponse(
        data=result.data.to_dict() if result.data else None,
        elapsed_ms=result.elapsed_ms,
    )


@router.post(
    "/extraction-runs",
    response_model=SuccessResponse[dict[str, Any] | None],
    status_code=201,
)
def insert_extraction_run(ctx: OpContext, request: Request, body: InsertRunBody):
    """Append an extraction run."""
    result = ops.insert_extraction_run(
        ctx,
        InsertRunRequest(deal_type=body.deal_type, trade_date=body.trade_date, cutoff=body.cutoff),
    )
    if not result.success:
        return _handle_error(result, str(request.url))
    return SuccessResponse(
        data=result.data.to_dict() if result.data else None,
        elapsed_ms=result.elapsed_ms,
    )


@router.get("/portfolio-risk-mappings", response_model=SuccessResponse[list[dict[str, Any]]])
def list_portfolio_risk_mappings(
    ctx: OpContext,
    request: Request,
    source_system: str | None = Query(None, description="Source-system tag; defaults to the ledger's"),
):
    """Portfolio → risk legal entity mappings."""
    result = ops.list_portfolio_risk_mappings(ctx, source_system)
    if not result.success:
        return _handle_error(result, str(request.url))
    return SuccessResponse(data=[_dc(row) for row in result.data], elapsed_ms=result.elapsed_ms)


@router.get("/lar-base", response_model=SuccessResponse[list[dict[str, Any]]])
def list_lar_base(ctx: OpContext, request: Request):
    """Rows of the latest LAR report."""
    result = ops.list_lar_base(ctx)
    if not result.success:
        return _handle_error(result, str(request.url))
    return SuccessResponse(data=[_dc(row) for row in result.data], elapsed_ms=result.elapsed_ms)
