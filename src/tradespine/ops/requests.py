"""
Typed request objects for operations.

Each dataclass is the input contract of one operation function. Requests
carry only validated, transport-agnostic data: no raw HTTP bodies, no typer
options.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

from tradespine.domain.findings import Finding
from tradespine.domain.trades import DealHeader

# ------------------------------------------------------------------ #
# Deal extraction
# ------------------------------------------------------------------ #


@dataclass(frozen=True, slots=True)
class FetchDealsRequest:
    """Request for :func:`tradespine.ops.trades.fetch_deals`.

    Attributes:
        family: Registered family name (``power``, ``tcc-ftr``, ...).
        trade_date: Trade date to extract.
        last_run_time: "Changed since" bound; ``None`` means every row.
        tcc_deal_type: Deal type for the ``tcc-ftr`` family
            (``FTROPT``, ``FTRSWP`` or ``TCCSWP``).
    """

    family: str
    trade_date: date | datetime
    last_run_time: datetime | None = None
    tcc_deal_type: str | None = None


@dataclass(frozen=True, slots=True)
class FetchByKeysRequest:
    """Request for :func:`tradespine.ops.trades.fetch_deals_by_keys`."""

    family: str
    keys: list[int] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ProcessTradesRequest:
    """Request for :func:`tradespine.ops.trades.process_trades`."""

    headers: list[DealHeader] = field(default_factory=list)
    findings: list[Finding] = field(default_factory=list)


# ------------------------------------------------------------------ #
# Extraction runs
# ------------------------------------------------------------------ #


@dataclass(frozen=True, slots=True)
class GetLastRunRequest:
    """Request for :func:`tradespine.ops.trades.get_last_extraction_run`."""

    deal_type: str
    trade_date: date | datetime


@dataclass(frozen=True, slots=True)
class InsertRunRequest:
    """Request for :func:`tradespine.ops.trades.insert_extraction_run`."""

    deal_type: str
    trade_date: date | datetime
    cutoff: datetime


@dataclass(frozen=True, slots=True)
class RunCycleRequest:
    """Request for :func:`tradespine.ops.trades.run_extraction_cycle`.

    Attributes:
        family: Registered family name.
        trade_date: Trade date to extract.
        tcc_deal_type: Deal type for the ``tcc-ftr`` family.
        submit: Also upsert the fetched headers (without findings) into
            the processed-trades table.
    """

    family: str
    trade_date: date | datetime
    tcc_deal_type: str | None = None
    submit: bool = False
