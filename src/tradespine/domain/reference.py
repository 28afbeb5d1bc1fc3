"""Reference rows read from the analytics store.

``PortfolioRiskMapping`` ties a ledger portfolio to its risk legal entity;
``LarBaseRecord`` is one line of the latest limits-and-ratings (LAR) report.
Both are read-only for trade-spine.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from datetime import datetime
from typing import Any

from tradespine.core.timestamps import ZERO_TIME


@dataclass(frozen=True, slots=True)
class PortfolioRiskMapping:
    source_system: str
    portfolio: str
    legal_entity: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class LarBaseRecord:
    """One counterparty line of the LAR base report."""

    short_name: str = ""
    counterparty_long_name: str = ""
    parent_company: str = ""
    product: str = ""
    source_system: str = ""
    deal_type: str = ""
    netting_agreement: str = ""
    agreement_type_per_csa: str = ""
    our_threshold: float = 0.0
    counterparty_threshold: float = 0.0
    buy_tenor: str = ""
    sell_tenor: str = ""
    gross_exposure: float = 0.0
    collateral: float = 0.0
    net_position: float = 0.0
    limit_value: float = 0.0
    limit_currency: str = ""
    limit_availability: str = ""
    exposure_limit: float = 0.0
    expiration_date: str = ""
    market_type: str = ""
    industry_code: str = ""
    sp_rating: str = ""
    moody_rating: str = ""
    final_internal_rating: str = ""
    final_rating: str = ""
    equifax: str = ""
    amended_by: str = ""
    effective_date: datetime = ZERO_TIME
    review_date: datetime = ZERO_TIME
    dodd_frank_classification: str = ""
    report_created_date: datetime = ZERO_TIME
    boost: str = ""
    trading_entity: str = ""
    legal_entity: str = ""
    agmt: str = ""
    csa: str = ""
    tenor: str = ""
    credit_limit: float = 0.0
    reporting_date: datetime = ZERO_TIME
    created_at: datetime = ZERO_TIME

    @classmethod
    def field_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    def to_dict(self) -> dict[str, Any]:
        return {
            k: v.isoformat() if isinstance(v, datetime) else v
            for k, v in asdict(self).items()
        }


__all__ = [
    "LarBaseRecord",
    "PortfolioRiskMapping",
]
