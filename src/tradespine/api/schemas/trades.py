"""Request bodies for the trades router."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field

from tradespine.domain.findings import Finding
from tradespine.domain.trades import DealHeader


class FindingSchema(BaseModel):
    """One anomaly-model output for a deal."""

    model_name: str = Field(description="Name of the scoring model")
    message: str = Field(default="", description="Model message")
    deal_key: int = Field(description="Family-scoped deal key")
    deal_type: str = Field(default="", description="Deal type tag")
    scored_label: str = Field(default="", description="'NO' marks the deal as anomalous")
    payload: dict[str, Any] = Field(default_factory=dict, description="Model attributes")

    def to_finding(self) -> Finding:
        return Finding(
            model_name=self.model_name,
            message=self.message,
            deal_key=self.deal_key,
            deal_type=self.deal_type,
            scored_label=self.scored_label,
            payload=dict(self.payload),
        )


class ProcessTradesBody(BaseModel):
    """Headers to upsert, as returned by the deals endpoints, plus findings.

    Example:
        {
            "deals": [{"deal_key": 101, "deal_type": "EMSSN", "portfolio_id": 7}],
            "findings": [{"model_name": "broker", "message": "unusual broker",
                          "deal_key": 101, "scored_label": "NO"}]
        }
    """

    deals: list[dict[str, Any]] = Field(default_factory=list, description="Deal headers")
    findings: list[FindingSchema] = Field(default_factory=list, description="Model findings")

    def headers(self) -> list[DealHeader]:
        return [DealHeader.from_dict(deal) for deal in self.deals]


class InsertRunBody(BaseModel):
    """Request body for recording an extraction run."""

    deal_type: str = Field(description="Deal type tag, e.g. 'EMSSN'")
    trade_date: date = Field(description="Trade date the run covered")
    cutoff: datetime = Field(description="'Changed since' bound for the next run")
