"""Anomaly findings and the processed-trade rows they are merged into.

A ``Finding`` is one scoring model's verdict on one deal. Only findings whose
scored label equals ``FLAGGED_LABEL`` take part in the merge; every other
label is ignored entirely.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

FLAGGED_LABEL = "NO"


@dataclass(frozen=True, slots=True)
class Finding:
    """One anomaly-model output for a deal.

    ``payload`` carries the model-specific attributes (company, trader,
    source, location, broker, ...) and must be JSON-serializable.
    """

    model_name: str
    message: str
    deal_key: int
    deal_type: str = ""
    scored_label: str = ""
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def is_flagged(self) -> bool:
        return self.scored_label == FLAGGED_LABEL

    def summary(self) -> str:
        """``"<model_name> <message>"``, the form stored in the test result."""
        return f"{self.model_name} {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "model_name": self.model_name,
            "message": self.message,
            "deal_key": self.deal_key,
            "deal_type": self.deal_type,
            "scored_label": self.scored_label,
            "payload": dict(self.payload),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Finding:
        return cls(
            model_name=data["model_name"],
            message=data.get("message", ""),
            deal_key=int(data["deal_key"]),
            deal_type=data.get("deal_type", ""),
            scored_label=data.get("scored_label", ""),
            payload=dict(data.get("payload") or {}),
        )


@dataclass(frozen=True, slots=True)
class ProcessedTrade:
    """One row of the processed-trades upsert."""

    trade_id: int
    deal_type: str
    portfolio_id: int
    transaction_date: datetime
    trade_detail: str
    anomaly_detected: bool
    anomaly_test_result: str | None = None
    model_parameters: str | None = None


__all__ = [
    "FLAGGED_LABEL",
    "Finding",
    "ProcessedTrade",
]
