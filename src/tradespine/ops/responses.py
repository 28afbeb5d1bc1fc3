"""
Typed response objects for operations.

Payloads beyond the generic :class:`OperationResult` envelope. Responses
carry only domain data: no HTTP status codes, no CLI formatting.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from tradespine.core.watermarks import ExtractionRun
from tradespine.domain.trades import DealHeader


@dataclass(slots=True)
class FetchedDeals:
    """Payload of :func:`tradespine.ops.trades.fetch_deals` and the by-keys
    variant."""

    family: str
    deal_type: str
    deals: list[DealHeader] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.deals)

    def to_dict(self) -> dict[str, Any]:
        return {
            "family": self.family,
            "deal_type": self.deal_type,
            "count": self.count,
            "deals": [deal.to_dict() for deal in self.deals],
        }


@dataclass(frozen=True, slots=True)
class ProcessedBatch:
    """Payload of :func:`tradespine.ops.trades.process_trades`."""

    rows_written: int
    flagged: int
    dry_run: bool = False


@dataclass(slots=True)
class CycleSummary:
    """Payload of :func:`tradespine.ops.trades.run_extraction_cycle`."""

    family: str
    deal_type: str
    since: datetime
    run: ExtractionRun | None
    deals: list[DealHeader] = field(default_factory=list)
    rows_written: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "family": self.family,
            "deal_type": self.deal_type,
            "since": self.since.isoformat(),
            "run": self.run.to_dict() if self.run else None,
            "count": len(self.deals),
            "rows_written": self.rows_written,
        }


@dataclass(frozen=True, slots=True)
class SchemaInitResult:
    """Payload of :func:`tradespine.ops.database.initialize_analytics`."""

    tables: list[str] = field(default_factory=list)
    dry_run: bool = False
