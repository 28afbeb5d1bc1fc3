"""Domain model for trade-spine (stdlib dataclasses only)."""

from tradespine.domain.findings import FLAGGED_LABEL, Finding, ProcessedTrade
from tradespine.domain.reference import LarBaseRecord, PortfolioRiskMapping
from tradespine.domain.trades import (
    DealHeader,
    DealTerm,
    PriceIndex,
    copy_indexes,
    direction_from_volume,
)

__all__ = [
    "FLAGGED_LABEL",
    "DealHeader",
    "DealTerm",
    "Finding",
    "LarBaseRecord",
    "PortfolioRiskMapping",
    "PriceIndex",
    "ProcessedTrade",
    "copy_indexes",
    "direction_from_volume",
]
