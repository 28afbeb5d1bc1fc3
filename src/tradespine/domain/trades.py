"""
Reconstructed trade model: header → terms → price indexes.

A ``DealHeader`` is rebuilt fresh on every extraction cycle from flat ledger
rows. Its ``terms`` hold the pricing/volume periods, and each term owns up
to two lists of ``PriceIndex`` references (one per formula slot).

NULL source values never survive into the model: text defaults to ``""``,
numbers to ``0`` / ``0.0`` and dates to ``ZERO_TIME``.

STDLIB ONLY - NO PYDANTIC.

Tags:
    domain, trades, deal-header, deal-term, price-index, trade-spine
"""

from __future__ import annotations

import copy
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from typing import Any

from tradespine.core.timestamps import ZERO_TIME

# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------

PURCHASE = "PURCHASE"
SALE = "SALE"
UNDETERMINED = "UNDETERMINED"
PAYABLE = "Payable"
RECEIVABLE = "Receivable"

YES = "YES"
NO = "NO"
NOT_APPLICABLE = "NA"

FLAG_YES = "Y"
FLAG_NO = "N"


def direction_from_volume(volume: float | int | None) -> str:
    """Direction implied by the sign of a signed volume."""
    if volume is None:
        return UNDETERMINED
    if volume > 0:
        return PURCHASE
    if volume < 0:
        return SALE
    return UNDETERMINED


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class PriceIndex:
    """Reference to an external price series."""

    vol_seq: int = 0
    publication: str = ""
    pub_index: str = ""
    frequency: str = ""


@dataclass(slots=True)
class DealTerm:
    """One pricing/volume period of a deal.

    ``vol_seq`` is unique within its header and is 0 for families that never
    carry more than one term.
    """

    vol_seq: int = 0
    beg_date: datetime = ZERO_TIME
    end_date: datetime = ZERO_TIME
    pool1: str = ""
    product1: str = ""
    point_code1: str = ""
    pool2: str = ""
    product2: str = ""
    point_code2: str = ""
    holiday_schedule: str = ""
    formula1: str = ""
    indexes1: list[PriceIndex] = field(default_factory=list)
    formula2: str = ""
    indexes2: list[PriceIndex] = field(default_factory=list)
    price_type: str = ""
    fixed_price: float = 0.0
    volume: float = 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DealTerm:
        values = _known(cls, data)
        for slot in ("indexes1", "indexes2"):
            values[slot] = [PriceIndex(**_known(PriceIndex, i)) for i in data.get(slot) or []]
        return cls(**values)


@dataclass(slots=True)
class DealHeader:
    """One trading transaction as reconstructed from the ledger."""

    deal_key: int
    deal_type: str = ""
    total_quantity: float = 0.0
    transaction_date: datetime = ZERO_TIME
    direction: str = ""
    company_key: int = 0
    company_code: str = ""
    company: str = ""
    company_long_name: str = ""
    hedge_key: str = ""
    portfolio_id: int = 0
    portfolio: str = ""
    trader: str = ""
    broker_key: int = 0
    broker: str = ""
    has_broker: str = ""
    time_zone: str = ""
    exercise_zone: str = ""
    ib_portfolio_id: int = 0
    ib_portfolio: str = ""
    ib_trader: str = ""
    exercised_option_key: int = 0
    contract: str = ""
    confirm_format: str = ""
    legal_entity_key: int = 0
    legal_entity: str = ""
    legal_entity_long_name: str = ""
    region: str = ""
    created_by: str = ""
    created_at: datetime = ZERO_TIME
    modified_by: str = ""
    modified_at: datetime = ZERO_TIME
    option_type: str = ""
    execution_time: datetime = ZERO_TIME
    exotic_flag: str = ""
    interaffiliate_flag: str = ""
    start_date: datetime = ZERO_TIME
    end_date: datetime = ZERO_TIME
    terms: list[DealTerm] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form with ISO 8601 timestamps, suitable for ``json.dumps``."""
        return _jsonable(asdict(self))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DealHeader:
        """Inverse of :meth:`to_dict`; unknown keys are ignored."""
        values = _known(cls, data)
        values["terms"] = [DealTerm.from_dict(t) for t in data.get("terms") or []]
        return cls(**values)


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    return value


def _known(cls: type, data: dict[str, Any]) -> dict[str, Any]:
    """Fields of *cls* present in *data*, with ISO strings parsed for datetime fields.

    ``None`` falls back to the field default, so a NULL never reaches the model.

    Raises:
        TypeError: if a datetime field holds something other than an ISO string.
        ValueError: if an ISO string does not parse.
    """
    values: dict[str, Any] = {}
    for f in fields(cls):
        if f.name not in data or f.name in ("terms", "indexes1", "indexes2"):
            continue
        value = data[f.name]
        if value is None:
            continue
        if f.type == "datetime" and not isinstance(value, datetime):
            if not isinstance(value, str):
                raise TypeError(f"{f.name} must be an ISO 8601 string, got {value!r}")
            value = datetime.fromisoformat(value)
        values[f.name] = value
    return values


def copy_indexes(indexes: list[PriceIndex]) -> list[PriceIndex]:
    """Independent copies, so that no two term slots share an index."""
    return [copy.copy(index) for index in indexes]


__all__ = [
    "FLAG_NO",
    "FLAG_YES",
    "NO",
    "NOT_APPLICABLE",
    "PAYABLE",
    "PURCHASE",
    "RECEIVABLE",
    "SALE",
    "UNDETERMINED",
    "YES",
    "DealHeader",
    "DealTerm",
    "PriceIndex",
    "copy_indexes",
    "direction_from_volume",
]
