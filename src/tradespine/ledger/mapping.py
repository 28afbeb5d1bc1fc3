"""
Row-to-model helpers shared by the family fetchers.

The ledger hands back plain dict rows with lower-case keys. These helpers
apply the NULL defaults of the domain model (``""``, ``0``, ``0.0``,
``ZERO_TIME``) and build the header fields every family has in common.
Anything family-specific stays in the fetcher that owns it.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from tradespine.core.timestamps import ZERO_TIME, coerce_datetime, parse_execution_timestamp
from tradespine.domain.trades import FLAG_NO, FLAG_YES, NO, NOT_APPLICABLE, YES, DealHeader

Row = Mapping[str, Any]


# ---------------------------------------------------------------------------
# Scalar coercion
# ---------------------------------------------------------------------------


def text(row: Row, column: str, default: str = "") -> str:
    value = row.get(column)
    if value is None:
        return default
    return str(value)


def num(row: Row, column: str) -> float:
    value = row.get(column)
    if value is None:
        return 0.0
    return float(value)


def integer(row: Row, column: str) -> int:
    value = row.get(column)
    if value is None:
        return 0
    return int(value)


def when(row: Row, column: str) -> datetime:
    return coerce_datetime(row.get(column))


def optional_text(row: Row, column: str) -> str | None:
    value = row.get(column)
    return None if value is None else str(value)


# ---------------------------------------------------------------------------
# Derived flags
# ---------------------------------------------------------------------------


def interaffiliate_flag(
    company: str,
    legal_entity: str,
    company_key: int,
    legal_entity_key: int,
    names: Iterable[str],
) -> str:
    """``Y`` for a trade between two in-house entities, else ``N``.

    Both short names must be intercompany names and the two keys must differ.

    Examples:
        >>> interaffiliate_flag("SENA", "STRM", 1, 2, ["SENA", "STRM"])
        'Y'
        >>> interaffiliate_flag("SENA", "SENA", 1, 1, ["SENA"])
        'N'
    """
    names = set(names)
    if company in names and legal_entity in names and company_key != legal_entity_key:
        return FLAG_YES
    return FLAG_NO


def has_broker(row: Row) -> str:
    """Broker presence is decided by the broker key, never by the name."""
    return NO if row.get("broker_key") is None else YES


def broker_name(row: Row) -> str:
    return text(row, "broker", NOT_APPLICABLE)


# ---------------------------------------------------------------------------
# Header
# ---------------------------------------------------------------------------


def base_header(row: Row, key_column: str, deal_type: str | None = None) -> DealHeader:
    """Header fields every family selects the same way.

    Broker fields are filled only when the family joins the broker fees;
    direction, interaffiliate, exotic and execution fields are left to the
    fetcher.
    """
    header = DealHeader(
        deal_key=integer(row, key_column),
        deal_type=deal_type if deal_type is not None else text(row, "deal_type"),
        total_quantity=num(row, "total_quantity"),
        transaction_date=when(row, "transaction_date"),
        company_key=integer(row, "cy_company_key"),
        company=text(row, "company"),
        company_long_name=text(row, "companylongname"),
        company_code=text(row, "companycode"),
        legal_entity=text(row, "legalentity"),
        legal_entity_long_name=text(row, "legalentitylongname"),
        legal_entity_key=integer(row, "cylegalentitykey"),
        contract=text(row, "contractnumber"),
        confirm_format=text(row, "confirmformat"),
        region=text(row, "region"),
        hedge_key=text(row, "hs_hedge_key"),
        portfolio_id=integer(row, "prtportfolio"),
        portfolio=text(row, "portfolio"),
        trader=text(row, "ur_trader"),
        time_zone=text(row, "tz_time_zone"),
        created_by=text(row, "createdby"),
        created_at=when(row, "create_date"),
        modified_by=text(row, "modifiedby"),
        modified_at=when(row, "modify_date"),
    )
    if "broker_key" in row:
        header.broker_key = integer(row, "broker_key")
        header.has_broker = has_broker(row)
        header.broker = broker_name(row)
    return header


def apply_ib(header: DealHeader, row: Row) -> None:
    """Inter-book portfolio and trader."""
    header.ib_portfolio_id = integer(row, "ib_prt_portfolio")
    header.ib_portfolio = text(row, "ib_portfolio")
    header.ib_trader = text(row, "ib_ur_trader")


def apply_execution_time(header: DealHeader, row: Row) -> None:
    """Parse the execution date/time attributes when both are present.

    Raises:
        ExecutionTimestampError: if no layout matches.
    """
    parsed = parse_execution_timestamp(
        optional_text(row, "execution_date"), optional_text(row, "execution_time")
    )
    header.execution_time = parsed if parsed is not None else ZERO_TIME


def apply_interaffiliate(header: DealHeader, names: Iterable[str]) -> None:
    header.interaffiliate_flag = interaffiliate_flag(
        header.company,
        header.legal_entity,
        header.company_key,
        header.legal_entity_key,
        names,
    )


__all__ = [
    "Row",
    "apply_execution_time",
    "apply_ib",
    "apply_interaffiliate",
    "base_header",
    "broker_name",
    "has_broker",
    "integer",
    "interaffiliate_flag",
    "num",
    "optional_text",
    "text",
    "when",
]
