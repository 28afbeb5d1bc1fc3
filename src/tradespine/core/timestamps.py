"""
Timestamp utilities for trade-spine (stdlib-only).

Features:
    - **UTC utilities:** utc_now(), to_iso8601(), from_iso8601()
    - **ZERO_TIME:** the zero value for dates that the ledger left NULL
    - **Layout fallback:** parse_with_layouts() tries an ordered list of
      ``strptime`` layouts and returns ``Ok(datetime)`` or
      ``Err(ExecutionTimestampError)``
    - **Execution timestamps:** the ledger stores the execution moment as
      two text attributes (a date and a 12-hour clock time);
      parse_execution_timestamp() and parse_execution_date() turn them
      into naive datetimes

Examples:
    >>> parse_execution_timestamp("2022-05-05", "08:18:55 AM")
    datetime.datetime(2022, 5, 5, 8, 18, 55)
    >>> parse_execution_timestamp("05/23/2022", "12:00:00 AM")
    datetime.datetime(2022, 5, 23, 0, 0)
    >>> parse_execution_timestamp(None, "12:00:00 AM") is None
    True

Tags:
    timestamps, utc, datetime, parsing, trade-spine, stdlib-only
"""

from __future__ import annotations

from datetime import UTC, date, datetime

from tradespine.core.errors import ExecutionTimestampError
from tradespine.core.result import Err, Ok, Result

ZERO_TIME = datetime.min

DATETIME_LAYOUTS: tuple[str, ...] = (
    "%Y-%m-%d %I:%M:%S %p",
    "%m/%d/%Y %I:%M:%S %p",
)

DATE_LAYOUTS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%m/%d/%Y",
)


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def to_iso8601(dt: datetime | None) -> str | None:
    """Convert datetime to ISO 8601 string."""
    if dt is None:
        return None
    return dt.isoformat()


def from_iso8601(s: str | None) -> datetime | None:
    """Parse ISO 8601 string to datetime."""
    if s is None:
        return None
    return datetime.fromisoformat(s)


def coerce_datetime(value: datetime | date | str | None) -> datetime:
    """Normalize a driver value to a datetime; NULL becomes ``ZERO_TIME``.

    sqlite3 hands back ISO strings, oracledb and psycopg2 hand back
    ``datetime`` (or ``date``) objects.
    """
    if value is None or value == "":
        return ZERO_TIME
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return datetime.fromisoformat(value)


def parse_with_layouts(text: str, layouts: tuple[str, ...]) -> Result[datetime]:
    """Try each layout in order; the first that parses wins."""
    for layout in layouts:
        try:
            return Ok(datetime.strptime(text, layout))
        except ValueError:
            continue
    return Err(ExecutionTimestampError(text, layouts))


def parse_execution_timestamp(
    execution_date: str | None, execution_time: str | None
) -> datetime | None:
    """Combine the execution date and time attributes.

    Returns ``None`` when either attribute is NULL or empty. Anything after
    the first space of the date attribute is dropped before the time is
    appended.

    Raises:
        ExecutionTimestampError: if no layout matches.
    """
    if not execution_date or not execution_time:
        return None
    day = execution_date.split(" ", 1)[0]
    return parse_with_layouts(f"{day} {execution_time}", DATETIME_LAYOUTS).unwrap()


def parse_execution_date(execution_date: str | None) -> datetime | None:
    """Parse a date-only execution attribute.

    Raises:
        ExecutionTimestampError: if no layout matches.
    """
    if not execution_date:
        return None
    return parse_with_layouts(execution_date, DATE_LAYOUTS).unwrap()


__all__ = [
    "DATETIME_LAYOUTS",
    "DATE_LAYOUTS",
    "ZERO_TIME",
    "coerce_datetime",
    "from_iso8601",
    "parse_execution_date",
    "parse_execution_timestamp",
    "parse_with_layouts",
    "to_iso8601",
    "utc_now",
]
