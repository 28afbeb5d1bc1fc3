"""
HeaderFetcher - the shared shape of the eleven family fetchers.

Manifesto:
    Each deal family differs in which columns it selects, which flags it
    defaults and whether its terms live on the header row or in a separate
    table. Those differences are the business rules, so every family keeps
    its own explicit ``map_row``. What is shared is the control flow:

    - **Two phases, no carried state:** ``classify(rows)`` then
      ``splice(classified, fetched)``; nothing survives the call
    - **Row order kept:** headers come back in primary-query row order
    - **All or nothing:** a mapping, parse or store error aborts the fetch
      and no partial list is returned
    - **No retries:** store errors are logged at debug level and re-raised

Architecture:
    ::

        fetch(trade_date, last_run_time)
            │
            ├── query.since() ─────────────► ledger rows
            ├── classify(rows)
            │     map_row(row) -> (header, term | None, RowClass)
            │     COMPLETE      → term embedded in header
            │     NEEDS_LOOKUP  → key queued, term kept as side entry
            ├── correlate(classified) ─────► TermCorrelator rounds
            └── splice(classified, fetched) → list[DealHeader]

Tags:
    fetcher, ledger, deal-header, correlation, trade-spine
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, ClassVar

from tradespine.core.errors import UnsupportedLookupError
from tradespine.core.logging import get_logger
from tradespine.core.protocols import RowSource
from tradespine.core.settings import DEFAULT_INTERCOMPANY_NAMES
from tradespine.core.timestamps import ZERO_TIME
from tradespine.core.watermarks import trade_day
from tradespine.domain.trades import DealHeader, DealTerm, PriceIndex
from tradespine.ledger.correlator import TermCorrelator
from tradespine.ledger.mapping import Row
from tradespine.ledger.queries import HeaderQuery, ordered_keys

logger = get_logger(__name__)


class RowClass(str, Enum):
    """How a primary row's term is resolved."""

    COMPLETE = "complete"
    NEEDS_LOOKUP = "needs_lookup"


@dataclass(slots=True)
class Classified:
    """Output of the classify phase.

    Attributes:
        headers: Every header, in primary-query row order.
        complete: Headers whose terms are fully known from the header row.
        needs_lookup: Correlation keys in first-appearance order.
        side_table: Initial-term side entries keyed by correlation key.
        initial: Each header's inline or initial term, parallel to
            ``headers`` (``None`` where the row had none).
    """

    headers: list[DealHeader] = field(default_factory=list)
    complete: list[DealHeader] = field(default_factory=list)
    needs_lookup: list[int] = field(default_factory=list)
    side_table: dict[int, DealTerm] = field(default_factory=dict)
    initial: list[DealTerm | None] = field(default_factory=list)

    def pending(self) -> list[DealHeader]:
        """Headers waiting for a term lookup, in row order."""
        done = {id(header) for header in self.complete}
        return [header for header in self.headers if id(header) not in done]


@dataclass(slots=True)
class Fetched:
    """Output of the correlation rounds, grouped by deal key."""

    terms: dict[int, list[DealTerm]] = field(default_factory=dict)
    indexes: dict[int, list[PriceIndex]] = field(default_factory=dict)


class HeaderFetcher(ABC):
    """Base class for family fetchers.

    Subclasses set ``family`` (registry name), ``run_tag`` (the deal type
    under which extraction runs are recorded), ``query`` and ``key_column``,
    and implement :meth:`map_row`. Families with a correlation round
    override :meth:`correlate` and :meth:`splice`.

    Args:
        source: Ledger row source (usually an :class:`OracleAdapter`).
        intercompany_names: Short names that count as in-house entities.
    """

    family: ClassVar[str]
    run_tag: ClassVar[str]
    query: ClassVar[HeaderQuery]
    key_column: ClassVar[str]
    supports_by_keys: ClassVar[bool] = False

    def __init__(
        self,
        source: RowSource,
        intercompany_names: Iterable[str] = DEFAULT_INTERCOMPANY_NAMES,
    ) -> None:
        self._source = source
        self._intercompany_names = frozenset(intercompany_names)

    @property
    def deal_type(self) -> str:
        return self.run_tag

    @property
    def correlator(self) -> TermCorrelator:
        return TermCorrelator(self._source, self.deal_type)

    # -- phase 1 --------------------------------------------------------------

    @abstractmethod
    def map_row(self, row: Row) -> tuple[DealHeader, DealTerm | None, RowClass]:
        """Map one primary row to a header, its inline/initial term and class."""

    def correlation_key(self, header: DealHeader, term: DealTerm | None) -> int:
        """Key queued for the term lookup (the deal key unless overridden)."""
        return header.deal_key

    def classify(self, rows: Sequence[Row]) -> Classified:
        classified = Classified()
        for row in rows:
            header, term, row_class = self.map_row(row)
            classified.headers.append(header)
            classified.initial.append(term)
            if row_class is RowClass.COMPLETE:
                if term is not None:
                    header.terms.append(term)
                classified.complete.append(header)
                continue
            key = self.correlation_key(header, term)
            classified.needs_lookup.append(key)
            if term is not None:
                classified.side_table[key] = term
        classified.needs_lookup = ordered_keys(classified.needs_lookup)
        return classified

    # -- phase 2 --------------------------------------------------------------

    def correlate(self, classified: Classified) -> Fetched:
        """Run the family's correlation rounds (none by default)."""
        return Fetched()

    def splice(self, classified: Classified, fetched: Fetched) -> list[DealHeader]:
        """Attach fetched terms to headers (nothing to attach by default)."""
        return classified.headers

    # -- entry points ---------------------------------------------------------

    def since_sql(self) -> str:
        return self.query.since()

    def since_params(
        self, trade_date: datetime | date, last_run_time: datetime | None
    ) -> dict[str, Any]:
        return {
            "trade_date": trade_day(trade_date),
            "last_run_time": last_run_time if last_run_time is not None else ZERO_TIME,
        }

    def fetch(
        self, trade_date: datetime | date, last_run_time: datetime | None = None
    ) -> list[DealHeader]:
        """Headers for *trade_date* changed after *last_run_time*.

        ``None`` as the watermark means every row counts as changed.
        """
        return self._run(
            self.since_sql(),
            self.since_params(trade_date, last_run_time),
            lookup="since",
        )

    def fetch_by_keys(self, keys: Iterable[int]) -> list[DealHeader]:
        """Headers for explicit deal keys, mapped exactly as by :meth:`fetch`.

        Raises:
            UnsupportedLookupError: if the family has no by-keys lookup.
        """
        if not self.supports_by_keys:
            raise UnsupportedLookupError(self.deal_type)
        keys = ordered_keys(int(key) for key in keys)
        if not keys:
            return []
        sql, params = self.query.by_keys(keys)
        return self._run(sql, params, lookup="by_keys")

    def _run(self, sql: str, params: dict[str, Any], lookup: str) -> list[DealHeader]:
        logger.info("fetch_started", family=self.family, deal_type=self.deal_type, lookup=lookup)
        try:
            rows = self._source.query(sql, params)
        except Exception as e:
            logger.debug(
                "header_query_failed", family=self.family, deal_type=self.deal_type, error=str(e)
            )
            raise
        classified = self.classify(rows)
        fetched = self.correlate(classified)
        headers = self.splice(classified, fetched)
        logger.info(
            "fetch_completed",
            family=self.family,
            deal_type=self.deal_type,
            rows=len(rows),
            headers=len(headers),
            lookup_keys=len(classified.needs_lookup),
        )
        return headers


__all__ = [
    "Classified",
    "Fetched",
    "HeaderFetcher",
    "RowClass",
]
