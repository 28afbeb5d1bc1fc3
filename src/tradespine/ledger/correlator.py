"""
Term/index correlator.

A header fetcher emits correlation keys (deal keys, or deal key + volume
sequence pairs); the correlator resolves them against the secondary (term)
and tertiary (index) tables, groups the rows by deal key and splices them
back onto the headers.

Manifesto:
    - **Deterministic keys:** keys are de-duplicated in first-appearance
      order, so bind names and bind values are reproducible run to run
    - **One query per round:** every round is a single SELECT with an IN (or
      pair) predicate; an empty key set issues no query at all
    - **Source order kept:** rows are grouped by key in the order the ledger
      returned them
    - **Positional sequence:** tables without a sequence column get
      ``vol_seq`` values ``0..N-1`` per key
    - **No sharing:** spliced index lists are copies; no two terms ever hold
      the same PriceIndex object

Architecture:
    ::

        fetcher.classify(rows)
              │  needs_lookup = [k1, k2, k1]
              ▼
        fetch_terms(keys, TermSource) ──► SELECT ... WHERE key IN (:k0, :k1)
              │  {k1: [t0, t1], k2: [t0]}
              ▼
        fetch_indexes(pairs, IndexSource) ──► SELECT ... WHERE (key, seq) ...
              │  {k1: [i(seq=1)]}
              ▼
        attach_indexes(terms, indexes)    splice_terms(header, fetched, side)

Tags:
    correlation, terms, indexes, ledger, trade-spine
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from tradespine.core.logging import get_logger
from tradespine.core.protocols import RowSource
from tradespine.domain.trades import DealHeader, DealTerm, PriceIndex, copy_indexes
from tradespine.ledger.mapping import Row, integer, text
from tradespine.ledger.queries import in_predicate, ordered_keys, pair_predicate

logger = get_logger(__name__)


# =============================================================================
# SOURCES
# =============================================================================


@dataclass(frozen=True, slots=True)
class TermSource:
    """A secondary table holding the terms of a family.

    Attributes:
        name: Short label for logs.
        sql: SELECT text ending in ``WHERE {where}``.
        filter_column: Qualified key column used in the IN predicate.
        key_column: Key column name in the result rows.
        map_row: Builds a DealTerm from one row (``vol_seq`` included when
            the table has a sequence column).
        positional_seq: Assign ``vol_seq`` by position within each key.
    """

    name: str
    sql: str
    filter_column: str
    key_column: str
    map_row: Callable[[Row], DealTerm]
    positional_seq: bool = False


@dataclass(frozen=True, slots=True)
class IndexSource:
    """A tertiary table holding price-index references.

    When ``seq_filter_column`` is set the lookup is by (key, seq) pairs,
    otherwise by key alone with positional ``vol_seq``.
    """

    name: str
    sql: str
    filter_column: str
    key_column: str
    seq_filter_column: str | None = None
    seq_column: str | None = None


def _index_from_row(row: Row, vol_seq: int) -> PriceIndex:
    return PriceIndex(
        vol_seq=vol_seq,
        publication=text(row, "publication"),
        pub_index=text(row, "pub_index"),
        frequency=text(row, "frequency"),
    )


# =============================================================================
# CORRELATOR
# =============================================================================


class TermCorrelator:
    """Runs correlation rounds against the ledger for one fetch.

    Args:
        source: Ledger row source.
        deal_type: Family tag, used for log context only.
    """

    def __init__(self, source: RowSource, deal_type: str = "") -> None:
        self._source = source
        self._deal_type = deal_type

    def _query(self, name: str, sql: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        try:
            return self._source.query(sql, params)
        except Exception as e:
            logger.debug(
                "correlation_query_failed",
                deal_type=self._deal_type,
                source=name,
                error=str(e),
            )
            raise

    def fetch_terms(self, keys: Iterable[int], spec: TermSource) -> dict[int, list[DealTerm]]:
        """Terms grouped by deal key, in source row order."""
        keys = ordered_keys(keys)
        if not keys:
            return {}
        where, params = in_predicate(spec.filter_column, keys)
        rows = self._query(spec.name, spec.sql.format(where=where), params)

        grouped: dict[int, list[DealTerm]] = {}
        for row in rows:
            key = integer(row, spec.key_column)
            terms = grouped.setdefault(key, [])
            term = spec.map_row(row)
            if spec.positional_seq:
                term.vol_seq = len(terms)
            terms.append(term)
        logger.debug(
            "terms_fetched",
            deal_type=self._deal_type,
            source=spec.name,
            keys=len(keys),
            rows=len(rows),
        )
        return grouped

    def fetch_indexes(
        self, keys: Iterable[int] | Iterable[tuple[int, int]], spec: IndexSource
    ) -> dict[int, list[PriceIndex]]:
        """Indexes grouped by deal key.

        *keys* are (deal key, vol seq) pairs when the source filters on the
        sequence column, plain deal keys otherwise.
        """
        keys = ordered_keys(keys)
        if not keys:
            return {}
        if spec.seq_filter_column is not None:
            where, params = pair_predicate(spec.filter_column, spec.seq_filter_column, keys)
        else:
            where, params = in_predicate(spec.filter_column, keys)
        rows = self._query(spec.name, spec.sql.format(where=where), params)

        grouped: dict[int, list[PriceIndex]] = {}
        for row in rows:
            key = integer(row, spec.key_column)
            indexes = grouped.setdefault(key, [])
            seq = integer(row, spec.seq_column) if spec.seq_column else len(indexes)
            indexes.append(_index_from_row(row, seq))
        logger.debug(
            "indexes_fetched",
            deal_type=self._deal_type,
            source=spec.name,
            keys=len(keys),
            rows=len(rows),
        )
        return grouped

    # -- splice helpers (pure, no ledger access) ------------------------------

    @staticmethod
    def attach_indexes(
        terms: dict[int, list[DealTerm]], indexes: dict[int, list[PriceIndex]]
    ) -> None:
        """Append each index to the first-slot list of the term with the
        same (deal key, vol seq)."""
        for key, key_indexes in indexes.items():
            key_terms = terms.get(key, [])
            for index in key_indexes:
                for term in key_terms:
                    if term.vol_seq == index.vol_seq:
                        term.indexes1.append(copy.copy(index))

    @staticmethod
    def splice_terms(
        header: DealHeader,
        fetched: Sequence[DealTerm],
        initial: DealTerm | None,
        fields: Sequence[str] = (),
    ) -> None:
        """Append *fetched* terms to *header*, backfilling *fields* from the
        initial-term side entry. Index-list fields are copied per term."""
        for term in fetched:
            if initial is not None:
                for name in fields:
                    value = getattr(initial, name)
                    if isinstance(value, list):
                        value = copy_indexes(value)
                    setattr(term, name, value)
            header.terms.append(term)


__all__ = [
    "IndexSource",
    "TermCorrelator",
    "TermSource",
]
