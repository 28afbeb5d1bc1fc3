"""Emission families: emission allowances and emission options."""

from __future__ import annotations

import copy

from tradespine.domain.trades import (
    FLAG_NO,
    NOT_APPLICABLE,
    DealHeader,
    DealTerm,
    direction_from_volume,
)
from tradespine.ledger import queries
from tradespine.ledger.correlator import TermSource
from tradespine.ledger.fetchers.base import Classified, Fetched, HeaderFetcher, RowClass
from tradespine.ledger.formula import decode_into
from tradespine.ledger.mapping import (
    Row,
    apply_execution_time,
    base_header,
    integer,
    num,
    text,
    when,
)


def _emission_term(row: Row) -> DealTerm:
    formula = text(row, "formula")
    return DealTerm(
        vol_seq=integer(row, "volume_seq"),
        beg_date=when(row, "dy_beg_day"),
        end_date=when(row, "dy_end_day"),
        price_type=text(row, "price_type"),
        fixed_price=num(row, "price"),
        volume=num(row, "volume"),
        product1=text(row, "epdt_emission_product"),
        point_code1=text(row, "ctp_point_code"),
        formula1=formula,
        indexes1=decode_into(formula),
    )


EMISSION_TERMS = TermSource(
    name="emission_volumes",
    sql=queries.EMISSION_TERMS,
    filter_column="pv.ed_emission_key",
    key_column="ed_emission_key",
    map_row=_emission_term,
)

EMISSION_OPTION_TERMS = TermSource(
    name="emission_volumes",
    sql=queries.EMISSION_OPTION_TERMS,
    filter_column="pv.ed_emission_key",
    key_column="ed_emission_key",
    map_row=lambda row: DealTerm(
        vol_seq=integer(row, "volume_seq"),
        beg_date=when(row, "dy_beg_day"),
        end_date=when(row, "dy_end_day"),
        point_code1=text(row, "ctp_point_code"),
        product1=text(row, "epdt_emission_product"),
    ),
)


class EmissionFetcher(HeaderFetcher):
    """Emission allowance deals; every term lives in ``emission_volumes``
    and a term's formula decodes to its first index slot."""

    family = "emission"
    run_tag = "EMSSN"
    query = queries.EMISSION
    key_column = "emission_key"

    def map_row(self, row: Row) -> tuple[DealHeader, DealTerm | None, RowClass]:
        header = base_header(row, self.key_column, self.run_tag)
        header.direction = text(row, "dn_direction")
        header.exotic_flag = NOT_APPLICABLE
        header.interaffiliate_flag = FLAG_NO
        apply_execution_time(header, row)
        return header, None, RowClass.NEEDS_LOOKUP

    def correlate(self, classified: Classified) -> Fetched:
        return Fetched(terms=self.correlator.fetch_terms(classified.needs_lookup, EMISSION_TERMS))

    def splice(self, classified: Classified, fetched: Fetched) -> list[DealHeader]:
        for header in classified.pending():
            header.terms = [copy.deepcopy(term) for term in fetched.terms.get(header.deal_key, [])]
        return classified.headers


class EmissionOptionFetcher(HeaderFetcher):
    """Options on emission deals.

    The option row names the underlying emission deal; the option's terms
    are the underlying's volume periods, each priced at the option strike
    and sized at the option volume. Several options may share one
    underlying, so every header gets its own copies.
    """

    family = "emission-option"
    run_tag = "EMOPTS"
    query = queries.EMISSION_OPTION
    key_column = "eoption_key"

    def map_row(self, row: Row) -> tuple[DealHeader, DealTerm | None, RowClass]:
        header = base_header(row, self.key_column, self.run_tag)
        header.direction = direction_from_volume(row.get("volume"))
        header.exercise_zone = text(row, "tz_time_zone")
        header.exotic_flag = NOT_APPLICABLE
        header.interaffiliate_flag = FLAG_NO
        apply_execution_time(header, row)

        # vol_seq carries the underlying emission key until the splice
        side = DealTerm(
            vol_seq=integer(row, "ed_emission_key"),
            fixed_price=num(row, "strike_price"),
            volume=num(row, "volume"),
        )
        return header, side, RowClass.NEEDS_LOOKUP

    def correlation_key(self, header: DealHeader, term: DealTerm | None) -> int:
        return term.vol_seq if term is not None else 0

    def correlate(self, classified: Classified) -> Fetched:
        return Fetched(
            terms=self.correlator.fetch_terms(classified.needs_lookup, EMISSION_OPTION_TERMS)
        )

    def splice(self, classified: Classified, fetched: Fetched) -> list[DealHeader]:
        for header, option in zip(classified.headers, classified.initial):
            terms = []
            for term in fetched.terms.get(option.vol_seq, []):
                term = copy.deepcopy(term)
                term.fixed_price = option.fixed_price
                term.volume = option.volume
                terms.append(term)
            header.terms = terms
        return classified.headers


__all__ = [
    "EmissionFetcher",
    "EmissionOptionFetcher",
]
