"""Transmission-rights families: capacity, point-to-point and TCC/FTR."""

from __future__ import annotations

import copy
from datetime import date, datetime
from typing import Any

from tradespine.domain.trades import (
    FLAG_NO,
    NOT_APPLICABLE,
    PURCHASE,
    DealHeader,
    DealTerm,
    PriceIndex,
    copy_indexes,
    direction_from_volume,
)
from tradespine.ledger import queries
from tradespine.ledger.correlator import IndexSource, TermCorrelator, TermSource
from tradespine.ledger.fetchers.base import Classified, Fetched, HeaderFetcher, RowClass
from tradespine.ledger.mapping import (
    Row,
    apply_execution_time,
    apply_interaffiliate,
    base_header,
    num,
    text,
    when,
)

NON_STANDARD_NO = "N"
HOURLY = "HOURLY"


# =============================================================================
# CAPACITY
# =============================================================================

CAPACITY_TERMS = TermSource(
    name="capacity_volume_ranges",
    sql=queries.CAPACITY_TERMS,
    filter_column="cpd_capacity_key",
    key_column="cpd_capacity_key",
    map_row=lambda row: DealTerm(
        beg_date=when(row, "dy_beg_day"),
        end_date=when(row, "dy_end_day"),
    ),
    positional_seq=True,
)

CAPACITY_INDEXES = IndexSource(
    name="capacity_deal_indexes",
    sql=queries.CAPACITY_INDEXES,
    filter_column="cpd_capacity_key",
    key_column="cpd_capacity_key",
)

CAPACITY_BACKFILL = ("price_type", "pool1", "product1", "point_code1", "holiday_schedule")


class CapacityFetcher(HeaderFetcher):
    """Capacity deals.

    Non-standard deals read their date ranges from
    ``capacity_volume_ranges`` (no sequence column, so positions are used).
    Deals with an energy formula take their index list from
    ``capacity_deal_indexes``; it lands on the first term.
    """

    family = "capacity"
    run_tag = "CAPCTY"
    query = queries.CAPACITY
    key_column = "capacity_key"

    def map_row(self, row: Row) -> tuple[DealHeader, DealTerm | None, RowClass]:
        header = base_header(row, self.key_column, self.run_tag)
        header.direction = text(row, "dn_direction")
        apply_interaffiliate(header, self._intercompany_names)
        header.start_date = when(row, "dy_beg_day")
        header.end_date = when(row, "dy_end_day")
        header.exotic_flag = NOT_APPLICABLE
        apply_execution_time(header, row)

        term = DealTerm(
            beg_date=header.start_date,
            end_date=header.end_date,
            price_type=text(row, "price_type"),
            fixed_price=num(row, "charge"),
            volume=num(row, "volume"),
            formula1=text(row, "energy_formula"),
            pool1=text(row, "ppcp_pp_pool"),
            product1=text(row, "ppcp_pcp_product"),
            point_code1=text(row, "ctp_point_code"),
            holiday_schedule=text(row, "sch_schedule"),
        )
        if text(row, "non_standard_flag") == NON_STANDARD_NO:
            return header, term, RowClass.COMPLETE
        return header, term, RowClass.NEEDS_LOOKUP

    @staticmethod
    def formula_keys(classified: Classified) -> list[int]:
        """Deal keys whose header row carries an energy formula."""
        keys = []
        for header in classified.headers:
            term = header.terms[0] if header.terms else classified.side_table.get(header.deal_key)
            if term is not None and term.formula1:
                keys.append(header.deal_key)
        return queries.ordered_keys(keys)

    def correlate(self, classified: Classified) -> Fetched:
        correlator = self.correlator
        return Fetched(
            terms=correlator.fetch_terms(classified.needs_lookup, CAPACITY_TERMS),
            indexes=correlator.fetch_indexes(self.formula_keys(classified), CAPACITY_INDEXES),
        )

    def splice(self, classified: Classified, fetched: Fetched) -> list[DealHeader]:
        for header in classified.pending():
            TermCorrelator.splice_terms(
                header,
                [copy.deepcopy(term) for term in fetched.terms.get(header.deal_key, [])],
                classified.side_table.get(header.deal_key),
                CAPACITY_BACKFILL,
            )
        for header in classified.headers:
            indexes = fetched.indexes.get(header.deal_key)
            if indexes and header.terms:
                header.terms[0].indexes1 = copy_indexes(indexes)
        return classified.headers


# =============================================================================
# POINT-TO-POINT
# =============================================================================


class PtpFetcher(HeaderFetcher):
    """Point-to-point deals: a single flow day, always a purchase, with
    hourly day-ahead and real-time indexes."""

    family = "ptp"
    run_tag = "PTP"
    query = queries.PTP
    key_column = "ptp_key"

    def map_row(self, row: Row) -> tuple[DealHeader, DealTerm | None, RowClass]:
        header = base_header(row, self.key_column, self.run_tag)
        header.direction = PURCHASE
        header.interaffiliate_flag = FLAG_NO
        header.exotic_flag = NOT_APPLICABLE

        flow_day = when(row, "dy_flow_day")
        term = DealTerm(
            beg_date=flow_day,
            end_date=flow_day,
            pool1=text(row, "ppep_pp_pool"),
            product1=text(row, "ppep_pep_product"),
            indexes1=[
                PriceIndex(
                    publication=text(row, "publication1"),
                    pub_index=text(row, "pub_index1"),
                    frequency=HOURLY,
                )
            ],
            indexes2=[
                PriceIndex(
                    publication=text(row, "publication2"),
                    pub_index=text(row, "pub_index2"),
                    frequency=HOURLY,
                )
            ],
        )
        return header, term, RowClass.COMPLETE


# =============================================================================
# TCC / FTR
# =============================================================================

TCC_FTR_DEAL_TYPES = ("FTROPT", "FTRSWP", "TCCSWP")


class TccFtrFetcher(HeaderFetcher):
    """Transmission congestion contracts and financial transmission rights.

    The family shares one table across several deal types, so every fetch
    is for one deal type, given at construction.
    """

    family = "tcc-ftr"
    run_tag = "TCCFTR"
    query = queries.TCC_FTR
    key_column = "deal_key"

    def __init__(self, source: Any, *args: Any, deal_type: str = "FTROPT", **kwargs: Any) -> None:
        if deal_type not in TCC_FTR_DEAL_TYPES:
            raise ValueError(
                f"unknown TCC/FTR deal type {deal_type!r}; expected one of {TCC_FTR_DEAL_TYPES}"
            )
        super().__init__(source, *args, **kwargs)
        self._deal_type = deal_type

    @property
    def deal_type(self) -> str:
        return self._deal_type

    def since_sql(self) -> str:
        return self.query.since(queries.TCC_DEAL_TYPE_FILTER)

    def since_params(
        self, trade_date: datetime | date, last_run_time: datetime | None
    ) -> dict[str, Any]:
        params = super().since_params(trade_date, last_run_time)
        params["deal_type"] = self._deal_type
        return params

    def map_row(self, row: Row) -> tuple[DealHeader, DealTerm | None, RowClass]:
        header = base_header(row, self.key_column)
        header.direction = direction_from_volume(row.get("volume"))
        header.exotic_flag = NOT_APPLICABLE
        header.interaffiliate_flag = FLAG_NO

        publication = text(row, "pi_pb_publication")
        frequency = text(row, "frq_frequency")
        term = DealTerm(
            beg_date=when(row, "dy_beg_day"),
            end_date=when(row, "dy_end_day"),
            holiday_schedule=text(row, "sch_schedule"),
            volume=num(row, "volume"),
            fixed_price=num(row, "fixed_price"),
            pool1=text(row, "ppep_pp_pool"),
            product1=text(row, "ppep_pep_product"),
            indexes1=[
                PriceIndex(
                    publication=publication,
                    pub_index=text(row, "poi_pi_pub_index"),
                    frequency=frequency,
                )
            ],
            indexes2=[
                PriceIndex(
                    publication=publication,
                    pub_index=text(row, "pow_pi_pub_index"),
                    frequency=frequency,
                )
            ],
        )
        return header, term, RowClass.COMPLETE


__all__ = [
    "TCC_FTR_DEAL_TYPES",
    "CapacityFetcher",
    "PtpFetcher",
    "TccFtrFetcher",
]
