"""Power-market families: power, power swap, power option, spread option
and heat-rate swap."""

from __future__ import annotations

import copy

from tradespine.domain.trades import (
    FLAG_NO,
    NOT_APPLICABLE,
    DealHeader,
    DealTerm,
    PriceIndex,
    direction_from_volume,
)
from tradespine.ledger import queries
from tradespine.ledger.correlator import IndexSource, TermCorrelator, TermSource
from tradespine.ledger.fetchers.base import Classified, Fetched, HeaderFetcher, RowClass
from tradespine.ledger.formula import decode_into
from tradespine.ledger.mapping import (
    Row,
    apply_execution_time,
    apply_ib,
    apply_interaffiliate,
    base_header,
    integer,
    num,
    optional_text,
    text,
    when,
)

NON_STANDARD_NO = "N"


def _copy_terms(terms: list[DealTerm]) -> list[DealTerm]:
    return [copy.deepcopy(term) for term in terms]


# =============================================================================
# POWER
# =============================================================================


def _power_term(row: Row) -> DealTerm:
    return DealTerm(
        vol_seq=integer(row, "volume_seq"),
        beg_date=when(row, "dy_beg_day"),
        end_date=when(row, "dy_end_day"),
        price_type=text(row, "price_type"),
        fixed_price=num(row, "price"),
        volume=num(row, "volume"),
        pool1=text(row, "ppep_pp_pool"),
        product1=text(row, "ppep_pep_product"),
        point_code1=text(row, "ctp_point_code"),
        formula1=text(row, "formula"),
        holiday_schedule=text(row, "sch_schedule"),
    )


POWER_TERMS = TermSource(
    name="power_volumes",
    sql=queries.POWER_TERMS,
    filter_column="pv.pd_power_key",
    key_column="pd_power_key",
    map_row=_power_term,
)

POWER_INDEXES = IndexSource(
    name="power_volume_indexes",
    sql=queries.POWER_INDEXES,
    filter_column="pv_pd_power_key",
    key_column="pv_pd_power_key",
    seq_filter_column="pv_volume_seq",
    seq_column="pv_volume_seq",
)


class PowerFetcher(HeaderFetcher):
    """Physical power deals.

    Every deal's terms live in ``power_volumes``; terms with a formula get
    their indexes from ``power_volume_indexes`` by (deal key, volume seq).
    """

    family = "power"
    run_tag = "POWER"
    query = queries.POWER
    key_column = "power_key"
    supports_by_keys = True

    def map_row(self, row: Row) -> tuple[DealHeader, DealTerm | None, RowClass]:
        header = base_header(row, self.key_column)
        header.direction = text(row, "dn_direction")
        header.exercised_option_key = integer(row, "option_key")
        header.exotic_flag = text(row, "exotic_flag", NOT_APPLICABLE)
        header.interaffiliate_flag = FLAG_NO
        apply_execution_time(header, row)
        return header, None, RowClass.NEEDS_LOOKUP

    def correlate(self, classified: Classified) -> Fetched:
        correlator = self.correlator
        terms = correlator.fetch_terms(classified.needs_lookup, POWER_TERMS)
        pairs = [
            (key, term.vol_seq)
            for key, key_terms in terms.items()
            for term in key_terms
            if term.formula1
        ]
        indexes = correlator.fetch_indexes(pairs, POWER_INDEXES)
        TermCorrelator.attach_indexes(terms, indexes)
        return Fetched(terms=terms, indexes=indexes)

    def splice(self, classified: Classified, fetched: Fetched) -> list[DealHeader]:
        for header in classified.pending():
            header.terms = _copy_terms(fetched.terms.get(header.deal_key, []))
        return classified.headers


# =============================================================================
# POWER SWAP
# =============================================================================

POWER_SWAP_TERMS = TermSource(
    name="power_swap_volumes",
    sql=queries.POWER_SWAP_TERMS,
    filter_column="pswp_pswap_key",
    key_column="pswp_pswap_key",
    map_row=lambda row: DealTerm(
        vol_seq=integer(row, "volume_seq"),
        beg_date=when(row, "dy_beg_day"),
        end_date=when(row, "dy_end_day"),
    ),
)

POWER_SWAP_BACKFILL = ("pool1", "product1", "indexes1", "indexes2", "holiday_schedule")


class PowerSwapFetcher(HeaderFetcher):
    """Financial power swaps.

    Standard swaps carry their single term inline; non-standard swaps read
    their periods from ``power_swap_volumes`` and inherit pool, product,
    both index lists and the holiday schedule from the header row.
    """

    family = "power-swap"
    run_tag = "PSWPS"
    query = queries.POWER_SWAP
    key_column = "pswap_key"
    supports_by_keys = True

    def map_row(self, row: Row) -> tuple[DealHeader, DealTerm | None, RowClass]:
        header = base_header(row, self.key_column)
        header.direction = direction_from_volume(row.get("volume"))
        apply_interaffiliate(header, self._intercompany_names)
        apply_ib(header, row)
        header.exercised_option_key = integer(row, "option_key")
        header.start_date = when(row, "dy_beg_day")
        header.end_date = when(row, "dy_end_day")
        header.exotic_flag = text(row, "exotic_flag", NOT_APPLICABLE)
        apply_execution_time(header, row)

        term = DealTerm(
            beg_date=header.start_date,
            end_date=header.end_date,
            pool1=text(row, "ppep_pp_pool"),
            product1=text(row, "ppep_pep_product"),
            volume=num(row, "volume"),
            fixed_price=num(row, "fixed_price"),
            holiday_schedule=text(row, "sch_schedule"),
            indexes1=[
                PriceIndex(
                    publication=text(row, "pi_pb_publication"),
                    pub_index=text(row, "pi_pub_index"),
                    frequency=text(row, "frq_frequency"),
                )
            ],
        )
        fixed = (
            optional_text(row, "fix_pi_pb_publication"),
            optional_text(row, "fix_pi_pub_index"),
            optional_text(row, "fix_frq_frequency"),
        )
        if all(value is not None for value in fixed):
            term.indexes2.append(
                PriceIndex(publication=fixed[0], pub_index=fixed[1], frequency=fixed[2])
            )

        if text(row, "nonstd_flag") == NON_STANDARD_NO:
            return header, term, RowClass.COMPLETE
        return header, term, RowClass.NEEDS_LOOKUP

    def correlate(self, classified: Classified) -> Fetched:
        return Fetched(terms=self.correlator.fetch_terms(classified.needs_lookup, POWER_SWAP_TERMS))

    def splice(self, classified: Classified, fetched: Fetched) -> list[DealHeader]:
        for header in classified.pending():
            TermCorrelator.splice_terms(
                header,
                _copy_terms(fetched.terms.get(header.deal_key, [])),
                classified.side_table.get(header.deal_key),
                POWER_SWAP_BACKFILL,
            )
        return classified.headers


# =============================================================================
# POWER OPTION
# =============================================================================


class PowerOptionsFetcher(HeaderFetcher):
    """Power options: one inline term; settle and strike formulas decode to
    the first and second index slots."""

    family = "power-options"
    run_tag = "POPTS"
    query = queries.POWER_OPTIONS
    key_column = "poption_key"
    supports_by_keys = True

    def map_row(self, row: Row) -> tuple[DealHeader, DealTerm | None, RowClass]:
        header = base_header(row, self.key_column, self.run_tag)
        header.direction = direction_from_volume(row.get("volume"))
        apply_interaffiliate(header, self._intercompany_names)
        apply_ib(header, row)
        header.exercise_zone = text(row, "tz_exercise_zone")
        header.start_date = when(row, "dy_beg_day")
        header.end_date = when(row, "dy_end_day")
        header.exotic_flag = text(row, "exotic_flag", NOT_APPLICABLE)
        apply_execution_time(header, row)

        settle = text(row, "settle_formula")
        strike = text(row, "strike_formula")
        term = DealTerm(
            beg_date=header.start_date,
            end_date=header.end_date,
            pool1=text(row, "ppep_pp_pool"),
            product1=text(row, "ppep_pep_product"),
            point_code1=text(row, "ctp_point_code"),
            holiday_schedule=text(row, "sch_schedule"),
            volume=num(row, "volume"),
            fixed_price=num(row, "strike_price"),
            price_type=text(row, "strike_price_type"),
            formula1=settle,
            indexes1=decode_into(settle),
            formula2=strike,
            indexes2=decode_into(strike),
        )
        return header, term, RowClass.COMPLETE


# =============================================================================
# SPREAD OPTION
# =============================================================================


class SpreadOptionFetcher(HeaderFetcher):
    """Spread options: two legs on one inline term, each leg with its own
    pool, product and formula."""

    family = "spread-option"
    run_tag = "SPDOPT"
    query = queries.SPREAD_OPTION
    key_column = "spread_option_key"

    def map_row(self, row: Row) -> tuple[DealHeader, DealTerm | None, RowClass]:
        header = base_header(row, self.key_column, self.run_tag)
        header.direction = direction_from_volume(row.get("volume"))
        apply_ib(header, row)
        header.start_date = when(row, "dy_beg_day1")
        header.end_date = when(row, "dy_end_day1")
        header.exotic_flag = text(row, "exotic_flag", NOT_APPLICABLE)
        header.interaffiliate_flag = FLAG_NO
        apply_execution_time(header, row)

        formula1 = text(row, "formula1")
        formula2 = text(row, "formula2")
        term = DealTerm(
            beg_date=header.start_date,
            end_date=header.end_date,
            holiday_schedule=text(row, "sch_schedule"),
            pool1=text(row, "ppep_pp_pool1"),
            pool2=text(row, "ppep_pp_pool2"),
            product1=text(row, "ppep_pep_product1"),
            product2=text(row, "ppep_pep_product2"),
            point_code1=text(row, "point_code"),
            volume=num(row, "volume"),
            fixed_price=num(row, "strike_price"),
            formula1=formula1,
            indexes1=decode_into(formula1),
            formula2=formula2,
            indexes2=decode_into(formula2),
        )
        return header, term, RowClass.COMPLETE


# =============================================================================
# HEAT-RATE SWAP
# =============================================================================


class HeatRateSwapFetcher(HeaderFetcher):
    """Heat-rate swaps: one inline term with a fuel index and a power index."""

    family = "heat-rate-swaps"
    run_tag = "HRSWPS"
    query = queries.HEAT_RATE_SWAP
    key_column = "hrswps_key"

    def map_row(self, row: Row) -> tuple[DealHeader, DealTerm | None, RowClass]:
        header = base_header(row, self.key_column, self.run_tag)
        header.direction = direction_from_volume(row.get("volume1"))
        apply_interaffiliate(header, self._intercompany_names)
        header.exercised_option_key = integer(row, "option_key")
        header.start_date = when(row, "dy_beg_day")
        header.end_date = when(row, "dy_end_day")
        header.exotic_flag = NOT_APPLICABLE
        apply_execution_time(header, row)

        term = DealTerm(
            beg_date=header.start_date,
            end_date=header.end_date,
            pool1=text(row, "ppep_pp_pool"),
            product1=text(row, "ppep_pep_product"),
            holiday_schedule=text(row, "sch_schedule"),
            volume=num(row, "volume1"),
            indexes1=[
                PriceIndex(
                    publication=text(row, "pif_pi_pb_publication1"),
                    pub_index=text(row, "pif_pi_pub_index1"),
                )
            ],
            indexes2=[
                PriceIndex(
                    publication=text(row, "pif_pi_pb_publication2"),
                    pub_index=text(row, "pif_pi_pub_index2"),
                    frequency=text(row, "pif_frq_frequency2"),
                )
            ],
        )
        return header, term, RowClass.COMPLETE


__all__ = [
    "HeatRateSwapFetcher",
    "PowerFetcher",
    "PowerOptionsFetcher",
    "PowerSwapFetcher",
    "SpreadOptionFetcher",
]
