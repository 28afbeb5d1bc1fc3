"""Transmission reservations and miscellaneous charges.

Both families keep every term in a volume table keyed by the deal key, so
the header row is never complete on its own.
"""

from __future__ import annotations

import copy

from tradespine.core.timestamps import ZERO_TIME, parse_execution_date
from tradespine.domain.trades import (
    FLAG_NO,
    NOT_APPLICABLE,
    PAYABLE,
    RECEIVABLE,
    DealHeader,
    DealTerm,
)
from tradespine.ledger import queries
from tradespine.ledger.correlator import TermSource
from tradespine.ledger.fetchers.base import Classified, Fetched, HeaderFetcher, RowClass
from tradespine.ledger.mapping import Row, base_header, integer, num, optional_text, text, when

FIXED_PRICE_TYPE = "F"
PAYABLE_FLAG = "P"


def _splice_by_deal_key(classified: Classified, fetched: Fetched) -> list[DealHeader]:
    for header in classified.pending():
        header.terms = [copy.deepcopy(term) for term in fetched.terms.get(header.deal_key, [])]
    return classified.headers


# =============================================================================
# TRANSMISSION
# =============================================================================

TRANSMISSION_TERMS = TermSource(
    name="trans_volumes",
    sql=queries.TRANSMISSION_TERMS,
    filter_column="pv.td_trans_key",
    key_column="td_trans_key",
    map_row=lambda row: DealTerm(
        vol_seq=integer(row, "volume_seq"),
        beg_date=when(row, "dy_beg_day"),
        end_date=when(row, "dy_end_day"),
        volume=num(row, "volume"),
        product1=text(row, "ppep_pep_product"),
        pool1=text(row, "ppep_pp_fm_pool"),
        point_code1=text(row, "ctp_fm_point_code"),
        pool2=text(row, "ppep_pp_to_pool"),
        point_code2=text(row, "ctp_to_point_code"),
        holiday_schedule=text(row, "sch_schedule"),
        price_type=FIXED_PRICE_TYPE,
    ),
)


class TransmissionFetcher(HeaderFetcher):
    """Transmission reservations from one pool/point to another.

    The execution attribute is a bare date; the ledger query substitutes
    ``01/01/1900`` when it is missing.
    """

    family = "transmission"
    run_tag = "TRANS"
    query = queries.TRANSMISSION
    key_column = "trans_key"

    def map_row(self, row: Row) -> tuple[DealHeader, DealTerm | None, RowClass]:
        header = base_header(row, self.key_column, self.run_tag)
        header.direction = text(row, "dn_direction")
        executed = parse_execution_date(optional_text(row, "execution_time"))
        header.execution_time = executed if executed is not None else ZERO_TIME
        header.exotic_flag = NOT_APPLICABLE
        header.interaffiliate_flag = FLAG_NO
        return header, None, RowClass.NEEDS_LOOKUP

    def correlate(self, classified: Classified) -> Fetched:
        return Fetched(
            terms=self.correlator.fetch_terms(classified.needs_lookup, TRANSMISSION_TERMS)
        )

    def splice(self, classified: Classified, fetched: Fetched) -> list[DealHeader]:
        return _splice_by_deal_key(classified, fetched)


# =============================================================================
# MISC CHARGE
# =============================================================================

MISC_CHARGE_TERMS = TermSource(
    name="misc_charge_volumes",
    sql=queries.MISC_CHARGE_TERMS,
    filter_column="pv.mc_misc_charge_key",
    key_column="mc_misc_charge_key",
    map_row=lambda row: DealTerm(
        vol_seq=integer(row, "misc_vol_seq"),
        beg_date=when(row, "dy_beg_day"),
        end_date=when(row, "dy_end_day"),
        volume=num(row, "int_volume"),
    ),
)


def charge_direction(rec_pay_flag: str | None) -> str:
    """``Payable`` for ``P``, ``Receivable`` for anything else.

    Examples:
        >>> charge_direction("P")
        'Payable'
        >>> charge_direction("R")
        'Receivable'
    """
    return PAYABLE if rec_pay_flag == PAYABLE_FLAG else RECEIVABLE


class MiscChargeFetcher(HeaderFetcher):
    """Miscellaneous charges: no confirm format, region, time zone or broker."""

    family = "misc-charge"
    run_tag = "MISC"
    query = queries.MISC_CHARGE
    key_column = "misc_charge_key"

    def map_row(self, row: Row) -> tuple[DealHeader, DealTerm | None, RowClass]:
        header = base_header(row, self.key_column, self.run_tag)
        header.direction = charge_direction(optional_text(row, "rec_pay_flag"))
        header.interaffiliate_flag = FLAG_NO
        header.exotic_flag = NOT_APPLICABLE
        return header, None, RowClass.NEEDS_LOOKUP

    def correlate(self, classified: Classified) -> Fetched:
        return Fetched(
            terms=self.correlator.fetch_terms(classified.needs_lookup, MISC_CHARGE_TERMS)
        )

    def splice(self, classified: Classified, fetched: Fetched) -> list[DealHeader]:
        return _splice_by_deal_key(classified, fetched)


__all__ = [
    "MiscChargeFetcher",
    "TransmissionFetcher",
    "charge_direction",
]
