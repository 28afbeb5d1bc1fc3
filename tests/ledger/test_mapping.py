"""Tests for the shared row-mapping helpers."""

from __future__ import annotations

from datetime import datetime

import pytest

from conftest import party_row
from tradespine.core.errors import ExecutionTimestampError
from tradespine.core.timestamps import ZERO_TIME
from tradespine.domain.trades import DealHeader
from tradespine.ledger.mapping import (
    apply_execution_time,
    apply_ib,
    base_header,
    has_broker,
    interaffiliate_flag,
    num,
    text,
)


class TestScalars:
    def test_null_defaults(self):
        row = {"a": None}
        assert text(row, "a") == ""
        assert text(row, "missing", "NA") == "NA"
        assert num(row, "a") == 0.0


class TestInteraffiliateFlag:
    NAMES = ("SENA", "STRM")

    def test_two_in_house_entities_with_different_keys(self):
        assert interaffiliate_flag("SENA", "STRM", 1, 2, self.NAMES) == "Y"

    def test_same_key_is_not_interaffiliate(self):
        assert interaffiliate_flag("SENA", "STRM", 3, 3, self.NAMES) == "N"

    def test_outside_counterparty(self):
        assert interaffiliate_flag("ACME", "SENA", 1, 2, self.NAMES) == "N"


class TestBaseHeader:
    def test_common_fields(self):
        header = base_header(party_row("power_key", 11, deal_type="POWER"), "power_key")
        assert header.deal_key == 11
        assert header.deal_type == "POWER"
        assert header.company == "ACME"
        assert header.company_code == "ACM"
        assert header.legal_entity == "SENA"
        assert header.portfolio_id == 7
        assert header.trader == "jdoe"
        assert header.modified_at == datetime(2022, 5, 5, 9, 30)

    def test_explicit_deal_type(self):
        assert base_header(party_row("k", 1), "k", "EMSSN").deal_type == "EMSSN"

    def test_null_columns_default(self):
        row = party_row("k", 1, company=None, prtportfolio=None, modify_date=None)
        header = base_header(row, "k")
        assert header.company == ""
        assert header.portfolio_id == 0
        assert header.modified_at == ZERO_TIME

    def test_broker_fields_only_when_selected(self):
        assert base_header(party_row("k", 1), "k").has_broker == ""

    def test_broker_presence_follows_the_key(self):
        header = base_header(party_row("k", 1, broker_key=None, broker="ICAP"), "k")
        assert header.has_broker == "NO"
        assert header.broker == "ICAP"

    def test_missing_broker_name_is_na(self):
        header = base_header(party_row("k", 1, broker_key=44, broker=None), "k")
        assert header.has_broker == "YES"
        assert header.broker_key == 44
        assert header.broker == "NA"

    def test_has_broker(self):
        assert has_broker({"broker_key": 0}) == "YES"


class TestApplyHelpers:
    def test_execution_time(self):
        header = DealHeader(deal_key=1)
        apply_execution_time(header, {"execution_date": "05/05/2022", "execution_time": "01:00:00 PM"})
        assert header.execution_time == datetime(2022, 5, 5, 13)

    def test_execution_time_missing(self):
        header = DealHeader(deal_key=1)
        apply_execution_time(header, {"execution_date": None, "execution_time": "01:00:00 PM"})
        assert header.execution_time == ZERO_TIME

    def test_execution_time_bad_layout_raises(self):
        with pytest.raises(ExecutionTimestampError):
            apply_execution_time(
                DealHeader(deal_key=1), {"execution_date": "May 5", "execution_time": "1pm"}
            )

    def test_ib(self):
        header = DealHeader(deal_key=1)
        apply_ib(header, {"ib_prt_portfolio": 3, "ib_portfolio": "EAST", "ib_ur_trader": None})
        assert (header.ib_portfolio_id, header.ib_portfolio, header.ib_trader) == (3, "EAST", "")
