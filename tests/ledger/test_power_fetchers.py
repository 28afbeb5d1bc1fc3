"""Tests for the power, power swap, power option, spread option and
heat-rate swap fetchers."""

from __future__ import annotations

from datetime import datetime

import pytest

from conftest import TRADE_DATE, FakeLedger, party_row
from tradespine.core.errors import ExecutionTimestampError, UnsupportedLookupError
from tradespine.core.timestamps import ZERO_TIME
from tradespine.domain.trades import PriceIndex
from tradespine.ledger.fetchers import (
    HeatRateSwapFetcher,
    PowerFetcher,
    PowerOptionsFetcher,
    PowerSwapFetcher,
    SpreadOptionFetcher,
)

JUNE_1 = datetime(2022, 6, 1)
JUNE_30 = datetime(2022, 6, 30)


def _power_volume(key, seq, formula=None, **overrides):
    row = {
        "pd_power_key": key,
        "volume_seq": seq,
        "dy_beg_day": JUNE_1,
        "dy_end_day": JUNE_30,
        "price_type": "I" if formula else "F",
        "price": 0.0 if formula else 42.5,
        "volume": 50,
        "ppep_pp_pool": "PJM",
        "ppep_pep_product": "ONPEAK",
        "ctp_point_code": "WESTERN HUB",
        "formula": formula,
        "sch_schedule": "NERC",
    }
    row.update(overrides)
    return row


def _power_index(key, seq, publication="GD"):
    return {
        "pv_pd_power_key": key,
        "pv_volume_seq": seq,
        "publication": publication,
        "pub_index": "PJM WH",
        "frequency": "DAILY",
    }


# ── Power ────────────────────────────────────────────────────────────────


class TestPowerFetcher:
    def _rows(self):
        return [
            party_row("power_key", 1, deal_type="POWER", dn_direction="PURCHASE", option_key=None),
            party_row("power_key", 2, deal_type="POWER", dn_direction="SALE", option_key=77),
        ]

    def test_since_params(self, ledger: FakeLedger):
        PowerFetcher(ledger).fetch(datetime(2022, 5, 5, 13, 0))
        sql, params = ledger.calls[0]
        assert params == {"trade_date": TRADE_DATE, "last_run_time": ZERO_TIME}
        assert "pd.trade_date = :trade_date" in sql

    def test_watermark_is_bound(self, ledger: FakeLedger):
        cutoff = datetime(2022, 5, 5, 8)
        PowerFetcher(ledger).fetch(TRADE_DATE, cutoff)
        assert ledger.params[0]["last_run_time"] == cutoff

    def test_no_rows_issue_no_correlation_query(self, ledger: FakeLedger):
        assert PowerFetcher(ledger).fetch(TRADE_DATE) == []
        assert len(ledger.calls) == 1

    def test_terms_and_indexes_are_correlated(self, ledger: FakeLedger):
        ledger.queue(
            self._rows(),
            [
                _power_volume(1, 1, "[GD|PJM WH|DAILY]"),
                _power_volume(1, 2),
                _power_volume(2, 1, "[GD|PJM WH|DAILY]"),
            ],
            [_power_index(1, 1), _power_index(2, 1, publication="ICE")],
        )
        headers = PowerFetcher(ledger).fetch(TRADE_DATE)

        assert [h.deal_key for h in headers] == [1, 2]
        assert [h.direction for h in headers] == ["PURCHASE", "SALE"]
        assert headers[1].exercised_option_key == 77
        assert headers[0].interaffiliate_flag == "N"
        assert headers[0].execution_time == datetime(2022, 5, 5, 8, 18, 55)

        first = headers[0].terms
        assert [t.vol_seq for t in first] == [1, 2]
        assert first[0].indexes1 == [PriceIndex(1, "GD", "PJM WH", "DAILY")]
        assert first[1].indexes1 == []
        assert first[1].fixed_price == 42.5
        assert headers[1].terms[0].indexes1[0].publication == "ICE"

        terms_params = ledger.params[1]
        assert terms_params == {"k0": 1, "k1": 2}
        index_params = ledger.params[2]
        assert index_params == {"k0": 1, "s0": 1, "k1": 2, "s1": 1}

    def test_exotic_flag_defaults_to_na(self, ledger: FakeLedger):
        ledger.queue([party_row("power_key", 1, exotic_flag=None)])
        assert PowerFetcher(ledger).fetch(TRADE_DATE)[0].exotic_flag == "NA"

    def test_by_keys(self, ledger: FakeLedger):
        ledger.queue([party_row("power_key", 2)], [_power_volume(2, 1)])
        headers = PowerFetcher(ledger).fetch_by_keys([2, 1, 2])
        sql, params = ledger.calls[0]
        assert params == {"k0": 2, "k1": 1}
        assert "IN (:k0, :k1)" in sql
        assert [t.vol_seq for t in headers[0].terms] == [1]

    def test_by_keys_empty(self, ledger: FakeLedger):
        assert PowerFetcher(ledger).fetch_by_keys([]) == []
        assert ledger.calls == []

    def test_bad_execution_time_aborts_the_fetch(self, ledger: FakeLedger):
        ledger.queue([party_row("power_key", 1, execution_time="noonish")])
        with pytest.raises(ExecutionTimestampError):
            PowerFetcher(ledger).fetch(TRADE_DATE)


# ── Power swap ───────────────────────────────────────────────────────────


def _swap_row(key, nonstd="N", **overrides):
    row = party_row(
        "pswap_key",
        key,
        deal_type="PSWPS",
        volume=-25,
        option_key=None,
        dy_beg_day=JUNE_1,
        dy_end_day=JUNE_30,
        ppep_pp_pool="ERCOT",
        ppep_pep_product="7X24",
        fixed_price=31.0,
        sch_schedule="NERC",
        pi_pb_publication="PLATTS",
        pi_pub_index="ERCOT NORTH",
        frq_frequency="MONTHLY",
        fix_pi_pb_publication=None,
        fix_pi_pub_index=None,
        fix_frq_frequency=None,
        ib_prt_portfolio=None,
        ib_portfolio=None,
        ib_ur_trader=None,
        nonstd_flag=nonstd,
        company="SENA",
        legalentity="STRM",
    )
    row.update(overrides)
    return row


class TestPowerSwapFetcher:
    def test_standard_swap_is_complete(self, ledger: FakeLedger):
        ledger.queue([_swap_row(5)])
        headers = PowerSwapFetcher(ledger).fetch(TRADE_DATE)
        assert len(ledger.calls) == 1

        header = headers[0]
        assert header.direction == "SALE"
        assert header.interaffiliate_flag == "Y"
        assert header.start_date == JUNE_1
        [term] = header.terms
        assert term.volume == -25
        assert term.fixed_price == 31.0
        assert term.indexes1 == [PriceIndex(0, "PLATTS", "ERCOT NORTH", "MONTHLY")]
        assert term.indexes2 == []

    def test_fixed_leg_index_needs_all_three_columns(self, ledger: FakeLedger):
        ledger.queue(
            [
                _swap_row(
                    5,
                    fix_pi_pb_publication="GD",
                    fix_pi_pub_index="HSC",
                    fix_frq_frequency="DAILY",
                ),
                _swap_row(6, fix_pi_pb_publication="GD", fix_pi_pub_index="HSC"),
            ]
        )
        headers = PowerSwapFetcher(ledger).fetch(TRADE_DATE)
        assert headers[0].terms[0].indexes2 == [PriceIndex(0, "GD", "HSC", "DAILY")]
        assert headers[1].terms[0].indexes2 == []

    def test_non_standard_swap_backfills_from_header_row(self, ledger: FakeLedger):
        ledger.queue(
            [_swap_row(5), _swap_row(6, nonstd="Y")],
            [
                {"pswp_pswap_key": 6, "volume_seq": 1, "dy_beg_day": JUNE_1, "dy_end_day": datetime(2022, 6, 15)},
                {"pswp_pswap_key": 6, "volume_seq": 2, "dy_beg_day": datetime(2022, 6, 16), "dy_end_day": JUNE_30},
            ],
        )
        headers = PowerSwapFetcher(ledger).fetch(TRADE_DATE)
        assert ledger.params[1] == {"k0": 6}

        standard, custom = headers
        assert len(standard.terms) == 1
        assert [t.vol_seq for t in custom.terms] == [1, 2]
        for term in custom.terms:
            assert term.pool1 == "ERCOT"
            assert term.product1 == "7X24"
            assert term.holiday_schedule == "NERC"
            assert term.indexes1 == [PriceIndex(0, "PLATTS", "ERCOT NORTH", "MONTHLY")]
            # period volume and price are not backfilled
            assert term.volume == 0.0
        assert custom.terms[0].indexes1[0] is not custom.terms[1].indexes1[0]

    def test_intercompany_names_are_configurable(self, ledger: FakeLedger):
        ledger.queue([_swap_row(5)])
        headers = PowerSwapFetcher(ledger, intercompany_names=["SENA"]).fetch(TRADE_DATE)
        assert headers[0].interaffiliate_flag == "N"


# ── Power option ─────────────────────────────────────────────────────────


class TestPowerOptionsFetcher:
    def test_formulas_decode_to_both_slots(self, ledger: FakeLedger):
        ledger.queue(
            [
                party_row(
                    "poption_key",
                    9,
                    volume=10,
                    tz_exercise_zone="EPT",
                    dy_beg_day=JUNE_1,
                    dy_end_day=JUNE_30,
                    strike_price=55.0,
                    strike_price_type="F",
                    settle_formula="[GD|PJM WH|DAILY] * 1.0",
                    strike_formula="no index here",
                )
            ]
        )
        [header] = PowerOptionsFetcher(ledger).fetch(TRADE_DATE)
        assert header.deal_type == "POPTS"
        assert header.direction == "PURCHASE"
        assert header.exercise_zone == "EPT"
        [term] = header.terms
        assert term.indexes1 == [PriceIndex(0, "GD", "PJM WH", "DAILY")]
        assert term.indexes2 == []
        assert term.formula2 == "no index here"
        assert term.fixed_price == 55.0


# ── Spread option ────────────────────────────────────────────────────────


class TestSpreadOptionFetcher:
    def test_two_legs(self, ledger: FakeLedger):
        ledger.queue(
            [
                party_row(
                    "spread_option_key",
                    3,
                    volume=0,
                    dy_beg_day1=JUNE_1,
                    dy_end_day1=JUNE_30,
                    ppep_pp_pool1="PJM",
                    ppep_pp_pool2="NYISO",
                    ppep_pep_product1="ONPEAK",
                    ppep_pep_product2="OFFPEAK",
                    point_code="ZONE J",
                    strike_price=4.0,
                    formula1="[GD|PJM WH|DAILY]",
                    formula2="[ICE|ZONE J|DAILY]",
                )
            ]
        )
        [header] = SpreadOptionFetcher(ledger).fetch(TRADE_DATE)
        assert header.deal_type == "SPDOPT"
        assert header.direction == "UNDETERMINED"
        assert header.start_date == JUNE_1
        [term] = header.terms
        assert (term.pool1, term.pool2) == ("PJM", "NYISO")
        assert term.indexes1[0].pub_index == "PJM WH"
        assert term.indexes2[0].publication == "ICE"

    def test_by_keys_is_not_supported(self, ledger: FakeLedger):
        with pytest.raises(UnsupportedLookupError):
            SpreadOptionFetcher(ledger).fetch_by_keys([1])


# ── Heat-rate swap ───────────────────────────────────────────────────────


class TestHeatRateSwapFetcher:
    def test_fuel_and_power_indexes(self, ledger: FakeLedger):
        ledger.queue(
            [
                party_row(
                    "hrswps_key",
                    4,
                    volume1=-100,
                    option_key=12,
                    dy_beg_day=JUNE_1,
                    dy_end_day=JUNE_30,
                    pif_pi_pb_publication1="GD",
                    pif_pi_pub_index1="HSC",
                    pif_pi_pb_publication2="ICE",
                    pif_pi_pub_index2="ERCOT NORTH",
                    pif_frq_frequency2="DAILY",
                )
            ]
        )
        [header] = HeatRateSwapFetcher(ledger).fetch(TRADE_DATE)
        assert header.deal_type == "HRSWPS"
        assert header.direction == "SALE"
        assert header.exotic_flag == "NA"
        assert header.exercised_option_key == 12
        [term] = header.terms
        assert term.indexes1 == [PriceIndex(0, "GD", "HSC", "")]
        assert term.indexes2 == [PriceIndex(0, "ICE", "ERCOT NORTH", "DAILY")]
