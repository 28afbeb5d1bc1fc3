"""Tests for the capacity, point-to-point, TCC/FTR, emission, transmission
and misc-charge fetchers."""

from __future__ import annotations

from datetime import datetime

import pytest

from conftest import TRADE_DATE, FakeLedger, party_row
from tradespine.core.errors import UnsupportedLookupError
from tradespine.core.timestamps import ZERO_TIME
from tradespine.domain.trades import PriceIndex
from tradespine.ledger.fetchers import (
    CapacityFetcher,
    EmissionFetcher,
    EmissionOptionFetcher,
    MiscChargeFetcher,
    PtpFetcher,
    TccFtrFetcher,
    TransmissionFetcher,
)
from tradespine.ledger.fetchers.transmission import charge_direction

JUNE_1 = datetime(2022, 6, 1)
JUNE_30 = datetime(2022, 6, 30)


# ── Capacity ─────────────────────────────────────────────────────────────


def _capacity_row(key, non_standard="N", **overrides):
    row = party_row(
        "capacity_key",
        key,
        dn_direction="PURCHASE",
        dy_beg_day=JUNE_1,
        dy_end_day=JUNE_30,
        price_type="F",
        charge=2.75,
        volume=40,
        energy_formula=None,
        ppcp_pp_pool="MISO",
        ppcp_pcp_product="CAP",
        ctp_point_code="ZONE 4",
        sch_schedule="NERC",
        non_standard_flag=non_standard,
    )
    row.update(overrides)
    return row


class TestCapacityFetcher:
    def test_standard_without_formula_issues_one_query(self, ledger: FakeLedger):
        ledger.queue([_capacity_row(1)])
        [header] = CapacityFetcher(ledger).fetch(TRADE_DATE)
        assert len(ledger.calls) == 1
        assert header.deal_type == "CAPCTY"
        assert header.exotic_flag == "NA"
        [term] = header.terms
        assert term.fixed_price == 2.75
        assert term.pool1 == "MISO"
        assert term.indexes1 == []

    def test_ranges_and_formula_indexes(self, ledger: FakeLedger):
        ledger.queue(
            [
                _capacity_row(1, energy_formula="[GD|MISO IND|DAILY]"),
                _capacity_row(2, non_standard="Y"),
            ],
            [
                {"cpd_capacity_key": 2, "dy_beg_day": JUNE_1, "dy_end_day": datetime(2022, 6, 10)},
                {"cpd_capacity_key": 2, "dy_beg_day": datetime(2022, 6, 11), "dy_end_day": JUNE_30},
            ],
            [
                {"cpd_capacity_key": 1, "publication": "GD", "pub_index": "MISO IND", "frequency": "DAILY"},
                {"cpd_capacity_key": 1, "publication": "ICE", "pub_index": "MISO IND", "frequency": "DAILY"},
            ],
        )
        standard, ranged = CapacityFetcher(ledger).fetch(TRADE_DATE)

        assert ledger.params[1] == {"k0": 2}
        assert ledger.params[2] == {"k0": 1}

        assert standard.terms[0].indexes1 == [
            PriceIndex(0, "GD", "MISO IND", "DAILY"),
            PriceIndex(1, "ICE", "MISO IND", "DAILY"),
        ]
        assert [t.vol_seq for t in ranged.terms] == [0, 1]
        assert ranged.terms[1].beg_date == datetime(2022, 6, 11)
        for term in ranged.terms:
            assert term.price_type == "F"
            assert term.pool1 == "MISO"
            assert term.product1 == "CAP"
            assert term.point_code1 == "ZONE 4"
            assert term.holiday_schedule == "NERC"
            assert term.fixed_price == 0.0

    def test_formula_indexes_land_on_first_range(self, ledger: FakeLedger):
        ledger.queue(
            [_capacity_row(3, non_standard="Y", energy_formula="[GD|MISO IND|DAILY]")],
            [
                {"cpd_capacity_key": 3, "dy_beg_day": JUNE_1, "dy_end_day": JUNE_1},
                {"cpd_capacity_key": 3, "dy_beg_day": JUNE_30, "dy_end_day": JUNE_30},
            ],
            [{"cpd_capacity_key": 3, "publication": "GD", "pub_index": "MISO IND", "frequency": "DAILY"}],
        )
        [header] = CapacityFetcher(ledger).fetch(TRADE_DATE)
        assert len(header.terms[0].indexes1) == 1
        assert header.terms[1].indexes1 == []


# ── Point-to-point ───────────────────────────────────────────────────────


class TestPtpFetcher:
    def test_single_flow_day(self, ledger: FakeLedger):
        ledger.queue(
            [
                party_row(
                    "ptp_key",
                    8,
                    dy_flow_day=JUNE_1,
                    ppep_pp_pool="PJM",
                    ppep_pep_product="PTP",
                    publication1="PJM DA",
                    pub_index1="NODE A",
                    publication2="PJM RT",
                    pub_index2="NODE B",
                )
            ]
        )
        [header] = PtpFetcher(ledger).fetch(TRADE_DATE)
        assert header.direction == "PURCHASE"
        assert header.interaffiliate_flag == "N"
        assert header.exotic_flag == "NA"
        assert header.execution_time == ZERO_TIME
        [term] = header.terms
        assert term.beg_date == term.end_date == JUNE_1
        assert term.indexes1 == [PriceIndex(0, "PJM DA", "NODE A", "HOURLY")]
        assert term.indexes2 == [PriceIndex(0, "PJM RT", "NODE B", "HOURLY")]


# ── TCC / FTR ────────────────────────────────────────────────────────────


class TestTccFtrFetcher:
    def test_deal_type_is_bound(self, ledger: FakeLedger):
        fetcher = TccFtrFetcher(ledger, deal_type="TCCSWP")
        fetcher.fetch(TRADE_DATE)
        sql, params = ledger.calls[0]
        assert params["deal_type"] == "TCCSWP"
        assert "pd.dlt_deal_type = :deal_type" in sql
        assert fetcher.deal_type == "TCCSWP"
        assert fetcher.run_tag == "TCCFTR"

    def test_unknown_deal_type(self, ledger: FakeLedger):
        with pytest.raises(ValueError, match="unknown TCC/FTR deal type"):
            TccFtrFetcher(ledger, deal_type="SWAP")

    def test_source_and_sink_indexes(self, ledger: FakeLedger):
        ledger.queue(
            [
                party_row(
                    "deal_key",
                    11,
                    deal_type="FTROPT",
                    volume=-5,
                    dy_beg_day=JUNE_1,
                    dy_end_day=JUNE_30,
                    pi_pb_publication="NYISO",
                    frq_frequency="HOURLY",
                    poi_pi_pub_index="ZONE A",
                    pow_pi_pub_index="ZONE J",
                )
            ]
        )
        [header] = TccFtrFetcher(ledger).fetch(TRADE_DATE)
        assert header.deal_type == "FTROPT"
        assert header.direction == "SALE"
        [term] = header.terms
        assert term.indexes1 == [PriceIndex(0, "NYISO", "ZONE A", "HOURLY")]
        assert term.indexes2 == [PriceIndex(0, "NYISO", "ZONE J", "HOURLY")]


# ── Emission ─────────────────────────────────────────────────────────────


def _emission_volume(key, seq, formula=None, **overrides):
    row = {
        "ed_emission_key": key,
        "volume_seq": seq,
        "dy_beg_day": JUNE_1,
        "dy_end_day": JUNE_30,
        "price_type": "I" if formula else "F",
        "price": 3.1,
        "volume": 1000,
        "epdt_emission_product": "SO2",
        "ctp_point_code": "EPA",
        "formula": formula,
    }
    row.update(overrides)
    return row


class TestEmissionFetcher:
    def test_terms_decode_formulas(self, ledger: FakeLedger):
        ledger.queue(
            [party_row("emission_key", 500, dn_direction="SALE")],
            [_emission_volume(500, 1, "[ARGUS|SO2 VINTAGE|MONTHLY]"), _emission_volume(500, 2)],
        )
        [header] = EmissionFetcher(ledger).fetch(TRADE_DATE)
        assert header.direction == "SALE"
        assert ledger.params[1] == {"k0": 500}
        first, second = header.terms
        assert first.indexes1 == [PriceIndex(0, "ARGUS", "SO2 VINTAGE", "MONTHLY")]
        assert first.formula1 == "[ARGUS|SO2 VINTAGE|MONTHLY]"
        assert second.indexes1 == []
        assert second.product1 == "SO2"

    def test_header_without_terms(self, ledger: FakeLedger):
        ledger.queue([party_row("emission_key", 501)], [])
        [header] = EmissionFetcher(ledger).fetch(TRADE_DATE)
        assert header.terms == []

    def test_by_keys_is_not_supported(self, ledger: FakeLedger):
        with pytest.raises(UnsupportedLookupError):
            EmissionFetcher(ledger).fetch_by_keys([500])
        assert ledger.calls == []


class TestEmissionOptionFetcher:
    def test_options_sharing_an_underlying_get_their_own_terms(self, ledger: FakeLedger):
        ledger.queue(
            [
                party_row("eoption_key", 1, ed_emission_key=500, strike_price=4.0, volume=10),
                party_row("eoption_key", 2, ed_emission_key=500, strike_price=6.0, volume=-20),
            ],
            [
                {"ed_emission_key": 500, "volume_seq": 1, "dy_beg_day": JUNE_1, "dy_end_day": JUNE_30, "epdt_emission_product": "NOX"},
                {"ed_emission_key": 500, "volume_seq": 2, "dy_beg_day": JUNE_1, "dy_end_day": JUNE_30, "epdt_emission_product": "NOX"},
            ],
        )
        first, second = EmissionOptionFetcher(ledger).fetch(TRADE_DATE)

        assert ledger.params[1] == {"k0": 500}
        assert [h.deal_key for h in (first, second)] == [1, 2]
        assert first.direction == "PURCHASE"
        assert second.direction == "SALE"
        assert first.exercise_zone == "PPT"

        assert [(t.vol_seq, t.fixed_price, t.volume) for t in first.terms] == [
            (1, 4.0, 10.0),
            (2, 4.0, 10.0),
        ]
        assert [(t.vol_seq, t.fixed_price, t.volume) for t in second.terms] == [
            (1, 6.0, -20.0),
            (2, 6.0, -20.0),
        ]
        first.terms[0].product1 = "CHANGED"
        assert second.terms[0].product1 == "NOX"


# ── Transmission ─────────────────────────────────────────────────────────


class TestTransmissionFetcher:
    def test_terms_and_date_only_execution(self, ledger: FakeLedger):
        ledger.queue(
            [party_row("trans_key", 30, dn_direction="PURCHASE", execution_time="01/01/1900")],
            [
                {
                    "td_trans_key": 30,
                    "volume_seq": 1,
                    "dy_beg_day": JUNE_1,
                    "dy_end_day": JUNE_30,
                    "volume": 75,
                    "ppep_pep_product": "FIRM",
                    "ppep_pp_fm_pool": "BPA",
                    "ctp_fm_point_code": "MID C",
                    "ppep_pp_to_pool": "CAISO",
                    "ctp_to_point_code": "COB",
                    "sch_schedule": "NERC",
                }
            ],
        )
        [header] = TransmissionFetcher(ledger).fetch(TRADE_DATE)
        assert header.execution_time == datetime(1900, 1, 1)
        [term] = header.terms
        assert (term.pool1, term.point_code1) == ("BPA", "MID C")
        assert (term.pool2, term.point_code2) == ("CAISO", "COB")
        assert term.price_type == "F"
        assert term.volume == 75.0


# ── Misc charge ──────────────────────────────────────────────────────────


class TestMiscChargeFetcher:
    @pytest.mark.parametrize(
        ("flag", "direction"),
        [("P", "Payable"), ("R", "Receivable"), (None, "Receivable")],
    )
    def test_charge_direction(self, flag, direction):
        assert charge_direction(flag) == direction

    def test_terms(self, ledger: FakeLedger):
        ledger.queue(
            [party_row("misc_charge_key", 40, rec_pay_flag="P")],
            [
                {"mc_misc_charge_key": 40, "misc_vol_seq": 1, "dy_beg_day": JUNE_1, "dy_end_day": JUNE_30, "int_volume": 12},
                {"mc_misc_charge_key": 40, "misc_vol_seq": 2, "dy_beg_day": JUNE_1, "dy_end_day": JUNE_30, "int_volume": 8},
            ],
        )
        [header] = MiscChargeFetcher(ledger).fetch(TRADE_DATE)
        assert header.deal_type == "MISC"
        assert header.direction == "Payable"
        assert header.exotic_flag == "NA"
        assert [(t.vol_seq, t.volume) for t in header.terms] == [(1, 12.0), (2, 8.0)]


# ── Store errors ─────────────────────────────────────────────────────────


class TestStoreErrors:
    def test_header_query_error_propagates(self, ledger: FakeLedger):
        ledger.error = RuntimeError("ORA-03113: end-of-file on communication channel")
        with pytest.raises(RuntimeError, match="ORA-03113"):
            EmissionFetcher(ledger).fetch(TRADE_DATE)

    def test_correlation_error_aborts_the_fetch(self, ledger: FakeLedger):
        class FailOnSecond(FakeLedger):
            def query(self, sql, params=()):
                if self.calls:
                    self.calls.append((sql, params))
                    raise RuntimeError("terms unavailable")
                return super().query(sql, params)

        failing = FailOnSecond().queue([party_row("trans_key", 30, execution_time=None)])
        with pytest.raises(RuntimeError, match="terms unavailable"):
            TransmissionFetcher(failing).fetch(TRADE_DATE)
        assert len(failing.calls) == 2
