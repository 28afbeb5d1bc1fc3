"""Tests for the term/index correlator."""

from __future__ import annotations

from datetime import datetime

import pytest

from conftest import FakeLedger
from tradespine.domain.trades import DealHeader, DealTerm, PriceIndex
from tradespine.ledger.correlator import IndexSource, TermCorrelator, TermSource
from tradespine.ledger.mapping import integer, when

TERMS = TermSource(
    name="volumes",
    sql="SELECT * FROM volumes WHERE {where}",
    filter_column="v.deal_key",
    key_column="deal_key",
    map_row=lambda row: DealTerm(vol_seq=integer(row, "seq"), beg_date=when(row, "beg")),
)

POSITIONAL_TERMS = TermSource(
    name="ranges",
    sql="SELECT * FROM ranges WHERE {where}",
    filter_column="deal_key",
    key_column="deal_key",
    map_row=lambda row: DealTerm(beg_date=when(row, "beg")),
    positional_seq=True,
)

PAIR_INDEXES = IndexSource(
    name="indexes",
    sql="SELECT * FROM indexes WHERE {where}",
    filter_column="deal_key",
    key_column="deal_key",
    seq_filter_column="seq",
    seq_column="seq",
)

KEY_INDEXES = IndexSource(
    name="deal_indexes",
    sql="SELECT * FROM deal_indexes WHERE {where}",
    filter_column="deal_key",
    key_column="deal_key",
)


def _index_row(key, seq=None, publication="GD"):
    row = {"deal_key": key, "publication": publication, "pub_index": "HSC", "frequency": "DAILY"}
    if seq is not None:
        row["seq"] = seq
    return row


class TestFetchTerms:
    def test_empty_keys_issue_no_query(self, ledger: FakeLedger):
        assert TermCorrelator(ledger).fetch_terms([], TERMS) == {}
        assert ledger.calls == []

    def test_keys_are_deduplicated_in_first_appearance_order(self, ledger: FakeLedger):
        TermCorrelator(ledger).fetch_terms([9, 4, 9], TERMS)
        sql, params = ledger.calls[0]
        assert sql == "SELECT * FROM volumes WHERE v.deal_key IN (:k0, :k1)"
        assert params == {"k0": 9, "k1": 4}

    def test_grouped_by_key_in_row_order(self, ledger: FakeLedger):
        ledger.queue(
            [
                {"deal_key": 1, "seq": 2, "beg": datetime(2022, 6, 1)},
                {"deal_key": 2, "seq": 1, "beg": datetime(2022, 7, 1)},
                {"deal_key": 1, "seq": 1, "beg": datetime(2022, 5, 1)},
            ]
        )
        grouped = TermCorrelator(ledger).fetch_terms([1, 2], TERMS)
        assert [t.vol_seq for t in grouped[1]] == [2, 1]
        assert [t.vol_seq for t in grouped[2]] == [1]

    def test_positional_sequence(self, ledger: FakeLedger):
        ledger.queue([{"deal_key": 1}, {"deal_key": 2}, {"deal_key": 1}])
        grouped = TermCorrelator(ledger).fetch_terms([1, 2], POSITIONAL_TERMS)
        assert [t.vol_seq for t in grouped[1]] == [0, 1]
        assert [t.vol_seq for t in grouped[2]] == [0]

    def test_store_errors_propagate(self, ledger: FakeLedger):
        ledger.error = RuntimeError("ORA-03113")
        with pytest.raises(RuntimeError, match="ORA-03113"):
            TermCorrelator(ledger).fetch_terms([1], TERMS)


class TestFetchIndexes:
    def test_pair_lookup(self, ledger: FakeLedger):
        ledger.queue([_index_row(1, 2)])
        grouped = TermCorrelator(ledger).fetch_indexes([(1, 2), (1, 2)], PAIR_INDEXES)
        sql, params = ledger.calls[0]
        assert "((deal_key = :k0 AND seq = :s0))" in sql
        assert params == {"k0": 1, "s0": 2}
        assert grouped == {1: [PriceIndex(2, "GD", "HSC", "DAILY")]}

    def test_key_lookup_uses_position(self, ledger: FakeLedger):
        ledger.queue([_index_row(5, publication="GD"), _index_row(5, publication="ICE")])
        grouped = TermCorrelator(ledger).fetch_indexes([5], KEY_INDEXES)
        assert [(i.vol_seq, i.publication) for i in grouped[5]] == [(0, "GD"), (1, "ICE")]

    def test_empty_keys_issue_no_query(self, ledger: FakeLedger):
        assert TermCorrelator(ledger).fetch_indexes([], PAIR_INDEXES) == {}
        assert ledger.calls == []


class TestAttachIndexes:
    def test_matches_key_and_sequence(self):
        terms = {1: [DealTerm(vol_seq=1), DealTerm(vol_seq=2)], 2: [DealTerm(vol_seq=1)]}
        indexes = {1: [PriceIndex(2, "GD", "HSC", "DAILY")]}
        TermCorrelator.attach_indexes(terms, indexes)
        assert terms[1][0].indexes1 == []
        assert terms[1][1].indexes1 == [PriceIndex(2, "GD", "HSC", "DAILY")]
        assert terms[2][0].indexes1 == []

    def test_attached_indexes_are_copies(self):
        index = PriceIndex(1, "GD", "HSC", "DAILY")
        terms = {1: [DealTerm(vol_seq=1)]}
        TermCorrelator.attach_indexes(terms, {1: [index]})
        assert terms[1][0].indexes1[0] is not index

    def test_unknown_key_is_ignored(self):
        terms = {1: [DealTerm(vol_seq=1)]}
        TermCorrelator.attach_indexes(terms, {7: [PriceIndex(1)]})
        assert terms[1][0].indexes1 == []


class TestSpliceTerms:
    def test_backfills_fields_from_initial_term(self):
        header = DealHeader(deal_key=1)
        initial = DealTerm(pool1="PJM", indexes1=[PriceIndex(0, "GD", "HSC", "DAILY")])
        fetched = [DealTerm(vol_seq=1), DealTerm(vol_seq=2)]
        TermCorrelator.splice_terms(header, fetched, initial, ("pool1", "indexes1"))
        assert [t.pool1 for t in header.terms] == ["PJM", "PJM"]
        assert header.terms[0].indexes1 == initial.indexes1
        assert header.terms[0].indexes1[0] is not header.terms[1].indexes1[0]
        assert header.terms[0].indexes1[0] is not initial.indexes1[0]

    def test_without_initial_term_nothing_is_backfilled(self):
        header = DealHeader(deal_key=1)
        TermCorrelator.splice_terms(header, [DealTerm(vol_seq=1)], None, ("pool1",))
        assert header.terms == [DealTerm(vol_seq=1)]
