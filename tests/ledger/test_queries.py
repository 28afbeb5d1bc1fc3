"""Tests for the ledger predicate builders and header query rendering."""

from __future__ import annotations

import pytest

from tradespine.ledger import queries
from tradespine.ledger.queries import (
    MAX_IN_LIST,
    HeaderQuery,
    in_predicate,
    ordered_keys,
    pair_predicate,
)

ALL_HEADER_QUERIES = [
    queries.POWER,
    queries.POWER_SWAP,
    queries.POWER_OPTIONS,
    queries.CAPACITY,
    queries.PTP,
    queries.EMISSION,
    queries.EMISSION_OPTION,
    queries.SPREAD_OPTION,
    queries.HEAT_RATE_SWAP,
    queries.TCC_FTR,
    queries.TRANSMISSION,
    queries.MISC_CHARGE,
]


class TestInPredicate:
    def test_named_binds(self):
        where, params = in_predicate("pv.pd_power_key", [7, 9])
        assert where == "pv.pd_power_key IN (:k0, :k1)"
        assert params == {"k0": 7, "k1": 9}

    def test_chunks_long_lists(self):
        keys = list(range(MAX_IN_LIST + 5))
        where, params = in_predicate("k", keys)
        assert where.startswith("(k IN (")
        assert where.count(" IN (") == 2
        assert " OR k IN (" in where
        assert len(params) == MAX_IN_LIST + 5
        assert f":k{MAX_IN_LIST}" in where.split(" OR ")[1]

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            in_predicate("k", [])


class TestPairPredicate:
    def test_pairs(self):
        where, params = pair_predicate("key", "seq", [(1, 0), (1, 2)])
        assert where == "((key = :k0 AND seq = :s0) OR (key = :k1 AND seq = :s1))"
        assert params == {"k0": 1, "s0": 0, "k1": 1, "s1": 2}

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            pair_predicate("key", "seq", [])


class TestOrderedKeys:
    def test_first_appearance_order(self):
        assert ordered_keys([3, 1, 3, 2, 1]) == [3, 1, 2]

    def test_pairs(self):
        assert ordered_keys([(1, 0), (1, 0), (2, 1)]) == [(1, 0), (2, 1)]


class TestHeaderQuery:
    def test_since_orders_predicates(self):
        query = HeaderQuery(
            template="SELECT * FROM t pd WHERE {where}",
            key_column="pd.key",
            changed="pd.modify_date > :last_run_time",
            order_by="pd.key",
        )
        sql = query.since("pd.kind = :deal_type")
        assert sql == (
            "SELECT * FROM t pd WHERE pd.trade_date = :trade_date AND pd.kind = :deal_type "
            "AND pd.modify_date > :last_run_time\nORDER BY pd.key"
        )

    def test_by_keys_uses_lookup_template(self):
        query = HeaderQuery(
            template="SELECT a FROM t WHERE {where}",
            key_column="t.key",
            changed="1 = 1",
            lookup_template="SELECT b FROM t WHERE {where}",
        )
        sql, params = query.by_keys([5])
        assert sql == "SELECT b FROM t WHERE t.key IN (:k0)"
        assert params == {"k0": 5}

    @pytest.mark.parametrize("query", ALL_HEADER_QUERIES)
    def test_every_family_renders(self, query):
        sql = query.since()
        assert "{where}" not in sql
        assert ":trade_date" in sql
        assert ":last_run_time" in sql

    def test_tcc_deal_type_filter(self):
        assert ":deal_type" in queries.TCC_FTR.since(queries.TCC_DEAL_TYPE_FILTER)

    @pytest.mark.parametrize(
        "template",
        [
            queries.POWER_TERMS,
            queries.POWER_INDEXES,
            queries.POWER_SWAP_TERMS,
            queries.CAPACITY_TERMS,
            queries.CAPACITY_INDEXES,
            queries.EMISSION_TERMS,
            queries.EMISSION_OPTION_TERMS,
            queries.TRANSMISSION_TERMS,
            queries.MISC_CHARGE_TERMS,
        ],
    )
    def test_correlation_templates_take_a_where(self, template):
        assert "{where}" in template
        assert "x IN (:k0)" in template.format(where="x IN (:k0)")
