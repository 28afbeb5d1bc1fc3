"""Tests for the family fetcher registry."""

from __future__ import annotations

import pytest

from conftest import FakeLedger
from tradespine.ledger.fetchers import (
    FETCHERS,
    TCC_FTR_DEAL_TYPES,
    PowerSwapFetcher,
    TccFtrFetcher,
    get_fetcher,
)


class TestRegistry:
    def test_every_family_is_registered(self):
        assert sorted(FETCHERS) == [
            "capacity",
            "emission",
            "emission-option",
            "heat-rate-swaps",
            "misc-charge",
            "power",
            "power-options",
            "power-swap",
            "ptp",
            "spread-option",
            "tcc-ftr",
            "transmission",
        ]

    def test_run_tags_are_unique(self):
        tags = [cls.run_tag for cls in FETCHERS.values()]
        assert len(set(tags)) == len(tags)

    def test_by_keys_families(self):
        supported = sorted(name for name, cls in FETCHERS.items() if cls.supports_by_keys)
        assert supported == ["power", "power-options", "power-swap"]

    def test_get_fetcher(self):
        fetcher = get_fetcher("power-swap", FakeLedger(), intercompany_names=["SENA"])
        assert isinstance(fetcher, PowerSwapFetcher)
        assert fetcher.deal_type == "PSWPS"

    @pytest.mark.parametrize("deal_type", TCC_FTR_DEAL_TYPES)
    def test_get_fetcher_forwards_tcc_deal_type(self, deal_type):
        fetcher = get_fetcher("tcc-ftr", FakeLedger(), deal_type=deal_type)
        assert isinstance(fetcher, TccFtrFetcher)
        assert fetcher.deal_type == deal_type

    def test_unknown_family(self):
        with pytest.raises(KeyError, match="unknown deal family"):
            get_fetcher("coal", FakeLedger())
