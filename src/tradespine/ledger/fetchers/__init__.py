"""
Family header fetchers and their registry.

Each deal family of the ledger has one fetcher class; ``FETCHERS`` maps the
family name used by the CLI, the API and the ops layer to that class.

Usage:
    from tradespine.ledger.fetchers import get_fetcher

    fetcher = get_fetcher("power-swap", ledger)
    headers = fetcher.fetch(trade_date, last_run_time)
"""

from __future__ import annotations

from typing import Any

from tradespine.core.protocols import RowSource
from tradespine.ledger.fetchers.base import Classified, Fetched, HeaderFetcher, RowClass
from tradespine.ledger.fetchers.capacity import (
    TCC_FTR_DEAL_TYPES,
    CapacityFetcher,
    PtpFetcher,
    TccFtrFetcher,
)
from tradespine.ledger.fetchers.emission import EmissionFetcher, EmissionOptionFetcher
from tradespine.ledger.fetchers.power import (
    HeatRateSwapFetcher,
    PowerFetcher,
    PowerOptionsFetcher,
    PowerSwapFetcher,
    SpreadOptionFetcher,
)
from tradespine.ledger.fetchers.transmission import MiscChargeFetcher, TransmissionFetcher

FETCHERS: dict[str, type[HeaderFetcher]] = {
    cls.family: cls
    for cls in (
        PowerFetcher,
        PowerSwapFetcher,
        PowerOptionsFetcher,
        CapacityFetcher,
        PtpFetcher,
        EmissionFetcher,
        EmissionOptionFetcher,
        SpreadOptionFetcher,
        HeatRateSwapFetcher,
        TccFtrFetcher,
        TransmissionFetcher,
        MiscChargeFetcher,
    )
}


def get_fetcher(family: str, source: RowSource, **kwargs: Any) -> HeaderFetcher:
    """Instantiate the fetcher registered under *family*.

    Raises:
        KeyError: if no fetcher is registered under that name.
    """
    try:
        cls = FETCHERS[family]
    except KeyError:
        raise KeyError(
            f"unknown deal family {family!r}; expected one of {sorted(FETCHERS)}"
        ) from None
    return cls(source, **kwargs)


__all__ = [
    "FETCHERS",
    "TCC_FTR_DEAL_TYPES",
    "CapacityFetcher",
    "Classified",
    "EmissionFetcher",
    "EmissionOptionFetcher",
    "Fetched",
    "HeaderFetcher",
    "HeatRateSwapFetcher",
    "MiscChargeFetcher",
    "PowerFetcher",
    "PowerOptionsFetcher",
    "PowerSwapFetcher",
    "PtpFetcher",
    "RowClass",
    "SpreadOptionFetcher",
    "TccFtrFetcher",
    "TransmissionFetcher",
    "get_fetcher",
]
