"""
trade-spine - incremental trade extraction and anomaly merge.

Packages:
    tradespine.core       Adapters, dialects, errors, logging, settings, cursor store
    tradespine.domain     DealHeader / DealTerm / PriceIndex, findings, reference rows
    tradespine.ledger     Formula decoder, family header fetchers, term/index correlator
    tradespine.analytics  Analytics schema, processed-trade upsert, reference lookups
    tradespine.ops        Transport-neutral operations (OperationResult envelope)
    tradespine.api        FastAPI application
    tradespine.cli        Typer command line (``tradespine``)
"""

__version__ = "0.1.0"
