"""
CLI: ``tradespine deals`` - deal extraction commands.
"""

from __future__ import annotations

from datetime import datetime

import typer

from tradespine.cli.utils import (
    TIMESTAMP_FORMATS,
    TRADE_DATE_FORMATS,
    console,
    fail_if_error,
    make_context,
    output_result,
    print_table,
)

app = typer.Typer(no_args_is_help=True)

_SUMMARY_COLUMNS = [
    "deal_key",
    "deal_type",
    "direction",
    "company",
    "portfolio",
    "trader",
    "start_date",
    "end_date",
    "total_quantity",
]


def _print_deals(deals: list, title: str) -> None:
    if not deals:
        console.print("[dim]No deals changed.[/dim]")
        return
    rows = []
    for deal in deals:
        row = deal.to_dict()
        row["terms"] = len(deal.terms)
        rows.append(row)
    print_table(rows, title=title, columns=_SUMMARY_COLUMNS + ["terms"])


@app.command("fetch")
def fetch(
    family: str = typer.Argument(..., help="Deal family, e.g. 'power-swap'"),
    trade_date: datetime = typer.Option(..., "--trade-date", "-t", formats=TRADE_DATE_FORMATS),
    since: datetime | None = typer.Option(
        None, "--since", "-s", formats=TIMESTAMP_FORMATS,
        help="Only deals changed after this moment; omit for all",
    ),
    deal_type: str | None = typer.Option(
        None, "--deal-type", help="TCC/FTR deal type: FTROPT, FTRSWP or TCCSWP",
    ),
    ledger: str | None = typer.Option(None, "--ledger", help="Ledger URL"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Fetch the deals of one family changed since a moment."""
    from tradespine.ops.requests import FetchDealsRequest
    from tradespine.ops.trades import fetch_deals

    ctx = make_context(ledger=ledger)
    result = fetch_deals(
        ctx,
        FetchDealsRequest(
            family=family, trade_date=trade_date, last_run_time=since, tcc_deal_type=deal_type
        ),
    )
    if json_out:
        output_result(result, as_json=True)
        return
    fail_if_error(result)
    _print_deals(result.data.deals, title=f"{result.data.deal_type} deals")


@app.command("cycle")
def cycle(
    family: str = typer.Argument(..., help="Deal family"),
    trade_date: datetime = typer.Option(..., "--trade-date", "-t", formats=TRADE_DATE_FORMATS),
    deal_type: str | None = typer.Option(None, "--deal-type", help="TCC/FTR deal type"),
    submit: bool = typer.Option(False, "--submit", help="Upsert the deals as processed trades"),
    ledger: str | None = typer.Option(None, "--ledger", help="Ledger URL"),
    analytics: str | None = typer.Option(None, "--analytics", help="Analytics store URL"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Fetch without recording a run"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Run one incremental extraction cycle for a family."""
    from tradespine.ops.requests import RunCycleRequest
    from tradespine.ops.trades import run_extraction_cycle

    ctx = make_context(ledger=ledger, analytics=analytics, dry_run=dry_run)
    result = run_extraction_cycle(
        ctx,
        RunCycleRequest(
            family=family, trade_date=trade_date, tcc_deal_type=deal_type, submit=submit
        ),
    )
    output_result(result, as_json=json_out, title="Extraction cycle")
