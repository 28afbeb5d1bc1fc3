"""
CLI: ``tradespine runs`` - extraction-run (watermark) commands.
"""

from __future__ import annotations

from datetime import datetime

import typer

from tradespine.cli.utils import TIMESTAMP_FORMATS, TRADE_DATE_FORMATS, make_context, output_result

app = typer.Typer(no_args_is_help=True)


@app.command("last")
def last(
    deal_type: str = typer.Argument(..., help="Deal type tag, e.g. 'EMSSN'"),
    trade_date: datetime = typer.Option(..., "--trade-date", "-t", formats=TRADE_DATE_FORMATS),
    analytics: str | None = typer.Option(None, "--analytics", help="Analytics store URL"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show the latest extraction run for a deal type and trade date."""
    from tradespine.ops.requests import GetLastRunRequest
    from tradespine.ops.trades import get_last_extraction_run

    ctx = make_context(analytics=analytics, with_ledger=False)
    result = get_last_extraction_run(
        ctx, GetLastRunRequest(deal_type=deal_type, trade_date=trade_date)
    )
    output_result(result, as_json=json_out, title=f"Last run: {deal_type}")


@app.command("record")
def record(
    deal_type: str = typer.Argument(..., help="Deal type tag"),
    trade_date: datetime = typer.Option(..., "--trade-date", "-t", formats=TRADE_DATE_FORMATS),
    cutoff: datetime = typer.Option(..., "--cutoff", "-c", formats=TIMESTAMP_FORMATS),
    analytics: str | None = typer.Option(None, "--analytics", help="Analytics store URL"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Validate without writing"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Append an extraction run."""
    from tradespine.ops.requests import InsertRunRequest
    from tradespine.ops.trades import insert_extraction_run

    ctx = make_context(analytics=analytics, with_ledger=False, dry_run=dry_run)
    result = insert_extraction_run(
        ctx, InsertRunRequest(deal_type=deal_type, trade_date=trade_date, cutoff=cutoff)
    )
    output_result(result, as_json=json_out, title="Recorded run")


@app.command("history")
def history(
    deal_type: str = typer.Argument(..., help="Deal type tag"),
    trade_date: datetime = typer.Option(..., "--trade-date", "-t", formats=TRADE_DATE_FORMATS),
    analytics: str | None = typer.Option(None, "--analytics", help="Analytics store URL"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List every extraction run for a deal type and trade date."""
    from tradespine.ops.requests import GetLastRunRequest
    from tradespine.ops.trades import list_extraction_runs

    ctx = make_context(analytics=analytics, with_ledger=False)
    result = list_extraction_runs(
        ctx, GetLastRunRequest(deal_type=deal_type, trade_date=trade_date)
    )
    output_result(result, as_json=json_out, title=f"Runs: {deal_type}")
