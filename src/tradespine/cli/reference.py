"""
CLI: ``tradespine ref`` - reference lookups.
"""

from __future__ import annotations

import typer

from tradespine.cli.utils import make_context, output_result

app = typer.Typer(no_args_is_help=True)


@app.command("portfolios")
def portfolios(
    source_system: str | None = typer.Option(None, "--source-system"),
    analytics: str | None = typer.Option(None, "--analytics", help="Analytics store URL"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Portfolio to risk legal entity mappings."""
    from tradespine.ops.trades import list_portfolio_risk_mappings

    ctx = make_context(analytics=analytics, with_ledger=False)
    result = list_portfolio_risk_mappings(ctx, source_system)
    output_result(result, as_json=json_out, title="Portfolio risk mappings")


@app.command("lar")
def lar(
    analytics: str | None = typer.Option(None, "--analytics", help="Analytics store URL"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Rows of the latest LAR report."""
    from tradespine.ops.trades import list_lar_base

    ctx = make_context(analytics=analytics, with_ledger=False)
    result = list_lar_base(ctx)
    output_result(result, as_json=json_out, title="LAR base")
