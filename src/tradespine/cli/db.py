"""
CLI: ``tradespine db`` - analytics-store management commands.
"""

from __future__ import annotations

import typer

from tradespine.cli.utils import make_context, output_result

app = typer.Typer(no_args_is_help=True)


@app.command()
def init(
    analytics: str | None = typer.Option(None, "--analytics", help="Analytics store URL"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without changes"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Initialise the analytics schema (create tables)."""
    from tradespine.ops.database import initialize_analytics

    ctx = make_context(analytics=analytics, with_ledger=False, dry_run=dry_run)
    result = initialize_analytics(ctx)
    output_result(result, as_json=json_out, title="Analytics Init")
