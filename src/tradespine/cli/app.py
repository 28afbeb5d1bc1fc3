"""
Root Typer application for the trade-spine CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from tradespine.core.logging import configure_logging

app = Typer(
    name="tradespine",
    help="trade-spine: incremental trade extraction and anomaly merge.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from tradespine import __version__

        typer.echo(f"tradespine {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Configure structured logging at this level."
    ),
) -> None:
    """trade-spine CLI: extract deals, manage extraction runs and the analytics store."""
    if log_level:
        configure_logging(level=log_level, json_format=False, service="tradespine-cli")


# ── Sub-command registration ─────────────────────────────────────────────

from tradespine.cli.db import app as db_app  # noqa: E402
from tradespine.cli.deals import app as deals_app  # noqa: E402
from tradespine.cli.reference import app as ref_app  # noqa: E402
from tradespine.cli.runs import app as runs_app  # noqa: E402
from tradespine.cli.serve import app as serve_app  # noqa: E402

app.add_typer(deals_app, name="deals", help="Deal extraction.")
app.add_typer(runs_app, name="runs", help="Extraction runs (watermarks).")
app.add_typer(db_app, name="db", help="Analytics store operations.")
app.add_typer(ref_app, name="ref", help="Reference lookups.")
app.add_typer(serve_app, name="serve", help="Start the API server.")
