"""
CLI utility helpers: output formatting and store wiring.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from tradespine.core.adapters import DatabaseAdapter, adapter_from_url
from tradespine.core.settings import get_settings
from tradespine.ops.context import OperationContext
from tradespine.ops.result import OperationResult

console = Console()
err_console = Console(stderr=True)

TRADE_DATE_FORMATS = ["%Y-%m-%d"]
TIMESTAMP_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S", "%Y-%m-%dT%H:%M:%S.%f"]


# ── Store helpers ────────────────────────────────────────────────────────


def open_ledger(url: str | None = None) -> DatabaseAdapter:
    """Adapter for the ledger; defaults to ``TRADESPINE_LEDGER_URL``."""
    return adapter_from_url(url or get_settings().ledger_url)


def open_analytics(url: str | None = None) -> DatabaseAdapter:
    """Adapter for the analytics store; defaults to the configured URL."""
    settings = get_settings()
    if url is None and not settings.analytics_url:
        settings.data_dir.mkdir(parents=True, exist_ok=True)
    return adapter_from_url(url or settings.resolved_analytics_url())


def make_context(
    *,
    ledger: str | None = None,
    analytics: str | None = None,
    with_ledger: bool = True,
    dry_run: bool = False,
) -> OperationContext:
    """Create an ``OperationContext`` for CLI commands."""
    settings = get_settings()
    return OperationContext(
        ledger=open_ledger(ledger) if with_ledger else None,
        analytics=open_analytics(analytics),
        caller="cli",
        dry_run=dry_run,
        intercompany_names=tuple(settings.intercompany_names),
        reference_source_system=settings.reference_source_system,
    )


# ── Output helpers ───────────────────────────────────────────────────────


def _to_dict(obj: Any) -> dict[str, Any]:
    """Convert a dataclass / dict to a plain dict."""
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if hasattr(obj, "__dataclass_fields__"):
        return asdict(obj)
    if isinstance(obj, dict):
        return obj
    return {"value": str(obj)}


def fail_if_error(result: OperationResult) -> None:
    """Print the error of a failed result and exit with status 1."""
    if result.success:
        return
    err = result.error
    msg = err.message if err else "Unknown error"
    code = err.code if err else "ERROR"
    err_console.print(f"[bold red]Error[/bold red] ({code}): {msg}")
    raise typer.Exit(code=1)


def output_result(
    result: OperationResult,
    *,
    as_json: bool = False,
    title: str = "",
) -> None:
    """Render an ``OperationResult`` to the terminal."""
    fail_if_error(result)

    data = result.data

    if as_json:
        if data is None:
            payload: Any = None
        elif isinstance(data, list | tuple):
            payload = [_to_dict(d) for d in data]
        else:
            payload = _to_dict(data)
        console.print_json(json.dumps(payload, default=str))
        return

    if data is None:
        console.print("[dim]Nothing found.[/dim]")
    elif isinstance(data, list):
        if not data:
            console.print("[dim]No items.[/dim]")
            return
        print_table(data, title=title)
    else:
        _print_dict(_to_dict(data), title=title)


def print_table(items: list, *, title: str = "", columns: list[str] | None = None) -> None:
    """Render a list of dataclasses/dicts as a Rich table."""
    rows = [_to_dict(item) for item in items]
    columns = columns or list(rows[0])
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in columns:
        table.add_column(col, overflow="fold")
    for row in rows:
        table.add_row(*(str(row.get(col, "")) for col in columns))
    console.print(table)


def _print_dict(data: dict[str, Any], *, title: str = "") -> None:
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        console.print(f"  [cyan]{k}[/cyan]: {v}")
