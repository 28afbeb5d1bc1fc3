"""
CLI layer for trade-spine.

Provides a Typer application with sub-commands that delegate to the
operations layer (``tradespine.ops``). All business logic lives in ops;
this package handles only terminal transport: argument parsing, coloured
output and table formatting.

Entry point::

    tradespine --help
"""

from tradespine.cli.app import app

__all__ = ["app"]
