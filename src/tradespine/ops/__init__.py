"""
Operations layer: the transport-agnostic surface of trade-spine.

- All functions accept ``OperationContext`` as first argument
- All functions return ``OperationResult[T]`` (never raise)
- No HTTP or CLI knowledge lives here
- Write operations honour ``dry_run``

Usage::

    from tradespine.ops import OperationContext
    from tradespine.ops.requests import RunCycleRequest
    from tradespine.ops.trades import run_extraction_cycle

    ctx = OperationContext(ledger=ledger_adapter, analytics=analytics_adapter)
    result = run_extraction_cycle(ctx, RunCycleRequest("emission", date(2022, 5, 5)))
    assert result.success
"""

from tradespine.ops.context import OperationContext
from tradespine.ops.result import OperationError, OperationResult

__all__ = [
    "OperationContext",
    "OperationError",
    "OperationResult",
]
