"""
Shared API router utilities.

- ``_dc()``: convert a dataclass (or dict) to a JSON-ready dict
- ``_handle_error()``: convert a failed OperationResult to a problem response
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any

from tradespine.api.middleware.errors import problem_response, status_for_error_code
from tradespine.ops.result import INTERNAL


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    return value


def _dc(obj: Any) -> dict[str, Any]:
    """Convert a dataclass (or dict) to a plain dict with ISO timestamps.

    Objects with their own ``to_dict`` use it. Returns an empty dict for
    anything else.
    """
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if hasattr(obj, "__dataclass_fields__"):
        return _jsonable(asdict(obj))
    return obj if isinstance(obj, dict) else {}


def _handle_error(result, instance: str = ""):
    """Convert a failed ``OperationResult`` into a Problem Details response."""
    code = result.error.code if result.error else INTERNAL
    return problem_response(
        status=status_for_error_code(code),
        title=result.error.message if result.error else "Operation failed",
        instance=instance,
        code=code,
    )
