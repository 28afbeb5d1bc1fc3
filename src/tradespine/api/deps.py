"""
FastAPI dependency injection: shared singletons and per-request factories.

Usage in routers::

    from tradespine.api.deps import OpContext

    @router.get("/things")
    def list_things(ctx: OpContext):
        ...

Manifesto:
    Dependency injection keeps routers thin. The two stores and the
    extraction-run store are created once per app (``app.state``); the
    per-request :class:`OperationContext` carries the request id through
    the call chain.

Tags:
    trade-spine, api, dependency-injection, OpContext
"""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, Request

from tradespine.ops.context import OperationContext


def get_operation_context(request: Request) -> OperationContext:
    """Build an :class:`OperationContext` from the current request."""
    state = request.app.state
    return OperationContext(
        ledger=state.ledger,
        analytics=state.analytics,
        runs=state.runs,
        request_id=getattr(request.state, "request_id", str(uuid.uuid4())),
        caller="api",
        intercompany_names=tuple(state.settings.intercompany_names),
        reference_source_system=state.settings.reference_source_system,
    )


OpContext = Annotated[OperationContext, Depends(get_operation_context)]
