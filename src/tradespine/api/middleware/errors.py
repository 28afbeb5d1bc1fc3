"""
Error-handling middleware: maps ops-layer errors to RFC 7807 responses.
"""

from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse

from tradespine.api.schemas.common import ProblemDetail
from tradespine.ops.result import (
    INTERNAL,
    NOT_SUPPORTED,
    PARSE_FAILED,
    SERIALIZATION_FAILED,
    VALIDATION_FAILED,
)

# ── Error code → HTTP status mapping ─────────────────────────────────────

ERROR_CODE_TO_STATUS: dict[str, int] = {
    VALIDATION_FAILED: 400,
    PARSE_FAILED: 422,
    SERIALIZATION_FAILED: 422,
    NOT_SUPPORTED: 501,
    INTERNAL: 500,
}


def status_for_error_code(code: str) -> int:
    """Resolve an ops error code to HTTP status, defaulting to 500."""
    return ERROR_CODE_TO_STATUS.get(code, 500)


def problem_response(
    *,
    status: int,
    title: str,
    detail: str = "",
    instance: str = "",
    code: str = "",
) -> JSONResponse:
    """Build a RFC 7807 JSON error response."""
    body = ProblemDetail(
        title=title,
        status=status,
        detail=detail,
        instance=instance,
        code=code,
    )
    return JSONResponse(
        status_code=status,
        content=body.model_dump(),
        media_type="application/problem+json",
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions: 500 with a ProblemDetail."""
    return problem_response(
        status=500,
        title="Internal Server Error",
        detail=str(exc) if request.app.state.settings.debug else "An unexpected error occurred.",
        instance=str(request.url),
        code=INTERNAL,
    )
