"""HTTP middleware and exception handlers."""

from tradespine.api.middleware.errors import (
    problem_response,
    status_for_error_code,
    unhandled_exception_handler,
)
from tradespine.api.middleware.request_id import RequestIDMiddleware

__all__ = [
    "RequestIDMiddleware",
    "problem_response",
    "status_for_error_code",
    "unhandled_exception_handler",
]
