"""
Common API schemas: the success envelope and RFC 7807 errors.

Every endpoint returns either :class:`SuccessResponse` (2xx) or
:class:`ProblemDetail` (4xx/5xx).
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ProblemDetail(BaseModel):
    """RFC 7807 «Problem Details for HTTP APIs».

    Error Codes:
        - ``VALIDATION_FAILED`` (400): Invalid input data
        - ``PARSE_FAILED`` (422): Ledger data could not be decoded
        - ``SERIALIZATION_FAILED`` (422): A deal could not be serialized
        - ``NOT_SUPPORTED`` (501): Lookup not provided for the family
        - ``INTERNAL`` (500): Unexpected server error
    """

    type: str = Field(default="about:blank", description="Error type URI")
    title: str = Field(description="Short human-readable error summary")
    status: int = Field(description="HTTP status code")
    detail: str = Field(default="", description="Human-readable explanation of the error")
    instance: str = Field(default="", description="URI of the failing request")
    code: str = Field(default="", description="Machine-readable ops error code")


class SuccessResponse(BaseModel, Generic[T]):
    """Standard success envelope."""

    data: T = Field(description="Response payload (type varies by endpoint)")
    elapsed_ms: float = Field(default=0.0, description="Server-side processing time in milliseconds")
    warnings: list[str] = Field(default_factory=list, description="Non-fatal warnings")
