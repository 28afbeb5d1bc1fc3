"""Pydantic schemas for the HTTP surface."""

from tradespine.api.schemas.common import ProblemDetail, SuccessResponse
from tradespine.api.schemas.trades import FindingSchema, InsertRunBody, ProcessTradesBody

__all__ = [
    "FindingSchema",
    "InsertRunBody",
    "ProblemDetail",
    "ProcessTradesBody",
    "SuccessResponse",
]
