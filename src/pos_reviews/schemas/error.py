"""Error response schemas.

All error responses use the same envelope: {"error": {"code": "...", "message": "..."}}.
Exception handlers in main.py construct these from domain exceptions.
"""

from typing import Literal

from pydantic import BaseModel

ErrorCode = Literal[
    "validation_error",
    "not_found",
    "conflict",
    "domain_error",
    "storage_error",
    "internal_error",
]


class ErrorDetail(BaseModel):
    """Machine-readable code plus a human-readable message."""

    code: ErrorCode
    message: str


class ErrorResponse(BaseModel):
    """Top-level error envelope returned by all error responses."""

    error: ErrorDetail
