"""Pydantic schemas for delivery error responses."""

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    """Machine-readable error code and client-facing message."""

    code: str
    message: str


class ErrorResponse(BaseModel):
    """Standard error envelope returned for every rejected request."""

    success: bool = False
    error: ErrorDetail
