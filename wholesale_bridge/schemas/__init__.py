"""Pydantic schemas for request/response validation."""

from wholesale_bridge.schemas.common import ErrorResponse, StatusResponse

__all__ = [
    "ErrorResponse",
    "StatusResponse",
]
