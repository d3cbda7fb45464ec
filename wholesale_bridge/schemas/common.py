"""Common Pydantic schemas used across the API."""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class ErrorResponse(BaseSchema):
    """Error response schema."""

    error: str
    code: str | None = None


class StatusResponse(BaseSchema):
    """Success/message envelope returned by the webhook, import and config routes."""

    success: bool
    message: str | None = None
