"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, Field

from .store import INT64_MAX, INT64_MIN


class CounterBody(BaseModel):
    """Counter value as sent and returned over HTTP."""

    count: int = Field(
        ...,
        strict=True,
        ge=INT64_MIN,
        le=INT64_MAX,
        description="Signed 64-bit counter value",
    )


class ErrorResponse(BaseModel):
    error: str
