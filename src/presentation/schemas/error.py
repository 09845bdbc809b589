"""Pydantic schema for API error responses."""

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponseSchema(BaseModel):
    """
    Standard error response format for all API errors.

    Some errors add fields, e.g. `shortfall_cents` on INSUFFICIENT_CREDIT.
    """

    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={
            "examples": [
                {
                    "error": "INSUFFICIENT_CREDIT",
                    "message": (
                        "Insufficient credit for application "
                        "550e8400-e29b-41d4-a716-446655440000: requested 40000, "
                        "available 30000, shortfall 10000"
                    ),
                    "request_id": "abc123",
                    "requested_cents": 40000,
                    "available_cents": 30000,
                    "shortfall_cents": 10000,
                }
            ]
        },
    )

    error: str = Field(
        ...,
        description="Error code",
        examples=["CREDIT_APPLICATION_NOT_FOUND"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Credit application not found: 550e8400-e29b-41d4-a716-446655440000"],
    )
    request_id: str | None = Field(
        None,
        description="Request ID for tracing",
    )
