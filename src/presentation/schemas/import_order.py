"""Import Pydantic schemas."""

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.domain.entities import ImportStage


class CreateImportSchema(BaseModel):
    """Schema for POST /v1/imports request body."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "application_id": "550e8400-e29b-41d4-a716-446655440000",
                    "name": "Industrial valves - Ningbo",
                    "fob_value_cents": 10000000,
                    "currency": "USD",
                }
            ]
        }
    )

    application_id: UUID = Field(..., description="Finalized credit application to draw on")
    name: str = Field(..., min_length=1, max_length=255)
    fob_value_cents: int = Field(
        ...,
        description="Declared FOB value in cents",
        examples=[10000000],
    )
    currency: str = Field("USD", min_length=3, max_length=3)


class AdvanceImportSchema(BaseModel):
    """Schema for POST /v1/imports/{id}/advance."""

    to_stage: Optional[ImportStage] = Field(
        None,
        description="Expected next stage; the move is refused if it is not the next one",
    )


class UpdateImportValueSchema(BaseModel):
    """Schema for PATCH /v1/imports/{id}/value."""

    fob_value_cents: int = Field(..., description="New FOB value in cents")


class ImportResponseSchema(BaseModel):
    """Schema for an import with its financial snapshot."""

    model_config = ConfigDict(from_attributes=True)

    import_id: str
    application_id: str
    importer_id: str
    name: str
    currency: str
    stage: str
    fob_value_cents: int
    down_payment_rate: str
    admin_fee_rate: str
    terms: List[int]
    down_payment_cents: int
    financed_amount_cents: int = Field(..., description="Amount reserved on the credit ledger")
    admin_fee_cents: int
    total_cost_cents: int
    installment_cents: int
    installment_count: int
    delivered_to_agent_at: Optional[str] = None
    cancelled_at: Optional[str] = None
    created_at: str
