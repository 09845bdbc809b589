"""Payment schedule Pydantic schemas."""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class UpdatePaymentSchema(BaseModel):
    """Schema for PATCH /v1/payments/{id}."""

    amount_cents: Optional[int] = Field(None, ge=0)
    due_date: Optional[date] = None


class RecordPaymentSchema(BaseModel):
    """Schema for POST /v1/payments/{id}/pay."""

    paid_at: Optional[datetime] = Field(
        None,
        description="When the payment was made; now when omitted",
    )


class PaymentResponseSchema(BaseModel):
    """Schema for a payment schedule entry."""

    model_config = ConfigDict(from_attributes=True)

    payment_id: str
    import_id: str
    payment_type: str = Field(..., examples=["installment"])
    amount_cents: int
    due_date: str = Field(..., examples=["2025-03-03"])
    status: str = Field(
        ...,
        description="Status as of today: scheduled, pending, overdue, paid or cancelled",
        examples=["pending"],
    )
    stored_status: str
    installment_number: Optional[int] = None
    total_installments: Optional[int] = None
    paid_at: Optional[str] = None


class PaymentScheduleResponseSchema(BaseModel):
    """Schema for GET /v1/imports/{id}/payments."""

    model_config = ConfigDict(from_attributes=True)

    import_id: str
    total_cents: int
    paid_cents: int
    payments: List[PaymentResponseSchema]
