"""Financial preview Pydantic schemas."""

from decimal import Decimal
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class FinancialPreviewSchema(BaseModel):
    """Schema for POST /v1/financials/preview request body."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "fob_value_cents": 100000,
                    "down_payment_rate": "30",
                    "admin_fee_rate": "10",
                    "terms": [30, 60, 90],
                }
            ]
        }
    )

    fob_value_cents: int = Field(..., description="FOB value in cents")
    down_payment_rate: Optional[Decimal] = Field(
        None, description="Down payment percentage; finance default when omitted"
    )
    admin_fee_rate: Optional[Decimal] = Field(
        None, description="Admin fee percentage; finance default when omitted"
    )
    terms: Optional[Union[List[int], str]] = Field(
        None, description="Installment day-counts; finance default when omitted"
    )


class FinancialPreviewResponseSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    fob_value_cents: int
    down_payment_rate: str
    admin_fee_rate: str
    terms: List[int]
    down_payment_cents: int
    financed_amount_cents: int
    admin_fee_cents: int
    total_cost_cents: int
    installment_cents: int = Field(..., description="Installment before remainder allocation")
    installment_amounts: List[int] = Field(
        ..., description="Per-installment amounts summing to the financed amount"
    )
