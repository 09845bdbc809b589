"""Credit application Pydantic schemas."""

from decimal import Decimal
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from src.domain.entities import FinancialStatus, PreAnalysisStatus


class CreateApplicationSchema(BaseModel):
    """Schema for POST /v1/credit-applications request body."""

    model_config = ConfigDict(
        json_schema_extra={"examples": [{"requested_amount_cents": 10000000}]}
    )

    requested_amount_cents: int = Field(
        ...,
        gt=0,
        description="Credit amount requested by the importer, in cents",
        examples=[10000000],
    )


class ReviewSchema(BaseModel):
    """Schema for POST /v1/credit-applications/{id}/review."""

    status: Literal["under_review", "rejected"] = Field(
        ...,
        description="Target application status",
        examples=["under_review"],
    )


class PreAnalysisDecisionSchema(BaseModel):
    """Schema for POST /v1/credit-applications/{id}/pre-analysis."""

    status: PreAnalysisStatus = Field(
        ...,
        description="Target pre-analysis status",
        examples=["pre_approved"],
    )
    notes: Optional[str] = Field(None, max_length=5000, description="Reviewer notes")


class FinancialDecisionSchema(BaseModel):
    """Schema for POST /v1/credit-applications/{id}/financial."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "status": "approved",
                    "approved_amount_cents": 10000000,
                    "approved_terms": [30, 60, 90, 120],
                    "notes": "Approved after balance sheet review",
                }
            ]
        }
    )

    status: FinancialStatus = Field(..., description="Target financial status")
    approved_amount_cents: Optional[int] = Field(
        None,
        description="Approved credit amount in cents (required when approving)",
    )
    approved_terms: Optional[Union[List[int], str]] = Field(
        None,
        description="Installment day-counts, as a list or comma-separated string",
        examples=[[30, 60, 90, 120]],
    )
    notes: Optional[str] = Field(None, max_length=5000)


class FinalizeSchema(BaseModel):
    """Schema for POST /v1/credit-applications/{id}/finalize."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "final_credit_limit_cents": 10000000,
                    "down_payment_rate": "30",
                    "admin_fee_rate": "10",
                    "terms": [30, 60, 90],
                }
            ]
        }
    )

    final_credit_limit_cents: int = Field(
        ...,
        description="Final credit limit imports draw against, in cents",
    )
    down_payment_rate: Optional[Decimal] = Field(
        None,
        description="Down payment percentage (0-100); finance default when omitted",
    )
    admin_fee_rate: Optional[Decimal] = Field(
        None,
        description="Admin fee percentage on the financed amount (0-100)",
    )
    terms: Optional[Union[List[int], str]] = Field(
        None,
        description="Final installment day-counts; approved terms when omitted",
    )


class ApplicationResponseSchema(BaseModel):
    """Schema for a credit application in responses."""

    model_config = ConfigDict(from_attributes=True)

    application_id: str
    importer_id: str
    requested_amount_cents: int
    application_status: str
    pre_analysis_status: str
    financial_status: str
    admin_status: str
    workflow_stage: str = Field(
        ...,
        description="Summary stage for reporting",
        examples=["pending_financial"],
    )
    pre_analysis_notes: Optional[str] = None
    approved_amount_cents: Optional[int] = None
    approved_terms: Optional[List[int]] = None
    financial_notes: Optional[str] = None
    final_credit_limit_cents: Optional[int] = None
    final_down_payment_rate: Optional[Decimal] = None
    final_admin_fee_rate: Optional[Decimal] = None
    final_approved_terms: Optional[List[int]] = None
    credit_used_cents: int
    available_credit_cents: int
    created_at: str
    updated_at: str


class StatusChangeSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    change_id: str
    axis: str
    from_status: str
    to_status: str
    actor_id: str
    actor_role: str
    changed_at: str


class StatusHistoryResponseSchema(BaseModel):
    """Schema for GET /v1/credit-applications/{id}/history."""

    model_config = ConfigDict(from_attributes=True)

    application_id: str
    changes: List[StatusChangeSchema]


class LedgerEntrySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    entry_id: str
    import_id: str
    amount_reserved_cents: int
    status: str
    reserved_at: str
    released_at: Optional[str] = None


class LedgerResponseSchema(BaseModel):
    """Schema for GET /v1/credit-applications/{id}/ledger."""

    model_config = ConfigDict(from_attributes=True)

    application_id: str
    credit_limit_cents: int
    used_cents: int
    available_cents: int = Field(..., description="limit - sum of active reservations")
    entries: List[LedgerEntrySchema]
