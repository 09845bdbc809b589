"""Pydantic schemas for API request/response validation."""

from .credit_application import (
    ApplicationResponseSchema,
    CreateApplicationSchema,
    FinalizeSchema,
    FinancialDecisionSchema,
    LedgerEntrySchema,
    LedgerResponseSchema,
    PreAnalysisDecisionSchema,
    ReviewSchema,
    StatusChangeSchema,
    StatusHistoryResponseSchema,
)
from .error import ErrorResponseSchema
from .financial import FinancialPreviewResponseSchema, FinancialPreviewSchema
from .import_order import (
    AdvanceImportSchema,
    CreateImportSchema,
    ImportResponseSchema,
    UpdateImportValueSchema,
)
from .payment import (
    PaymentResponseSchema,
    PaymentScheduleResponseSchema,
    RecordPaymentSchema,
    UpdatePaymentSchema,
)

__all__ = [
    "ApplicationResponseSchema",
    "CreateApplicationSchema",
    "FinalizeSchema",
    "FinancialDecisionSchema",
    "LedgerEntrySchema",
    "LedgerResponseSchema",
    "PreAnalysisDecisionSchema",
    "ReviewSchema",
    "StatusChangeSchema",
    "StatusHistoryResponseSchema",
    "ErrorResponseSchema",
    "FinancialPreviewResponseSchema",
    "FinancialPreviewSchema",
    "AdvanceImportSchema",
    "CreateImportSchema",
    "ImportResponseSchema",
    "UpdateImportValueSchema",
    "PaymentResponseSchema",
    "PaymentScheduleResponseSchema",
    "RecordPaymentSchema",
    "UpdatePaymentSchema",
]
