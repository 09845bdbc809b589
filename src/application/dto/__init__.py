"""Data Transfer Objects for application layer."""

from .credit_application import (
    ApplicationResponse,
    CreateApplicationRequest,
    FinalizeRequest,
    FinancialDecisionRequest,
    PreAnalysisDecisionRequest,
    StatusChangeResponse,
    StatusHistoryResponse,
)
from .financial import FinancialPreviewResponse
from .import_order import CreateImportRequest, ImportResponse
from .ledger import LedgerEntryResponse, LedgerResponse
from .payment import PaymentResponse, PaymentScheduleResponse, UpdatePaymentRequest

__all__ = [
    "ApplicationResponse",
    "CreateApplicationRequest",
    "FinalizeRequest",
    "FinancialDecisionRequest",
    "PreAnalysisDecisionRequest",
    "StatusChangeResponse",
    "StatusHistoryResponse",
    "FinancialPreviewResponse",
    "CreateImportRequest",
    "ImportResponse",
    "LedgerEntryResponse",
    "LedgerResponse",
    "PaymentResponse",
    "PaymentScheduleResponse",
    "UpdatePaymentRequest",
]
