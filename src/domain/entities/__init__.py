"""Domain Entities - Core business objects."""

from .credit_application import (
    Actor,
    ActorRole,
    AdminStatus,
    ApplicationStatus,
    CreditApplication,
    FinancialStatus,
    PreAnalysisStatus,
    StatusAxis,
    StatusChange,
    WorkflowState,
)
from .event import EventStatus, EventType, OutboundEvent
from .import_order import (
    FinancialSnapshot,
    ImportOrder,
    ImportStage,
    STAGE_SEQUENCE,
    TERMINAL_STAGES,
    next_stage,
)
from .ledger import LedgerBalance, LedgerEntry, LedgerEntryStatus
from .payment import (
    PaymentScheduleEntry,
    PaymentStatus,
    PaymentType,
    STORED_PAYMENT_STATUSES,
    utc_today,
)

__all__ = [
    "Actor",
    "ActorRole",
    "AdminStatus",
    "ApplicationStatus",
    "CreditApplication",
    "FinancialStatus",
    "PreAnalysisStatus",
    "StatusAxis",
    "StatusChange",
    "WorkflowState",
    "EventStatus",
    "EventType",
    "OutboundEvent",
    "FinancialSnapshot",
    "ImportOrder",
    "ImportStage",
    "STAGE_SEQUENCE",
    "TERMINAL_STAGES",
    "next_stage",
    "LedgerBalance",
    "LedgerEntry",
    "LedgerEntryStatus",
    "PaymentScheduleEntry",
    "PaymentStatus",
    "PaymentType",
    "STORED_PAYMENT_STATUSES",
    "utc_today",
]
