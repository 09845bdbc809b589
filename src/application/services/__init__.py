"""Application services (use cases)."""

from .credit_application_service import CreditApplicationService
from .credit_ledger_service import CreditLedgerService
from .event_publisher import EventPublisher
from .import_service import ImportService, StageListener
from .payment_schedule_service import PaymentScheduleService

__all__ = [
    "CreditApplicationService",
    "CreditLedgerService",
    "EventPublisher",
    "ImportService",
    "PaymentScheduleService",
    "StageListener",
]
