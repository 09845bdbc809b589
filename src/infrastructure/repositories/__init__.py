"""Repository implementations."""

from .credit_application_repository import PostgresCreditApplicationRepository
from .event_repository import PostgresEventRepository
from .import_repository import PostgresImportRepository
from .ledger_repository import PostgresCreditLedgerRepository
from .payment_repository import PostgresPaymentScheduleRepository

__all__ = [
    "PostgresCreditApplicationRepository",
    "PostgresCreditLedgerRepository",
    "PostgresEventRepository",
    "PostgresImportRepository",
    "PostgresPaymentScheduleRepository",
]
