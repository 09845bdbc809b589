"""Database infrastructure."""

from .connection import (
    DatabaseSessionManager,
    after_commit,
    db_manager,
    get_db_session,
    run_after_commit,
)
from .models import (
    Base,
    CreditApplicationModel,
    ImportModel,
    LedgerEntryModel,
    OutboundEventModel,
    PaymentScheduleModel,
    StatusChangeModel,
)

__all__ = [
    "get_db_session",
    "DatabaseSessionManager",
    "after_commit",
    "db_manager",
    "run_after_commit",
    "Base",
    "CreditApplicationModel",
    "ImportModel",
    "LedgerEntryModel",
    "OutboundEventModel",
    "PaymentScheduleModel",
    "StatusChangeModel",
]
