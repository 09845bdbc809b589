"""
Domain Interfaces (Ports)
"""

from .repositories import (
    CreditApplicationRepository,
    CreditLedgerRepository,
    EventRepository,
    ImportRepository,
    PaymentScheduleRepository,
)
from .clients import EventWebhookClient

__all__ = [
    "CreditApplicationRepository",
    "CreditLedgerRepository",
    "EventRepository",
    "ImportRepository",
    "PaymentScheduleRepository",
    "EventWebhookClient",
]
