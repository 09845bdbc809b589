"""Payment schedule entities."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4


class PaymentType(str, Enum):
    DOWN_PAYMENT = "down_payment"
    INSTALLMENT = "installment"


class PaymentStatus(str, Enum):
    """
    Status of a schedule entry.

    Only PENDING, PAID and CANCELLED are stored. SCHEDULED and OVERDUE are
    derived from a stored PENDING entry and the date it is read on.
    """

    SCHEDULED = "scheduled"
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


STORED_PAYMENT_STATUSES = frozenset(
    {PaymentStatus.PENDING, PaymentStatus.PAID, PaymentStatus.CANCELLED}
)


def utc_today() -> date:
    """The current date on the UTC clock every schedule row is written with."""
    return datetime.utcnow().date()


@dataclass
class PaymentScheduleEntry:
    """A single payment obligation belonging to one import."""

    import_id: UUID
    payment_type: PaymentType
    amount_cents: int
    due_date: date
    id: UUID = field(default_factory=uuid4)
    status: PaymentStatus = PaymentStatus.PENDING
    installment_number: Optional[int] = None
    total_installments: Optional[int] = None
    paid_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def effective_status(self, today: date, notice_days: int = 0) -> PaymentStatus:
        """
        Status as seen on `today`.

        A stored pending entry reads as overdue once its due date has passed,
        and as scheduled while the due date is more than `notice_days` away.
        """
        if self.status != PaymentStatus.PENDING:
            return self.status
        if today > self.due_date:
            return PaymentStatus.OVERDUE
        if (self.due_date - today).days > notice_days:
            return PaymentStatus.SCHEDULED
        return PaymentStatus.PENDING

    @property
    def is_open(self) -> bool:
        return self.status == PaymentStatus.PENDING
