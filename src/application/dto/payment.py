"""Data transfer objects for payment schedule operations."""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from src.domain.entities import PaymentScheduleEntry


@dataclass(frozen=True)
class UpdatePaymentRequest:
    """Edit of an unpaid schedule entry."""

    amount_cents: Optional[int] = None
    due_date: Optional[date] = None

    def validate(self) -> List[str]:
        errors = []

        if self.amount_cents is None and self.due_date is None:
            errors.append("amount_cents or due_date is required")

        if self.amount_cents is not None and self.amount_cents < 0:
            errors.append("amount_cents cannot be negative")

        return errors


@dataclass(frozen=True)
class PaymentResponse:
    """
    A schedule entry as presented on a given day.

    `status` is the presented status; `stored_status` is what is persisted.
    """

    payment_id: str
    import_id: str
    payment_type: str
    amount_cents: int
    due_date: str
    status: str
    stored_status: str
    installment_number: Optional[int]
    total_installments: Optional[int]
    paid_at: Optional[str]

    @classmethod
    def from_entity(
        cls,
        entry: PaymentScheduleEntry,
        today: date,
        notice_days: int,
    ) -> "PaymentResponse":
        return cls(
            payment_id=str(entry.id),
            import_id=str(entry.import_id),
            payment_type=entry.payment_type.value,
            amount_cents=entry.amount_cents,
            due_date=entry.due_date.isoformat(),
            status=entry.effective_status(today, notice_days).value,
            stored_status=entry.status.value,
            installment_number=entry.installment_number,
            total_installments=entry.total_installments,
            paid_at=entry.paid_at.isoformat() + "Z" if entry.paid_at else None,
        )


@dataclass(frozen=True)
class PaymentScheduleResponse:
    """Full schedule of one import."""

    import_id: str
    total_cents: int
    paid_cents: int
    payments: List[PaymentResponse]
