"""Credit ledger entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4


class LedgerEntryStatus(str, Enum):
    ACTIVE = "active"
    RELEASED = "released"


@dataclass
class LedgerEntry:
    """
    A reservation of credit capacity held by one import.

    Only the financed portion of the import is reserved; the down payment is
    paid up front and never competes for capacity.
    """

    application_id: UUID
    import_id: UUID
    amount_reserved_cents: int
    id: UUID = field(default_factory=uuid4)
    status: LedgerEntryStatus = LedgerEntryStatus.ACTIVE
    reserved_at: datetime = field(default_factory=datetime.utcnow)
    released_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == LedgerEntryStatus.ACTIVE

    def to_dict(self) -> dict:
        return {
            "entry_id": str(self.id),
            "application_id": str(self.application_id),
            "import_id": str(self.import_id),
            "amount_reserved_cents": self.amount_reserved_cents,
            "status": self.status.value,
            "reserved_at": self.reserved_at.isoformat() + "Z",
            "released_at": (
                self.released_at.isoformat() + "Z" if self.released_at else None
            ),
        }


@dataclass(frozen=True)
class LedgerBalance:
    """Limit, usage and remaining capacity of one application."""

    application_id: UUID
    limit_cents: int
    used_cents: int

    @property
    def available_cents(self) -> int:
        return self.limit_cents - self.used_cents
