"""Data transfer objects for credit ledger reads."""

from dataclasses import dataclass
from typing import List, Optional

from src.domain.entities import LedgerBalance, LedgerEntry


@dataclass(frozen=True)
class LedgerEntryResponse:
    entry_id: str
    import_id: str
    amount_reserved_cents: int
    status: str
    reserved_at: str
    released_at: Optional[str]

    @classmethod
    def from_entity(cls, entry: LedgerEntry) -> "LedgerEntryResponse":
        return cls(
            entry_id=str(entry.id),
            import_id=str(entry.import_id),
            amount_reserved_cents=entry.amount_reserved_cents,
            status=entry.status.value,
            reserved_at=entry.reserved_at.isoformat() + "Z",
            released_at=entry.released_at.isoformat() + "Z" if entry.released_at else None,
        )


@dataclass(frozen=True)
class LedgerResponse:
    """Limit, usage, availability and reservations of one application."""

    application_id: str
    credit_limit_cents: int
    used_cents: int
    available_cents: int
    entries: List[LedgerEntryResponse]

    @classmethod
    def from_entities(
        cls,
        balance: LedgerBalance,
        entries: List[LedgerEntry],
    ) -> "LedgerResponse":
        return cls(
            application_id=str(balance.application_id),
            credit_limit_cents=balance.limit_cents,
            used_cents=balance.used_cents,
            available_cents=balance.available_cents,
            entries=[LedgerEntryResponse.from_entity(e) for e in entries],
        )
