"""Import entity and its lifecycle stages."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from uuid import UUID, uuid4

from .credit_application import Actor, ActorRole


class ImportStage(str, Enum):
    PLANNING = "planning"
    PRODUCTION = "production"
    DELIVERED_TO_AGENT = "delivered_to_agent"
    TRANSPORT = "transport"
    CUSTOMS_CLEARANCE = "customs_clearance"
    DOMESTIC_TRANSPORT = "domestic_transport"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Forward progression; cancellation is allowed from any non-terminal stage.
STAGE_SEQUENCE: List[ImportStage] = [
    ImportStage.PLANNING,
    ImportStage.PRODUCTION,
    ImportStage.DELIVERED_TO_AGENT,
    ImportStage.TRANSPORT,
    ImportStage.CUSTOMS_CLEARANCE,
    ImportStage.DOMESTIC_TRANSPORT,
    ImportStage.COMPLETED,
]

TERMINAL_STAGES = frozenset({ImportStage.COMPLETED, ImportStage.CANCELLED})


def next_stage(stage: ImportStage) -> Optional[ImportStage]:
    """Return the stage that follows `stage`, or None if it is terminal."""
    if stage in TERMINAL_STAGES:
        return None
    return STAGE_SEQUENCE[STAGE_SEQUENCE.index(stage) + 1]


@dataclass(frozen=True)
class FinancialSnapshot:
    """
    Financial breakdown captured when the import was created.

    Attributes:
        fob_value_cents: Declared FOB value
        down_payment_rate: Percentage paid up front
        admin_fee_rate: Percentage fee levied on the financed amount
        terms: Installment day-counts
        down_payment_cents: Portion paid immediately
        financed_amount_cents: Portion drawn from the credit ledger
        admin_fee_cents: Fee on the financed amount
        total_cost_cents: FOB value plus admin fee
        installment_cents: Per-installment amount (before remainder)
    """

    fob_value_cents: int
    down_payment_rate: Decimal
    admin_fee_rate: Decimal
    terms: tuple
    down_payment_cents: int
    financed_amount_cents: int
    admin_fee_cents: int
    total_cost_cents: int
    installment_cents: int

    @property
    def installment_count(self) -> int:
        return len(self.terms)

    def to_dict(self) -> dict:
        return {
            "fob_value_cents": self.fob_value_cents,
            "down_payment_rate": str(self.down_payment_rate),
            "admin_fee_rate": str(self.admin_fee_rate),
            "terms": list(self.terms),
            "down_payment_cents": self.down_payment_cents,
            "financed_amount_cents": self.financed_amount_cents,
            "admin_fee_cents": self.admin_fee_cents,
            "total_cost_cents": self.total_cost_cents,
            "installment_cents": self.installment_cents,
            "installment_count": self.installment_count,
        }


@dataclass
class ImportOrder:
    """An import operation financed against an approved credit application."""

    application_id: UUID
    importer_id: str
    name: str
    currency: str
    snapshot: FinancialSnapshot
    id: UUID = field(default_factory=uuid4)
    stage: ImportStage = ImportStage.PLANNING
    delivered_to_agent_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_terminal(self) -> bool:
        return self.stage in TERMINAL_STAGES

    def is_owned_by(self, actor: Actor) -> bool:
        return actor.role == ActorRole.IMPORTER and actor.user_id == self.importer_id

    def can_be_changed_by(self, actor: Actor) -> bool:
        return actor.role == ActorRole.ADMIN or self.is_owned_by(actor)

    def can_be_read_by(self, actor: Actor) -> bool:
        """Internal roles see every import; importers only their own."""
        return actor.role != ActorRole.IMPORTER or self.is_owned_by(actor)
