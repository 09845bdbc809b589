"""Data transfer objects for import operations."""

from dataclasses import dataclass
from typing import List, Optional
from uuid import UUID

from src.domain.entities import ImportOrder


@dataclass(frozen=True)
class CreateImportRequest:
    """Input data for creating an import against a finalized application."""

    application_id: UUID
    name: str
    fob_value_cents: int
    currency: str = "USD"

    def validate(self) -> List[str]:
        errors = []

        if not self.name or not self.name.strip():
            errors.append("name is required")

        if len(self.currency) != 3:
            errors.append("currency must be a 3-letter code")

        return errors


@dataclass(frozen=True)
class ImportResponse:
    """Response data for an import, with its financial snapshot."""

    import_id: str
    application_id: str
    importer_id: str
    name: str
    currency: str
    stage: str
    fob_value_cents: int
    down_payment_rate: str
    admin_fee_rate: str
    terms: List[int]
    down_payment_cents: int
    financed_amount_cents: int
    admin_fee_cents: int
    total_cost_cents: int
    installment_cents: int
    installment_count: int
    delivered_to_agent_at: Optional[str]
    cancelled_at: Optional[str]
    created_at: str

    @classmethod
    def from_entity(cls, import_order: ImportOrder) -> "ImportResponse":
        return cls(
            import_id=str(import_order.id),
            application_id=str(import_order.application_id),
            importer_id=import_order.importer_id,
            name=import_order.name,
            currency=import_order.currency,
            stage=import_order.stage.value,
            delivered_to_agent_at=(
                import_order.delivered_to_agent_at.isoformat() + "Z"
                if import_order.delivered_to_agent_at
                else None
            ),
            cancelled_at=(
                import_order.cancelled_at.isoformat() + "Z"
                if import_order.cancelled_at
                else None
            ),
            created_at=import_order.created_at.isoformat() + "Z",
            **import_order.snapshot.to_dict(),
        )
