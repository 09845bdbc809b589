"""Data transfer objects for credit application operations."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from src.domain.entities import CreditApplication, StatusChange
from src.service.workflow import workflow_stage


@dataclass(frozen=True)
class CreateApplicationRequest:
    """Input data for opening a draft credit application."""

    requested_amount_cents: int

    def validate(self) -> List[str]:
        errors = []

        if self.requested_amount_cents <= 0:
            errors.append("requested_amount_cents must be positive")

        return errors


@dataclass(frozen=True)
class PreAnalysisDecisionRequest:
    """Reviewer's pre-analysis decision."""

    status: str
    notes: Optional[str] = None


@dataclass(frozen=True)
class FinancialDecisionRequest:
    """
    Financial institution's decision.

    An approval must carry the approved amount and terms.
    """

    status: str
    approved_amount_cents: Optional[int] = None
    approved_terms: Optional[List[int]] = None
    notes: Optional[str] = None

    def validate(self) -> List[str]:
        errors = []

        if self.status == "approved":
            if not self.approved_amount_cents or self.approved_amount_cents <= 0:
                errors.append("approved_amount_cents is required and must be positive")
            if not self.approved_terms:
                errors.append("approved_terms are required")
        elif self.approved_amount_cents is not None and self.approved_amount_cents <= 0:
            errors.append("approved_amount_cents must be positive")

        return errors


@dataclass(frozen=True)
class FinalizeRequest:
    """
    Admin finalization terms.

    Omitted rates and terms fall back to the finance defaults; omitted terms
    prefer the financial institution's approved terms.
    """

    final_credit_limit_cents: int
    down_payment_rate: Optional[Decimal] = None
    admin_fee_rate: Optional[Decimal] = None
    terms: Optional[List[int]] = None

    def validate(self) -> List[str]:
        errors = []

        if self.final_credit_limit_cents <= 0:
            errors.append("final_credit_limit_cents must be positive")

        return errors


@dataclass(frozen=True)
class ApplicationResponse:
    """Response data for a credit application."""

    application_id: str
    importer_id: str
    requested_amount_cents: int
    application_status: str
    pre_analysis_status: str
    financial_status: str
    admin_status: str
    workflow_stage: str
    pre_analysis_notes: Optional[str]
    approved_amount_cents: Optional[int]
    approved_terms: Optional[List[int]]
    financial_notes: Optional[str]
    final_credit_limit_cents: Optional[int]
    final_down_payment_rate: Optional[Decimal]
    final_admin_fee_rate: Optional[Decimal]
    final_approved_terms: Optional[List[int]]
    credit_used_cents: int
    available_credit_cents: int
    created_at: str
    updated_at: str

    @classmethod
    def from_entity(cls, application: CreditApplication) -> "ApplicationResponse":
        return cls(
            application_id=str(application.id),
            importer_id=application.importer_id,
            requested_amount_cents=application.requested_amount_cents,
            workflow_stage=workflow_stage(application.state),
            pre_analysis_notes=application.pre_analysis_notes,
            approved_amount_cents=application.approved_amount_cents,
            approved_terms=application.approved_terms,
            financial_notes=application.financial_notes,
            final_credit_limit_cents=application.final_credit_limit_cents,
            final_down_payment_rate=application.final_down_payment_rate,
            final_admin_fee_rate=application.final_admin_fee_rate,
            final_approved_terms=application.final_approved_terms,
            credit_used_cents=application.credit_used_cents,
            available_credit_cents=application.available_credit_cents,
            created_at=application.created_at.isoformat() + "Z",
            updated_at=application.updated_at.isoformat() + "Z",
            **application.state.to_dict(),
        )


@dataclass(frozen=True)
class StatusChangeResponse:
    """One entry of an application's status history."""

    change_id: str
    axis: str
    from_status: str
    to_status: str
    actor_id: str
    actor_role: str
    changed_at: str

    @classmethod
    def from_entity(cls, change: StatusChange) -> "StatusChangeResponse":
        return cls(
            change_id=str(change.id),
            axis=change.axis.value,
            from_status=change.from_status,
            to_status=change.to_status,
            actor_id=change.actor_id,
            actor_role=change.actor_role.value,
            changed_at=change.changed_at.isoformat() + "Z",
        )


@dataclass(frozen=True)
class StatusHistoryResponse:
    """Status history of an application, oldest first."""

    application_id: str
    changes: List[StatusChangeResponse] = field(default_factory=list)

    @classmethod
    def from_entities(
        cls,
        application_id: str,
        changes: List[StatusChange],
    ) -> "StatusHistoryResponse":
        return cls(
            application_id=application_id,
            changes=[StatusChangeResponse.from_entity(c) for c in changes],
        )
