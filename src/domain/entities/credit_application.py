"""Credit application entity and its four status axes."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from uuid import UUID, uuid4


class ApplicationStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class PreAnalysisStatus(str, Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    PRE_APPROVED = "pre_approved"
    NEEDS_DOCUMENTS = "needs_documents"
    NEEDS_CLARIFICATION = "needs_clarification"
    SUBMITTED_TO_FINANCIAL = "submitted_to_financial"


class FinancialStatus(str, Enum):
    PENDING_FINANCIAL = "pending_financial"
    UNDER_REVIEW_FINANCIAL = "under_review_financial"
    APPROVED = "approved"
    REJECTED = "rejected"
    NEEDS_DOCUMENTS_FINANCIAL = "needs_documents_financial"


class AdminStatus(str, Enum):
    PENDING_ADMIN = "pending_admin"
    ADMIN_FINALIZED = "admin_finalized"


class StatusAxis(str, Enum):
    """The independent status fields of a credit application."""

    APPLICATION = "application"
    PRE_ANALYSIS = "pre_analysis"
    FINANCIAL = "financial"
    ADMIN = "admin"


class ActorRole(str, Enum):
    """Role of the user performing an operation, as supplied by auth."""

    IMPORTER = "importer"
    REVIEWER = "reviewer"
    FINANCIAL_INSTITUTION = "financial_institution"
    ADMIN = "admin"


@dataclass(frozen=True)
class Actor:
    """The authenticated user acting on the system."""

    user_id: str
    role: ActorRole


@dataclass(frozen=True)
class WorkflowState:
    """
    Composite status of a credit application.

    The four axes are carried together so that every validation sees the
    whole state at once.
    """

    application: ApplicationStatus = ApplicationStatus.DRAFT
    pre_analysis: PreAnalysisStatus = PreAnalysisStatus.PENDING
    financial: FinancialStatus = FinancialStatus.PENDING_FINANCIAL
    admin: AdminStatus = AdminStatus.PENDING_ADMIN

    def get(self, axis: StatusAxis) -> Enum:
        return getattr(self, axis.value)

    def to_dict(self) -> dict:
        return {
            "application_status": self.application.value,
            "pre_analysis_status": self.pre_analysis.value,
            "financial_status": self.financial.value,
            "admin_status": self.admin.value,
        }


@dataclass(frozen=True)
class StatusChange:
    """A single applied transition, attributed and timestamped."""

    application_id: UUID
    axis: StatusAxis
    from_status: str
    to_status: str
    actor_id: str
    actor_role: ActorRole
    changed_at: datetime
    id: UUID = field(default_factory=uuid4)

    def to_dict(self) -> dict:
        return {
            "application_id": str(self.application_id),
            "axis": self.axis.value,
            "from_status": self.from_status,
            "to_status": self.to_status,
            "actor_id": self.actor_id,
            "actor_role": self.actor_role.value,
            "changed_at": self.changed_at.isoformat(),
        }


@dataclass
class CreditApplication:
    """
    An importer's request for trade credit.

    Financial terms are filled in progressively: the requested amount at
    creation, the financial institution's approved limit and terms, and the
    final limit, rates and terms at admin finalization. The final values are
    the ones imports draw against.
    """

    importer_id: str
    requested_amount_cents: int
    state: WorkflowState = field(default_factory=WorkflowState)
    id: UUID = field(default_factory=uuid4)

    pre_analysis_notes: Optional[str] = None

    approved_amount_cents: Optional[int] = None
    approved_terms: Optional[List[int]] = None
    financial_notes: Optional[str] = None

    final_credit_limit_cents: Optional[int] = None
    final_down_payment_rate: Optional[Decimal] = None
    final_admin_fee_rate: Optional[Decimal] = None
    final_approved_terms: Optional[List[int]] = None

    credit_used_cents: int = 0
    version: int = 1
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_finalized(self) -> bool:
        return (
            self.state.admin == AdminStatus.ADMIN_FINALIZED
            and self.final_credit_limit_cents is not None
            and bool(self.final_approved_terms)
        )

    @property
    def available_credit_cents(self) -> int:
        if self.final_credit_limit_cents is None:
            return 0
        return self.final_credit_limit_cents - self.credit_used_cents
