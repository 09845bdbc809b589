"""PostgreSQL implementation of CreditApplicationRepository."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.entities import (
    ActorRole,
    AdminStatus,
    ApplicationStatus,
    CreditApplication,
    FinancialStatus,
    PreAnalysisStatus,
    StatusAxis,
    StatusChange,
    WorkflowState,
)
from src.domain.exceptions import ConcurrencyConflictException
from src.domain.interfaces import CreditApplicationRepository
from src.infrastructure.database.models import CreditApplicationModel, StatusChangeModel

from .base import load_enum


class PostgresCreditApplicationRepository(CreditApplicationRepository):
    """
    PostgreSQL implementation of the CreditApplication repository.

    `credit_used_cents` is owned by the ledger repository and is never
    written from here.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, application: CreditApplication) -> CreditApplication:
        """Persist a new application to the database."""
        model = CreditApplicationModel(
            id=str(application.id),
            importer_id=application.importer_id,
            requested_amount_cents=application.requested_amount_cents,
            credit_used_cents=application.credit_used_cents,
            version=application.version,
            created_at=application.created_at,
            updated_at=application.updated_at,
            **self._mutable_columns(application),
        )

        self._session.add(model)
        await self._session.flush()

        return application

    async def get_by_id(
        self,
        application_id: UUID,
        for_update: bool = False,
    ) -> Optional[CreditApplication]:
        """Retrieve an application by ID, always re-reading the row."""
        stmt = (
            select(CreditApplicationModel)
            .where(CreditApplicationModel.id == str(application_id))
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()

        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._to_entity(model)

    async def update(self, application: CreditApplication) -> CreditApplication:
        """Write status and term columns if the version still matches."""
        now = datetime.utcnow()
        stmt = (
            update(CreditApplicationModel)
            .where(
                CreditApplicationModel.id == str(application.id),
                CreditApplicationModel.version == application.version,
            )
            .values(
                version=application.version + 1,
                updated_at=now,
                **self._mutable_columns(application),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)

        if result.rowcount != 1:
            raise ConcurrencyConflictException(str(application.id))

        application.version += 1
        application.updated_at = now
        return application

    async def get_by_importer(self, importer_id: str) -> List[CreditApplication]:
        stmt = (
            select(CreditApplicationModel)
            .where(CreditApplicationModel.importer_id == importer_id)
            .order_by(CreditApplicationModel.created_at.desc())
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        models = result.scalars().all()

        return [self._to_entity(model) for model in models]

    async def add_status_changes(self, changes: List[StatusChange]) -> None:
        for change in changes:
            self._session.add(
                StatusChangeModel(
                    id=str(change.id),
                    application_id=str(change.application_id),
                    axis=change.axis.value,
                    from_status=change.from_status,
                    to_status=change.to_status,
                    actor_id=change.actor_id,
                    actor_role=change.actor_role.value,
                    changed_at=change.changed_at,
                )
            )
        await self._session.flush()

    async def get_status_history(self, application_id: UUID) -> List[StatusChange]:
        stmt = (
            select(StatusChangeModel)
            .where(StatusChangeModel.application_id == str(application_id))
            .order_by(StatusChangeModel.changed_at.asc())
        )
        result = await self._session.execute(stmt)

        return [
            StatusChange(
                id=UUID(model.id),
                application_id=UUID(model.application_id),
                axis=load_enum(StatusAxis, model.axis, "axis"),
                from_status=model.from_status,
                to_status=model.to_status,
                actor_id=model.actor_id,
                actor_role=load_enum(ActorRole, model.actor_role, "actor_role"),
                changed_at=model.changed_at,
            )
            for model in result.scalars().all()
        ]

    def _mutable_columns(self, application: CreditApplication) -> dict:
        state = application.state
        return {
            "application_status": state.application.value,
            "pre_analysis_status": state.pre_analysis.value,
            "financial_status": state.financial.value,
            "admin_status": state.admin.value,
            "pre_analysis_notes": application.pre_analysis_notes,
            "approved_amount_cents": application.approved_amount_cents,
            "approved_terms": application.approved_terms,
            "financial_notes": application.financial_notes,
            "final_credit_limit_cents": application.final_credit_limit_cents,
            "final_down_payment_rate": application.final_down_payment_rate,
            "final_admin_fee_rate": application.final_admin_fee_rate,
            "final_approved_terms": application.final_approved_terms,
        }

    def _to_entity(self, model: CreditApplicationModel) -> CreditApplication:
        """Convert database model to domain entity."""
        state = WorkflowState(
            application=load_enum(
                ApplicationStatus, model.application_status, "application_status"
            ),
            pre_analysis=load_enum(
                PreAnalysisStatus, model.pre_analysis_status, "pre_analysis_status"
            ),
            financial=load_enum(FinancialStatus, model.financial_status, "financial_status"),
            admin=load_enum(AdminStatus, model.admin_status, "admin_status"),
        )

        return CreditApplication(
            id=UUID(model.id),
            importer_id=model.importer_id,
            requested_amount_cents=model.requested_amount_cents,
            state=state,
            pre_analysis_notes=model.pre_analysis_notes,
            approved_amount_cents=model.approved_amount_cents,
            approved_terms=list(model.approved_terms) if model.approved_terms else None,
            financial_notes=model.financial_notes,
            final_credit_limit_cents=model.final_credit_limit_cents,
            final_down_payment_rate=_as_decimal(model.final_down_payment_rate),
            final_admin_fee_rate=_as_decimal(model.final_admin_fee_rate),
            final_approved_terms=(
                list(model.final_approved_terms) if model.final_approved_terms else None
            ),
            credit_used_cents=model.credit_used_cents,
            version=model.version,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


def _as_decimal(value) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(str(value))
