"""PostgreSQL implementation of ImportRepository."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.entities import FinancialSnapshot, ImportOrder, ImportStage
from src.domain.exceptions import ConcurrencyConflictException, NotFoundException
from src.domain.interfaces import ImportRepository
from src.infrastructure.database.models import ImportModel

from .base import load_enum


class PostgresImportRepository(ImportRepository):
    """PostgreSQL-backed import repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, import_order: ImportOrder) -> ImportOrder:
        model = ImportModel(
            id=str(import_order.id),
            application_id=str(import_order.application_id),
            importer_id=import_order.importer_id,
            name=import_order.name,
            currency=import_order.currency,
            created_at=import_order.created_at,
            **self._mutable_columns(import_order),
        )

        self._session.add(model)
        await self._session.flush()

        return import_order

    async def get_by_id(
        self,
        import_id: UUID,
        for_update: bool = False,
    ) -> Optional[ImportOrder]:
        stmt = (
            select(ImportModel)
            .where(ImportModel.id == str(import_id))
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        model = (await self._session.execute(stmt)).scalar_one_or_none()

        if model is None:
            return None

        return self._to_entity(model)

    async def update(
        self,
        import_order: ImportOrder,
        expected_stage: ImportStage,
    ) -> ImportOrder:
        """
        Write an import read at `expected_stage`.

        Raises:
            ConcurrencyConflictException: If the stored stage moved since the read
        """
        import_order.updated_at = datetime.utcnow()
        stmt = (
            update(ImportModel)
            .where(
                ImportModel.id == str(import_order.id),
                ImportModel.stage == expected_stage.value,
            )
            .values(**self._mutable_columns(import_order))
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)

        if result.rowcount != 1:
            if await self.get_by_id(import_order.id) is None:
                raise NotFoundException("import", str(import_order.id))
            raise ConcurrencyConflictException(str(import_order.id))

        return import_order

    async def get_by_application(self, application_id: UUID) -> List[ImportOrder]:
        stmt = (
            select(ImportModel)
            .where(ImportModel.application_id == str(application_id))
            .order_by(ImportModel.created_at.asc())
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)

        return [self._to_entity(model) for model in result.scalars().all()]

    def _mutable_columns(self, import_order: ImportOrder) -> dict:
        snapshot = import_order.snapshot
        return {
            "stage": import_order.stage.value,
            "fob_value_cents": snapshot.fob_value_cents,
            "down_payment_rate": snapshot.down_payment_rate,
            "admin_fee_rate": snapshot.admin_fee_rate,
            "terms": list(snapshot.terms),
            "down_payment_cents": snapshot.down_payment_cents,
            "financed_amount_cents": snapshot.financed_amount_cents,
            "admin_fee_cents": snapshot.admin_fee_cents,
            "total_cost_cents": snapshot.total_cost_cents,
            "installment_cents": snapshot.installment_cents,
            "delivered_to_agent_at": import_order.delivered_to_agent_at,
            "cancelled_at": import_order.cancelled_at,
            "updated_at": import_order.updated_at,
        }

    def _to_entity(self, model: ImportModel) -> ImportOrder:
        snapshot = FinancialSnapshot(
            fob_value_cents=model.fob_value_cents,
            down_payment_rate=Decimal(str(model.down_payment_rate)),
            admin_fee_rate=Decimal(str(model.admin_fee_rate)),
            terms=tuple(model.terms),
            down_payment_cents=model.down_payment_cents,
            financed_amount_cents=model.financed_amount_cents,
            admin_fee_cents=model.admin_fee_cents,
            total_cost_cents=model.total_cost_cents,
            installment_cents=model.installment_cents,
        )

        return ImportOrder(
            id=UUID(model.id),
            application_id=UUID(model.application_id),
            importer_id=model.importer_id,
            name=model.name,
            currency=model.currency,
            snapshot=snapshot,
            stage=load_enum(ImportStage, model.stage, "import stage"),
            delivered_to_agent_at=model.delivered_to_agent_at,
            cancelled_at=model.cancelled_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
