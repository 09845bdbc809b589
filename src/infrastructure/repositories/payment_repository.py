"""PostgreSQL implementation of PaymentScheduleRepository."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.entities import (
    PaymentScheduleEntry,
    PaymentStatus,
    PaymentType,
    STORED_PAYMENT_STATUSES,
)
from src.domain.exceptions import (
    DataIntegrityException,
    NotFoundException,
    PaymentStateException,
)
from src.domain.interfaces import PaymentScheduleRepository
from src.infrastructure.database.models import PaymentScheduleModel

from .base import load_enum


class PostgresPaymentScheduleRepository(PaymentScheduleRepository):
    """PostgreSQL-backed payment schedule repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save_all(self, entries: List[PaymentScheduleEntry]) -> List[PaymentScheduleEntry]:
        for entry in entries:
            self._check_storable(entry)
            self._session.add(
                PaymentScheduleModel(
                    id=str(entry.id),
                    import_id=str(entry.import_id),
                    payment_type=entry.payment_type.value,
                    amount_cents=entry.amount_cents,
                    due_date=entry.due_date,
                    status=entry.status.value,
                    installment_number=entry.installment_number,
                    total_installments=entry.total_installments,
                    paid_at=entry.paid_at,
                    created_at=entry.created_at,
                    updated_at=entry.updated_at,
                )
            )
        await self._session.flush()

        return entries

    async def get_by_id(self, entry_id: UUID) -> Optional[PaymentScheduleEntry]:
        stmt = (
            select(PaymentScheduleModel)
            .where(PaymentScheduleModel.id == str(entry_id))
            .execution_options(populate_existing=True)
        )
        model = (await self._session.execute(stmt)).scalar_one_or_none()

        if model is None:
            return None

        return self._to_entity(model)

    async def get_by_import(self, import_id: UUID) -> List[PaymentScheduleEntry]:
        stmt = (
            select(PaymentScheduleModel)
            .where(PaymentScheduleModel.import_id == str(import_id))
            .order_by(
                PaymentScheduleModel.due_date.asc(),
                PaymentScheduleModel.installment_number.asc(),
            )
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)

        return [self._to_entity(model) for model in result.scalars().all()]

    async def update(
        self,
        entry: PaymentScheduleEntry,
        expected_status: PaymentStatus,
    ) -> PaymentScheduleEntry:
        """
        Write an entry read with stored status `expected_status`.

        Raises:
            PaymentStateException: If the stored status changed since the read
        """
        self._check_storable(entry)
        entry.updated_at = datetime.utcnow()
        stmt = (
            update(PaymentScheduleModel)
            .where(
                PaymentScheduleModel.id == str(entry.id),
                PaymentScheduleModel.status == expected_status.value,
            )
            .values(
                amount_cents=entry.amount_cents,
                due_date=entry.due_date,
                status=entry.status.value,
                paid_at=entry.paid_at,
                updated_at=entry.updated_at,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)

        if result.rowcount != 1:
            stored = await self.get_by_id(entry.id)
            if stored is None:
                raise NotFoundException("payment", str(entry.id))
            raise PaymentStateException(str(entry.id), stored.status.value, "update")

        return entry

    async def cancel_open(self, import_id: UUID) -> int:
        stmt = (
            update(PaymentScheduleModel)
            .where(
                PaymentScheduleModel.import_id == str(import_id),
                PaymentScheduleModel.status == PaymentStatus.PENDING.value,
            )
            .values(status=PaymentStatus.CANCELLED.value, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount

    def _check_storable(self, entry: PaymentScheduleEntry) -> None:
        if entry.status not in STORED_PAYMENT_STATUSES:
            raise DataIntegrityException(
                f"Payment status {entry.status.value!r} is derived and cannot be stored"
            )

    def _to_entity(self, model: PaymentScheduleModel) -> PaymentScheduleEntry:
        status = load_enum(PaymentStatus, model.status, "payment status")
        if status not in STORED_PAYMENT_STATUSES:
            raise DataIntegrityException(f"Derived payment status stored: {model.status!r}")

        return PaymentScheduleEntry(
            id=UUID(model.id),
            import_id=UUID(model.import_id),
            payment_type=load_enum(PaymentType, model.payment_type, "payment type"),
            amount_cents=model.amount_cents,
            due_date=model.due_date,
            status=status,
            installment_number=model.installment_number,
            total_installments=model.total_installments,
            paid_at=model.paid_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
