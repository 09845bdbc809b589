"""PostgreSQL implementation of CreditLedgerRepository."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.entities import LedgerBalance, LedgerEntry, LedgerEntryStatus
from src.domain.exceptions import DataIntegrityException
from src.domain.interfaces import CreditLedgerRepository
from src.infrastructure.database.models import CreditApplicationModel, LedgerEntryModel

from .base import load_enum


class PostgresCreditLedgerRepository(CreditLedgerRepository):
    """
    PostgreSQL implementation of the credit ledger.

    Usage changes are single UPDATE statements whose WHERE clause carries
    the capacity check, so two concurrent reservations can never both pass
    against the same remaining credit.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def try_increase_usage(self, application_id: UUID, amount_cents: int) -> bool:
        used = CreditApplicationModel.credit_used_cents
        stmt = (
            update(CreditApplicationModel)
            .where(
                CreditApplicationModel.id == str(application_id),
                CreditApplicationModel.final_credit_limit_cents.is_not(None),
                used + amount_cents <= CreditApplicationModel.final_credit_limit_cents,
            )
            .values(credit_used_cents=used + amount_cents, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def decrease_usage(self, application_id: UUID, amount_cents: int) -> None:
        used = CreditApplicationModel.credit_used_cents
        stmt = (
            update(CreditApplicationModel)
            .where(
                CreditApplicationModel.id == str(application_id),
                used >= amount_cents,
            )
            .values(credit_used_cents=used - amount_cents, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)

        if result.rowcount != 1:
            raise DataIntegrityException(
                f"Ledger usage for {application_id} would drop below zero"
            )

    async def get_balance(self, application_id: UUID) -> Optional[LedgerBalance]:
        stmt = select(
            CreditApplicationModel.final_credit_limit_cents,
            CreditApplicationModel.credit_used_cents,
        ).where(CreditApplicationModel.id == str(application_id))
        row = (await self._session.execute(stmt)).one_or_none()

        if row is None:
            return None

        limit_cents, used_cents = row
        return LedgerBalance(
            application_id=application_id,
            limit_cents=limit_cents or 0,
            used_cents=used_cents,
        )

    async def add_entry(self, entry: LedgerEntry) -> LedgerEntry:
        model = LedgerEntryModel(
            id=str(entry.id),
            application_id=str(entry.application_id),
            import_id=str(entry.import_id),
            amount_reserved_cents=entry.amount_reserved_cents,
            status=entry.status.value,
            reserved_at=entry.reserved_at,
            released_at=entry.released_at,
        )

        self._session.add(model)
        await self._session.flush()

        return entry

    async def mark_released(
        self,
        application_id: UUID,
        import_id: UUID,
        released_at: datetime,
    ) -> Optional[LedgerEntry]:
        stmt = (
            update(LedgerEntryModel)
            .where(
                LedgerEntryModel.application_id == str(application_id),
                LedgerEntryModel.import_id == str(import_id),
                LedgerEntryModel.status == LedgerEntryStatus.ACTIVE.value,
            )
            .values(status=LedgerEntryStatus.RELEASED.value, released_at=released_at)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)

        if result.rowcount != 1:
            return None

        return await self.get_entry(application_id, import_id)

    async def get_entry(self, application_id: UUID, import_id: UUID) -> Optional[LedgerEntry]:
        stmt = (
            select(LedgerEntryModel)
            .where(
                LedgerEntryModel.application_id == str(application_id),
                LedgerEntryModel.import_id == str(import_id),
            )
            .execution_options(populate_existing=True)
        )
        model = (await self._session.execute(stmt)).scalar_one_or_none()

        if model is None:
            return None

        return self._to_entity(model)

    async def adjust_entry(self, entry_id: UUID, amount_cents: int) -> None:
        stmt = (
            update(LedgerEntryModel)
            .where(
                LedgerEntryModel.id == str(entry_id),
                LedgerEntryModel.status == LedgerEntryStatus.ACTIVE.value,
            )
            .values(amount_reserved_cents=amount_cents)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)

        if result.rowcount != 1:
            raise DataIntegrityException(f"No active ledger entry {entry_id} to adjust")

    async def get_entries(self, application_id: UUID) -> List[LedgerEntry]:
        stmt = (
            select(LedgerEntryModel)
            .where(LedgerEntryModel.application_id == str(application_id))
            .order_by(LedgerEntryModel.reserved_at.asc())
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)

        return [self._to_entity(model) for model in result.scalars().all()]

    def _to_entity(self, model: LedgerEntryModel) -> LedgerEntry:
        return LedgerEntry(
            id=UUID(model.id),
            application_id=UUID(model.application_id),
            import_id=UUID(model.import_id),
            amount_reserved_cents=model.amount_reserved_cents,
            status=load_enum(LedgerEntryStatus, model.status, "ledger status"),
            reserved_at=model.reserved_at,
            released_at=model.released_at,
        )
