"""Credit ledger service - reserves and releases credit against a finalized limit."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

import structlog

from src.core.metrics import record_release, record_reservation
from src.domain.entities import EventType, LedgerBalance, LedgerEntry
from src.domain.exceptions import (
    DataIntegrityException,
    FinancialValidationException,
    InsufficientCreditException,
    NoApprovedCreditException,
    NotFoundException,
)
from src.domain.interfaces import CreditLedgerRepository
from src.application.dto import LedgerResponse

from .event_publisher import EventPublisher

logger = structlog.get_logger(__name__)


class CreditLedgerService:
    """
    Application service for the credit ledger.

    The capacity check and the usage write are one conditional update in
    the repository, so concurrent reservations against the same application
    cannot overdraw it. Applications never contend with each other.
    """

    def __init__(
        self,
        ledger_repository: CreditLedgerRepository,
        event_publisher: EventPublisher,
    ):
        self._ledger_repo = ledger_repository
        self._events = event_publisher

    async def available_credit(self, application_id: UUID) -> LedgerBalance:
        """
        Current limit, usage and available credit of an application.

        Raises:
            NotFoundException: If the application doesn't exist
        """
        balance = await self._ledger_repo.get_balance(application_id)
        if balance is None:
            raise NotFoundException("credit_application", str(application_id))
        return balance

    async def get_ledger(self, application_id: UUID) -> LedgerResponse:
        balance = await self.available_credit(application_id)
        entries = await self._ledger_repo.get_entries(application_id)
        return LedgerResponse.from_entities(balance, entries)

    async def reserve(
        self,
        application_id: UUID,
        import_id: UUID,
        amount_cents: int,
    ) -> LedgerEntry:
        """
        Reserve credit for an import, all or nothing.

        Raises:
            NoApprovedCreditException: If the application has no finalized limit
            InsufficientCreditException: If the amount exceeds available credit
            NotFoundException: If the application doesn't exist
        """
        if amount_cents < 0:
            raise FinancialValidationException(
                f"amount_cents cannot be negative, got {amount_cents}", "amount_cents"
            )

        log = logger.bind(
            application_id=str(application_id),
            import_id=str(import_id),
            amount_cents=amount_cents,
        )

        if not await self._ledger_repo.try_increase_usage(application_id, amount_cents):
            balance = await self.available_credit(application_id)
            if balance.limit_cents <= 0:
                record_reservation("no_approved_credit")
                log.info("credit_reservation_refused", reason="no_approved_credit")
                raise NoApprovedCreditException(str(application_id))

            record_reservation("insufficient_credit")
            log.info(
                "credit_reservation_refused",
                reason="insufficient_credit",
                available_cents=balance.available_cents,
            )
            raise InsufficientCreditException(
                str(application_id),
                requested_cents=amount_cents,
                available_cents=balance.available_cents,
            )

        entry = LedgerEntry(
            application_id=application_id,
            import_id=import_id,
            amount_reserved_cents=amount_cents,
        )
        await self._ledger_repo.add_entry(entry)

        balance = await self.available_credit(application_id)
        record_reservation("reserved", amount_cents)
        log.info("credit_reserved", available_cents=balance.available_cents)

        await self._publish(entry, amount_cents, balance)
        return entry

    async def release(self, application_id: UUID, import_id: UUID) -> Optional[LedgerEntry]:
        """
        Return an import's reservation to the application.

        Releasing an already released or unknown reservation does nothing.

        Returns:
            The released entry, or None if nothing was active
        """
        log = logger.bind(application_id=str(application_id), import_id=str(import_id))

        entry = await self._ledger_repo.mark_released(
            application_id, import_id, released_at=datetime.utcnow()
        )
        if entry is None:
            log.info("credit_release_noop")
            return None

        await self._ledger_repo.decrease_usage(application_id, entry.amount_reserved_cents)

        balance = await self.available_credit(application_id)
        record_release(entry.amount_reserved_cents)
        log.info(
            "credit_released",
            amount_cents=entry.amount_reserved_cents,
            available_cents=balance.available_cents,
        )

        await self._publish(entry, -entry.amount_reserved_cents, balance)
        return entry

    async def adjust(
        self,
        application_id: UUID,
        import_id: UUID,
        new_amount_cents: int,
    ) -> LedgerEntry:
        """
        Change an active reservation to a new amount.

        Growth goes through the same conditional update as `reserve`.

        Raises:
            InsufficientCreditException: If the increase exceeds available credit
            DataIntegrityException: If the import holds no active reservation
        """
        entry = await self._ledger_repo.get_entry(application_id, import_id)
        if entry is None or not entry.is_active:
            raise DataIntegrityException(f"Import {import_id} holds no active reservation")

        delta = new_amount_cents - entry.amount_reserved_cents
        if delta == 0:
            return entry

        if delta > 0:
            if not await self._ledger_repo.try_increase_usage(application_id, delta):
                balance = await self.available_credit(application_id)
                record_reservation("insufficient_credit")
                raise InsufficientCreditException(
                    str(application_id),
                    requested_cents=delta,
                    available_cents=balance.available_cents,
                )
        else:
            await self._ledger_repo.decrease_usage(application_id, -delta)

        await self._ledger_repo.adjust_entry(entry.id, new_amount_cents)
        entry.amount_reserved_cents = new_amount_cents

        balance = await self.available_credit(application_id)
        logger.info(
            "credit_reservation_adjusted",
            application_id=str(application_id),
            import_id=str(import_id),
            delta_cents=delta,
            available_cents=balance.available_cents,
        )

        await self._publish(entry, delta, balance)
        return entry

    async def get_entries(self, application_id: UUID) -> List[LedgerEntry]:
        return await self._ledger_repo.get_entries(application_id)

    async def _publish(
        self,
        entry: LedgerEntry,
        delta_cents: int,
        balance: LedgerBalance,
    ) -> None:
        await self._events.publish(
            EventType.LEDGER_CHANGED,
            {
                "application_id": str(entry.application_id),
                "import_id": str(entry.import_id),
                "delta_cents": delta_cents,
                "used_cents": balance.used_cents,
                "available_cents": balance.available_cents,
            },
        )
