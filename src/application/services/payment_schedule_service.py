"""Payment schedule service - materializes and tracks an import's payments."""

from datetime import date, datetime, timedelta, timezone
from typing import List, Optional
from uuid import UUID

import structlog

from src.core.config import settings
from src.core.metrics import record_payment
from src.domain.entities import (
    Actor,
    ImportOrder,
    ImportStage,
    PaymentScheduleEntry,
    PaymentStatus,
    PaymentType,
    utc_today,
)
from src.domain.exceptions import (
    ActorNotAuthorizedException,
    InvalidRequestException,
    NotFoundException,
    PaymentScheduleException,
    PaymentStateException,
)
from src.domain.interfaces import ImportRepository, PaymentScheduleRepository
from src.application.dto import PaymentResponse, PaymentScheduleResponse, UpdatePaymentRequest
from src.service.financial import FinancialBreakdown, calculate_financials

logger = structlog.get_logger(__name__)

PAYABLE_STATUSES = frozenset({PaymentStatus.PENDING, PaymentStatus.OVERDUE})


class PaymentScheduleService:
    """
    Application service for payment schedules.

    Entries are stored as pending, paid or cancelled. Scheduled and overdue
    are presented on read from a pending entry's due date, judged on the
    UTC calendar. Importers see and pay only their own imports' entries.
    """

    def __init__(
        self,
        payment_repository: PaymentScheduleRepository,
        import_repository: ImportRepository,
        notice_days: Optional[int] = None,
    ):
        self._payment_repo = payment_repository
        self._import_repo = import_repository
        self._notice_days = settings.payment_notice_days if notice_days is None else notice_days

    async def create_down_payment(
        self,
        import_order: ImportOrder,
        created_on: date,
    ) -> Optional[PaymentScheduleEntry]:
        """Create the single down-payment entry, due on the creation date."""
        amount = import_order.snapshot.down_payment_cents
        if amount == 0:
            logger.info("down_payment_skipped", import_id=str(import_order.id))
            return None

        entry = PaymentScheduleEntry(
            import_id=import_order.id,
            payment_type=PaymentType.DOWN_PAYMENT,
            amount_cents=amount,
            due_date=created_on,
        )
        await self._payment_repo.save_all([entry])

        logger.info(
            "down_payment_scheduled",
            import_id=str(import_order.id),
            amount_cents=amount,
            due_date=created_on.isoformat(),
        )
        return entry

    async def generate_installments(
        self,
        import_order: ImportOrder,
        delivered_on: date,
    ) -> List[PaymentScheduleEntry]:
        """
        Create one installment per term, due `term` days after delivery.

        The division remainder goes on the first installment so the
        installments sum to the financed amount exactly.

        Raises:
            PaymentScheduleException: If installments already exist
        """
        existing = await self._payment_repo.get_by_import(import_order.id)
        if any(e.payment_type == PaymentType.INSTALLMENT for e in existing):
            raise PaymentScheduleException(
                f"Installments already generated for import {import_order.id}"
            )

        breakdown = self._breakdown(import_order)
        amounts = breakdown.installment_amounts()
        total = len(breakdown.terms)

        entries = [
            PaymentScheduleEntry(
                import_id=import_order.id,
                payment_type=PaymentType.INSTALLMENT,
                amount_cents=amount,
                due_date=delivered_on + timedelta(days=term),
                installment_number=number,
                total_installments=total,
            )
            for number, (term, amount) in enumerate(zip(breakdown.terms, amounts), start=1)
        ]
        await self._payment_repo.save_all(entries)

        logger.info(
            "installments_generated",
            import_id=str(import_order.id),
            count=total,
            financed_amount_cents=breakdown.financed_amount_cents,
        )
        return entries

    async def on_stage_entered(
        self,
        import_order: ImportOrder,
        stage: ImportStage,
        at: datetime,
    ) -> None:
        """Import stage listener: installments start on delivery to the agent."""
        if stage == ImportStage.DELIVERED_TO_AGENT:
            await self.generate_installments(import_order, at.date())

    async def record_payment(
        self,
        actor: Actor,
        entry_id: UUID,
        paid_at: Optional[datetime] = None,
        today: Optional[date] = None,
    ) -> PaymentResponse:
        """
        Mark an open entry as paid.

        Whether the entry is open is judged on the server's date; `paid_at`
        only records when the money moved.

        Raises:
            NotFoundException: If the entry doesn't exist
            ActorNotAuthorizedException: If the actor is neither admin nor the importer
            PaymentStateException: If the entry is not pending or overdue
        """
        today = today or utc_today()
        paid_at = paid_at or datetime.utcnow()
        if paid_at.tzinfo is not None:
            paid_at = paid_at.astimezone(timezone.utc).replace(tzinfo=None)
        if paid_at.date() > today:
            raise InvalidRequestException("paid_at cannot be later than today")

        entry = await self._load(entry_id)
        import_order = await self._load_import(entry.import_id)
        if not import_order.can_be_changed_by(actor):
            raise ActorNotAuthorizedException(actor.role.value, "pay another importer's payment")

        presented = entry.effective_status(today, self._notice_days)
        if presented not in PAYABLE_STATUSES:
            raise PaymentStateException(str(entry_id), presented.value, "record payment for")

        entry.status = PaymentStatus.PAID
        entry.paid_at = paid_at
        await self._payment_repo.update(entry, expected_status=PaymentStatus.PENDING)

        record_payment(entry.payment_type.value)
        logger.info(
            "payment_recorded",
            payment_id=str(entry_id),
            import_id=str(entry.import_id),
            amount_cents=entry.amount_cents,
            was_overdue=presented == PaymentStatus.OVERDUE,
        )
        return PaymentResponse.from_entity(entry, today, self._notice_days)

    async def update_entry(
        self,
        entry_id: UUID,
        request: UpdatePaymentRequest,
        today: Optional[date] = None,
    ) -> PaymentResponse:
        """
        Edit the amount or due date of an unpaid entry.

        Raises:
            PaymentStateException: If the entry is paid or cancelled
        """
        errors = request.validate()
        if errors:
            raise InvalidRequestException("; ".join(errors))

        entry = await self._load(entry_id)
        if entry.status != PaymentStatus.PENDING:
            raise PaymentStateException(str(entry_id), entry.status.value, "edit")

        if request.amount_cents is not None:
            entry.amount_cents = request.amount_cents
        if request.due_date is not None:
            entry.due_date = request.due_date
        await self._payment_repo.update(entry, expected_status=PaymentStatus.PENDING)

        logger.info("payment_updated", payment_id=str(entry_id))
        return PaymentResponse.from_entity(entry, today or utc_today(), self._notice_days)

    async def cancel_open_entries(self, import_id: UUID) -> int:
        """Cancel every pending entry of an import; paid entries are kept."""
        cancelled = await self._payment_repo.cancel_open(import_id)
        logger.info("payments_cancelled", import_id=str(import_id), count=cancelled)
        return cancelled

    async def reprice(self, import_order: ImportOrder) -> None:
        """Bring unpaid entry amounts in line with a recomputed snapshot."""
        breakdown = self._breakdown(import_order)
        amounts = breakdown.installment_amounts()
        entries = await self._payment_repo.get_by_import(import_order.id)

        for entry in entries:
            if entry.status != PaymentStatus.PENDING:
                continue
            if entry.payment_type == PaymentType.DOWN_PAYMENT:
                entry.amount_cents = breakdown.down_payment_cents
            else:
                entry.amount_cents = amounts[entry.installment_number - 1]
            await self._payment_repo.update(entry, expected_status=PaymentStatus.PENDING)

        if not any(e.payment_type == PaymentType.DOWN_PAYMENT for e in entries):
            await self.create_down_payment(import_order, import_order.created_at.date())

    async def has_paid_entries(self, import_id: UUID) -> bool:
        entries = await self._payment_repo.get_by_import(import_id)
        return any(e.status == PaymentStatus.PAID for e in entries)

    async def get_entry(
        self,
        actor: Actor,
        entry_id: UUID,
        today: Optional[date] = None,
    ) -> PaymentResponse:
        entry = await self._load(entry_id)
        await self._check_read_access(actor, entry.import_id)
        return PaymentResponse.from_entity(entry, today or utc_today(), self._notice_days)

    async def get_schedule(
        self,
        actor: Actor,
        import_id: UUID,
        today: Optional[date] = None,
    ) -> PaymentScheduleResponse:
        await self._check_read_access(actor, import_id)
        today = today or utc_today()
        entries = await self._payment_repo.get_by_import(import_id)
        live = [e for e in entries if e.status != PaymentStatus.CANCELLED]

        return PaymentScheduleResponse(
            import_id=str(import_id),
            total_cents=sum(e.amount_cents for e in live),
            paid_cents=sum(e.amount_cents for e in live if e.status == PaymentStatus.PAID),
            payments=[PaymentResponse.from_entity(e, today, self._notice_days) for e in entries],
        )

    async def _check_read_access(self, actor: Actor, import_id: UUID) -> None:
        import_order = await self._load_import(import_id)
        if not import_order.can_be_read_by(actor):
            raise ActorNotAuthorizedException(actor.role.value, "read another importer's payments")

    async def _load(self, entry_id: UUID) -> PaymentScheduleEntry:
        entry = await self._payment_repo.get_by_id(entry_id)
        if entry is None:
            raise NotFoundException("payment", str(entry_id))
        return entry

    async def _load_import(self, import_id: UUID) -> ImportOrder:
        import_order = await self._import_repo.get_by_id(import_id)
        if import_order is None:
            raise NotFoundException("import", str(import_id))
        return import_order

    def _breakdown(self, import_order: ImportOrder) -> FinancialBreakdown:
        snapshot = import_order.snapshot
        return calculate_financials(
            snapshot.fob_value_cents,
            snapshot.down_payment_rate,
            snapshot.admin_fee_rate,
            snapshot.terms,
        )
