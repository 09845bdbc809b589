"""Import service - creates, advances and cancels financed imports."""

from datetime import datetime
from typing import Awaitable, Callable, Iterable, List, Optional
from uuid import UUID, uuid4

import structlog

from src.core.metrics import record_import_event, track_operation_latency
from src.domain.entities import (
    Actor,
    ActorRole,
    CreditApplication,
    FinancialSnapshot,
    ImportOrder,
    ImportStage,
    next_stage,
)
from src.domain.exceptions import (
    ActorNotAuthorizedException,
    ImportStageException,
    InvalidRequestException,
    NoApprovedCreditException,
    NotFoundException,
    SnapshotLockedException,
)
from src.domain.interfaces import CreditApplicationRepository, ImportRepository
from src.application.dto import CreateImportRequest, ImportResponse
from src.service.financial import FinancialBreakdown, calculate_financials

from .credit_ledger_service import CreditLedgerService
from .payment_schedule_service import PaymentScheduleService

logger = structlog.get_logger(__name__)

StageListener = Callable[[ImportOrder, ImportStage, datetime], Awaitable[None]]


def snapshot_from(breakdown: FinancialBreakdown) -> FinancialSnapshot:
    return FinancialSnapshot(
        fob_value_cents=breakdown.fob_value_cents,
        down_payment_rate=breakdown.down_payment_rate,
        admin_fee_rate=breakdown.admin_fee_rate,
        terms=breakdown.terms,
        down_payment_cents=breakdown.down_payment_cents,
        financed_amount_cents=breakdown.financed_amount_cents,
        admin_fee_cents=breakdown.admin_fee_cents,
        total_cost_cents=breakdown.total_cost_cents,
        installment_cents=breakdown.installment_cents,
    )


class ImportService:
    """
    Application service for import use cases.

    Creating an import reserves its financed amount on the credit ledger and
    schedules the down payment; cancelling releases the reservation and
    cancels unpaid entries. Stage listeners are notified after every
    forward move; by default the payment schedule listens so installments
    are generated on delivery to the agent.
    """

    def __init__(
        self,
        application_repository: CreditApplicationRepository,
        import_repository: ImportRepository,
        ledger_service: CreditLedgerService,
        payment_service: PaymentScheduleService,
        stage_listeners: Optional[Iterable[StageListener]] = None,
    ):
        self._application_repo = application_repository
        self._import_repo = import_repository
        self._ledger = ledger_service
        self._payments = payment_service
        if stage_listeners is None:
            stage_listeners = [payment_service.on_stage_entered]
        self._stage_listeners: List[StageListener] = list(stage_listeners)

    def add_stage_listener(self, listener: StageListener) -> None:
        self._stage_listeners.append(listener)

    async def create_import(
        self,
        actor: Actor,
        request: CreateImportRequest,
    ) -> ImportResponse:
        """
        Create an import against a finalized application.

        Raises:
            NoApprovedCreditException: If the application is not finalized
            InsufficientCreditException: If the financed amount exceeds available credit
            FinancialValidationException: If the FOB value is not positive
        """
        if actor.role != ActorRole.IMPORTER:
            raise ActorNotAuthorizedException(actor.role.value, "create an import")

        errors = request.validate()
        if errors:
            raise InvalidRequestException("; ".join(errors))

        log = logger.bind(
            application_id=str(request.application_id),
            importer_id=actor.user_id,
            fob_value_cents=request.fob_value_cents,
        )

        with track_operation_latency("create_import"):
            application = await self._load_application(request.application_id, for_update=True)
            if application.importer_id != actor.user_id:
                raise ActorNotAuthorizedException(
                    actor.role.value, "create an import on another importer's application"
                )
            if not application.is_finalized:
                log.info("import_refused", reason="no_approved_credit")
                raise NoApprovedCreditException(str(application.id))

            breakdown = calculate_financials(
                request.fob_value_cents,
                application.final_down_payment_rate,
                application.final_admin_fee_rate,
                application.final_approved_terms,
            )

            import_id = uuid4()
            await self._ledger.reserve(application.id, import_id, breakdown.financed_amount_cents)

            import_order = ImportOrder(
                id=import_id,
                application_id=application.id,
                importer_id=actor.user_id,
                name=request.name.strip(),
                currency=request.currency.upper(),
                snapshot=snapshot_from(breakdown),
            )
            await self._import_repo.save(import_order)
            await self._payments.create_down_payment(
                import_order, created_on=import_order.created_at.date()
            )

        record_import_event("created")
        log.info(
            "import_created",
            import_id=str(import_order.id),
            financed_amount_cents=breakdown.financed_amount_cents,
            down_payment_cents=breakdown.down_payment_cents,
        )
        return ImportResponse.from_entity(import_order)

    async def get_import(self, actor: Actor, import_id: UUID) -> ImportResponse:
        import_order = await self._load(import_id)
        if not import_order.can_be_read_by(actor):
            raise ActorNotAuthorizedException(actor.role.value, "read another importer's import")
        return ImportResponse.from_entity(import_order)

    async def cancel_import(self, actor: Actor, import_id: UUID) -> ImportResponse:
        """
        Cancel a non-terminal import, releasing its credit.

        Raises:
            ImportStageException: If the import is already completed or cancelled
        """
        import_order = await self._load(import_id, for_update=True)
        self._check_access(import_order, actor, "cancel an import")

        current = import_order.stage
        if import_order.is_terminal:
            raise ImportStageException(str(import_id), current.value, ImportStage.CANCELLED.value)

        with track_operation_latency("cancel_import"):
            import_order.stage = ImportStage.CANCELLED
            import_order.cancelled_at = datetime.utcnow()
            await self._import_repo.update(import_order, expected_stage=current)

            await self._ledger.release(import_order.application_id, import_order.id)
            cancelled = await self._payments.cancel_open_entries(import_order.id)

        record_import_event("cancelled")
        logger.info(
            "import_cancelled",
            import_id=str(import_id),
            application_id=str(import_order.application_id),
            from_stage=current.value,
            payments_cancelled=cancelled,
        )
        return ImportResponse.from_entity(import_order)

    async def advance_import_stage(
        self,
        actor: Actor,
        import_id: UUID,
        to_stage: Optional[str] = None,
    ) -> ImportResponse:
        """
        Move an import exactly one stage forward and notify stage listeners.

        Args:
            to_stage: Expected next stage; refused if it is not the next one

        Raises:
            ImportStageException: If the import is terminal or `to_stage` skips
            ConcurrencyConflictException: If the import moved since it was read
        """
        import_order = await self._load(import_id, for_update=True)
        self._check_access(import_order, actor, "advance an import")

        current = import_order.stage
        target = next_stage(current)
        if target is None or (to_stage is not None and to_stage != target.value):
            raise ImportStageException(
                str(import_id),
                current.value,
                to_stage or "next stage",
            )

        now = datetime.utcnow()
        import_order.stage = target
        if target == ImportStage.DELIVERED_TO_AGENT:
            import_order.delivered_to_agent_at = now
        await self._import_repo.update(import_order, expected_stage=current)

        for listener in self._stage_listeners:
            await listener(import_order, target, now)

        if target == ImportStage.COMPLETED:
            record_import_event("completed")
        logger.info(
            "import_stage_advanced",
            import_id=str(import_id),
            from_stage=current.value,
            to_stage=target.value,
        )
        return ImportResponse.from_entity(import_order)

    async def update_import_value(
        self,
        actor: Actor,
        import_id: UUID,
        fob_value_cents: int,
    ) -> ImportResponse:
        """
        Recompute the snapshot for a new FOB value and adjust the reservation.

        Rates and terms stay those captured at creation.

        Raises:
            SnapshotLockedException: If any payment has been made
            ImportStageException: If the import is completed or cancelled
            InsufficientCreditException: If the new financed amount doesn't fit
        """
        import_order = await self._load(import_id, for_update=True)
        self._check_access(import_order, actor, "change an import's value")

        current = import_order.stage
        if import_order.is_terminal:
            raise ImportStageException(str(import_id), current.value, current.value)
        if await self._payments.has_paid_entries(import_id):
            raise SnapshotLockedException(str(import_id))

        snapshot = import_order.snapshot
        breakdown = calculate_financials(
            fob_value_cents,
            snapshot.down_payment_rate,
            snapshot.admin_fee_rate,
            snapshot.terms,
        )

        import_order.snapshot = snapshot_from(breakdown)
        await self._import_repo.update(import_order, expected_stage=current)

        # Serialize with other ledger writes on the same application.
        await self._load_application(import_order.application_id, for_update=True)
        await self._ledger.adjust(
            import_order.application_id, import_order.id, breakdown.financed_amount_cents
        )
        await self._payments.reprice(import_order)

        record_import_event("value_updated")
        logger.info(
            "import_value_updated",
            import_id=str(import_id),
            old_fob_value_cents=snapshot.fob_value_cents,
            fob_value_cents=fob_value_cents,
        )
        return ImportResponse.from_entity(import_order)

    def _check_access(self, import_order: ImportOrder, actor: Actor, action: str) -> None:
        if not import_order.can_be_changed_by(actor):
            raise ActorNotAuthorizedException(actor.role.value, action)

    async def _load(self, import_id: UUID, for_update: bool = False) -> ImportOrder:
        import_order = await self._import_repo.get_by_id(import_id, for_update=for_update)
        if import_order is None:
            raise NotFoundException("import", str(import_id))
        return import_order

    async def _load_application(
        self,
        application_id: UUID,
        for_update: bool = False,
    ) -> CreditApplication:
        application = await self._application_repo.get_by_id(application_id, for_update=for_update)
        if application is None:
            raise NotFoundException("credit_application", str(application_id))
        return application
