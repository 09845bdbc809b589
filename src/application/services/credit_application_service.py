"""Credit application service - drives an application through its workflow."""

from typing import Callable, Optional, Sequence, Tuple
from uuid import UUID

import structlog

from src.core.metrics import record_status_transition, track_operation_latency
from src.domain.entities import (
    Actor,
    ActorRole,
    AdminStatus,
    ApplicationStatus,
    CreditApplication,
    EventType,
    FinancialStatus,
    StatusAxis,
    StatusChange,
)
from src.domain.exceptions import (
    ActorNotAuthorizedException,
    InvalidRequestException,
    NotFoundException,
)
from src.domain.interfaces import CreditApplicationRepository
from src.application.dto import (
    ApplicationResponse,
    CreateApplicationRequest,
    FinalizeRequest,
    FinancialDecisionRequest,
    PreAnalysisDecisionRequest,
    StatusHistoryResponse,
)
from src.service.financial import calculate_financials, finance_settings, parse_terms
from src.service.workflow import apply_transitions, coerce_status, workflow_stage

from .event_publisher import EventPublisher

logger = structlog.get_logger(__name__)

Move = Tuple[StatusAxis, object]


class CreditApplicationService:
    """
    Application service for credit application use cases.

    Each operation reads the application row locked for the transaction,
    validates the requested moves against the whole composite state, then
    persists the new state, its history entries and one event per change.
    """

    def __init__(
        self,
        application_repository: CreditApplicationRepository,
        event_publisher: EventPublisher,
    ):
        self._application_repo = application_repository
        self._events = event_publisher

    async def create_application(
        self,
        actor: Actor,
        request: CreateApplicationRequest,
    ) -> ApplicationResponse:
        """
        Open a draft application for the acting importer.

        Raises:
            ActorNotAuthorizedException: If the actor is not an importer
            InvalidRequestException: If request validation fails
        """
        if actor.role != ActorRole.IMPORTER:
            raise ActorNotAuthorizedException(actor.role.value, "create a credit application")

        errors = request.validate()
        if errors:
            raise InvalidRequestException("; ".join(errors))

        application = CreditApplication(
            importer_id=actor.user_id,
            requested_amount_cents=request.requested_amount_cents,
        )
        await self._application_repo.save(application)

        logger.info(
            "credit_application_created",
            application_id=str(application.id),
            importer_id=actor.user_id,
            requested_amount_cents=request.requested_amount_cents,
        )
        return ApplicationResponse.from_entity(application)

    async def get_application(self, application_id: UUID) -> ApplicationResponse:
        application = await self._load(application_id)
        return ApplicationResponse.from_entity(application)

    async def get_history(self, application_id: UUID) -> StatusHistoryResponse:
        await self._load(application_id)
        changes = await self._application_repo.get_status_history(application_id)
        return StatusHistoryResponse.from_entities(str(application_id), changes)

    async def submit_application(self, application_id: UUID, actor: Actor) -> ApplicationResponse:
        """Importer submits a draft: application draft -> pending."""
        return await self._transition(
            application_id,
            actor,
            [(StatusAxis.APPLICATION, ApplicationStatus.PENDING)],
            operation="submit_application",
        )

    async def cancel_application(self, application_id: UUID, actor: Actor) -> ApplicationResponse:
        """Importer withdraws a draft or pending application."""
        return await self._transition(
            application_id,
            actor,
            [(StatusAxis.APPLICATION, ApplicationStatus.CANCELLED)],
            operation="cancel_application",
        )

    async def review_application(
        self,
        application_id: UUID,
        actor: Actor,
        status: str,
    ) -> ApplicationResponse:
        """Reviewer takes a pending application under review, or rejects it."""
        target = coerce_status(StatusAxis.APPLICATION, status)
        return await self._transition(
            application_id,
            actor,
            [(StatusAxis.APPLICATION, target)],
            operation="review_application",
        )

    async def record_pre_analysis_decision(
        self,
        application_id: UUID,
        actor: Actor,
        request: PreAnalysisDecisionRequest,
    ) -> ApplicationResponse:
        """Reviewer moves the pre-analysis axis, optionally with notes."""
        target = coerce_status(StatusAxis.PRE_ANALYSIS, request.status)

        def apply_notes(application: CreditApplication) -> None:
            if request.notes is not None:
                application.pre_analysis_notes = request.notes

        return await self._transition(
            application_id,
            actor,
            [(StatusAxis.PRE_ANALYSIS, target)],
            operation="record_pre_analysis_decision",
            mutate=apply_notes,
        )

    async def record_financial_decision(
        self,
        application_id: UUID,
        actor: Actor,
        request: FinancialDecisionRequest,
    ) -> ApplicationResponse:
        """
        Financial institution moves the financial axis.

        An approval records the approved amount and terms.

        Raises:
            InvalidRequestException: If an approval lacks amount or terms
            FinancialValidationException: If the terms are malformed
        """
        target = coerce_status(StatusAxis.FINANCIAL, request.status)

        errors = request.validate()
        if errors:
            raise InvalidRequestException("; ".join(errors))

        terms = parse_terms(request.approved_terms) if request.approved_terms else None

        def apply_decision(application: CreditApplication) -> None:
            if target == FinancialStatus.APPROVED:
                application.approved_amount_cents = request.approved_amount_cents
                application.approved_terms = terms
            if request.notes is not None:
                application.financial_notes = request.notes

        return await self._transition(
            application_id,
            actor,
            [(StatusAxis.FINANCIAL, target)],
            operation="record_financial_decision",
            mutate=apply_decision,
        )

    async def finalize_admin(
        self,
        application_id: UUID,
        actor: Actor,
        request: FinalizeRequest,
    ) -> ApplicationResponse:
        """
        Admin publishes the final limit, rates and terms.

        Finalization and application approval are one coupled move, so an
        application is never approved without final terms.

        Raises:
            InvalidRequestException: If the limit is not positive
            FinancialValidationException: If a rate or the terms are out of range
        """
        errors = request.validate()
        if errors:
            raise InvalidRequestException("; ".join(errors))

        application = await self._load(application_id)

        if request.terms:
            terms = parse_terms(request.terms)
        elif application.approved_terms:
            terms = list(application.approved_terms)
        else:
            terms = list(finance_settings.default_terms)

        down_payment_rate = (
            request.down_payment_rate
            if request.down_payment_rate is not None
            else finance_settings.default_down_payment_rate
        )
        admin_fee_rate = (
            request.admin_fee_rate
            if request.admin_fee_rate is not None
            else finance_settings.default_admin_fee_rate
        )

        # Rates and terms go through the calculator's validation up front.
        breakdown = calculate_financials(
            request.final_credit_limit_cents,
            down_payment_rate,
            admin_fee_rate,
            terms,
        )

        def apply_terms(app: CreditApplication) -> None:
            app.final_credit_limit_cents = request.final_credit_limit_cents
            app.final_down_payment_rate = breakdown.down_payment_rate
            app.final_admin_fee_rate = breakdown.admin_fee_rate
            app.final_approved_terms = list(breakdown.terms)

        return await self._transition(
            application_id,
            actor,
            [
                (StatusAxis.ADMIN, AdminStatus.ADMIN_FINALIZED),
                (StatusAxis.APPLICATION, ApplicationStatus.APPROVED),
            ],
            operation="finalize_admin",
            mutate=apply_terms,
        )

    async def _transition(
        self,
        application_id: UUID,
        actor: Actor,
        moves: Sequence[Move],
        operation: str,
        mutate: Optional[Callable[[CreditApplication], None]] = None,
    ) -> ApplicationResponse:
        log = logger.bind(
            application_id=str(application_id),
            actor_id=actor.user_id,
            actor_role=actor.role.value,
            operation=operation,
        )

        with track_operation_latency(operation):
            application = await self._load(application_id, for_update=True)
            self._check_owner(application, actor, operation)

            result = apply_transitions(application.id, application.state, moves, actor)

            application.state = result.state
            if mutate is not None:
                mutate(application)

            await self._application_repo.update(application)
            await self._application_repo.add_status_changes(list(result.changes))

            for change in result.changes:
                record_status_transition(change.axis.value, change.to_status)
                await self._publish(application, change)

        log.info(
            "status_transition_applied",
            changes=[f"{c.axis.value}:{c.from_status}->{c.to_status}" for c in result.changes],
            workflow_stage=workflow_stage(application.state),
        )
        return ApplicationResponse.from_entity(application)

    def _check_owner(self, application: CreditApplication, actor: Actor, operation: str) -> None:
        if actor.role == ActorRole.IMPORTER and actor.user_id != application.importer_id:
            raise ActorNotAuthorizedException(
                actor.role.value,
                f"{operation.replace('_', ' ')} on another importer's application",
            )

    async def _publish(self, application: CreditApplication, change: StatusChange) -> None:
        payload = change.to_dict()
        payload["importer_id"] = application.importer_id
        payload["workflow_stage"] = workflow_stage(application.state)
        payload.update(application.state.to_dict())
        await self._events.publish(EventType.STATUS_CHANGED, payload)

    async def _load(
        self,
        application_id: UUID,
        for_update: bool = False,
    ) -> CreditApplication:
        application = await self._application_repo.get_by_id(application_id, for_update=for_update)
        if application is None:
            raise NotFoundException("credit_application", str(application_id))
        return application
