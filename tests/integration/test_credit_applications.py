"""
Integration tests for the credit application workflow service.

These tests verify:
1. Every applied transition is persisted with its actor
2. Finalization publishes the final terms and approves in one step
3. A financial rejection freezes the application
4. Stale writes are refused with a concurrency conflict
5. Status change events reach the webhook, or stay queued when it fails
"""

from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from src.application.dto import (
    CreateApplicationRequest,
    FinalizeRequest,
    FinancialDecisionRequest,
    PreAnalysisDecisionRequest,
)
from src.application.services import CreditApplicationService, EventPublisher
from src.domain.entities import EventStatus
from src.domain.exceptions import (
    ActorNotAuthorizedException,
    ConcurrencyConflictException,
    FinancialValidationException,
    IllegalTransitionException,
    InvalidRequestException,
    NotFoundException,
)
from src.infrastructure.repositories import (
    PostgresCreditApplicationRepository,
    PostgresEventRepository,
)
from tests.integration.conftest import MockEventWebhookClient


async def to_financial_review(service, app_id, importer, reviewer, financial_institution):
    """Move a draft up to financial status under_review_financial."""
    await service.submit_application(app_id, importer)
    await service.review_application(app_id, reviewer, "under_review")
    for status in ("under_review", "pre_approved", "submitted_to_financial"):
        await service.record_pre_analysis_decision(
            app_id, reviewer, PreAnalysisDecisionRequest(status=status)
        )
    return await service.record_financial_decision(
        app_id, financial_institution, FinancialDecisionRequest(status="under_review_financial")
    )


@pytest.fixture
def draft(application_service, importer):
    async def factory():
        created = await application_service.create_application(
            importer, CreateApplicationRequest(requested_amount_cents=5_000_000)
        )
        return created.application_id

    return factory


# =============================================================================
# Creation Tests
# =============================================================================

class TestCreateApplication:
    """Tests for CreditApplicationService.create_application()."""

    @pytest.mark.asyncio
    async def test_new_application_is_draft(self, application_service, importer):
        response = await application_service.create_application(
            importer, CreateApplicationRequest(requested_amount_cents=5_000_000)
        )

        assert response.importer_id == importer.user_id
        assert response.application_status == "draft"
        assert response.pre_analysis_status == "pending"
        assert response.financial_status == "pending_financial"
        assert response.admin_status == "pending_admin"
        assert response.workflow_stage == "draft"
        assert response.available_credit_cents == 0

    @pytest.mark.asyncio
    async def test_only_importers_create(self, application_service, reviewer):
        with pytest.raises(ActorNotAuthorizedException):
            await application_service.create_application(
                reviewer, CreateApplicationRequest(requested_amount_cents=100)
            )

    @pytest.mark.asyncio
    async def test_amount_must_be_positive(self, application_service, importer):
        with pytest.raises(InvalidRequestException):
            await application_service.create_application(
                importer, CreateApplicationRequest(requested_amount_cents=0)
            )

    @pytest.mark.asyncio
    async def test_unknown_application(self, application_service):
        with pytest.raises(NotFoundException):
            await application_service.get_application(uuid4())


# =============================================================================
# Workflow Tests
# =============================================================================

class TestWorkflow:
    """Tests for transitions driven through the service."""

    @pytest.mark.asyncio
    async def test_history_records_every_change(
        self, application_service, finalized_application
    ):
        history = await application_service.get_history(finalized_application.application_id)

        moves = [(c.axis, c.from_status, c.to_status) for c in history.changes]
        assert moves[:7] == [
            ("application", "draft", "pending"),
            ("application", "pending", "under_review"),
            ("pre_analysis", "pending", "under_review"),
            ("pre_analysis", "under_review", "pre_approved"),
            ("pre_analysis", "pre_approved", "submitted_to_financial"),
            ("financial", "pending_financial", "under_review_financial"),
            ("financial", "under_review_financial", "approved"),
        ]
        assert sorted(moves[7:]) == [
            ("admin", "pending_admin", "admin_finalized"),
            ("application", "under_review", "approved"),
        ]
        assert {c.actor_role for c in history.changes} == {
            "importer", "reviewer", "financial_institution", "admin",
        }

    @pytest.mark.asyncio
    async def test_finalize_publishes_terms_and_approves(self, finalized_application):
        assert finalized_application.application_status == "approved"
        assert finalized_application.admin_status == "admin_finalized"
        assert finalized_application.workflow_stage == "completed"
        assert finalized_application.final_credit_limit_cents == 10_000_000
        assert finalized_application.final_approved_terms == [30, 60, 90]
        assert finalized_application.available_credit_cents == 10_000_000

    @pytest.mark.asyncio
    async def test_finalize_defaults_to_approved_terms(
        self, application_service, draft, importer, reviewer, financial_institution, admin
    ):
        app_id = await draft()
        await to_financial_review(application_service, app_id, importer, reviewer, financial_institution)
        await application_service.record_financial_decision(
            app_id,
            financial_institution,
            FinancialDecisionRequest(
                status="approved", approved_amount_cents=4_000_000, approved_terms="45, 90"
            ),
        )

        response = await application_service.finalize_admin(
            app_id, admin, FinalizeRequest(final_credit_limit_cents=4_000_000)
        )

        assert response.final_approved_terms == [45, 90]
        assert Decimal(response.final_down_payment_rate) == Decimal("30")
        assert Decimal(response.final_admin_fee_rate) == Decimal("10")

    @pytest.mark.asyncio
    async def test_finalize_rejects_bad_rate(
        self, application_service, draft, importer, reviewer, financial_institution, admin
    ):
        app_id = await draft()
        await to_financial_review(application_service, app_id, importer, reviewer, financial_institution)
        await application_service.record_financial_decision(
            app_id,
            financial_institution,
            FinancialDecisionRequest(
                status="approved", approved_amount_cents=4_000_000, approved_terms=[30]
            ),
        )

        with pytest.raises(FinancialValidationException):
            await application_service.finalize_admin(
                app_id,
                admin,
                FinalizeRequest(final_credit_limit_cents=4_000_000, down_payment_rate=Decimal("120")),
            )

        current = await application_service.get_application(app_id)
        assert current.admin_status == "pending_admin"

    @pytest.mark.asyncio
    async def test_finalize_before_financial_approval_refused(
        self, application_service, draft, importer, reviewer, financial_institution, admin
    ):
        app_id = await draft()
        await to_financial_review(application_service, app_id, importer, reviewer, financial_institution)

        with pytest.raises(IllegalTransitionException):
            await application_service.finalize_admin(
                app_id, admin, FinalizeRequest(final_credit_limit_cents=1_000_000)
            )

        current = await application_service.get_application(app_id)
        assert current.final_credit_limit_cents is None
        assert current.application_status == "under_review"

    @pytest.mark.asyncio
    async def test_financial_approval_requires_amount_and_terms(
        self, application_service, draft, importer, reviewer, financial_institution
    ):
        app_id = await draft()
        await to_financial_review(application_service, app_id, importer, reviewer, financial_institution)

        with pytest.raises(InvalidRequestException):
            await application_service.record_financial_decision(
                app_id, financial_institution, FinancialDecisionRequest(status="approved")
            )

    @pytest.mark.asyncio
    async def test_financial_rejection_freezes_application(
        self, application_service, draft, importer, reviewer, financial_institution, admin
    ):
        """After a financial rejection, finalization is refused; the reviewer may close it."""
        app_id = await draft()
        await to_financial_review(application_service, app_id, importer, reviewer, financial_institution)

        rejected = await application_service.record_financial_decision(
            app_id,
            financial_institution,
            FinancialDecisionRequest(status="rejected", notes="Insufficient collateral"),
        )
        assert rejected.workflow_stage == "rejected"
        assert rejected.application_status == "under_review"
        assert rejected.financial_notes == "Insufficient collateral"

        with pytest.raises(IllegalTransitionException):
            await application_service.finalize_admin(
                app_id, admin, FinalizeRequest(final_credit_limit_cents=1_000_000)
            )

        closed = await application_service.review_application(app_id, reviewer, "rejected")
        assert closed.application_status == "rejected"

    @pytest.mark.asyncio
    async def test_pre_analysis_notes_recorded(
        self, application_service, draft, importer, reviewer
    ):
        app_id = await draft()
        await application_service.submit_application(app_id, importer)
        await application_service.review_application(app_id, reviewer, "under_review")

        response = await application_service.record_pre_analysis_decision(
            app_id,
            reviewer,
            PreAnalysisDecisionRequest(status="needs_documents", notes="Missing import license"),
        )

        assert response.pre_analysis_status == "needs_documents"
        assert response.pre_analysis_notes == "Missing import license"

    @pytest.mark.asyncio
    async def test_cancel_draft(self, application_service, draft, importer, reviewer):
        app_id = await draft()

        cancelled = await application_service.cancel_application(app_id, importer)
        assert cancelled.application_status == "cancelled"

        with pytest.raises(IllegalTransitionException):
            await application_service.submit_application(app_id, importer)

    @pytest.mark.asyncio
    async def test_other_importer_cannot_submit(
        self, application_service, draft, other_importer
    ):
        app_id = await draft()

        with pytest.raises(ActorNotAuthorizedException):
            await application_service.submit_application(app_id, other_importer)

    @pytest.mark.asyncio
    async def test_refused_transition_leaves_no_history(
        self, application_service, draft, importer, reviewer
    ):
        app_id = await draft()

        with pytest.raises(ActorNotAuthorizedException):
            await application_service.submit_application(app_id, reviewer)

        history = await application_service.get_history(app_id)
        assert history.changes == []


# =============================================================================
# Concurrency Tests
# =============================================================================

class TestVersionCheck:
    """Tests for the optimistic version check on application writes."""

    @pytest.mark.asyncio
    async def test_stale_write_conflicts(self, application_service, draft, test_session):
        app_id = await draft()
        repo = PostgresCreditApplicationRepository(test_session)

        first = await repo.get_by_id(UUID(app_id))
        stale = await repo.get_by_id(UUID(app_id))

        first.pre_analysis_notes = "first"
        await repo.update(first)

        stale.pre_analysis_notes = "second"
        with pytest.raises(ConcurrencyConflictException):
            await repo.update(stale)

        current = await repo.get_by_id(UUID(app_id))
        assert current.pre_analysis_notes == "first"
        assert current.version == 2


# =============================================================================
# Event Tests
# =============================================================================

class TestStatusEvents:
    """Tests for status change events."""

    @pytest.mark.asyncio
    async def test_event_per_change(
        self, application_service, draft, importer, mock_event_client, event_publisher
    ):
        app_id = await draft()
        await application_service.submit_application(app_id, importer)
        await event_publisher.deliver_published()

        (event,) = mock_event_client.sent_of_type("status_changed")
        assert event.payload["application_id"] == app_id
        assert event.payload["axis"] == "application"
        assert event.payload["to_status"] == "pending"
        assert event.payload["importer_id"] == importer.user_id
        assert event.payload["workflow_stage"] == "pending_admin"

    @pytest.mark.asyncio
    async def test_failed_delivery_stays_queued(self, test_session, importer):
        failing = MockEventWebhookClient(fail_mode=True)
        event_repo = PostgresEventRepository(test_session)
        publisher = EventPublisher(event_repo, failing)
        service = CreditApplicationService(
            application_repository=PostgresCreditApplicationRepository(test_session),
            event_publisher=publisher,
        )

        created = await service.create_application(
            importer, CreateApplicationRequest(requested_amount_cents=100000)
        )
        # The transition itself succeeds
        submitted = await service.submit_application(created.application_id, importer)
        assert submitted.application_status == "pending"
        await publisher.deliver_published()

        (pending,) = await event_repo.get_pending()
        assert pending.status == EventStatus.FAILED
        assert pending.attempts == 1

        recovering = MockEventWebhookClient()
        redelivered = await EventPublisher(event_repo, recovering).redeliver_pending()

        assert len(redelivered) == 1
        assert recovering.call_count == 1
        assert await event_repo.get_pending() == []

    @pytest.mark.asyncio
    async def test_events_recorded_without_webhook(self, test_session, importer):
        event_repo = PostgresEventRepository(test_session)
        service = CreditApplicationService(
            application_repository=PostgresCreditApplicationRepository(test_session),
            event_publisher=EventPublisher(event_repo),
        )

        created = await service.create_application(
            importer, CreateApplicationRequest(requested_amount_cents=100000)
        )
        await service.submit_application(created.application_id, importer)

        (pending,) = await event_repo.get_pending()
        assert pending.status == EventStatus.PENDING
        assert pending.payload["to_status"] == "pending"
