"""
Integration tests for the credit ledger.

These tests verify:
1. Reservations never exceed the finalized limit
2. Refusals report the shortfall and leave nothing written
3. Release is idempotent and returns capacity
4. Ledger change events are published with the new balance
"""

from uuid import UUID, uuid4

import pytest

from src.application.dto import CreateImportRequest, PreAnalysisDecisionRequest
from src.domain.entities import LedgerEntryStatus
from src.domain.exceptions import (
    DataIntegrityException,
    FinancialValidationException,
    InsufficientCreditException,
    NoApprovedCreditException,
    NotFoundException,
)
from src.infrastructure.repositories import PostgresCreditLedgerRepository
from tests.integration.conftest import build_finalized_application


@pytest.fixture
def limited_application(application_service, importer, reviewer, financial_institution, admin):
    """Factory for a finalized application with a 100,000 cent limit."""

    async def factory(limit_cents: int = 100000):
        response = await build_finalized_application(
            application_service,
            importer,
            reviewer,
            financial_institution,
            admin,
            final_credit_limit_cents=limit_cents,
        )
        return UUID(response.application_id)

    return factory


# =============================================================================
# Reservation Tests
# =============================================================================

class TestReserve:
    """Tests for CreditLedgerService.reserve()."""

    @pytest.mark.asyncio
    async def test_reserve_release_reserve(self, ledger_service, limited_application):
        """
        A 70,000 reservation leaves 30,000; 40,000 is refused with a 10,000
        shortfall; releasing the first makes room for the second.
        """
        app_id = await limited_application(100000)
        import_a, import_b = uuid4(), uuid4()

        await ledger_service.reserve(app_id, import_a, 70000)
        balance = await ledger_service.available_credit(app_id)
        assert balance.available_cents == 30000

        with pytest.raises(InsufficientCreditException) as exc_info:
            await ledger_service.reserve(app_id, import_b, 40000)
        assert exc_info.value.shortfall_cents == 10000
        assert exc_info.value.available_cents == 30000

        await ledger_service.release(app_id, import_a)
        balance = await ledger_service.available_credit(app_id)
        assert balance.available_cents == 100000

        await ledger_service.reserve(app_id, import_b, 40000)
        balance = await ledger_service.available_credit(app_id)
        assert balance.used_cents == 40000
        assert balance.available_cents == 60000

    @pytest.mark.asyncio
    async def test_exact_capacity_succeeds_one_over_fails(self, ledger_service, limited_application):
        app_id = await limited_application(100000)

        await ledger_service.reserve(app_id, uuid4(), 60000)

        with pytest.raises(InsufficientCreditException) as exc_info:
            await ledger_service.reserve(app_id, uuid4(), 40001)
        assert exc_info.value.shortfall_cents == 1

        await ledger_service.reserve(app_id, uuid4(), 40000)
        balance = await ledger_service.available_credit(app_id)
        assert balance.available_cents == 0

    @pytest.mark.asyncio
    async def test_refused_reservation_writes_nothing(self, ledger_service, limited_application):
        app_id = await limited_application(100000)

        with pytest.raises(InsufficientCreditException):
            await ledger_service.reserve(app_id, uuid4(), 100001)

        assert await ledger_service.get_entries(app_id) == []
        balance = await ledger_service.available_credit(app_id)
        assert balance.used_cents == 0

    @pytest.mark.asyncio
    async def test_sequence_never_exceeds_limit(self, ledger_service, limited_application):
        """Usage stays within the limit across a run of accepted and refused requests."""
        app_id = await limited_application(100000)
        accepted = 0

        for amount in [25000, 40000, 50000, 30000, 10000, 1]:
            try:
                await ledger_service.reserve(app_id, uuid4(), amount)
                accepted += amount
            except InsufficientCreditException:
                pass

            balance = await ledger_service.available_credit(app_id)
            assert balance.used_cents == accepted
            assert balance.used_cents <= balance.limit_cents

        assert accepted == 95001

    @pytest.mark.asyncio
    async def test_zero_amount_reservation_allowed(self, ledger_service, limited_application):
        """A fully paid-up import reserves nothing but still holds an entry."""
        app_id = await limited_application(100000)

        entry = await ledger_service.reserve(app_id, uuid4(), 0)

        assert entry.amount_reserved_cents == 0
        assert len(await ledger_service.get_entries(app_id)) == 1

    @pytest.mark.asyncio
    async def test_negative_amount_rejected(self, ledger_service, limited_application):
        app_id = await limited_application(100000)

        with pytest.raises(FinancialValidationException):
            await ledger_service.reserve(app_id, uuid4(), -1)

    @pytest.mark.asyncio
    async def test_unfinalized_application_has_no_credit(
        self, ledger_service, application_service, importer
    ):
        from src.application.dto import CreateApplicationRequest

        created = await application_service.create_application(
            importer, CreateApplicationRequest(requested_amount_cents=100000)
        )

        with pytest.raises(NoApprovedCreditException):
            await ledger_service.reserve(UUID(created.application_id), uuid4(), 1)

    @pytest.mark.asyncio
    async def test_unknown_application(self, ledger_service):
        with pytest.raises(NotFoundException):
            await ledger_service.reserve(uuid4(), uuid4(), 100)


# =============================================================================
# Release Tests
# =============================================================================

class TestRelease:
    """Tests for CreditLedgerService.release()."""

    @pytest.mark.asyncio
    async def test_release_is_idempotent(self, ledger_service, limited_application):
        app_id = await limited_application(100000)
        import_id = uuid4()
        await ledger_service.reserve(app_id, import_id, 70000)

        first = await ledger_service.release(app_id, import_id)
        second = await ledger_service.release(app_id, import_id)

        assert first is not None
        assert first.status == LedgerEntryStatus.RELEASED
        assert first.released_at is not None
        assert second is None

        balance = await ledger_service.available_credit(app_id)
        assert balance.used_cents == 0

    @pytest.mark.asyncio
    async def test_release_unknown_import_is_noop(self, ledger_service, limited_application):
        app_id = await limited_application(100000)
        await ledger_service.reserve(app_id, uuid4(), 5000)

        assert await ledger_service.release(app_id, uuid4()) is None

        balance = await ledger_service.available_credit(app_id)
        assert balance.used_cents == 5000


# =============================================================================
# Adjustment Tests
# =============================================================================

class TestAdjust:
    """Tests for CreditLedgerService.adjust()."""

    @pytest.mark.asyncio
    async def test_grow_and_shrink(self, ledger_service, limited_application):
        app_id = await limited_application(100000)
        import_id = uuid4()
        await ledger_service.reserve(app_id, import_id, 50000)

        await ledger_service.adjust(app_id, import_id, 80000)
        assert (await ledger_service.available_credit(app_id)).used_cents == 80000

        await ledger_service.adjust(app_id, import_id, 20000)
        assert (await ledger_service.available_credit(app_id)).used_cents == 20000

        (entry,) = await ledger_service.get_entries(app_id)
        assert entry.amount_reserved_cents == 20000

    @pytest.mark.asyncio
    async def test_growth_beyond_limit_refused(self, ledger_service, limited_application):
        app_id = await limited_application(100000)
        import_id = uuid4()
        await ledger_service.reserve(app_id, import_id, 50000)
        await ledger_service.reserve(app_id, uuid4(), 40000)

        with pytest.raises(InsufficientCreditException):
            await ledger_service.adjust(app_id, import_id, 60001)

        assert (await ledger_service.available_credit(app_id)).used_cents == 90000

    @pytest.mark.asyncio
    async def test_released_reservation_cannot_be_adjusted(
        self, ledger_service, limited_application
    ):
        app_id = await limited_application(100000)
        import_id = uuid4()
        await ledger_service.reserve(app_id, import_id, 50000)
        await ledger_service.release(app_id, import_id)

        with pytest.raises(DataIntegrityException):
            await ledger_service.adjust(app_id, import_id, 10000)


# =============================================================================
# Repository Conditional Update Tests
# =============================================================================

class TestConditionalUsageUpdate:
    """Tests for the compare-and-set on credit usage."""

    @pytest.mark.asyncio
    async def test_try_increase_usage_respects_limit(self, test_session, limited_application):
        app_id = await limited_application(1000)
        repo = PostgresCreditLedgerRepository(test_session)

        assert await repo.try_increase_usage(app_id, 1000) is True
        assert await repo.try_increase_usage(app_id, 1) is False

        balance = await repo.get_balance(app_id)
        assert balance.used_cents == 1000

    @pytest.mark.asyncio
    async def test_decrease_below_zero_refused(self, test_session, limited_application):
        app_id = await limited_application(1000)
        repo = PostgresCreditLedgerRepository(test_session)

        with pytest.raises(DataIntegrityException):
            await repo.decrease_usage(app_id, 1)


# =============================================================================
# Event Tests
# =============================================================================

class TestLedgerEvents:
    """Tests for ledger change events."""

    @pytest.mark.asyncio
    async def test_reserve_and_release_publish_events(
        self, ledger_service, limited_application, mock_event_client, event_publisher
    ):
        app_id = await limited_application(100000)
        import_id = uuid4()

        await ledger_service.reserve(app_id, import_id, 70000)
        await ledger_service.release(app_id, import_id)
        await event_publisher.deliver_published()

        events = mock_event_client.sent_of_type("ledger_changed")
        assert [e.payload["delta_cents"] for e in events] == [70000, -70000]
        assert events[0].payload["available_cents"] == 30000
        assert events[1].payload["available_cents"] == 100000
        assert events[0].payload["import_id"] == str(import_id)


# =============================================================================
# No Approved Credit Tests
# =============================================================================

class TestImportBeforeApproval:
    """An import cannot draw on an application that is still in review."""

    @pytest.mark.asyncio
    async def test_import_refused_while_pre_approved(
        self,
        application_service,
        import_service,
        ledger_service,
        importer,
        reviewer,
    ):
        from src.application.dto import CreateApplicationRequest

        created = await application_service.create_application(
            importer, CreateApplicationRequest(requested_amount_cents=100000)
        )
        app_id = created.application_id
        await application_service.submit_application(app_id, importer)
        await application_service.review_application(app_id, reviewer, "under_review")
        for status in ("under_review", "pre_approved"):
            await application_service.record_pre_analysis_decision(
                app_id, reviewer, PreAnalysisDecisionRequest(status=status)
            )

        with pytest.raises(NoApprovedCreditException):
            await import_service.create_import(
                importer,
                CreateImportRequest(
                    application_id=UUID(app_id),
                    name="Textile machinery",
                    fob_value_cents=50000,
                ),
            )

        assert await ledger_service.get_entries(UUID(app_id)) == []
        balance = await ledger_service.available_credit(UUID(app_id))
        assert balance.used_cents == 0
        assert balance.limit_cents == 0
