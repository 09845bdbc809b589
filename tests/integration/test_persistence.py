"""
Integration tests for data persistence.

These tests verify:
1. Applications, imports and schedules survive a round trip through the database
2. The schema refuses values outside the closed status sets
3. Stored values outside an enum are reported as data integrity errors
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

import pytest
from httpx import AsyncClient
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from src.application.dto import CreateImportRequest
from src.domain.entities import ApplicationStatus, ImportStage
from src.domain.exceptions import DataIntegrityException
from src.infrastructure.repositories import (
    PostgresCreditApplicationRepository,
    PostgresImportRepository,
)
from src.infrastructure.repositories.base import load_enum
from tests.integration.conftest import ADMIN_HEADERS


# =============================================================================
# Round Trip Tests
# =============================================================================

class TestRoundTrip:
    """Tests for repository reads after writes."""

    @pytest.mark.asyncio
    async def test_finalized_application_round_trip(self, test_session, finalized_application):
        repo = PostgresCreditApplicationRepository(test_session)

        application = await repo.get_by_id(UUID(finalized_application.application_id))

        assert application.state.application == ApplicationStatus.APPROVED
        assert application.final_credit_limit_cents == 10_000_000
        assert application.final_approved_terms == [30, 60, 90]
        assert application.approved_terms == [30, 60, 90]
        assert application.final_down_payment_rate == Decimal("30")
        assert application.final_admin_fee_rate == Decimal("10")
        assert application.is_finalized
        # One version bump per transition group
        assert application.version == 9

    @pytest.mark.asyncio
    async def test_import_snapshot_round_trip(
        self, test_session, import_service, finalized_application, importer
    ):
        response = await import_service.create_import(
            importer,
            CreateImportRequest(
                application_id=UUID(finalized_application.application_id),
                name="Printing presses",
                fob_value_cents=250000,
                currency="EUR",
            ),
        )

        stored = await PostgresImportRepository(test_session).get_by_id(UUID(response.import_id))

        assert stored.stage == ImportStage.PLANNING
        assert stored.currency == "EUR"
        assert stored.snapshot.fob_value_cents == 250000
        assert stored.snapshot.down_payment_cents == 75000
        assert stored.snapshot.financed_amount_cents == 175000
        assert stored.snapshot.terms == (30, 60, 90)
        assert stored.snapshot.down_payment_rate == Decimal("30")

    @pytest.mark.asyncio
    async def test_applications_by_importer(self, test_session, finalized_application, importer):
        repo = PostgresCreditApplicationRepository(test_session)

        applications = await repo.get_by_importer(importer.user_id)

        assert [str(a.id) for a in applications] == [finalized_application.application_id]
        assert await repo.get_by_importer("nobody") == []


# =============================================================================
# Schema Constraint Tests
# =============================================================================

class TestSchemaConstraints:
    """Tests for CHECK constraints on the stored columns."""

    @pytest.mark.asyncio
    async def test_unknown_status_rejected_by_database(self, test_session, finalized_application):
        with pytest.raises(IntegrityError):
            await test_session.execute(
                text("UPDATE credit_applications SET application_status = 'archived'")
            )

    @pytest.mark.asyncio
    async def test_usage_above_limit_rejected_by_database(self, test_session, finalized_application):
        with pytest.raises(IntegrityError):
            await test_session.execute(
                text("UPDATE credit_applications SET credit_used_cents = final_credit_limit_cents + 1")
            )

    def test_unknown_enum_value_is_integrity_error(self):
        with pytest.raises(DataIntegrityException):
            load_enum(ApplicationStatus, "archived", "application_status")


# =============================================================================
# Path Validation Tests
# =============================================================================

class TestPathValidation:
    """Tests for malformed identifiers in request paths."""

    @pytest.mark.asyncio
    async def test_invalid_uuid_returns_422(self, client: AsyncClient):
        response = await client.get("/v1/credit-applications/not-a-uuid", headers=ADMIN_HEADERS)

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_payment_not_found_returns_404(self, client: AsyncClient):
        response = await client.get(
            "/v1/payments/00000000-0000-0000-0000-000000000000", headers=ADMIN_HEADERS
        )

        assert response.status_code == 404
        assert response.json()["error"] == "PAYMENT_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_dates_serialized_as_iso(self, client: AsyncClient):
        response = await client.post(
            "/v1/credit-applications",
            json={"requested_amount_cents": 1000},
            headers={"X-Actor-Id": "importer-iso", "X-Actor-Role": "importer"},
        )

        created_at = response.json()["created_at"]
        assert created_at.endswith("Z")
        assert date.fromisoformat(created_at[:10])
