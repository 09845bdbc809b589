"""
Fixtures for integration tests.

Provides:
- In-memory database for testing, and a file database for multi-session tests
- Mock event webhook client
- Test client for FastAPI app
- Service instances bound to the test session
- Actors and header helpers for each role
"""

from decimal import Decimal
from typing import AsyncGenerator, Dict, List

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from src.main import app
from src.core.dependencies import get_event_client
from src.application.dto import (
    CreateApplicationRequest,
    FinalizeRequest,
    FinancialDecisionRequest,
    PreAnalysisDecisionRequest,
)
from src.application.services import (
    CreditApplicationService,
    CreditLedgerService,
    EventPublisher,
    ImportService,
    PaymentScheduleService,
)
from src.domain.entities import Actor, ActorRole, OutboundEvent
from src.domain.interfaces import EventWebhookClient
from src.infrastructure.database import (
    Base,
    DatabaseSessionManager,
    get_db_session,
    run_after_commit,
)
from src.infrastructure.database.connection import AFTER_COMMIT_KEY
from src.infrastructure.repositories import (
    PostgresCreditApplicationRepository,
    PostgresCreditLedgerRepository,
    PostgresEventRepository,
    PostgresImportRepository,
    PostgresPaymentScheduleRepository,
)


# =============================================================================
# Mock Clients
# =============================================================================

class MockEventWebhookClient(EventWebhookClient):
    """Mock event client that tracks webhook calls."""

    def __init__(self, fail_mode: bool = False, fail_count: int = 0):
        self.fail_mode = fail_mode
        self.fail_count = fail_count  # Number of failures before success
        self.call_count = 0
        self.events_sent: List[OutboundEvent] = []
        self.current_failures = 0

    async def send_event(self, event: OutboundEvent) -> bool:
        """Track webhook calls and optionally fail."""
        self.call_count += 1

        if self.fail_mode:
            return False

        if self.current_failures < self.fail_count:
            self.current_failures += 1
            return False

        self.events_sent.append(event)
        return True

    def sent_of_type(self, event_type: str) -> List[OutboundEvent]:
        return [e for e in self.events_sent if e.event_type.value == event_type]


@pytest.fixture
def mock_event_client() -> MockEventWebhookClient:
    """Create a mock event client."""
    return MockEventWebhookClient()


@pytest.fixture
def failing_event_client() -> MockEventWebhookClient:
    """Create an event client that always fails."""
    return MockEventWebhookClient(fail_mode=True)


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """Create a test database engine using SQLite in-memory."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def test_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest_asyncio.fixture
async def file_db(tmp_path) -> AsyncGenerator[DatabaseSessionManager, None]:
    """A session manager on a file database, so each session gets its own connection."""
    manager = DatabaseSessionManager()
    manager.init(f"sqlite+aiosqlite:///{tmp_path / 'comex.db'}")
    await manager.create_tables()
    yield manager
    await manager.close()


# =============================================================================
# Actors
# =============================================================================

IMPORTER_ID = "importer-acme"
OTHER_IMPORTER_ID = "importer-globex"


@pytest.fixture
def importer() -> Actor:
    return Actor(user_id=IMPORTER_ID, role=ActorRole.IMPORTER)


@pytest.fixture
def other_importer() -> Actor:
    return Actor(user_id=OTHER_IMPORTER_ID, role=ActorRole.IMPORTER)


@pytest.fixture
def reviewer() -> Actor:
    return Actor(user_id="reviewer-1", role=ActorRole.REVIEWER)


@pytest.fixture
def financial_institution() -> Actor:
    return Actor(user_id="bank-1", role=ActorRole.FINANCIAL_INSTITUTION)


@pytest.fixture
def admin() -> Actor:
    return Actor(user_id="admin-1", role=ActorRole.ADMIN)


def headers_for(user_id: str, role: str) -> Dict[str, str]:
    """Authentication headers for a request made by the given actor."""
    return {"X-Actor-Id": user_id, "X-Actor-Role": role}


IMPORTER_HEADERS = headers_for(IMPORTER_ID, "importer")
OTHER_IMPORTER_HEADERS = headers_for(OTHER_IMPORTER_ID, "importer")
REVIEWER_HEADERS = headers_for("reviewer-1", "reviewer")
FINANCIAL_HEADERS = headers_for("bank-1", "financial_institution")
ADMIN_HEADERS = headers_for("admin-1", "admin")


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def event_publisher(test_session, mock_event_client) -> EventPublisher:
    return EventPublisher(
        event_repository=PostgresEventRepository(test_session),
        webhook_client=mock_event_client,
    )


@pytest.fixture
def application_service(test_session, event_publisher) -> CreditApplicationService:
    return CreditApplicationService(
        application_repository=PostgresCreditApplicationRepository(test_session),
        event_publisher=event_publisher,
    )


@pytest.fixture
def ledger_service(test_session, event_publisher) -> CreditLedgerService:
    return CreditLedgerService(
        ledger_repository=PostgresCreditLedgerRepository(test_session),
        event_publisher=event_publisher,
    )


@pytest.fixture
def payment_service(test_session) -> PaymentScheduleService:
    return PaymentScheduleService(
        payment_repository=PostgresPaymentScheduleRepository(test_session),
        import_repository=PostgresImportRepository(test_session),
        notice_days=10,
    )


@pytest.fixture
def import_service(test_session, ledger_service, payment_service) -> ImportService:
    return ImportService(
        application_repository=PostgresCreditApplicationRepository(test_session),
        import_repository=PostgresImportRepository(test_session),
        ledger_service=ledger_service,
        payment_service=payment_service,
    )


async def build_finalized_application(
    service: CreditApplicationService,
    importer: Actor,
    reviewer: Actor,
    financial_institution: Actor,
    admin: Actor,
    final_credit_limit_cents: int = 10_000_000,
    down_payment_rate: Decimal = Decimal("30"),
    admin_fee_rate: Decimal = Decimal("10"),
    terms: List[int] = None,
):
    """Drive a new application through the whole workflow to admin finalization."""
    created = await service.create_application(
        importer, CreateApplicationRequest(requested_amount_cents=final_credit_limit_cents)
    )
    app_id = created.application_id

    await service.submit_application(app_id, importer)
    await service.review_application(app_id, reviewer, "under_review")
    for status in ("under_review", "pre_approved", "submitted_to_financial"):
        await service.record_pre_analysis_decision(
            app_id, reviewer, PreAnalysisDecisionRequest(status=status)
        )
    await service.record_financial_decision(
        app_id,
        financial_institution,
        FinancialDecisionRequest(status="under_review_financial"),
    )
    await service.record_financial_decision(
        app_id,
        financial_institution,
        FinancialDecisionRequest(
            status="approved",
            approved_amount_cents=final_credit_limit_cents,
            approved_terms=terms or [30, 60, 90],
        ),
    )
    return await service.finalize_admin(
        app_id,
        admin,
        FinalizeRequest(
            final_credit_limit_cents=final_credit_limit_cents,
            down_payment_rate=down_payment_rate,
            admin_fee_rate=admin_fee_rate,
            terms=terms or [30, 60, 90],
        ),
    )


@pytest_asyncio.fixture
async def finalized_application(
    application_service,
    importer,
    reviewer,
    financial_institution,
    admin,
):
    """A finalized application with a 100,000.00 limit, 30% down, 10% fee, 30/60/90."""
    return await build_finalized_application(
        application_service, importer, reviewer, financial_institution, admin
    )


# =============================================================================
# FastAPI Test Client
# =============================================================================

def _override_session(test_session: AsyncSession):
    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        try:
            yield test_session
            await test_session.commit()
        except Exception:
            test_session.info.pop(AFTER_COMMIT_KEY, None)
            await test_session.rollback()
            raise
        else:
            await run_after_commit(test_session)

    return override_get_db_session


@pytest_asyncio.fixture
async def client(
    test_session,
    mock_event_client,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with mocked dependencies."""
    app.dependency_overrides[get_db_session] = _override_session(test_session)
    app.dependency_overrides[get_event_client] = lambda: mock_event_client

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client_with_failing_webhook(
    test_session,
    failing_event_client,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client whose event webhook always fails."""
    app.dependency_overrides[get_db_session] = _override_session(test_session)
    app.dependency_overrides[get_event_client] = lambda: failing_event_client

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# =============================================================================
# Request Bodies
# =============================================================================

@pytest.fixture
def finalize_request() -> dict:
    return {
        "final_credit_limit_cents": 10_000_000,
        "down_payment_rate": "30",
        "admin_fee_rate": "10",
        "terms": [30, 60, 90],
    }


async def approve_via_api(client: AsyncClient, finalize_body: dict) -> str:
    """Create an application over HTTP and drive it to finalization; return its id."""
    response = await client.post(
        "/v1/credit-applications",
        json={"requested_amount_cents": finalize_body["final_credit_limit_cents"]},
        headers=IMPORTER_HEADERS,
    )
    assert response.status_code == 201
    app_id = response.json()["application_id"]
    base = f"/v1/credit-applications/{app_id}"

    steps = [
        ("submit", None, IMPORTER_HEADERS),
        ("review", {"status": "under_review"}, REVIEWER_HEADERS),
        ("pre-analysis", {"status": "under_review"}, REVIEWER_HEADERS),
        ("pre-analysis", {"status": "pre_approved"}, REVIEWER_HEADERS),
        ("pre-analysis", {"status": "submitted_to_financial"}, REVIEWER_HEADERS),
        ("financial", {"status": "under_review_financial"}, FINANCIAL_HEADERS),
        (
            "financial",
            {
                "status": "approved",
                "approved_amount_cents": finalize_body["final_credit_limit_cents"],
                "approved_terms": finalize_body["terms"],
            },
            FINANCIAL_HEADERS,
        ),
        ("finalize", finalize_body, ADMIN_HEADERS),
    ]
    for action, body, headers in steps:
        response = await client.post(f"{base}/{action}", json=body, headers=headers)
        assert response.status_code == 200, response.text

    return app_id
