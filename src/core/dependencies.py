"""Dependency injection for FastAPI."""

from typing import Annotated, Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.domain.entities import Actor, ActorRole
from src.domain.exceptions import ActorNotAuthenticatedException, ActorNotAuthorizedException
from src.infrastructure.database import after_commit, get_db_session
from src.infrastructure.repositories import (
    PostgresCreditApplicationRepository,
    PostgresCreditLedgerRepository,
    PostgresEventRepository,
    PostgresImportRepository,
    PostgresPaymentScheduleRepository,
)
from src.infrastructure.clients import HttpEventWebhookClient
from src.application.services import (
    CreditApplicationService,
    CreditLedgerService,
    EventPublisher,
    ImportService,
    PaymentScheduleService,
)


# Actor supplied by the authentication layer
async def get_actor(
    x_actor_id: Annotated[Optional[str], Header()] = None,
    x_actor_role: Annotated[Optional[str], Header()] = None,
) -> Actor:
    """Build the acting user from the X-Actor-Id and X-Actor-Role headers."""
    if not x_actor_id or not x_actor_id.strip():
        raise ActorNotAuthenticatedException("X-Actor-Id header is required")
    try:
        role = ActorRole((x_actor_role or "").strip().lower())
    except ValueError:
        raise ActorNotAuthenticatedException(f"Unknown actor role: {x_actor_role!r}")
    return Actor(user_id=x_actor_id.strip(), role=role)


# Repository dependencies
async def get_application_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> PostgresCreditApplicationRepository:
    """Get a CreditApplicationRepository instance."""
    return PostgresCreditApplicationRepository(session)


async def get_ledger_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> PostgresCreditLedgerRepository:
    """Get a CreditLedgerRepository instance."""
    return PostgresCreditLedgerRepository(session)


async def get_import_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> PostgresImportRepository:
    """Get an ImportRepository instance."""
    return PostgresImportRepository(session)


async def get_payment_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> PostgresPaymentScheduleRepository:
    """Get a PaymentScheduleRepository instance."""
    return PostgresPaymentScheduleRepository(session)


async def get_event_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> PostgresEventRepository:
    """Get an EventRepository instance."""
    return PostgresEventRepository(session)


# External client dependencies
def get_event_client() -> Optional[HttpEventWebhookClient]:
    """Get an EventWebhookClient instance, or None when delivery is disabled."""
    if not settings.event_webhook_enabled:
        return None
    return HttpEventWebhookClient()


# Service dependencies
async def get_event_publisher(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    event_repo: Annotated[PostgresEventRepository, Depends(get_event_repository)],
    event_client: Annotated[Optional[HttpEventWebhookClient], Depends(get_event_client)],
) -> EventPublisher:
    """Get an EventPublisher whose events are delivered once the request commits."""
    publisher = EventPublisher(event_repository=event_repo, webhook_client=event_client)
    after_commit(session, publisher.deliver_published)
    return publisher


async def get_credit_application_service(
    application_repo: Annotated[
        PostgresCreditApplicationRepository, Depends(get_application_repository)
    ],
    publisher: Annotated[EventPublisher, Depends(get_event_publisher)],
) -> CreditApplicationService:
    """Get a CreditApplicationService instance."""
    return CreditApplicationService(
        application_repository=application_repo,
        event_publisher=publisher,
    )


async def get_ledger_service(
    ledger_repo: Annotated[PostgresCreditLedgerRepository, Depends(get_ledger_repository)],
    publisher: Annotated[EventPublisher, Depends(get_event_publisher)],
) -> CreditLedgerService:
    """Get a CreditLedgerService instance."""
    return CreditLedgerService(ledger_repository=ledger_repo, event_publisher=publisher)


async def get_payment_service(
    payment_repo: Annotated[PostgresPaymentScheduleRepository, Depends(get_payment_repository)],
    import_repo: Annotated[PostgresImportRepository, Depends(get_import_repository)],
) -> PaymentScheduleService:
    """Get a PaymentScheduleService instance."""
    return PaymentScheduleService(payment_repository=payment_repo, import_repository=import_repo)


async def get_import_service(
    application_repo: Annotated[
        PostgresCreditApplicationRepository, Depends(get_application_repository)
    ],
    import_repo: Annotated[PostgresImportRepository, Depends(get_import_repository)],
    ledger_service: Annotated[CreditLedgerService, Depends(get_ledger_service)],
    payment_service: Annotated[PaymentScheduleService, Depends(get_payment_service)],
) -> ImportService:
    """Get an ImportService instance with all dependencies."""
    return ImportService(
        application_repository=application_repo,
        import_repository=import_repo,
        ledger_service=ledger_service,
        payment_service=payment_service,
    )


def require_roles(*roles: ActorRole):
    """Dependency factory restricting an endpoint to the given actor roles."""

    async def dependency(actor: Annotated[Actor, Depends(get_actor)]) -> Actor:
        if actor.role not in roles:
            raise ActorNotAuthorizedException(actor.role.value, "perform this operation")
        return actor

    return dependency
