"""PostgreSQL implementation of EventRepository."""

from typing import List
from uuid import UUID

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.entities import EventStatus, EventType, OutboundEvent
from src.domain.exceptions import NotFoundException
from src.domain.interfaces import EventRepository
from src.infrastructure.database.models import OutboundEventModel

from .base import load_enum


class PostgresEventRepository(EventRepository):
    """
    PostgreSQL implementation of the outbound event repository.

    Uses SQLAlchemy async session for database operations.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, event: OutboundEvent) -> OutboundEvent:
        """Persist an event record to the database."""
        model = OutboundEventModel(
            id=str(event.id),
            event_type=event.event_type.value,
            payload=event.payload,
            status=event.status.value,
            attempts=event.attempts,
            last_attempt_at=event.last_attempt_at,
            created_at=event.created_at,
        )

        self._session.add(model)
        await self._session.flush()

        return event

    async def update(self, event: OutboundEvent) -> OutboundEvent:
        """Update delivery tracking of an existing event."""
        stmt = select(OutboundEventModel).where(OutboundEventModel.id == str(event.id))
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            raise NotFoundException("event", str(event.id))

        model.status = event.status.value
        model.attempts = event.attempts
        model.last_attempt_at = event.last_attempt_at

        await self._session.flush()

        return event

    async def get_pending(self, limit: int = 100) -> List[OutboundEvent]:
        """Retrieve events that still need delivery."""
        stmt = (
            select(OutboundEventModel)
            .where(
                or_(
                    OutboundEventModel.status == EventStatus.PENDING.value,
                    OutboundEventModel.status == EventStatus.FAILED.value,
                )
            )
            .order_by(OutboundEventModel.created_at.asc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)

        return [self._to_entity(model) for model in result.scalars().all()]

    def _to_entity(self, model: OutboundEventModel) -> OutboundEvent:
        """Convert database model to domain entity."""
        return OutboundEvent(
            id=UUID(model.id),
            event_type=load_enum(EventType, model.event_type, "event type"),
            payload=model.payload,
            status=load_enum(EventStatus, model.status, "event status"),
            attempts=model.attempts,
            last_attempt_at=model.last_attempt_at,
            created_at=model.created_at,
        )
