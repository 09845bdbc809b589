"""Event publisher - records outbound events and pushes them to the webhook."""

from typing import Any, Dict, List, Optional

import structlog

from src.domain.entities import EventType, OutboundEvent
from src.domain.interfaces import EventRepository, EventWebhookClient

logger = structlog.get_logger(__name__)


class EventPublisher:
    """
    Publishes status and ledger change events.

    `publish` only writes the event to the outbox, in the caller's
    transaction. Delivery to the webhook happens in `deliver_published`,
    which must run after that transaction has committed so that no event
    describes a change that was rolled back and no row lock is held across
    network calls. Undelivered events stay retrievable through
    `redeliver_pending`.
    """

    def __init__(
        self,
        event_repository: EventRepository,
        webhook_client: Optional[EventWebhookClient] = None,
    ):
        self._event_repo = event_repository
        self._webhook_client = webhook_client
        self._published: List[OutboundEvent] = []

    async def publish(self, event_type: EventType, payload: Dict[str, Any]) -> OutboundEvent:
        event = OutboundEvent(event_type=event_type, payload=payload)
        await self._event_repo.save(event)
        self._published.append(event)
        return event

    async def deliver_published(self) -> List[OutboundEvent]:
        """Deliver the events published since the last delivery, once committed."""
        events, self._published = self._published, []
        if self._webhook_client is None:
            return []
        return await self._deliver(events)

    async def redeliver_pending(self, limit: int = 100) -> List[OutboundEvent]:
        """Retry delivery of events that were never sent."""
        if self._webhook_client is None:
            return []

        events = await self._event_repo.get_pending(limit=limit)
        return await self._deliver(events)

    async def _deliver(self, events: List[OutboundEvent]) -> List[OutboundEvent]:
        for event in events:
            if await self._webhook_client.send_event(event):
                event.mark_sent()
            else:
                event.mark_failed()
                logger.warning(
                    "event_delivery_failed",
                    event_id=str(event.id),
                    event_type=event.event_type.value,
                    attempts=event.attempts,
                )

        # Outcomes are written after every send so no transaction spans the calls.
        for event in events:
            await self._event_repo.update(event)
        return events
