"""OutboundEvent entity for status and ledger change notifications."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4


class EventStatus(str, Enum):
    """Delivery status of an outbound event."""

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class EventType(str, Enum):
    """Types of events published to reporting collaborators."""

    STATUS_CHANGED = "status_changed"
    LEDGER_CHANGED = "ledger_changed"


@dataclass
class OutboundEvent:
    """
    An event to be delivered to notification and reporting systems.

    Events are persisted in the same transaction as the change they describe,
    then pushed to the configured webhook.
    """

    event_type: EventType
    payload: dict[str, Any]
    id: UUID = field(default_factory=uuid4)
    status: EventStatus = EventStatus.PENDING
    attempts: int = 0
    last_attempt_at: datetime | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)

    def mark_sent(self) -> None:
        self.status = EventStatus.SENT
        self.attempts += 1
        self.last_attempt_at = datetime.utcnow()

    def mark_failed(self) -> None:
        self.status = EventStatus.FAILED
        self.attempts += 1
        self.last_attempt_at = datetime.utcnow()

    def to_dict(self) -> dict:
        return {
            "event_id": str(self.id),
            "event": self.event_type.value,
            "payload": self.payload,
            "created_at": self.created_at.isoformat() + "Z",
        }
