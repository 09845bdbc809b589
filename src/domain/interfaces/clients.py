"""External client interfaces."""

from abc import ABC, abstractmethod

from src.domain.entities import OutboundEvent


class EventWebhookClient(ABC):
    """
    Abstract client for the event webhook.

    Delivers status-change and ledger-change events to notification and
    reporting collaborators.
    """

    @abstractmethod
    async def send_event(self, event: OutboundEvent) -> bool:
        """
        Deliver an event.

        Args:
            event: The event to deliver

        Returns:
            True if the event was delivered successfully

        Note:
            Implementations should handle retries with backoff and never
            raise on delivery failure.
        """
        ...
