"""HTTP implementation of EventWebhookClient."""

import asyncio
from typing import Any, Dict

import httpx
import structlog

from src.core.config import settings
from src.core.metrics import (
    track_webhook_latency,
    record_webhook_retry,
    record_webhook_success,
    record_webhook_failure,
)
from src.domain.entities import OutboundEvent
from src.domain.interfaces import EventWebhookClient

logger = structlog.get_logger(__name__)


class HttpEventWebhookClient(EventWebhookClient):
    """
    HTTP client for the notification/reporting webhook.

    Posts status and ledger change events with retry logic and
    exponential backoff.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
    ):
        self._base_url = base_url or settings.event_webhook_url
        self._timeout = timeout or settings.event_webhook_timeout
        self._max_retries = max_retries or settings.event_webhook_max_retries

    async def send_event(self, event: OutboundEvent) -> bool:
        return await self._send_webhook(event.to_dict(), event.event_type.value)

    async def _send_webhook(
        self,
        payload: Dict[str, Any],
        event_type: str,
    ) -> bool:
        """
        Send a webhook with retry logic.

        Uses exponential backoff: 0.1s, 0.2s, 0.4s, 0.8s, 1.6s
        """
        url = self._base_url

        for attempt in range(self._max_retries):
            try:
                with track_webhook_latency():
                    async with httpx.AsyncClient(timeout=self._timeout) as client:
                        response = await client.post(
                            url,
                            json=payload,
                            headers={"Content-Type": "application/json"},
                        )

                        if response.status_code < 400:
                            logger.info(
                                "event_webhook_sent",
                                event_type=event_type,
                                status_code=response.status_code,
                            )
                            record_webhook_success()
                            return True

                        logger.warning(
                            "event_webhook_rejected",
                            event_type=event_type,
                            status_code=response.status_code,
                            attempt=attempt + 1,
                            response=response.text[:200],
                        )

            except httpx.TimeoutException:
                logger.warning(
                    "event_webhook_timeout",
                    event_type=event_type,
                    attempt=attempt + 1,
                )
            except httpx.HTTPError as e:
                logger.error(
                    "event_webhook_error",
                    event_type=event_type,
                    attempt=attempt + 1,
                    error=str(e),
                )

            if attempt < self._max_retries - 1:
                record_webhook_retry()
                delay = 2 ** attempt * 0.1
                await asyncio.sleep(delay)

        logger.error(
            "event_webhook_exhausted_retries",
            event_type=event_type,
            max_retries=self._max_retries,
        )
        record_webhook_failure()
        return False
