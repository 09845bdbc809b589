"""External API client implementations."""

from .event_client import HttpEventWebhookClient

__all__ = [
    "HttpEventWebhookClient",
]
