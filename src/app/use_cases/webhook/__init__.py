"""Use cases de webhook (normalização -> mídia -> publicação)."""

from .process_webhook import (
    CONNECTION_STATUS,
    MESSAGE_RECEIVED,
    STATUS_MESSAGE,
    WebhookOutcome,
    WebhookProcessor,
    build_event_key,
    build_event_value,
)

__all__ = [
    "CONNECTION_STATUS",
    "MESSAGE_RECEIVED",
    "STATUS_MESSAGE",
    "WebhookOutcome",
    "WebhookProcessor",
    "build_event_key",
    "build_event_value",
]
