"""Adapters do event stream de saída."""

from .memory_publisher import MemoryEventPublisher, PublishedEvent
from .pubsub_publisher import PubSubEventPublisher

__all__ = [
    "MemoryEventPublisher",
    "PubSubEventPublisher",
    "PublishedEvent",
]
