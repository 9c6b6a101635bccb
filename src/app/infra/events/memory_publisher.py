"""Publisher em memória para desenvolvimento e testes.

NÃO usar em produção: eventos ficam apenas no processo.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any

from app.observability import record_publish

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PublishedEvent:
    topic: str
    key: str
    value: dict[str, Any]


class MemoryEventPublisher:
    """Acumula eventos publicados em lista."""

    def __init__(self) -> None:
        self.events: list[PublishedEvent] = []

    async def publish(self, topic: str, key: str, value: dict[str, Any]) -> None:
        self.events.append(PublishedEvent(topic=topic, key=key, value=copy.deepcopy(value)))
        event_type = str(value.get("eventType", ""))
        record_publish(topic, event_type, "success")
        logger.debug("event_published_memory", extra={"topic": topic, "event_type": event_type})

    def clear(self) -> None:
        self.events.clear()
