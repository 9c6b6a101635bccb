"""Publisher do event stream sobre Google Cloud Pub/Sub.

A chave do evento vai no atributo `event_key` e como ordering key, para
que consumidores detectem entregas duplicadas e mantenham ordem por chave.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import TYPE_CHECKING, Any

from app.observability import record_publish
from utils.errors import EventPublishError

if TYPE_CHECKING:
    from google.cloud.pubsub_v1 import PublisherClient

logger = logging.getLogger(__name__)


class PubSubEventPublisher:
    """Publica cada evento e aguarda a confirmação do broker."""

    def __init__(
        self,
        client: PublisherClient,
        project_id: str,
        *,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._client = client
        self._project_id = project_id
        self._timeout_seconds = timeout_seconds

    def _topic_path(self, topic: str) -> str:
        return self._client.topic_path(self._project_id, topic)

    async def publish(self, topic: str, key: str, value: dict[str, Any]) -> None:
        """Publica e aguarda o message id.

        Raises:
            EventPublishError: publish rejeitado, timeout ou erro do SDK.
        """
        topic_path = self._topic_path(topic)
        data = json.dumps(value, ensure_ascii=False, default=str).encode("utf-8")
        event_type = str(value.get("eventType", ""))
        start = time.perf_counter()
        try:
            future = self._client.publish(
                topic_path,
                data,
                ordering_key=key,
                event_key=key,
                event_type=event_type,
            )
            message_id = await asyncio.to_thread(future.result, self._timeout_seconds)
        except Exception as exc:
            # Ordering key fica pausada após falha até resume explícito
            self._client.resume_publish(topic_path, key)
            record_publish(topic, event_type, "failure")
            logger.error(
                "event_publish_failed",
                extra={
                    "topic": topic,
                    "event_type": event_type,
                    "error_type": type(exc).__name__,
                },
            )
            raise EventPublishError(
                f"Falha ao publicar evento em {topic}: {exc}",
                cause=exc,
            ) from exc

        elapsed_ms = (time.perf_counter() - start) * 1000
        record_publish(topic, event_type, "success", latency_ms=elapsed_ms)
        logger.info(
            "event_published",
            extra={"topic": topic, "event_type": event_type, "pubsub_message_id": message_id},
        )
