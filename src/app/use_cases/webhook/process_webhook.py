"""Use case de processamento de webhooks WhatsApp.

Fluxo por chamada (linear, uma mensagem por vez):
1. Dispatcher escolhe o normalizer e classifica o evento
2. message: normaliza -> ingere mídia (degrada) -> thumbnail -> publica
3. status / connection: normaliza -> publica

Erros de validação e resolução abortam antes de qualquer publicação.
Falha de publicação sempre aborta (EventPublishError).
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from app.observability import record_latency, reset_tenant_id, set_tenant_id

if TYPE_CHECKING:
    from app.domain import CanonicalMessage, Tenant
    from app.protocols import EventPublisherProtocol, NormalizerDispatcherProtocol
    from app.services import MediaIngestionPipeline, MediaProcessingOptions

logger = logging.getLogger(__name__)

EVENT_KEY_PREFIX = "WhatsApp"
MESSAGE_RECEIVED = "message-received"
STATUS_MESSAGE = "status-message"
CONNECTION_STATUS = "connection-status"


@dataclass(frozen=True, slots=True)
class WebhookOutcome:
    """Resumo do processamento devolvido ao transporte."""

    event_type: str
    message_id: str | None = None
    content_type: str | None = None
    status: str | None = None
    media_processed: bool = False
    media_url: str | None = None
    url_expires_at: str | None = None
    media_error: str | None = None


def build_event_key(event_type: str, message_id: str, tenant: Tenant) -> str:
    """Chave estável por (evento, mensagem, tenant) para deduplicação downstream."""
    return f"{EVENT_KEY_PREFIX}_{event_type}_{message_id}_{tenant.id}"


def build_event_value(
    event_type: str,
    message_id: str,
    normalized: dict[str, Any],
    tenant: Tenant,
) -> dict[str, Any]:
    return {
        "eventType": event_type,
        "messageId": message_id,
        "normalizedMessage": normalized,
        "tenant": {"id": tenant.id, "uuid": tenant.uuid, "name": tenant.name},
        "timestamp": datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
    }


class WebhookProcessor:
    """Orquestra normalização, ingestão de mídia e publicação."""

    def __init__(
        self,
        *,
        dispatcher: NormalizerDispatcherProtocol,
        media_pipeline: MediaIngestionPipeline,
        publisher: EventPublisherProtocol,
        topic: str,
        media_options: MediaProcessingOptions | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._media_pipeline = media_pipeline
        self._publisher = publisher
        self._topic = topic
        self._media_options = media_options

    async def handle_webhook(self, payload: Any, tenant: Tenant) -> WebhookOutcome:
        """Classifica o payload e segue o caminho do evento.

        Raises:
            NormalizerNotFoundError: formato desconhecido.
            PipelineError: validação/resolução na normalização.
            EventPublishError: publicação falhou.
        """
        event_type = self._dispatcher.event_type(payload)
        if event_type == "status":
            return await self.handle_status(payload, tenant)
        if event_type == "connection":
            return await self.handle_connection(payload, tenant)
        return await self.handle_message(payload, tenant)

    async def handle_message(self, payload: Any, tenant: Tenant) -> WebhookOutcome:
        token = set_tenant_id(tenant.id)
        start = time.perf_counter()
        try:
            message = await self._dispatcher.normalize(payload, tenant)
            logger.info(
                "webhook_message_normalized",
                extra={
                    "message_id": message.message_id,
                    "provider": message.provider.name,
                    "content_type": message.content.type,
                },
            )
            media_error = await self._ingest_media(message, tenant)
            await self._publish(
                MESSAGE_RECEIVED,
                message.message_id,
                message.to_payload(),
                tenant,
            )
        finally:
            reset_tenant_id(token)

        record_latency("webhook_processor", "handle_message", (time.perf_counter() - start) * 1000)
        media = message.content.media
        return WebhookOutcome(
            event_type=MESSAGE_RECEIVED,
            message_id=message.message_id,
            content_type=message.content.type,
            media_processed=bool(media and media.processed),
            media_url=media.url if media else None,
            url_expires_at=media.url_expires_at if media else None,
            media_error=media_error,
        )

    async def handle_status(self, payload: Any, tenant: Tenant) -> WebhookOutcome:
        token = set_tenant_id(tenant.id)
        try:
            status = self._dispatcher.normalize_status(payload)
            await self._publish(STATUS_MESSAGE, status.message_id, status.to_payload(), tenant)
        finally:
            reset_tenant_id(token)
        return WebhookOutcome(
            event_type=STATUS_MESSAGE,
            message_id=status.message_id,
            status=status.status,
        )

    async def handle_connection(self, payload: Any, tenant: Tenant) -> WebhookOutcome:
        token = set_tenant_id(tenant.id)
        try:
            connection = self._dispatcher.normalize_connection_status(payload)
            event_id = str(connection.event_moment)
            await self._publish(CONNECTION_STATUS, event_id, connection.to_payload(), tenant)
        finally:
            reset_tenant_id(token)
        return WebhookOutcome(
            event_type=CONNECTION_STATUS,
            message_id=event_id,
            status=connection.status,
        )

    async def _ingest_media(self, message: CanonicalMessage, tenant: Tenant) -> str | None:
        """Mídia e thumbnail de localização; falhas viram `media_error`."""
        if self._media_pipeline.has_unprocessed_media(message):
            result = await self._media_pipeline.process_message_media(
                message, tenant, self._media_options
            )
            if not result.success:
                return result.error
        if message.content.type == "location":
            result = await self._media_pipeline.process_location_thumbnail(message, tenant)
            if not result.success:
                return result.error
        return None

    async def _publish(
        self,
        event_type: str,
        message_id: str,
        normalized: dict[str, Any],
        tenant: Tenant,
    ) -> None:
        await self._publisher.publish(
            self._topic,
            build_event_key(event_type, message_id, tenant),
            build_event_value(event_type, message_id, normalized, tenant),
        )
        logger.info(
            "webhook_event_published",
            extra={"event_type": event_type, "message_id": message_id},
        )

