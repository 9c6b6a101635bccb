"""Normalizer WhatsApp Business API (Graph API / Cloud API).

Mídia chega como media id; a URL é obtida pelo cliente de mídia do canal
resolvido a partir de `metadata.phone_number_id`. Sem canal não há
lookup de mídia (fail closed).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from api.normalizers._helpers import (
    as_bool_flag,
    as_dict,
    as_int,
    as_str,
    digits_only,
    first_dict,
    now_ms,
    seconds_to_ms,
)
from app.domain import (
    CanonicalMessage,
    ChatInfo,
    ConnectionStatus,
    MediaContent,
    MessageContent,
    MessageStatus,
    ProviderInfo,
    ProviderName,
    SenderInfo,
)
from app.protocols import MediaInfo
from utils.errors import InvalidPayloadError, MediaDownloadError, MediaValidationError

from ._extraction_helpers import (
    UNSUPPORTED_PLACEHOLDER,
    extract_button,
    extract_contacts,
    extract_display_phone,
    extract_interactive,
    extract_location,
    extract_phone_number_id,
    extract_profile_name,
    extract_value,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from app.domain import Channel, Tenant
    from app.protocols import EventType, ProviderMediaClientProtocol

logger = logging.getLogger(__name__)

WABA_OBJECT = "whatsapp_business_account"
MEDIA_MESSAGE_TYPES = ("image", "video", "audio", "document", "sticker")


class WabaNormalizer:
    """Normalizer para webhooks da WhatsApp Business Account."""

    provider = ProviderName.WABA

    def __init__(
        self,
        media_client_factory: Callable[[Channel], ProviderMediaClientProtocol],
    ) -> None:
        self._media_client_factory = media_client_factory

    def can_handle(self, payload: Any) -> bool:
        return isinstance(payload, dict) and payload.get("object") == WABA_OBJECT

    def event_type(self, payload: dict[str, Any]) -> EventType:
        value = extract_value(payload)
        if value.get("messages"):
            return "message"
        if value.get("statuses"):
            return "status"
        return "connection"

    async def normalize(self, payload: dict[str, Any], tenant: Tenant) -> CanonicalMessage:
        """Converte o primeiro item de `messages` em CanonicalMessage.

        Raises:
            InvalidPayloadError: sem mensagem, id ou timestamp.
            ChannelNotFoundError: phone_number_id sem canal ativo no tenant.
        """
        value = extract_value(payload)
        message = first_dict(value.get("messages"))
        if not message:
            raise InvalidPayloadError("Payload WABA sem mensagem")
        message_id = as_str(message.get("id"))
        if not message_id:
            raise InvalidPayloadError("id ausente na mensagem WABA")

        phone_number_id = extract_phone_number_id(value)
        channel = tenant.require_channel(phone_number_id)

        sender_id = as_str(message.get("from")) or ""
        context = as_dict(message.get("context"))
        content = await self._normalize_content(message, channel)

        return CanonicalMessage(
            message_id=message_id,
            message_ref_id=as_str(context.get("id")),
            forwarded=as_bool_flag(context.get("forwarded")),
            instance_id=phone_number_id or "",
            connected_phone=digits_only(extract_display_phone(value)),
            from_me=False,
            is_group=False,
            timestamp=seconds_to_ms(message.get("timestamp")),
            chat=ChatInfo(id=sender_id),
            sender=SenderInfo(id=sender_id, name=extract_profile_name(value)),
            content=content,
            provider=ProviderInfo(name=self.provider.value, original_payload=payload),
        )

    def normalize_status(self, payload: dict[str, Any]) -> MessageStatus:
        value = extract_value(payload)
        status = first_dict(value.get("statuses"))
        message_id = as_str(status.get("id"))
        if not message_id:
            raise InvalidPayloadError("Payload WABA sem status")
        raw_status = (as_str(status.get("status")) or "").lower()
        return MessageStatus(
            message_id=message_id,
            instance_id=extract_phone_number_id(value) or "",
            connected_phone=digits_only(extract_display_phone(value)),
            from_me=True,
            is_group=False,
            timestamp=seconds_to_ms(status.get("timestamp")),
            status="delivery" if raw_status == "delivered" else raw_status,
        )

    def normalize_connection_status(self, payload: dict[str, Any]) -> ConnectionStatus:
        """WABA não tem sessão: toda notificação equivale a conectado."""
        value = extract_value(payload)
        return ConnectionStatus(
            status="connected",
            instance_id=extract_phone_number_id(value) or "",
            event_moment=now_ms(),
        )

    async def _normalize_content(self, message: dict[str, Any], channel: Channel) -> MessageContent:
        message_type = message.get("type")
        if message_type == "text":
            body = as_str(as_dict(message.get("text")).get("body")) or ""
            return MessageContent(type="text", text=body)
        if message_type in MEDIA_MESSAGE_TYPES:
            return await self._media_content(message, str(message_type), channel)
        if message_type == "location":
            return extract_location(message)
        if message_type == "contacts":
            return extract_contacts(message)
        if message_type == "interactive":
            return extract_interactive(message)
        if message_type == "button":
            return extract_button(message)

        logger.info(
            "unsupported_message_type_received",
            extra={"provider": self.provider.value, "message_type": message_type},
        )
        return MessageContent(type="text", text=UNSUPPORTED_PLACEHOLDER)

    async def _media_content(
        self,
        message: dict[str, Any],
        message_type: str,
        channel: Channel,
    ) -> MessageContent:
        block = as_dict(message.get(message_type))
        media_ref = as_str(block.get("id")) or as_str(block.get("link"))
        if not media_ref:
            return MessageContent(type="text", text=UNSUPPORTED_PLACEHOLDER)

        info = await self._lookup_media(media_ref, block, channel)

        content_type = message_type
        if message_type == "sticker":
            animated = as_bool_flag(block.get("animated")) or as_bool_flag(message.get("animated"))
            content_type = "video" if animated else "image"

        media = MediaContent(
            original_url=info.url if info else None,
            mimetype=as_str(block.get("mime_type")) or (info.mime_type if info else ""),
            file_size=(info.file_size if info else None) or as_int(block.get("file_size")) or 0,
            caption=as_str(block.get("caption")),
            filename=as_str(block.get("filename")),
            file_sha256=as_str(block.get("sha256")) or (info.sha256 if info else None) or None,
            processed=False,
        )
        return MessageContent(type=content_type, media=media)

    async def _lookup_media(
        self,
        media_ref: str,
        block: dict[str, Any],
        channel: Channel,
    ) -> MediaInfo | None:
        """Resolve o media id; links diretos dispensam lookup.

        Falhas de lookup degradam a mensagem (mídia sem URL) em vez de
        descartá-la; credenciais ausentes no canal propagam.
        """
        if block.get("link") and not block.get("id"):
            return MediaInfo(url=media_ref, mime_type=as_str(block.get("mime_type")) or "")

        client = self._media_client_factory(channel)
        try:
            return await client.get_media_info(media_ref)
        except (MediaDownloadError, MediaValidationError) as exc:
            logger.warning(
                "waba_media_lookup_degraded",
                extra={
                    "platform_id": channel.platform_id,
                    "error_kind": exc.kind.value,
                    "error_type": type(exc).__name__,
                },
            )
            return None
