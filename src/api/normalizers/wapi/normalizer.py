"""Normalizer W-API (instâncias WhatsApp não oficiais, formato Baileys).

Converte webhookReceived, webhookStatus e webhookConnected/Disconnected
para os modelos canônicos. Não faz I/O: URLs e chaves de mídia já
chegam no payload.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from api.normalizers._helpers import (
    as_bool_flag,
    as_dict,
    as_str,
    derive_message_id,
    digits_only,
    now_ms,
    seconds_to_ms,
)
from app.domain import (
    CanonicalMessage,
    ChatInfo,
    ConnectionStatus,
    MessageContent,
    MessageStatus,
    ProviderInfo,
    ProviderName,
    SenderInfo,
)
from utils.errors import InvalidPayloadError, UnsupportedMessageTypeError

from ._content_helpers import (
    MEDIA_BLOCKS,
    build_contact,
    build_contacts,
    build_location,
    build_media,
    build_protocol,
    build_reply,
    build_sticker,
    document_block,
    selected_reply_text,
    unwrap_content,
)

if TYPE_CHECKING:
    from app.domain import Tenant
    from app.protocols import EventType

logger = logging.getLogger(__name__)

MESSAGE_EVENT = "webhookReceived"
STATUS_EVENT = "webhookStatus"
CONNECTED_EVENT = "webhookConnected"
DISCONNECTED_EVENT = "webhookDisconnected"

REACTION_PLACEHOLDER = "[Reação]"


class WApiNormalizer:
    """Normalizer para payloads W-API."""

    provider = ProviderName.WAPI

    def can_handle(self, payload: Any) -> bool:
        if not isinstance(payload, dict) or not payload.get("instanceId"):
            return False
        event = payload.get("event")
        if event == MESSAGE_EVENT:
            return isinstance(payload.get("msgContent"), dict)
        if event == STATUS_EVENT:
            return bool(payload.get("status"))
        return event in (CONNECTED_EVENT, DISCONNECTED_EVENT)

    def event_type(self, payload: dict[str, Any]) -> EventType:
        event = payload.get("event")
        if event == STATUS_EVENT:
            return "status"
        if event in (CONNECTED_EVENT, DISCONNECTED_EVENT):
            return "connection"
        return "message"

    async def normalize(self, payload: dict[str, Any], tenant: Tenant) -> CanonicalMessage:
        """Converte webhookReceived em CanonicalMessage.

        Raises:
            InvalidPayloadError: chat ou timestamp ausentes.
            UnsupportedMessageTypeError: msgContent sem chave reconhecida.
        """
        chat = as_dict(payload.get("chat"))
        sender = as_dict(payload.get("sender"))
        chat_id = as_str(chat.get("id")) or as_str(sender.get("id"))
        if not chat_id:
            raise InvalidPayloadError("chat.id ausente no payload W-API")

        message_id = as_str(payload.get("messageId")) or derive_message_id(
            payload.get("instanceId"),
            chat_id,
            payload.get("moment"),
            payload.get("msgContent"),
        )

        msg_content = unwrap_content(as_dict(payload.get("msgContent")))
        content = normalize_content(msg_content)
        context_info = _find_context_info(msg_content)

        return CanonicalMessage(
            message_id=message_id,
            message_ref_id=as_str(context_info.get("stanzaId")),
            forwarded=as_bool_flag(context_info.get("isForwarded")),
            instance_id=as_str(payload.get("instanceId")) or "",
            connected_phone=digits_only(payload.get("connectedPhone")),
            from_me=as_bool_flag(payload.get("fromMe")),
            is_group=as_bool_flag(payload.get("isGroup")),
            timestamp=seconds_to_ms(payload.get("moment"), "moment"),
            chat=ChatInfo(id=chat_id, profile_picture=as_str(chat.get("profilePicture"))),
            sender=SenderInfo(
                id=as_str(sender.get("id")) or chat_id,
                name=as_str(sender.get("pushName")),
                profile_picture=as_str(sender.get("profilePicture")),
                verified_biz_name=as_str(sender.get("verifiedBizName")),
            ),
            content=content,
            provider=ProviderInfo(name=self.provider.value, original_payload=payload),
        )

    def normalize_status(self, payload: dict[str, Any]) -> MessageStatus:
        message_id = as_str(payload.get("messageId"))
        if not message_id:
            raise InvalidPayloadError("messageId ausente no status W-API")
        return MessageStatus(
            message_id=message_id,
            instance_id=as_str(payload.get("instanceId")) or "",
            connected_phone=digits_only(payload.get("connectedPhone")),
            from_me=as_bool_flag(payload.get("fromMe")),
            is_group=as_bool_flag(payload.get("isGroup")),
            timestamp=seconds_to_ms(payload.get("moment"), "moment"),
            status=(as_str(payload.get("status")) or "").lower(),
        )

    def normalize_connection_status(self, payload: dict[str, Any]) -> ConnectionStatus:
        status = "disconnected" if payload.get("event") == DISCONNECTED_EVENT else "connected"
        moment = payload.get("moment")
        return ConnectionStatus(
            status=status,
            instance_id=as_str(payload.get("instanceId")) or "",
            event_moment=seconds_to_ms(moment, "moment") if moment is not None else now_ms(),
        )


def normalize_content(msg_content: dict[str, Any]) -> MessageContent:
    """Mapeia o msgContent para a união de conteúdo canônica.

    Raises:
        UnsupportedMessageTypeError: nenhuma chave conhecida.
    """
    if msg_content.get("conversation"):
        return MessageContent(type="text", text=as_str(msg_content["conversation"]))

    extended = as_dict(msg_content.get("extendedTextMessage"))
    if extended:
        return MessageContent(
            type="text",
            text=as_str(extended.get("text")) or "",
            reply=build_reply(as_dict(extended.get("contextInfo"))),
        )

    for key, media_type in MEDIA_BLOCKS:
        block = as_dict(msg_content.get(key))
        if block:
            return MessageContent(
                type=media_type,
                media=build_media(block, media_type),
                reply=build_reply(as_dict(block.get("contextInfo"))),
            )

    doc = as_dict(msg_content.get("extendedDocumentMessage")) or document_block(msg_content)
    if doc:
        return MessageContent(
            type="document",
            media=build_media(doc, "document"),
            reply=build_reply(as_dict(doc.get("contextInfo"))),
        )

    sticker = as_dict(msg_content.get("stickerMessage"))
    if sticker:
        return build_sticker(sticker)

    location = build_location(msg_content)
    if location is not None:
        return location

    contact = as_dict(msg_content.get("contactMessage"))
    if contact:
        return MessageContent(type="contact", contact=build_contact(contact))

    contacts = as_dict(msg_content.get("contactsArrayMessage"))
    if contacts:
        return build_contacts(contacts)

    protocol = as_dict(msg_content.get("protocolMessage"))
    if protocol:
        return build_protocol(protocol)

    selected = selected_reply_text(msg_content)
    if selected is not None:
        return MessageContent(type="text", text=selected)

    reaction = as_dict(msg_content.get("reactionMessage"))
    if reaction:
        emoji = as_str(reaction.get("text")) or ""
        text = f"{REACTION_PLACEHOLDER} {emoji}".strip()
        return MessageContent(type="text", text=text)

    logger.info(
        "unsupported_message_type_received",
        extra={"provider": ProviderName.WAPI.value, "content_keys": sorted(msg_content)[:10]},
    )
    raise UnsupportedMessageTypeError(
        f"Tipo de mensagem W-API não suportado: {sorted(msg_content)}"
    )


def _find_context_info(msg_content: dict[str, Any]) -> dict[str, Any]:
    """contextInfo do primeiro bloco que o carrega."""
    for value in msg_content.values():
        context_info = as_dict(as_dict(value).get("contextInfo"))
        if context_info:
            return context_info
    return {}
