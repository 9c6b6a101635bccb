"""Modelos de domínio do gateway (mensagem canônica, tenant e canal)."""

from .message import (
    MEDIA_CONTENT_TYPES,
    CanonicalMessage,
    ChatInfo,
    ConnectionStatus,
    ContactContent,
    ContentType,
    Dimensions,
    LocationContent,
    MediaContent,
    MessageContent,
    MessageStatus,
    ProtocolContent,
    ProtocolKey,
    ProviderInfo,
    ReplyContent,
    SenderInfo,
)
from .tenant import Channel, ProviderName, Tenant

__all__ = [
    "MEDIA_CONTENT_TYPES",
    "CanonicalMessage",
    "Channel",
    "ChatInfo",
    "ConnectionStatus",
    "ContactContent",
    "ContentType",
    "Dimensions",
    "LocationContent",
    "MediaContent",
    "MessageContent",
    "MessageStatus",
    "ProtocolContent",
    "ProtocolKey",
    "ProviderInfo",
    "ProviderName",
    "ReplyContent",
    "SenderInfo",
    "Tenant",
]
