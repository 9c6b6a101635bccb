"""Clientes de mídia dos providers WhatsApp."""

from .media_clients import (
    MEDIA_CLIENT_BUILDERS,
    WabaMediaClient,
    WApiMediaClient,
    create_media_client,
)

__all__ = [
    "MEDIA_CLIENT_BUILDERS",
    "WApiMediaClient",
    "WabaMediaClient",
    "create_media_client",
]
