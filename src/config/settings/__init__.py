"""Agregador de settings do wa-gateway.

Re-exporta todas as settings e funções de cada módulo.
Organização por domínio para isolamento de mudanças.
"""

from __future__ import annotations

# Base settings
from config.settings.base import (
    BaseSettings,
    Environment,
    get_base_settings,
)

# Infrastructure settings
from config.settings.infra import (
    GCSSettings,
    PublisherBackend,
    PubSubSettings,
    get_gcs_settings,
    get_pubsub_settings,
)

# Media pipeline
from config.settings.media import (
    MAX_BATCH_SIZE,
    MediaSettings,
    get_media_settings,
)

# Provider-specific settings
from config.settings.whatsapp import (
    GRAPH_API_BASE_URL,
    GRAPH_API_VERSION,
    WhatsAppSettings,
    get_whatsapp_settings,
)

__all__ = [
    # Constants
    "GRAPH_API_BASE_URL",
    "GRAPH_API_VERSION",
    "MAX_BATCH_SIZE",
    # Base
    "BaseSettings",
    "Environment",
    # Infrastructure
    "GCSSettings",
    # Media
    "MediaSettings",
    "PubSubSettings",
    "PublisherBackend",
    # Providers
    "WhatsAppSettings",
    "get_base_settings",
    "get_gcs_settings",
    "get_media_settings",
    "get_pubsub_settings",
    "get_whatsapp_settings",
]
