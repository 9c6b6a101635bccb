"""Agregador de settings de infraestrutura GCP.

Re-exporta todas as settings de infraestrutura para uso externo.
"""

from __future__ import annotations

from config.settings.infra.gcs import (
    GCSSettings,
    get_gcs_settings,
)
from config.settings.infra.pubsub import (
    PublisherBackend,
    PubSubSettings,
    get_pubsub_settings,
)

__all__ = [
    # GCS
    "GCSSettings",
    # Pub/Sub
    "PubSubSettings",
    "PublisherBackend",
    "get_gcs_settings",
    "get_pubsub_settings",
]
