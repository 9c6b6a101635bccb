"""Factories de clientes GCP: Cloud Storage e Pub/Sub.

Clientes são singletons de processo (criados uma vez, reusados por todos
os tenants). Imports das SDKs ficam dentro das factories para não exigir
credenciais em testes.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING

from config.settings import get_base_settings

if TYPE_CHECKING:
    from google.cloud.pubsub_v1 import PublisherClient
    from google.cloud.storage import Client as StorageClient

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def create_storage_client() -> StorageClient:
    """Cria cliente Cloud Storage (singleton).

    Usa GCP_PROJECT se definido; senão o projeto das credenciais padrão.
    """
    from google.cloud import storage

    project = get_base_settings().gcp_project or None
    client = storage.Client(project=project)
    logger.info("storage_client_created", extra={"project": client.project})
    return client


@lru_cache(maxsize=1)
def create_publisher_client() -> PublisherClient:
    """Cria cliente Pub/Sub com ordering key habilitado (singleton)."""
    from google.cloud import pubsub_v1

    client = pubsub_v1.PublisherClient(
        publisher_options=pubsub_v1.types.PublisherOptions(enable_message_ordering=True),
    )
    logger.info("publisher_client_created", extra={"message_ordering": True})
    return client
