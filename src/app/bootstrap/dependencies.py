"""Factories de componentes: conecta implementações concretas aos protocolos.

Referência: app/bootstrap é o único ponto onde app/ conhece api/.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from api.normalizers import NormalizerDispatcher, create_dispatcher
from app.bootstrap.clients import create_publisher_client, create_storage_client
from app.infra.crypto import WhatsAppMediaDecryptor
from app.infra.events import MemoryEventPublisher, PubSubEventPublisher
from app.infra.storage import (
    GCSStorageClient,
    LocalFileStore,
    ProfilePictureStore,
    StorageUploader,
    ThumbnailStore,
)
from app.infra.whatsapp import create_media_client
from app.services import MediaIngestionPipeline, MediaProcessingOptions
from app.use_cases.webhook import WebhookProcessor
from config.settings import (
    get_base_settings,
    get_gcs_settings,
    get_media_settings,
    get_pubsub_settings,
)

if TYPE_CHECKING:
    from app.protocols import EventPublisherProtocol, ObjectStorageClientProtocol

logger = logging.getLogger(__name__)


def create_object_storage_client() -> ObjectStorageClientProtocol:
    return GCSStorageClient(
        create_storage_client(),
        timeout_seconds=get_gcs_settings().timeout_seconds,
    )


def create_storage_uploader(
    storage_client: ObjectStorageClientProtocol | None = None,
) -> StorageUploader:
    """Uploader com bucket por tenant conforme GCS_*."""
    settings = get_gcs_settings()
    return StorageUploader(
        storage_client or create_object_storage_client(),
        region=settings.location,
        storage_class=settings.storage_class,
        kms_key_name=settings.kms_key_name or None,
        bucket_prefix=settings.bucket_prefix,
    )


def create_media_pipeline(uploader: StorageUploader | None = None) -> MediaIngestionPipeline:
    """Pipeline de mídia com stores locais em UPLOAD_PATH."""
    local_store = LocalFileStore(get_base_settings().upload_path)
    return MediaIngestionPipeline(
        uploader=uploader or create_storage_uploader(),
        decryptor=WhatsAppMediaDecryptor(),
        media_client_factory=create_media_client,
        thumbnail_store=ThumbnailStore(local_store),
        profile_picture_store=ProfilePictureStore(local_store),
        settings=get_media_settings(),
    )


def create_event_publisher() -> EventPublisherProtocol:
    """Publisher conforme PUBSUB_BACKEND.

    - "memory": MemoryEventPublisher (dev/testes)
    - "pubsub": PubSubEventPublisher (staging/production)
    """
    settings = get_pubsub_settings()
    if settings.backend == "pubsub":
        logger.info("event_publisher_created", extra={"backend": "pubsub"})
        return PubSubEventPublisher(
            create_publisher_client(),
            get_base_settings().gcp_project,
            timeout_seconds=settings.publish_timeout_seconds,
        )

    logger.info("event_publisher_created", extra={"backend": "memory"})
    return MemoryEventPublisher()


def create_normalizer_dispatcher() -> NormalizerDispatcher:
    return create_dispatcher(create_media_client)


def create_webhook_processor(
    *,
    publisher: EventPublisherProtocol | None = None,
    media_pipeline: MediaIngestionPipeline | None = None,
    dispatcher: NormalizerDispatcher | None = None,
) -> WebhookProcessor:
    """Monta o WebhookProcessor; argumentos permitem substituir adapters."""
    return WebhookProcessor(
        dispatcher=dispatcher or create_normalizer_dispatcher(),
        media_pipeline=media_pipeline or create_media_pipeline(),
        publisher=publisher or create_event_publisher(),
        topic=get_pubsub_settings().topic,
        media_options=MediaProcessingOptions.from_settings(get_media_settings()),
    )
