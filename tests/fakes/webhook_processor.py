"""WebhookProcessor montado com fakes (storage, mídia e publisher em memória)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from api.normalizers import create_dispatcher
from app.infra.crypto import WhatsAppMediaDecryptor
from app.infra.events import MemoryEventPublisher
from app.infra.storage import StorageUploader
from app.services import MediaIngestionPipeline
from app.use_cases.webhook import WebhookProcessor
from config.settings import MediaSettings
from tests.fakes.fake_media_client import FakeMediaClient, FakeMediaClientFactory
from tests.fakes.fake_object_storage import FakeObjectStorageClient

if TYPE_CHECKING:
    from app.protocols import EventPublisherProtocol

TOPIC = "whatsapp-events"


def build_webhook_processor(
    *,
    publisher: EventPublisherProtocol | None = None,
    media_client: FakeMediaClient | None = None,
) -> tuple[WebhookProcessor, MemoryEventPublisher]:
    factory = FakeMediaClientFactory(media_client or FakeMediaClient())
    pipeline = MediaIngestionPipeline(
        uploader=StorageUploader(FakeObjectStorageClient(), region="us-east1"),
        decryptor=WhatsAppMediaDecryptor(),
        media_client_factory=factory,
        settings=MediaSettings(),
    )
    memory = MemoryEventPublisher()
    processor = WebhookProcessor(
        dispatcher=create_dispatcher(factory),
        media_pipeline=pipeline,
        publisher=publisher or memory,
        topic=TOPIC,
    )
    return processor, memory
