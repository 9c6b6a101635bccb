"""Testes do WebhookProcessor (normalização -> mídia -> publicação)."""

from __future__ import annotations

from typing import Any

import pytest

from app.protocols import DownloadedMedia
from app.use_cases.webhook import (
    CONNECTION_STATUS,
    MESSAGE_RECEIVED,
    STATUS_MESSAGE,
    build_event_key,
)
from tests.fakes.fake_media_client import FakeMediaClient
from tests.fakes.webhook_processor import TOPIC, build_webhook_processor
from tests.fakes.whatsapp_payloads import (
    build_tenant,
    waba_status,
    waba_text,
    wapi_connection,
    wapi_message,
    wapi_status,
)
from utils.errors import ChannelNotFoundError, EventPublishError, NormalizerNotFoundError


class _FailingPublisher:
    async def publish(self, topic: str, key: str, value: dict[str, Any]) -> None:
        raise EventPublishError("broker indisponível")


def test_event_key_format() -> None:
    assert build_event_key(MESSAGE_RECEIVED, "ABC", build_tenant()) == (
        "WhatsApp_message-received_ABC_42"
    )


@pytest.mark.asyncio
async def test_text_message_is_published_once() -> None:
    processor, publisher = build_webhook_processor()

    outcome = await processor.handle_webhook(wapi_message({"conversation": "hi"}), build_tenant())

    assert outcome.event_type == MESSAGE_RECEIVED
    assert outcome.message_id == "3EB0ABC123"
    assert outcome.content_type == "text"
    assert len(publisher.events) == 1
    event = publisher.events[0]
    assert event.topic == TOPIC
    assert event.key == "WhatsApp_message-received_3EB0ABC123_42"
    assert event.value["eventType"] == "message-received"
    assert event.value["normalizedMessage"]["content"] == {"type": "text", "text": "hi"}
    assert event.value["normalizedMessage"]["timestamp"] == 1700000000000
    assert event.value["tenant"] == {
        "id": 42,
        "uuid": "3F2504E0-4F89-11D3-9A0C-0305E82C3301",
        "name": "Clínica Exemplo",
    }
    assert event.value["timestamp"].endswith("Z")


@pytest.mark.asyncio
async def test_media_is_ingested_before_publication() -> None:
    url = "https://cdn.example/foto.jpg"
    client = FakeMediaClient(
        downloads={url: DownloadedMedia(content=b"\xff\xd8\xff", content_type="image/jpeg")}
    )
    processor, publisher = build_webhook_processor(media_client=client)
    payload = wapi_message({"imageMessage": {"url": url, "mimetype": "image/jpeg"}})

    outcome = await processor.handle_webhook(payload, build_tenant())

    media = publisher.events[0].value["normalizedMessage"]["content"]["media"]
    assert outcome.media_processed is True
    assert outcome.media_error is None
    assert media["processed"] is True
    assert media["url"] == outcome.media_url
    assert media["originalUrl"] == url
    assert "storageKey" in media


@pytest.mark.asyncio
async def test_media_failure_degrades_but_still_publishes() -> None:
    processor, publisher = build_webhook_processor()
    payload = wapi_message(
        {"imageMessage": {"url": "https://cdn.example/ausente.jpg", "mimetype": "image/jpeg"}}
    )

    outcome = await processor.handle_webhook(payload, build_tenant())

    assert outcome.media_processed is False
    assert outcome.media_error
    assert len(publisher.events) == 1
    media = publisher.events[0].value["normalizedMessage"]["content"]["media"]
    assert media["processed"] is False
    assert "url" not in media


@pytest.mark.asyncio
async def test_waba_status_through_message_endpoint_is_routed_to_status() -> None:
    processor, publisher = build_webhook_processor()

    outcome = await processor.handle_webhook(waba_status("delivered"), build_tenant())

    assert outcome.event_type == STATUS_MESSAGE
    assert outcome.status == "delivery"
    assert publisher.events[0].key == "WhatsApp_status-message_wamid.STATUS1_42"


@pytest.mark.asyncio
async def test_status_and_connection_events() -> None:
    processor, publisher = build_webhook_processor()

    status = await processor.handle_status(wapi_status("READ"), build_tenant())
    connection = await processor.handle_connection(wapi_connection(), build_tenant())

    assert status.status == "read"
    assert connection.event_type == CONNECTION_STATUS
    assert connection.message_id == "1700000200000"
    assert [e.value["eventType"] for e in publisher.events] == [
        "status-message",
        "connection-status",
    ]
    assert publisher.events[1].value["normalizedMessage"]["status"] == "connected"


@pytest.mark.asyncio
async def test_resolution_errors_abort_before_publication() -> None:
    processor, publisher = build_webhook_processor()
    tenant = build_tenant().model_copy(update={"channels": []})

    with pytest.raises(ChannelNotFoundError):
        await processor.handle_webhook(waba_text(), tenant)
    with pytest.raises(NormalizerNotFoundError):
        await processor.handle_webhook({"unknown": True}, build_tenant())
    assert publisher.events == []


@pytest.mark.asyncio
async def test_publish_failure_propagates() -> None:
    processor, _ = build_webhook_processor(publisher=_FailingPublisher())

    with pytest.raises(EventPublishError):
        await processor.handle_webhook(wapi_message({"conversation": "hi"}), build_tenant())
