"""Testes dos publishers do event stream."""

from __future__ import annotations

import json
from concurrent.futures import Future
from typing import Any
from unittest.mock import MagicMock

import pytest

from app.infra.events import MemoryEventPublisher, PubSubEventPublisher
from utils.errors import ErrorKind, EventPublishError

EVENT = {"eventType": "message-received", "messageId": "M1", "normalizedMessage": {"a": "ç"}}


def _resolved(value: Any) -> Future:
    future: Future = Future()
    future.set_result(value)
    return future


def _failed(exc: BaseException) -> Future:
    future: Future = Future()
    future.set_exception(exc)
    return future


def _pubsub_client(future: Future) -> MagicMock:
    client = MagicMock()
    client.topic_path.side_effect = lambda project, topic: f"projects/{project}/topics/{topic}"
    client.publish.return_value = future
    return client


@pytest.mark.asyncio
async def test_memory_publisher_keeps_copies() -> None:
    publisher = MemoryEventPublisher()
    value = {"eventType": "status-message", "nested": {"status": "read"}}

    await publisher.publish("whatsapp-events", "WhatsApp_status-message_M1_42", value)
    value["nested"]["status"] = "mutated"

    assert len(publisher.events) == 1
    assert publisher.events[0].value["nested"]["status"] == "read"
    publisher.clear()
    assert publisher.events == []


@pytest.mark.asyncio
async def test_pubsub_publisher_sends_key_as_ordering_key_and_attribute() -> None:
    client = _pubsub_client(_resolved("pubsub-msg-1"))
    publisher = PubSubEventPublisher(client, "proj-1")

    await publisher.publish("whatsapp-events", "WhatsApp_message-received_M1_42", EVENT)

    args, kwargs = client.publish.call_args
    assert args[0] == "projects/proj-1/topics/whatsapp-events"
    assert json.loads(args[1].decode("utf-8")) == EVENT
    assert kwargs["ordering_key"] == "WhatsApp_message-received_M1_42"
    assert kwargs["event_key"] == "WhatsApp_message-received_M1_42"
    assert kwargs["event_type"] == "message-received"


@pytest.mark.asyncio
async def test_pubsub_failure_raises_publish_error_and_resumes_key() -> None:
    client = _pubsub_client(_failed(RuntimeError("broker indisponível")))
    publisher = PubSubEventPublisher(client, "proj-1")

    with pytest.raises(EventPublishError) as exc_info:
        await publisher.publish("whatsapp-events", "K1", EVENT)

    assert exc_info.value.kind is ErrorKind.TRANSIENT
    client.resume_publish.assert_called_once_with("projects/proj-1/topics/whatsapp-events", "K1")
