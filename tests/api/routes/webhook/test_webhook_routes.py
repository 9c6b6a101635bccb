"""Testes dos endpoints de webhook."""

from __future__ import annotations

import json
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.routes import create_api_router
from api.routes.webhook import get_processor, parse_tenant_header
from api.routes.webhook import router as webhook_module
from api.routes.webhook.router import TenantHeaderError
from config.settings import BaseSettings
from tests.fakes.webhook_processor import build_webhook_processor
from tests.fakes.whatsapp_payloads import (
    TENANT_UUID,
    waba_status,
    waba_text,
    wapi_connection,
    wapi_message,
    wapi_status,
)
from utils.errors import EventPublishError

TENANT_HEADER = json.dumps(
    {
        "id": 42,
        "uuid": TENANT_UUID,
        "name": "Clínica Exemplo",
        "channels": [
            {"identify": "I1", "provider": {"name": "wapi"}, "config": {"token": "t"}},
            {"platformId": 123456123, "provider": "waba", "config": {"access_token": "g"}},
        ],
    }
)


class _FailingPublisher:
    async def publish(self, topic: str, key: str, value: dict[str, Any]) -> None:
        raise EventPublishError("broker indisponível")


def _client(publisher: Any = None) -> tuple[TestClient, Any]:
    processor, memory = build_webhook_processor(publisher=publisher)
    app = FastAPI()
    app.include_router(create_api_router())
    app.dependency_overrides[get_processor] = lambda: processor
    return TestClient(app), memory


def _post(client: TestClient, path: str, payload: Any, **headers: str) -> Any:
    return client.post(
        path,
        content=json.dumps(payload),
        headers={"content-type": "application/json", "x-tenant-data": TENANT_HEADER, **headers},
    )


def test_message_is_normalized_and_published() -> None:
    client, memory = _client()

    response = _post(client, "/webhook/message", wapi_message({"conversation": "hi"}))

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "OK"
    assert body["eventType"] == "message-received"
    assert body["messageId"] == "3EB0ABC123"
    assert body["type"] == "text"
    assert body["mediaProcessed"] is False
    assert body["tenantBucket"] == TENANT_UUID
    assert "mediaUrl" not in body
    assert len(memory.events) == 1


def test_message_without_message_id_is_published_with_derived_id() -> None:
    client, memory = _client()
    payload = wapi_message({"conversation": "hi"})
    del payload["messageId"]

    first = _post(client, "/webhook/message", payload)
    second = _post(client, "/webhook/message", payload)

    assert first.status_code == 200
    assert first.json()["messageId"] == second.json()["messageId"]
    assert [event.key for event in memory.events] == [
        f"WhatsApp_message-received_{first.json()['messageId']}_42"
    ] * 2


def test_waba_message_resolves_channel_from_header() -> None:
    client, memory = _client()

    response = _post(client, "/webhook/message", waba_text())

    assert response.status_code == 200
    assert memory.events[0].value["normalizedMessage"]["provider"]["name"] == "waba"


def test_waba_status_posted_to_message_endpoint() -> None:
    client, _ = _client()

    response = _post(client, "/webhook/message", waba_status())

    assert response.status_code == 200
    assert response.json()["eventType"] == "status-message"
    assert response.json()["type"] == "delivery"


def test_status_and_connection_endpoints() -> None:
    client, memory = _client()

    status_response = _post(client, "/webhook/message-status", wapi_status())
    connection_response = _post(client, "/webhook/connection-status", wapi_connection())

    assert status_response.status_code == 200
    assert status_response.json()["type"] == "read"
    assert connection_response.status_code == 200
    assert connection_response.json()["type"] == "connected"
    assert [e.value["eventType"] for e in memory.events] == [
        "status-message",
        "connection-status",
    ]


def test_missing_tenant_header_is_unauthorized() -> None:
    client, memory = _client()

    response = client.post("/webhook/message", json=wapi_message({"conversation": "hi"}))

    assert response.status_code == 401
    assert response.json()["status"] == "ERROR"
    assert memory.events == []


@pytest.mark.parametrize(
    ("payload", "expected_status"),
    [
        ({"foo": "bar"}, 400),
        (wapi_message({"pollCreationMessage": {}}), 400),
        (wapi_message({"conversation": "hi"}, moment="nan"), 400),
        (wapi_message({"conversation": "hi"}, moment="inf"), 400),
    ],
)
def test_invalid_payloads_are_rejected(payload: Any, expected_status: int) -> None:
    client, memory = _client()

    response = _post(client, "/webhook/message", payload)

    assert response.status_code == expected_status
    assert response.json()["status"] == "ERROR"
    assert memory.events == []


def test_malformed_json_body_is_bad_request() -> None:
    client, _ = _client()

    response = client.post(
        "/webhook/message",
        content=b"{not json",
        headers={"content-type": "application/json", "x-tenant-data": TENANT_HEADER},
    )

    assert response.status_code == 400


def test_publish_failure_is_server_error() -> None:
    client, _ = _client(publisher=_FailingPublisher())

    response = _post(client, "/webhook/message", wapi_message({"conversation": "hi"}))

    assert response.status_code == 500
    assert response.json() == {"status": "ERROR", "message": "broker indisponível"}


def test_parse_tenant_header_errors() -> None:
    with pytest.raises(TenantHeaderError) as missing:
        parse_tenant_header(None)
    with pytest.raises(TenantHeaderError) as malformed:
        parse_tenant_header("{json quebrado")
    with pytest.raises(TenantHeaderError) as invalid:
        parse_tenant_header(json.dumps({"name": "sem id"}))

    assert missing.value.status_code == 401
    assert malformed.value.status_code == 400
    assert invalid.value.status_code == 400


def test_parse_tenant_header_accepts_channel_aliases() -> None:
    tenant = parse_tenant_header(TENANT_HEADER)

    assert [c.platform_id for c in tenant.channels] == ["I1", "123456123"]
    assert tenant.find_channel("123456123") is not None


@pytest.mark.parametrize(
    ("configured", "query", "expected_status"),
    [
        ("", "hub.mode=subscribe&hub.challenge=1158201444", 200),
        ("tok", "hub.mode=subscribe&hub.verify_token=tok&hub.challenge=1158201444", 200),
        ("tok", "hub.mode=subscribe&hub.verify_token=outro&hub.challenge=1", 403),
        ("", "hub.mode=unsubscribe&hub.challenge=1", 403),
    ],
)
def test_hub_challenge(
    monkeypatch: pytest.MonkeyPatch,
    configured: str,
    query: str,
    expected_status: int,
) -> None:
    settings = BaseSettings(webhook_verify_token=configured)
    monkeypatch.setattr(webhook_module, "get_base_settings", lambda: settings)
    client, _ = _client()

    response = client.get(f"/webhook/message?{query}")

    assert response.status_code == expected_status
    if expected_status == 200:
        assert response.text == "1158201444"
