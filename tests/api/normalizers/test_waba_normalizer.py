"""Testes do normalizer WhatsApp Business API."""

from __future__ import annotations

import pytest

from api.normalizers import WabaNormalizer
from api.normalizers.waba._extraction_helpers import INTERACTIVE_PLACEHOLDER
from app.domain import Channel, ProviderName
from app.protocols import MediaInfo
from tests.fakes.fake_media_client import FakeMediaClient, FakeMediaClientFactory
from tests.fakes.whatsapp_payloads import (
    build_tenant,
    waba_envelope,
    waba_message,
    waba_status,
    waba_text,
)
from utils.errors import ChannelNotFoundError, ErrorKind, InvalidPayloadError

GRAPH_MEDIA_URL = "https://lookaside.fbsbx.com/whatsapp_business/attachments/?mid=1"


def _normalizer(
    client: FakeMediaClient | None = None,
) -> tuple[WabaNormalizer, FakeMediaClientFactory]:
    factory = FakeMediaClientFactory(client or FakeMediaClient())
    return WabaNormalizer(factory), factory


@pytest.mark.asyncio
async def test_normalize_text_message() -> None:
    normalizer, _ = _normalizer()

    message = await normalizer.normalize(waba_text(), build_tenant())

    assert message.content.type == "text"
    assert message.content.text == "Hello this is an answer"
    assert message.timestamp == 1603059201000
    assert message.message_id == "ABGGFlA5Fpa"
    assert message.chat.id == "16315551181"
    assert message.sender.id == "16315551181"
    assert message.sender.name == "Kerry Fisher"
    assert message.instance_id == "123456123"
    assert message.connected_phone == "16505551111"
    assert message.provider.name == "waba"
    assert message.from_me is False
    assert message.is_group is False


@pytest.mark.asyncio
async def test_unknown_phone_number_id_fails_closed() -> None:
    normalizer, factory = _normalizer()
    tenant = build_tenant(
        Channel(platform_id="999", provider=ProviderName.WABA, config={"access_token": "t"})
    )

    with pytest.raises(ChannelNotFoundError) as exc_info:
        await normalizer.normalize(waba_text(), tenant)
    assert exc_info.value.kind is ErrorKind.RESOLUTION
    assert factory.channels == []


@pytest.mark.asyncio
async def test_inactive_channel_is_not_resolved() -> None:
    normalizer, _ = _normalizer()
    tenant = build_tenant(
        Channel(platform_id="123456123", provider=ProviderName.WABA, active=False)
    )

    with pytest.raises(ChannelNotFoundError):
        await normalizer.normalize(waba_text(), tenant)


@pytest.mark.asyncio
async def test_media_id_is_resolved_through_channel_client() -> None:
    client = FakeMediaClient(
        media_info={
            "MEDIA-1": MediaInfo(
                url=GRAPH_MEDIA_URL,
                mime_type="image/jpeg",
                sha256="abc123",
                file_size=4096,
            )
        }
    )
    normalizer, factory = _normalizer(client)
    payload = waba_message(
        {"type": "image", "image": {"id": "MEDIA-1", "mime_type": "image/jpeg", "caption": "rx"}}
    )

    message = await normalizer.normalize(payload, build_tenant())

    media = message.content.media
    assert message.content.type == "image"
    assert media is not None
    assert media.original_url == GRAPH_MEDIA_URL
    assert media.file_size == 4096
    assert media.caption == "rx"
    assert media.file_sha256 == "abc123"
    assert media.processed is False
    assert media.is_encrypted is False
    assert client.info_calls == ["MEDIA-1"]
    assert factory.channels == ["123456123"]


@pytest.mark.asyncio
async def test_failed_media_lookup_degrades_to_media_without_url() -> None:
    normalizer, _ = _normalizer(FakeMediaClient())
    payload = waba_message(
        {"type": "document", "document": {"id": "MEDIA-X", "filename": "nota.pdf"}}
    )

    message = await normalizer.normalize(payload, build_tenant())

    assert message.content.type == "document"
    assert message.content.media is not None
    assert message.content.media.original_url is None
    assert message.content.media.filename == "nota.pdf"


@pytest.mark.asyncio
async def test_media_link_skips_lookup() -> None:
    client = FakeMediaClient()
    normalizer, _ = _normalizer(client)
    payload = waba_message(
        {"type": "audio", "audio": {"link": "https://cdn.example/a.ogg", "mime_type": "audio/ogg"}}
    )

    message = await normalizer.normalize(payload, build_tenant())

    assert message.content.media is not None
    assert message.content.media.original_url == "https://cdn.example/a.ogg"
    assert client.info_calls == []


@pytest.mark.asyncio
async def test_animated_sticker_is_video() -> None:
    client = FakeMediaClient(
        media_info={"ST-1": MediaInfo(url=GRAPH_MEDIA_URL, mime_type="image/webp")}
    )
    normalizer, _ = _normalizer(client)
    payload = waba_message(
        {"type": "sticker", "sticker": {"id": "ST-1", "animated": True, "mime_type": "image/webp"}}
    )

    message = await normalizer.normalize(payload, build_tenant())

    assert message.content.type == "video"


@pytest.mark.asyncio
async def test_interactive_button_reply_points_to_option_id() -> None:
    normalizer, _ = _normalizer()
    payload = waba_message(
        {
            "type": "interactive",
            "interactive": {
                "type": "button_reply",
                "button_reply": {"id": "confirmar_consulta", "title": "Confirmar"},
            },
        }
    )

    message = await normalizer.normalize(payload, build_tenant())

    assert message.content.text == "Confirmar"
    assert message.content.reply is not None
    assert message.content.reply.message_id == "confirmar_consulta"
    assert message.content.reply.quoted_message.text == "confirmar_consulta"


@pytest.mark.asyncio
async def test_unknown_interactive_uses_placeholder() -> None:
    normalizer, _ = _normalizer()
    payload = waba_message({"type": "interactive", "interactive": {"type": "nfm_reply"}})

    message = await normalizer.normalize(payload, build_tenant())

    assert message.content.text == INTERACTIVE_PLACEHOLDER


@pytest.mark.asyncio
async def test_contacts_get_one_vcard_each() -> None:
    normalizer, _ = _normalizer()
    payload = waba_message(
        {
            "type": "contacts",
            "contacts": [
                {
                    "name": {"formatted_name": "Dra. Paula"},
                    "phones": [{"phone": "+55 11 3333-4444"}, {"phone": "+55 11 95555-6666"}],
                },
                {"name": {"formatted_name": "Recepção"}, "phones": []},
            ],
        }
    )

    message = await normalizer.normalize(payload, build_tenant())

    contacts = message.content.contacts
    assert contacts is not None
    assert [c.name for c in contacts] == ["Dra. Paula", "Recepção"]
    assert contacts[0].vcard == (
        "BEGIN:VCARD\nVERSION:3.0\nN:Dra. Paula\n"
        "TEL;TYPE=CELL:+55 11 3333-4444\nTEL;TYPE=CELL:+55 11 95555-6666\nEND:VCARD\n"
    )
    assert "TEL" not in contacts[1].vcard


@pytest.mark.asyncio
async def test_location_message() -> None:
    normalizer, _ = _normalizer()
    payload = waba_message(
        {"type": "location", "location": {"latitude": 38.9, "longitude": -77.0, "name": "Sede"}}
    )

    message = await normalizer.normalize(payload, build_tenant())

    assert message.content.location is not None
    assert message.content.location.longitude == -77.0
    assert message.content.location.name == "Sede"


@pytest.mark.asyncio
async def test_location_with_non_numeric_coordinates_defaults_to_zero() -> None:
    normalizer, _ = _normalizer()
    payload = waba_message(
        {"type": "location", "location": {"latitude": "norte", "longitude": "nan"}}
    )

    message = await normalizer.normalize(payload, build_tenant())

    assert message.content.location is not None
    assert message.content.location.latitude == 0.0
    assert message.content.location.longitude == 0.0


@pytest.mark.asyncio
@pytest.mark.parametrize("timestamp", ["nan", "inf", "-inf"])
async def test_non_finite_timestamp_is_invalid(timestamp: str) -> None:
    normalizer, _ = _normalizer()

    with pytest.raises(InvalidPayloadError):
        await normalizer.normalize(
            waba_message({"type": "text", "text": {"body": "oi"}, "timestamp": timestamp}),
            build_tenant(),
        )


@pytest.mark.asyncio
async def test_payload_without_messages_is_invalid() -> None:
    normalizer, _ = _normalizer()

    with pytest.raises(InvalidPayloadError):
        await normalizer.normalize(waba_envelope({"messages": []}), build_tenant())


def test_status_delivered_becomes_delivery() -> None:
    normalizer, _ = _normalizer()

    status = normalizer.normalize_status(waba_status("delivered"))

    assert status.status == "delivery"
    assert status.message_id == "wamid.STATUS1"
    assert status.timestamp == 1603086313000
    assert status.from_me is True
    assert status.instance_id == "123456123"


def test_status_read_passes_through() -> None:
    normalizer, _ = _normalizer()

    assert normalizer.normalize_status(waba_status("read")).status == "read"


def test_event_type_and_connection_status() -> None:
    normalizer, _ = _normalizer()
    other = waba_envelope({"account_update": {"event": "VERIFIED_ACCOUNT"}})

    assert normalizer.event_type(waba_text()) == "message"
    assert normalizer.event_type(waba_status()) == "status"
    assert normalizer.event_type(other) == "connection"
    connection = normalizer.normalize_connection_status(other)
    assert connection.status == "connected"
    assert connection.instance_id == "123456123"
    assert connection.event_moment > 0
