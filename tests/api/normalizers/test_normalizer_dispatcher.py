"""Testes da seleção de normalizer por formato de payload."""

from __future__ import annotations

import logging

import pytest

from api.normalizers import NormalizerDispatcher, WabaNormalizer, WApiNormalizer, create_dispatcher
from tests.fakes.fake_media_client import FakeMediaClientFactory
from tests.fakes.whatsapp_payloads import (
    build_tenant,
    wapi_connection,
    wapi_message,
    wapi_status,
    waba_status,
    waba_text,
)
from utils.errors import ErrorKind, NormalizerNotFoundError

RECOGNIZED = [
    wapi_message({"conversation": "hi"}),
    wapi_status(),
    wapi_connection(),
    waba_text(),
    waba_status(),
]


@pytest.fixture
def dispatcher() -> NormalizerDispatcher:
    return create_dispatcher(FakeMediaClientFactory())


def test_default_order_is_wapi_then_waba(dispatcher: NormalizerDispatcher) -> None:
    assert [type(n) for n in dispatcher.normalizers] == [WApiNormalizer, WabaNormalizer]


@pytest.mark.parametrize("payload", RECOGNIZED)
def test_exactly_one_normalizer_accepts_each_payload(
    dispatcher: NormalizerDispatcher,
    payload: dict,
) -> None:
    accepting = [n for n in dispatcher.normalizers if n.can_handle(payload)]
    assert len(accepting) == 1


@pytest.mark.parametrize(
    ("payload", "expected"),
    [(wapi_message({"conversation": "hi"}), WApiNormalizer), (waba_text(), WabaNormalizer)],
)
def test_resolve_picks_provider(
    dispatcher: NormalizerDispatcher,
    payload: dict,
    expected: type,
) -> None:
    assert isinstance(dispatcher.resolve(payload), expected)


@pytest.mark.parametrize("payload", [{}, {"foo": "bar"}, None, "texto", {"object": "page"}])
def test_unknown_payload_raises_resolution_error(
    dispatcher: NormalizerDispatcher,
    payload: object,
    caplog: pytest.LogCaptureFixture,
) -> None:
    with caplog.at_level(logging.WARNING), pytest.raises(NormalizerNotFoundError) as exc_info:
        dispatcher.resolve(payload)

    assert exc_info.value.kind is ErrorKind.RESOLUTION
    assert exc_info.value.is_aborting
    assert any(r.getMessage() == "normalizer_not_found" for r in caplog.records)


@pytest.mark.asyncio
async def test_dispatcher_delegates_normalization(dispatcher: NormalizerDispatcher) -> None:
    message = await dispatcher.normalize(waba_text(), build_tenant())
    status = dispatcher.normalize_status(wapi_status("DELIVERY"))
    connection = dispatcher.normalize_connection_status(wapi_connection())

    assert message.provider.name == "waba"
    assert status.status == "delivery"
    assert connection.status == "connected"
    assert dispatcher.event_type(waba_status()) == "status"
