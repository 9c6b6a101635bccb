"""Testes dos stores locais de thumbnail e foto de perfil."""

from __future__ import annotations

import base64
from pathlib import Path

import httpx
import pytest

from app.infra.http import HttpClient, HttpClientConfig
from app.infra.storage import LocalFileStore, ProfilePictureStore, ThumbnailStore
from tests.fakes.whatsapp_payloads import TENANT_UUID, build_tenant
from utils.errors import MediaDownloadError


@pytest.mark.asyncio
async def test_thumbnail_is_decoded_and_written(tmp_path: Path) -> None:
    store = ThumbnailStore(LocalFileStore(tmp_path))

    encoded = base64.b64encode(b"\xff\xd8thumb").decode()

    reference = await store.save_base64(encoded, build_tenant())

    assert reference.startswith(f"{TENANT_UUID}/whatsapp/thumbnail/")
    assert reference.endswith(".jpg")
    assert (tmp_path / reference).read_bytes() == b"\xff\xd8thumb"


@pytest.mark.asyncio
async def test_profile_picture_is_reused_within_the_day(tmp_path: Path) -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        assert request.headers["user-agent"].startswith("Mozilla/5.0")
        return httpx.Response(200, content=b"png-bytes", headers={"content-type": "image/png"})

    http = HttpClient(HttpClientConfig(max_retries=0), transport=httpx.MockTransport(handler))
    store = ProfilePictureStore(LocalFileStore(tmp_path), http)
    url = "https://pps.whatsapp.net/v/t61/avatar.png?oh=1"

    first = await store.save_from_url(url, "5511988887777_14032026", build_tenant())
    second = await store.save_from_url(url, "5511988887777_14032026", build_tenant())

    assert first == second == f"{TENANT_UUID}/whatsapp/profilepic/5511988887777_14032026.png"
    assert len(calls) == 1
    assert (tmp_path / first).read_bytes() == b"png-bytes"


@pytest.mark.asyncio
async def test_profile_picture_download_failure_is_typed(tmp_path: Path) -> None:
    http = HttpClient(
        HttpClientConfig(max_retries=0),
        transport=httpx.MockTransport(lambda request: httpx.Response(404)),
    )
    store = ProfilePictureStore(LocalFileStore(tmp_path), http)

    with pytest.raises(MediaDownloadError):
        await store.save_from_url("https://pps.whatsapp.net/x", "551100_01012026", build_tenant())
