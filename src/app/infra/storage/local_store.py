"""Armazenamento de baixa durabilidade em disco local (UPLOAD_PATH).

Layout: `<UPLOAD_PATH>/<tenant uuid>/whatsapp/{thumbnail,profilepic}/`.
As referências devolvidas são relativas a UPLOAD_PATH.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import uuid
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from app.infra.http import HttpClient, HttpClientConfig, HttpError
from utils.errors import MediaDownloadError, MediaValidationError

if TYPE_CHECKING:
    from app.domain import Tenant

logger = logging.getLogger(__name__)

_PROFILE_PIC_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".webp", ".gif"})

# CDN de fotos de perfil recusa clientes sem User-Agent de navegador
_PROFILE_PIC_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    ),
    "Accept": "image/webp,image/apng,image/*,*/*;q=0.8",
    "Accept-Language": "pt-BR,pt;q=0.9,en;q=0.8",
    "Cache-Control": "no-cache",
}


class LocalFileStore:
    """Grava arquivos sob um diretório base."""

    def __init__(self, base_path: str | Path) -> None:
        self._base = Path(base_path)

    async def save(self, relative_dir: str, filename: str, data: bytes) -> str:
        target_dir = self._base / relative_dir
        target = target_dir / filename

        def _write() -> None:
            target_dir.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)

        await asyncio.to_thread(_write)
        return str(PurePosixPath(relative_dir) / filename)

    async def exists(self, relative_dir: str, filename: str) -> bool:
        return await asyncio.to_thread((self._base / relative_dir / filename).exists)


def _tenant_dir(tenant: Tenant, kind: str) -> str:
    return f"{tenant.uuid}/whatsapp/{kind}"


class ThumbnailStore:
    """Persiste thumbnails JPEG recebidos em base64."""

    def __init__(self, store: LocalFileStore) -> None:
        self._store = store

    async def save_base64(self, thumbnail_b64: str, tenant: Tenant) -> str:
        """Decodifica e grava `<uuid4>.jpg`; retorna a referência.

        Raises:
            MediaValidationError: base64 inválido.
        """
        try:
            data = base64.b64decode(thumbnail_b64, validate=False)
        except (ValueError, binascii.Error) as exc:
            raise MediaValidationError("Thumbnail base64 inválido", cause=exc) from exc
        if not data:
            raise MediaValidationError("Thumbnail vazio")
        return await self._store.save(_tenant_dir(tenant, "thumbnail"), f"{uuid.uuid4()}.jpg", data)


class ProfilePictureStore:
    """Baixa e persiste fotos de perfil (arquivo por contato e dia)."""

    def __init__(self, store: LocalFileStore, http_client: HttpClient | None = None) -> None:
        self._store = store
        self._http = http_client or HttpClient(
            HttpClientConfig(timeout_seconds=30.0, max_retries=0)
        )

    async def save_from_url(self, url: str, name: str, tenant: Tenant) -> str:
        """Reaproveita o arquivo do dia se já existir.

        Raises:
            MediaDownloadError: falha no download.
        """
        relative_dir = _tenant_dir(tenant, "profilepic")
        filename = f"{name}{_extension_from_url(url)}"
        if await self._store.exists(relative_dir, filename):
            return str(PurePosixPath(relative_dir) / filename)

        try:
            content, _ = await self._http.get_bytes(url, headers=_PROFILE_PIC_HEADERS)
        except HttpError as exc:
            raise MediaDownloadError("Falha ao baixar foto de perfil", cause=exc) from exc
        return await self._store.save(relative_dir, filename, content)


def _extension_from_url(url: str) -> str:
    try:
        suffix = PurePosixPath(urlparse(url).path).suffix.lower()
    except ValueError:
        return ".jpg"
    return suffix if suffix in _PROFILE_PIC_EXTENSIONS else ".jpg"
