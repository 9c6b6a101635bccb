"""Protocolos dos clientes de mídia por provider."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True, slots=True)
class MediaInfo:
    """Metadados de mídia resolvidos a partir de um media id."""

    url: str
    mime_type: str
    sha256: str = ""
    file_size: int = 0


@dataclass(frozen=True, slots=True)
class DownloadedMedia:
    """Bytes baixados + content-type informado pela origem."""

    content: bytes
    content_type: str | None = None


class ProviderMediaClientProtocol(Protocol):
    """Contrato de acesso à mídia de um provider (credenciais do canal)."""

    async def get_media_info(self, media_id: str) -> MediaInfo:
        """Resolve media id em URL de download e metadados."""
        ...

    async def download(self, url: str) -> DownloadedMedia:
        """Baixa mídia não cifrada com a autenticação do provider."""
        ...
