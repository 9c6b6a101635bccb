"""Clientes de mídia por provider (Graph API oficial e W-API).

Cada canal do tenant carrega as credenciais; o cliente é construído a
partir do ProviderName por um mapeamento fechado.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from app.domain import Channel, ProviderName
from app.infra.http import HttpClient, HttpClientConfig, HttpError
from app.protocols import DownloadedMedia, MediaInfo
from config.settings import get_whatsapp_settings
from utils.errors import ChannelConfigError, ErrorKind, MediaDownloadError, MediaValidationError

if TYPE_CHECKING:
    from collections.abc import Callable

    from app.protocols import ProviderMediaClientProtocol
    from config.settings import WhatsAppSettings

logger = logging.getLogger(__name__)


def _http_client_from_settings(settings: WhatsAppSettings) -> HttpClient:
    return HttpClient(
        HttpClientConfig(
            timeout_seconds=settings.request_timeout_seconds,
            max_retries=settings.max_retries,
            backoff_base_seconds=settings.backoff_base_seconds,
            backoff_max_seconds=settings.backoff_max_seconds,
            max_size_bytes=settings.media_max_size_bytes,
        )
    )


def _download_error(exc: HttpError, provider: str) -> MediaDownloadError:
    kind = ErrorKind.TRANSIENT if exc.is_retryable else ErrorKind.VALIDATION
    return MediaDownloadError(
        f"Download de mídia falhou ({provider}): {exc}",
        kind=kind,
        cause=exc,
    )


class WabaMediaClient:
    """Acesso à mídia via Graph API (WhatsApp Business Account).

    O media id recebido no webhook é resolvido em URL temporária
    (lookaside) que exige o mesmo Bearer token no download.
    """

    def __init__(
        self,
        access_token: str,
        api_version: str | None = None,
        *,
        http_client: HttpClient | None = None,
        settings: WhatsAppSettings | None = None,
    ) -> None:
        if not access_token or not access_token.strip():
            raise ChannelConfigError("access_token é obrigatório para canais waba")
        self._settings = settings or get_whatsapp_settings()
        self._access_token = access_token
        self._api_version = api_version or self._settings.api_version
        self._http = http_client or _http_client_from_settings(self._settings)

    @property
    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._access_token}"}

    async def get_media_info(self, media_id: str) -> MediaInfo:
        """Consulta GET /{version}/{media_id}.

        Raises:
            MediaValidationError: media id vazio ou resposta sem URL.
            MediaDownloadError: falha de transporte após retries.
        """
        if not media_id:
            raise MediaValidationError("media_id ausente")

        endpoint = f"{self._settings.api_base_url}/{self._api_version}/{media_id}"
        try:
            data = await self._http.get_json(endpoint, headers=self._auth_headers)
        except HttpError as exc:
            logger.warning(
                "waba_media_info_failed",
                extra={"status_code": exc.status_code, "is_retryable": exc.is_retryable},
            )
            raise _download_error(exc, "waba") from exc

        url = data.get("url")
        if not url:
            raise MediaValidationError("Graph API não retornou URL para o media id")
        return MediaInfo(
            url=str(url),
            mime_type=str(data.get("mime_type") or ""),
            sha256=str(data.get("sha256") or ""),
            file_size=_to_int(data.get("file_size")),
        )

    async def download(self, url: str) -> DownloadedMedia:
        try:
            content, content_type = await self._http.get_bytes(url, headers=self._auth_headers)
        except HttpError as exc:
            raise _download_error(exc, "waba") from exc
        return DownloadedMedia(content=content, content_type=content_type)


class WApiMediaClient:
    """Acesso à mídia de instâncias W-API.

    O webhook já traz URLs; não existe lookup por media id.
    """

    def __init__(
        self,
        token: str | None = None,
        instance_id: str | None = None,
        *,
        http_client: HttpClient | None = None,
        settings: WhatsAppSettings | None = None,
    ) -> None:
        settings = settings or get_whatsapp_settings()
        self._token = token or ""
        self._instance_id = instance_id or ""
        self._http = http_client or _http_client_from_settings(settings)

    async def get_media_info(self, media_id: str) -> MediaInfo:
        raise MediaValidationError("W-API não oferece lookup de media id")

    async def download(self, url: str) -> DownloadedMedia:
        headers = {"Authorization": f"Bearer {self._token}"} if self._token else None
        try:
            content, content_type = await self._http.get_bytes(url, headers=headers)
        except HttpError as exc:
            raise _download_error(exc, "wapi") from exc
        return DownloadedMedia(content=content, content_type=content_type)


def _build_waba_client(channel: Channel, settings: WhatsAppSettings) -> WabaMediaClient:
    config = channel.config
    return WabaMediaClient(
        str(config.get("access_token") or ""),
        config.get("version") or config.get("api_version"),
        settings=settings,
    )


def _build_wapi_client(channel: Channel, settings: WhatsAppSettings) -> WApiMediaClient:
    config = channel.config
    return WApiMediaClient(
        config.get("token"),
        config.get("instanceId") or channel.platform_id,
        settings=settings,
    )


MEDIA_CLIENT_BUILDERS: dict[
    ProviderName, Callable[[Channel, WhatsAppSettings], ProviderMediaClientProtocol]
] = {
    ProviderName.WABA: _build_waba_client,
    ProviderName.WAPI: _build_wapi_client,
}


def create_media_client(
    channel: Channel,
    settings: WhatsAppSettings | None = None,
) -> ProviderMediaClientProtocol:
    """Constrói o cliente de mídia do provider do canal."""
    builder = MEDIA_CLIENT_BUILDERS[channel.provider]
    return builder(channel, settings or get_whatsapp_settings())


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0
