"""Pipeline de ingestão de mídia.

Troca a referência transitória do provider (URL WhatsApp/Graph) por uma
referência durável no object storage:

1. valida o sub-registro de mídia;
2. decifra (mediaKey + URL WhatsApp) ou baixa direto pelo cliente do canal;
3. envia ao StorageUploader e reescreve a mídia in place (`processed=True`);
4. persiste thumbnail e fotos de perfil (best-effort).

Falhas são PipelineError com `kind`; com `skip_on_error` a mensagem segue
sem mídia e o resultado carrega o erro.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from app.infra.storage import UploadContext, infer_mimetype_from_url, is_supported_mimetype
from app.observability import record_latency, record_media_outcome
from config.logging import log_fallback
from config.settings import MediaSettings, get_media_settings
from utils.errors import ErrorKind, MediaValidationError, PipelineError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from app.domain import CanonicalMessage, Channel, MediaContent, Tenant
    from app.infra.crypto import WhatsAppMediaDecryptor
    from app.infra.storage import ProfilePictureStore, StorageUploader, ThumbnailStore, UploadResult
    from app.protocols import ProviderMediaClientProtocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MediaProcessingOptions:
    """Opções por chamada do pipeline."""

    url_expires_in: int = 86400
    skip_on_error: bool = True
    max_retries: int = 3

    @classmethod
    def from_settings(cls, settings: MediaSettings) -> MediaProcessingOptions:
        return cls(
            url_expires_in=settings.url_expires_in_seconds,
            skip_on_error=settings.skip_on_error,
            max_retries=settings.upload_max_retries,
        )


@dataclass(slots=True)
class MediaProcessingResult:
    """Outcome de uma mensagem (a mensagem é a mesma instância, reescrita)."""

    success: bool
    message: CanonicalMessage
    upload: UploadResult | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None
    processing_time_ms: float = 0.0


@dataclass(slots=True)
class BatchProcessingResult:
    total_messages: int
    success_count: int
    error_count: int
    results: list[MediaProcessingResult] = field(default_factory=list)
    total_processing_time_ms: float = 0.0


@dataclass(frozen=True, slots=True)
class RefreshedUrl:
    url: str
    expires_at: str


class MediaIngestionPipeline:
    """Orquestra decrypt/download, upload e reescrita da mídia."""

    def __init__(
        self,
        *,
        uploader: StorageUploader,
        decryptor: WhatsAppMediaDecryptor,
        media_client_factory: Callable[[Channel], ProviderMediaClientProtocol],
        thumbnail_store: ThumbnailStore | None = None,
        profile_picture_store: ProfilePictureStore | None = None,
        settings: MediaSettings | None = None,
    ) -> None:
        self._uploader = uploader
        self._decryptor = decryptor
        self._media_client_factory = media_client_factory
        self._thumbnail_store = thumbnail_store
        self._profile_picture_store = profile_picture_store
        self._settings = settings or get_media_settings()

    def default_options(self) -> MediaProcessingOptions:
        return MediaProcessingOptions.from_settings(self._settings)

    @staticmethod
    def has_unprocessed_media(message: CanonicalMessage) -> bool:
        """Tipo de mídia, referência de origem presente e ainda não processada."""
        content = message.content
        if not content.has_media or content.media is None:
            return False
        return bool(content.media.original_url) and not content.media.processed

    async def process_message_media(
        self,
        message: CanonicalMessage,
        tenant: Tenant,
        options: MediaProcessingOptions | None = None,
    ) -> MediaProcessingResult:
        """Processa a mídia de uma mensagem.

        Sem mídia pendente devolve sucesso sem alterações.

        Raises:
            PipelineError: apenas quando `skip_on_error` é False.
        """
        options = options or self.default_options()
        start = time.perf_counter()
        provider = message.provider.name
        content_type = message.content.type

        media = message.content.media
        if media is None or not self.has_unprocessed_media(message):
            return MediaProcessingResult(success=True, message=message)

        try:
            _validate_media(media)
            data, mimetype, method = await self._fetch(message, media, tenant)
            upload = await self._uploader.upload(
                data,
                mimetype,
                UploadContext(
                    tenant=tenant,
                    message_id=message.message_id,
                    connected_phone=message.connected_phone,
                    original_url=media.original_url or "",
                    processing_method=method,
                    filename=media.filename,
                ),
                url_expires_in=options.url_expires_in,
                max_retries=options.max_retries,
            )
        except PipelineError as exc:
            elapsed_ms = _elapsed_ms(start)
            logger.warning(
                "media_processing_failed",
                extra={
                    "message_id": message.message_id,
                    "provider": provider,
                    "content_type": content_type,
                    "error_kind": exc.kind.value,
                    "error_type": type(exc).__name__,
                    "skip_on_error": options.skip_on_error,
                },
            )
            record_media_outcome(
                provider,
                content_type,
                "error",
                error_kind=exc.kind.value,
                latency_ms=elapsed_ms,
            )
            if not options.skip_on_error:
                raise
            log_fallback(logger, "media_ingestion", reason=exc.kind.value, elapsed_ms=elapsed_ms)
            return MediaProcessingResult(
                success=False,
                message=message,
                error=str(exc),
                error_kind=exc.kind,
                processing_time_ms=elapsed_ms,
            )

        media.mark_stored(
            bucket=upload.bucket,
            key=upload.key,
            region=upload.region,
            url=upload.signed_url,
            url_expires_at=upload.url_expires_at,
            content_type=upload.content_type,
            uploaded_at=upload.uploaded_at,
            file_size=upload.size,
        )
        await self._persist_media_thumbnail(media, tenant)
        await self._persist_profile_pictures(message, tenant)

        elapsed_ms = _elapsed_ms(start)
        logger.info(
            "media_processing_completed",
            extra={
                "message_id": message.message_id,
                "provider": provider,
                "content_type": content_type,
                "processing_method": method,
                "size_bytes": upload.size,
            },
        )
        record_media_outcome(provider, content_type, "success", latency_ms=elapsed_ms)
        record_latency("media_ingestion", "process_message_media", elapsed_ms)
        return MediaProcessingResult(
            success=True,
            message=message,
            upload=upload,
            processing_time_ms=elapsed_ms,
        )

    async def process_location_thumbnail(
        self,
        message: CanonicalMessage,
        tenant: Tenant,
    ) -> MediaProcessingResult:
        """Persiste o thumbnail base64 de localização e reescreve a referência."""
        start = time.perf_counter()
        location = message.content.location
        if message.content.type != "location" or location is None or not location.thumbnail:
            return MediaProcessingResult(success=True, message=message)
        if self._thumbnail_store is None:
            return MediaProcessingResult(success=True, message=message)

        try:
            location.thumbnail = await self._thumbnail_store.save_base64(location.thumbnail, tenant)
        except (PipelineError, OSError) as exc:
            kind = exc.kind if isinstance(exc, PipelineError) else ErrorKind.TRANSIENT
            logger.warning(
                "location_thumbnail_failed",
                extra={"message_id": message.message_id, "error_type": type(exc).__name__},
            )
            return MediaProcessingResult(
                success=False,
                message=message,
                error=str(exc),
                error_kind=kind,
                processing_time_ms=_elapsed_ms(start),
            )
        return MediaProcessingResult(
            success=True,
            message=message,
            processing_time_ms=_elapsed_ms(start),
        )

    async def process_batch(
        self,
        messages: Sequence[CanonicalMessage],
        tenant: Tenant,
        options: MediaProcessingOptions | None = None,
        *,
        concurrency: int | None = None,
        progress_callback: Callable[[int, int], None] | None = None,
    ) -> BatchProcessingResult:
        """Processa um lote com concorrência limitada e isolamento por mensagem.

        Erros nunca escapam de uma mensagem para as demais (`skip_on_error`
        é forçado); os resultados seguem a ordem de entrada.

        Raises:
            MediaValidationError: lote acima do tamanho máximo.
        """
        total = len(messages)
        if total > self._settings.batch_max_size:
            raise MediaValidationError(
                f"Lote com {total} mensagens excede o máximo de {self._settings.batch_max_size}"
            )

        base = options or self.default_options()
        batch_options = MediaProcessingOptions(
            url_expires_in=base.url_expires_in,
            skip_on_error=True,
            max_retries=base.max_retries,
        )
        semaphore = asyncio.Semaphore(max(1, concurrency or self._settings.batch_concurrency))
        start = time.perf_counter()
        completed = 0

        async def _run(message: CanonicalMessage) -> MediaProcessingResult:
            nonlocal completed
            async with semaphore:
                result = await self._process_isolated(message, tenant, batch_options)
            completed += 1
            if progress_callback is not None:
                progress_callback(completed, total)
            return result

        results = list(await asyncio.gather(*(_run(message) for message in messages)))
        success_count = sum(1 for result in results if result.success)
        batch = BatchProcessingResult(
            total_messages=total,
            success_count=success_count,
            error_count=total - success_count,
            results=results,
            total_processing_time_ms=_elapsed_ms(start),
        )
        logger.info(
            "media_batch_completed",
            extra={
                "total_messages": total,
                "success_count": batch.success_count,
                "error_count": batch.error_count,
            },
        )
        return batch

    async def refresh_signed_url(self, bucket: str, key: str, expires_in: int) -> RefreshedUrl:
        """Nova URL assinada para um objeto já persistido."""
        url = await self._uploader.signed_url(bucket, key, expires_in)
        return RefreshedUrl(url=url, expires_at=self._uploader.expires_at(expires_in))

    async def get_processing_stats(self, tenant: Tenant) -> dict[str, object]:
        return await self._uploader.bucket_stats(tenant)

    def clear_caches(self) -> None:
        self._uploader.reset_cache()

    async def _process_isolated(
        self,
        message: CanonicalMessage,
        tenant: Tenant,
        options: MediaProcessingOptions,
    ) -> MediaProcessingResult:
        start = time.perf_counter()
        try:
            return await self.process_message_media(message, tenant, options)
        except Exception as exc:
            logger.exception(
                "media_batch_item_failed",
                extra={"message_id": message.message_id, "error_type": type(exc).__name__},
            )
            return MediaProcessingResult(
                success=False,
                message=message,
                error=str(exc),
                error_kind=ErrorKind.TRANSIENT,
                processing_time_ms=_elapsed_ms(start),
            )

    async def _fetch(
        self,
        message: CanonicalMessage,
        media: MediaContent,
        tenant: Tenant,
    ) -> tuple[bytes, str, str]:
        """Bytes, mimetype e método (`decrypt` ou `direct`)."""
        url = media.original_url or ""
        if media.is_encrypted:
            decrypted = await self._decryptor.decrypt_media(
                url,
                media.media_key or "",
                message.content.type,
                file_sha256=media.file_sha256,
                file_enc_sha256=media.file_enc_sha256,
            )
            return decrypted.data, decrypted.mimetype, "decrypt"

        channel = tenant.require_channel(message.instance_id)
        client = self._media_client_factory(channel)
        downloaded = await client.download(url)
        mimetype = downloaded.content_type or infer_mimetype_from_url(url)
        if mimetype == "application/octet-stream" and media.mimetype:
            mimetype = media.mimetype
        return downloaded.content, mimetype, "direct"

    async def _persist_media_thumbnail(self, media: MediaContent, tenant: Tenant) -> None:
        if self._thumbnail_store is None or not media.thumbnail:
            return
        try:
            media.thumbnail = await self._thumbnail_store.save_base64(media.thumbnail, tenant)
        except (PipelineError, OSError) as exc:
            logger.warning("media_thumbnail_failed", extra={"error_type": type(exc).__name__})

    async def _persist_profile_pictures(self, message: CanonicalMessage, tenant: Tenant) -> None:
        """Fotos de perfil de sender e chat; falhas só geram log."""
        if self._profile_picture_store is None:
            return
        day = datetime.now(UTC).strftime("%d%m%Y")
        sender = message.sender
        if _is_remote(sender.profile_picture):
            sender.profile_picture = await self._save_profile_picture(
                sender.profile_picture or "", f"{sender.id}{day}", tenant
            )
        chat = message.chat
        if chat.id != sender.id and _is_remote(chat.profile_picture):
            chat.profile_picture = await self._save_profile_picture(
                chat.profile_picture or "", f"{chat.id}{day}", tenant
            )

    async def _save_profile_picture(self, url: str, name: str, tenant: Tenant) -> str:
        store = self._profile_picture_store
        if store is None:
            return url
        try:
            return await store.save_from_url(url, name, tenant)
        except (PipelineError, OSError) as exc:
            logger.warning(
                "profile_picture_failed",
                extra={"error_type": type(exc).__name__},
            )
            return url


def _validate_media(media: MediaContent) -> None:
    """Raises MediaValidationError para URL/mimetype ausentes ou inválidos."""
    if not media.original_url:
        raise MediaValidationError("URL de origem da mídia ausente")
    if not media.mimetype:
        raise MediaValidationError("Mimetype da mídia ausente")
    if not is_supported_mimetype(media.mimetype):
        raise MediaValidationError(f"Tipo de mídia não suportado: {media.mimetype}")
    try:
        parsed = urlparse(media.original_url)
    except ValueError as exc:
        raise MediaValidationError("URL de origem inválida", cause=exc) from exc
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise MediaValidationError("URL de origem inválida")


def _is_remote(reference: str | None) -> bool:
    return bool(reference) and str(reference).startswith(("http://", "https://"))


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000
