"""Storage Uploader: bucket por tenant, chave derivada do conteúdo, upload com retry.

A chave `media/<phone>/<YYYY-MM-DD>/<message_id>/<sha256><ext>` torna o
reprocessamento dos mesmos bytes idempotente (mesma chave, overwrite).
URLs assinadas são sempre recalculadas; só a existência de bucket é cacheada.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import re
import time
import uuid
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import TYPE_CHECKING

from app.infra.storage.media_types import extension_for, normalize_mimetype
from app.observability import record_latency
from utils.errors import StorageBucketError, StorageUploadError

if TYPE_CHECKING:
    from collections.abc import Callable

    from app.domain import Tenant
    from app.protocols import ObjectStorageClientProtocol

logger = logging.getLogger(__name__)

_TENANT_NAME_UNSAFE = re.compile(r"[^\w\s-]")


@dataclass(frozen=True, slots=True)
class UploadContext:
    """Contexto para derivação de chave e metadados do objeto."""

    tenant: Tenant
    message_id: str
    connected_phone: str
    original_url: str = ""
    processing_method: str = "direct"
    filename: str | None = None


@dataclass(frozen=True, slots=True)
class UploadResult:
    """Coordenadas do objeto persistido + URL assinada."""

    bucket: str
    key: str
    region: str
    signed_url: str
    url_expires_at: str
    size: int
    content_type: str
    uploaded_at: str
    original_url: str = ""


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _isoformat(moment: datetime) -> str:
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class StorageUploader:
    """Upload durável de mídia para o object storage.

    O cache de buckets existentes é um `set` desta instância: criado junto
    com o uploader, só cresce (insert-or-noop) e só é limpo por reset_cache().
    """

    def __init__(
        self,
        storage_client: ObjectStorageClientProtocol,
        *,
        region: str,
        storage_class: str = "NEARLINE",
        kms_key_name: str | None = None,
        bucket_prefix: str = "",
        retry_base_seconds: float = 1.0,
        retry_max_seconds: float = 10.0,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._client = storage_client
        self._region = region
        self._storage_class = storage_class
        self._kms_key_name = kms_key_name or None
        self._bucket_prefix = bucket_prefix
        self._retry_base_seconds = retry_base_seconds
        self._retry_max_seconds = retry_max_seconds
        self._clock = clock
        self._bucket_cache: set[str] = set()

    @property
    def region(self) -> str:
        return self._region

    @property
    def cached_buckets(self) -> frozenset[str]:
        return frozenset(self._bucket_cache)

    def reset_cache(self) -> None:
        """Esquece os buckets já verificados (testes/reinicialização)."""
        self._bucket_cache.clear()

    def bucket_name_for(self, tenant: Tenant) -> str:
        return f"{self._bucket_prefix}{tenant.uuid.lower()}"

    async def ensure_bucket(self, bucket: str) -> None:
        """Verifica existência uma vez por processo; cria no primeiro miss.

        Raises:
            StorageBucketError: falha ao verificar ou criar.
        """
        if bucket in self._bucket_cache:
            return
        try:
            if not await self._client.head_bucket(bucket):
                await self._client.create_bucket(
                    bucket,
                    region=self._region,
                    storage_class=self._storage_class,
                )
        except Exception as exc:
            logger.warning(
                "storage_bucket_check_failed",
                extra={"bucket": bucket, "error_type": type(exc).__name__},
            )
            raise StorageBucketError(
                f"Falha ao verificar/criar bucket {bucket}: {exc}",
                cause=exc,
            ) from exc
        self._bucket_cache.add(bucket)

    def build_object_key(
        self,
        content: bytes,
        *,
        message_id: str,
        connected_phone: str,
        mimetype: str,
        filename: str | None = None,
        upload_date: date | None = None,
    ) -> str:
        """Chave determinística para (bytes, mensagem, dia)."""
        digest = hashlib.sha256(content).hexdigest()
        day = (upload_date or self._clock().date()).isoformat()
        phone = connected_phone or "unknown"
        extension = extension_for(mimetype, filename)
        return f"media/{phone}/{day}/{message_id}/{digest}{extension}"

    async def upload(
        self,
        content: bytes,
        mimetype: str,
        context: UploadContext,
        *,
        url_expires_in: int,
        max_retries: int = 3,
    ) -> UploadResult:
        """Garante o bucket, grava o objeto com retry e emite URL assinada.

        Raises:
            StorageBucketError: bucket indisponível.
            StorageUploadError: todas as tentativas de put falharam.
        """
        start = time.perf_counter()
        content_type = normalize_mimetype(mimetype) or "application/octet-stream"
        bucket = self.bucket_name_for(context.tenant)
        await self.ensure_bucket(bucket)

        message_id = context.message_id or uuid.uuid4().hex.upper()
        now = self._clock()
        key = self.build_object_key(
            content,
            message_id=message_id,
            connected_phone=context.connected_phone,
            mimetype=content_type,
            filename=context.filename,
            upload_date=now.date(),
        )
        metadata = self._object_metadata(context, message_id, content, content_type, now)
        await self._put_with_retry(bucket, key, content, content_type, metadata, max_retries)

        signed_url = await self.signed_url(bucket, key, url_expires_in)
        uploaded_at = self._clock()
        result = UploadResult(
            bucket=bucket,
            key=key,
            region=self._region,
            signed_url=signed_url,
            url_expires_at=_isoformat(uploaded_at + timedelta(seconds=url_expires_in)),
            size=len(content),
            content_type=content_type,
            uploaded_at=_isoformat(uploaded_at),
            original_url=context.original_url,
        )
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "storage_upload_completed",
            extra={
                "bucket": bucket,
                "size_bytes": result.size,
                "content_type": content_type,
                "processing_method": context.processing_method,
            },
        )
        record_latency("storage_uploader", "upload", elapsed_ms)
        return result

    async def signed_url(self, bucket: str, key: str, expires_in: int) -> str:
        """URL assinada recalculada a cada chamada (nunca cacheada)."""
        return await self._client.signed_url(bucket, key, expires_in)

    def expires_at(self, expires_in: int) -> str:
        return _isoformat(self._clock() + timedelta(seconds=expires_in))

    async def bucket_stats(self, tenant: Tenant) -> dict[str, object]:
        """Nome, existência e região do bucket do tenant (monitoramento).

        A região é a do bucket existente; sem bucket, a região configurada.
        """
        bucket = self.bucket_name_for(tenant)
        try:
            location = await self._client.bucket_location(bucket)
        except Exception as exc:
            logger.warning(
                "storage_bucket_stats_failed",
                extra={"bucket": bucket, "error_type": type(exc).__name__},
            )
            location = None
        return {
            "bucketName": bucket,
            "exists": location is not None,
            "region": location or self._region,
        }

    async def _put_with_retry(
        self,
        bucket: str,
        key: str,
        content: bytes,
        content_type: str,
        metadata: dict[str, str],
        max_retries: int,
    ) -> None:
        attempts = max(1, max_retries)
        for attempt in range(1, attempts + 1):
            try:
                await self._client.put_object(
                    bucket,
                    key,
                    content,
                    content_type=content_type,
                    metadata=metadata,
                    storage_class=self._storage_class,
                    kms_key_name=self._kms_key_name,
                )
                return
            except Exception as exc:
                logger.warning(
                    "storage_upload_attempt_failed",
                    extra={
                        "attempt": attempt,
                        "max_attempts": attempts,
                        "error_type": type(exc).__name__,
                    },
                )
                if attempt >= attempts:
                    raise StorageUploadError(attempts, exc) from exc
                await asyncio.sleep(self._retry_delay(attempt))

    def _retry_delay(self, attempt: int) -> float:
        return min(self._retry_base_seconds * (2 ** (attempt - 1)), self._retry_max_seconds)

    def _object_metadata(
        self,
        context: UploadContext,
        message_id: str,
        content: bytes,
        content_type: str,
        now: datetime,
    ) -> dict[str, str]:
        tenant = context.tenant
        return {
            "original-url": context.original_url,
            "message-id": message_id,
            "tenant-id": str(tenant.id),
            "tenant-uuid": tenant.uuid,
            "tenant-name": _TENANT_NAME_UNSAFE.sub("", tenant.name),
            "processing-method": context.processing_method,
            "upload-date": _isoformat(now),
            "file-size": str(len(content)),
            "content-type": content_type,
        }
