"""Adapter do Google Cloud Storage para o ObjectStorageClientProtocol.

O SDK é síncrono; cada chamada roda em thread via asyncio.to_thread e
recebe timeout explícito. A assinatura de URL não aceita timeout no SDK
e é limitada por asyncio.wait_for.
GCS sempre cifra server-side; com kms_key_name a chave é CMEK.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from google.api_core import exceptions as gcp_exceptions

if TYPE_CHECKING:
    from google.cloud.storage import Client as StorageClient

logger = logging.getLogger(__name__)


class GCSStorageClient:
    """Object storage sobre buckets GCS (um bucket por tenant)."""

    def __init__(self, client: StorageClient, *, timeout_seconds: float = 60.0) -> None:
        self._client = client
        self._timeout = timeout_seconds

    async def head_bucket(self, bucket: str) -> bool:
        found = await asyncio.to_thread(self._client.lookup_bucket, bucket, timeout=self._timeout)
        return found is not None

    async def create_bucket(self, bucket: str, *, region: str, storage_class: str) -> None:
        def _create() -> None:
            handle = self._client.bucket(bucket)
            handle.storage_class = storage_class
            try:
                self._client.create_bucket(handle, location=region, timeout=self._timeout)
            except gcp_exceptions.Conflict:
                # Criado concorrentemente por outra instância
                logger.info("gcs_bucket_already_exists", extra={"bucket": bucket})

        await asyncio.to_thread(_create)
        logger.info(
            "gcs_bucket_created",
            extra={"bucket": bucket, "region": region, "storage_class": storage_class},
        )

    async def put_object(
        self,
        bucket: str,
        key: str,
        data: bytes,
        *,
        content_type: str,
        metadata: dict[str, str],
        storage_class: str,
        kms_key_name: str | None = None,
    ) -> None:
        def _upload() -> None:
            blob = self._client.bucket(bucket).blob(key, kms_key_name=kms_key_name or None)
            blob.metadata = metadata
            blob.storage_class = storage_class
            blob.upload_from_string(data, content_type=content_type, timeout=self._timeout)

        await asyncio.to_thread(_upload)

    async def signed_url(self, bucket: str, key: str, expires_in: int) -> str:
        def _sign() -> str:
            blob = self._client.bucket(bucket).blob(key)
            return blob.generate_signed_url(
                version="v4",
                expiration=timedelta(seconds=expires_in),
                method="GET",
            )

        return await asyncio.wait_for(asyncio.to_thread(_sign), timeout=self._timeout)

    async def bucket_location(self, bucket: str) -> str | None:
        found = await asyncio.to_thread(self._client.lookup_bucket, bucket, timeout=self._timeout)
        if found is None:
            return None
        return (found.location or "").lower() or None
