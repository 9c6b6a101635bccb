"""Protocolos de armazenamento de mídia.

ObjectStorageClientProtocol é o transporte durável (buckets por tenant);
LocalFileStoreProtocol é o armazenamento de baixa durabilidade usado para
thumbnails e fotos de perfil.
"""

from __future__ import annotations

from typing import Protocol


class ObjectStorageClientProtocol(Protocol):
    """Cliente de object storage consumido pelo StorageUploader."""

    async def head_bucket(self, bucket: str) -> bool:
        """True se o bucket existe."""
        ...

    async def create_bucket(self, bucket: str, *, region: str, storage_class: str) -> None: ...

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
        """Grava objeto com criptografia server-side e classe de custo reduzido."""
        ...

    async def signed_url(self, bucket: str, key: str, expires_in: int) -> str:
        """URL assinada de leitura válida por expires_in segundos."""
        ...

    async def bucket_location(self, bucket: str) -> str | None:
        """Região do bucket em minúsculas, ou None se ele não existe."""
        ...


class LocalFileStoreProtocol(Protocol):
    """Store de arquivos de baixa durabilidade (thumbnails, fotos de perfil)."""

    async def save(self, relative_dir: str, filename: str, data: bytes) -> str:
        """Persiste e retorna a referência (caminho relativo ao store)."""
        ...
