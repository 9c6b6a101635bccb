"""Fake in-memory de object storage para testes deterministas."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class StoredObject:
    data: bytes
    content_type: str
    metadata: dict[str, str]
    storage_class: str
    kms_key_name: str | None


@dataclass
class FakeObjectStorageClient:
    """Implementa ObjectStorageClientProtocol sem IO.

    `put_failures` faz as N primeiras chamadas de put_object falharem.
    """

    existing_buckets: set[str] = field(default_factory=set)
    put_failures: int = 0
    head_error: Exception | None = None
    location: str = "us-east1"

    objects: dict[tuple[str, str], StoredObject] = field(default_factory=dict)
    head_calls: list[str] = field(default_factory=list)
    created_buckets: list[str] = field(default_factory=list)
    put_calls: int = 0

    async def head_bucket(self, bucket: str) -> bool:
        self.head_calls.append(bucket)
        if self.head_error is not None:
            raise self.head_error
        return bucket in self.existing_buckets

    async def create_bucket(self, bucket: str, *, region: str, storage_class: str) -> None:
        self.created_buckets.append(bucket)
        self.existing_buckets.add(bucket)

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
        self.put_calls += 1
        if self.put_calls <= self.put_failures:
            raise ConnectionError(f"put falhou ({self.put_calls})")
        self.objects[(bucket, key)] = StoredObject(
            data=data,
            content_type=content_type,
            metadata=dict(metadata),
            storage_class=storage_class,
            kms_key_name=kms_key_name,
        )

    async def signed_url(self, bucket: str, key: str, expires_in: int) -> str:
        return f"https://storage.example/{bucket}/{key}?expires={expires_in}"

    async def bucket_location(self, bucket: str) -> str | None:
        if self.head_error is not None:
            raise self.head_error
        return self.location if bucket in self.existing_buckets else None
