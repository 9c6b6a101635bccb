"""Armazenamento de mídia: object storage (GCS) e stores locais."""

from .gcs_client import GCSStorageClient
from .local_store import LocalFileStore, ProfilePictureStore, ThumbnailStore
from .media_types import (
    EXTENSION_BY_MIMETYPE,
    SUPPORTED_MIMETYPE_PREFIXES,
    extension_for,
    infer_mimetype_from_url,
    is_supported_mimetype,
    normalize_mimetype,
)
from .uploader import StorageUploader, UploadContext, UploadResult

__all__ = [
    "EXTENSION_BY_MIMETYPE",
    "SUPPORTED_MIMETYPE_PREFIXES",
    "GCSStorageClient",
    "LocalFileStore",
    "ProfilePictureStore",
    "StorageUploader",
    "ThumbnailStore",
    "UploadContext",
    "UploadResult",
    "extension_for",
    "infer_mimetype_from_url",
    "is_supported_mimetype",
    "normalize_mimetype",
]
