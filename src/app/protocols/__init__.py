"""Protocolos e contratos do core da aplicação."""

from .events import EventPublisherProtocol
from .media import DownloadedMedia, MediaInfo, ProviderMediaClientProtocol
from .normalizer import EventType, MessageNormalizerProtocol, NormalizerDispatcherProtocol
from .storage import LocalFileStoreProtocol, ObjectStorageClientProtocol

__all__ = [
    "DownloadedMedia",
    "EventPublisherProtocol",
    "EventType",
    "LocalFileStoreProtocol",
    "MediaInfo",
    "MessageNormalizerProtocol",
    "NormalizerDispatcherProtocol",
    "ObjectStorageClientProtocol",
    "ProviderMediaClientProtocol",
]
