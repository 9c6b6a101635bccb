"""Exceções utilitárias compartilhadas."""

from .exceptions import (
    ChannelConfigError,
    ChannelNotFoundError,
    ErrorKind,
    EventPublishError,
    InvalidPayloadError,
    MediaDownloadError,
    MediaValidationError,
    NormalizerNotFoundError,
    PipelineError,
    StorageBucketError,
    StorageUploadError,
    UnsupportedMessageTypeError,
)

__all__ = [
    "ChannelConfigError",
    "ChannelNotFoundError",
    "ErrorKind",
    "EventPublishError",
    "InvalidPayloadError",
    "MediaDownloadError",
    "MediaValidationError",
    "NormalizerNotFoundError",
    "PipelineError",
    "StorageBucketError",
    "StorageUploadError",
    "UnsupportedMessageTypeError",
]
