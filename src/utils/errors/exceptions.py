"""Exceções tipadas do pipeline de normalização e mídia.

Cada componente falha com um erro estreito que carrega um `ErrorKind`.
O orquestrador decide pelo `kind` (nunca por matching de string) se
continua em modo degradado ou aborta a mensagem.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Taxonomia de falhas do pipeline."""

    VALIDATION = "validation"
    TRANSIENT = "transient"
    INTEGRITY = "integrity"
    ADVISORY = "advisory"
    RESOLUTION = "resolution"
    DEGRADED = "degraded"


class PipelineError(Exception):
    """Base para falhas do pipeline com tipo explícito e causa encadeada."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        if kind is not None:
            self.kind = kind
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    @property
    def is_aborting(self) -> bool:
        """Validação e resolução sempre abortam a mensagem."""
        return self.kind in (ErrorKind.VALIDATION, ErrorKind.RESOLUTION)


class InvalidPayloadError(PipelineError):
    """Payload com campos obrigatórios ausentes ou malformados."""

    kind = ErrorKind.VALIDATION


class UnsupportedMessageTypeError(PipelineError):
    """Formato de mensagem impossível de interpretar."""

    kind = ErrorKind.VALIDATION


class NormalizerNotFoundError(PipelineError):
    """Nenhum normalizer reconhece o payload."""

    kind = ErrorKind.RESOLUTION


class ChannelNotFoundError(PipelineError):
    """Nenhum canal ativo do tenant corresponde ao platform id."""

    kind = ErrorKind.RESOLUTION

    def __init__(self, platform_id: str | None) -> None:
        super().__init__(f"Nenhum canal encontrado para platform_id={platform_id!r}")
        self.platform_id = platform_id


class MediaValidationError(PipelineError):
    """Sub-registro de mídia inválido para ingestão."""

    kind = ErrorKind.VALIDATION


class MediaDownloadError(PipelineError):
    """Falha de transporte ao baixar mídia (após retries)."""

    kind = ErrorKind.TRANSIENT


class StorageUploadError(PipelineError):
    """Upload para o storage falhou após todas as tentativas."""

    kind = ErrorKind.TRANSIENT

    def __init__(self, attempts: int, cause: BaseException) -> None:
        super().__init__(
            f"Upload falhou após {attempts} tentativas: {cause}",
            cause=cause,
        )
        self.attempts = attempts


class StorageBucketError(PipelineError):
    """Falha ao verificar ou criar bucket do tenant."""

    kind = ErrorKind.TRANSIENT


class EventPublishError(PipelineError):
    """Publicação no event stream falhou (sempre aborta o pipeline)."""

    kind = ErrorKind.TRANSIENT


class ChannelConfigError(PipelineError):
    """Canal resolvido mas sem as credenciais exigidas pelo provider."""

    kind = ErrorKind.RESOLUTION
