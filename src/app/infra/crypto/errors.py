"""Erros da decifragem de mídia WhatsApp.

Definido em app/infra para manter boundaries corretas; o pipeline de
ingestão decide pelo `kind` se re-tenta, degrada ou aborta.
"""

from __future__ import annotations

from utils.errors import ErrorKind, PipelineError


class MediaDecryptError(PipelineError):
    """Falha ao recuperar o plaintext de uma mídia cifrada.

    Nunca acompanha output parcial: ou o plaintext completo é retornado,
    ou este erro é levantado.

    Attributes:
        media_type: Categoria (image, video, audio, document)
        reason: Motivo curto e sem PII (ex: "mac_mismatch")
    """

    kind = ErrorKind.INTEGRITY

    def __init__(
        self,
        media_type: str,
        reason: str,
        *,
        kind: ErrorKind | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(
            f"WhatsApp Decrypt Error [{media_type}]: {reason}",
            kind=kind,
            cause=cause,
        )
        self.media_type = media_type
        self.reason = reason
