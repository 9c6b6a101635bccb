"""Settings do pipeline de ingestão de mídia."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

MAX_BATCH_SIZE = 100


@dataclass(frozen=True)
class MediaSettings:
    """Configurações do pipeline de mídia.

    Attributes:
        url_expires_in_seconds: Validade da URL assinada entregue downstream
        skip_on_error: Continua sem mídia quando a ingestão falha
        upload_max_retries: Tentativas máximas de upload
        batch_concurrency: Largura de concorrência do processamento em lote
        batch_max_size: Tamanho máximo de um lote
    """

    url_expires_in_seconds: int = 86400  # 24h para o consumidor processar
    skip_on_error: bool = True
    upload_max_retries: int = 3
    batch_concurrency: int = 5
    batch_max_size: int = MAX_BATCH_SIZE

    def validate(self) -> list[str]:
        """Valida configurações do pipeline de mídia."""
        errors: list[str] = []

        if self.url_expires_in_seconds <= 0:
            errors.append("MEDIA_URL_EXPIRES_IN_SECONDS deve ser > 0")

        # Limite de 7 dias das URLs assinadas V4
        if self.url_expires_in_seconds > 7 * 24 * 3600:
            errors.append("MEDIA_URL_EXPIRES_IN_SECONDS deve ser <= 604800")

        if self.upload_max_retries < 1:
            errors.append("MEDIA_UPLOAD_MAX_RETRIES deve ser >= 1")

        if self.batch_concurrency < 1:
            errors.append("MEDIA_BATCH_CONCURRENCY deve ser >= 1")

        if not 1 <= self.batch_max_size <= MAX_BATCH_SIZE:
            errors.append(f"MEDIA_BATCH_MAX_SIZE deve estar entre 1 e {MAX_BATCH_SIZE}")

        return errors


def _load_media_from_env() -> MediaSettings:
    """Carrega MediaSettings de variáveis de ambiente."""
    return MediaSettings(
        url_expires_in_seconds=int(os.getenv("MEDIA_URL_EXPIRES_IN_SECONDS", "86400")),
        skip_on_error=os.getenv("MEDIA_SKIP_ON_ERROR", "true").lower() in ("true", "1"),
        upload_max_retries=int(os.getenv("MEDIA_UPLOAD_MAX_RETRIES", "3")),
        batch_concurrency=int(os.getenv("MEDIA_BATCH_CONCURRENCY", "5")),
        batch_max_size=int(os.getenv("MEDIA_BATCH_MAX_SIZE", str(MAX_BATCH_SIZE))),
    )


@lru_cache(maxsize=1)
def get_media_settings() -> MediaSettings:
    """Retorna instância cacheada de MediaSettings."""
    return _load_media_from_env()
