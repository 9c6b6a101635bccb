"""Settings específicas de WhatsApp.

Configurações dos providers WhatsApp (Graph API oficial e W-API).
Credenciais ficam no canal de cada tenant; aqui apenas defaults de transporte.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

# Constantes do Graph API
GRAPH_API_VERSION: str = "v22.0"
GRAPH_API_BASE_URL: str = "https://graph.facebook.com"


@dataclass(frozen=True)
class WhatsAppSettings:
    """Configurações de transporte dos providers WhatsApp.

    Attributes:
        api_version: Versão padrão da Graph API (canal pode sobrescrever)
        api_base_url: URL base da Graph API
        request_timeout_seconds: Timeout por chamada HTTP (media info/download)
        max_retries: Retries adicionais em erro transitório
        backoff_base_seconds: Delay base do backoff exponencial
        backoff_max_seconds: Teto do backoff
        media_max_size_bytes: Limite de tamanho de download de mídia
    """

    api_version: str = GRAPH_API_VERSION
    api_base_url: str = GRAPH_API_BASE_URL

    request_timeout_seconds: float = 30.0
    max_retries: int = 2
    backoff_base_seconds: float = 1.0
    backoff_max_seconds: float = 10.0

    media_max_size_bytes: int = 100 * 1024 * 1024  # 100MB

    @property
    def api_endpoint(self) -> str:
        """URL base completa da API com versão."""
        return f"{self.api_base_url}/{self.api_version}"

    def validate(self) -> list[str]:
        """Valida configurações mínimas de WhatsApp.

        Returns:
            Lista de erros de validação (vazia = tudo OK).
        """
        errors: list[str] = []

        if self.request_timeout_seconds <= 0:
            errors.append("WHATSAPP_REQUEST_TIMEOUT_SECONDS deve ser > 0")

        if self.max_retries < 0:
            errors.append("WHATSAPP_MAX_RETRIES deve ser >= 0")

        if self.media_max_size_bytes <= 0:
            errors.append("WHATSAPP_MEDIA_MAX_SIZE_BYTES deve ser > 0")

        return errors


def _load_from_env() -> WhatsAppSettings:
    """Carrega WhatsAppSettings a partir de variáveis de ambiente."""
    return WhatsAppSettings(
        api_version=os.getenv("WHATSAPP_API_VERSION", GRAPH_API_VERSION),
        api_base_url=os.getenv("WHATSAPP_API_BASE_URL", GRAPH_API_BASE_URL),
        request_timeout_seconds=float(
            os.getenv("WHATSAPP_REQUEST_TIMEOUT_SECONDS", "30")
        ),
        max_retries=int(os.getenv("WHATSAPP_MAX_RETRIES", "2")),
        backoff_base_seconds=float(os.getenv("WHATSAPP_BACKOFF_BASE_SECONDS", "1")),
        backoff_max_seconds=float(os.getenv("WHATSAPP_BACKOFF_MAX_SECONDS", "10")),
        media_max_size_bytes=int(
            os.getenv("WHATSAPP_MEDIA_MAX_SIZE_BYTES", str(100 * 1024 * 1024))
        ),
    )


@lru_cache(maxsize=1)
def get_whatsapp_settings() -> WhatsAppSettings:
    """Retorna instância cacheada de WhatsAppSettings.

    A cache garante singleton para múltiplas injeções.
    """
    return _load_from_env()
