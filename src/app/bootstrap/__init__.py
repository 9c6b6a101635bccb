"""Bootstrap da aplicação — inicialização e wiring.

Este módulo é o composition root: configura logging, valida settings e
conecta implementações concretas aos protocolos.

Uso:
    from app.bootstrap import initialize_app, get_webhook_processor

    # Na inicialização do serviço
    initialize_app()

    # Obter o processor (singleton)
    processor = get_webhook_processor()
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import TYPE_CHECKING

from app.observability import get_correlation_id, get_tenant_id
from config.logging import configure_logging
from config.settings import (
    get_base_settings,
    get_gcs_settings,
    get_media_settings,
    get_pubsub_settings,
    get_whatsapp_settings,
)

if TYPE_CHECKING:
    from app.use_cases.webhook import WebhookProcessor

# Nome do serviço para logs e métricas
SERVICE_NAME = "wa_gateway"

# Nível de log padrão (pode ser sobrescrito por env)
DEFAULT_LOG_LEVEL = "INFO"
STRICT_VALIDATION_ENVS = {"staging", "production"}

logger = logging.getLogger(__name__)


def initialize_app() -> None:
    """Inicializa a aplicação com todas as configurações necessárias.

    Deve ser chamada uma vez no início do serviço.
    """
    log_level = os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()

    configure_logging(
        level=log_level,
        service_name=SERVICE_NAME,
        correlation_id_getter=get_correlation_id,
        tenant_id_getter=get_tenant_id,
    )


def collect_settings_errors() -> list[str]:
    """Erros de todas as settings, prefixados pelo domínio."""
    base = get_base_settings()
    errors: list[str] = []
    errors.extend(f"base: {error}" for error in base.validate())
    errors.extend(f"whatsapp: {error}" for error in get_whatsapp_settings().validate())
    errors.extend(f"media: {error}" for error in get_media_settings().validate())
    errors.extend(f"gcs: {error}" for error in get_gcs_settings().validate())
    pubsub_errors = get_pubsub_settings().validate(base.gcp_project, base.is_development)
    errors.extend(f"pubsub: {error}" for error in pubsub_errors)
    return errors


def validate_runtime_settings() -> None:
    """Valida settings obrigatórias no startup.

    Em `staging`/`production` falha rápido para impedir boot inválido.
    Em `development` mantém alerta sem bloquear execução local.
    """
    environment = get_base_settings().environment
    strict_mode = environment in STRICT_VALIDATION_ENVS
    errors = collect_settings_errors()

    if not errors:
        logger.info(
            "settings_validated",
            extra={"component": "bootstrap", "result": "ok", "environment": environment},
        )
        return

    logger.warning(
        "settings_validation_failed",
        extra={
            "component": "bootstrap",
            "result": "failed",
            "environment": environment,
            "error_count": len(errors),
            "errors": errors,
        },
    )
    if strict_mode:
        details = "\n".join(f"- {error}" for error in errors)
        raise RuntimeError(f"Configuração inválida para {environment}:\n{details}")


@lru_cache(maxsize=1)
def get_webhook_processor() -> WebhookProcessor:
    """Obtém o WebhookProcessor (singleton com clientes compartilhados)."""
    from app.bootstrap.dependencies import create_webhook_processor

    return create_webhook_processor()


__all__ = [
    "SERVICE_NAME",
    "collect_settings_errors",
    "get_webhook_processor",
    "initialize_app",
    "validate_runtime_settings",
]
