"""Formatters de logging estruturado.

Define o formatter JSON com os campos obrigatórios de todo log do gateway.
"""

from __future__ import annotations

from pythonjsonlogger.json import JsonFormatter

# Ordem fixa para facilitar leitura no coletor
REQUIRED_LOG_FIELDS = (
    "asctime",
    "levelname",
    "name",
    "message",
    "correlation_id",
    "tenant_id",
    "service",
)

FIELD_RENAME_MAP = {
    "levelname": "level",
    "name": "logger",
    "asctime": "timestamp",
}


def create_json_formatter() -> JsonFormatter:
    """Cria formatter JSON com campos padronizados.

    Exemplo de output:
        {
            "timestamp": "2026-02-02T10:30:00",
            "level": "INFO",
            "logger": "app.services.media_ingestion",
            "message": "media_processed",
            "correlation_id": "abc-123",
            "tenant_id": "42",
            "service": "wa_gateway"
        }
    """
    format_string = " ".join(f"%({field})s" for field in REQUIRED_LOG_FIELDS)

    return JsonFormatter(
        format_string,
        rename_fields=FIELD_RENAME_MAP,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
