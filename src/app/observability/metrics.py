"""Registro de métricas via structured logging.

As métricas são emitidas como logs estruturados (metric_type no payload)
e agregadas depois pelo coletor (Cloud Logging / BigQuery).

Métricas suportadas:
- Latência: tempo de execução por componente/operação
- Mídia: outcome do processamento de mídia por mensagem
- Decrypt: outcome da decifragem de mídia WhatsApp
- Publish: outcome da publicação no stream de eventos

Uso:
    from app.observability import record_latency, record_media_outcome

    start = time.perf_counter()
    # ... operação ...
    record_latency("media_ingestion", "process_message", elapsed_ms)
    record_media_outcome("waba", "image", "success", latency_ms=elapsed_ms)
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def record_latency(
    component: str,
    operation: str,
    latency_ms: float,
    correlation_id: str | None = None,
) -> None:
    """Registra latência de operação.

    Args:
        component: Nome do componente (ex: "media_ingestion", "webhook")
        operation: Nome da operação (ex: "process_message", "publish")
        latency_ms: Latência em milissegundos
        correlation_id: ID de correlação (default: contexto atual)
    """
    extra: dict[str, object] = {
        "metric_type": "latency",
        "component": component,
        "operation": operation,
        "latency_ms": round(latency_ms, 2),
    }
    if correlation_id:
        extra["correlation_id"] = correlation_id
    logger.info("metric_latency", extra=extra)


def record_media_outcome(
    provider: str,
    content_type: str,
    outcome: str,
    *,
    error_kind: str | None = None,
    latency_ms: float | None = None,
) -> None:
    """Registra outcome do processamento de mídia.

    Args:
        provider: Provedor de origem (wapi, waba)
        content_type: Tipo de conteúdo (image, video, audio, document, location)
        outcome: "success", "skipped" ou "error"
        error_kind: Categoria do erro quando outcome != success
        latency_ms: Tempo total do processamento
    """
    extra: dict[str, object] = {
        "metric_type": "media_outcome",
        "component": "media_ingestion",
        "provider": provider,
        "content_type": content_type,
        "outcome": outcome,
    }
    if error_kind:
        extra["error_kind"] = error_kind
    if latency_ms is not None:
        extra["latency_ms"] = round(latency_ms, 2)
    logger.info("metric_media_outcome", extra=extra)


def record_decrypt_outcome(
    media_type: str,
    outcome: str,
    *,
    reason: str | None = None,
    size_bytes: int | None = None,
) -> None:
    """Registra outcome da decifragem de mídia.

    Args:
        media_type: Categoria WhatsApp (image, video, audio, document)
        outcome: "success" ou "failure"
        reason: Motivo curto da falha (sem PII)
        size_bytes: Tamanho do plaintext quando sucesso
    """
    extra: dict[str, object] = {
        "metric_type": "decrypt_outcome",
        "component": "media_decrypt",
        "media_type": media_type,
        "outcome": outcome,
    }
    if reason:
        extra["reason"] = reason
    if size_bytes is not None:
        extra["size_bytes"] = size_bytes
    logger.info("metric_decrypt_outcome", extra=extra)


def record_publish(
    topic: str,
    event_type: str,
    outcome: str,
    *,
    latency_ms: float | None = None,
) -> None:
    """Registra publicação no stream de eventos.

    Args:
        topic: Tópico de destino
        event_type: message-received, status-message ou connection-status
        outcome: "success" ou "failure"
        latency_ms: Tempo da publicação
    """
    extra: dict[str, object] = {
        "metric_type": "publish",
        "component": "event_publisher",
        "topic": topic,
        "event_type": event_type,
        "outcome": outcome,
    }
    if latency_ms is not None:
        extra["latency_ms"] = round(latency_ms, 2)
    logger.info("metric_publish", extra=extra)
