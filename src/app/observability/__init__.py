"""Observabilidade: contexto de rastreamento e métricas estruturadas.

Uso:
    from app.observability import get_correlation_id, set_correlation_id
    from app.observability import record_latency, record_media_outcome
"""

from app.observability.correlation import (
    generate_correlation_id,
    get_correlation_id,
    get_tenant_id,
    reset_correlation_id,
    reset_tenant_id,
    set_correlation_id,
    set_tenant_id,
)
from app.observability.metrics import (
    record_decrypt_outcome,
    record_latency,
    record_media_outcome,
    record_publish,
)

__all__ = [
    "generate_correlation_id",
    "get_correlation_id",
    "get_tenant_id",
    "record_decrypt_outcome",
    "record_latency",
    "record_media_outcome",
    "record_publish",
    "reset_correlation_id",
    "reset_tenant_id",
    "set_correlation_id",
    "set_tenant_id",
]
