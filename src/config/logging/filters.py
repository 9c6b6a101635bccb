"""Filters de logging para injeção de contexto.

Campos injetados em todo record:
- correlation_id: ID de rastreamento do webhook
- tenant_id: tenant dono da mensagem em processamento
- service: Nome do serviço (ex: wa_gateway)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


class CorrelationIdFilter(logging.Filter):
    """Injeta correlation_id, tenant_id e service em cada record de log.

    Importante: nunca adicionar payloads brutos ou PII nos logs.

    Args:
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Função que retorna o correlation_id atual.
        tenant_id_getter: Função que retorna o tenant do contexto atual.
    """

    def __init__(
        self,
        service_name: str,
        correlation_id_getter: Callable[[], str] | None = None,
        tenant_id_getter: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._get_correlation_id = correlation_id_getter or (lambda: "")
        self._get_tenant_id = tenant_id_getter or (lambda: "")

    def filter(self, record: logging.LogRecord) -> bool:
        """Enriquece o record preservando valores passados via `extra`."""
        existing = getattr(record, "correlation_id", None)
        record.correlation_id = existing if existing else self._get_correlation_id()
        tenant = getattr(record, "tenant_id", None)
        record.tenant_id = tenant if tenant else self._get_tenant_id()
        record.service = self._service_name
        return True
