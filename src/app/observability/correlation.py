"""Contexto de rastreamento por requisição (correlation_id e tenant).

Os dois valores são injetados em todo log pelo CorrelationIdFilter.
Usa ContextVar para ser async-safe: cada mensagem de um batch concorrente
mantém o próprio contexto.

Uso:
    from app.observability import set_correlation_id, reset_correlation_id

    token = set_correlation_id(request.headers.get("x-correlation-id"))
    try:
        ...
    finally:
        reset_correlation_id(token)
"""

from __future__ import annotations

import uuid
from contextvars import ContextVar, Token

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")
_tenant_id: ContextVar[str] = ContextVar("tenant_id", default="")


def get_correlation_id() -> str:
    """Retorna o correlation_id do contexto atual (vazio se não definido)."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> Token[str]:
    """Define o correlation_id no contexto atual.

    Args:
        correlation_id: ID a definir. Se None, gera um novo UUID.

    Returns:
        Token para reset posterior via reset_correlation_id().
    """
    value = correlation_id or str(uuid.uuid4())
    return _correlation_id.set(value)


def reset_correlation_id(token: Token[str]) -> None:
    _correlation_id.reset(token)


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def get_tenant_id() -> str:
    """Retorna o tenant do contexto atual (vazio se não definido)."""
    return _tenant_id.get()


def set_tenant_id(tenant_id: str | int | None) -> Token[str]:
    """Define o tenant do contexto atual.

    Returns:
        Token para reset posterior via reset_tenant_id().
    """
    return _tenant_id.set("" if tenant_id is None else str(tenant_id))


def reset_tenant_id(token: Token[str]) -> None:
    _tenant_id.reset(token)
