"""Protocolos de normalização inbound."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal, Protocol

if TYPE_CHECKING:
    from app.domain import CanonicalMessage, ConnectionStatus, MessageStatus, ProviderName, Tenant

EventType = Literal["message", "status", "connection"]


class MessageNormalizerProtocol(Protocol):
    """Contrato de um normalizer por formato de provider.

    `can_handle` é puro e total: nunca levanta exceção, qualquer entrada
    que não seja um dict reconhecível retorna False.
    """

    provider: ProviderName

    def can_handle(self, payload: Any) -> bool: ...

    def event_type(self, payload: dict[str, Any]) -> EventType: ...

    async def normalize(self, payload: dict[str, Any], tenant: Tenant) -> CanonicalMessage: ...

    def normalize_status(self, payload: dict[str, Any]) -> MessageStatus: ...

    def normalize_connection_status(self, payload: dict[str, Any]) -> ConnectionStatus: ...


class NormalizerDispatcherProtocol(Protocol):
    """Seleção do normalizer pela forma do payload (lado do use case)."""

    def event_type(self, payload: Any) -> EventType: ...

    async def normalize(self, payload: Any, tenant: Tenant) -> CanonicalMessage: ...

    def normalize_status(self, payload: Any) -> MessageStatus: ...

    def normalize_connection_status(self, payload: Any) -> ConnectionStatus: ...
