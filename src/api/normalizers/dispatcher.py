"""Seleção do normalizer por formato de payload.

A ordem é fixa e a primeira implementação cujo `can_handle` aceita o
payload vence. Os predicados são mutuamente exclusivos (`event` W-API
vs `object` Graph API), então a ordem só importa para novos providers.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from utils.errors import NormalizerNotFoundError

from .wapi import WApiNormalizer
from .waba import WabaNormalizer

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from app.domain import CanonicalMessage, Channel, ConnectionStatus, MessageStatus, Tenant
    from app.protocols import EventType, MessageNormalizerProtocol, ProviderMediaClientProtocol

logger = logging.getLogger(__name__)


class NormalizerDispatcher:
    """Roteia payloads para o normalizer do provider."""

    def __init__(self, normalizers: Sequence[MessageNormalizerProtocol]) -> None:
        self._normalizers: tuple[MessageNormalizerProtocol, ...] = tuple(normalizers)

    @property
    def normalizers(self) -> tuple[MessageNormalizerProtocol, ...]:
        return self._normalizers

    def resolve(self, payload: Any) -> MessageNormalizerProtocol:
        """Primeiro normalizer que reconhece o payload.

        Raises:
            NormalizerNotFoundError: nenhum formato reconhecido.
        """
        for normalizer in self._normalizers:
            if normalizer.can_handle(payload):
                return normalizer
        logger.warning(
            "normalizer_not_found",
            extra={"payload_type": type(payload).__name__, "payload_keys": _top_keys(payload)},
        )
        raise NormalizerNotFoundError("Nenhum normalizer reconhece o payload recebido")

    def event_type(self, payload: Any) -> EventType:
        return self.resolve(payload).event_type(payload)

    async def normalize(self, payload: Any, tenant: Tenant) -> CanonicalMessage:
        return await self.resolve(payload).normalize(payload, tenant)

    def normalize_status(self, payload: Any) -> MessageStatus:
        return self.resolve(payload).normalize_status(payload)

    def normalize_connection_status(self, payload: Any) -> ConnectionStatus:
        return self.resolve(payload).normalize_connection_status(payload)


def create_dispatcher(
    media_client_factory: Callable[[Channel], ProviderMediaClientProtocol],
) -> NormalizerDispatcher:
    """Dispatcher padrão: W-API antes de WABA."""
    return NormalizerDispatcher((WApiNormalizer(), WabaNormalizer(media_client_factory)))


def _top_keys(payload: Any) -> list[str]:
    if not isinstance(payload, dict):
        return []
    return sorted(str(key) for key in payload)[:10]
