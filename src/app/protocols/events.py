"""Protocolo do event stream de saída."""

from __future__ import annotations

from typing import Any, Protocol


class EventPublisherProtocol(Protocol):
    """Publicação única no stream; falha levanta EventPublishError.

    Retry, se houver, pertence ao adapter e não ao pipeline.
    """

    async def publish(self, topic: str, key: str, value: dict[str, Any]) -> None: ...
