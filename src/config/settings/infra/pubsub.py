"""Settings do Pub/Sub.

Configurações do event stream para onde as mensagens canônicas são publicadas.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

PublisherBackend = Literal["memory", "pubsub"]


@dataclass(frozen=True)
class PubSubSettings:
    """Configurações do Pub/Sub.

    Attributes:
        backend: Backend do publisher (memory|pubsub)
        topic: Tópico único de eventos do gateway
        publish_timeout_seconds: Timeout para confirmação do publish
    """

    backend: PublisherBackend = "memory"
    topic: str = "whatsapp"
    publish_timeout_seconds: float = 10.0

    def validate(self, gcp_project: str, is_dev: bool) -> list[str]:
        """Valida configurações do Pub/Sub.

        Args:
            gcp_project: Projeto GCP.
            is_dev: Se está em desenvolvimento.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if not self.topic:
            errors.append("PUBSUB_TOPIC não pode ser vazio")

        if self.backend == "memory" and not is_dev:
            errors.append("PUBSUB_BACKEND=memory proibido em staging/production")

        if self.backend == "pubsub" and not gcp_project:
            errors.append("PUBSUB_BACKEND=pubsub requer GCP_PROJECT")

        if self.publish_timeout_seconds <= 0:
            errors.append("PUBSUB_PUBLISH_TIMEOUT_SECONDS deve ser > 0")

        return errors


def _load_pubsub_from_env() -> PubSubSettings:
    """Carrega PubSubSettings de variáveis de ambiente."""
    backend_str = os.getenv("PUBSUB_BACKEND", "memory").lower()
    backend: PublisherBackend = "pubsub" if backend_str == "pubsub" else "memory"

    return PubSubSettings(
        backend=backend,
        topic=os.getenv("PUBSUB_TOPIC", "whatsapp"),
        publish_timeout_seconds=float(os.getenv("PUBSUB_PUBLISH_TIMEOUT_SECONDS", "10")),
    )


@lru_cache(maxsize=1)
def get_pubsub_settings() -> PubSubSettings:
    """Retorna instância cacheada de PubSubSettings."""
    return _load_pubsub_from_env()
