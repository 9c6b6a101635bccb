"""Settings do Google Cloud Storage.

Configurações para os buckets de mídia por tenant.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

VALID_STORAGE_CLASSES = frozenset({"STANDARD", "NEARLINE", "COLDLINE", "ARCHIVE"})


@dataclass(frozen=True)
class GCSSettings:
    """Configurações do Google Cloud Storage.

    Attributes:
        location: Região dos buckets criados (ex: southamerica-east1)
        storage_class: Classe de armazenamento aplicada em cada objeto
        kms_key_name: Chave CMEK para criptografia server-side (opcional)
        bucket_prefix: Prefixo aplicado ao nome do bucket do tenant
        timeout_seconds: Timeout de cada chamada ao GCS
    """

    location: str = "us-east1"
    storage_class: str = "NEARLINE"
    kms_key_name: str = ""
    bucket_prefix: str = ""
    timeout_seconds: float = 60.0

    def validate(self) -> list[str]:
        """Valida configurações do GCS.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if not self.location:
            errors.append("GCS_LOCATION não pode ser vazio")

        if self.storage_class not in VALID_STORAGE_CLASSES:
            errors.append(f"GCS_STORAGE_CLASS inválido: {self.storage_class}")

        if self.timeout_seconds <= 0:
            errors.append("GCS_TIMEOUT_SECONDS deve ser > 0")

        return errors


def _load_gcs_from_env() -> GCSSettings:
    """Carrega GCSSettings de variáveis de ambiente."""
    return GCSSettings(
        location=os.getenv("GCS_LOCATION", "us-east1"),
        storage_class=os.getenv("GCS_STORAGE_CLASS", "NEARLINE").upper(),
        kms_key_name=os.getenv("GCS_KMS_KEY_NAME", ""),
        bucket_prefix=os.getenv("GCS_BUCKET_PREFIX", ""),
        timeout_seconds=float(os.getenv("GCS_TIMEOUT_SECONDS", "60")),
    )


@lru_cache(maxsize=1)
def get_gcs_settings() -> GCSSettings:
    """Retorna instância cacheada de GCSSettings."""
    return _load_gcs_from_env()
