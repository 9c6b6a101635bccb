"""Tenant e Channel consumidos pelo pipeline.

A identidade do tenant chega resolvida pela camada de transporte e é
confiada como está; aqui só existe a busca de canal por platform id.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from utils.errors import ChannelNotFoundError


class ProviderName(str, Enum):
    """Conjunto fechado de providers suportados."""

    WAPI = "wapi"
    WABA = "waba"


class Channel(BaseModel):
    """Vínculo de um provider + credenciais a um endereço da plataforma."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    platform_id: str = Field(
        ...,
        validation_alias=AliasChoices("platformId", "platform_id", "identify"),
        description="Identificador na plataforma (phone_number_id ou instanceId).",
    )
    provider: ProviderName
    active: bool = True
    description: str = ""
    config: dict[str, Any] = Field(default_factory=dict)

    @field_validator("provider", mode="before")
    @classmethod
    def _unwrap_provider(cls, value: Any) -> Any:
        # Aceita {"name": "waba"} além do nome puro
        if isinstance(value, dict):
            return value.get("name")
        return value

    @field_validator("platform_id", mode="before")
    @classmethod
    def _coerce_platform_id(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value


class Tenant(BaseModel):
    """Tenant dono das mensagens em processamento."""

    model_config = ConfigDict(extra="ignore")

    id: int | str
    uuid: str
    name: str = ""
    active: bool = True
    channels: list[Channel] = Field(default_factory=list)

    def find_channel(self, platform_id: str | None) -> Channel | None:
        """Busca exata por platform id, apenas canais ativos."""
        if not platform_id:
            return None
        for channel in self.channels:
            if channel.active and channel.platform_id == platform_id:
                return channel
        return None

    def require_channel(self, platform_id: str | None) -> Channel:
        """Como find_channel, mas falha fechado.

        Raises:
            ChannelNotFoundError: nenhum canal ativo com esse platform id.
        """
        channel = self.find_channel(platform_id)
        if channel is None:
            raise ChannelNotFoundError(platform_id)
        return channel
