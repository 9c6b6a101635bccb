"""Mensagem canônica: esquema único para qualquer provider.

Serializada em camelCase (contrato com consumidores do event stream).
Construída uma vez na normalização; depois só a ingestão de mídia e a de
thumbnail de localização alteram campos, antes da publicação.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

ContentType = Literal[
    "text",
    "image",
    "video",
    "audio",
    "document",
    "location",
    "contact",
    "contacts",
    "protocol",
]

MEDIA_CONTENT_TYPES: frozenset[str] = frozenset({"image", "video", "audio", "document"})

_VARIANT_FIELD: dict[str, str] = {
    "text": "text",
    "image": "media",
    "video": "media",
    "audio": "media",
    "document": "media",
    "location": "location",
    "contact": "contact",
    "contacts": "contacts",
    "protocol": "protocol",
}


class CanonicalModel(BaseModel):
    """Base com aliases camelCase e aceitação por nome de campo."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_payload(self) -> dict[str, Any]:
        """Dict camelCase sem campos nulos (formato publicado)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Dimensions(CanonicalModel):
    width: int
    height: int


class MediaContent(CanonicalModel):
    """Sub-registro de mídia.

    `processed` só é True quando as coordenadas de storage e a URL
    assinada estão preenchidas (ver mark_stored).
    """

    original_url: str | None = None
    mimetype: str = ""
    file_size: int = 0
    duration: int | None = None
    dimensions: Dimensions | None = None
    caption: str | None = None
    filename: str | None = None
    thumbnail: str | None = None
    is_gif: bool | None = None

    media_key: str | None = None
    file_sha256: str | None = None
    file_enc_sha256: str | None = None

    processed: bool = False
    url: str | None = None
    storage_bucket: str | None = None
    storage_key: str | None = None
    storage_region: str | None = None
    url_expires_at: str | None = None
    content_type: str | None = None
    uploaded_at: str | None = None

    @property
    def is_encrypted(self) -> bool:
        """mediaKey presente e URL de objeto cifrado hospedado pelo WhatsApp."""
        url = self.original_url or ""
        return bool(self.media_key) and (".enc" in url or "whatsapp.net" in url)

    def mark_stored(
        self,
        *,
        bucket: str,
        key: str,
        region: str,
        url: str,
        url_expires_at: str,
        content_type: str,
        uploaded_at: str,
        file_size: int,
    ) -> None:
        """Troca a referência transitória pela referência persistida."""
        self.storage_bucket = bucket
        self.storage_key = key
        self.storage_region = region
        self.url = url
        self.url_expires_at = url_expires_at
        self.content_type = content_type
        self.mimetype = content_type
        self.uploaded_at = uploaded_at
        self.file_size = file_size
        self.processed = True


class LocationContent(CanonicalModel):
    latitude: float
    longitude: float
    name: str | None = None
    address: str | None = None
    thumbnail: str | None = None
    is_live: bool | None = None


class ContactContent(CanonicalModel):
    name: str = ""
    vcard: str = ""


class ProtocolKey(CanonicalModel):
    remote_jid: str = ""
    from_me: bool = False
    id: str = ""


class ProtocolContent(CanonicalModel):
    key: ProtocolKey
    type: int | str | None = None


class ReplyContent(CanonicalModel):
    message_id: str | None = None
    participant: str | None = None
    quoted_message: MessageContent


class MessageContent(CanonicalModel):
    """União de conteúdo: `type` define qual variante está preenchida."""

    type: ContentType
    text: str | None = None
    media: MediaContent | None = None
    location: LocationContent | None = None
    contact: ContactContent | None = None
    contacts: list[ContactContent] | None = None
    protocol: ProtocolContent | None = None
    reply: ReplyContent | None = None

    @model_validator(mode="after")
    def _check_variant(self) -> MessageContent:
        active = _VARIANT_FIELD[self.type]
        if getattr(self, active) is None:
            raise ValueError(f"content.{active} é obrigatório para type={self.type}")
        for field_name in set(_VARIANT_FIELD.values()) - {active}:
            if getattr(self, field_name) is not None:
                raise ValueError(f"content.{field_name} não permitido para type={self.type}")
        return self

    @property
    def has_media(self) -> bool:
        return self.type in MEDIA_CONTENT_TYPES and self.media is not None


class ChatInfo(CanonicalModel):
    id: str
    profile_picture: str | None = None


class SenderInfo(CanonicalModel):
    id: str
    name: str | None = None
    profile_picture: str | None = None
    verified_biz_name: str | None = None


class ProviderInfo(CanonicalModel):
    name: str
    original_payload: dict[str, Any] = Field(default_factory=dict)


class CanonicalMessage(CanonicalModel):
    """Mensagem normalizada publicada no event stream."""

    message_id: str
    message_ref_id: str | None = None
    forwarded: bool = False
    instance_id: str = ""
    connected_phone: str = ""
    from_me: bool = False
    is_group: bool = False
    timestamp: int
    chat: ChatInfo
    sender: SenderInfo
    content: MessageContent
    provider: ProviderInfo


class MessageStatus(CanonicalModel):
    """Registro reduzido de mudança de status (nunca mesclado à mensagem)."""

    message_id: str
    instance_id: str = ""
    connected_phone: str = ""
    from_me: bool = False
    is_group: bool = False
    timestamp: int
    status: str


class ConnectionStatus(CanonicalModel):
    status: Literal["connected", "disconnected"]
    instance_id: str = ""
    event_moment: int


ReplyContent.model_rebuild()
