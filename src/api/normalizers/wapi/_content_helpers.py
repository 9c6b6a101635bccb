"""Extração de conteúdo do msgContent W-API (formato Baileys).

Cada função recebe um bloco do msgContent e devolve o modelo canônico.
"""

from __future__ import annotations

from typing import Any

from api.normalizers._helpers import as_bool_flag, as_dict, as_float, as_int, as_list, as_str
from app.domain import (
    ContactContent,
    Dimensions,
    LocationContent,
    MediaContent,
    MessageContent,
    ProtocolContent,
    ProtocolKey,
    ReplyContent,
)

QUOTED_UNSUPPORTED_TEXT = "[Mensagem citada não suportada]"

# Blocos de mídia: chave no msgContent -> tipo canônico
MEDIA_BLOCKS: tuple[tuple[str, str], ...] = (
    ("extendedImageMessage", "image"),
    ("extendedVideoMessage", "video"),
    ("extendedAudioMessage", "audio"),
    ("imageMessage", "image"),
    ("videoMessage", "video"),
    ("audioMessage", "audio"),
)

# Wrappers que só encapsulam outra mensagem
WRAPPER_KEYS = ("ephemeralMessage", "viewOnceMessage", "viewOnceMessageV2")


def unwrap_content(msg_content: dict[str, Any]) -> dict[str, Any]:
    """Remove um nível de wrapper (ephemeral/viewOnce) se presente."""
    for key in WRAPPER_KEYS:
        inner = as_dict(as_dict(msg_content.get(key)).get("message"))
        if inner:
            return inner
    return msg_content


def document_block(msg_content: dict[str, Any]) -> dict[str, Any]:
    """documentMessage direto ou dentro de documentWithCaptionMessage."""
    wrapped = as_dict(msg_content.get("documentWithCaptionMessage"))
    if wrapped:
        nested = as_dict(as_dict(wrapped.get("message")).get("documentMessage"))
        return nested or wrapped
    return as_dict(msg_content.get("documentMessage"))


def build_media(
    block: dict[str, Any],
    media_type: str,
    *,
    with_thumbnail: bool = True,
) -> MediaContent:
    width = as_int(block.get("width"))
    height = as_int(block.get("height"))
    dimensions = Dimensions(width=width, height=height) if width and height else None
    return MediaContent(
        original_url=as_str(block.get("url")),
        mimetype=as_str(block.get("mimetype")) or "",
        file_size=as_int(block.get("fileLength")) or 0,
        duration=as_int(block.get("seconds")),
        dimensions=dimensions,
        caption=as_str(block.get("caption")),
        filename=as_str(block.get("fileName")) if media_type == "document" else None,
        thumbnail=as_str(block.get("jpegThumbnail")) if with_thumbnail else None,
        is_gif=as_bool_flag(block.get("gifPlayback")) if media_type == "video" else None,
        media_key=as_str(block.get("mediaKey")),
        file_sha256=as_str(block.get("fileSha256")),
        file_enc_sha256=as_str(block.get("fileEncSha256")),
        processed=False,
    )


def build_sticker(block: dict[str, Any]) -> MessageContent:
    """Sticker animado vira video; estático vira image."""
    media_type = "video" if as_bool_flag(block.get("isAnimated")) else "image"
    media = build_media(block, "image")
    return MessageContent(type=media_type, media=media)


def build_location(msg_content: dict[str, Any]) -> MessageContent | None:
    live = as_dict(msg_content.get("liveLocationMessage"))
    block = as_dict(msg_content.get("locationMessage")) or live
    if not block:
        return None
    return MessageContent(
        type="location",
        location=LocationContent(
            latitude=as_float(block.get("degreesLatitude")) or 0.0,
            longitude=as_float(block.get("degreesLongitude")) or 0.0,
            name=as_str(block.get("name")),
            address=as_str(block.get("address")),
            thumbnail=as_str(block.get("jpegThumbnail")),
            is_live=bool(live),
        ),
    )


def build_contact(block: dict[str, Any]) -> ContactContent:
    return ContactContent(
        name=as_str(block.get("displayName")) or "",
        vcard=as_str(block.get("vcard")) or "",
    )


def build_contacts(block: dict[str, Any]) -> MessageContent:
    contacts = [build_contact(as_dict(item)) for item in as_list(block.get("contacts"))]
    return MessageContent(type="contacts", contacts=contacts)


def build_protocol(block: dict[str, Any]) -> MessageContent:
    key = as_dict(block.get("key"))
    return MessageContent(
        type="protocol",
        protocol=ProtocolContent(
            key=ProtocolKey(
                remote_jid=as_str(key.get("remoteJid")) or "",
                from_me=bool(key.get("fromMe")),
                id=as_str(key.get("id")) or "",
            ),
            type=block.get("type", 0),
        ),
    )


def selected_reply_text(msg_content: dict[str, Any]) -> str | None:
    """Texto da opção escolhida em botões, listas e templates."""
    buttons = as_dict(msg_content.get("buttonsResponseMessage"))
    if buttons:
        return as_str(buttons.get("selectedDisplayText") or buttons.get("selectedButtonId")) or ""
    listing = as_dict(msg_content.get("listResponseMessage"))
    if listing:
        row = as_dict(listing.get("singleSelectReply")).get("selectedRowId")
        return as_str(listing.get("title") or row) or ""
    template = as_dict(msg_content.get("templateButtonReplyMessage"))
    if template:
        return as_str(template.get("selectedDisplayText") or template.get("selectedId")) or ""
    return None


def normalize_quoted(quoted: dict[str, Any]) -> MessageContent:
    """Normaliza a mensagem citada (um nível, sem citações de citações)."""
    if quoted.get("conversation"):
        return MessageContent(type="text", text=as_str(quoted["conversation"]))
    extended = as_dict(quoted.get("extendedTextMessage"))
    if extended.get("text"):
        return MessageContent(type="text", text=as_str(extended["text"]))
    for key, media_type in (
        ("imageMessage", "image"),
        ("videoMessage", "video"),
        ("audioMessage", "audio"),
    ):
        block = as_dict(quoted.get(key))
        if block:
            return MessageContent(
                type=media_type,
                media=build_media(block, media_type, with_thumbnail=False),
            )
    doc = document_block(quoted)
    if doc:
        media = build_media(doc, "document", with_thumbnail=False)
        return MessageContent(type="document", media=media)
    return MessageContent(type="text", text=QUOTED_UNSUPPORTED_TEXT)


def build_reply(context_info: dict[str, Any]) -> ReplyContent | None:
    quoted = as_dict(context_info.get("quotedMessage"))
    if not quoted:
        return None
    return ReplyContent(
        message_id=as_str(context_info.get("stanzaId")),
        participant=as_str(context_info.get("participant")),
        quoted_message=normalize_quoted(quoted),
    )
