"""Detecção de mimetype por magic bytes do plaintext."""

from __future__ import annotations

from .constants import FALLBACK_MIMETYPES, SNIFF_HEADER_SIZE

_PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def fallback_mimetype(media_type: str) -> str:
    return FALLBACK_MIMETYPES.get(media_type, "application/octet-stream")


def sniff_mimetype(data: bytes, media_type: str) -> str:
    """Detecta mimetype pelos primeiros 12 bytes.

    Assinaturas: JPEG, PNG, GIF, WebP, MP4 (ftyp), PDF e OGG. Sem match
    (ou buffer curto) cai no default da categoria.
    """
    if len(data) < SNIFF_HEADER_SIZE:
        return fallback_mimetype(media_type)

    header = data[:SNIFF_HEADER_SIZE]
    if header[:3] == b"\xff\xd8\xff":
        return "image/jpeg"
    if header[:8] == _PNG_SIGNATURE:
        return "image/png"
    if header[:4] == b"GIF8":
        return "image/gif"
    if header[:4] == b"RIFF" and header[8:12] == b"WEBP":
        return "image/webp"
    if header[4:8] == b"ftyp":
        return "video/mp4"
    if header[:4] == b"%PDF":
        return "application/pdf"
    if header[:4] == b"OggS":
        return "video/ogg" if media_type == "video" else "audio/ogg"
    return fallback_mimetype(media_type)
