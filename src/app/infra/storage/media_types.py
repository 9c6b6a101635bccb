"""Tabelas de mimetype/extensão usadas na ingestão de mídia."""

from __future__ import annotations

from pathlib import PurePosixPath
from urllib.parse import urlparse

EXTENSION_BY_MIMETYPE: dict[str, str] = {
    # Imagens
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/bmp": ".bmp",
    "image/tiff": ".tiff",
    "image/svg+xml": ".svg",
    # Vídeos
    "video/mp4": ".mp4",
    "video/avi": ".avi",
    "video/quicktime": ".mov",
    "video/webm": ".webm",
    "video/mkv": ".mkv",
    "video/flv": ".flv",
    "video/wmv": ".wmv",
    "video/3gpp": ".3gp",
    # Áudios
    "audio/mpeg": ".mp3",
    "audio/mp3": ".mp3",
    "audio/ogg": ".ogg",
    "audio/wav": ".wav",
    "audio/mp4": ".m4a",
    "audio/aac": ".aac",
    "audio/amr": ".amr",
    "audio/flac": ".flac",
    "audio/wma": ".wma",
    # Documentos
    "application/pdf": ".pdf",
    "application/msword": ".doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ".docx",
    "application/vnd.ms-excel": ".xls",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": ".xlsx",
    "application/vnd.ms-powerpoint": ".ppt",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation": ".pptx",
    "text/plain": ".txt",
    "text/csv": ".csv",
    "application/json": ".json",
    "application/xml": ".xml",
    "text/html": ".html",
    # Compactados
    "application/zip": ".zip",
    "application/x-rar-compressed": ".rar",
    "application/x-7z-compressed": ".7z",
    "application/gzip": ".gz",
}

DEFAULT_EXTENSION = ".bin"

SUPPORTED_MIMETYPE_PREFIXES: tuple[str, ...] = (
    "image/",
    "video/",
    "audio/",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument",
    "application/vnd.ms-excel",
    "application/vnd.ms-powerpoint",
    "text/plain",
    "text/csv",
    "application/json",
)

_MIMETYPE_BY_URL_EXTENSION: dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".mp4": "video/mp4",
    ".mov": "video/quicktime",
    ".avi": "video/avi",
    ".mp3": "audio/mpeg",
    ".ogg": "audio/ogg",
    ".wav": "audio/wav",
    ".pdf": "application/pdf",
}


def normalize_mimetype(mimetype: str | None) -> str:
    """Remove parâmetros (ex: `; codecs=opus`) e normaliza caixa."""
    if not mimetype:
        return ""
    return mimetype.split(";", 1)[0].strip().lower()


def is_supported_mimetype(mimetype: str | None) -> bool:
    normalized = normalize_mimetype(mimetype)
    return bool(normalized) and normalized.startswith(SUPPORTED_MIMETYPE_PREFIXES)


def extension_for(mimetype: str | None, filename: str | None = None) -> str:
    """Extensão do objeto: do filename, senão do mimetype, senão `.bin`."""
    if filename:
        suffix = PurePosixPath(filename).suffix
        if suffix:
            return suffix.lower()
    return EXTENSION_BY_MIMETYPE.get(normalize_mimetype(mimetype), DEFAULT_EXTENSION)


def infer_mimetype_from_url(url: str) -> str:
    """Mimetype pela extensão do path; heurística de URLs WhatsApp no fallback."""
    try:
        path = urlparse(url).path.lower()
    except ValueError:
        return "application/octet-stream"

    for extension, mimetype in _MIMETYPE_BY_URL_EXTENSION.items():
        if path.endswith(extension):
            return mimetype

    if "whatsapp.net" in url:
        if "image" in url or "img" in url:
            return "image/jpeg"
        if "video" in url:
            return "video/mp4"
        if "audio" in url:
            return "audio/ogg"
    return "application/octet-stream"
