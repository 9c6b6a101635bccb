"""Constantes do protocolo de mídia cifrada do WhatsApp."""

MEDIA_KEY_SIZE = 32  # mediaKey decodificada (base64)
EXPANDED_KEY_SIZE = 112  # saída HKDF
HKDF_SALT = b"\x00" * 32  # extract com salt zerado

IV_SIZE = 16
CIPHER_KEY_SIZE = 32  # AES-256-CBC
MAC_KEY_SIZE = 32
REF_KEY_SIZE = 32
MAC_SIZE = 10  # HMAC-SHA256 truncado, anexado ao blob

# Contexto HKDF por categoria de mídia
APP_INFO: dict[str, bytes] = {
    "image": b"WhatsApp Image Keys",
    "video": b"WhatsApp Video Keys",
    "audio": b"WhatsApp Audio Keys",
    "document": b"WhatsApp Document Keys",
}

MEDIA_TYPES = frozenset(APP_INFO)

FALLBACK_MIMETYPES: dict[str, str] = {
    "image": "image/jpeg",
    "video": "video/mp4",
    "audio": "audio/ogg",
    "document": "application/octet-stream",
}

SNIFF_HEADER_SIZE = 12

# Download do blob cifrado
DOWNLOAD_MAX_ATTEMPTS = 3
DOWNLOAD_TIMEOUT_SECONDS = 30.0
DOWNLOAD_RETRY_DELAY_SECONDS = 1.0  # multiplicado pelo número da tentativa
