"""Criptografia de mídia WhatsApp (HKDF + HMAC + AES-256-CBC).

Localizado em app/infra/ para manter boundaries corretas:
- app/ não importa de api/ (exceto via bootstrap)
- Usado pelo pipeline de ingestão de mídia em app/services
"""

from .constants import APP_INFO, EXPANDED_KEY_SIZE, MAC_SIZE, MEDIA_TYPES
from .errors import MediaDecryptError
from .keys import MediaKeys, compute_mac, decode_media_key, derive_media_keys, verify_mac
from .media_decrypt import DecryptedMedia, WhatsAppMediaDecryptor, decrypt_media_bytes
from .mimetype import fallback_mimetype, sniff_mimetype

__all__ = [
    "APP_INFO",
    "EXPANDED_KEY_SIZE",
    "MAC_SIZE",
    "MEDIA_TYPES",
    "DecryptedMedia",
    "MediaDecryptError",
    "MediaKeys",
    "WhatsAppMediaDecryptor",
    "compute_mac",
    "decode_media_key",
    "decrypt_media_bytes",
    "derive_media_keys",
    "fallback_mimetype",
    "sniff_mimetype",
    "verify_mac",
]
