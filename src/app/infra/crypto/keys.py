"""Derivação de chaves e verificação de MAC da mídia WhatsApp."""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
from dataclasses import dataclass

from cryptography.hazmat.primitives.hashes import SHA256
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from utils.errors import ErrorKind

from .constants import (
    APP_INFO,
    CIPHER_KEY_SIZE,
    EXPANDED_KEY_SIZE,
    HKDF_SALT,
    IV_SIZE,
    MAC_KEY_SIZE,
    MAC_SIZE,
    MEDIA_KEY_SIZE,
    REF_KEY_SIZE,
)
from .errors import MediaDecryptError


@dataclass(frozen=True, slots=True)
class MediaKeys:
    """Material derivado da mediaKey (fatias do output HKDF)."""

    iv: bytes
    cipher_key: bytes
    mac_key: bytes
    ref_key: bytes


def decode_media_key(media_key: str, media_type: str) -> bytes:
    """Decodifica mediaKey base64 exigindo exatamente 32 bytes.

    Raises:
        MediaDecryptError: kind validation se base64 inválido ou tamanho errado.
    """
    try:
        raw = base64.b64decode(media_key, validate=True)
    except (ValueError, binascii.Error) as exc:
        raise MediaDecryptError(
            media_type,
            "media_key_invalid_base64",
            kind=ErrorKind.VALIDATION,
            cause=exc,
        ) from exc

    if len(raw) != MEDIA_KEY_SIZE:
        raise MediaDecryptError(
            media_type,
            f"media_key_invalid_size: {len(raw)}",
            kind=ErrorKind.VALIDATION,
        )
    return raw


def derive_media_keys(media_key: bytes, media_type: str) -> MediaKeys:
    """Expande a mediaKey via HKDF-SHA256 (112 bytes) e fatia o resultado.

    Layout: iv [0:16], cipher_key [16:48], mac_key [48:80], ref_key [80:112].
    Determinístico para o mesmo par (media_key, media_type).

    Raises:
        MediaDecryptError: kind validation para categoria ou chave inválidas.
    """
    info = APP_INFO.get(media_type)
    if info is None:
        raise MediaDecryptError(
            media_type,
            "unsupported_media_type",
            kind=ErrorKind.VALIDATION,
        )
    if len(media_key) != MEDIA_KEY_SIZE:
        raise MediaDecryptError(
            media_type,
            f"media_key_invalid_size: {len(media_key)}",
            kind=ErrorKind.VALIDATION,
        )

    expanded = HKDF(
        algorithm=SHA256(),
        length=EXPANDED_KEY_SIZE,
        salt=HKDF_SALT,
        info=info,
    ).derive(media_key)

    cipher_start = IV_SIZE
    mac_start = cipher_start + CIPHER_KEY_SIZE
    ref_start = mac_start + MAC_KEY_SIZE
    return MediaKeys(
        iv=expanded[:cipher_start],
        cipher_key=expanded[cipher_start:mac_start],
        mac_key=expanded[mac_start:ref_start],
        ref_key=expanded[ref_start : ref_start + REF_KEY_SIZE],
    )


def compute_mac(iv: bytes, ciphertext: bytes, mac_key: bytes) -> bytes:
    """HMAC-SHA256(mac_key, iv || ciphertext) truncado em 10 bytes."""
    return hmac.new(mac_key, iv + ciphertext, hashlib.sha256).digest()[:MAC_SIZE]


def verify_mac(iv: bytes, ciphertext: bytes, mac_key: bytes, mac: bytes) -> bool:
    """Compara o MAC anexado ao blob em tempo constante."""
    return hmac.compare_digest(compute_mac(iv, ciphertext, mac_key), mac)
