"""Decifragem de mídia cifrada do WhatsApp (.enc).

Protocolo fixo: HKDF-SHA256 da mediaKey, MAC truncado de 10 bytes ao fim
do blob, AES-256-CBC com PKCS#7. Verificações de hash são apenas
consultivas (log), pois providers às vezes enviam hashes defasados.
"""

from __future__ import annotations

import asyncio
import base64
import hashlib
import logging
import time
from dataclasses import dataclass

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from app.infra.http import HttpClient, HttpClientConfig, HttpError
from app.observability import record_decrypt_outcome, record_latency
from utils.errors import ErrorKind

from .constants import (
    DOWNLOAD_MAX_ATTEMPTS,
    DOWNLOAD_RETRY_DELAY_SECONDS,
    DOWNLOAD_TIMEOUT_SECONDS,
    MAC_SIZE,
    MEDIA_TYPES,
)
from .errors import MediaDecryptError
from .keys import decode_media_key, derive_media_keys, verify_mac
from .mimetype import sniff_mimetype

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DecryptedMedia:
    """Plaintext recuperado + mimetype detectado."""

    data: bytes
    mimetype: str
    file_size: int


def decrypt_media_bytes(
    encrypted: bytes,
    media_key: str | bytes,
    media_type: str,
    *,
    file_sha256: str | None = None,
    file_enc_sha256: str | None = None,
) -> DecryptedMedia:
    """Decifra um blob já baixado.

    Args:
        encrypted: Blob completo (ciphertext || mac de 10 bytes)
        media_key: mediaKey em base64 (ou 32 bytes já decodificados)
        media_type: image, video, audio ou document
        file_sha256: sha256 base64 esperado do plaintext (consultivo)
        file_enc_sha256: sha256 base64 esperado do blob cifrado (consultivo)

    Returns:
        DecryptedMedia com plaintext, mimetype e tamanho.

    Raises:
        MediaDecryptError: validation (chave/categoria/blob truncado) ou
            integrity (MAC divergente, erro de cifra).
    """
    key_bytes = (
        media_key if isinstance(media_key, bytes) else decode_media_key(media_key, media_type)
    )
    keys = derive_media_keys(key_bytes, media_type)

    if len(encrypted) < MAC_SIZE:
        raise MediaDecryptError(
            media_type,
            f"blob_too_small: {len(encrypted)}",
            kind=ErrorKind.VALIDATION,
        )

    if file_enc_sha256:
        _check_advisory_hash(encrypted, file_enc_sha256, media_type, "file_enc_sha256")

    ciphertext, mac = encrypted[:-MAC_SIZE], encrypted[-MAC_SIZE:]
    if not verify_mac(keys.iv, ciphertext, keys.mac_key, mac):
        raise MediaDecryptError(media_type, "mac_mismatch", kind=ErrorKind.INTEGRITY)

    plaintext = _aes_cbc_decrypt(ciphertext, keys.cipher_key, keys.iv, media_type)

    if file_sha256:
        _check_advisory_hash(plaintext, file_sha256, media_type, "file_sha256")

    return DecryptedMedia(
        data=plaintext,
        mimetype=sniff_mimetype(plaintext, media_type),
        file_size=len(plaintext),
    )


def _aes_cbc_decrypt(ciphertext: bytes, key: bytes, iv: bytes, media_type: str) -> bytes:
    try:
        decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as exc:
        raise MediaDecryptError(
            media_type,
            "cipher_error",
            kind=ErrorKind.INTEGRITY,
            cause=exc,
        ) from exc


def _check_advisory_hash(data: bytes, expected: str, media_type: str, field_name: str) -> None:
    actual = base64.b64encode(hashlib.sha256(data).digest()).decode("ascii")
    if actual != expected:
        logger.warning(
            "media_hash_mismatch",
            extra={
                "media_type": media_type,
                "hash_field": field_name,
                "error_kind": ErrorKind.ADVISORY.value,
            },
        )


class WhatsAppMediaDecryptor:
    """Baixa e decifra mídia cifrada do WhatsApp.

    O download tem tentativas limitadas com atraso linear
    (tentativa * retry_delay_seconds) e timeout explícito por chamada.
    """

    def __init__(
        self,
        http_client: HttpClient | None = None,
        *,
        max_attempts: int = DOWNLOAD_MAX_ATTEMPTS,
        retry_delay_seconds: float = DOWNLOAD_RETRY_DELAY_SECONDS,
    ) -> None:
        # Retry fica neste loop; o cliente faz uma única tentativa por chamada
        self._http = http_client or HttpClient(
            HttpClientConfig(timeout_seconds=DOWNLOAD_TIMEOUT_SECONDS, max_retries=0)
        )
        self._max_attempts = max(1, max_attempts)
        self._retry_delay_seconds = retry_delay_seconds

    async def decrypt_media(
        self,
        url: str,
        media_key: str,
        media_type: str,
        *,
        file_sha256: str | None = None,
        file_enc_sha256: str | None = None,
    ) -> DecryptedMedia:
        """Valida parâmetros, baixa o blob e decifra.

        Raises:
            MediaDecryptError: validation, transient (download) ou integrity.
        """
        if not url or not media_key or not media_type:
            raise MediaDecryptError(
                media_type or "unknown",
                "missing_parameters",
                kind=ErrorKind.VALIDATION,
            )
        if media_type not in MEDIA_TYPES:
            raise MediaDecryptError(
                media_type,
                "unsupported_media_type",
                kind=ErrorKind.VALIDATION,
            )
        key_bytes = decode_media_key(media_key, media_type)

        start = time.perf_counter()
        try:
            encrypted = await self._download(url, media_type)
            result = decrypt_media_bytes(
                encrypted,
                key_bytes,
                media_type,
                file_sha256=file_sha256,
                file_enc_sha256=file_enc_sha256,
            )
        except MediaDecryptError as exc:
            logger.warning(
                "media_decrypt_failed",
                extra={
                    "media_type": media_type,
                    "reason": exc.reason,
                    "error_kind": exc.kind.value,
                },
            )
            record_decrypt_outcome(media_type, "failure", reason=exc.reason)
            raise

        elapsed_ms = (time.perf_counter() - start) * 1000
        record_decrypt_outcome(media_type, "success", size_bytes=result.file_size)
        record_latency("media_decrypt", "decrypt_media", elapsed_ms)
        return result

    async def _download(self, url: str, media_type: str) -> bytes:
        last_error: HttpError | None = None
        for attempt in range(1, self._max_attempts + 1):
            try:
                content, _ = await self._http.get_bytes(url)
                return content
            except HttpError as exc:
                last_error = exc
                logger.warning(
                    "media_encrypted_download_failed",
                    extra={
                        "attempt": attempt,
                        "max_attempts": self._max_attempts,
                        "status_code": exc.status_code,
                    },
                )
                if attempt < self._max_attempts:
                    await asyncio.sleep(attempt * self._retry_delay_seconds)

        raise MediaDecryptError(
            media_type,
            f"download_failed_after_{self._max_attempts}_attempts",
            kind=ErrorKind.TRANSIENT,
            cause=last_error,
        )
