"""Testes da decifragem de mídia WhatsApp (HKDF + HMAC + AES-CBC)."""

from __future__ import annotations

import base64
import logging
import os

import httpx
import pytest

from app.infra.crypto import (
    MediaDecryptError,
    WhatsAppMediaDecryptor,
    decode_media_key,
    decrypt_media_bytes,
    derive_media_keys,
    sniff_mimetype,
)
from app.infra.http import HttpClient, HttpClientConfig
from tests.fakes.whatsapp_media import JPEG_BYTES, b64_sha256, encrypt_media, new_media_key
from utils.errors import ErrorKind

ENC_URL = "https://mmg.whatsapp.net/v/t62.7118-24/abc.enc"


def _decryptor(handler, *, max_attempts: int = 3) -> WhatsAppMediaDecryptor:  # noqa: ANN001
    client = HttpClient(
        HttpClientConfig(timeout_seconds=5, max_retries=0),
        transport=httpx.MockTransport(handler),
    )
    return WhatsAppMediaDecryptor(client, max_attempts=max_attempts, retry_delay_seconds=0)


class TestKeyDerivation:
    @pytest.mark.parametrize("media_type", ["image", "video", "audio", "document"])
    def test_slices_have_expected_sizes(self, media_type: str) -> None:
        keys = derive_media_keys(os.urandom(32), media_type)
        assert len(keys.iv) == 16
        assert len(keys.cipher_key) == 32
        assert len(keys.mac_key) == 32
        assert len(keys.ref_key) == 32

    def test_derivation_is_deterministic(self) -> None:
        media_key = os.urandom(32)
        assert derive_media_keys(media_key, "image") == derive_media_keys(media_key, "image")

    def test_category_changes_material(self) -> None:
        media_key = os.urandom(32)
        assert derive_media_keys(media_key, "image") != derive_media_keys(media_key, "video")

    def test_unknown_category_is_validation_error(self) -> None:
        with pytest.raises(MediaDecryptError) as exc_info:
            derive_media_keys(os.urandom(32), "sticker")
        assert exc_info.value.kind is ErrorKind.VALIDATION

    @pytest.mark.parametrize("raw", [b"", b"\x00" * 16, b"\x00" * 33])
    def test_wrong_key_size_is_validation_error(self, raw: bytes) -> None:
        with pytest.raises(MediaDecryptError) as exc_info:
            decode_media_key(base64.b64encode(raw).decode(), "image")
        assert exc_info.value.kind is ErrorKind.VALIDATION

    def test_invalid_base64_is_validation_error(self) -> None:
        with pytest.raises(MediaDecryptError) as exc_info:
            decode_media_key("not base64 !!", "image")
        assert exc_info.value.kind is ErrorKind.VALIDATION


class TestDecryptBytes:
    def test_round_trip_recovers_plaintext(self) -> None:
        raw_key, b64_key = new_media_key()
        blob = encrypt_media(JPEG_BYTES, raw_key, "image")

        result = decrypt_media_bytes(blob, b64_key, "image")

        assert result.data == JPEG_BYTES
        assert result.mimetype == "image/jpeg"
        assert result.file_size == len(JPEG_BYTES)

    @pytest.mark.parametrize("position", [0, 15, -11, -1])
    def test_single_flipped_byte_is_rejected(self, position: int) -> None:
        raw_key, b64_key = new_media_key()
        blob = bytearray(encrypt_media(b"documento confidencial", raw_key, "document"))
        blob[position] ^= 0x01

        with pytest.raises(MediaDecryptError) as exc_info:
            decrypt_media_bytes(bytes(blob), b64_key, "document")
        assert exc_info.value.kind is ErrorKind.INTEGRITY
        assert exc_info.value.reason == "mac_mismatch"

    def test_corrupted_trailing_mac_is_integrity_error(self) -> None:
        _, b64_key = new_media_key()
        blob = os.urandom(40) + b"\x00" * 10

        with pytest.raises(MediaDecryptError) as exc_info:
            decrypt_media_bytes(blob, b64_key, "image")
        assert exc_info.value.kind is ErrorKind.INTEGRITY

    def test_blob_smaller_than_mac_is_validation_error(self) -> None:
        _, b64_key = new_media_key()
        with pytest.raises(MediaDecryptError) as exc_info:
            decrypt_media_bytes(b"\x01\x02\x03", b64_key, "image")
        assert exc_info.value.kind is ErrorKind.VALIDATION

    def test_hash_mismatch_is_advisory(self, caplog: pytest.LogCaptureFixture) -> None:
        raw_key, b64_key = new_media_key()
        blob = encrypt_media(JPEG_BYTES, raw_key, "image")

        with caplog.at_level(logging.WARNING):
            result = decrypt_media_bytes(
                blob,
                b64_key,
                "image",
                file_sha256=b64_sha256(b"outro conteudo"),
                file_enc_sha256=b64_sha256(blob),
            )

        assert result.data == JPEG_BYTES
        mismatches = [r for r in caplog.records if r.getMessage() == "media_hash_mismatch"]
        assert len(mismatches) == 1
        assert mismatches[0].hash_field == "file_sha256"


class TestSniffMimetype:
    @pytest.mark.parametrize(
        ("header", "media_type", "expected"),
        [
            (b"\x89PNG\r\n\x1a\n\x00\x00\x00\x00", "image", "image/png"),
            (b"GIF89a\x00\x00\x00\x00\x00\x00", "image", "image/gif"),
            (b"RIFF\x00\x00\x00\x00WEBP", "image", "image/webp"),
            (b"\x00\x00\x00\x18ftypmp42", "video", "video/mp4"),
            (b"%PDF-1.7\n\x00\x00\x00", "document", "application/pdf"),
            (b"OggS\x00\x02\x00\x00\x00\x00\x00\x00", "audio", "audio/ogg"),
            (b"\x00" * 12, "audio", "audio/ogg"),
            (b"short", "video", "video/mp4"),
        ],
    )
    def test_magic_bytes(self, header: bytes, media_type: str, expected: str) -> None:
        assert sniff_mimetype(header, media_type) == expected


class TestWhatsAppMediaDecryptor:
    @pytest.mark.asyncio
    async def test_downloads_and_decrypts(self) -> None:
        raw_key, b64_key = new_media_key()
        blob = encrypt_media(JPEG_BYTES, raw_key, "image")

        decryptor = _decryptor(lambda request: httpx.Response(200, content=blob))
        result = await decryptor.decrypt_media(ENC_URL, b64_key, "image")

        assert result.data == JPEG_BYTES

    @pytest.mark.asyncio
    async def test_retries_transient_download_failures(self) -> None:
        raw_key, b64_key = new_media_key()
        blob = encrypt_media(b"audio bytes", raw_key, "audio")
        calls: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(1)
            if len(calls) < 3:
                return httpx.Response(503)
            return httpx.Response(200, content=blob)

        result = await _decryptor(handler).decrypt_media(ENC_URL, b64_key, "audio")

        assert result.data == b"audio bytes"
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_exhausted_download_is_transient(self) -> None:
        _, b64_key = new_media_key()
        decryptor = _decryptor(lambda request: httpx.Response(500), max_attempts=2)

        with pytest.raises(MediaDecryptError) as exc_info:
            await decryptor.decrypt_media(ENC_URL, b64_key, "video")
        assert exc_info.value.kind is ErrorKind.TRANSIENT

    @pytest.mark.asyncio
    async def test_invalid_key_fails_before_download(self) -> None:
        calls: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(1)
            return httpx.Response(200, content=b"x" * 32)

        with pytest.raises(MediaDecryptError) as exc_info:
            await _decryptor(handler).decrypt_media(ENC_URL, "AAAA", "image")
        assert exc_info.value.kind is ErrorKind.VALIDATION
        assert calls == []

    @pytest.mark.asyncio
    async def test_missing_parameters_is_validation_error(self) -> None:
        decryptor = _decryptor(lambda request: httpx.Response(200, content=b""))
        with pytest.raises(MediaDecryptError) as exc_info:
            await decryptor.decrypt_media("", "", "image")
        assert exc_info.value.kind is ErrorKind.VALIDATION
