"""Cliente HTTP base para downloads e lookups de providers.

Timeout explícito por chamada; timeouts, erros de conexão, 429 e 5xx são
transitórios e re-tentados com backoff exponencial limitado.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

logger = logging.getLogger(__name__)


@dataclass
class HttpClientConfig:
    """Configuração do cliente HTTP."""

    timeout_seconds: float = 30.0
    max_retries: int = 2
    backoff_base_seconds: float = 1.0
    backoff_max_seconds: float = 10.0
    max_size_bytes: int | None = None
    default_headers: dict[str, str] = field(default_factory=dict)
    verify_ssl: bool = True


class HttpError(Exception):
    """Erro de requisição HTTP sem dados sensíveis."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        is_retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.is_retryable = is_retryable


class HttpClient:
    """Cliente HTTP assíncrono com retry para chamadas externas."""

    def __init__(
        self,
        config: HttpClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or HttpClientConfig()
        self._transport = transport

    @property
    def config(self) -> HttpClientConfig:
        return self._config

    async def get(
        self,
        url: str,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """GET com retry; retorna response 2xx/3xx/4xx não retentável.

        Raises:
            HttpError: status não-2xx ou retries esgotados.
        """
        merged_headers = {**self._config.default_headers, **(headers or {})}
        for attempt in range(self._config.max_retries + 1):
            try:
                response = await self._send(url, merged_headers)
                if response.status_code == 429 or response.status_code >= 500:
                    raise HttpError(
                        "http_retryable_status",
                        status_code=response.status_code,
                        is_retryable=True,
                    )
                if response.status_code >= 400:
                    raise HttpError(
                        "http_status_error",
                        status_code=response.status_code,
                        is_retryable=False,
                    )
                return response
            except HttpError as exc:
                if not exc.is_retryable or attempt >= self._config.max_retries:
                    raise
                logger.warning(
                    "http_retry",
                    extra={"attempt": attempt + 1, "status_code": exc.status_code},
                )
                await _backoff_sleep(
                    attempt,
                    self._config.backoff_base_seconds,
                    self._config.backoff_max_seconds,
                )
            except (httpx.TimeoutException, httpx.TransportError) as exc:
                if attempt >= self._config.max_retries:
                    raise HttpError("http_connection_error", is_retryable=True) from exc
                logger.warning(
                    "http_retry",
                    extra={"attempt": attempt + 1, "error_type": type(exc).__name__},
                )
                await _backoff_sleep(
                    attempt,
                    self._config.backoff_base_seconds,
                    self._config.backoff_max_seconds,
                )
        raise HttpError("http_retry_exhausted", is_retryable=True)

    async def get_json(
        self,
        url: str,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        response = await self.get(url, headers=headers)
        try:
            data = response.json()
        except ValueError as exc:
            raise HttpError("http_invalid_json", status_code=response.status_code) from exc
        if not isinstance(data, dict):
            raise HttpError("http_invalid_json", status_code=response.status_code)
        return data

    async def get_bytes(
        self,
        url: str,
        headers: dict[str, str] | None = None,
    ) -> tuple[bytes, str | None]:
        """Baixa conteúdo binário.

        Returns:
            (content, content_type do header ou None)

        Raises:
            HttpError: falha de transporte, conteúdo vazio ou acima do limite.
        """
        response = await self.get(url, headers=headers)
        if self._is_too_large(response):
            raise HttpError("http_content_too_large", status_code=response.status_code)
        content = response.content
        if not content:
            raise HttpError("http_empty_content", status_code=response.status_code)
        content_type = response.headers.get("content-type")
        if content_type:
            content_type = content_type.split(";", 1)[0].strip().lower()
        return content, content_type or None

    async def _send(self, url: str, headers: dict[str, str]) -> httpx.Response:
        async with httpx.AsyncClient(
            verify=self._config.verify_ssl,
            transport=self._transport,
            follow_redirects=True,
        ) as client:
            return await client.get(
                url,
                headers=headers,
                timeout=self._config.timeout_seconds,
            )

    def _is_too_large(self, response: httpx.Response) -> bool:
        limit = self._config.max_size_bytes
        if not limit:
            return False
        content_length = response.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > limit:
            return True
        return len(response.content) > limit


async def _backoff_sleep(attempt: int, base: float, max_seconds: float) -> None:
    backoff = min((2**attempt) * base, max_seconds)
    logger.info("http_backoff", extra={"backoff_seconds": backoff})
    await asyncio.sleep(backoff)
