"""Endpoints de webhook WhatsApp (W-API e WhatsApp Business API).

Endpoints:
- GET /webhook/message: verificação de webhook (challenge hub.*)
- POST /webhook/message: mensagens de qualquer provider (status WABA incluso)
- POST /webhook/message-status: mudanças de status de mensagem
- POST /webhook/connection-status: eventos de conexão da instância

O tenant chega resolvido no header `x-tenant-data` (JSON confiável,
autenticação acontece antes deste serviço).

Respostas:
- 200: evento normalizado e publicado (mesmo com mídia degradada)
- 400: payload inválido, formato desconhecido, canal não encontrado
- 401: header de tenant ausente
- 500: falha de publicação ou erro inesperado
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.domain import Tenant
from app.observability import reset_correlation_id, set_correlation_id
from app.use_cases.webhook import WebhookOutcome, WebhookProcessor
from config.settings import get_base_settings
from utils.errors import EventPublishError, PipelineError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

router = APIRouter()

TENANT_HEADER = "x-tenant-data"
CORRELATION_HEADER = "x-correlation-id"


def get_processor() -> WebhookProcessor:
    """Dependência FastAPI (substituível via dependency_overrides)."""
    from app.bootstrap import get_webhook_processor

    return get_webhook_processor()


class TenantHeaderError(Exception):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code


def parse_tenant_header(raw: str | None) -> Tenant:
    """Tenant a partir do header JSON.

    Raises:
        TenantHeaderError: 401 se ausente, 400 se malformado.
    """
    if not raw:
        raise TenantHeaderError(status.HTTP_401_UNAUTHORIZED, "Tenant não informado")
    try:
        return Tenant.model_validate(json.loads(raw))
    except (ValueError, ValidationError) as exc:
        raise TenantHeaderError(status.HTTP_400_BAD_REQUEST, "Tenant inválido") from exc


@router.get("/message")
async def verify_webhook(request: Request) -> Response:
    """Responde ao challenge `hub.challenge` quando `hub.mode=subscribe`.

    Se WEBHOOK_VERIFY_TOKEN estiver configurado, o `hub.verify_token`
    precisa coincidir.
    """
    hub_mode = request.query_params.get("hub.mode")
    hub_verify_token = request.query_params.get("hub.verify_token")
    hub_challenge = request.query_params.get("hub.challenge") or ""
    expected_token = get_base_settings().webhook_verify_token

    if hub_mode == "subscribe" and (not expected_token or hub_verify_token == expected_token):
        logger.info("webhook_verified", extra={"hub_mode": hub_mode})
        return Response(content=hub_challenge, media_type="text/plain")

    logger.warning("webhook_verification_failed", extra={"hub_mode": hub_mode})
    return Response(
        content="Forbidden",
        media_type="text/plain",
        status_code=status.HTTP_403_FORBIDDEN,
    )


@router.post("/message", response_model=None)
async def receive_message(
    request: Request,
    processor: WebhookProcessor = Depends(get_processor),
) -> JSONResponse:
    """Mensagem recebida; payloads de status WABA seguem o caminho de status."""
    return await _handle(request, processor.handle_webhook, "message")


@router.post("/message-status", response_model=None)
async def receive_message_status(
    request: Request,
    processor: WebhookProcessor = Depends(get_processor),
) -> JSONResponse:
    return await _handle(request, processor.handle_status, "message_status")


@router.post("/connection-status", response_model=None)
async def receive_connection_status(
    request: Request,
    processor: WebhookProcessor = Depends(get_processor),
) -> JSONResponse:
    return await _handle(request, processor.handle_connection, "connection_status")


async def _handle(
    request: Request,
    handler: Callable[[Any, Tenant], Awaitable[WebhookOutcome]],
    endpoint: str,
) -> JSONResponse:
    token = set_correlation_id(request.headers.get(CORRELATION_HEADER))
    try:
        try:
            tenant = parse_tenant_header(request.headers.get(TENANT_HEADER))
        except TenantHeaderError as exc:
            logger.warning("webhook_tenant_rejected", extra={"endpoint": endpoint})
            return _error_response(exc.status_code, str(exc))

        try:
            payload = await request.json()
        except ValueError:
            return _error_response(status.HTTP_400_BAD_REQUEST, "JSON inválido")

        try:
            outcome = await handler(payload, tenant)
        except EventPublishError as exc:
            logger.error(
                "webhook_publish_failed",
                extra={"endpoint": endpoint, "error_kind": exc.kind.value},
            )
            return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))
        except PipelineError as exc:
            logger.warning(
                "webhook_rejected",
                extra={
                    "endpoint": endpoint,
                    "error_kind": exc.kind.value,
                    "error_type": type(exc).__name__,
                },
            )
            if exc.is_aborting:
                return _error_response(status.HTTP_400_BAD_REQUEST, str(exc))
            return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))
        except ValidationError as exc:
            logger.warning(
                "webhook_rejected",
                extra={"endpoint": endpoint, "error_kind": "validation"},
            )
            return _error_response(
                status.HTTP_400_BAD_REQUEST,
                f"Payload inválido: {exc.error_count()} erro(s)",
            )
        except Exception:
            logger.exception("webhook_processing_failed", extra={"endpoint": endpoint})
            return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Erro interno")

        return JSONResponse(content=_outcome_body(outcome, tenant))
    finally:
        reset_correlation_id(token)


def _outcome_body(outcome: WebhookOutcome, tenant: Tenant) -> dict[str, Any]:
    body: dict[str, Any] = {
        "status": "OK",
        "eventType": outcome.event_type,
        "messageId": outcome.message_id,
        "type": outcome.content_type or outcome.status,
        "mediaProcessed": outcome.media_processed,
        "tenantBucket": tenant.uuid,
        "mediaUrl": outcome.media_url,
        "urlExpiresAt": outcome.url_expires_at,
        "mediaError": outcome.media_error,
    }
    return {key: value for key, value in body.items() if value is not None}


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "ERROR", "message": message},
    )
