"""Endpoints de webhook WhatsApp."""

from .router import get_processor, parse_tenant_header
from .router import router as webhook_router

__all__ = ["get_processor", "parse_tenant_header", "webhook_router"]
