"""Rotas HTTP da API — adapters de entrada.

Estrutura:
- routes/webhook/: endpoints de webhook WhatsApp (mensagem, status, conexão)
- routes/health/: health checks e readiness

Agregação:
- router.py: registra todos os routers no app principal
"""

from __future__ import annotations

from api.routes.router import create_api_router

__all__ = ["create_api_router"]
