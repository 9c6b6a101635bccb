"""Normalizers por provider: conversão de webhooks para a mensagem canônica.

Estrutura:
- wapi/: instâncias W-API (formato Baileys, mídia cifrada com mediaKey)
- waba/: WhatsApp Business API (Graph API, mídia por media id)
- dispatcher.py: seleção do normalizer pela forma do payload

Cada provider tem seus helpers de extração e seu normalizer, mantendo SRP.
"""

from .dispatcher import NormalizerDispatcher, create_dispatcher
from .waba import WabaNormalizer
from .wapi import WApiNormalizer

__all__ = [
    "NormalizerDispatcher",
    "WApiNormalizer",
    "WabaNormalizer",
    "create_dispatcher",
]
