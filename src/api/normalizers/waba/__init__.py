"""Normalizer WhatsApp Business API (Graph API)."""

from .normalizer import WABA_OBJECT, WabaNormalizer

__all__ = ["WABA_OBJECT", "WabaNormalizer"]
