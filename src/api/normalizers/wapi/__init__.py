"""Normalizer W-API."""

from .normalizer import WApiNormalizer, normalize_content

__all__ = ["WApiNormalizer", "normalize_content"]
