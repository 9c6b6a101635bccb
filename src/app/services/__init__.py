"""Serviços de aplicação.

Unidades de orquestração sobre os adapters de app/infra/ (injetados).
"""

from app.services.media_ingestion import (
    BatchProcessingResult,
    MediaIngestionPipeline,
    MediaProcessingOptions,
    MediaProcessingResult,
    RefreshedUrl,
)

__all__ = [
    "BatchProcessingResult",
    "MediaIngestionPipeline",
    "MediaProcessingOptions",
    "MediaProcessingResult",
    "RefreshedUrl",
]
