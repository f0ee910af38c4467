"""Route dependencies wiring the pipeline to concrete providers."""

from __future__ import annotations

from typing import AsyncIterator

from fastapi import HTTPException, Request, status

from outfit_analyzer.api.intake import receive_image
from outfit_analyzer.config.settings import get_settings
from outfit_analyzer.errors import AnalysisError, ConfigurationError
from outfit_analyzer.imggen.generator_client import ImageGeneratorClient
from outfit_analyzer.services.analysis import OutfitAnalysisService
from outfit_analyzer.services.schemas import UploadedImage
from outfit_analyzer.storage.backend import LocalStorage, build_storage
from outfit_analyzer.vision.classifier import OpenAIVisionClassifier


async def get_uploaded_image(request: Request) -> UploadedImage:
    """Buffer the ``image`` form field, raising intake errors early."""

    return await receive_image(request)


async def _close_clients(
    classifier: OpenAIVisionClassifier | None,
    synthesizer: ImageGeneratorClient | None,
) -> None:
    if classifier is not None:
        await classifier.close()
    if synthesizer is not None:
        await synthesizer.close()


async def get_analysis_service() -> AsyncIterator[OutfitAnalysisService]:
    """Build the pipeline for one request and release provider clients afterwards."""

    classifier: OpenAIVisionClassifier | None = None
    synthesizer: ImageGeneratorClient | None = None
    try:
        settings = get_settings()
        classifier = OpenAIVisionClassifier(settings)
        storage = None
        if settings.suggestions_enabled:
            storage = build_storage(settings)
            synthesizer = ImageGeneratorClient(settings)
        service = OutfitAnalysisService(classifier, synthesizer, storage)
    except AnalysisError:
        await _close_clients(classifier, synthesizer)
        raise
    except Exception as exc:
        await _close_clients(classifier, synthesizer)
        raise ConfigurationError(str(exc)) from exc

    try:
        yield service
    finally:
        await _close_clients(classifier, synthesizer)


def get_local_storage() -> LocalStorage:
    """Return the local backend, or 404 when artifacts live elsewhere."""

    settings = get_settings()
    if settings.storage_backend != "local":
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    storage = build_storage(settings)
    if not isinstance(storage, LocalStorage):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return storage
