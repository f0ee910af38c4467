"""Outfit analysis pipeline: classify, optionally synthesize and store a suggestion."""

from __future__ import annotations

import logging
import time
from typing import Callable, Protocol

from outfit_analyzer.metrics.prometheus_exporter import (
    outfit_category_total,
    outfit_suggestion_total,
)
from outfit_analyzer.services.categories import OutfitCategory
from outfit_analyzer.services.schemas import (
    AnalysisResponse,
    OutfitAnalysis,
    SuggestionImage,
    UploadedImage,
)
from outfit_analyzer.storage.backend import StorageBackend, build_suggestion_key

logger = logging.getLogger(__name__)


class OutfitClassifier(Protocol):
    async def classify(self, image: UploadedImage) -> OutfitAnalysis:
        ...


class SuggestionSynthesizer(Protocol):
    async def synthesize(self, category: OutfitCategory) -> SuggestionImage | None:
        ...


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class OutfitAnalysisService:
    """
    Runs one request through the pipeline.

    Classifier failures propagate to the caller. Suggestion failures (image
    generation, upload or URL signing) are logged and degrade to an empty
    ``suggestionImageUrl``. Without a synthesizer the field is omitted.
    """

    def __init__(
        self,
        classifier: OutfitClassifier,
        synthesizer: SuggestionSynthesizer | None = None,
        storage: StorageBackend | None = None,
        *,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        if synthesizer is not None and storage is None:
            raise ValueError("A storage backend is required when suggestions are enabled.")
        self._classifier = classifier
        self._synthesizer = synthesizer
        self._storage = storage
        self._clock = clock

    @property
    def suggestions_enabled(self) -> bool:
        return self._synthesizer is not None

    async def analyze(self, image: UploadedImage) -> AnalysisResponse:
        analysis = await self._classifier.classify(image)
        outfit_category_total.labels(category=analysis.category.value).inc()

        suggestion_url: str | None = None
        if self._synthesizer is not None and self._storage is not None:
            suggestion_url = await self._suggest(self._synthesizer, self._storage, analysis.category)
        else:
            outfit_suggestion_total.labels(outcome="skipped").inc()

        return AnalysisResponse(
            category=analysis.category,
            explanation=analysis.explanation,
            confidence=analysis.confidence,
            suggestion_image_url=suggestion_url,
        )

    async def _suggest(
        self,
        synthesizer: SuggestionSynthesizer,
        storage: StorageBackend,
        category: OutfitCategory,
    ) -> str:
        try:
            suggestion = await synthesizer.synthesize(category)
            if suggestion is None:
                outfit_suggestion_total.labels(outcome="empty").inc()
                return ""
            key = build_suggestion_key(category, self._clock())
            await storage.upload(key, suggestion.data, suggestion.media_type)
            url = await storage.signed_url(key)
        except Exception:
            logger.warning("Suggestion image failed for category %s", category.value, exc_info=True)
            outfit_suggestion_total.labels(outcome="failed").inc()
            return ""

        outfit_suggestion_total.labels(outcome="stored").inc()
        logger.info("Stored suggestion image %s", key)
        return url
