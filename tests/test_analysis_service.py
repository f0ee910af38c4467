"""Unit tests for the analysis pipeline orchestration."""

from __future__ import annotations

import pytest

from outfit_analyzer.errors import SchemaValidationError
from outfit_analyzer.services.analysis import OutfitAnalysisService
from outfit_analyzer.services.categories import OutfitCategory
from outfit_analyzer.services.schemas import OutfitAnalysis, SuggestionImage, UploadedImage
from tests.fakes import FakeClassifier, FakeStorage, FakeSynthesizer

IMAGE = UploadedImage(data=b"jpeg", content_type="image/jpeg", filename="look.jpg")
SUGGESTION = SuggestionImage(data=b"png", media_type="image/png")


@pytest.mark.asyncio
async def test_without_synthesizer_url_is_absent() -> None:
    service = OutfitAnalysisService(FakeClassifier())

    response = await service.analyze(IMAGE)

    assert not service.suggestions_enabled
    assert response.suggestion_image_url is None
    assert "suggestionImageUrl" not in response.model_dump(by_alias=True, exclude_none=True)


@pytest.mark.asyncio
async def test_suggestion_uses_classified_category_and_clock() -> None:
    analysis = OutfitAnalysis(category=OutfitCategory.CASUAL, explanation="Jeans.", confidence="Low")
    synthesizer = FakeSynthesizer(image=SUGGESTION)
    storage = FakeStorage()
    service = OutfitAnalysisService(
        FakeClassifier(analysis=analysis),
        synthesizer,
        storage,
        clock=lambda: 123,
    )

    response = await service.analyze(IMAGE)

    assert synthesizer.calls == [OutfitCategory.CASUAL]
    assert list(storage.objects) == ["outfit-suggestions/123-casual.png"]
    assert response.suggestion_image_url == "https://cdn.example.test/outfit-suggestions/123-casual.png?token=abc"
    assert response.model_dump(by_alias=True)["suggestionImageUrl"] == response.suggestion_image_url


@pytest.mark.asyncio
async def test_same_millisecond_requests_share_a_key() -> None:
    storage = FakeStorage()
    service = OutfitAnalysisService(
        FakeClassifier(),
        FakeSynthesizer(image=SUGGESTION),
        storage,
        clock=lambda: 7,
    )

    await service.analyze(IMAGE)
    await service.analyze(IMAGE)

    assert list(storage.objects) == ["outfit-suggestions/7-sport.png"]


@pytest.mark.asyncio
async def test_classifier_errors_propagate() -> None:
    synthesizer = FakeSynthesizer(image=SUGGESTION)
    service = OutfitAnalysisService(
        FakeClassifier(error=SchemaValidationError("bad enum")),
        synthesizer,
        FakeStorage(),
    )

    with pytest.raises(SchemaValidationError):
        await service.analyze(IMAGE)
    assert synthesizer.calls == []


@pytest.mark.asyncio
async def test_synthesizer_failure_keeps_classification() -> None:
    service = OutfitAnalysisService(
        FakeClassifier(),
        FakeSynthesizer(error=RuntimeError("image model down")),
        FakeStorage(),
    )

    response = await service.analyze(IMAGE)

    assert response.category is OutfitCategory.SPORT
    assert response.suggestion_image_url == ""


def test_synthesizer_requires_storage() -> None:
    with pytest.raises(ValueError):
        OutfitAnalysisService(FakeClassifier(), FakeSynthesizer(image=SUGGESTION), None)
