"""Deterministic stand-ins for the model and storage providers."""

from __future__ import annotations

from outfit_analyzer.services.categories import OutfitCategory
from outfit_analyzer.services.schemas import OutfitAnalysis, SuggestionImage, UploadedImage

FIXED_TIMESTAMP_MS = 1_700_000_000_000


class FakeClassifier:
    def __init__(
        self,
        analysis: OutfitAnalysis | None = None,
        error: Exception | None = None,
    ) -> None:
        self.analysis = analysis or OutfitAnalysis(
            category=OutfitCategory.SPORT,
            explanation="Leggings, a tank top and trainers. Built for the gym.",
            confidence="High",
        )
        self.error = error
        self.calls: list[UploadedImage] = []

    async def classify(self, image: UploadedImage) -> OutfitAnalysis:
        self.calls.append(image)
        if self.error is not None:
            raise self.error
        return self.analysis


class FakeSynthesizer:
    def __init__(
        self,
        image: SuggestionImage | None = None,
        error: Exception | None = None,
    ) -> None:
        self.image = image
        self.error = error
        self.calls: list[OutfitCategory] = []

    async def synthesize(self, category: OutfitCategory) -> SuggestionImage | None:
        self.calls.append(category)
        if self.error is not None:
            raise self.error
        return self.image


class FakeStorage:
    def __init__(
        self,
        upload_error: Exception | None = None,
        sign_error: Exception | None = None,
    ) -> None:
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.upload_error = upload_error
        self.sign_error = sign_error

    async def upload(self, key: str, data: bytes, content_type: str) -> None:
        if self.upload_error is not None:
            raise self.upload_error
        self.objects[key] = (data, content_type)

    async def signed_url(self, key: str) -> str:
        if self.sign_error is not None:
            raise self.sign_error
        return f"https://cdn.example.test/{key}?token=abc"


