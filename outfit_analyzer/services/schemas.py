"""Pydantic and dataclass models shared by the pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from outfit_analyzer.services.categories import OutfitCategory


@dataclass(frozen=True, slots=True)
class UploadedImage:
    """Raw upload held in memory for the duration of one request."""

    data: bytes
    content_type: str
    filename: str


@dataclass(frozen=True, slots=True)
class SuggestionImage:
    """Generated suggestion asset awaiting upload."""

    data: bytes
    media_type: str


class OutfitAnalysis(BaseModel):
    """Structured classification returned by the vision model."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    category: OutfitCategory
    explanation: str
    confidence: str


class AnalysisResponse(BaseModel):
    """Body returned by ``POST /api/analyze-outfit``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    category: OutfitCategory
    explanation: str
    confidence: str
    suggestion_image_url: str | None = Field(
        default=None,
        alias="suggestionImageUrl",
        description="Signed URL of the suggested outfit; empty when none was produced.",
    )


class ErrorResponse(BaseModel):
    """Uniform error body."""

    error: str
