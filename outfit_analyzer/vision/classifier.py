"""Outfit classification through an OpenAI-compatible vision model."""

from __future__ import annotations

import base64
import json
import logging
from typing import Any

from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError

from outfit_analyzer.config.settings import Settings, get_settings
from outfit_analyzer.errors import ConfigurationError, ModelCallError, SchemaValidationError
from outfit_analyzer.services.categories import OutfitCategory
from outfit_analyzer.services.schemas import OutfitAnalysis, UploadedImage

logger = logging.getLogger(__name__)

CLASSIFICATION_PROMPT = """Analyze this outfit photo and categorize it into one of these categories: Sport, Casual, Professional, or Chill.

Provide:
1. category: One of "Sport", "Casual", "Professional", or "Chill"
2. explanation: A 2-3 sentence explanation focusing on style, formality, and use case
3. confidence: Your confidence level in this categorization (e.g., "High", "Medium", "Low")

Consider the following:
- Sport: Athletic wear, gym clothes, sports equipment visible
- Casual: Comfortable everyday wear, jeans, t-shirts, sneakers
- Professional: Business attire, formal wear, work-appropriate
- Chill: Relaxed, comfortable home wear, loungewear, laid-back style"""

OUTFIT_ANALYSIS_SCHEMA: dict[str, Any] = {
    "name": "OutfitAnalysis",
    "description": "Outfit analysis with category, explanation, and confidence level",
    "strict": True,
    "schema": {
        "type": "object",
        "properties": {
            "category": {
                "type": "string",
                "enum": [category.value for category in OutfitCategory],
            },
            "explanation": {"type": "string"},
            "confidence": {"type": "string"},
        },
        "required": ["category", "explanation", "confidence"],
        "additionalProperties": False,
    },
}


def build_messages(image: UploadedImage) -> list[dict[str, Any]]:
    """Return the single user message carrying the photo and the instruction."""

    encoded = base64.b64encode(image.data).decode("ascii")
    return [
        {
            "role": "user",
            "content": [
                {
                    "type": "image_url",
                    "image_url": {"url": f"data:{image.content_type};base64,{encoded}"},
                },
                {"type": "text", "text": CLASSIFICATION_PROMPT},
            ],
        },
    ]


def parse_analysis(content: str | None) -> OutfitAnalysis:
    """Validate raw model output against the outfit analysis schema."""

    if not content:
        raise SchemaValidationError("Vision model returned an empty response.")
    try:
        payload = json.loads(content)
    except json.JSONDecodeError as exc:
        raise SchemaValidationError(f"Vision model returned non-JSON content: {content!r}") from exc
    try:
        return OutfitAnalysis.model_validate(payload)
    except ValidationError as exc:
        raise SchemaValidationError(f"Vision model output does not match schema: {payload!r}") from exc


class OpenAIVisionClassifier:
    """Classifies outfit photos with a structured-output chat completion."""

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        if not settings.openai_api_key:
            raise ConfigurationError("OPENAI_API_KEY is not configured.")

        self._settings = settings
        self._client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url.rstrip("/"),
            timeout=settings.request_timeout,
        )

    async def classify(self, image: UploadedImage) -> OutfitAnalysis:
        """Send the photo to the vision model and return the validated analysis."""

        try:
            response = await self._client.chat.completions.create(
                model=self._settings.vision_model,
                messages=build_messages(image),
                response_format={"type": "json_schema", "json_schema": OUTFIT_ANALYSIS_SCHEMA},
            )
        except OpenAIError as exc:
            raise ModelCallError(f"Vision model call failed: {exc}") from exc

        if not response.choices:
            raise SchemaValidationError("Vision model returned no choices.")
        analysis = parse_analysis(response.choices[0].message.content)
        logger.info("Outfit classified as %s (%s)", analysis.category.value, analysis.confidence)
        return analysis

    async def ping(self) -> bool:
        """Return ``True`` if the upstream service responds to a model listing call."""

        models = await self._client.models.list()
        return bool(models.data)

    async def close(self) -> None:
        """Release HTTP resources."""

        await self._client.close()
