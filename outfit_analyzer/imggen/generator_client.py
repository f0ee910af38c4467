"""Async client for suggestion image generation via the chat completions API."""

from __future__ import annotations

import base64
import binascii
import logging
from io import BytesIO
from typing import Any, Iterator, Mapping

import httpx
from PIL import Image, UnidentifiedImageError

from outfit_analyzer.config.settings import Settings, get_settings
from outfit_analyzer.errors import ConfigurationError, ModelCallError
from outfit_analyzer.imggen.prompt_builder import SuggestionPromptBuilder
from outfit_analyzer.services.categories import OutfitCategory
from outfit_analyzer.services.schemas import SuggestionImage

logger = logging.getLogger(__name__)


def sniff_media_type(data: bytes) -> str:
    """Return the MIME type Pillow detects for ``data`` or a binary fallback."""

    try:
        with Image.open(BytesIO(data)) as img:
            return Image.MIME.get(img.format or "", "application/octet-stream")
    except (UnidentifiedImageError, OSError):
        return "application/octet-stream"


def decode_data_url(url: str) -> SuggestionImage | None:
    """Turn a ``data:<type>;base64,<payload>`` URL into a suggestion asset."""

    if not url.startswith("data:") or "," not in url:
        return None
    header, encoded = url.split(",", 1)
    try:
        data = base64.b64decode(encoded, validate=True)
    except (ValueError, binascii.Error):
        logger.warning("Skipping generated asset with undecodable payload.")
        return None
    media_type = header[len("data:"):].split(";", 1)[0].strip().lower()
    return SuggestionImage(data=data, media_type=media_type or sniff_media_type(data))


def iter_generated_assets(payload: Mapping[str, Any]) -> Iterator[SuggestionImage]:
    """Yield every decodable asset from a chat completions response body."""

    for choice in payload.get("choices") or []:
        message = choice.get("message") or {}
        urls: list[str] = []
        for entry in message.get("images") or []:
            if isinstance(entry, Mapping) and isinstance(entry.get("image_url"), Mapping):
                urls.append(entry["image_url"].get("url") or "")
        content = message.get("content")
        if isinstance(content, str):
            urls.append(content)
        elif isinstance(content, list):
            for part in content:
                if (
                    isinstance(part, Mapping)
                    and part.get("type") == "image_url"
                    and isinstance(part.get("image_url"), Mapping)
                ):
                    urls.append(part["image_url"].get("url") or "")
        for url in urls:
            asset = decode_data_url(url)
            if asset is not None:
                yield asset


def first_image(payload: Mapping[str, Any]) -> SuggestionImage | None:
    """Return the first asset whose media type is an image, if any."""

    for asset in iter_generated_assets(payload):
        if asset.media_type.startswith("image/"):
            return asset
    return None


class ImageGeneratorClient:
    """Generates a suggested outfit illustration for a category."""

    def __init__(
        self,
        settings: Settings | None = None,
        prompt_builder: SuggestionPromptBuilder | None = None,
    ) -> None:
        settings = settings or get_settings()
        if not settings.openai_api_key:
            raise ConfigurationError("OPENAI_API_KEY is not configured.")

        self._settings = settings
        self._prompt_builder = prompt_builder or SuggestionPromptBuilder()
        self._client = httpx.AsyncClient(
            base_url=settings.openai_base_url.rstrip("/"),
            timeout=settings.request_timeout,
            headers={"Authorization": f"Bearer {settings.openai_api_key}"},
        )

    async def _request_json(self, method: str, endpoint: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._client.request(method, endpoint, **kwargs)
            response.raise_for_status()
            if not response.content:
                return {}
            return response.json()
        except httpx.TimeoutException as exc:
            raise ModelCallError("Timed out waiting for the image model.") from exc
        except httpx.HTTPStatusError as exc:
            raise ModelCallError(
                f"Image model returned {exc.response.status_code}: {exc.response.text}",
            ) from exc
        except httpx.HTTPError as exc:
            raise ModelCallError(f"Image model request failed: {exc}") from exc

    async def synthesize(self, category: OutfitCategory) -> SuggestionImage | None:
        """Return the first generated image for ``category`` or ``None``."""

        prompt = self._prompt_builder.build(category)
        payload = await self._request_json(
            "POST",
            "/chat/completions",
            json={
                "model": self._settings.image_model,
                "messages": [{"role": "user", "content": prompt}],
                "modalities": ["image", "text"],
            },
        )
        image = first_image(payload)
        if image is None:
            logger.warning("Image model returned no image asset for %s.", category.value)
        return image

    async def ping(self) -> bool:
        """Return ``True`` when the service responds to a model listing call."""

        payload = await self._request_json("GET", "/models")
        return bool(payload.get("data"))

    async def close(self) -> None:
        """Close the underlying HTTP session."""

        await self._client.aclose()
