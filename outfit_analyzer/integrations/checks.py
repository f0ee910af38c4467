"""Connectivity checks for the model providers the pipeline depends on."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol

from outfit_analyzer.config.settings import Settings, get_settings
from outfit_analyzer.imggen.generator_client import ImageGeneratorClient
from outfit_analyzer.vision.classifier import OpenAIVisionClassifier


class _PingableClient(Protocol):
    async def ping(self) -> bool:
        ...

    async def close(self) -> None:
        ...


@dataclass(slots=True)
class IntegrationCheckResult:
    """Outcome of pinging one provider."""

    name: str
    success: bool
    message: str


async def _ping_provider(
    name: str,
    model: str,
    factory: Callable[[], _PingableClient],
) -> IntegrationCheckResult:
    try:
        client = factory()
        try:
            reachable = await client.ping()
        finally:
            await client.close()
    except Exception as exc:
        return IntegrationCheckResult(name=name, success=False, message=str(exc))

    if reachable:
        return IntegrationCheckResult(name=name, success=True, message=f"{model} is reachable.")
    return IntegrationCheckResult(
        name=name,
        success=False,
        message="Service responded with non-success status.",
    )


async def check_vision_model(settings: Settings | None = None) -> IntegrationCheckResult:
    """Ping the provider serving the outfit classifier."""

    settings = settings or get_settings()
    return await _ping_provider(
        "Vision model",
        settings.vision_model,
        lambda: OpenAIVisionClassifier(settings),
    )


async def check_image_model(settings: Settings | None = None) -> IntegrationCheckResult:
    """Ping the provider serving suggestion images."""

    settings = settings or get_settings()
    return await _ping_provider(
        "Image model",
        settings.image_model,
        lambda: ImageGeneratorClient(settings),
    )


async def run_all_checks(settings: Settings | None = None) -> list[IntegrationCheckResult]:
    """Ping every provider the configured variant uses, concurrently."""

    settings = settings or get_settings()
    checks: list[Awaitable[IntegrationCheckResult]] = [check_vision_model(settings)]
    if settings.suggestions_enabled:
        checks.append(check_image_model(settings))
    return list(await asyncio.gather(*checks))
