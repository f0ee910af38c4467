"""Shared fixtures for the API tests."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from outfit_analyzer.api.dependencies import get_analysis_service
from outfit_analyzer.api.main import create_app
from outfit_analyzer.config.settings import get_settings
from outfit_analyzer.services.analysis import OutfitAnalysisService


@pytest.fixture(autouse=True)
def _setup_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    monkeypatch.setenv("OPENAI_API_KEY", "test-openai")
    monkeypatch.setenv("OPENAI_BASE_URL", "https://llm.test/v1")
    monkeypatch.setenv("STORAGE_BACKEND", "local")
    monkeypatch.setenv("MEDIA_ROOT", str(tmp_path / "media"))
    monkeypatch.setenv("PUBLIC_BASE_URL", "http://testserver")
    monkeypatch.setenv("STORAGE_SIGNING_SECRET", "test-secret")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def app() -> FastAPI:
    return create_app()


@pytest.fixture
def install_service(app: FastAPI):
    """Route requests to an ``OutfitAnalysisService`` built from fakes."""

    def _install(service: OutfitAnalysisService) -> OutfitAnalysisService:
        async def _override():
            yield service

        app.dependency_overrides[get_analysis_service] = _override
        return service

    yield _install
    app.dependency_overrides.clear()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
