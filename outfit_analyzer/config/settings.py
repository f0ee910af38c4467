"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


def _load_env_file(path: str = ".env") -> None:
    """Populate os.environ from the provided .env file if it exists."""

    env_path = Path(path)
    if not env_path.exists():
        return

    for line in env_path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())


def _as_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True, slots=True)
class Settings:
    """Centralised service settings based on OS environment variables."""

    environment: str = "dev"
    log_level: str = "INFO"

    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    vision_model: str = "gpt-5.2"
    image_model: str = "gemini-2.5-flash-image"
    request_timeout: float = 60.0

    suggestions_enabled: bool = True

    storage_backend: str = "local"
    media_root: str = "data/media"
    public_base_url: str = "http://localhost:8000"
    storage_signing_secret: str = ""
    signed_url_ttl: int = 3600
    s3_bucket: str = ""
    aws_region: str = "us-east-1"


def _build_settings() -> Settings:
    _load_env_file()

    return Settings(
        environment=os.getenv("ENVIRONMENT", "dev"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        openai_api_key=os.getenv("OPENAI_API_KEY", ""),
        openai_base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1"),
        vision_model=os.getenv("VISION_MODEL", "gpt-5.2"),
        image_model=os.getenv("IMAGE_MODEL", "gemini-2.5-flash-image"),
        request_timeout=float(os.getenv("REQUEST_TIMEOUT", "60")),
        suggestions_enabled=_as_bool(os.getenv("SUGGESTIONS_ENABLED", "true")),
        storage_backend=os.getenv("STORAGE_BACKEND", "local").lower(),
        media_root=os.getenv("MEDIA_ROOT", "data/media"),
        public_base_url=os.getenv("PUBLIC_BASE_URL", "http://localhost:8000"),
        storage_signing_secret=os.getenv("STORAGE_SIGNING_SECRET", ""),
        signed_url_ttl=int(os.getenv("SIGNED_URL_TTL", "3600")),
        s3_bucket=os.getenv("S3_BUCKET", ""),
        aws_region=os.getenv("AWS_REGION", "us-east-1"),
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance to avoid re-reading configuration."""

    return _build_settings()
